"""Navigation tree structure.

Represents the book table of contents as an arena of entries with explicit
parent/children indices. Document order is the pre-order traversal of the
root entries, which matches the order links appear in the rendered sidebar.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import NotRequired, TypedDict

from booknav.core.types import Href


class EntryKind(StrEnum):
    """Kind of sidebar list item."""

    CHAPTER = "chapter"
    PART_TITLE = "part-title"
    SPACER = "spacer"


class NavEntryDict(TypedDict):
    """Dictionary representation of a navigation entry."""

    label: str
    kind: str
    href: NotRequired[str]
    expanded: NotRequired[bool]
    toggle: NotRequired[bool]
    affix: NotRequired[bool]
    children: NotRequired[list["NavEntryDict"]]


@dataclass(frozen=True)
class NavEntry:
    """Single item of the table of contents.

    Section headers, part titles and spacers have no href.
    """

    label: str
    href: Href | None = None
    kind: EntryKind = EntryKind.CHAPTER
    expanded: bool = False
    toggle: bool = False
    affix: bool = False

    @property
    def is_link(self) -> bool:
        """Whether the entry renders as an anchor with an href."""
        return self.href is not None


class NavigationTree:
    """Table of contents with efficient parent and document-order lookups.

    Stores entries in a flat list in document order with parent/children
    relationships tracked by indices. Ancestor walks are O(d) where d is the
    entry depth.
    """

    __slots__ = ("_children", "_entries", "_parents", "_roots")

    def __init__(
        self,
        entries: list[NavEntry],
        children: list[list[int]],
        parents: list[int | None],
        roots: list[int],
    ) -> None:
        """Initialize tree structure.

        Args:
            entries: Flat list of all entries in document order
            children: Children indices for each entry
            parents: Parent index for each entry (None for top level)
            roots: Indices of top-level entries
        """
        self._entries = entries
        self._children = children
        self._parents = parents
        self._roots = roots

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NavigationTree):
            return NotImplemented
        return (
            self._entries == other._entries
            and self._children == other._children
            and self._parents == other._parents
            and self._roots == other._roots
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"NavigationTree(entries={len(self._entries)}, roots={len(self._roots)})"

    @property
    def roots(self) -> list[int]:
        """Indices of top-level entries."""
        return list(self._roots)

    def get_entry(self, idx: int) -> NavEntry:
        """Get entry by index.

        Raises:
            IndexError: If idx is out of range
        """
        if idx < 0:
            raise IndexError(f"Entry index out of range: {idx}")
        return self._entries[idx]

    def get_children(self, idx: int) -> list[int]:
        """Get children indices of an entry."""
        self.get_entry(idx)
        return list(self._children[idx])

    def get_parent(self, idx: int) -> int | None:
        """Get parent index of an entry, None for top-level entries."""
        self.get_entry(idx)
        return self._parents[idx]

    def ancestors(self, idx: int) -> list[int]:
        """Return ancestor indices from the immediate parent up to the top."""
        result: list[int] = []
        current = self.get_parent(idx)
        while current is not None:
            result.append(current)
            current = self._parents[current]
        return result

    def depth(self, idx: int) -> int:
        """Number of ancestors of an entry."""
        return len(self.ancestors(idx))

    def iter_entries(self) -> Iterator[tuple[int, NavEntry]]:
        """Iterate all entries in document order (pre-order from the roots)."""
        stack = list(reversed(self._roots))
        while stack:
            idx = stack.pop()
            yield idx, self._entries[idx]
            stack.extend(reversed(self._children[idx]))

    def iter_links(self) -> Iterator[tuple[int, NavEntry]]:
        """Iterate entries carrying an href in document order."""
        for idx, entry in self.iter_entries():
            if entry.is_link:
                yield idx, entry

    def to_dict(self) -> list[NavEntryDict]:
        """Convert to nested dictionaries for JSON serialization."""
        return [self.entry_to_dict(idx) for idx in self._roots]

    def entry_to_dict(self, idx: int) -> NavEntryDict:
        """Convert an entry and its descendants to nested dictionaries."""
        entry = self.get_entry(idx)
        result: NavEntryDict = {"label": entry.label, "kind": entry.kind.value}
        if entry.href is not None:
            result["href"] = entry.href
        if entry.expanded:
            result["expanded"] = True
        if entry.toggle:
            result["toggle"] = True
        if entry.affix:
            result["affix"] = True
        if self._children[idx]:
            result["children"] = [self.entry_to_dict(child) for child in self._children[idx]]
        return result


class NavigationTreeBuilder:
    """Builder for constructing NavigationTree instances.

    Entries must be added in document order: a parent before its children,
    and each subtree completed before its next sibling.
    """

    def __init__(self) -> None:
        self._entries: list[NavEntry] = []
        self._children: list[list[int]] = []
        self._parents: list[int | None] = []
        self._roots: list[int] = []

    def add_entry(
        self,
        label: str,
        href: str | None = None,
        parent_idx: int | None = None,
        *,
        kind: EntryKind = EntryKind.CHAPTER,
        expanded: bool = False,
        toggle: bool = False,
        affix: bool = False,
    ) -> int:
        """Add an entry to the tree.

        Args:
            label: Display text
            href: Link target as authored, None for headers
            parent_idx: Index of the owning section entry, None for top level
            kind: Kind of list item
            expanded: Authored default expansion state
            toggle: Whether the entry carries a collapse/expand control
            affix: Whether the entry is an unnumbered prefix/suffix chapter

        Returns:
            Index of the added entry

        Raises:
            IndexError: If parent_idx does not refer to an added entry
        """
        if parent_idx is not None and not 0 <= parent_idx < len(self._entries):
            raise IndexError(f"Parent index out of range: {parent_idx}")

        idx = len(self._entries)
        self._entries.append(
            NavEntry(
                label=label,
                href=Href(href) if href is not None else None,
                kind=kind,
                expanded=expanded,
                toggle=toggle,
                affix=affix,
            )
        )
        self._children.append([])
        self._parents.append(parent_idx)

        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)

        return idx

    def build(self) -> NavigationTree:
        """Build the NavigationTree instance."""
        return NavigationTree(
            entries=list(self._entries),
            children=[list(c) for c in self._children],
            parents=list(self._parents),
            roots=list(self._roots),
        )


def tree_from_dict(items: list[NavEntryDict]) -> NavigationTree:
    """Build a tree from the nested dictionary form produced by to_dict()."""
    builder = NavigationTreeBuilder()

    def add(item: NavEntryDict, parent_idx: int | None) -> None:
        idx = builder.add_entry(
            item["label"],
            item.get("href"),
            parent_idx,
            kind=EntryKind(item.get("kind", EntryKind.CHAPTER.value)),
            expanded=item.get("expanded", False),
            toggle=item.get("toggle", False),
            affix=item.get("affix", False),
        )
        for child in item.get("children", []):
            add(child, idx)

    for item in items:
        add(item, None)
    return builder.build()
