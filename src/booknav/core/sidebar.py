"""Sidebar controller.

Models one page load of the book sidebar: links are rewritten for the page
depth, the entry for the current page is highlighted and revealed, and the
scroll position is carried over from the previous page through
session-scoped storage.
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypedDict

from booknav.core.location import (
    DEFAULT_DOCUMENT,
    normalize_page_url,
    resolve_href,
    rewrite_href,
)
from booknav.core.markup import render_tree
from booknav.core.storage import SessionStorage
from booknav.core.tree import NavigationTree
from booknav.core.types import Href, PageURL

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "sidebar-scroll"


class IndexAlias(StrEnum):
    """Policy for the book landing page.

    FIRST_ENTRY treats "<root>/index.html" as the first link in the tree when
    the page sits at root depth. NONE only matches hrefs literally.
    """

    FIRST_ENTRY = "first-entry"
    NONE = "none"


@dataclass(frozen=True)
class SidebarOptions:
    """Sidebar behavior and layout settings."""

    storage_key: str = DEFAULT_STORAGE_KEY
    default_document: str = DEFAULT_DOCUMENT
    index_alias: IndexAlias = IndexAlias.FIRST_ENTRY
    row_height: int = 24
    viewport_height: int = 600


class SidebarStateDict(TypedDict):
    """Dictionary representation of sidebar state."""

    active: int | None
    expanded: list[int]
    hrefs: dict[str, str]
    scroll_top: int
    scroll_restored: bool


@dataclass
class SidebarState:
    """Sidebar state after a page load."""

    hrefs: dict[int, Href]
    active: int | None = None
    expanded: set[int] = field(default_factory=set)
    scroll_top: int = 0
    scroll_restored: bool = False

    def to_dict(self) -> SidebarStateDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "active": self.active,
            "expanded": sorted(self.expanded),
            "hrefs": {str(idx): href for idx, href in sorted(self.hrefs.items())},
            "scroll_top": self.scroll_top,
            "scroll_restored": self.scroll_restored,
        }


class SidebarController:
    """Controller for a single page's sidebar.

    All ambient inputs are explicit: the tree, the browser address, the
    page's path-to-root prefix and the session storage. Call connect() once
    when the sidebar is attached to the page.
    """

    def __init__(
        self,
        tree: NavigationTree,
        current_url: str,
        root_prefix: str,
        storage: SessionStorage,
        options: SidebarOptions | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            tree: Table of contents
            current_url: Browser address of the displayed page
            root_prefix: Relative path from the page to the book root
            storage: Session-scoped storage for the scroll offset
            options: Behavior and layout settings
        """
        self._tree = tree
        self._current_url = current_url
        self._root_prefix = root_prefix
        self._storage = storage
        self._options = options or SidebarOptions()
        self._page_url = normalize_page_url(current_url, self._options.default_document)
        self._state: SidebarState | None = None

    @property
    def tree(self) -> NavigationTree:
        """Table of contents."""
        return self._tree

    @property
    def page_url(self) -> PageURL:
        """Normalized current page URL used to match entries."""
        return self._page_url

    @property
    def options(self) -> SidebarOptions:
        """Behavior and layout settings."""
        return self._options

    @property
    def state(self) -> SidebarState:
        """Current sidebar state.

        Raises:
            RuntimeError: If connect() has not been called
        """
        if self._state is None:
            raise RuntimeError("Sidebar is not connected")
        return self._state

    @property
    def scroll_top(self) -> int:
        return self.state.scroll_top

    def connect(self) -> SidebarState:
        """Attach the sidebar to the page.

        Rewrites links, marks the active entry and reveals it, then restores
        the stored scroll offset or centers the active entry. The stored
        offset is consumed even if it is unusable. Calling connect() again
        returns the existing state without touching storage.
        """
        if self._state is not None:
            return self._state

        state = SidebarState(
            hrefs=self._rewrite_links(),
            expanded={idx for idx, entry in self._tree.iter_entries() if entry.expanded},
        )
        self._state = state

        state.active = self._find_active(state.hrefs)
        if state.active is not None:
            self._reveal(state, state.active)

        stored = self._consume_scroll()
        if stored is not None:
            state.scroll_top = stored
            state.scroll_restored = True
            logger.debug(f"Restored sidebar scroll offset {stored}")
        elif state.active is not None:
            state.scroll_top = self.center_offset(state.active)
            logger.debug(f"Centered sidebar on entry {state.active} at {state.scroll_top}")

        return state

    def render(self) -> str:
        """Render the sidebar markup for the current state."""
        return render_tree(self._tree, self.state)

    def click(self, idx: int) -> PageURL | None:
        """Handle activation of an entry inside the sidebar.

        Link clicks persist the current scroll offset so the next page can
        restore it.

        Args:
            idx: Entry index

        Returns:
            Resolved navigation target, None for entries without a link
        """
        entry = self._tree.get_entry(idx)
        state = self.state
        if not entry.is_link:
            return None
        self._storage.set_item(self._options.storage_key, str(state.scroll_top))
        return resolve_href(state.hrefs[idx], self._current_url)

    def toggle(self, idx: int) -> bool:
        """Flip the expanded state of the section owning a toggle control.

        Args:
            idx: Entry index carrying the toggle control

        Returns:
            New expanded state

        Raises:
            ValueError: If the entry has no toggle control
        """
        entry = self._tree.get_entry(idx)
        if not entry.toggle:
            raise ValueError(f"Entry {idx} ({entry.label!r}) has no toggle control")
        expanded = self.state.expanded
        if idx in expanded:
            expanded.discard(idx)
            return False
        expanded.add(idx)
        return True

    def scroll_to(self, offset: int) -> int:
        """Set the sidebar scroll offset, clamped at the top."""
        self.state.scroll_top = max(0, offset)
        return self.state.scroll_top

    def is_visible(self, idx: int) -> bool:
        """Whether an entry is revealed, i.e. every ancestor is expanded."""
        expanded = self.state.expanded
        return all(ancestor in expanded for ancestor in self._tree.ancestors(idx))

    def visible_entries(self) -> list[int]:
        """Indices of revealed entries in document order."""
        return [idx for idx, _ in self._tree.iter_entries() if self.is_visible(idx)]

    def center_offset(self, idx: int) -> int:
        """Scroll offset that vertically centers an entry in the viewport.

        The offset is clamped to the scrollable range of the visible rows.
        Hidden entries yield 0.
        """
        rows = self.visible_entries()
        if idx not in rows:
            return 0
        row_height = self._options.row_height
        viewport = self._options.viewport_height
        entry_middle = rows.index(idx) * row_height + row_height // 2
        max_offset = max(0, len(rows) * row_height - viewport)
        return min(max(0, entry_middle - viewport // 2), max_offset)

    def _rewrite_links(self) -> dict[int, Href]:
        return {
            idx: rewrite_href(entry.href, self._root_prefix)
            for idx, entry in self._tree.iter_links()
            if entry.href is not None
        }

    def _find_active(self, hrefs: dict[int, Href]) -> int | None:
        alias_index = (
            self._options.index_alias is IndexAlias.FIRST_ENTRY
            and self._root_prefix == ""
            and self._page_url.endswith("/" + self._options.default_document)
        )
        for position, (idx, _) in enumerate(self._tree.iter_links()):
            resolved = resolve_href(hrefs[idx], self._current_url)
            if resolved == self._page_url or (position == 0 and alias_index):
                logger.debug(f"Active sidebar entry {idx} for {self._page_url}")
                return idx
        return None

    def _reveal(self, state: SidebarState, idx: int) -> None:
        state.expanded.add(idx)
        state.expanded.update(self._tree.ancestors(idx))

    def _consume_scroll(self) -> int | None:
        key = self._options.storage_key
        raw = self._storage.get_item(key)
        self._storage.remove_item(key)
        if raw is None:
            return None
        try:
            return int(float(raw))
        except (ValueError, OverflowError):
            logger.debug(f"Ignoring invalid stored scroll offset {raw!r}")
            return None
