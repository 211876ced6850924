"""TOC markup parsing and rendering.

The book generator emits the table of contents as a nested ordered list:

    <ol class="chapter">
      <li class="chapter-item expanded "><a href="intro.html">Intro</a>
          <a class="toggle"><div>❱</div></a></li>
      <li><ol class="section">
        <li class="chapter-item "><a href="intro/setup.html">Setup</a></li>
      </ol></li>
      <li class="part-title">Concepts</li>
      <li class="spacer"></li>
    </ol>

A nested list lives in its own wrapper item and belongs to the preceding
chapter item. The parser turns that sibling convention into explicit parent
indices; rendering produces the same shape back.
"""

import re
from dataclasses import dataclass, field
from html import escape
from html.parser import HTMLParser
from typing import TYPE_CHECKING

from booknav.core.tree import EntryKind, NavigationTree, NavigationTreeBuilder

if TYPE_CHECKING:
    from booknav.core.sidebar import SidebarState

TOGGLE_MARKUP = '<a class="toggle"><div>❱</div></a>'

# Single-quoted string assigned to innerHTML in the generated toc.js script
_INNER_HTML_RE = re.compile(r"innerHTML\s*=\s*'((?:[^'\\]|\\.)*)'", re.DOTALL)
_JS_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|.)", re.DOTALL
)
_JS_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
# Escaped line terminators continue the string literal
_JS_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}


@dataclass
class _PendingItem:
    """List item whose content is still being parsed."""

    kind: EntryKind | None
    classes: set[str]
    href: str | None = None
    label_parts: list[str] = field(default_factory=list)
    toggle: bool = False
    done: bool = False
    idx: int | None = None


@dataclass
class _ListLevel:
    """Open <ol> and the entry owning its items."""

    owner: int | None
    last_entry: int | None = None
    item: _PendingItem | None = None


class _TocParser(HTMLParser):
    """Streaming parser building a NavigationTree from TOC markup."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.builder = NavigationTreeBuilder()
        self._levels: list[_ListLevel] = []
        self._in_toggle = False
        self._hidden_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attributes = dict(attrs)
        classes = set((attributes.get("class") or "").split())

        if tag == "ol":
            self._open_list()
        elif tag == "li":
            if not self._levels:
                return
            level = self._levels[-1]
            self._finish_item(level)
            level.item = _PendingItem(kind=_item_kind(classes), classes=classes)
        elif tag == "a":
            item = self._current_item()
            if item is None:
                return
            if "toggle" in classes:
                item.toggle = True
                self._in_toggle = True
            elif item.href is None:
                item.href = attributes.get("href")
        elif tag == "strong" and attributes.get("aria-hidden") == "true":
            # Section numbers are decorative
            self._hidden_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag == "ol":
            if self._levels:
                self._finish_item(self._levels[-1])
                self._levels.pop()
        elif tag == "li":
            if self._levels:
                self._finish_item(self._levels[-1])
        elif tag == "a":
            self._in_toggle = False
        elif tag == "strong" and self._hidden_depth:
            self._hidden_depth -= 1

    def handle_data(self, data: str) -> None:
        if self._in_toggle or self._hidden_depth:
            return
        item = self._current_item()
        if item is not None:
            item.label_parts.append(data)

    def finish(self) -> NavigationTree:
        """Flush open lists and return the built tree."""
        self.close()
        while self._levels:
            self._finish_item(self._levels.pop())
        return self.builder.build()

    def _open_list(self) -> None:
        if not self._levels:
            self._levels.append(_ListLevel(owner=None))
            return
        level = self._levels[-1]
        item = level.item
        if item is not None and item.kind is not None:
            # List nested directly inside a chapter item
            self._add_entry(level, item)
            owner = item.idx if item.idx is not None else level.last_entry
        else:
            owner = level.last_entry
        self._levels.append(_ListLevel(owner=owner))

    def _current_item(self) -> _PendingItem | None:
        if not self._levels:
            return None
        return self._levels[-1].item

    def _finish_item(self, level: _ListLevel) -> None:
        item = level.item
        level.item = None
        if item is not None and not item.done and item.kind is not None:
            self._add_entry(level, item)

    def _add_entry(self, level: _ListLevel, item: _PendingItem) -> None:
        if item.done:
            return
        item.done = True
        label = " ".join("".join(item.label_parts).split())
        if item.kind is EntryKind.CHAPTER and not label and item.href is None:
            # Empty affix placeholder items carry nothing to navigate to
            return
        item.idx = self.builder.add_entry(
            label,
            item.href,
            level.owner,
            kind=item.kind or EntryKind.CHAPTER,
            expanded="expanded" in item.classes,
            toggle=item.toggle,
            affix="affix" in item.classes,
        )
        level.last_entry = item.idx


def _item_kind(classes: set[str]) -> EntryKind | None:
    if "chapter-item" in classes:
        return EntryKind.CHAPTER
    if "part-title" in classes:
        return EntryKind.PART_TITLE
    if "spacer" in classes:
        return EntryKind.SPACER
    return None


def parse_toc_markup(markup: str) -> NavigationTree:
    """Parse generator TOC markup into a navigation tree.

    Implicitly closed and unbalanced tags are tolerated. Items outside any
    <ol> are ignored.

    Args:
        markup: HTML fragment containing the <ol class="chapter"> list

    Returns:
        NavigationTree in document order
    """
    parser = _TocParser()
    parser.feed(markup)
    return parser.finish()


def extract_toc_markup(script: str) -> str:
    """Extract the TOC markup from a generated toc.js script.

    JavaScript string escapes in the literal are decoded.

    Raises:
        ValueError: If the script has no innerHTML string assignment
    """
    match = _INNER_HTML_RE.search(script)
    if match is None:
        raise ValueError("No innerHTML assignment found in TOC script")
    decoded = _JS_ESCAPE_RE.sub(_decode_js_escape, match.group(1))
    # Join UTF-16 surrogate pairs written as two \u escapes
    return decoded.encode("utf-16", "surrogatepass").decode("utf-16")


def _decode_js_escape(match: re.Match[str]) -> str:
    sequence = match.group(1)
    if sequence.startswith("u{"):
        return chr(int(sequence[2:-1], 16))
    if len(sequence) > 1 and sequence[0] in "ux":
        return chr(int(sequence[1:], 16))
    if sequence in _JS_LINE_CONTINUATIONS:
        return ""
    return _JS_SIMPLE_ESCAPES.get(sequence, sequence)


def render_tree(tree: NavigationTree, state: "SidebarState | None" = None) -> str:
    """Render a tree as sidebar markup.

    Without state, authored hrefs and expansion are used and nothing is
    active.

    Args:
        tree: Table of contents
        state: Sidebar state providing rewritten hrefs, expansion and the
               active entry

    Returns:
        <ol class="chapter"> markup
    """
    parts = ['<ol class="chapter">']
    for idx in tree.roots:
        _render_entry(tree, idx, state, parts)
    parts.append("</ol>")
    return "".join(parts)


def _render_entry(
    tree: NavigationTree,
    idx: int,
    state: "SidebarState | None",
    parts: list[str],
) -> None:
    entry = tree.get_entry(idx)
    label = escape(entry.label, quote=False)

    if entry.kind is EntryKind.SPACER:
        parts.append('<li class="spacer"></li>')
    elif entry.kind is EntryKind.PART_TITLE:
        parts.append(f'<li class="part-title">{label}</li>')
    else:
        expanded = idx in state.expanded if state is not None else entry.expanded
        classes = ["chapter-item"]
        if expanded:
            classes.append("expanded")
        if entry.affix:
            classes.append("affix")
        parts.append(f'<li class="{" ".join(classes)}">')

        if entry.href is not None:
            href = state.hrefs.get(idx, entry.href) if state is not None else entry.href
            active = ' class="active"' if state is not None and state.active == idx else ""
            parts.append(f'<a href="{escape(href)}"{active}>{label}</a>')
        else:
            parts.append(f"<div>{label}</div>")

        if entry.toggle:
            parts.append(TOGGLE_MARKUP)
        parts.append("</li>")

    children = tree.get_children(idx)
    if children:
        parts.append('<li><ol class="section">')
        for child in children:
            _render_entry(tree, child, state, parts)
        parts.append("</ol></li>")
