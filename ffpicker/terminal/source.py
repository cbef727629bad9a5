"""Line-based item provider for the terminal front end.

Input lines become tree nodes: a line indented deeper than the previous one
is its child. Without a filter the provider serves the top-level nodes and
expands children on request; with a filter it serves a flat, score-ordered
list of every matching node with match highlights.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..item_model import Item, ItemHighlight, expanded_copy
from .matching import fuzzy_positions, position_spans

TAB_WIDTH = 4
MATCH_HIGHLIGHT_GROUP = "Search"


@dataclass
class LineNode:
    """One parsed input line and its nested children."""

    text: str
    indent: int
    path: tuple[str, ...]
    children: list[LineNode] = field(default_factory=list)


def _indent_width(line: str) -> int:
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += TAB_WIDTH - (width % TAB_WIDTH)
        else:
            break
    return width


def parse_lines(lines: Iterable[str]) -> list[LineNode]:
    """Build a node forest from indented lines; blank lines are skipped."""
    roots: list[LineNode] = []
    stack: list[LineNode] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        text = line.strip()
        if not text:
            continue
        indent = _indent_width(line)
        while stack and stack[-1].indent >= indent:
            stack.pop()
        siblings = stack[-1].children if stack else roots
        parent_path = stack[-1].path if stack else ()
        node = LineNode(text=text, indent=indent, path=parent_path + (str(len(siblings)),))
        siblings.append(node)
        stack.append(node)
    return roots


class LineSource:
    """Serve items for one parsed line forest."""

    def __init__(self, roots: list[LineNode], source_name: str = "lines") -> None:
        self.roots = roots
        self.source_name = source_name
        self._by_path: dict[tuple[str, ...], LineNode] = {}
        for node in self._walk(roots):
            self._by_path[node.path] = node

    @classmethod
    def from_lines(cls, lines: Iterable[str], source_name: str = "lines") -> LineSource:
        return cls(parse_lines(lines), source_name=source_name)

    def __len__(self) -> int:
        return len(self._by_path)

    def _walk(self, nodes: list[LineNode]) -> Iterable[LineNode]:
        for node in nodes:
            yield node
            yield from self._walk(node.children)

    def _item(self, node: LineNode, level: int, highlights: tuple[ItemHighlight, ...] = ()) -> Item:
        return Item(
            word=node.text,
            tree_path=node.path,
            source_name=self.source_name,
            level=level,
            is_tree=bool(node.children) and level >= 0,
            highlights=highlights,
        )

    def gather(self, query: str = "") -> list[Item]:
        """Return top-level items, or the flat filtered list for ``query``."""
        if not query:
            return [self._item(node, 0) for node in self.roots]

        scored: list[tuple[int, int, Item]] = []
        for order, node in enumerate(self._walk(self.roots)):
            match = fuzzy_positions(query, node.text)
            if match is None:
                continue
            score, positions = match
            highlights = tuple(
                ItemHighlight(name="matched", hl_group=MATCH_HIGHLIGHT_GROUP, col=start + 1, width=length)
                for start, length in position_spans(positions)
            )
            scored.append((score, order, self._item(node, 0, highlights)))
        scored.sort(key=lambda entry: (-entry[0], entry[1]))
        return [item for _, _, item in scored]

    def children(self, parent: Item, max_level: int = 0) -> list[Item]:
        """Return the children of ``parent`` in tree order.

        ``max_level`` > 0 expands that many further levels eagerly.
        """
        node = self._by_path.get(parent.tree_path) if isinstance(parent.tree_path, tuple) else None
        if node is None:
            return []
        out: list[Item] = []
        self._collect_children(node, parent.level + 1, max_level, out)
        return out

    def _collect_children(self, node: LineNode, level: int, remaining: int, out: list[Item]) -> None:
        for child in node.children:
            expand = remaining > 0 and bool(child.children)
            item = self._item(child, level)
            if expand:
                item = expanded_copy(item)
            out.append(item)
            if expand:
                self._collect_children(child, level + 1, remaining - 1, out)
