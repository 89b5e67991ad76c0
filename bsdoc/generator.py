import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

TagPath = Tuple[str, ...]


@dataclass
class HTMLNode:
    """An intermediate representation node built from the write log, acting as
    a middle step between (tag-path, text) records and an HTML string."""

    tag: str
    children: List[Union[str, "HTMLNode"]] = field(default_factory=list)
    closed: bool = False

    def last_open_child(self, tag: str) -> Optional["HTMLNode"]:
        """Return the last child if it is an element with the given tag that can still
        receive content."""
        if not self.children:
            return None

        last = self.children[-1]
        if isinstance(last, HTMLNode) and last.tag == tag and not last.closed:
            return last

        return None

    def close_last_child(self) -> None:
        if self.children:
            last = self.children[-1]
            if isinstance(last, HTMLNode):
                last.closed = True

    def is_empty(self) -> bool:
        return all(
            isinstance(child, HTMLNode) and child.is_empty() for child in self.children
        )

    def is_inline(self) -> bool:
        """An element renders on a single line if it wraps exactly one leaf, possibly
        through a chain of single-child elements."""
        content = [
            child
            for child in self.children
            if not (isinstance(child, HTMLNode) and child.is_empty())
        ]
        if len(content) != 1:
            return False

        child = content[0]
        return isinstance(child, str) or child.is_inline()

    def to_inline(self) -> str:
        inner = "".join(
            child if isinstance(child, str) else child.to_inline()
            for child in self.children
            if isinstance(child, str) or not child.is_empty()
        )
        return f"<{self.tag}>{inner}</{self.tag}>"


class HTMLNodeHandler:
    def __init__(self) -> None:
        self.output = io.StringIO()

    def write_line(self, depth: int, text: str) -> None:
        self.output.write("\t" * depth)
        self.output.write(text)
        self.output.write("\n")

    def handle_child(self, child: Union[str, HTMLNode], depth: int) -> None:
        if isinstance(child, str):
            self.write_line(depth, child)
        else:
            self.handle_node(child, depth)

    def handle_node(self, node: HTMLNode, depth: int) -> None:
        if node.is_empty():
            return

        if node.is_inline():
            self.write_line(depth, node.to_inline())
            return

        self.write_line(depth, f"<{node.tag}>")
        for child in node.children:
            self.handle_child(child, depth + 1)
        self.write_line(depth, f"</{node.tag}>")


class Generator:
    """Collects (tag-path, text) records and serializes them into nested,
    tab-indented HTML.

    Consecutive records sharing a tag-path are merged into one element, and
    records whose tag-paths share a prefix are nested inside the shared
    elements. A record with a text of None is a divider: it closes the
    current child of the element at that path, or the element itself if it
    holds text, so that the next record starts a new sibling instead of
    merging with the previous one."""

    def __init__(self) -> None:
        self.entries: List[Tuple[TagPath, Optional[str]]] = []

    def add(self, text: Optional[str], *tags: str) -> None:
        self.add_with_path(tags, text)

    def add_with_path(self, tags: Sequence[str], text: Optional[str]) -> None:
        self.entries.append((tuple(tags), text))

    def build(self) -> HTMLNode:
        """Replay the write log into a tree. The returned root is a pseudo-element
        whose children are the top-level blocks."""
        root = HTMLNode("")
        for tags, text in self.entries:
            node = root
            for tag in tags:
                child = node.last_open_child(tag)
                if child is None:
                    child = HTMLNode(tag)
                    node.children.append(child)
                node = child

            if text is None:
                if node.children and isinstance(node.children[-1], str):
                    node.closed = True
                else:
                    node.close_last_child()
            else:
                node.children.append(text)

        return root

    def generate(self) -> str:
        """Render the accumulated records as an HTML string. Top-level blocks are
        separated by a blank line."""
        root = self.build()
        blocks: List[str] = []
        for child in root.children:
            handler = HTMLNodeHandler()
            handler.handle_child(child, 0)
            block = handler.output.getvalue()
            if block:
                blocks.append(block)

        logger.debug(f"Generated {len(blocks)} blocks from {len(self.entries)} records")
        return "\n".join(blocks)
