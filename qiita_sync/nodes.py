"""
Markup tree model for the HTML → Markdown converter.

Parses microCMS rich-text HTML into a small tree of element and text
nodes. The tree is built once per document and only read afterwards,
so a single converter can walk many documents.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

ELEMENT = "element"
TEXT = "text"

ROOT_TAG = "#root"

# Elements that start a new block in the rendered Markdown
BLOCK_TAGS = frozenset({
    ROOT_TAG, "html", "body", "address", "article", "aside", "blockquote",
    "dd", "details", "div", "dl", "dt", "fieldset", "figcaption", "figure",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "li", "main", "nav", "ol", "p", "pre", "section", "summary", "table",
    "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_WHITESPACE_RE = re.compile(r"[ \t\r\n\f]+")


@dataclass(eq=False)
class Node:
    """A node of a parsed markup document."""

    kind: str
    tag_name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    text: str = ""
    parent: Optional["Node"] = field(default=None, repr=False)

    @property
    def is_text(self) -> bool:
        return self.kind == TEXT

    def is_element(self, *tag_names: str) -> bool:
        """Check for an element, optionally restricted to the given tag names."""
        if self.kind != ELEMENT:
            return False
        return not tag_names or self.tag_name in tag_names

    @property
    def is_block(self) -> bool:
        return self.kind == ELEMENT and self.tag_name in BLOCK_TAGS

    def get(self, name: str, default: str = "") -> str:
        """Attribute value, or default when missing."""
        value = self.attributes.get(name)
        return value if value is not None else default

    @property
    def class_names(self) -> list[str]:
        return self.get("class").split()

    @property
    def element_children(self) -> list["Node"]:
        return [child for child in self.children if child.kind == ELEMENT]

    @property
    def first_element_child(self) -> Optional["Node"]:
        elements = self.element_children
        return elements[0] if elements else None

    @property
    def last_element_child(self) -> Optional["Node"]:
        elements = self.element_children
        return elements[-1] if elements else None

    @property
    def next_sibling(self) -> Optional["Node"]:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = _index_of(siblings, self)
        return siblings[index + 1] if index + 1 < len(siblings) else None

    @property
    def text_content(self) -> str:
        """Concatenated literal text of this node and its descendants."""
        if self.is_text:
            return self.text
        return "".join(child.text_content for child in self.children)


def _index_of(nodes: list[Node], target: Node) -> int:
    for index, node in enumerate(nodes):
        if node is target:
            return index
    raise ValueError("node is not a child of its parent")


def element(tag_name: str, attributes: Optional[dict[str, str]] = None, children=()) -> Node:
    """Build an element node and link its children to it."""
    node = Node(kind=ELEMENT, tag_name=tag_name.lower(), attributes=dict(attributes or {}))
    for child in children:
        append_child(node, child)
    return node


def text(value: str) -> Node:
    """Build a text node."""
    return Node(kind=TEXT, text=value)


def append_child(parent: Node, child: Node) -> None:
    child.parent = parent
    parent.children.append(child)


def parse_html(markup: str) -> Node:
    """
    Parse an HTML fragment into a Node tree.

    Whitespace outside ``<pre>`` is collapsed the way a browser would
    lay it out: runs become a single space, and whitespace touching a
    block boundary is dropped.

    Args:
        markup: HTML source.

    Returns:
        Root element node (tag ``#root``) holding the fragment.
    """
    soup = BeautifulSoup(markup or "", "html.parser", multi_valued_attributes=None)
    root = element(ROOT_TAG)
    _convert_children(soup, root, preformatted=False)
    _collapse_inline_spaces(root, after_space=True)
    _collapse_block_whitespace(root)
    return root


def _convert_children(tag: Tag, parent: Node, preformatted: bool) -> None:
    for child in tag.children:
        if isinstance(child, (Comment, Declaration, Doctype, ProcessingInstruction)):
            continue

        if isinstance(child, NavigableString):
            value = str(child)
            if not preformatted:
                value = _WHITESPACE_RE.sub(" ", value)
            if value:
                append_child(parent, text(value))
            continue

        if isinstance(child, Tag):
            attributes = {
                name: value if isinstance(value, str) else " ".join(value)
                for name, value in child.attrs.items()
            }
            node = element(child.name, attributes)
            append_child(parent, node)
            _convert_children(child, node, preformatted or node.tag_name == "pre")


def _collapse_inline_spaces(node: Node, after_space: bool) -> bool:
    """
    Drop a space that directly follows another one across inline tags.

    ``is <b> bold</b>`` keeps a single space, as a browser would show it.
    Returns whether the last text seen ended in a space.
    """
    for child in node.children:
        if child.is_text:
            if after_space and child.text.startswith(" "):
                child.text = child.text[1:]
            if child.text:
                after_space = child.text.endswith(" ")
        elif child.is_element("pre"):
            after_space = True
        elif child.is_block or child.is_element("br"):
            _collapse_inline_spaces(child, after_space=True)
            after_space = True
        elif child.is_element("img"):
            after_space = False
        else:
            after_space = _collapse_inline_spaces(child, after_space)
    return after_space


def _collapse_block_whitespace(node: Node) -> None:
    """Drop or trim whitespace that sits against block boundaries."""
    if node.is_element("pre"):
        return

    kept = []
    for index, child in enumerate(node.children):
        if child.is_text:
            previous = node.children[index - 1] if index > 0 else None
            following = node.children[index + 1] if index + 1 < len(node.children) else None

            at_start = previous is None and node.is_block
            at_end = following is None and node.is_block
            after_block = previous is not None and previous.is_block
            before_block = following is not None and following.is_block

            value = child.text
            if at_start or after_block:
                value = value.lstrip(" ")
            if at_end or before_block:
                value = value.rstrip(" ")
            if not value:
                continue
            child.text = value
        else:
            _collapse_block_whitespace(child)
        kept.append(child)

    node.children = kept
