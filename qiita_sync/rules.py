"""
Conversion rules for the HTML → Markdown converter.

A rule pairs a predicate over a Node with a render function that turns
the node (plus its already-rendered children) into Markdown. Rules are
collected in a RuleTable per converter instance. When several rules
match a node, the one with the highest priority is used; among equal
priorities the rule registered first wins.
"""

import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, Iterator, Optional

from .nodes import Node

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

PARAGRAPH_TAGS = (
    "p", "div", "section", "article", "aside", "header", "footer", "main",
    "nav", "figure", "figcaption", "address", "details", "summary",
    "dl", "dt", "dd", "fieldset", "form",
)

DISCARDED_TAGS = ("script", "style", "noscript", "template", "head", "title")

_LANGUAGE_PREFIX = "language-"

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_NEWLINES_RE = re.compile(r"\n+")


@dataclass(frozen=True)
class Rule:
    """A single conversion rule."""

    id: str
    matches: Callable[[Node], bool]
    render: Callable[[Node, str], str]
    priority: int = 0


class RuleTable:
    """
    Ordered, read-only collection of rules.

    Registration order is preserved and used as the tie-break when two
    matching rules share a priority (first registered wins).
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        rules = tuple(rules)
        seen = set()
        for rule in rules:
            if rule.id in seen:
                raise ValueError(f"Duplicate rule id: {rule.id}")
            seen.add(rule.id)
        self._rules = rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def ids(self) -> list[str]:
        return [rule.id for rule in self._rules]

    def select(self, node: Node) -> Optional[Rule]:
        """Return the rule that converts this node, or None for the default."""
        selected = None
        for rule in self._rules:
            if not rule.matches(node):
                continue
            if selected is None or rule.priority > selected.priority:
                selected = rule
        return selected

    def with_rules(self, *rules: Rule) -> "RuleTable":
        """New table with extra rules registered after the existing ones."""
        return RuleTable(self._rules + rules)


@dataclass(frozen=True)
class ConversionOptions:
    """Markdown flavour settings."""

    bullet_marker: str = "-"
    list_indent: str = "    "
    strong_delimiter: str = "**"
    em_delimiter: str = "*"
    strike_delimiter: str = "~~"
    horizontal_rule: str = "---"
    line_break: str = "  \n"
    fence: str = "```"


# =========================================================================
# Predicates
# =========================================================================

def tag_is(*tag_names: str) -> Callable[[Node], bool]:
    """Predicate matching elements with one of the given tag names."""
    return lambda node: node.is_element(*tag_names)


def _sole_code_child(node: Node) -> Optional[Node]:
    """The only <code> inside a <pre>, ignoring whitespace-only text around it."""
    code = None
    for child in node.children:
        if child.is_text:
            if child.text.strip():
                return None
        elif child.is_element("code") and code is None:
            code = child
        else:
            return None
    return code


def is_code_block(node: Node) -> bool:
    """A <pre> whose sole child is a <code> element."""
    return node.is_element("pre") and _sole_code_child(node) is not None


def is_inline_code(node: Node) -> bool:
    parent = node.parent
    return node.is_element("code") and not (parent is not None and parent.is_element("pre"))


def is_ordered_list_item(node: Node) -> bool:
    parent = node.parent
    return node.is_element("li") and parent is not None and parent.is_element("ol")


def is_header_row(node: Node) -> bool:
    """
    Decide whether a <tr> is the table's header row.

    With a <thead>, only its first row counts. Without one, only the very
    first row of the table is treated as header.
    """
    parent = node.parent
    if parent is None:
        return False

    if parent.is_element("thead"):
        return parent.first_element_child is node

    table = parent if parent.is_element("table") else parent.parent
    if table is None or not table.is_element("table"):
        return False

    if any(child.is_element("thead") for child in table.element_children):
        return False

    return _first_row(table) is node


def _first_row(table: Node) -> Optional[Node]:
    for child in table.element_children:
        if child.is_element("tr"):
            return child
        if child.is_element("tbody"):
            for row in child.element_children:
                if row.is_element("tr"):
                    return row
    return None


# =========================================================================
# Renderers
# =========================================================================

def render_heading(node: Node, content: str) -> str:
    level = int(node.tag_name[1])
    return f"\n\n{'#' * level} {content.strip()}\n\n"


def render_paragraph(node: Node, content: str) -> str:
    return f"\n\n{content}\n\n"


def render_line_break(options: ConversionOptions, node: Node, content: str) -> str:
    return options.line_break


def render_horizontal_rule(options: ConversionOptions, node: Node, content: str) -> str:
    return f"\n\n{options.horizontal_rule}\n\n"


def render_blockquote(node: Node, content: str) -> str:
    lines = _EXCESS_NEWLINES_RE.sub("\n\n", content.strip("\n")).split("\n")
    quoted = "\n".join(f"> {line}" if line else ">" for line in lines)
    return f"\n\n{quoted}\n\n"


def render_list(node: Node, content: str) -> str:
    parent = node.parent
    if parent is not None and parent.is_element("li") and parent.last_element_child is node:
        return f"\n{content}"
    return f"\n\n{content}\n\n"


def _render_item(prefix: str, options: ConversionOptions, node: Node, content: str) -> str:
    content = _EXCESS_NEWLINES_RE.sub("\n\n", content.strip("\n"))
    content = content.replace("\n", f"\n{options.list_indent}")
    trailer = "\n" if node.next_sibling is not None and not content.endswith("\n") else ""
    return f"{prefix}{content}{trailer}"


def render_list_item(options: ConversionOptions, node: Node, content: str) -> str:
    return _render_item(f"{options.bullet_marker} ", options, node, content)


def render_ordered_list_item(options: ConversionOptions, node: Node, content: str) -> str:
    parent = node.parent
    try:
        start = int(parent.get("start", "1"))
    except ValueError:
        start = 1

    position = 0
    for sibling in parent.element_children:
        if sibling is node:
            break
        if sibling.is_element("li"):
            position += 1

    return _render_item(f"{start + position}. ", options, node, content)


def render_code_block(options: ConversionOptions, node: Node, content: str) -> str:
    code = _sole_code_child(node)
    language = ""
    for class_name in code.class_names:
        if class_name.startswith(_LANGUAGE_PREFIX):
            language = class_name[len(_LANGUAGE_PREFIX):]
            break
    return f"\n\n{options.fence}{language}\n{code.text_content}\n{options.fence}\n\n"


def render_preformatted(options: ConversionOptions, node: Node, content: str) -> str:
    return f"\n\n{options.fence}\n{node.text_content}\n{options.fence}\n\n"


def render_inline_code(node: Node, content: str) -> str:
    code = node.text_content
    if not code:
        return ""
    if "`" in code:
        return f"`` {code} ``"
    return f"`{code}`"


def _render_delimited(delimiter: str, node: Node, content: str) -> str:
    # Padding inside the delimiters breaks emphasis in most renderers,
    # so surrounding whitespace goes outside them
    core = content.strip()
    if not core:
        return " " if content else ""
    leading = content[: len(content) - len(content.lstrip())]
    trailing = content[len(content.rstrip()):]
    return f"{leading}{delimiter}{core}{delimiter}{trailing}"


def render_strong(options: ConversionOptions, node: Node, content: str) -> str:
    return _render_delimited(options.strong_delimiter, node, content)


def render_emphasis(options: ConversionOptions, node: Node, content: str) -> str:
    return _render_delimited(options.em_delimiter, node, content)


def render_strikethrough(options: ConversionOptions, node: Node, content: str) -> str:
    return _render_delimited(options.strike_delimiter, node, content)


def _title_part(title: str) -> str:
    if not title:
        return ""
    escaped = title.replace('"', '\\"')
    return f' "{escaped}"'


def render_link(node: Node, content: str) -> str:
    href = node.get("href")
    if not href:
        return content
    title_part = _title_part(node.get("title"))
    return f"[{content}]({href}{title_part})"


def render_image(node: Node, content: str) -> str:
    src = node.get("src")
    if not src:
        return ""
    alt = node.get("alt")
    title_part = _title_part(node.get("title"))
    return f"![{alt}]({src}{title_part})"


def render_table(node: Node, content: str) -> str:
    return f"\n\n{content}\n\n"


def render_table_row(node: Node, content: str) -> str:
    row = f"|{content}"
    if is_header_row(node):
        cell_count = sum(1 for cell in node.element_children if cell.is_element("th", "td"))
        row += "\n|" + "---|" * cell_count
    return f"{row}\n"


def render_table_cell(node: Node, content: str) -> str:
    cell = _NEWLINES_RE.sub(" ", content).replace("|", "\\|").strip()
    return f" {cell} |"


def render_nothing(node: Node, content: str) -> str:
    return ""


def default_rules(options: Optional[ConversionOptions] = None) -> list[Rule]:
    """
    Build the standard rule set for Qiita-flavoured Markdown.

    Args:
        options: Markdown flavour settings; defaults are used if omitted.

    Returns:
        Rules in registration order.
    """
    options = options or ConversionOptions()

    return [
        Rule("discard", tag_is(*DISCARDED_TAGS), render_nothing),
        Rule("heading", tag_is(*HEADING_TAGS), render_heading),
        Rule("paragraph", tag_is(*PARAGRAPH_TAGS), render_paragraph),
        Rule("lineBreak", tag_is("br"), partial(render_line_break, options)),
        Rule("horizontalRule", tag_is("hr"), partial(render_horizontal_rule, options)),
        Rule("blockquote", tag_is("blockquote"), render_blockquote),
        Rule("list", tag_is("ul", "ol"), render_list),
        Rule("listItem", tag_is("li"), partial(render_list_item, options)),
        Rule(
            "orderedListItem",
            is_ordered_list_item,
            partial(render_ordered_list_item, options),
            priority=10,
        ),
        Rule("preformatted", tag_is("pre"), partial(render_preformatted, options)),
        Rule("codeBlock", is_code_block, partial(render_code_block, options), priority=10),
        Rule("inlineCode", is_inline_code, render_inline_code),
        Rule("strong", tag_is("strong", "b"), partial(render_strong, options)),
        Rule("emphasis", tag_is("em", "i"), partial(render_emphasis, options)),
        Rule("strikethrough", tag_is("del", "s", "strike"), partial(render_strikethrough, options)),
        Rule("link", tag_is("a"), render_link),
        Rule("image", tag_is("img"), render_image),
        Rule("table", tag_is("table"), render_table),
        Rule("tableRow", tag_is("tr"), render_table_row),
        Rule("tableCell", tag_is("th", "td"), render_table_cell),
    ]


_ESCAPES = [
    (re.compile(r"\\"), r"\\\\"),
    (re.compile(r"\*"), r"\\*"),
    (re.compile(r"^-"), r"\\-"),
    (re.compile(r"^\+ "), r"\\+ "),
    (re.compile(r"^(=+)"), r"\\\1"),
    (re.compile(r"^(#{1,6}) "), r"\\\1 "),
    (re.compile(r"`"), r"\\`"),
    (re.compile(r"^~~~"), r"\\~~~"),
    (re.compile(r"\["), r"\\["),
    (re.compile(r"\]"), r"\\]"),
    (re.compile(r"^>"), r"\\>"),
    (re.compile(r"_"), r"\\_"),
    (re.compile(r"^(\d+)\. "), r"\1\\. "),
]


def escape_markdown(value: str) -> str:
    """Escape characters that would otherwise be read as Markdown syntax."""
    for pattern, replacement in _ESCAPES:
        value = pattern.sub(replacement, value)
    return value
