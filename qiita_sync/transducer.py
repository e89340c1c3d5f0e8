"""
Tree walker that turns a Node tree into Markdown using a RuleTable.
"""

import re
from typing import Iterable, Optional, Union

from .nodes import Node
from .rules import Rule, RuleTable, default_rules, escape_markdown

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


class TransductionError(Exception):
    """Raised when a node tree cannot be walked (e.g. it contains a cycle)."""


class TransductionEngine:
    """
    Converts a node tree to Markdown.

    Children are rendered first, then the selected rule for the node
    receives their concatenated output. Nodes without a matching rule
    fall back to the default: elements pass their children's output
    through unchanged, text nodes render as escaped text.

    The rule table is fixed at construction, so one engine can be
    shared across documents.
    """

    def __init__(self, rules: Optional[Union[RuleTable, Iterable[Rule]]] = None):
        if rules is None:
            rules = default_rules()
        self.rules = rules if isinstance(rules, RuleTable) else RuleTable(rules)

    def transduce(self, root: Node) -> str:
        """
        Render a document tree.

        Args:
            root: Root node of the document.

        Returns:
            Markdown with blank-line runs collapsed and outer blank lines removed.

        Raises:
            TransductionError: If the tree is not a finite, acyclic tree.
        """
        return normalize_whitespace(self.render(root))

    def render(self, node: Node) -> str:
        """Render a subtree without the final whitespace pass."""
        return self._render(node, set())

    def _render(self, node: Node, ancestors: set[int]) -> str:
        key = id(node)
        if key in ancestors:
            raise TransductionError(f"Cycle detected at <{node.tag_name or node.kind}>")

        if node.is_text and node.children:
            raise TransductionError("Text node cannot have children")

        ancestors.add(key)
        try:
            content = "".join(self._render(child, ancestors) for child in node.children)
        finally:
            ancestors.discard(key)

        rule = self.rules.select(node)
        if rule is not None:
            return rule.render(node, content)

        if node.is_text:
            return escape_markdown(node.text)
        return content


def normalize_whitespace(markdown: str) -> str:
    """Collapse 3+ consecutive newlines to 2 and strip outer newlines."""
    markdown = _EXCESS_NEWLINES_RE.sub("\n\n", markdown)
    return markdown.strip("\n")
