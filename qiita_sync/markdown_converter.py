"""
microCMS HTML to Qiita Markdown converter.

Turns the rich-text HTML stored in microCMS into Markdown suitable for
a Qiita article body:
- Text blocks (paragraphs, headings, quotes)
- Lists (bulleted, numbered, nested)
- Code blocks (with language from ``language-*`` classes)
- Images and links
- Tables
- An optional excerpt lead, backlink and footer
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from .config import DEFAULT_FOOTER
from .nodes import parse_html
from .rules import ConversionOptions, RuleTable, default_rules
from .transducer import TransductionEngine

default_console = Console(stderr=True)


class MarkdownConverter:
    """
    Converts article HTML to Markdown.

    Wraps a TransductionEngine with the document-level additions an
    article needs before it is published.
    """

    def __init__(
        self,
        footer: Optional[str] = DEFAULT_FOOTER,
        options: Optional[ConversionOptions] = None,
        rules: Optional[RuleTable] = None,
        console: Optional[Console] = None,
    ):
        """
        Initialize converter.

        Args:
            footer: Closing section appended to every article, or None.
            options: Markdown flavour settings for the default rules.
            rules: Custom rule table; replaces the default rules.
            console: Where conversion failures are reported.
        """
        self.footer = footer
        self.engine = TransductionEngine(rules if rules is not None else RuleTable(default_rules(options)))
        self.console = console if console is not None else default_console

    def to_markdown(self, html: str) -> str:
        """Convert an HTML fragment without excerpt, backlink or footer."""
        return self.engine.transduce(parse_html(html))

    def convert(
        self,
        html: str,
        excerpt: Optional[str] = None,
        original_url: Optional[str] = None,
        original_title: Optional[str] = None,
    ) -> str:
        """
        Convert article HTML to a complete Markdown body.

        Args:
            html: Article content HTML.
            excerpt: Optional lead HTML placed before the content.
            original_url: Where the article was first published.
            original_title: Link text for the backlink.

        Returns:
            Markdown body. If conversion fails, the original HTML is
            returned unchanged.
        """
        if not html or not isinstance(html, str):
            return ""

        try:
            markdown = self.to_markdown(html)

            if excerpt and excerpt.strip():
                excerpt_markdown = self.to_markdown(excerpt)
                if excerpt_markdown:
                    markdown = f"{excerpt_markdown}\n\n{markdown}"

            if original_url:
                title = original_title or original_url
                markdown += f"\n\n> 📝 この記事は [{title}]({original_url}) からの転載です。"

            if self.footer:
                markdown += f"\n\n{self.footer}"

            return markdown

        except Exception as e:
            self.console.print(f"[yellow]Warning: HTML to Markdown conversion failed: {escape(str(e))}[/yellow]")
            return html
