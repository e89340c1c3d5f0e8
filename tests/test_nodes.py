"""Tests for HTML parsing into the node tree."""

from qiita_sync.nodes import ROOT_TAG, element, parse_html, text


class TestParseHtml:
    """Tests for parse_html."""

    def test_builds_element_and_text_nodes(self) -> None:
        """Elements and text keep document order."""
        root = parse_html("<p>Hello <b>world</b></p>")

        assert root.tag_name == ROOT_TAG
        paragraph = root.children[0]
        assert paragraph.is_element("p")
        assert [child.kind for child in paragraph.children] == ["text", "element"]
        assert paragraph.children[0].text == "Hello "
        assert paragraph.children[1].tag_name == "b"

    def test_links_parents(self) -> None:
        """Every child points back at its parent."""
        root = parse_html("<ul><li>a</li><li>b</li></ul>")
        ul = root.children[0]

        assert all(li.parent is ul for li in ul.children)
        assert ul.parent is root

    def test_drops_whitespace_between_blocks(self) -> None:
        """Indentation between block elements is not content."""
        root = parse_html("<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>")
        ul = root.children[0]

        assert [child.tag_name for child in ul.children] == ["li", "li"]

    def test_collapses_inline_whitespace(self) -> None:
        """Runs of whitespace inside text become one space."""
        root = parse_html("<p>one\n   two\tthree</p>")

        assert root.children[0].text_content == "one two three"

    def test_trims_whitespace_at_block_edges(self) -> None:
        """Leading and trailing spaces of a block are dropped."""
        root = parse_html("<p>  padded  </p>")

        assert root.children[0].text_content == "padded"

    def test_collapses_spaces_across_inline_tags(self) -> None:
        """A space already shown before an inline tag is not repeated inside it."""
        root = parse_html("<p>This is <b> bold </b> text</p>")
        bold = root.children[0].children[1]

        assert bold.text_content == "bold "
        assert root.children[0].text_content == "This is bold text"

    def test_keeps_whitespace_inside_pre(self) -> None:
        """Preformatted text is kept verbatim."""
        root = parse_html("<pre><code>def f():\n    return 1\n</code></pre>")
        code = root.children[0].children[0]

        assert code.text_content == "def f():\n    return 1\n"

    def test_class_attribute_is_a_string(self) -> None:
        """Multi-valued attributes are kept as the raw string."""
        root = parse_html('<code class="language-python highlight">x</code>')
        code = root.children[0]

        assert code.get("class") == "language-python highlight"
        assert code.class_names == ["language-python", "highlight"]

    def test_skips_comments(self) -> None:
        """HTML comments produce no nodes."""
        root = parse_html("<p>a<!-- hidden -->b</p>")

        assert root.children[0].text_content == "ab"

    def test_empty_input(self) -> None:
        """Empty markup parses to an empty root."""
        assert parse_html("").children == []


class TestNodeNavigation:
    """Tests for sibling and attribute helpers."""

    def test_siblings(self) -> None:
        first = element("li", children=[text("a")])
        second = element("li", children=[text("b")])
        element("ul", children=[first, second])

        assert first.next_sibling is second
        assert second.next_sibling is None

    def test_missing_attribute_defaults_to_empty(self) -> None:
        img = element("img", {"src": "a.png"})

        assert img.get("alt") == ""
        assert img.get("alt", "fallback") == "fallback"

    def test_first_and_last_element_child_skip_text(self) -> None:
        a = element("b")
        b = element("i")
        parent = element("p", children=[text("x"), a, text("y"), b, text("z")])

        assert parent.first_element_child is a
        assert parent.last_element_child is b
        assert parent.element_children == [a, b]
