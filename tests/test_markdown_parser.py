"""Tests for the markdown note parser."""
import pytest

from note_janitor.models.schema import Position, Range
from note_janitor.storage.markdown_parser import WikiLink, detect_eol


class TestFrontMatter:
    """Front matter detection and metadata loading."""

    def test_no_front_matter(self, parser):
        doc = parser.parse("Hello\n", identifier="n").document
        assert doc.content_start == Position(line=1, character=0)

    def test_content_starts_after_closing_fence(self, parser):
        parsed = parser.parse("---\ntags: [a, b]\n---\nBody\n", identifier="n")
        assert parsed.document.content_start == Position(line=4, character=0)
        assert parsed.metadata == {"tags": ["a", "b"]}

    def test_title_from_front_matter(self, parser):
        doc = parser.parse("---\ntitle: Real Title\n---\n# Other\n", identifier="n").document
        assert doc.title == "Real Title"

    def test_invalid_yaml_is_ignored(self, parser, caplog):
        parsed = parser.parse("---\nkey: [unclosed\n---\nBody\n", identifier="broken")
        assert parsed.metadata == {}
        assert parsed.document.content_start == Position(line=4, character=0)
        assert "broken" in caplog.text

    def test_crlf_front_matter(self, parser):
        doc = parser.parse("---\r\na: 1\r\n---\r\nBody\r\n", identifier="n").document
        assert doc.eol == "\r\n"
        assert doc.content_start == Position(line=4, character=0)


class TestTitle:
    def test_first_h1_is_the_title(self, parser):
        doc = parser.parse("intro\n\n# First\n\n# Second\n", identifier="n").document
        assert doc.title == "First"

    def test_closing_hashes_are_dropped(self, parser):
        assert parser.parse("# Title ##\n", identifier="n").document.title == "Title"

    def test_h2_is_not_a_title(self, parser):
        assert parser.parse("## Sub\n", identifier="n").document.title is None

    def test_title_never_defaults_to_identifier(self, parser):
        assert parser.parse("no heading\n", identifier="my-note").document.title is None


class TestDefinitions:
    """The trailing run of reference definitions."""

    def test_trailing_definitions_with_ranges(self, parser):
        text = 'Body\n\n[a]: http://a "A"\n  [b]: <b c>\n'
        definitions = parser.parse(text, identifier="n").document.existing_definitions

        assert [(d.label, d.target, d.title) for d in definitions] == [
            ("a", "http://a", "A"),
            ("b", "b c", None),
        ]
        assert definitions[0].range == Range.create_from_position(
            Position(line=3, character=0), Position(line=3, character=17)
        )
        assert definitions[1].range.start == Position(line=4, character=2)

    @pytest.mark.parametrize("title_part", ["'single'", "(paren)"])
    def test_alternative_title_quotes(self, parser, title_part):
        text = f"x\n\n[a]: a {title_part}\n"
        definition = parser.parse(text, identifier="n").document.existing_definitions[0]
        assert definition.title in ("single", "paren")

    def test_escaped_quotes_in_title(self, parser):
        text = 'x\n\n[q]: q "Say \\"hi\\""\n'
        definition = parser.parse(text, identifier="n").document.existing_definitions[0]
        assert definition.title == 'Say "hi"'

    def test_definitions_in_the_body_are_not_collected(self, parser):
        text = "[early]: http://e\n\nparagraph\n\n[late]: http://l\n"
        definitions = parser.parse(text, identifier="n").document.existing_definitions
        assert [d.label for d in definitions] == ["late"]

    def test_definitions_inside_code_fence_are_not_collected(self, parser):
        text = "x\n\n```\n[a]: b\n```\n"
        assert parser.parse(text, identifier="n").document.existing_definitions == []

    def test_no_definitions(self, parser):
        assert parser.parse("plain\n", identifier="n").document.existing_definitions == []


class TestWikiLinks:
    def test_links_in_order(self, parser):
        links = parser.parse("See [[one]] and [[two]].\n[[three]]\n", identifier="n").links
        assert [link.target for link in links] == ["one", "two", "three"]
        assert [link.line for link in links] == [1, 1, 2]

    def test_section_and_alias(self, parser):
        (link,) = parser.parse("[[Other Note#Some Part|shown]]\n", identifier="n").links
        assert link == WikiLink(
            raw="Other Note#Some Part|shown",
            target="Other Note",
            section="Some Part",
            alias="shown",
            line=1,
        )

    def test_embeds_are_skipped(self, parser):
        assert parser.parse("![[image.png]] [[real]]\n", identifier="n").links == [
            WikiLink.from_raw("real")
        ]

    def test_code_is_skipped(self, parser):
        text = "`[[inline]]`\n\n```\n[[fenced]]\n```\n[[kept]]\n"
        links = parser.parse(text, identifier="n").links
        assert [link.target for link in links] == ["kept"]

    def test_links_in_definitions_are_ignored(self, parser):
        text = "[[body]]\n\n[x]: <[[not-a-link]]>\n"
        assert [link.target for link in parser.parse(text, identifier="n").links] == ["body"]

    def test_section_only_link_is_skipped(self, parser):
        assert parser.parse("[[#local]]\n", identifier="n").links == []


def test_detect_eol():
    assert detect_eol("a\r\nb") == "\r\n"
    assert detect_eol("a\nb") == "\n"
    assert detect_eol("") == "\n"


def test_document_end(parser):
    assert parser.parse("a\nbc", identifier="n").document.end == Position(line=2, character=2)
