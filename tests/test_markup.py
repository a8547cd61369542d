"""Tests for break insertion inside markup documents."""

import pytest

from src.epub import markup
from src.epub.errors import MarkupParseError, MarkupSerializeError
from src.epub.markup import (
    DocumentKind,
    MarkupTransformer,
    SerializationPolicy,
    decode_markup,
    expand_named_entities,
    is_well_formed_xml,
)
from src.epub.models import FellBack, Transformed
from src.wordbreak.break_inserter import ZERO_WIDTH_SPACE, BreakMode
from src.wordbreak.data_types import Token
from src.wordbreak.dictionary import DictionaryIndex
from src.wordbreak.segmenter import ThaiSegmenter

CHAPTER_XHTML = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<html xmlns="http://www.w3.org/1999/xhtml">'
    "<head><title>Chapter</title></head>"
    "<body><p>สวัสดีครับ</p><pre>ภาษาไทย</pre><!-- ภาษาไทย --></body>"
    "</html>"
)

CHAPTER_HTML = "<html><body><p>ภาษาไทย<br></p></body></html>"

XHTML11_WITH_ENTITIES = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.1//EN" "http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd">\n'
    '<html xmlns="http://www.w3.org/1999/xhtml">'
    "<head><title>Chapter</title></head>"
    "<body><p>ภาษา&nbsp;ไทย&mdash;ภาษาไทย</p></body>"
    "</html>"
)

NO_BREAK_SPACE = chr(0x00A0)
EM_DASH = chr(0x2014)


class ExplodingSegmenter:
    """Segmenter that fails on text containing a trigger word."""

    def __init__(self, index: DictionaryIndex, trigger: str) -> None:
        self._delegate = ThaiSegmenter(index)
        self._trigger = trigger

    def segment(self, text: str) -> list[Token]:
        if self._trigger in text:
            raise RuntimeError("segmenter exploded")
        return self._delegate.segment(text)


class TestDecodeMarkup:
    """Test cases for decoding member bytes."""

    def test_strips_byte_order_mark(self) -> None:
        """Test that a UTF-8 byte order mark is removed."""
        assert decode_markup(b"\xef\xbb\xbf<p/>") == "<p/>"

    def test_invalid_utf8(self) -> None:
        """Test that undecodable bytes raise MarkupParseError."""
        with pytest.raises(MarkupParseError, match="UTF-8"):
            decode_markup(b"<p>\xff</p>")


class TestIsWellFormedXml:
    """Test cases for the XML well-formedness check."""

    def test_xhtml(self) -> None:
        """Test that an XHTML document is well-formed."""
        assert is_well_formed_xml(CHAPTER_XHTML)

    def test_html(self) -> None:
        """Test that HTML with an unclosed void element is not."""
        assert not is_well_formed_xml(CHAPTER_HTML)

    def test_undefined_entity(self) -> None:
        """Test that an HTML-only entity makes the document non-XML."""
        assert not is_well_formed_xml("<p>a&nbsp;b</p>")

    def test_undeclared_entity_with_external_doctype(self) -> None:
        """Test that an undeclared entity under an external DOCTYPE is not accepted."""
        assert not is_well_formed_xml(XHTML11_WITH_ENTITIES)


class TestExpandNamedEntities:
    """Test cases for expand_named_entities."""

    def test_html_entities_become_numeric(self) -> None:
        """Test that HTML named references are rewritten as numeric ones."""
        assert expand_named_entities("a&nbsp;b&mdash;c") == "a&#160;b&#8212;c"

    def test_xml_and_unknown_entities_kept(self) -> None:
        """Test that predefined XML entities and unknown names are left alone."""
        assert expand_named_entities("&amp;&lt;&apos;&bogus;") == "&amp;&lt;&apos;&bogus;"


class TestTransformText:
    """Test cases for MarkupTransformer.transform_text."""

    def test_xhtml_gets_breaks_in_text(self, index: DictionaryIndex) -> None:
        """Test that Thai text in ordinary elements gets zero-width spaces."""
        result = MarkupTransformer(index).transform_text(CHAPTER_XHTML)

        assert result.kind is DocumentKind.STRUCTURAL
        assert f"<p>สวัสดี{ZERO_WIDTH_SPACE}ครับ</p>" in result.text
        assert result.text.startswith("<?xml")
        assert 'xmlns="http://www.w3.org/1999/xhtml"' in result.text
        assert result.stats.nodes_rewritten == 1
        assert result.stats.nodes_failed == 0

    def test_skip_tags_and_comments_untouched(self, index: DictionaryIndex) -> None:
        """Test that skipped elements and comments keep their text."""
        result = MarkupTransformer(index).transform_text(CHAPTER_XHTML)

        assert "<pre>ภาษาไทย</pre>" in result.text
        assert "<!-- ภาษาไทย -->" in result.text
        assert result.stats.nodes_skipped >= 1

    def test_custom_skip_tags(self, index: DictionaryIndex) -> None:
        """Test that an empty skip set rewrites code-like elements too."""
        result = MarkupTransformer(index, skip_tags=frozenset()).transform_text(CHAPTER_XHTML)

        assert f"<pre>ภาษา{ZERO_WIDTH_SPACE}ไทย</pre>" in result.text

    def test_html_uses_generic_parse(self, index: DictionaryIndex) -> None:
        """Test that non-XML markup is parsed as HTML and emitted from its root element."""
        result = MarkupTransformer(index).transform_text(CHAPTER_HTML)

        assert result.kind is DocumentKind.GENERIC
        assert result.text.startswith("<html>")
        assert f"ภาษา{ZERO_WIDTH_SPACE}ไทย" in result.text

    def test_wbr_mode_inserts_elements(self, index: DictionaryIndex) -> None:
        """Test that WBR mode inserts <wbr/> elements instead of characters."""
        result = MarkupTransformer(index, mode=BreakMode.WBR).transform_text(CHAPTER_XHTML)

        assert "<p>สวัสดี<wbr/>ครับ</p>" in result.text
        assert ZERO_WIDTH_SPACE not in result.text

    def test_named_entities_survive_external_doctype(self, index: DictionaryIndex) -> None:
        """Test that &nbsp; and &mdash; in an XHTML 1.1 document keep their characters."""
        result = MarkupTransformer(index).transform_text(XHTML11_WITH_ENTITIES)

        assert result.kind is DocumentKind.STRUCTURAL
        assert f"<p>ภาษา{NO_BREAK_SPACE}ไทย{EM_DASH}ภาษา{ZERO_WIDTH_SPACE}ไทย</p>" in result.text
        assert "<!DOCTYPE html PUBLIC" in result.text

    def test_wbr_mode_keeps_title_text_only(self, index: DictionaryIndex) -> None:
        """Test that WBR mode puts zero-width spaces, not elements, inside the title."""
        doc = (
            '<html xmlns="http://www.w3.org/1999/xhtml">'
            "<head><title>ภาษาไทย</title></head><body><p>ภาษาไทย</p></body></html>"
        )

        result = MarkupTransformer(index, mode=BreakMode.WBR).transform_text(doc)

        assert f"<title>ภาษา{ZERO_WIDTH_SPACE}ไทย</title>" in result.text
        assert "<p>ภาษา<wbr/>ไทย</p>" in result.text

    def test_text_without_breaks_is_unchanged(self, index: DictionaryIndex) -> None:
        """Test that a document with nothing to break keeps its text nodes."""
        doc = '<html xmlns="http://www.w3.org/1999/xhtml"><body><p>Hello ไทย</p></body></html>'

        result = MarkupTransformer(index).transform_text(doc)

        assert "<p>Hello ไทย</p>" in result.text
        assert result.stats.nodes_rewritten == 0

    def test_node_failure_is_isolated(self, index: DictionaryIndex) -> None:
        """Test that a failing text node keeps its text and siblings are still rewritten."""
        transformer = MarkupTransformer(index)
        transformer.segmenter = ExplodingSegmenter(index, "boom")
        doc = '<html xmlns="http://www.w3.org/1999/xhtml"><body><p>boom ภาษาไทย</p><p>สวัสดีครับ</p></body></html>'

        result = transformer.transform_text(doc)

        assert "<p>boom ภาษาไทย</p>" in result.text
        assert f"<p>สวัสดี{ZERO_WIDTH_SPACE}ครับ</p>" in result.text
        assert result.stats.nodes_failed == 1
        assert result.stats.nodes_rewritten == 1


class TestSerialize:
    """Test cases for serialization paths and their fallback."""

    def test_structural_failure_falls_back_to_textual(
        self, index: DictionaryIndex, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the textual path is used when the structural one fails."""

        def fail(_soup: object) -> str:
            raise ValueError("cannot serialize")

        monkeypatch.setattr(markup, "_serialize_structural", fail)

        result = MarkupTransformer(index).transform_text(CHAPTER_XHTML)

        assert result.text.startswith("<html")
        assert f"สวัสดี{ZERO_WIDTH_SPACE}ครับ" in result.text

    def test_textual_policy_prefers_root_element(self, index: DictionaryIndex) -> None:
        """Test that the textual policy drops the XML declaration."""
        transformer = MarkupTransformer(index, policy=SerializationPolicy.TEXTUAL)

        result = transformer.transform_text(CHAPTER_XHTML)

        assert result.text.startswith("<html")

    def test_structural_policy_serializes_html_document(self, index: DictionaryIndex) -> None:
        """Test that the structural policy serializes the whole HTML document."""
        transformer = MarkupTransformer(index, policy=SerializationPolicy.STRUCTURAL)

        result = transformer.transform_text(CHAPTER_HTML)

        assert f"ภาษา{ZERO_WIDTH_SPACE}ไทย" in result.text

    def test_both_paths_failing_raises(self, index: DictionaryIndex, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that MarkupSerializeError is raised when no path works."""

        def fail(_soup: object) -> str:
            raise ValueError("cannot serialize")

        monkeypatch.setattr(markup, "_serialize_structural", fail)
        monkeypatch.setattr(markup, "_serialize_textual", fail)

        with pytest.raises(MarkupSerializeError, match="structural.*textual"):
            MarkupTransformer(index).transform_text(CHAPTER_XHTML)


class TestTransformMember:
    """Test cases for MarkupTransformer.transform_member."""

    def test_transformed(self, index: DictionaryIndex) -> None:
        """Test that a good member comes back as Transformed."""
        outcome = MarkupTransformer(index).transform_member("ch1.xhtml", CHAPTER_XHTML.encode("utf-8"))

        assert isinstance(outcome, Transformed)
        assert ZERO_WIDTH_SPACE in outcome.new_text

    def test_bom_is_not_carried_over(self, index: DictionaryIndex) -> None:
        """Test that a leading byte order mark is dropped from the output."""
        raw = b"\xef\xbb\xbf" + CHAPTER_XHTML.encode("utf-8")

        outcome = MarkupTransformer(index).transform_member("ch1.xhtml", raw)

        assert isinstance(outcome, Transformed)
        assert outcome.new_text.startswith("<?xml")

    def test_invalid_utf8_falls_back(self, index: DictionaryIndex) -> None:
        """Test that undecodable bytes come back unchanged as FellBack."""
        raw = b"<p>\xff\xfe</p>"

        outcome = MarkupTransformer(index).transform_member("bad.xhtml", raw)

        assert isinstance(outcome, FellBack)
        assert outcome.raw_bytes == raw
        assert "UTF-8" in outcome.reason

    def test_serialize_failure_falls_back(self, index: DictionaryIndex, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a serialization failure keeps the original bytes."""

        def fail(_soup: object) -> str:
            raise ValueError("cannot serialize")

        monkeypatch.setattr(markup, "_serialize_structural", fail)
        monkeypatch.setattr(markup, "_serialize_textual", fail)
        raw = CHAPTER_XHTML.encode("utf-8")

        outcome = MarkupTransformer(index).transform_member("ch1.xhtml", raw)

        assert isinstance(outcome, FellBack)
        assert outcome.raw_bytes == raw
