"""Break insertion inside XHTML/HTML documents.

Documents that are well-formed XML are parsed with the XML tree builder and
keep their XML serialization. Anything else goes through the tolerant HTML
parser. Only plain character data is rewritten: comments, CDATA, processing
instructions and doctypes are left as they are, as is text whose parent
element is in the skip set.
"""

from __future__ import annotations

import logging
import re
import warnings
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from html.entities import name2codepoint

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from bs4.element import NavigableString, PageElement, PreformattedString, Tag
from lxml import etree

from src.epub.classifier import DEFAULT_SKIP_TAGS, TEXT_ONLY_ELEMENTS, is_skipped_element
from src.epub.errors import MarkupParseError, MarkupSerializeError, NodeTransformError
from src.epub.models import FellBack, Transformed
from src.wordbreak.break_inserter import ZERO_WIDTH_SPACE, BreakMode, break_runs
from src.wordbreak.dictionary import DictionaryIndex
from src.wordbreak.segmenter import ThaiSegmenter

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"

XML_PREDEFINED_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})
_NAMED_REFERENCE = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")


class DocumentKind(str, Enum):
    """How a markup member was parsed."""

    STRUCTURAL = "structural"  # well-formed XML (XHTML)
    GENERIC = "generic"  # tolerant HTML parse


class SerializationPolicy(str, Enum):
    """Which reassembly path is tried first.

    AUTO picks the structural path for XML documents and the textual path
    (root element markup only) for HTML documents.
    """

    AUTO = "auto"
    STRUCTURAL = "structural"
    TEXTUAL = "textual"


@dataclass(frozen=True)
class MarkupStats:
    """Per-document text node counts."""

    nodes_rewritten: int
    nodes_skipped: int
    nodes_failed: int


@dataclass(frozen=True)
class MarkupResult:
    """A rewritten markup document."""

    text: str
    kind: DocumentKind
    stats: MarkupStats


def expand_named_entities(markup: str) -> str:
    """Rewrite HTML named character references as numeric references.

    Without its DTD an XML parser knows only the five predefined entities and
    drops every other named reference. ``&nbsp;`` is rewritten as ``&#160;``;
    unknown names are left in place.
    """

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in XML_PREDEFINED_ENTITIES or name not in name2codepoint:
            return match.group(0)
        return f"&#{name2codepoint[name]};"

    return _NAMED_REFERENCE.sub(replace, markup)


def is_well_formed_xml(markup: str) -> bool:
    """Check whether ``markup`` parses as XML without recovery or warnings.

    An undeclared entity in a document with an external DOCTYPE is only a
    warning for libxml2, so any logged message counts as a failure.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, recover=False)
    try:
        etree.fromstring(markup.encode("utf-8"), parser)
    except etree.XMLSyntaxError:
        return False
    if len(parser.error_log) > 0:
        logger.debug("XML probe reported: %s", parser.error_log[0].message)
        return False
    return True


def decode_markup(raw: bytes) -> str:
    """Decode member bytes as UTF-8, dropping a byte order mark.

    Raises:
        MarkupParseError: If the bytes are not valid UTF-8.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MarkupParseError(f"Not valid UTF-8: {exc}") from exc
    return text[1:] if text.startswith(BYTE_ORDER_MARK) else text


class MarkupTransformer:
    """Rewrites the text nodes of markup members with break markers.

    Args:
        index: Dictionary used for segmentation.
        mode: ZWSP inserts U+200B into text; WBR inserts ``<wbr/>`` elements.
        skip_tags: Normalized element names whose text is left untouched.
        policy: Serialization path preference.
    """

    def __init__(
        self,
        index: DictionaryIndex,
        *,
        mode: BreakMode = BreakMode.ZWSP,
        skip_tags: frozenset[str] = DEFAULT_SKIP_TAGS,
        policy: SerializationPolicy = SerializationPolicy.AUTO,
    ) -> None:
        self.segmenter = ThaiSegmenter(index)
        self.mode = mode
        self.skip_tags = skip_tags
        self.policy = policy

    def transform_member(self, name: str, raw: bytes) -> Transformed | FellBack:
        """Rewrite one archive member.

        Never raises for bad content: a member that cannot be parsed or
        serialized comes back as FellBack carrying ``raw`` unchanged.
        """
        try:
            result = self.transform_text(decode_markup(raw))
        except (MarkupParseError, MarkupSerializeError) as exc:
            logger.warning("skip (parse error): %s - %s", name, exc)
            return FellBack(raw_bytes=raw, reason=str(exc))

        stats = result.stats
        logger.info(
            "processed: %s (%s, %d nodes rewritten, %d skipped, %d failed)",
            name,
            result.kind.value,
            stats.nodes_rewritten,
            stats.nodes_skipped,
            stats.nodes_failed,
        )
        return Transformed(new_text=result.text)

    def transform_text(self, markup: str) -> MarkupResult:
        """Parse ``markup``, rewrite its text nodes and serialize it again.

        Raises:
            MarkupParseError: If the document cannot be parsed.
            MarkupSerializeError: If no serialization path succeeds.
        """
        soup, kind = self.parse(markup)
        stats = self._rewrite_text_nodes(soup)
        text = self.serialize(soup, kind)
        return MarkupResult(text=text, kind=kind, stats=stats)

    def parse(self, markup: str) -> tuple[BeautifulSoup, DocumentKind]:
        """Parse as XML when well-formed, otherwise as HTML.

        HTML named references are made numeric first, so an XHTML document
        using ``&nbsp;`` still takes the XML path without losing the character.

        Raises:
            MarkupParseError: If the parser fails outright.
        """
        try:
            xml_markup = expand_named_entities(markup)
            if is_well_formed_xml(xml_markup):
                return BeautifulSoup(xml_markup, "lxml-xml"), DocumentKind.STRUCTURAL
            logger.debug("Markup is not well-formed XML, parsing as HTML")
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
                return BeautifulSoup(markup, "lxml"), DocumentKind.GENERIC
        except Exception as exc:
            raise MarkupParseError(f"{type(exc).__name__}: {exc}") from exc

    def serialize(self, soup: BeautifulSoup, kind: DocumentKind) -> str:
        """Serialize along the preferred path, falling back to the other.

        Raises:
            MarkupSerializeError: If both paths fail.
        """
        paths: list[tuple[str, Callable[[BeautifulSoup], str]]] = [
            ("structural", _serialize_structural),
            ("textual", _serialize_textual),
        ]
        if self.policy is SerializationPolicy.TEXTUAL or (
            self.policy is SerializationPolicy.AUTO and kind is DocumentKind.GENERIC
        ):
            paths.reverse()

        failures: list[str] = []
        for label, serialize in paths:
            try:
                return serialize(soup)
            except Exception as exc:
                logger.debug("[serialize] %s path failed: %s", label, exc)
                failures.append(f"{label}: {type(exc).__name__}: {exc}")

        raise MarkupSerializeError("; ".join(failures))

    def _rewrite_text_nodes(self, soup: BeautifulSoup) -> MarkupStats:
        rewritten = skipped = failed = 0

        candidates: list[NavigableString] = []
        for node in soup.descendants:
            if not isinstance(node, NavigableString) or isinstance(node, PreformattedString):
                continue
            parent = node.parent
            if parent is None or isinstance(parent, BeautifulSoup) or is_skipped_element(parent.name, self.skip_tags):
                skipped += 1
                continue
            candidates.append(node)

        for node in candidates:
            try:
                if self._rewrite_node(soup, node):
                    rewritten += 1
            except NodeTransformError as exc:
                failed += 1
                logger.warning("[text] fail: %s", exc)

        return MarkupStats(nodes_rewritten=rewritten, nodes_skipped=skipped, nodes_failed=failed)

    def _rewrite_node(self, soup: BeautifulSoup, node: NavigableString) -> bool:
        """Replace one text node; returns False when nothing had to change.

        Raises:
            NodeTransformError: If segmentation or replacement fails. The node
                is left as it was.
        """
        original = str(node)
        if not original:
            return False
        try:
            runs = break_runs(self.segmenter.segment(original))
            if len(runs) <= 1:
                return False

            replacement: list[PageElement]
            if self.mode is BreakMode.WBR and not _inside_text_only_element(node):
                replacement = [NavigableString(runs[0])]
                for run in runs[1:]:
                    replacement.append(soup.new_tag("wbr"))
                    replacement.append(NavigableString(run))
            else:
                replacement = [NavigableString(ZERO_WIDTH_SPACE.join(runs))]

            node.replace_with(*replacement)
        except Exception as exc:
            raise NodeTransformError(f"{type(exc).__name__}: {exc}") from exc
        return True


def _serialize_structural(soup: BeautifulSoup) -> str:
    return soup.decode()


def _serialize_textual(soup: BeautifulSoup) -> str:
    root = next((child for child in soup.contents if isinstance(child, Tag)), None)
    if root is None:
        raise MarkupSerializeError("Document has no root element")
    return root.decode()


def _inside_text_only_element(node: NavigableString) -> bool:
    return any(is_skipped_element(parent.name, TEXT_ONLY_ELEMENTS) for parent in node.parents)
