"""Break marker placement between adjacent Thai tokens."""

from enum import Enum

from src.wordbreak.data_types import Token
from src.wordbreak.dictionary import DictionaryIndex
from src.wordbreak.segmenter import ThaiSegmenter

ZERO_WIDTH_SPACE = "\u200b"
WBR_MARKER = "<wbr>"


class BreakMode(str, Enum):
    """How a break opportunity is written into the output."""

    ZWSP = "zwsp"
    WBR = "wbr"

    @property
    def marker(self) -> str:
        """Text marker used when breaks are inserted into plain strings."""
        return ZERO_WIDTH_SPACE if self is BreakMode.ZWSP else WBR_MARKER


def break_runs(tokens: list[Token]) -> list[str]:
    """Group token texts into the runs that lie between break positions.

    A break falls between tokens ``k`` and ``k + 1`` only when both are Thai,
    so ``marker.join(break_runs(tokens))`` is the marked-up text.

    Args:
        tokens: Segmenter output.

    Returns:
        List of text runs; empty when there are no tokens.
    """
    runs: list[str] = []
    current: list[str] = []

    for k, token in enumerate(tokens):
        if k > 0 and tokens[k - 1].is_thai and token.is_thai:
            runs.append("".join(current))
            current = []
        current.append(token.text)

    if current:
        runs.append("".join(current))

    return runs


def insert_breaks(tokens: list[Token], marker: str) -> str:
    """Concatenate tokens, placing ``marker`` between adjacent Thai tokens."""
    return marker.join(break_runs(tokens))


def strip_markers(text: str, marker: str) -> str:
    """Remove every instance of ``marker`` from ``text``."""
    if not marker:
        return text
    return text.replace(marker, "")


def insert_breaks_by_words(text: str, index: DictionaryIndex, marker: str = ZERO_WIDTH_SPACE) -> str:
    """Segment ``text`` with ``index`` and insert break markers.

    Args:
        text: Input string.
        index: Dictionary used for segmentation.
        marker: Break marker string.

    Returns:
        Text with markers between adjacent Thai words.
    """
    if not text:
        return text
    tokens = ThaiSegmenter(index).segment(text)
    return insert_breaks(tokens, marker)
