"""Dictionary-driven Thai word segmentation and break insertion."""

from src.wordbreak.break_inserter import (
    WBR_MARKER,
    ZERO_WIDTH_SPACE,
    BreakMode,
    break_runs,
    insert_breaks,
    insert_breaks_by_words,
    strip_markers,
)
from src.wordbreak.data_types import Token
from src.wordbreak.dictionary import DictionaryIndex
from src.wordbreak.segmenter import ThaiSegmenter, is_combining, is_thai

__all__ = [
    "BreakMode",
    "DictionaryIndex",
    "ThaiSegmenter",
    "Token",
    "WBR_MARKER",
    "ZERO_WIDTH_SPACE",
    "break_runs",
    "insert_breaks",
    "insert_breaks_by_words",
    "is_combining",
    "is_thai",
    "strip_markers",
]
