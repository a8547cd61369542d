"""Greedy longest-match segmentation of Thai text.

Non-Thai runs pass through as single tokens. Thai runs are split at
dictionary words; characters with no dictionary match become one-character
tokens that keep their trailing combining marks attached.
"""

from src.wordbreak.data_types import Token
from src.wordbreak.dictionary import DictionaryIndex

THAI_BLOCK_START = 0x0E00
THAI_BLOCK_END = 0x0E7F

# Vowel and tone marks that attach to the preceding base character
COMBINING_RANGES: tuple[tuple[int, int], ...] = (
    (0x0E31, 0x0E31),
    (0x0E34, 0x0E3A),
    (0x0E47, 0x0E4E),
)


def is_thai(ch: str) -> bool:
    """Check if a character lies in the Thai Unicode block."""
    return THAI_BLOCK_START <= ord(ch) <= THAI_BLOCK_END


def is_combining(ch: str) -> bool:
    """Check if a character is a Thai combining vowel or tone mark."""
    code = ord(ch)
    return any(low <= code <= high for low, high in COMBINING_RANGES)


class ThaiSegmenter:
    """Split text into Thai word tokens and non-Thai runs.

    Args:
        index: Dictionary used for longest-match lookups.

    Example:
        >>> segmenter = ThaiSegmenter(DictionaryIndex.from_word_list("กา\\nกาน"))
        >>> [t.text for t in segmenter.segment("กานา")]
        ['กาน', 'า']
    """

    def __init__(self, index: DictionaryIndex) -> None:
        self.index = index

    def segment(self, text: str) -> list[Token]:
        """Segment text into tokens.

        Concatenating the token texts always reproduces ``text``.

        Args:
            text: Input string.

        Returns:
            Ordered list of tokens.
        """
        tokens: list[Token] = []
        n = len(text)
        i = 0

        while i < n:
            if not is_thai(text[i]):
                j = i + 1
                while j < n and not is_thai(text[j]):
                    j += 1
                tokens.append(Token(text=text[i:j], is_thai=False))
                i = j
                continue

            end = self.index.longest_match_end(text, i)
            if end is not None:
                tokens.append(Token(text=text[i : end + 1], is_thai=True))
                i = end + 1
                continue

            # Unknown character: keep its combining marks with it
            j = i + 1
            while j < n and is_combining(text[j]):
                j += 1
            tokens.append(Token(text=text[i:j], is_thai=True))
            i = j

        return tokens
