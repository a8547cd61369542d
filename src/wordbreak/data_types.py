"""Data types for the Thai word-break engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    """A run of text produced by the segmenter.

    Attributes:
        text: The substring of the input covered by this token.
        is_thai: True if the run consists of Thai characters.
    """

    text: str
    is_thai: bool
