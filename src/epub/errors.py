"""Exceptions raised while rewriting an EPUB archive.

Fatal errors (the run produces no output):
    ArchiveOpenError, MemberReadError, ArchiveAssemblyError

Member-local errors (the member keeps its original bytes):
    MarkupParseError, MarkupSerializeError

Node-local errors (one text node keeps its original text):
    NodeTransformError
"""


class WordBreakError(Exception):
    """Base class for archive rewrite errors."""


class ArchiveOpenError(WordBreakError):
    """The input cannot be opened as a ZIP archive."""


class MemberReadError(WordBreakError):
    """A member's bytes cannot be read from the archive."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot read member '{name}': {reason}")


class ArchiveAssemblyError(WordBreakError):
    """The output archive cannot be assembled."""


class MarkupParseError(WordBreakError):
    """A markup member cannot be decoded or parsed."""


class MarkupSerializeError(WordBreakError):
    """A parsed markup member cannot be serialized back to text."""


class NodeTransformError(WordBreakError):
    """A single text node could not be rewritten."""
