"""EPUB archive rewriting with Thai word-break markers."""

from src.epub.archive import ZipArchiveReader, ZipArchiveWriter
from src.epub.errors import (
    ArchiveAssemblyError,
    ArchiveOpenError,
    MarkupParseError,
    MarkupSerializeError,
    MemberReadError,
    NodeTransformError,
    WordBreakError,
)
from src.epub.markup import DocumentKind, MarkupTransformer, SerializationPolicy
from src.epub.models import (
    ArchiveMember,
    CompressionHint,
    Copied,
    FellBack,
    PipelineResult,
    ResumeHandle,
    RunState,
    StepStatus,
    Transformed,
)
from src.epub.pipeline import ArchivePipeline

__all__ = [
    "ArchiveAssemblyError",
    "ArchiveMember",
    "ArchiveOpenError",
    "ArchivePipeline",
    "CompressionHint",
    "Copied",
    "DocumentKind",
    "FellBack",
    "MarkupParseError",
    "MarkupSerializeError",
    "MarkupTransformer",
    "MemberReadError",
    "NodeTransformError",
    "PipelineResult",
    "ResumeHandle",
    "RunState",
    "SerializationPolicy",
    "StepStatus",
    "Transformed",
    "WordBreakError",
    "ZipArchiveReader",
    "ZipArchiveWriter",
]
