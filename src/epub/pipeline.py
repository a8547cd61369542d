"""Member-by-member rewrite of an EPUB archive.

The pipeline is driven one step at a time. Each call to ``step()`` visits at
most one member, so the caller can interleave other work, poll for a pause,
or block on the resume handle returned while the run is waiting.

Usage:
    pipeline = ArchivePipeline(transformer, is_paused=lambda: paused)
    result = pipeline.run(epub_bytes)
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from src.epub.archive import ZipArchiveReader, ZipArchiveWriter
from src.epub.classifier import DEFAULT_MARKUP_EXTENSIONS, is_markup_member
from src.epub.errors import WordBreakError
from src.epub.markup import MarkupTransformer
from src.epub.models import (
    MIMETYPE_MEMBER,
    ArchiveMember,
    CompressionHint,
    Copied,
    PipelineResult,
    ProcessingOutcome,
    ResumeHandle,
    RunState,
    StepStatus,
    Transformed,
)
from src.epub.progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)


def visit_order(members: list[ArchiveMember]) -> list[ArchiveMember]:
    """Native member order with ``mimetype`` moved to the front."""
    first = [m for m in members if m.name == MIMETYPE_MEMBER and not m.is_directory]
    rest = [m for m in members if m.name != MIMETYPE_MEMBER or m.is_directory]
    return first + rest


class ArchivePipeline:
    """Rewrites every markup member of one archive.

    Args:
        transformer: Markup rewriter applied to markup members.
        markup_extensions: Normalized extensions identifying markup members.
        on_progress: Receives a non-decreasing fraction in [0, 1].
        is_paused: Checked before each non-directory member except mimetype.
        on_resume_handle: Receives the handle created when the run pauses.
    """

    def __init__(
        self,
        transformer: MarkupTransformer,
        *,
        markup_extensions: frozenset[str] = DEFAULT_MARKUP_EXTENSIONS,
        on_progress: ProgressCallback | None = None,
        is_paused: Callable[[], bool] | None = None,
        on_resume_handle: Callable[[ResumeHandle], None] | None = None,
    ) -> None:
        self.transformer = transformer
        self.markup_extensions = markup_extensions
        self._progress = ProgressReporter(on_progress)
        self._is_paused = is_paused
        self._on_resume_handle = on_resume_handle

        self.state = RunState.IDLE
        self._reader: ZipArchiveReader | None = None
        self._writer: ZipArchiveWriter | None = None
        self._queue: list[ArchiveMember] = []
        self._position = 0
        self._total = 0
        self._pending: ResumeHandle | None = None
        self._transformed: dict[str, str] = {}
        self._outcomes: dict[str, ProcessingOutcome] = {}
        self._result: PipelineResult | None = None

    @property
    def progress(self) -> float:
        return self._progress.last

    @property
    def result(self) -> PipelineResult:
        """Result of a completed run.

        Raises:
            RuntimeError: If the run has not finished.
        """
        if self._result is None:
            raise RuntimeError(f"Pipeline has no result in state '{self.state.value}'")
        return self._result

    def start(self, data: bytes) -> None:
        """Open the input archive and plan the visit order.

        Raises:
            ArchiveOpenError: If ``data`` is not a readable archive.
            RuntimeError: If the pipeline was already started.
        """
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"Pipeline already started (state '{self.state.value}')")

        self.state = RunState.ENUMERATING
        try:
            self._reader = ZipArchiveReader(data)
        except WordBreakError:
            self.state = RunState.FAILED
            raise

        members = self._reader.members
        self._queue = visit_order(members)
        self._total = len(members)
        self._writer = ZipArchiveWriter()
        logger.info("Archive opened: %d members", self._total)
        self.state = RunState.VISITING

    def step(self) -> StepStatus:
        """Visit the next member, or finalize once all are visited.

        Returns:
            WAITING with a resume handle while paused, VISITING after a
            member was written, DONE once the archive is assembled.

        Raises:
            MemberReadError: If a member cannot be read.
            ArchiveAssemblyError: If the output archive cannot be written.
            RuntimeError: If called before ``start`` or after a failure.
        """
        if self.state is RunState.DONE:
            return StepStatus(state=RunState.DONE)
        if self.state in (RunState.IDLE, RunState.ENUMERATING, RunState.FAILED):
            raise RuntimeError(f"Cannot step pipeline in state '{self.state.value}'")

        if self._position >= len(self._queue):
            return self._finalize()

        member = self._queue[self._position]

        if self._pending is None and self._should_pause(member):
            self._pending = ResumeHandle(member.name)
            logger.info("Paused before %s", member.name)
            if self._on_resume_handle is not None:
                self._on_resume_handle(self._pending)

        if self._pending is not None:
            if not self._pending.resumed:
                self.state = RunState.WAITING
                return StepStatus(state=RunState.WAITING, member_name=member.name, resume_handle=self._pending)
            logger.info("Resumed at %s", member.name)
            self._pending = None

        self.state = RunState.VISITING
        try:
            self._visit(member)
        except WordBreakError:
            self._fail()
            raise

        self._position += 1
        self._progress.report_count(self._position, self._total)
        return StepStatus(state=RunState.VISITING, member_name=member.name)

    def resume(self) -> None:
        """Release a pending pause. No effect when the run is not waiting."""
        if self._pending is not None:
            self._pending.resume()

    def run(self, data: bytes) -> PipelineResult:
        """Process ``data`` to completion, blocking while paused.

        Raises:
            ArchiveOpenError: If ``data`` is not a readable archive.
            MemberReadError: If a member cannot be read.
            ArchiveAssemblyError: If the output archive cannot be written.
        """
        self.start(data)
        while True:
            status = self.step()
            if status.state is RunState.DONE:
                return self.result
            if status.state is RunState.WAITING and status.resume_handle is not None:
                status.resume_handle.wait()

    def _should_pause(self, member: ArchiveMember) -> bool:
        if member.is_directory or member.name == MIMETYPE_MEMBER or self._is_paused is None:
            return False
        return self._is_paused()

    def _require_writer(self) -> ZipArchiveWriter:
        if self._writer is None:
            raise RuntimeError(f"Pipeline has no output archive in state '{self.state.value}'")
        return self._writer

    def _visit(self, member: ArchiveMember) -> None:
        writer = self._require_writer()

        if member.is_directory:
            writer.add_directory(member.name, member.date_time)
            return

        raw = member.read()

        if member.name == MIMETYPE_MEMBER:
            writer.add(member.name, raw, CompressionHint.STORE, member.date_time)
            self._outcomes[member.name] = Copied(raw_bytes=raw)
            return

        if not is_markup_member(member.name, self.markup_extensions):
            writer.add(member.name, raw, CompressionHint.DEFLATE, member.date_time)
            self._outcomes[member.name] = Copied(raw_bytes=raw)
            return

        outcome = self.transformer.transform_member(member.name, raw)
        if isinstance(outcome, Transformed):
            writer.add(member.name, outcome.new_text.encode("utf-8"), CompressionHint.DEFLATE, member.date_time)
            self._transformed[member.name] = outcome.new_text
        else:
            writer.add(member.name, outcome.raw_bytes, CompressionHint.DEFLATE, member.date_time)
        self._outcomes[member.name] = outcome

    def _finalize(self) -> StepStatus:
        writer = self._require_writer()

        self.state = RunState.FINALIZING
        self._progress.report_finalizing()
        try:
            archive_bytes = writer.finalize()
        except WordBreakError:
            self._fail()
            raise

        self._close_reader()
        self._result = PipelineResult(
            archive_bytes=archive_bytes,
            transformed=dict(self._transformed),
            outcomes=dict(self._outcomes),
        )
        self.state = RunState.DONE
        self._progress.report_done()
        logger.info(
            "Archive assembled: %d bytes, %d members transformed, %d fell back",
            len(archive_bytes),
            len(self._transformed),
            len(self._result.fallback_members),
        )
        return StepStatus(state=RunState.DONE)

    def _fail(self) -> None:
        self.state = RunState.FAILED
        self._close_reader()

    def _close_reader(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
