"""Data types passed between the archive pipeline stages."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

MIMETYPE_MEMBER = "mimetype"

# ZIP timestamps start at 1980
DEFAULT_DATE_TIME: tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)


class CompressionHint(str, Enum):
    """How a member is compressed in the output archive."""

    STORE = "store"
    DEFLATE = "deflate"


class RunState(str, Enum):
    """Lifecycle of one pipeline run."""

    IDLE = "idle"
    ENUMERATING = "enumerating"
    VISITING = "visiting"
    WAITING = "waiting"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ArchiveMember:
    """One entry of an input archive.

    The input compression method is not carried: output compression is fixed
    per member kind (mimetype stored, everything else deflated).

    Attributes:
        name: Path of the entry, unique within the archive.
        is_directory: True for directory entries (no payload).
        reader: Callable returning the entry's bytes.
        date_time: Modification time carried into the output archive.
    """

    name: str
    is_directory: bool
    reader: Callable[[], bytes] = field(repr=False, compare=False)
    date_time: tuple[int, int, int, int, int, int] = DEFAULT_DATE_TIME

    def read(self) -> bytes:
        """Read the entry's bytes."""
        if self.is_directory:
            return b""
        return self.reader()


@dataclass(frozen=True)
class Copied:
    """Member emitted verbatim."""

    raw_bytes: bytes


@dataclass(frozen=True)
class Transformed:
    """Markup member rewritten with break markers."""

    new_text: str


@dataclass(frozen=True)
class FellBack:
    """Markup member emitted with its original bytes after a failure."""

    raw_bytes: bytes
    reason: str


ProcessingOutcome = Copied | Transformed | FellBack


class ResumeHandle:
    """Suspension token handed out while a run is paused.

    ``resume()`` may be called from any thread; calling it again, or after
    the run moved on, has no effect.
    """

    def __init__(self, member_name: str) -> None:
        self.member_name = member_name
        self._event = threading.Event()

    def resume(self) -> None:
        self._event.set()

    @property
    def resumed(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until resumed or ``timeout`` elapses.

        Returns:
            True if the handle was resumed.
        """
        return self._event.wait(timeout)


@dataclass(frozen=True)
class StepStatus:
    """Result of advancing the pipeline by one step.

    Attributes:
        state: State the run is in after the step.
        member_name: Member visited, or waiting to be visited.
        resume_handle: Set while ``state`` is WAITING.
    """

    state: RunState
    member_name: str | None = None
    resume_handle: ResumeHandle | None = None


@dataclass
class PipelineResult:
    """Output of a completed run.

    Attributes:
        archive_bytes: The finalized EPUB.
        transformed: Member name -> rewritten text, for members that were
            successfully transformed.
        outcomes: Member name -> outcome, for every non-directory member.
    """

    archive_bytes: bytes
    transformed: dict[str, str]
    outcomes: dict[str, ProcessingOutcome]

    @property
    def fallback_members(self) -> list[str]:
        return [name for name, outcome in self.outcomes.items() if isinstance(outcome, FellBack)]
