"""Monotonic progress reporting for one pipeline run."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Reported when every member is visited and the archive is being assembled
FINALIZING_PROGRESS = 0.99

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """Forwards progress fractions to a callback, never going backwards.

    Values are clamped to [0, 1]; a value lower than the last reported one is
    reported as the last value again. ``report_count`` stays at or below
    FINALIZING_PROGRESS, so 1.0 is left for ``report_done``.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self._last = 0.0

    @property
    def last(self) -> float:
        return self._last

    def report(self, value: float) -> None:
        value = min(1.0, max(0.0, value))
        if value < self._last:
            logger.debug("Ignoring progress regression %.4f < %.4f", value, self._last)
            value = self._last
        self._last = value
        if self._callback is not None:
            self._callback(value)

    def report_count(self, processed: int, total: int) -> None:
        """Report ``processed / total``, held below 1.0 until assembly is done."""
        fraction = processed / total if total > 0 else 1.0
        self.report(min(fraction, FINALIZING_PROGRESS))

    def report_finalizing(self) -> None:
        self.report(FINALIZING_PROGRESS)

    def report_done(self) -> None:
        self.report(1.0)
