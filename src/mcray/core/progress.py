"""Scanline progress reporting for long renders.

The reporter is a render callback: after each finished row it rewrites a
single status line with the number of remaining scanlines and an estimate of
the time left, at most once per min_interval seconds.

Example:
    >>> import sys
    >>> from mcray.core.progress import ProgressReporter
    >>> reporter = ProgressReporter(sys.stderr)
    >>> image = camera.render(scene, callback=reporter)
    >>> elapsed = reporter.finish()
"""

import time
from collections.abc import Callable
from typing import TextIO


def format_eta(seconds: float) -> str:
    """Format a duration as "Xm Ys" (negative durations read as 0m 0s)."""
    total = max(0, int(round(seconds)))
    minutes, secs = divmod(total, 60)
    return f"{minutes}m {secs}s"


class ProgressReporter:
    """Throttled scanline progress line.

    Attributes:
        stream: Text stream the status line is written to.
        min_interval: Minimum number of seconds between two updates.
    """

    def __init__(
        self,
        stream: TextIO,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stream = stream
        self.min_interval = min_interval
        self._clock = clock
        self._start = clock()
        # The first line appears min_interval after construction
        self._last_update = self._start
        self._updates = 0

    @property
    def update_count(self) -> int:
        """Number of status lines written so far."""
        return self._updates

    def __call__(self, rows_done: int, total_rows: int) -> None:
        now = self._clock()
        if now - self._last_update < self.min_interval:
            return

        remaining = max(total_rows - rows_done, 0)
        elapsed = now - self._start
        if rows_done > 0:
            eta = elapsed / rows_done * remaining
        else:
            eta = 0.0

        self.stream.write(
            f"\rScanlines remaining: {remaining} | Estimated time left: {format_eta(eta)}"
        )
        self.stream.flush()
        self._last_update = now
        self._updates += 1

    def finish(self) -> float:
        """Write the completion message.

        Returns:
            Seconds elapsed since the reporter was created.
        """
        elapsed = self._clock() - self._start
        self.stream.write("\rDone.                                                  \n")
        self.stream.flush()
        return elapsed
