"""
Byte-based progress tracking for a single conversion.

The total starts as the sum of declared sizes of all valid manifest files
and shrinks whenever a file is deferred or fails, so the reported
percentage can drop after a failure.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from mrpack_convert.models import ManifestFile

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class ProgressState:
    """
    Shared counters for the download tasks of one conversion.

    Only mutated from coroutines on the converter's event loop.
    """

    def __init__(self, on_progress: Optional[ProgressCallback] = None):
        self.total = 0
        self.downloaded = 0
        self._on_progress = on_progress

    def begin(self, files: Iterable[ManifestFile]) -> None:
        self.total = sum(f.file_size for f in files)
        self.downloaded = 0

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        # Half rounds up
        return int(self.downloaded * 100 / self.total + 0.5)

    def defer(self, size: int) -> None:
        """Drop a deferred file from the total without reporting."""
        self.total -= size

    def fail(self, size: int) -> None:
        """Drop a failed file from the total and report."""
        self.total -= size
        self._report()

    def complete(self, size: int) -> None:
        """Count a placed file and report."""
        self.downloaded += size
        self._report()

    def _report(self) -> None:
        logger.debug("Progress: %d / %d bytes", self.downloaded, self.total)
        if self._on_progress:
            self._on_progress(self.percent)
