"""ProgressListener: progress reporting and cooperative cancellation."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ..exceptions import CanceledError

logger = logging.getLogger(__name__)


class ProgressListener:
    """Tracks progress of a long-running computation and its cancel flag.

    Engines call ``check_for_cancel()`` at coarse intervals (once per
    outer loop iteration). Another thread, or the ``on_progress`` callback,
    may call ``cancel()``; the next check then raises CanceledError.

    Parameters
    ----------
    on_progress : callable(subtask, progress, maximum), optional
        Invoked whenever progress changes. ``maximum`` is -1 while the
        amount of work is unknown.
    """

    def __init__(
        self,
        on_progress: Callable[[str, int, int], None] | None = None,
    ) -> None:
        self._on_progress = on_progress
        self._canceled = threading.Event()
        self.subtask = ""
        self.progress = 0
        self.maximum = -1

    def set_subtask(self, subtask: str) -> None:
        self.subtask = subtask
        logger.debug("Subtask: %s", subtask)
        self._notify()

    def set_maximum(self, maximum: int) -> None:
        self.maximum = maximum

    def set_progress(self, progress: int) -> None:
        self.progress = progress
        self._notify()

    def increment_progress(self) -> None:
        """Advance by one step and check for cancellation."""
        self.progress += 1
        self._notify()
        self.check_for_cancel()

    def cancel(self) -> None:
        self._canceled.set()

    @property
    def is_canceled(self) -> bool:
        return self._canceled.is_set()

    def check_for_cancel(self) -> None:
        """Raise CanceledError if cancel() has been called."""
        if self._canceled.is_set():
            raise CanceledError(f"Canceled during '{self.subtask}'.")

    def _notify(self) -> None:
        if self._on_progress is not None:
            self._on_progress(self.subtask, self.progress, self.maximum)


def resolve_progress(progress: ProgressListener | None) -> ProgressListener:
    return ProgressListener() if progress is None else progress
