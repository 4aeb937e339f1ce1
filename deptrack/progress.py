"""Progress tracking for the scan pipeline."""

from __future__ import annotations

import threading
from typing import Callable

import structlog
from tqdm import tqdm

from deptrack.engines.dependency_scanner.models import FetchOutcome

log = structlog.get_logger("deptrack")


class ProgressCounter:
    """Counts completed repositories. Safe to increment from any worker."""

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self._completed = 0
        self._failed = 0
        self._lock = threading.Lock()
        self.callbacks: list[Callable[[FetchOutcome, int], None]] = []

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failed(self) -> int:
        return self._failed

    def increment(self, outcome: FetchOutcome) -> int:
        """Record one finished repository and notify callbacks with the new count."""
        with self._lock:
            self._completed += 1
            if not outcome.ok:
                self._failed += 1
            count = self._completed
        self._notify(outcome, count)
        return count

    def __call__(self, outcome: FetchOutcome) -> None:
        self.increment(outcome)

    def _notify(self, outcome: FetchOutcome, count: int) -> None:
        for cb in self.callbacks:
            try:
                cb(outcome, count)
            except Exception:
                log.debug(
                    "progress.callback_error",
                    repository=outcome.repository.full_name,
                    exc_info=True,
                )


class ProgressBar:
    """Renders a :class:`ProgressCounter` as a tqdm bar on stderr."""

    def __init__(self, total: int, *, disable: bool = False) -> None:
        self._bar = tqdm(total=total, desc="Repos", unit="repo", disable=disable, leave=False)

    def __call__(self, outcome: FetchOutcome, count: int) -> None:
        self._bar.update(1)
        if not outcome.ok:
            self._bar.set_postfix_str(f"last failure: {outcome.repository.full_name}")

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> ProgressBar:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
