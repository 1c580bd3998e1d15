"""Single-owner aggregation of batch outcomes reported by load workers."""

from __future__ import annotations

import logging
import queue
import threading
import time

from realty_map.common.logging import log_event
from realty_map.common.models import BatchOutcome

_STOP = object()


class ProgressAggregator(threading.Thread):
    """Folds worker outcomes into running totals.

    Workers never touch the totals; they only post to ``outcomes``. The totals
    are safe to read once ``stop()`` has returned.
    """

    def __init__(self, outcomes: queue.SimpleQueue, logger: logging.Logger, started_at: float) -> None:
        super().__init__(name="load-progress", daemon=True)
        self.outcomes = outcomes
        self.logger = logger
        self.started_at = started_at
        self.inserted = 0
        self.batches = 0

    def run(self) -> None:
        while True:
            outcome = self.outcomes.get()
            if outcome is _STOP:
                return
            self._record(outcome)

    def _record(self, outcome: BatchOutcome) -> None:
        self.batches += 1
        if not outcome.committed:
            return
        self.inserted += outcome.inserted
        elapsed = time.monotonic() - self.started_at
        rate = self.inserted / elapsed if elapsed > 0 else 0.0
        log_event(
            self.logger,
            f"worker {outcome.worker_id}: inserted {outcome.inserted}, total {self.inserted} ({rate:.0f} records/s)",
            stage="load",
            event="BATCH_COMMIT",
            status="ok",
            worker_id=outcome.worker_id,
            batch_size=outcome.size,
            rows_out=self.inserted,
            rate=round(rate, 2),
        )

    def stop(self) -> None:
        self.outcomes.put(_STOP)
        self.join()
