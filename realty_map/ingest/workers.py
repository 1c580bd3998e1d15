"""Load workers that commit batches to the listing store."""

from __future__ import annotations

import logging
import queue
import threading

from realty_map.common.errors import StoreError
from realty_map.common.logging import log_event
from realty_map.common.models import Batch, BatchOutcome

# Posted once when no more batches will be produced; every worker re-posts it.
QUEUE_CLOSED = object()


class LoadWorker(threading.Thread):
    def __init__(
        self,
        worker_id: int,
        store,
        batches: queue.Queue,
        outcomes: queue.SimpleQueue,
        logger: logging.Logger,
    ) -> None:
        super().__init__(name=f"load-worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self.store = store
        self.batches = batches
        self.outcomes = outcomes
        self.logger = logger
        self.connected = False

    def run(self) -> None:
        try:
            connection = self.store.connect()
        except StoreError as exc:
            log_event(
                self.logger,
                f"worker {self.worker_id} could not connect: {exc}",
                level=logging.ERROR,
                stage="load",
                event="WORKER_START_FAIL",
                status="error",
                worker_id=self.worker_id,
                error_code=exc.error_code,
            )
            return

        self.connected = True
        with connection:
            while True:
                batch = self.batches.get()
                if batch is QUEUE_CLOSED:
                    self.batches.put(QUEUE_CLOSED)
                    return
                self._load(connection, batch)

    def _load(self, connection, batch: Batch) -> None:
        try:
            inserted = connection.insert_batch(batch)
        except StoreError as exc:
            log_event(
                self.logger,
                f"worker {self.worker_id} lost a batch: {exc}",
                level=logging.ERROR,
                stage="load",
                event="BATCH_FAIL",
                status="error",
                worker_id=self.worker_id,
                batch_size=len(batch),
                error_code=exc.error_code,
            )
            self.outcomes.put(BatchOutcome(self.worker_id, len(batch), 0, committed=False))
            return
        except Exception as exc:
            # Anything else from the driver still costs only this batch.
            log_event(
                self.logger,
                f"worker {self.worker_id} lost a batch: {exc!r}",
                level=logging.ERROR,
                stage="load",
                event="BATCH_FAIL",
                status="error",
                worker_id=self.worker_id,
                batch_size=len(batch),
                error_code=type(exc).__name__,
            )
            self.outcomes.put(BatchOutcome(self.worker_id, len(batch), 0, committed=False))
            return
        self.outcomes.put(BatchOutcome(self.worker_id, len(batch), inserted, committed=True))
