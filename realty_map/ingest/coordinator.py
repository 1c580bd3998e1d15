"""Ingestion coordinator: one producer, a bounded queue, a fixed worker pool."""

from __future__ import annotations

import logging
import queue
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from realty_map.common.constants import DEFAULT_BATCH_SIZE, DEFAULT_QUEUE_FACTOR, DEFAULT_WORKERS
from realty_map.common.errors import ConfigError, RowParseError, StoreError
from realty_map.common.logging import log_event
from realty_map.common.models import Batch, LoadSummary
from realty_map.ingest.batcher import Batcher
from realty_map.ingest.parser import build_column_index, parse_row
from realty_map.ingest.progress import ProgressAggregator
from realty_map.ingest.reader import open_rows
from realty_map.ingest.workers import QUEUE_CLOSED, LoadWorker


@dataclass(frozen=True)
class IngestionSettings:
    batch_size: int = DEFAULT_BATCH_SIZE
    workers: int = DEFAULT_WORKERS
    queue_factor: int = DEFAULT_QUEUE_FACTOR
    progress_every: int = 10000
    put_timeout_seconds: float = 0.5

    def __post_init__(self) -> None:
        for name in ("batch_size", "workers", "queue_factor", "progress_every"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not self.put_timeout_seconds > 0:
            raise ConfigError("put_timeout_seconds must be positive")

    @property
    def queue_capacity(self) -> int:
        return self.workers * self.queue_factor

    @classmethod
    def from_config(cls, ingest_cfg: dict, **overrides) -> "IngestionSettings":
        values = {
            "batch_size": ingest_cfg["batch_size"],
            "workers": ingest_cfg["workers"],
            "queue_factor": ingest_cfg["queue_factor"],
            "progress_every": ingest_cfg["progress_every"],
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


class IngestionCoordinator:
    def __init__(self, store, settings: IngestionSettings, logger: logging.Logger) -> None:
        self.store = store
        self.settings = settings
        self.logger = logger
        self.batches: queue.Queue = queue.Queue(maxsize=settings.queue_capacity)
        self.outcomes: queue.SimpleQueue = queue.SimpleQueue()
        self.workers: list[LoadWorker] = []

    def _any_worker_alive(self) -> bool:
        return any(worker.is_alive() for worker in self.workers)

    def _put(self, item) -> bool:
        # Blocks while the queue is full; gives up once nothing is left to drain it.
        while self._any_worker_alive():
            try:
                self.batches.put(item, timeout=self.settings.put_timeout_seconds)
                return True
            except queue.Full:
                continue
        return False

    def _submit(self, batch: Batch) -> None:
        if not self._put(batch):
            raise StoreError("No load workers are running; aborting ingestion")

    def _start_workers(self) -> None:
        for worker_id in range(self.settings.workers):
            worker = LoadWorker(worker_id, self.store, self.batches, self.outcomes, self.logger)
            self.workers.append(worker)
            worker.start()

    def _close(self) -> None:
        self._put(QUEUE_CLOSED)
        for worker in self.workers:
            worker.join()

    def run(self, rows: Iterable[Sequence[str]], indices: dict[str, int]) -> LoadSummary:
        started_at = time.monotonic()
        aggregator = ProgressAggregator(self.outcomes, self.logger, started_at)
        aggregator.start()
        self._start_workers()

        batcher = Batcher(self.settings.batch_size)
        rows_read = 0
        try:
            for row in rows:
                rows_read += 1
                if rows_read % self.settings.progress_every == 0:
                    log_event(self.logger, f"rows read: {rows_read}", stage="read", event="READ_PROGRESS", status="ok", rows_in=rows_read)
                try:
                    record = parse_row(row, indices)
                except RowParseError as exc:
                    log_event(
                        self.logger,
                        f"skipping row {rows_read}: {exc}",
                        level=logging.WARNING,
                        stage="parse",
                        event="ROW_PARSE_FAIL",
                        status="error",
                        error_code=exc.error_code,
                    )
                    continue
                if not record.is_usable():
                    continue
                batch = batcher.add(record)
                if batch is not None:
                    self._submit(batch)

            remainder = batcher.flush()
            if remainder is not None:
                self._submit(remainder)
        finally:
            self._close()
            aggregator.stop()

        if not any(worker.connected for worker in self.workers):
            raise StoreError("No load worker could connect to the store")

        summary = LoadSummary(
            inserted=aggregator.inserted,
            batches=aggregator.batches,
            rows_read=rows_read,
            elapsed_seconds=time.monotonic() - started_at,
        )
        log_event(
            self.logger,
            f"load finished in {summary.elapsed_seconds:.2f}s: {summary.inserted} records "
            f"({summary.records_per_second:.0f} records/s)",
            stage="load",
            event="LOAD_COMPLETE",
            status="ok",
            rows_in=rows_read,
            rows_out=summary.inserted,
            rate=round(summary.records_per_second, 2),
            duration_ms=int(summary.elapsed_seconds * 1000),
        )
        return summary


def run_ingestion(
    input_path: Path,
    store,
    settings: IngestionSettings | None = None,
    *,
    logger: logging.Logger,
) -> LoadSummary:
    """Load ``input_path`` into ``store``, replacing its current contents."""
    settings = settings or IngestionSettings()
    store.ping()
    log_event(logger, "store reachable", stage="startup", event="STORE_READY", status="ok")

    with open_rows(input_path, logger) as (header, rows):
        indices = build_column_index(header)
        log_event(logger, f"columns found: {sorted(indices)}", stage="startup", event="HEADER_OK", status="ok")
        store.clear()
        log_event(logger, "store cleared", stage="startup", event="STORE_CLEARED", status="ok")
        coordinator = IngestionCoordinator(store, settings, logger)
        return coordinator.run(rows, indices)
