"""Fixed-size batching of validated listings."""

from __future__ import annotations

from realty_map.common.constants import DEFAULT_BATCH_SIZE
from realty_map.common.errors import ConfigError
from realty_map.common.models import Batch, ListingRecord


class Batcher:
    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ConfigError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size = batch_size
        self._pending: list[ListingRecord] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, record: ListingRecord) -> Batch | None:
        """Append ``record``; return a full batch once the cap is reached."""
        self._pending.append(record)
        if len(self._pending) < self.batch_size:
            return None
        batch = tuple(self._pending)
        self._pending.clear()
        return batch

    def flush(self) -> Batch | None:
        if not self._pending:
            return None
        batch = tuple(self._pending)
        self._pending.clear()
        return batch
