import pytest

from realty_map.common.errors import ConfigError
from realty_map.common.models import ListingRecord
from realty_map.ingest.batcher import Batcher


def _record(idx: int) -> ListingRecord:
    return ListingRecord(id=idx, geo_lat=55.0, geo_lng=83.0, price=1.0)


def test_batcher_emits_full_batches_in_input_order():
    batcher = Batcher(batch_size=3)
    emitted = [batcher.add(_record(i)) for i in range(7)]

    full = [batch for batch in emitted if batch is not None]
    assert [[r.id for r in batch] for batch in full] == [[0, 1, 2], [3, 4, 5]]
    assert len(batcher) == 1


def test_batcher_flushes_partial_remainder_once():
    batcher = Batcher(batch_size=3)
    batcher.add(_record(1))
    batcher.add(_record(2))

    remainder = batcher.flush()
    assert [r.id for r in remainder] == [1, 2]
    assert batcher.flush() is None


def test_emitted_batch_is_detached_from_accumulator():
    batcher = Batcher(batch_size=2)
    batcher.add(_record(1))
    batch = batcher.add(_record(2))
    batcher.add(_record(3))

    assert isinstance(batch, tuple)
    assert [r.id for r in batch] == [1, 2]


def test_batcher_rejects_non_positive_size():
    with pytest.raises(ConfigError):
        Batcher(batch_size=0)
