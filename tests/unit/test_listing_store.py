from pathlib import Path

import pytest

from realty_map.common.errors import StoreError
from realty_map.common.models import ListingRecord
from realty_map.store.listing_store import ListingStore, PingRetryConfig


@pytest.fixture
def store(tmp_path: Path):
    listing_store = ListingStore(f"sqlite:///{tmp_path / 'listings.db'}")
    listing_store.create_schema()
    yield listing_store
    listing_store.dispose()


def _record(idx: int, lat: float = 55.0, lng: float = 83.0, price: float = 1_000_000.0) -> ListingRecord:
    return ListingRecord(id=idx, geo_lat=lat, geo_lng=lng, price=price, rooms=2, area=50.0)


def test_insert_batch_commits_all_rows(store):
    with store.connect() as connection:
        assert connection.insert_batch([_record(1), _record(2), _record(3)]) == 3
    assert store.count() == 3


def test_insert_batch_skips_duplicate_and_commits_rest(store):
    batch = [_record(i) for i in range(1, 11)]
    batch[5] = _record(3)

    with store.connect() as connection:
        inserted = connection.insert_batch(batch)

    assert inserted == 9
    assert store.count() == 9


def test_clear_removes_everything(store):
    with store.connect() as connection:
        connection.insert_batch([_record(1), _record(2)])
    store.clear()
    assert store.count() == 0


def test_points_in_bbox_filters_by_coordinates(store):
    with store.connect() as connection:
        connection.insert_batch([_record(1, 55.0, 83.0), _record(2, 56.5, 83.0), _record(3, 55.1, 84.5)])

    points = store.points_in_bbox(54.7, 55.2, 82.8, 83.2)
    assert [(p.lat, p.lng) for p in points] == [(55.0, 83.0)]


def test_list_properties_applies_limit_and_shape(store):
    with store.connect() as connection:
        connection.insert_batch([_record(i) for i in range(1, 6)])

    views = store.list_properties(54.7, 55.2, 82.8, 83.2, limit=2)

    assert [view.id for view in views] == [1, 2]
    assert views[0].title == "Объект недвижимости #1"
    assert views[0].property_type == "Квартира"
    assert views[0].rooms == 2
    assert views[0].area == 50.0


def test_ping_succeeds_on_reachable_store(store):
    store.ping()


def test_ping_raises_store_error_when_unreachable(tmp_path: Path):
    missing_dir = tmp_path / "missing" / "listings.db"
    unreachable = ListingStore(
        f"sqlite:///{missing_dir}",
        ping_retry=PingRetryConfig(max_attempts=2, multiplier=0.01, max_wait=0.02),
    )
    with pytest.raises(StoreError):
        unreachable.ping()
