from realty_map.common.models import ListingRecord, LoadSummary


def test_property_type_labels_and_apartment_default():
    assert ListingRecord(1, 55.0, 83.0, 1.0, realty_type_id=2).property_type == "Дом"
    assert ListingRecord(1, 55.0, 83.0, 1.0, realty_type_id=3).property_type == "Коммерческая"
    assert ListingRecord(1, 55.0, 83.0, 1.0, realty_type_id=99).property_type == "Квартира"


def test_to_row_matches_store_columns():
    row = ListingRecord(5, 55.0, 83.0, 2.5, name="Loft", rooms=None, area=40.0).to_row()

    assert row == {
        "id": 5,
        "title": "Loft",
        "price": 2.5,
        "latitude": 55.0,
        "longitude": 83.0,
        "property_type": "Квартира",
        "rooms": None,
        "area": 40.0,
    }


def test_usable_requires_positive_price_and_nonzero_coordinates():
    assert ListingRecord(1, 55.0, 83.0, 1.0).is_usable()
    assert not ListingRecord(1, 55.0, 0.0, 1.0).is_usable()
    assert not ListingRecord(1, 55.0, 83.0, 0.0).is_usable()
    assert not ListingRecord(1, 55.0, 83.0, -10.0).is_usable()


def test_load_summary_rate():
    summary = LoadSummary(inserted=500, batches=1, rows_read=600, elapsed_seconds=2.0)
    assert summary.records_per_second == 250.0
    assert summary.to_dict()["records_per_second"] == 250.0
    assert LoadSummary(inserted=0, batches=0, rows_read=0, elapsed_seconds=0.0).records_per_second == 0.0
