"""Data models shared by ingestion, storage, and clustering."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Tuple

from realty_map.common.constants import APARTMENT_TYPE_ID, PROPERTY_TYPE_LABELS, TITLE_PLACEHOLDER


@dataclass(frozen=True)
class ListingRecord:
    """One parsed listing row, before persistence."""

    id: int
    geo_lat: float
    geo_lng: float
    price: float
    name: str = ""
    rooms: int | None = None
    area: float | None = None
    realty_type_id: int = APARTMENT_TYPE_ID

    @property
    def title(self) -> str:
        if self.name:
            return self.name
        return TITLE_PLACEHOLDER.format(id=self.id)

    @property
    def property_type(self) -> str:
        return PROPERTY_TYPE_LABELS.get(self.realty_type_id, PROPERTY_TYPE_LABELS[APARTMENT_TYPE_ID])

    def is_usable(self) -> bool:
        # Zero coordinates mean the listing was never geocoded.
        return self.geo_lat != 0 and self.geo_lng != 0 and self.price > 0

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "latitude": self.geo_lat,
            "longitude": self.geo_lng,
            "property_type": self.property_type,
            "rooms": self.rooms,
            "area": self.area,
        }


Batch = Tuple[ListingRecord, ...]


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float
    price: float


@dataclass(frozen=True)
class Viewport:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


@dataclass(frozen=True)
class ClusterSummary:
    cluster_id: str
    center_lat: float
    center_lng: float
    point_count: int
    avg_price: float
    min_price: float
    max_price: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PropertyView:
    id: int
    title: str
    price: float
    latitude: float
    longitude: float
    property_type: str
    rooms: int | None
    area: float | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BatchOutcome:
    worker_id: int
    size: int
    inserted: int
    committed: bool


@dataclass(frozen=True)
class LoadSummary:
    inserted: int
    batches: int
    rows_read: int
    elapsed_seconds: float

    @property
    def records_per_second(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.inserted / self.elapsed_seconds

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["records_per_second"] = round(self.records_per_second, 2)
        return payload
