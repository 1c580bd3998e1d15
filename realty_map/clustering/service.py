"""Query API: parameter validation plus cluster and property lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from realty_map.clustering.grid import ClusteringSettings, cluster_points
from realty_map.common.constants import DEFAULT_PROPERTY_LIMIT, MAX_ZOOM
from realty_map.common.errors import QueryError
from realty_map.common.models import ClusterSummary, PropertyView, Viewport

BBOX_PARAMS = ("min_lat", "max_lat", "min_lng", "max_lng")


@dataclass(frozen=True)
class ClusterQuery:
    viewport: Viewport
    zoom: int


@dataclass(frozen=True)
class PropertyQuery:
    viewport: Viewport
    limit: int = DEFAULT_PROPERTY_LIMIT


def _parse_float(params: Mapping[str, object], name: str) -> float:
    raw = params.get(name)
    if raw is None or raw == "":
        raise QueryError(f"Missing parameter: {name}")
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise QueryError(f"Invalid parameter {name}: {raw!r}") from exc


def _parse_int(params: Mapping[str, object], name: str) -> int:
    raw = params.get(name)
    if raw is None or raw == "":
        raise QueryError(f"Missing parameter: {name}")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise QueryError(f"Invalid parameter {name}: {raw!r}") from exc


def _parse_viewport(params: Mapping[str, object], *, reject_zero: bool) -> Viewport:
    values = {name: _parse_float(params, name) for name in BBOX_PARAMS}
    if reject_zero:
        zeros = [name for name, value in values.items() if value == 0]
        if zeros:
            raise QueryError(f"Parameters must be non-zero: {', '.join(zeros)}")
    return Viewport(**values)


def parse_cluster_query(params: Mapping[str, object]) -> ClusterQuery:
    viewport = _parse_viewport(params, reject_zero=True)
    zoom = _parse_int(params, "zoom")
    if not 0 < zoom <= MAX_ZOOM:
        raise QueryError(f"zoom must be between 1 and {MAX_ZOOM}, got {zoom}")
    return ClusterQuery(viewport=viewport, zoom=zoom)


def parse_property_query(params: Mapping[str, object], default_limit: int = DEFAULT_PROPERTY_LIMIT) -> PropertyQuery:
    viewport = _parse_viewport(params, reject_zero=False)
    limit = default_limit
    if params.get("limit") not in (None, ""):
        limit = _parse_int(params, "limit")
    if limit <= 0:
        limit = default_limit
    return PropertyQuery(viewport=viewport, limit=limit)


def get_clusters(store, query: ClusterQuery, settings: ClusteringSettings | None = None) -> list[ClusterSummary]:
    vp = query.viewport
    points = store.points_in_bbox(vp.min_lat, vp.max_lat, vp.min_lng, vp.max_lng)
    return cluster_points(points, vp, query.zoom, settings)


def get_properties(store, query: PropertyQuery) -> list[PropertyView]:
    vp = query.viewport
    return store.list_properties(vp.min_lat, vp.max_lat, vp.min_lng, vp.max_lng, limit=query.limit)
