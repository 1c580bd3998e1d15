"""Zoom-adaptive grid clustering of listing points.

Points are projected to Web-Mercator, snapped to the origin of the grid cell
they fall in, and reduced per cell. Cell edges are ``WORLD_SIZE / 2**n`` with
the origin at zero, so each zoom level's grid nests inside the previous one
and the cluster count never drops as zoom grows.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

from realty_map.clustering.projection import to_geographic, to_planar, to_planar_many
from realty_map.common.constants import DEFAULT_TILE_SIZE_PX, DEFAULT_ZOOM_OFFSET, WEB_MERCATOR_WORLD_SIZE
from realty_map.common.models import ClusterSummary, GeoPoint, Viewport

PIXELS_PER_TILE = 256


@dataclass(frozen=True)
class ClusteringSettings:
    zoom_offset: int = DEFAULT_ZOOM_OFFSET
    tile_size_px: int = DEFAULT_TILE_SIZE_PX

    @classmethod
    def from_config(cls, clustering_cfg: dict) -> "ClusteringSettings":
        return cls(zoom_offset=clustering_cfg["zoom_offset"], tile_size_px=clustering_cfg["tile_size_px"])


def cell_size(zoom: int, settings: ClusteringSettings | None = None) -> float:
    settings = settings or ClusteringSettings()
    level = zoom + settings.zoom_offset
    pixel_resolution = WEB_MERCATOR_WORLD_SIZE / (PIXELS_PER_TILE * 2.0**level)
    return pixel_resolution * settings.tile_size_px


def snap(value: float, size: float) -> float:
    return math.floor(value / size) * size


def cluster_id_for(cell_x: float, cell_y: float) -> str:
    return f"POINT({cell_x!r} {cell_y!r})"


@dataclass
class _CellAccumulator:
    count: int = 0
    price_total: float = 0.0
    min_price: float = math.inf
    max_price: float = -math.inf
    x_total: float = 0.0
    y_total: float = 0.0

    def add(self, x: float, y: float, price: float) -> None:
        self.count += 1
        self.price_total += price
        self.min_price = min(self.min_price, price)
        self.max_price = max(self.max_price, price)
        self.x_total += x
        self.y_total += y


def cluster_points(
    points: Iterable[GeoPoint],
    viewport: Viewport,
    zoom: int,
    settings: ClusteringSettings | None = None,
) -> list[ClusterSummary]:
    """Group ``points`` lying in ``viewport`` into grid clusters for ``zoom``.

    The viewport is not validated: an inverted or empty box yields no clusters.
    """
    size = cell_size(zoom, settings)
    min_x, min_y = to_planar(viewport.min_lat, viewport.min_lng)
    max_x, max_y = to_planar(viewport.max_lat, viewport.max_lng)

    points = list(points)
    xs, ys = to_planar_many([p.lat for p in points], [p.lng for p in points])

    cells: dict[tuple[float, float], _CellAccumulator] = defaultdict(_CellAccumulator)
    for point, x, y in zip(points, xs, ys):
        if not (min_x <= x <= max_x and min_y <= y <= max_y):
            continue
        cells[(snap(x, size), snap(y, size))].add(x, y, point.price)

    clusters = []
    for (cell_x, cell_y), acc in sorted(cells.items(), key=lambda item: (item[0][1], item[0][0])):
        center_lat, center_lng = to_geographic(acc.x_total / acc.count, acc.y_total / acc.count)
        clusters.append(
            ClusterSummary(
                cluster_id=cluster_id_for(cell_x, cell_y),
                center_lat=center_lat,
                center_lng=center_lng,
                point_count=acc.count,
                avg_price=acc.price_total / acc.count,
                min_price=acc.min_price,
                max_price=acc.max_price,
            )
        )
    return clusters
