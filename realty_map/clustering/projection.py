"""Geographic <-> Web-Mercator projection."""

from __future__ import annotations

import threading
from typing import Sequence

from pyproj import CRS, Transformer

GEOGRAPHIC_EPSG = 4326
PLANAR_EPSG = 3857

_local = threading.local()


def _transformers() -> tuple[Transformer, Transformer]:
    # Transformers are not shared across threads.
    cached = getattr(_local, "transformers", None)
    if cached is None:
        forward = Transformer.from_crs(CRS.from_epsg(GEOGRAPHIC_EPSG), CRS.from_epsg(PLANAR_EPSG), always_xy=True)
        inverse = Transformer.from_crs(CRS.from_epsg(PLANAR_EPSG), CRS.from_epsg(GEOGRAPHIC_EPSG), always_xy=True)
        cached = (forward, inverse)
        _local.transformers = cached
    return cached


def to_planar(lat: float, lng: float) -> tuple[float, float]:
    forward, _inverse = _transformers()
    x, y = forward.transform(lng, lat)
    return float(x), float(y)


def to_geographic(x: float, y: float) -> tuple[float, float]:
    _forward, inverse = _transformers()
    lng, lat = inverse.transform(x, y)
    return float(lat), float(lng)


def to_planar_many(lats: Sequence[float], lngs: Sequence[float]) -> tuple[list[float], list[float]]:
    if not lats:
        return [], []
    forward, _inverse = _transformers()
    xs, ys = forward.transform(list(lngs), list(lats))
    return [float(x) for x in xs], [float(y) for y in ys]
