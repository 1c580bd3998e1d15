"""Parse and validate listing rows from the delimited input."""

from __future__ import annotations

import math
import re
from typing import Sequence

from realty_map.common.constants import APARTMENT_TYPE_ID, REQUIRED_COLUMNS
from realty_map.common.errors import InputError, RowParseError
from realty_map.common.models import ListingRecord


def _unquote(value: str) -> str:
    return value.strip('"')


def build_column_index(header: Sequence[str]) -> dict[str, int]:
    indices = {_unquote(column): idx for idx, column in enumerate(header)}
    missing = [column for column in REQUIRED_COLUMNS if column not in indices]
    if missing:
        raise InputError(f"Missing required columns: {', '.join(missing)}")
    return indices


def _field(row: Sequence[str], indices: dict[str, int], column: str) -> str:
    idx = indices[column]
    if idx >= len(row):
        return ""
    return _unquote(row[idx])


_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _to_int(value: str) -> int | None:
    if not _INT_PATTERN.fullmatch(value):
        return None
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number


def _to_float(value: str) -> float | None:
    if not _FLOAT_PATTERN.fullmatch(value):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def _required_int(value: str, column: str) -> int:
    number = _to_int(value)
    if number is None:
        raise RowParseError(f"Invalid {column}: {value!r}")
    return number


def _required_float(value: str, column: str) -> float:
    # Blank coordinates or prices are kept as zero and filtered later.
    if value == "":
        return 0.0
    number = _to_float(value)
    if number is None:
        raise RowParseError(f"Invalid {column}: {value!r}")
    return number


def parse_row(row: Sequence[str], indices: dict[str, int]) -> ListingRecord:
    realty_type_id = _to_int(_field(row, indices, "realty_type_id"))
    return ListingRecord(
        id=_required_int(_field(row, indices, "id"), "id"),
        geo_lat=_required_float(_field(row, indices, "geo_lat"), "geo_lat"),
        geo_lng=_required_float(_field(row, indices, "geo_lng"), "geo_lng"),
        price=_required_float(_field(row, indices, "price"), "price"),
        name=_field(row, indices, "name"),
        rooms=_to_int(_field(row, indices, "rooms_type_id")),
        area=_to_float(_field(row, indices, "total_area")),
        realty_type_id=APARTMENT_TYPE_ID if realty_type_id is None else realty_type_id,
    )
