"""Delimited input reading with tolerant row iteration."""

from __future__ import annotations

import csv
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from realty_map.common.errors import InputError
from realty_map.common.logging import log_event


def _iter_rows(reader, logger: logging.Logger) -> Iterator[list[str]]:
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            log_event(
                logger,
                f"unreadable line {reader.line_num}: {exc}",
                level=logging.WARNING,
                stage="read",
                event="ROW_READ_FAIL",
                status="error",
                error_code="CSV_ERROR",
            )
            continue
        if not row:
            continue
        yield row


@contextmanager
def open_rows(path: Path, logger: logging.Logger, delimiter: str = ","):
    """Yield ``(header, rows)`` for the input file at ``path``."""
    try:
        f = path.open("r", encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise InputError(f"Cannot open input file {path}: {exc}") from exc

    with f:
        reader = csv.reader(f, delimiter=delimiter)
        try:
            header = next(reader)
        except StopIteration as exc:
            raise InputError(f"Input file {path} has no header row") from exc
        except csv.Error as exc:
            raise InputError(f"Cannot read header of {path}: {exc}") from exc
        yield header, _iter_rows(reader, logger)
