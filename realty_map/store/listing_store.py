"""Listing store backed by SQLAlchemy Core.

One ``ListingStore`` owns an engine. Ingestion workers each take their own
``ListingConnection`` from it; the query path shares the store itself and only
ever reads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Iterable

from sqlalchemy import create_engine, delete, event, func, insert, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from realty_map.common.constants import DEFAULT_PROPERTY_LIMIT
from realty_map.common.errors import StoreError
from realty_map.common.logging import log_event
from realty_map.common.models import GeoPoint, ListingRecord, PropertyView
from realty_map.store.tables import metadata, properties

SQLITE_BUSY_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class PingRetryConfig:
    max_attempts: int = 3
    multiplier: float = 0.5
    max_wait: float = 5.0


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT handling.
    # IMMEDIATE takes the write lock up front so concurrent workers queue on
    # the busy timeout instead of failing with a lock upgrade deadlock.
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class ListingConnection:
    """A store connection owned by exactly one ingestion worker."""

    def __init__(self, connection: Connection, logger: logging.Logger) -> None:
        self.connection = connection
        self.logger = logger

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "ListingConnection":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _insert_one(self, record: ListingRecord) -> bool:
        savepoint = self.connection.begin_nested()
        try:
            self.connection.execute(insert(properties), record.to_row())
        except DBAPIError as exc:
            savepoint.rollback()
            log_event(
                self.logger,
                f"insert failed for listing {record.id}: {exc.orig}",
                level=logging.WARNING,
                stage="load",
                event="RECORD_INSERT_FAIL",
                status="error",
                error_code=type(exc).__name__,
            )
            return False
        savepoint.commit()
        return True

    def insert_batch(self, batch: Iterable[ListingRecord]) -> int:
        """Insert a batch in one transaction and return the rows persisted.

        A record whose insert fails is rolled back to its savepoint and skipped.
        Failing to open or commit the transaction raises ``StoreError``; none of
        the batch survives in that case.
        """
        try:
            transaction = self.connection.begin()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not open transaction: {exc}") from exc

        inserted = 0
        try:
            for record in batch:
                if self._insert_one(record):
                    inserted += 1
            transaction.commit()
        except SQLAlchemyError as exc:
            if transaction.is_active:
                transaction.rollback()
            raise StoreError(f"Batch transaction failed: {exc}") from exc
        return inserted


class ListingStore:
    def __init__(
        self,
        url: str,
        *,
        pool_size: int | None = None,
        ping_retry: PingRetryConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.url = url
        self.ping_retry = ping_retry or PingRetryConfig()
        self.logger = logger or logging.getLogger(__name__)

        options: dict = {}
        is_sqlite = url.startswith("sqlite")
        if is_sqlite:
            options["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
        elif pool_size is not None:
            options["pool_size"] = pool_size
            options["max_overflow"] = 0
        try:
            self.engine = create_engine(url, **options)
        except (SQLAlchemyError, ImportError) as exc:
            raise StoreError(f"Could not create engine for store: {exc}") from exc
        if is_sqlite:
            _enable_sqlite_savepoints(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "ListingStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def _ping_once(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError(f"Store is unreachable: {exc}") from exc

    def ping(self) -> None:
        @retry(
            stop=stop_after_attempt(self.ping_retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.ping_retry.multiplier,
                max=self.ping_retry.max_wait,
                jitter=0.5,
            ),
            retry=retry_if_exception_type(StoreError),
            reraise=True,
        )
        def _wrapped() -> None:
            self._ping_once()

        _wrapped()

    def create_schema(self) -> None:
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not create schema: {exc}") from exc

    def clear(self) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(properties))
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not clear listings: {exc}") from exc

    def connect(self) -> ListingConnection:
        try:
            connection = self.engine.connect()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not open store connection: {exc}") from exc
        return ListingConnection(connection, self.logger)

    def points_in_bbox(self, min_lat: float, max_lat: float, min_lng: float, max_lng: float) -> list[GeoPoint]:
        stmt = (
            select(properties.c.latitude, properties.c.longitude, properties.c.price)
            .where(
                properties.c.latitude.between(min_lat, max_lat),
                properties.c.longitude.between(min_lng, max_lng),
            )
            .order_by(properties.c.id)
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Range query failed: {exc}") from exc
        return [GeoPoint(lat=row.latitude, lng=row.longitude, price=row.price) for row in rows]

    def list_properties(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        limit: int = DEFAULT_PROPERTY_LIMIT,
    ) -> list[PropertyView]:
        stmt = (
            select(properties)
            .where(
                properties.c.latitude.between(min_lat, max_lat),
                properties.c.longitude.between(min_lng, max_lng),
            )
            .order_by(properties.c.id)
            .limit(limit)
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Property query failed: {exc}") from exc
        return [
            PropertyView(
                id=row.id,
                title=row.title,
                price=row.price,
                latitude=row.latitude,
                longitude=row.longitude,
                property_type=row.property_type,
                rooms=row.rooms,
                area=row.area,
            )
            for row in rows
        ]

    def count(self) -> int:
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(select(func.count()).select_from(properties)).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError(f"Count query failed: {exc}") from exc
