"""SQLAlchemy table definitions for the listing store."""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Float, Index, Integer, MetaData, String, Table, Text

metadata = MetaData()

properties = Table(
    "properties",
    metadata,
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=False),
    Column("title", Text, nullable=False),
    Column("price", Float, nullable=False),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    Column("property_type", String(50), nullable=False),
    Column("rooms", Integer, nullable=True),
    Column("area", Float, nullable=True),
    Index("ix_properties_longitude_latitude", "longitude", "latitude"),
)
