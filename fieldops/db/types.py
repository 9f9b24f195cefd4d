"""Custom SQLAlchemy column types."""
from __future__ import annotations

import uuid

from sqlalchemy.dialects.postgresql import JSONB as PGJSONB
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.dialects.sqlite import JSON as SQLiteJSON
from sqlalchemy.types import String, TypeDecorator


def JSONBType(**kwargs):
    """Return a JSONB column type compatible with SQLite for tests."""
    pg_jsonb = PGJSONB(**kwargs)
    return pg_jsonb.with_variant(SQLiteJSON(), "sqlite")


class GUID(TypeDecorator):
    """Platform-independent GUID/UUID type."""

    impl = PGUUID
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(36))
        return dialect.type_descriptor(PGUUID(as_uuid=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return uuid.UUID(str(value))


class UUIDList(TypeDecorator):
    """List of UUIDs stored as a JSON array of strings.

    Assignment membership lives in this column. Values are written as
    canonical lower-case strings so that text matching on the serialized
    array works the same on PostgreSQL and SQLite.
    """

    impl = SQLiteJSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(SQLiteJSON())
        return dialect.type_descriptor(PGJSONB())

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return [str(uuid.UUID(str(v))) for v in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return [uuid.UUID(str(v)) for v in value]
