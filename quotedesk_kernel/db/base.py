"""
Module: quotedesk_kernel.db.base
Responsibility: Declarative base and portable column types for all ORM models.
Architecture position: Kernel > DB.  Lowest-level import target for models;
    MUST NOT import from models/, stores/ or domain/.

Invariants enforced:
    - Decimals round-trip exactly: stored as their canonical string, never
      as a binary float.
    - Timestamps are always timezone-aware UTC on load, including on
      backends (SQLite) that drop tzinfo.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class DecimalString(TypeDecorator):
    """
    Decimal stored as String(40) for exact, backend-independent precision.

    cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(Decimal(value))
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return Decimal(value)
        return None


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime normalized to UTC.

    Aware values are converted to naive UTC on bind and tagged UTC again
    on load, so comparisons against clock values never mix naive and aware.
    """

    impl = DateTime()
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("UTCDateTime requires a timezone-aware datetime")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Maps Python ``Decimal`` to DecimalString and ``datetime`` to
    UTCDateTime so every model gets the same column semantics.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: DecimalString(),
        datetime: UTCDateTime(),
    }
