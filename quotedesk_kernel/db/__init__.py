"""Database layer: declarative base, column types and engine management."""

from quotedesk_kernel.db.base import Base, DecimalString, UTCDateTime
from quotedesk_kernel.db.engine import Database

__all__ = ["Base", "Database", "DecimalString", "UTCDateTime"]
