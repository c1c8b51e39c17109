"""
Module: quotedesk_kernel.models.kv
Responsibility: ORM row for the opaque key-value store backing sessions
    and comment drafts.  Values are JSON text; the store does no schema
    migration.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotedesk_kernel.db.base import Base


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<KeyValueEntry {self.key}>"
