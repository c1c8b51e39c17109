"""
SQL stores -- SQLAlchemy-backed implementations of the store interfaces.

Each call runs in its own ``Database.session_scope()`` transaction.  A
quotation save replaces the whole aggregate (children are delete-orphan
cascaded), which keeps history, comment and reply ordering exactly as the
domain object has it.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import delete, select

from quotedesk_kernel.db.engine import Database
from quotedesk_kernel.domain.clock import Clock, SystemClock
from quotedesk_kernel.domain.quotation import Quotation
from quotedesk_kernel.logging_config import get_logger
from quotedesk_kernel.models.kv import KeyValueEntry
from quotedesk_kernel.models.quotation import QuotationModel
from quotedesk_kernel.stores.base import KeyValueStore, QuotationStore

logger = get_logger("stores.sql")


class SqlQuotationStore(QuotationStore):

    def __init__(self, database: Database):
        self._db = database

    def get(self, quotation_id: str) -> Quotation | None:
        with self._db.session_scope() as session:
            model = session.get(QuotationModel, quotation_id)
            return model.to_dto() if model is not None else None

    def save(self, quotation: Quotation) -> None:
        with self._db.session_scope() as session:
            existing = session.get(QuotationModel, quotation.id)
            if existing is not None:
                session.delete(existing)
                session.flush()
            session.add(QuotationModel.from_dto(quotation))
        logger.debug("quotation_saved", extra={"quotation_id": quotation.id})

    def list_all(self) -> list[Quotation]:
        with self._db.session_scope() as session:
            rows = session.execute(
                select(QuotationModel).order_by(QuotationModel.id)
            ).scalars().all()
            return [row.to_dto() for row in rows]

    def close(self) -> None:
        self._db.dispose()


class SqlKeyValueStore(KeyValueStore):

    def __init__(self, database: Database, clock: Clock | None = None):
        self._db = database
        self._clock = clock or SystemClock()

    def get(self, key: str) -> Any | None:
        with self._db.session_scope() as session:
            entry = session.get(KeyValueEntry, key)
            return json.loads(entry.value) if entry is not None else None

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self._db.session_scope() as session:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(
                    KeyValueEntry(key=key, value=encoded, updated_at=self._clock.now())
                )
            else:
                entry.value = encoded
                entry.updated_at = self._clock.now()

    def delete(self, key: str) -> None:
        with self._db.session_scope() as session:
            session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))

    def clear(self) -> None:
        with self._db.session_scope() as session:
            session.execute(delete(KeyValueEntry))
