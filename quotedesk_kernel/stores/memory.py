"""In-memory stores -- per-instance maps, used by tests and the demo desk."""

from __future__ import annotations

import json
from typing import Any

from quotedesk_kernel.domain.quotation import Quotation
from quotedesk_kernel.stores.base import KeyValueStore, QuotationStore


class InMemoryQuotationStore(QuotationStore):
    """Quotations in a dict keyed by id.

    Records are frozen, so handing the same object to several readers is
    safe; every write replaces the entry wholesale.
    """

    def __init__(self, quotations: list[Quotation] | None = None):
        self._records: dict[str, Quotation] = {}
        for q in quotations or ():
            self.save(q)

    def get(self, quotation_id: str) -> Quotation | None:
        return self._records.get(quotation_id)

    def save(self, quotation: Quotation) -> None:
        self._records[quotation.id] = quotation

    def list_all(self) -> list[Quotation]:
        return [self._records[k] for k in sorted(self._records)]

    def __len__(self) -> int:
        return len(self._records)


class InMemoryKeyValueStore(KeyValueStore):
    """Values are kept JSON-encoded so behaviour matches the SQL store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()
