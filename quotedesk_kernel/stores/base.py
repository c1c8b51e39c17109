"""
Abstract store interfaces.

Any backing store (in-memory map for tests, SQL database in production)
implements these interfaces.  The repository depends on ``QuotationStore``
and the session/draft services on ``KeyValueStore`` -- never on a concrete
backend -- so backends are swappable without touching service code.

Stores persist exactly what they are given: they hold the canonical
records but enforce no business rules and check no permissions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from quotedesk_kernel.domain.quotation import Quotation


class QuotationStore(ABC):
    """Persistence for canonical quotation records, keyed by id."""

    @abstractmethod
    def get(self, quotation_id: str) -> Quotation | None:
        """Return the stored record, or None when the id is unknown."""

    @abstractmethod
    def save(self, quotation: Quotation) -> None:
        """Insert or replace the record with ``quotation.id``."""

    @abstractmethod
    def list_all(self) -> list[Quotation]:
        """Return every record ordered by ascending id."""

    def __contains__(self, quotation_id: object) -> bool:
        return isinstance(quotation_id, str) and self.get(quotation_id) is not None

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """


class KeyValueStore(ABC):
    """Opaque key-value storage for JSON-serialisable values."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the decoded value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` (must be JSON-serialisable) under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
