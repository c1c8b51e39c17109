"""Storage abstraction with in-memory and SQL backends."""

from quotedesk_kernel.stores.base import KeyValueStore, QuotationStore
from quotedesk_kernel.stores.memory import InMemoryKeyValueStore, InMemoryQuotationStore
from quotedesk_kernel.stores.sql import SqlKeyValueStore, SqlQuotationStore

__all__ = [
    "InMemoryKeyValueStore",
    "InMemoryQuotationStore",
    "KeyValueStore",
    "QuotationStore",
    "SqlKeyValueStore",
    "SqlQuotationStore",
]
