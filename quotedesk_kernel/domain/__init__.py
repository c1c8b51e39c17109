"""
Pure domain layer.

Value objects and state-machine logic with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Wall-clock time (a Clock is injected)
- I/O

All domain objects are immutable.
"""

from quotedesk_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from quotedesk_kernel.domain.quotation import (
    Comment,
    LineItem,
    Quotation,
    QuotationUpdate,
    Reply,
    StatusHistoryEntry,
    new_quotation,
)
from quotedesk_kernel.domain.values import (
    UNKNOWN_ACTOR_NAME,
    Actor,
    QuotationStatus,
    Role,
    User,
    to_money,
)

__all__ = [
    "Actor",
    "Clock",
    "Comment",
    "DeterministicClock",
    "LineItem",
    "Quotation",
    "QuotationStatus",
    "QuotationUpdate",
    "Reply",
    "Role",
    "StatusHistoryEntry",
    "SystemClock",
    "UNKNOWN_ACTOR_NAME",
    "User",
    "new_quotation",
    "to_money",
]
