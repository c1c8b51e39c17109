"""
Quotation aggregate -- frozen value objects for quotations and their thread.

Responsibility:
    Defines the Quotation record with its line items, append-only status
    history and comment thread, plus the partial-update value object used
    by the repository and the field validation applied to direct edits.

Architecture position:
    Kernel > Domain -- pure value objects.  ZERO I/O.  Mutation is always
    ``dataclasses.replace`` producing a new record; the canonical copy is
    owned by the store, displayed copies by the coordinator.

Invariants enforced:
    * ``status_history`` is ordered by ``changed_at`` and its last entry's
      status equals the quotation's status (maintained by ``workflow``).
    * ``last_updated`` never moves backwards (``touched``).
    * ``client`` is non-blank and ``amount`` is positive for every edit.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from quotedesk_kernel.domain.values import QuotationStatus, Role, to_money
from quotedesk_kernel.exceptions import (
    BlankClientError,
    InvalidAmountError,
    NonPositiveAmountError,
)


@dataclass(frozen=True)
class LineItem:
    """A single priced line of a quotation. ``amount`` is always qty x rate."""

    sr: int
    item: str
    sku: str
    qty: Decimal
    unit: str
    rate: Decimal

    @property
    def amount(self) -> Decimal:
        return to_money(self.qty * self.rate)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One audit-trail record. Never mutated or removed once appended."""

    status: QuotationStatus
    changed_by: str
    changed_at: datetime
    reason: str | None = None


@dataclass(frozen=True)
class Reply:
    id: int
    author: str
    role: Role
    text: str
    timestamp: datetime


@dataclass(frozen=True)
class Comment:
    id: int
    author: str
    role: Role
    text: str
    timestamp: datetime
    replies: tuple[Reply, ...] = ()

    def next_reply_id(self) -> int:
        return max((r.id for r in self.replies), default=0) + 1


@dataclass(frozen=True)
class Quotation:
    """A priced proposal to a client, carrying a status and audit trail."""

    id: str
    client: str
    amount: Decimal
    status: QuotationStatus
    last_updated: datetime
    description: str | None = None
    line_items: tuple[LineItem, ...] = ()
    subtotal: Decimal | None = None
    gst: Decimal | None = None
    freight: Decimal | None = None
    rejection_reason: str | None = None
    status_history: tuple[StatusHistoryEntry, ...] = ()
    comments: tuple[Comment, ...] = ()

    def comment(self, comment_id: int) -> Comment | None:
        for c in self.comments:
            if c.id == comment_id:
                return c
        return None

    def next_comment_id(self) -> int:
        return max((c.id for c in self.comments), default=0) + 1

    def components_total(self) -> Decimal | None:
        """subtotal + gst + freight when all three are present."""
        if self.subtotal is None or self.gst is None or self.freight is None:
            return None
        return to_money(self.subtotal + self.gst + self.freight)

    def touched(self, now: datetime) -> Quotation:
        """Return a copy with ``last_updated`` refreshed, never moving backwards."""
        return replace(self, last_updated=max(now, self.last_updated))


@dataclass(frozen=True)
class QuotationUpdate:
    """Partial fields for ``QuotationRepository.update``.

    ``None`` means "leave unchanged".
    """

    status: QuotationStatus | None = None
    client: str | None = None
    amount: Decimal | None = None
    description: str | None = None
    rejection_reason: str | None = None

    def changes(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in (
                ("status", self.status),
                ("client", self.client),
                ("amount", self.amount),
                ("description", self.description),
                ("rejection_reason", self.rejection_reason),
            )
            if value is not None
        }

    def touches_details(self) -> bool:
        return any(
            v is not None for v in (self.client, self.amount, self.description)
        )


def validate_client(client: str) -> str:
    cleaned = client.strip()
    if not cleaned:
        raise BlankClientError()
    return cleaned


def validate_amount(amount: Decimal | int | str | float) -> Decimal:
    """Positive, finite amount at currency scale.

    Raises InvalidAmountError for unparseable text, NaN and infinities.
    """
    try:
        raw = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidAmountError(amount) from None
    if not raw.is_finite():
        raise InvalidAmountError(amount)
    value = to_money(raw)
    if value <= 0:
        raise NonPositiveAmountError(amount)
    return value


def new_quotation(
    quotation_id: str,
    client: str,
    amount: Decimal | int | str,
    created_at: datetime,
    *,
    created_by: str = "System",
    description: str | None = None,
    line_items: tuple[LineItem, ...] = (),
    subtotal: Decimal | None = None,
    gst: Decimal | None = None,
    freight: Decimal | None = None,
) -> Quotation:
    """Build a Pending quotation with its single initial history entry."""
    return Quotation(
        id=quotation_id,
        client=validate_client(client),
        amount=validate_amount(amount),
        status=QuotationStatus.PENDING,
        last_updated=created_at,
        description=description,
        line_items=line_items,
        subtotal=subtotal,
        gst=gst,
        freight=freight,
        status_history=(
            StatusHistoryEntry(
                status=QuotationStatus.PENDING,
                changed_by=created_by,
                changed_at=created_at,
            ),
        ),
    )
