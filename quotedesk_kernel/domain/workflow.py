"""
Quotation status workflow (``quotedesk_kernel.domain.workflow``).

Responsibility
--------------
The status state machine: a declarative ``Workflow`` definition plus the
pure ``transition`` / ``record_transition`` functions that produce the next
quotation record and its audit entry.

Architecture position
---------------------
**Kernel domain layer** -- pure functions over frozen value objects.  ZERO
I/O; the caller supplies ``now``.

Invariants enforced
-------------------
* Every state reaches every other state; there is no terminal state.  Who
  may fire an edge is decided by ``permissions.can_transition``.
* Exactly one ``StatusHistoryEntry`` is appended per successful transition;
  existing entries are never mutated or removed.
* History ``changed_at`` and ``last_updated`` never move backwards, so the
  history stays ordered and its last entry matches the current status.
* A rejection reason is stored on ``rejection_reason``; leaving Rejected
  does not clear it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from itertools import permutations

from quotedesk_kernel.domain import permissions
from quotedesk_kernel.domain.quotation import Quotation, StatusHistoryEntry
from quotedesk_kernel.domain.values import Actor, QuotationStatus
from quotedesk_kernel.exceptions import (
    InvalidTransitionError,
    UnauthorizedTransitionError,
)


@dataclass(frozen=True)
class Transition:
    """A valid state transition in the quotation workflow."""

    from_state: QuotationStatus
    to_state: QuotationStatus
    action: str


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    ``transitions`` reference only states in ``states``;
    ``initial_state`` is a member of ``states``.
    """

    name: str
    description: str
    initial_state: QuotationStatus
    states: tuple[QuotationStatus, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[QuotationStatus, ...] = ()

    def find(
        self, from_state: QuotationStatus, to_state: QuotationStatus
    ) -> Transition | None:
        for t in self.transitions:
            if t.from_state == from_state and t.to_state == to_state:
                return t
        return None


ACTION_BY_TARGET: dict[QuotationStatus, str] = {
    QuotationStatus.APPROVED: "approve",
    QuotationStatus.REJECTED: "reject",
    QuotationStatus.PENDING: "reopen",
}

QUOTATION_WORKFLOW = Workflow(
    name="quotation_status",
    description="Quotation approval: manager approves, rejects or reopens",
    initial_state=QuotationStatus.PENDING,
    states=tuple(QuotationStatus),
    transitions=tuple(
        Transition(from_state=a, to_state=b, action=ACTION_BY_TARGET[b])
        for a, b in permutations(QuotationStatus, 2)
    ),
)


def normalize_reason(reason: str | None) -> str | None:
    """Trim a reason; a blank reason counts as absent."""
    if reason is None:
        return None
    return reason.strip() or None


def authorize(
    quotation: Quotation, new_status: QuotationStatus, actor: Actor
) -> Transition:
    """Check that ``actor`` may move ``quotation`` to ``new_status``.

    Raises:
        UnauthorizedTransitionError: the role lacks the capability for the
            current status.
        InvalidTransitionError: ``new_status`` is already the current status.
    """
    if not permissions.can_transition(actor.role, quotation.status, new_status):
        raise UnauthorizedTransitionError(
            actor.role.value, quotation.status.value, new_status.value
        )
    edge = QUOTATION_WORKFLOW.find(quotation.status, new_status)
    if edge is None:
        raise InvalidTransitionError(quotation.status.value)
    return edge


def record_transition(
    quotation: Quotation,
    new_status: QuotationStatus,
    changed_by: str,
    now: datetime,
    reason: str | None = None,
) -> Quotation:
    """Apply a status change and append its audit entry, without gating."""
    reason = normalize_reason(reason)
    previous = quotation.status_history[-1].changed_at if quotation.status_history else now
    changed_at = max(now, previous, quotation.last_updated)

    entry = StatusHistoryEntry(
        status=new_status,
        changed_by=changed_by,
        changed_at=changed_at,
        reason=reason,
    )
    rejection_reason = quotation.rejection_reason
    if new_status == QuotationStatus.REJECTED and reason is not None:
        rejection_reason = reason

    return replace(
        quotation,
        status=new_status,
        status_history=quotation.status_history + (entry,),
        rejection_reason=rejection_reason,
        last_updated=changed_at,
    )


def transition(
    quotation: Quotation,
    new_status: QuotationStatus,
    actor: Actor,
    now: datetime,
    reason: str | None = None,
) -> Quotation:
    """Gate and apply a status transition on behalf of ``actor``."""
    authorize(quotation, new_status, actor)
    return record_transition(quotation, new_status, actor.name, now, reason)
