"""
quotedesk_kernel.domain.permissions -- Role capability policy.

Responsibility:
    Pure mapping from (role, current status) to the capabilities the UI and
    the workflow enforce.  No side effects, no failure modes.

Architecture position:
    Kernel > Domain.  Consumed by ``workflow`` (transition gating),
    ``comments`` (post/reply gating and reply visibility) and the
    services layer.

Invariants:
    - Only managers edit, approve, reject, reopen and reply.
    - Approve/reject availability is keyed only to "is this already the
      target status": an Approved quotation can still be Rejected and
      vice versa.
    - A reply is visible to viewers of the replier's role, and to managers.
"""

from __future__ import annotations

from dataclasses import dataclass

from quotedesk_kernel.domain.values import QuotationStatus, Role


def can_edit(role: Role) -> bool:
    return role == Role.MANAGER


def can_approve(role: Role, status: QuotationStatus) -> bool:
    return role == Role.MANAGER and status != QuotationStatus.APPROVED


def can_reject(role: Role, status: QuotationStatus) -> bool:
    return role == Role.MANAGER and status != QuotationStatus.REJECTED


def can_comment(role: Role) -> bool:
    return role in (Role.MANAGER, Role.SALES_REP)


def can_reply(role: Role) -> bool:
    return role == Role.MANAGER


def can_view_reply(viewer_role: Role, replier_role: Role) -> bool:
    return viewer_role == replier_role or viewer_role == Role.MANAGER


def is_read_only(role: Role) -> bool:
    return role == Role.VIEWER


def can_transition(
    role: Role, current: QuotationStatus, target: QuotationStatus
) -> bool:
    """Whether ``role`` may move a quotation in ``current`` to ``target``.

    Moving back to Pending (reopen) is an edit and needs ``can_edit``.
    """
    if target == QuotationStatus.APPROVED:
        return can_approve(role, current)
    if target == QuotationStatus.REJECTED:
        return can_reject(role, current)
    return can_edit(role)


@dataclass(frozen=True, slots=True)
class AvailableActions:
    """All capability flags for one (role, status) pair."""

    can_edit: bool
    can_approve: bool
    can_reject: bool
    can_comment: bool
    can_reply: bool


def available_actions(role: Role, status: QuotationStatus) -> AvailableActions:
    return AvailableActions(
        can_edit=can_edit(role),
        can_approve=can_approve(role, status),
        can_reject=can_reject(role, status),
        can_comment=can_comment(role),
        can_reply=can_reply(role),
    )
