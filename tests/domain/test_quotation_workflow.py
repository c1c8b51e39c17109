"""
Tests for the status state machine (``quotedesk_kernel.domain.workflow``).

Invariants tested:
- Exactly one history entry is appended per successful transition.
- History is append-only, ordered by ``changed_at`` and its last entry
  matches the current status.
- Authorization is decided before the same-status check.
- A rejection reason survives leaving Rejected.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from quotedesk_kernel.domain import workflow
from quotedesk_kernel.domain.quotation import new_quotation
from quotedesk_kernel.domain.values import Actor, QuotationStatus, Role
from quotedesk_kernel.exceptions import (
    InvalidTransitionError,
    UnauthorizedTransitionError,
)

NOW = datetime(2025, 2, 1, 10, 0, tzinfo=timezone.utc)
MANAGER = Actor(name="Jane Smith", role=Role.MANAGER)
SALES_REP = Actor(name="John Doe", role=Role.SALES_REP)


def _pending(created_at=NOW - timedelta(days=1)):
    return new_quotation("Q-900", "Acme Corp", Decimal("100.00"), created_at)


# =========================================================================
# Workflow definition
# =========================================================================


class TestWorkflowDefinition:

    def test_every_state_reaches_every_other(self):
        for a in QuotationStatus:
            for b in QuotationStatus:
                edge = workflow.QUOTATION_WORKFLOW.find(a, b)
                assert (edge is None) is (a == b)

    def test_no_terminal_states(self):
        assert workflow.QUOTATION_WORKFLOW.terminal_states == ()

    def test_actions_named_by_target(self):
        edge = workflow.QUOTATION_WORKFLOW.find(
            QuotationStatus.PENDING, QuotationStatus.REJECTED
        )
        assert edge.action == "reject"


# =========================================================================
# transition()
# =========================================================================


class TestTransition:

    def test_manager_approves_pending(self):
        q = _pending()
        result = workflow.transition(q, QuotationStatus.APPROVED, MANAGER, NOW)

        assert result.status == QuotationStatus.APPROVED
        assert len(result.status_history) == 2
        entry = result.status_history[-1]
        assert entry.status == QuotationStatus.APPROVED
        assert entry.changed_by == "Jane Smith"
        assert entry.changed_at == NOW
        assert entry.reason is None
        assert result.last_updated == NOW

    def test_original_record_untouched(self):
        q = _pending()
        workflow.transition(q, QuotationStatus.APPROVED, MANAGER, NOW)
        assert q.status == QuotationStatus.PENDING
        assert len(q.status_history) == 1

    def test_sales_rep_cannot_approve(self):
        with pytest.raises(UnauthorizedTransitionError) as exc_info:
            workflow.transition(_pending(), QuotationStatus.APPROVED, SALES_REP, NOW)
        assert exc_info.value.role == "sales_rep"
        assert exc_info.value.to_status == "Approved"

    def test_same_status_is_invalid_for_manager(self):
        with pytest.raises(InvalidTransitionError, match="already Pending"):
            workflow.transition(_pending(), QuotationStatus.PENDING, MANAGER, NOW)

    def test_unauthorized_checked_before_same_status(self):
        approved = workflow.transition(_pending(), QuotationStatus.APPROVED, MANAGER, NOW)
        with pytest.raises(UnauthorizedTransitionError):
            workflow.transition(approved, QuotationStatus.APPROVED, SALES_REP, NOW)

    def test_reapproving_is_refused_as_unauthorized(self):
        approved = workflow.transition(_pending(), QuotationStatus.APPROVED, MANAGER, NOW)
        with pytest.raises(UnauthorizedTransitionError):
            workflow.transition(approved, QuotationStatus.APPROVED, MANAGER, NOW)

    def test_reject_stores_trimmed_reason(self):
        result = workflow.transition(
            _pending(), QuotationStatus.REJECTED, MANAGER, NOW, reason="  Too costly  "
        )
        assert result.rejection_reason == "Too costly"
        assert result.status_history[-1].reason == "Too costly"

    def test_blank_reason_counts_as_absent(self):
        result = workflow.transition(
            _pending(), QuotationStatus.REJECTED, MANAGER, NOW, reason="   "
        )
        assert result.rejection_reason is None
        assert result.status_history[-1].reason is None

    def test_leaving_rejected_keeps_reason(self):
        rejected = workflow.transition(
            _pending(), QuotationStatus.REJECTED, MANAGER, NOW, reason="Pricing"
        )
        approved = workflow.transition(
            rejected, QuotationStatus.APPROVED, MANAGER, NOW + timedelta(hours=1)
        )
        assert approved.rejection_reason == "Pricing"

    def test_manager_can_reopen(self):
        approved = workflow.transition(_pending(), QuotationStatus.APPROVED, MANAGER, NOW)
        reopened = workflow.transition(approved, QuotationStatus.PENDING, MANAGER, NOW)
        assert reopened.status == QuotationStatus.PENDING

    def test_changed_at_never_moves_backwards(self):
        q = _pending(created_at=NOW)
        earlier = NOW - timedelta(hours=3)
        result = workflow.transition(q, QuotationStatus.APPROVED, MANAGER, earlier)
        assert result.status_history[-1].changed_at == NOW
        assert result.last_updated == NOW


# =========================================================================
# History invariant over arbitrary transition sequences
# =========================================================================


class TestHistoryInvariant:

    @given(
        targets=st.lists(st.sampled_from(list(QuotationStatus)), max_size=12),
        gaps=st.lists(st.integers(min_value=-3600, max_value=3600), min_size=12, max_size=12),
    )
    def test_history_grows_ordered_and_tracks_status(self, targets, gaps):
        q = _pending()
        now = NOW
        for target, gap in zip(targets, gaps):
            now = now + timedelta(seconds=gap)
            before = len(q.status_history)
            try:
                q = workflow.transition(q, target, MANAGER, now)
            except (InvalidTransitionError, UnauthorizedTransitionError):
                assert len(q.status_history) == before
                continue
            assert len(q.status_history) == before + 1

            stamps = [e.changed_at for e in q.status_history]
            assert stamps == sorted(stamps)
            assert q.status_history[-1].status == q.status
            assert q.last_updated >= stamps[-1]
