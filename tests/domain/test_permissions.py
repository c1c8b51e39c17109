"""
Tests for the role capability policy (``quotedesk_kernel.domain.permissions``).

Covers every capability function over the full role x status matrix, the
toggle semantics of approve/reject, reply visibility and the bundled
``available_actions`` view.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from quotedesk_kernel.domain import permissions
from quotedesk_kernel.domain.values import QuotationStatus, Role

roles = st.sampled_from(list(Role))
statuses = st.sampled_from(list(QuotationStatus))
non_managers = st.sampled_from([Role.SALES_REP, Role.VIEWER])


# =========================================================================
# Approve / reject
# =========================================================================


class TestApproveReject:

    @given(role=non_managers, status=statuses)
    def test_non_managers_never_approve_or_reject(self, role, status):
        assert permissions.can_approve(role, status) is False
        assert permissions.can_reject(role, status) is False

    @given(status=statuses)
    def test_manager_approves_unless_already_approved(self, status):
        expected = status != QuotationStatus.APPROVED
        assert permissions.can_approve(Role.MANAGER, status) is expected

    @given(status=statuses)
    def test_manager_rejects_unless_already_rejected(self, status):
        expected = status != QuotationStatus.REJECTED
        assert permissions.can_reject(Role.MANAGER, status) is expected

    def test_approved_quotation_can_still_be_rejected(self):
        assert permissions.can_reject(Role.MANAGER, QuotationStatus.APPROVED)

    def test_rejected_quotation_can_still_be_approved(self):
        assert permissions.can_approve(Role.MANAGER, QuotationStatus.REJECTED)


# =========================================================================
# Edit / comment / reply
# =========================================================================


class TestEditCommentReply:

    @pytest.mark.parametrize(
        "role, edit, comment, reply",
        [
            (Role.MANAGER, True, True, True),
            (Role.SALES_REP, False, True, False),
            (Role.VIEWER, False, False, False),
        ],
    )
    def test_capabilities_by_role(self, role, edit, comment, reply):
        assert permissions.can_edit(role) is edit
        assert permissions.can_comment(role) is comment
        assert permissions.can_reply(role) is reply

    def test_only_viewer_is_read_only(self):
        assert [r for r in Role if permissions.is_read_only(r)] == [Role.VIEWER]


# =========================================================================
# Reply visibility
# =========================================================================


class TestReplyVisibility:

    @given(viewer=roles, replier=roles)
    def test_visible_iff_same_role_or_manager(self, viewer, replier):
        expected = viewer == replier or viewer == Role.MANAGER
        assert permissions.can_view_reply(viewer, replier) is expected

    def test_sales_rep_reply_hidden_from_viewer(self):
        assert permissions.can_view_reply(Role.SALES_REP, Role.SALES_REP)
        assert permissions.can_view_reply(Role.MANAGER, Role.SALES_REP)
        assert not permissions.can_view_reply(Role.VIEWER, Role.SALES_REP)


# =========================================================================
# Transitions and bundled actions
# =========================================================================


class TestTransitionsAndActions:

    @given(role=roles, current=statuses)
    def test_reopen_requires_edit(self, role, current):
        assert permissions.can_transition(
            role, current, QuotationStatus.PENDING
        ) is permissions.can_edit(role)

    @given(role=roles, status=statuses)
    def test_available_actions_matches_individual_checks(self, role, status):
        actions = permissions.available_actions(role, status)
        assert actions.can_edit is permissions.can_edit(role)
        assert actions.can_approve is permissions.can_approve(role, status)
        assert actions.can_reject is permissions.can_reject(role, status)
        assert actions.can_comment is permissions.can_comment(role)
        assert actions.can_reply is permissions.can_reply(role)
