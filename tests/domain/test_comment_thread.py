"""
Tests for comment/reply operations (``quotedesk_kernel.domain.comments``).

Invariants tested:
- Comment ids strictly increase per quotation; reply ids per comment.
- Text is trimmed and must be non-empty.
- Visibility is a read-time filter; every reply stays stored.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from quotedesk_kernel.domain import comments
from quotedesk_kernel.domain.quotation import new_quotation
from quotedesk_kernel.domain.values import QuotationStatus, Role
from quotedesk_kernel.exceptions import (
    CommentNotFoundError,
    CommentNotPermittedError,
    EmptyTextError,
)

NOW = datetime(2025, 2, 1, 10, 0, tzinfo=timezone.utc)


def _quotation():
    return new_quotation("Q-900", "Acme Corp", Decimal("100"), NOW - timedelta(days=1))


# =========================================================================
# add_comment
# =========================================================================


class TestAddComment:

    def test_appends_trimmed_comment(self):
        q, comment = comments.add_comment(
            _quotation(), "John Doe", Role.SALES_REP, "  Need discount  ", NOW
        )
        assert comment.id == 1
        assert comment.text == "Need discount"
        assert comment.replies == ()
        assert comment.timestamp == NOW
        assert q.comments == (comment,)
        assert q.last_updated == NOW

    def test_status_untouched(self):
        q, _ = comments.add_comment(_quotation(), "J", Role.MANAGER, "hi", NOW)
        assert q.status == QuotationStatus.PENDING
        assert len(q.status_history) == 1

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_text_rejected(self, text):
        with pytest.raises(EmptyTextError):
            comments.add_comment(_quotation(), "J", Role.MANAGER, text, NOW)

    def test_viewer_may_not_comment(self):
        with pytest.raises(CommentNotPermittedError) as exc_info:
            comments.add_comment(_quotation(), "V", Role.VIEWER, "hello", NOW)
        assert exc_info.value.action == "comment"

    @given(count=st.integers(min_value=1, max_value=15))
    def test_comment_ids_strictly_increase(self, count):
        q = _quotation()
        for i in range(count):
            q, _ = comments.add_comment(q, "J", Role.SALES_REP, f"c{i}", NOW)
        ids = [c.id for c in q.comments]
        assert ids == sorted(set(ids))
        assert len(ids) == count


# =========================================================================
# add_reply
# =========================================================================


class TestAddReply:

    def _with_comment(self):
        return comments.add_comment(_quotation(), "John Doe", Role.SALES_REP, "Q?", NOW)

    def test_manager_replies(self):
        q, comment = self._with_comment()
        q, reply = comments.add_reply(q, comment.id, "Jane Smith", Role.MANAGER, " OK ", NOW)
        assert reply.id == 1
        assert reply.text == "OK"
        assert q.comment(comment.id).replies == (reply,)

    def test_unknown_comment_is_not_found(self):
        q, _ = self._with_comment()
        with pytest.raises(CommentNotFoundError) as exc_info:
            comments.add_reply(q, 999, "Jane", Role.MANAGER, "OK", NOW)
        assert exc_info.value.comment_id == 999

    def test_not_found_before_text_validation(self):
        q, _ = self._with_comment()
        with pytest.raises(CommentNotFoundError):
            comments.add_reply(q, 999, "Jane", Role.MANAGER, "", NOW)

    def test_sales_rep_may_not_reply(self):
        q, comment = self._with_comment()
        with pytest.raises(CommentNotPermittedError):
            comments.add_reply(q, comment.id, "John", Role.SALES_REP, "me too", NOW)

    @given(count=st.integers(min_value=1, max_value=10))
    def test_reply_ids_strictly_increase(self, count):
        q, comment = self._with_comment()
        for i in range(count):
            q, _ = comments.add_reply(q, comment.id, "Jane", Role.MANAGER, f"r{i}", NOW)
        ids = [r.id for r in q.comment(comment.id).replies]
        assert ids == list(range(1, count + 1))


# =========================================================================
# Visibility
# =========================================================================


class TestVisibility:

    def test_manager_reply_visible_only_to_managers(self):
        q, comment = comments.add_comment(_quotation(), "John", Role.SALES_REP, "Q?", NOW)
        q, _ = comments.add_reply(q, comment.id, "Jane", Role.MANAGER, "A.", NOW)
        stored = q.comment(comment.id)

        assert len(comments.visible_replies(stored, Role.MANAGER)) == 1
        assert comments.visible_replies(stored, Role.VIEWER) == ()
        assert comments.visible_replies(stored, Role.SALES_REP) == ()
        assert len(stored.replies) == 1

    def test_thread_for_viewer_filters_every_comment(self, seed_quotations):
        q101 = next(q for q in seed_quotations if q.id == "Q-101")
        filtered = comments.thread_for_viewer(q101, Role.VIEWER)
        assert all(c.replies == () for c in filtered.comments)
        assert len(q101.comments[0].replies) == 1
