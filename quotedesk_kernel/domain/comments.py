"""
Comment thread operations (``quotedesk_kernel.domain.comments``).

Responsibility
--------------
Appends comments and replies to a quotation and filters replies per viewer.
Visibility is a read-time filter: every reply is stored, and what a viewer
sees is evaluated each time the thread is read.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  Uses ``permissions`` for
capability checks only.

Invariants enforced
-------------------
* Comment ids are unique per quotation and strictly increasing in creation
  order; reply ids likewise within their comment.
* Text is non-empty after trimming and stored trimmed.
* Comments and replies are immutable once created.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from quotedesk_kernel.domain import permissions
from quotedesk_kernel.domain.quotation import Comment, Quotation, Reply
from quotedesk_kernel.domain.values import Role
from quotedesk_kernel.exceptions import (
    CommentNotFoundError,
    CommentNotPermittedError,
    EmptyTextError,
)


def _clean_text(text: str, field: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise EmptyTextError(field)
    return cleaned


def add_comment(
    quotation: Quotation,
    author: str,
    role: Role,
    text: str,
    now: datetime,
) -> tuple[Quotation, Comment]:
    """Append a new top-level comment.

    Raises:
        EmptyTextError: text is blank.
        CommentNotPermittedError: role may not comment.
    """
    cleaned = _clean_text(text, "comment")
    if not permissions.can_comment(role):
        raise CommentNotPermittedError(role.value, "comment")

    updated = quotation.touched(now)
    comment = Comment(
        id=quotation.next_comment_id(),
        author=author,
        role=role,
        text=cleaned,
        timestamp=updated.last_updated,
    )
    return replace(updated, comments=quotation.comments + (comment,)), comment


def add_reply(
    quotation: Quotation,
    comment_id: int,
    author: str,
    role: Role,
    text: str,
    now: datetime,
) -> tuple[Quotation, Reply]:
    """Append a reply under ``comment_id``.

    Raises:
        CommentNotFoundError: no such comment on the quotation.
        EmptyTextError: text is blank.
        CommentNotPermittedError: role may not reply.
    """
    parent = quotation.comment(comment_id)
    if parent is None:
        raise CommentNotFoundError(quotation.id, comment_id)
    cleaned = _clean_text(text, "reply")
    if not permissions.can_reply(role):
        raise CommentNotPermittedError(role.value, "reply")

    updated = quotation.touched(now)
    reply = Reply(
        id=parent.next_reply_id(),
        author=author,
        role=role,
        text=cleaned,
        timestamp=updated.last_updated,
    )
    new_parent = replace(parent, replies=parent.replies + (reply,))
    comments = tuple(new_parent if c.id == comment_id else c for c in quotation.comments)
    return replace(updated, comments=comments), reply


def visible_replies(comment: Comment, viewer_role: Role) -> tuple[Reply, ...]:
    """Replies of ``comment`` that ``viewer_role`` may see, in order."""
    return tuple(
        r for r in comment.replies if permissions.can_view_reply(viewer_role, r.role)
    )


def thread_for_viewer(quotation: Quotation, viewer_role: Role) -> Quotation:
    """Copy of ``quotation`` whose comments carry only visible replies."""
    return replace(
        quotation,
        comments=tuple(
            replace(c, replies=visible_replies(c, viewer_role))
            for c in quotation.comments
        ),
    )
