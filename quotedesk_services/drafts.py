"""
quotedesk_services.drafts -- Debounced comment/reply draft auto-save.

Responsibility:
    Holds in-progress comment and reply bodies per quotation and writes them
    to the key-value store only after ``debounce_seconds`` without further
    typing on that quotation.  A submitted field's draft is cleared at once.

Architecture position:
    Services layer.  Time comes from the injected Clock and flushing is an
    explicit ``flush_due()`` call, so no timers are tied to any UI lifecycle.

Drafts are best-effort: a failed write is logged and dropped.  They carry
no correctness invariants.

Storage layout under ``DRAFTS_KEY``::

    {"Q-101": {"comment": "...", "replies": {"1": "..."}}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from quotedesk_kernel.domain.clock import Clock, SystemClock
from quotedesk_kernel.logging_config import get_logger
from quotedesk_kernel.stores.base import KeyValueStore

logger = get_logger("services.drafts")

DRAFTS_KEY = "quotedesk_comment_drafts"
DEFAULT_DEBOUNCE_SECONDS = 2.0


@dataclass
class Draft:
    comment: str = ""
    replies: dict[int, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.comment and not any(self.replies.values())

    def to_json(self) -> dict[str, Any]:
        return {
            "comment": self.comment,
            "replies": {str(k): v for k, v in self.replies.items() if v},
        }

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> Draft:
        if not data:
            return cls()
        return cls(
            comment=data.get("comment") or "",
            replies={int(k): v for k, v in (data.get("replies") or {}).items()},
        )


@dataclass
class _Pending:
    draft: Draft
    last_typed: datetime


class DraftAutoSaver:
    """Debounced per-quotation draft persistence."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._debounce = timedelta(seconds=debounce_seconds)
        self._pending: dict[str, _Pending] = {}

    # ------------------------------------------------------------------
    # Typing
    # ------------------------------------------------------------------

    def _touch(self, quotation_id: str) -> Draft:
        pending = self._pending.get(quotation_id)
        if pending is None:
            pending = _Pending(draft=self.load(quotation_id), last_typed=self._clock.now())
            self._pending[quotation_id] = pending
        pending.last_typed = self._clock.now()
        return pending.draft

    def type_comment(self, quotation_id: str, text: str) -> None:
        self._touch(quotation_id).comment = text

    def type_reply(self, quotation_id: str, comment_id: int, text: str) -> None:
        self._touch(quotation_id).replies[comment_id] = text

    def current(self, quotation_id: str) -> Draft:
        """What the user has typed, saved or not."""
        pending = self._pending.get(quotation_id)
        return pending.draft if pending is not None else self.load(quotation_id)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read_all(self) -> dict[str, Any]:
        return self._store.get(DRAFTS_KEY) or {}

    def _write(self, quotation_id: str, draft: Draft) -> None:
        drafts = self._read_all()
        if draft.is_empty():
            drafts.pop(quotation_id, None)
        else:
            drafts[quotation_id] = draft.to_json()
        try:
            self._store.set(DRAFTS_KEY, drafts)
        except Exception:
            logger.warning(
                "draft_write_failed",
                extra={"quotation_id": quotation_id},
                exc_info=True,
            )

    def load(self, quotation_id: str) -> Draft:
        """The last persisted draft for ``quotation_id``."""
        return Draft.from_json(self._read_all().get(quotation_id))

    def flush_due(self) -> list[str]:
        """Persist drafts idle for at least the debounce window."""
        now = self._clock.now()
        due = [
            qid for qid, p in self._pending.items()
            if now - p.last_typed >= self._debounce
        ]
        for qid in due:
            self._flush(qid)
        return due

    def flush_all(self) -> list[str]:
        flushed = list(self._pending)
        for qid in flushed:
            self._flush(qid)
        return flushed

    def _flush(self, quotation_id: str) -> None:
        pending = self._pending.pop(quotation_id)
        self._write(quotation_id, pending.draft)
        logger.debug("draft_flushed", extra={"quotation_id": quotation_id})

    # ------------------------------------------------------------------
    # Clearing after submit
    # ------------------------------------------------------------------

    def clear_comment(self, quotation_id: str) -> None:
        pending = self._pending.get(quotation_id)
        if pending is not None:
            pending.draft.comment = ""
        stored = self.load(quotation_id)
        stored.comment = ""
        self._write(quotation_id, stored)

    def clear_reply(self, quotation_id: str, comment_id: int) -> None:
        pending = self._pending.get(quotation_id)
        if pending is not None:
            pending.draft.replies.pop(comment_id, None)
        stored = self.load(quotation_id)
        stored.replies.pop(comment_id, None)
        self._write(quotation_id, stored)
