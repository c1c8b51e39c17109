"""
quotedesk_services.quotation_repository -- Quotation backend.

Responsibility:
    CRUD and audit-trail mutation over canonical quotation records: filtered
    pagination, single reads, partial updates (status changes routed through
    the workflow), and comment/reply appends.  Abstracts the backing store
    and simulates an unreliable network backend: every call suspends for
    ``latency_seconds`` and ``update`` consults a FaultInjector.

Architecture position:
    Services layer.  Depends on a ``QuotationStore`` (kernel/stores), the
    pure domain functions and an injected Clock.

Invariants enforced:
    - Reads of the canonical record happen after the latency suspension and
      the write follows with no suspension in between, so each call applies
      to the latest stored state.
    - A status change appends exactly one history entry attributed to the
      actor, or to "Unknown User" when trusted mode allows actorless writes.
    - With ``enforce_permissions`` (the default) a status-changing write is
      re-checked against the permission policy here, not only by the caller.
    - ``last_updated`` is refreshed on every successful write and never
      moves backwards.

Failure modes:
    - QuotationNotFoundError / CommentNotFoundError for unknown ids.
    - TransientFailureError when the fault injector fires on ``update``.
    - ValidationError subclasses for blank client, non-positive amount,
      empty text, disallowed comment/reply, bad page request.
    - UnauthorizedTransitionError when enforcement rejects a status write.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Sequence

from quotedesk_kernel.domain import comments, workflow
from quotedesk_kernel.domain.clock import Clock, SystemClock
from quotedesk_kernel.domain.quotation import (
    Comment,
    Quotation,
    QuotationUpdate,
    Reply,
    validate_amount,
    validate_client,
)
from quotedesk_kernel.domain.values import (
    UNKNOWN_ACTOR_NAME,
    Actor,
    QuotationStatus,
    Role,
)
from quotedesk_kernel.exceptions import (
    DuplicateQuotationError,
    InvalidPageError,
    QuotationNotFoundError,
    TransientFailureError,
    UnauthorizedTransitionError,
)
from quotedesk_kernel.logging_config import LogContext, get_logger
from quotedesk_kernel.stores.base import QuotationStore
from quotedesk_services.fault_injection import FaultInjector, NeverFail

logger = get_logger("services.quotation_repository")

DEFAULT_PAGE_SIZE = 8


@dataclass(frozen=True)
class QuotationFilter:
    """List filter. ``None`` fields do not filter."""

    search: str | None = None
    status: QuotationStatus | None = None

    @classmethod
    def parse(
        cls, search: str | None = None, status: QuotationStatus | str | None = None
    ) -> QuotationFilter:
        """Build from raw query values; status ``"all"`` or blank means no filter."""
        search = (search or "").strip() or None
        if status is None or (isinstance(status, str) and status.strip().lower() in ("", "all")):
            parsed_status = None
        else:
            parsed_status = QuotationStatus.parse(status)
        return cls(search=search, status=parsed_status)

    def matches(self, quotation: Quotation) -> bool:
        if self.status is not None and quotation.status != self.status:
            return False
        if self.search:
            needle = self.search.lower()
            return needle in quotation.client.lower() or needle in quotation.id.lower()
        return True


@dataclass(frozen=True)
class Page:
    data: tuple[Quotation, ...]
    total_items: int
    total_pages: int
    current_page: int
    items_per_page: int


def paginate(items: Sequence[Quotation], page: int, page_size: int) -> Page:
    """Slice ``items`` into page ``page`` (1-based). Pages past the end are empty."""
    if page_size <= 0 or page < 1:
        raise InvalidPageError(page, page_size)
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        data=tuple(items[start:start + page_size]),
        total_items=total,
        total_pages=-(-total // page_size),
        current_page=page,
        items_per_page=page_size,
    )


class QuotationRepository:
    """Asynchronous quotation backend over a QuotationStore."""

    def __init__(
        self,
        store: QuotationStore,
        clock: Clock | None = None,
        faults: FaultInjector | None = None,
        latency_seconds: float = 0.0,
        enforce_permissions: bool = True,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._faults = faults or NeverFail()
        self._latency_seconds = latency_seconds
        self._enforce_permissions = enforce_permissions
        self._sleep = sleep or asyncio.sleep

    @property
    def enforce_permissions(self) -> bool:
        return self._enforce_permissions

    async def _latency(self) -> None:
        await self._sleep(self._latency_seconds)

    def _require(self, quotation_id: str) -> Quotation:
        quotation = self._store.get(quotation_id)
        if quotation is None:
            raise QuotationNotFoundError(quotation_id)
        return quotation

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------

    def seed(self, quotations: Sequence[Quotation]) -> None:
        """Load externally created quotations. No latency, no fault injection."""
        for quotation in quotations:
            if quotation.id in self._store:
                raise DuplicateQuotationError(quotation.id)
            self._store.save(quotation)
        logger.info("quotations_seeded", extra={"count": len(quotations)})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(
        self,
        filter: QuotationFilter | None = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page:
        if page_size <= 0 or page < 1:
            raise InvalidPageError(page, page_size)
        await self._latency()
        criteria = filter or QuotationFilter()
        matched = [q for q in self._store.list_all() if criteria.matches(q)]
        return paginate(matched, page, page_size)

    async def get(self, quotation_id: str) -> Quotation:
        await self._latency()
        return self._require(quotation_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def update(
        self,
        quotation_id: str,
        changes: QuotationUpdate,
        actor: Actor | None = None,
    ) -> Quotation:
        """Apply partial fields and return the full updated record."""
        await self._latency()
        with LogContext.bind(
            quotation_id=quotation_id,
            operation="update",
            actor=actor.name if actor else None,
            role=actor.role.value if actor else None,
        ):
            if self._faults.should_fail("update", quotation_id):
                logger.warning(
                    "transient_failure_injected",
                    extra={"fields": sorted(changes.changes())},
                )
                raise TransientFailureError("update", quotation_id)

            current = self._require(quotation_id)
            updated = self._apply(current, changes, actor)
            self._store.save(updated)

            logger.info(
                "quotation_updated",
                extra={
                    "fields": sorted(changes.changes()),
                    "status": updated.status.value,
                    "history_length": len(updated.status_history),
                },
            )
            return updated

    def _apply(
        self, current: Quotation, changes: QuotationUpdate, actor: Actor | None
    ) -> Quotation:
        now = self._clock.now()
        updated = current
        if changes.client is not None:
            updated = replace(updated, client=validate_client(changes.client))
        if changes.amount is not None:
            updated = replace(updated, amount=validate_amount(changes.amount))
        if changes.description is not None:
            updated = replace(updated, description=changes.description)

        reason = changes.rejection_reason
        if changes.status is not None and changes.status != current.status:
            if actor is not None and self._enforce_permissions:
                updated = workflow.transition(updated, changes.status, actor, now, reason)
            elif actor is not None:
                updated = workflow.record_transition(
                    updated, changes.status, actor.name, now, reason
                )
            elif self._enforce_permissions:
                raise UnauthorizedTransitionError(
                    None, current.status.value, changes.status.value
                )
            else:
                updated = workflow.record_transition(
                    updated, changes.status, UNKNOWN_ACTOR_NAME, now, reason
                )
            logger.info(
                "status_transition_applied",
                extra={
                    "from_status": current.status.value,
                    "to_status": changes.status.value,
                    "changed_by": updated.status_history[-1].changed_by,
                },
            )
        elif workflow.normalize_reason(reason) is not None:
            updated = replace(updated, rejection_reason=workflow.normalize_reason(reason))

        return updated.touched(now)

    async def add_comment(
        self, quotation_id: str, author: str, role: Role, text: str
    ) -> Comment:
        await self._latency()
        current = self._require(quotation_id)
        updated, comment = comments.add_comment(
            current, author, role, text, self._clock.now()
        )
        self._store.save(updated)
        logger.info(
            "comment_added",
            extra={"quotation_id": quotation_id, "comment_id": comment.id, "role": role.value},
        )
        return comment

    async def add_reply(
        self, quotation_id: str, comment_id: int, author: str, role: Role, text: str
    ) -> Reply:
        await self._latency()
        current = self._require(quotation_id)
        updated, reply = comments.add_reply(
            current, comment_id, author, role, text, self._clock.now()
        )
        self._store.save(updated)
        logger.info(
            "reply_added",
            extra={
                "quotation_id": quotation_id,
                "comment_id": comment_id,
                "reply_id": reply.id,
                "role": role.value,
            },
        )
        return reply
