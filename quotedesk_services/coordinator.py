"""
quotedesk_services.coordinator -- Optimistic update coordinator.

Responsibility:
    Keeps perceived latency near zero for status changes.  A requested
    status is applied to every displayed copy of the quotation before the
    repository answers; the authoritative record then replaces the copies,
    or on failure the prior status is restored.  Also drives list/detail
    loading, detail edits and comment/reply posting for a single client.

Architecture position:
    Services layer.  Depends on QuotationRepository, StatusWorkflowService,
    DisplayedQuotations and (optionally) DraftAutoSaver.

Invariants enforced:
    - Validation and authorization failures are raised before any displayed
      copy or stored record is touched.
    - After every completed change the displayed status equals either the
      authoritative value or the value shown before the optimistic update.
      ``status_history`` on displayed copies is only ever replaced by an
      authoritative record, never edited locally.
    - Last response wins: concurrent requests for the same id are neither
      queued nor cancelled.

Failure modes:
    Every QuotationKernelError is converted into a failed ``Outcome`` plus an
    error ``Notice``; nothing is re-raised and no retry is attempted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Generic, TypeVar

from quotedesk_kernel.domain import permissions
from quotedesk_kernel.domain.quotation import (
    Comment,
    Quotation,
    QuotationUpdate,
    Reply,
    validate_amount,
    validate_client,
)
from quotedesk_kernel.domain.values import Actor, QuotationStatus
from quotedesk_kernel.exceptions import (
    CommentNotPermittedError,
    EmptyTextError,
    QuotationKernelError,
    UnauthorizedEditError,
)
from quotedesk_kernel.logging_config import LogContext, get_logger
from quotedesk_services.drafts import DraftAutoSaver
from quotedesk_services.quotation_repository import (
    DEFAULT_PAGE_SIZE,
    QuotationFilter,
    QuotationRepository,
)
from quotedesk_services.status_workflow import StatusWorkflowService
from quotedesk_services.views import DisplayedQuotations

logger = get_logger("services.coordinator")

T = TypeVar("T")

NOTICE_SUCCESS = "success"
NOTICE_ERROR = "error"
NOTICE_LOADING = "loading"


@dataclass(frozen=True)
class Notice:
    """User-facing message relayed to whatever renders notifications."""

    kind: str
    message: str
    quotation_id: str | None = None


@dataclass(frozen=True)
class Outcome(Generic[T]):
    ok: bool
    value: T | None = None
    error: QuotationKernelError | None = None


class OptimisticUpdateCoordinator:
    """Client-side orchestration over displayed quotation copies."""

    def __init__(
        self,
        repository: QuotationRepository,
        workflow: StatusWorkflowService | None = None,
        view: DisplayedQuotations | None = None,
        drafts: DraftAutoSaver | None = None,
        notice_sink: Callable[[Notice], None] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._repository = repository
        self._workflow = workflow or StatusWorkflowService(repository)
        self.view = view or DisplayedQuotations(items_per_page=page_size)
        self._drafts = drafts
        self._notice_sink = notice_sink
        self.notices: list[Notice] = []

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def _notify(self, kind: str, message: str, quotation_id: str | None = None) -> None:
        notice = Notice(kind=kind, message=message, quotation_id=quotation_id)
        self.notices.append(notice)
        if self._notice_sink is not None:
            self._notice_sink(notice)

    def _fail(self, exc: QuotationKernelError, quotation_id: str | None, **extra: Any) -> Outcome:
        logger.warning(
            "operation_failed",
            extra={"quotation_id": quotation_id, "exc_code": exc.code, **extra},
        )
        self._notify(NOTICE_ERROR, str(exc), quotation_id)
        return Outcome(ok=False, error=exc)

    # ------------------------------------------------------------------
    # List and detail loading
    # ------------------------------------------------------------------

    async def load_list(self, page: int | None = None) -> Outcome:
        state = self.view.list
        requested = page if page is not None else state.current_page
        try:
            result = await self._repository.list(
                state.filter, requested, state.items_per_page
            )
        except QuotationKernelError as exc:
            return self._fail(exc, None)
        self.view.show_page(result)
        return Outcome(ok=True, value=result)

    async def set_search(self, search: str | None) -> Outcome:
        """Change the search text and reload from page 1."""
        state = self.view.list
        state.filter = QuotationFilter(search=(search or "").strip() or None, status=state.filter.status)
        return await self.load_list(page=1)

    async def set_status_filter(self, status: QuotationStatus | str | None) -> Outcome:
        """Change the status filter (``"all"`` clears it) and reload from page 1."""
        state = self.view.list
        try:
            parsed = QuotationFilter.parse(state.filter.search, status)
        except QuotationKernelError as exc:
            return self._fail(exc, None)
        state.filter = parsed
        return await self.load_list(page=1)

    async def go_to_page(self, page: int) -> Outcome:
        return await self.load_list(page=page)

    async def open(self, quotation_id: str) -> Outcome:
        try:
            quotation = await self._repository.get(quotation_id)
        except QuotationKernelError as exc:
            self.view.show_detail(None)
            return self._fail(exc, quotation_id)
        self.view.show_detail(quotation)
        return Outcome(ok=True, value=quotation)

    def close(self) -> None:
        self.view.show_detail(None)

    # ------------------------------------------------------------------
    # Status change
    # ------------------------------------------------------------------

    async def change_status(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        actor: Actor,
        reason: str | None = None,
    ) -> Outcome:
        with LogContext.bind(
            quotation_id=quotation_id,
            actor=actor.name,
            role=actor.role.value,
            operation="change_status",
        ):
            try:
                shown = self.view.find(quotation_id)
                if shown is None:
                    shown = await self._repository.get(quotation_id)
                self._workflow.authorize(shown, new_status, actor)
            except QuotationKernelError as exc:
                return self._fail(exc, quotation_id)

            previous_status = shown.status
            self.view.apply_status(quotation_id, new_status)
            logger.info(
                "optimistic_status_applied",
                extra={
                    "from_status": previous_status.value,
                    "to_status": new_status.value,
                },
            )
            self._notify(NOTICE_LOADING, "Updating status...", quotation_id)

            try:
                updated = await self._workflow.submit(
                    quotation_id, new_status, actor, reason
                )
            except QuotationKernelError as exc:
                self.view.apply_status(quotation_id, previous_status)
                logger.warning(
                    "optimistic_rollback",
                    extra={
                        "restored_status": previous_status.value,
                        "attempted_status": new_status.value,
                        "exc_code": exc.code,
                    },
                )
                self._notify(NOTICE_ERROR, str(exc), quotation_id)
                return Outcome(ok=False, error=exc)

            self.view.replace_record(updated)
            logger.info(
                "optimistic_status_confirmed",
                extra={"status": updated.status.value},
            )
            self._notify(
                NOTICE_SUCCESS,
                f"Quotation {updated.status.value.lower()} successfully",
                quotation_id,
            )
            return Outcome(ok=True, value=updated)

    async def approve(self, quotation_id: str, actor: Actor) -> Outcome:
        return await self.change_status(quotation_id, QuotationStatus.APPROVED, actor)

    async def reject(
        self, quotation_id: str, actor: Actor, reason: str | None = None
    ) -> Outcome:
        return await self.change_status(
            quotation_id, QuotationStatus.REJECTED, actor, reason
        )

    # ------------------------------------------------------------------
    # Detail edits (non-optimistic)
    # ------------------------------------------------------------------

    async def update_details(
        self,
        quotation_id: str,
        actor: Actor,
        *,
        client: str | None = None,
        amount: Decimal | int | str | None = None,
        description: str | None = None,
    ) -> Outcome:
        try:
            if not permissions.can_edit(actor.role):
                raise UnauthorizedEditError(actor.role.value)
            changes = QuotationUpdate(
                client=validate_client(client) if client is not None else None,
                amount=validate_amount(amount) if amount is not None else None,
                description=description,
            )
            updated = await self._repository.update(quotation_id, changes, actor)
        except QuotationKernelError as exc:
            return self._fail(exc, quotation_id, operation="update_details")

        self.view.replace_record(updated)
        self._notify(NOTICE_SUCCESS, "Quotation updated successfully", quotation_id)
        return Outcome(ok=True, value=updated)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def add_comment(self, quotation_id: str, actor: Actor, text: str) -> Outcome:
        try:
            if not (text or "").strip():
                raise EmptyTextError("comment")
            if not permissions.can_comment(actor.role):
                raise CommentNotPermittedError(actor.role.value, "comment")
            comment: Comment = await self._repository.add_comment(
                quotation_id, actor.name, actor.role, text
            )
        except QuotationKernelError as exc:
            return self._fail(exc, quotation_id, operation="add_comment")

        self.view.append_comment(quotation_id, comment)
        if self._drafts is not None:
            self._drafts.clear_comment(quotation_id)
        self._notify(NOTICE_SUCCESS, "Comment added successfully", quotation_id)
        return Outcome(ok=True, value=comment)

    async def add_reply(
        self, quotation_id: str, comment_id: int, actor: Actor, text: str
    ) -> Outcome:
        try:
            if not (text or "").strip():
                raise EmptyTextError("reply")
            if not permissions.can_reply(actor.role):
                raise CommentNotPermittedError(actor.role.value, "reply")
            reply: Reply = await self._repository.add_reply(
                quotation_id, comment_id, actor.name, actor.role, text
            )
        except QuotationKernelError as exc:
            return self._fail(exc, quotation_id, operation="add_reply")

        self.view.append_reply(quotation_id, comment_id, reply)
        if self._drafts is not None:
            self._drafts.clear_reply(quotation_id, comment_id)
        self._notify(NOTICE_SUCCESS, "Reply added successfully", quotation_id)
        return Outcome(ok=True, value=reply)

    def displayed(self, quotation_id: str) -> Quotation | None:
        return self.view.find(quotation_id)
