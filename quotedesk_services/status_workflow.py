"""
quotedesk_services.status_workflow -- Status transition service.

Responsibility:
    Validates a requested status change against the permission policy and
    the workflow graph before anything is mutated, then submits the
    authoritative transition to the QuotationRepository.

Architecture position:
    Services layer.  Wraps the pure ``quotedesk_kernel.domain.workflow``
    functions around an async repository.  Used by the optimistic
    coordinator (pre-flight check + submit) and by the HTTP layer.

Failure modes:
    - UnauthorizedTransitionError / InvalidTransitionError from
      ``authorize`` (no mutation attempted).
    - QuotationNotFoundError / TransientFailureError from ``submit``.
"""

from __future__ import annotations

from quotedesk_kernel.domain import workflow
from quotedesk_kernel.domain.quotation import Quotation, QuotationUpdate
from quotedesk_kernel.domain.values import Actor, QuotationStatus
from quotedesk_kernel.domain.workflow import Transition
from quotedesk_kernel.exceptions import QuotationKernelError
from quotedesk_kernel.logging_config import get_logger
from quotedesk_services.quotation_repository import QuotationRepository

logger = get_logger("services.status_workflow")


class StatusWorkflowService:
    """Gate and execute quotation status transitions."""

    def __init__(self, repository: QuotationRepository):
        self._repository = repository

    def authorize(
        self, quotation: Quotation, new_status: QuotationStatus, actor: Actor
    ) -> Transition:
        """Synchronous pre-flight check against the given copy of the record."""
        try:
            edge = workflow.authorize(quotation, new_status, actor)
        except QuotationKernelError as exc:
            logger.info(
                "status_transition_refused",
                extra={
                    "quotation_id": quotation.id,
                    "from_status": quotation.status.value,
                    "to_status": new_status.value,
                    "role": actor.role.value,
                    "exc_code": exc.code,
                },
            )
            raise
        return edge

    async def submit(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        actor: Actor,
        reason: str | None = None,
    ) -> Quotation:
        """Send the transition to the repository and return the stored record."""
        changes = QuotationUpdate(
            status=new_status,
            rejection_reason=reason if new_status == QuotationStatus.REJECTED else None,
        )
        return await self._repository.update(quotation_id, changes, actor)

    async def transition(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        actor: Actor,
        reason: str | None = None,
    ) -> Quotation:
        """Load, authorize against the canonical record, and submit."""
        current = await self._repository.get(quotation_id)
        self.authorize(current, new_status, actor)
        return await self.submit(quotation_id, new_status, actor, reason)
