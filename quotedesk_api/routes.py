"""
HTTP routes of the quotation backend contract.

Each handler reads the Desk from ``request.app.state.desk`` and calls its
repository.  Kernel errors propagate to the app-level handler, which
answers with an ``ErrorOut`` body; the ``responses`` tables below document
those bodies in the OpenAPI schema.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from quotedesk_api.schemas import (
    CommentOut,
    ErrorOut,
    QuotationOut,
    QuotationPageOut,
    QuotationPatchIn,
    ReplyOut,
    ThreadEntryIn,
)
from quotedesk_kernel.domain.comments import thread_for_viewer
from quotedesk_kernel.domain.quotation import QuotationUpdate
from quotedesk_kernel.domain.values import Actor, QuotationStatus, Role
from quotedesk_services.bootstrap import Desk
from quotedesk_services.quotation_repository import DEFAULT_PAGE_SIZE, QuotationFilter

router = APIRouter(tags=["quotations"])

READ_ERRORS = {404: {"model": ErrorOut}}
WRITE_ERRORS = {
    **READ_ERRORS,
    403: {"model": ErrorOut},
    409: {"model": ErrorOut},
    503: {"model": ErrorOut},
}


def get_desk(request: Request) -> Desk:
    return request.app.state.desk


# ==============================
# READS
# ==============================


@router.get("/quotations", response_model=QuotationPageOut)
async def list_quotations(
    search: str | None = None,
    status: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    desk: Desk = Depends(get_desk),
):
    result = await desk.repository.list(
        QuotationFilter.parse(search, status), page=page, page_size=limit
    )
    return QuotationPageOut.model_validate(result)


@router.get("/quotation/{quotation_id}", response_model=QuotationOut, responses=READ_ERRORS)
async def get_quotation(
    quotation_id: str,
    viewer_role: str | None = Query(None, alias="viewerRole"),
    desk: Desk = Depends(get_desk),
):
    quotation = await desk.repository.get(quotation_id)
    if viewer_role is not None:
        quotation = thread_for_viewer(quotation, Role.parse(viewer_role))
    return QuotationOut.model_validate(quotation)


# ==============================
# WRITES
# ==============================


@router.patch(
    "/quotation/{quotation_id}", response_model=QuotationOut, responses=WRITE_ERRORS
)
async def patch_quotation(
    quotation_id: str,
    body: QuotationPatchIn,
    desk: Desk = Depends(get_desk),
):
    actor = (
        Actor(name=body.actor.name, role=Role.parse(body.actor.role))
        if body.actor is not None
        else None
    )
    changes = QuotationUpdate(
        status=QuotationStatus.parse(body.status) if body.status is not None else None,
        client=body.client,
        amount=body.amount,
        description=body.description,
        rejection_reason=body.rejection_reason,
    )
    updated = await desk.repository.update(quotation_id, changes, actor)
    return QuotationOut.model_validate(updated)


@router.post(
    "/quotation/{quotation_id}/comments",
    response_model=CommentOut,
    status_code=201,
    responses=WRITE_ERRORS,
)
async def post_comment(
    quotation_id: str,
    body: ThreadEntryIn,
    desk: Desk = Depends(get_desk),
):
    comment = await desk.repository.add_comment(
        quotation_id, body.author, Role.parse(body.role), body.text
    )
    return CommentOut.model_validate(comment)


@router.post(
    "/quotation/{quotation_id}/comments/{comment_id}/replies",
    response_model=ReplyOut,
    status_code=201,
    responses=WRITE_ERRORS,
)
async def post_reply(
    quotation_id: str,
    comment_id: int,
    body: ThreadEntryIn,
    desk: Desk = Depends(get_desk),
):
    reply = await desk.repository.add_reply(
        quotation_id, comment_id, body.author, Role.parse(body.role), body.text
    )
    return ReplyOut.model_validate(reply)
