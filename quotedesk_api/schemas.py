"""
Request and response models for the quotation backend contract.

JSON field names are camelCase; Python attributes stay snake_case.  Output
models are built straight from the frozen domain objects
(``from_attributes``).  Money is emitted as a JSON number.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from quotedesk_kernel.domain.values import QuotationStatus, Role

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class LineItemOut(CamelModel):
    sr: int
    item: str
    sku: str
    qty: Money
    unit: str
    rate: Money
    amount: Money


class StatusHistoryOut(CamelModel):
    status: QuotationStatus
    changed_by: str
    changed_at: datetime
    reason: str | None = None


class ReplyOut(CamelModel):
    id: int
    author: str
    role: Role
    text: str
    timestamp: datetime


class CommentOut(CamelModel):
    id: int
    author: str
    role: Role
    text: str
    timestamp: datetime
    replies: list[ReplyOut] = Field(default_factory=list)


class QuotationOut(CamelModel):
    id: str
    client: str
    amount: Money
    status: QuotationStatus
    last_updated: datetime
    description: str | None = None
    line_items: list[LineItemOut] = Field(default_factory=list)
    subtotal: Money | None = None
    gst: Money | None = None
    freight: Money | None = None
    rejection_reason: str | None = None
    status_history: list[StatusHistoryOut] = Field(default_factory=list)
    comments: list[CommentOut] = Field(default_factory=list)


class QuotationPageOut(CamelModel):
    data: list[QuotationOut]
    total_items: int
    total_pages: int
    current_page: int
    items_per_page: int


class ErrorBody(BaseModel):
    code: str
    message: str


class ErrorOut(BaseModel):
    error: ErrorBody


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ActorIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    role: str


class QuotationPatchIn(CamelModel):
    """Partial update; omitted fields stay unchanged."""

    model_config = ConfigDict(extra="forbid")

    status: str | None = None
    client: str | None = None
    amount: Decimal | None = None
    description: str | None = None
    rejection_reason: str | None = None
    actor: ActorIn | None = None


class ThreadEntryIn(CamelModel):
    """Body for both comments and replies."""

    model_config = ConfigDict(extra="forbid")

    author: str
    role: str
    text: str
