"""
Module: quotedesk_kernel.models.quotation
Responsibility: ORM persistence for quotations, line items, status history,
    comments and replies.

Architecture position: Kernel > Models.  May import from db/base.py and the
    domain value objects it converts to and from.

Invariants enforced:
    - Status values limited by a check constraint.
    - Comment ids unique per quotation; reply ids unique per comment.
    - Child collections load in their domain order (history position,
      line-item serial, comment id, reply id).

Children are owned by their quotation (``delete-orphan``); the SQL store
replaces a quotation's whole aggregate on every save.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk_kernel.db.base import Base
from quotedesk_kernel.domain.quotation import (
    Comment,
    LineItem,
    Quotation,
    Reply,
    StatusHistoryEntry,
)
from quotedesk_kernel.domain.values import QuotationStatus, Role


class QuotationModel(Base):
    """Persistent quotation record."""

    __tablename__ = "quotations"

    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected')",
            name="ck_quotations_valid_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    client: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal | None] = mapped_column(nullable=True)
    gst: Mapped[Decimal | None] = mapped_column(nullable=True)
    freight: Mapped[Decimal | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    line_items: Mapped[list[LineItemModel]] = relationship(
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="LineItemModel.sr",
        lazy="selectin",
    )
    history: Mapped[list[StatusHistoryModel]] = relationship(
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="StatusHistoryModel.position",
        lazy="selectin",
    )
    comments: Mapped[list[CommentModel]] = relationship(
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="CommentModel.comment_id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Quotation {self.id} {self.client} status={self.status}>"

    def to_dto(self) -> Quotation:
        """Convert ORM model to frozen domain object."""
        return Quotation(
            id=self.id,
            client=self.client,
            amount=self.amount,
            status=QuotationStatus(self.status),
            last_updated=self.last_updated,
            description=self.description,
            line_items=tuple(li.to_dto() for li in self.line_items),
            subtotal=self.subtotal,
            gst=self.gst,
            freight=self.freight,
            rejection_reason=self.rejection_reason,
            status_history=tuple(h.to_dto() for h in self.history),
            comments=tuple(c.to_dto() for c in self.comments),
        )

    @classmethod
    def from_dto(cls, quotation: Quotation) -> QuotationModel:
        return cls(
            id=quotation.id,
            client=quotation.client,
            amount=quotation.amount,
            status=quotation.status.value,
            last_updated=quotation.last_updated,
            description=quotation.description,
            subtotal=quotation.subtotal,
            gst=quotation.gst,
            freight=quotation.freight,
            rejection_reason=quotation.rejection_reason,
            line_items=[LineItemModel.from_dto(li) for li in quotation.line_items],
            history=[
                StatusHistoryModel.from_dto(entry, position)
                for position, entry in enumerate(quotation.status_history)
            ],
            comments=[CommentModel.from_dto(c) for c in quotation.comments],
        )


class LineItemModel(Base):
    __tablename__ = "quotation_line_items"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quotation_id: Mapped[str] = mapped_column(
        ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False
    )
    sr: Mapped[int] = mapped_column(Integer, nullable=False)
    item: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    qty: Mapped[Decimal] = mapped_column(nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)

    quotation: Mapped[QuotationModel] = relationship(back_populates="line_items")

    def to_dto(self) -> LineItem:
        return LineItem(
            sr=self.sr,
            item=self.item,
            sku=self.sku,
            qty=self.qty,
            unit=self.unit,
            rate=self.rate,
        )

    @classmethod
    def from_dto(cls, li: LineItem) -> LineItemModel:
        return cls(
            sr=li.sr, item=li.item, sku=li.sku, qty=li.qty, unit=li.unit, rate=li.rate
        )


class StatusHistoryModel(Base):
    """Audit-trail row. ``position`` preserves append order."""

    __tablename__ = "quotation_status_history"

    __table_args__ = (
        UniqueConstraint("quotation_id", "position", name="uq_status_history_position"),
    )

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quotation_id: Mapped[str] = mapped_column(
        ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    quotation: Mapped[QuotationModel] = relationship(back_populates="history")

    def to_dto(self) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            status=QuotationStatus(self.status),
            changed_by=self.changed_by,
            changed_at=self.changed_at,
            reason=self.reason,
        )

    @classmethod
    def from_dto(cls, entry: StatusHistoryEntry, position: int) -> StatusHistoryModel:
        return cls(
            position=position,
            status=entry.status.value,
            changed_by=entry.changed_by,
            changed_at=entry.changed_at,
            reason=entry.reason,
        )


class CommentModel(Base):
    __tablename__ = "quotation_comments"

    __table_args__ = (
        UniqueConstraint("quotation_id", "comment_id", name="uq_comments_per_quotation"),
    )

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quotation_id: Mapped[str] = mapped_column(
        ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False
    )
    comment_id: Mapped[int] = mapped_column(Integer, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(nullable=False)

    quotation: Mapped[QuotationModel] = relationship(back_populates="comments")
    replies: Mapped[list[ReplyModel]] = relationship(
        back_populates="comment",
        cascade="all, delete-orphan",
        order_by="ReplyModel.reply_id",
        lazy="selectin",
    )

    def to_dto(self) -> Comment:
        return Comment(
            id=self.comment_id,
            author=self.author,
            role=Role(self.role),
            text=self.text,
            timestamp=self.timestamp,
            replies=tuple(r.to_dto() for r in self.replies),
        )

    @classmethod
    def from_dto(cls, comment: Comment) -> CommentModel:
        return cls(
            comment_id=comment.id,
            author=comment.author,
            role=comment.role.value,
            text=comment.text,
            timestamp=comment.timestamp,
            replies=[ReplyModel.from_dto(r) for r in comment.replies],
        )


class ReplyModel(Base):
    __tablename__ = "quotation_replies"

    __table_args__ = (
        UniqueConstraint("comment_row_id", "reply_id", name="uq_replies_per_comment"),
    )

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    comment_row_id: Mapped[int] = mapped_column(
        ForeignKey("quotation_comments.row_id", ondelete="CASCADE"), nullable=False
    )
    reply_id: Mapped[int] = mapped_column(Integer, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(nullable=False)

    comment: Mapped[CommentModel] = relationship(back_populates="replies")

    def to_dto(self) -> Reply:
        return Reply(
            id=self.reply_id,
            author=self.author,
            role=Role(self.role),
            text=self.text,
            timestamp=self.timestamp,
        )

    @classmethod
    def from_dto(cls, reply: Reply) -> ReplyModel:
        return cls(
            reply_id=reply.id,
            author=reply.author,
            role=reply.role.value,
            text=reply.text,
            timestamp=reply.timestamp,
        )
