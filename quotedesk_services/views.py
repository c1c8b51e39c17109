"""
quotedesk_services.views -- Locally displayed copies of quotations.

A ``DisplayedQuotations`` holds what a client currently shows: one page of
list rows with its filter and pagination state, and at most one opened
detail record.  The coordinator mutates these copies optimistically and
converges them to the authoritative record (or the prior value) on every
completion path.  They are never the system of record.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from quotedesk_kernel.domain.quotation import Comment, Quotation, Reply
from quotedesk_kernel.domain.values import QuotationStatus
from quotedesk_services.quotation_repository import (
    DEFAULT_PAGE_SIZE,
    Page,
    QuotationFilter,
)


@dataclass
class ListState:
    """Current list page plus the filter and pagination that produced it."""

    rows: list[Quotation] = field(default_factory=list)
    filter: QuotationFilter = field(default_factory=QuotationFilter)
    current_page: int = 1
    items_per_page: int = DEFAULT_PAGE_SIZE
    total_items: int = 0
    total_pages: int = 0


class DisplayedQuotations:
    """Displayed list rows and the opened detail record."""

    def __init__(self, items_per_page: int = DEFAULT_PAGE_SIZE):
        self.list = ListState(items_per_page=items_per_page)
        self.detail: Quotation | None = None

    # Loading

    def show_page(self, page: Page) -> None:
        self.list.rows = list(page.data)
        self.list.current_page = page.current_page
        self.list.items_per_page = page.items_per_page
        self.list.total_items = page.total_items
        self.list.total_pages = page.total_pages

    def show_detail(self, quotation: Quotation | None) -> None:
        self.detail = quotation

    # Lookup

    def copies(self, quotation_id: str) -> list[Quotation]:
        found = [q for q in self.list.rows if q.id == quotation_id]
        if self.detail is not None and self.detail.id == quotation_id:
            found.append(self.detail)
        return found

    def find(self, quotation_id: str) -> Quotation | None:
        """The detail copy if open, else the list row."""
        if self.detail is not None and self.detail.id == quotation_id:
            return self.detail
        for row in self.list.rows:
            if row.id == quotation_id:
                return row
        return None

    def status_of(self, quotation_id: str) -> QuotationStatus | None:
        shown = self.find(quotation_id)
        return shown.status if shown is not None else None

    # Mutation of displayed copies

    def _map(self, quotation_id: str, fn) -> None:
        self.list.rows = [fn(q) if q.id == quotation_id else q for q in self.list.rows]
        if self.detail is not None and self.detail.id == quotation_id:
            self.detail = fn(self.detail)

    def apply_status(self, quotation_id: str, status: QuotationStatus) -> None:
        """Set ``status`` on every displayed copy. History is left as is."""
        self._map(quotation_id, lambda q: replace(q, status=status))

    def replace_record(self, quotation: Quotation) -> None:
        """Replace every displayed copy with the authoritative record."""
        self._map(quotation.id, lambda _: quotation)

    def append_comment(self, quotation_id: str, comment: Comment) -> None:
        self._map(
            quotation_id,
            lambda q: replace(
                q,
                comments=q.comments + (comment,),
                last_updated=max(q.last_updated, comment.timestamp),
            ),
        )

    def append_reply(self, quotation_id: str, comment_id: int, reply: Reply) -> None:
        def add(q: Quotation) -> Quotation:
            comments = tuple(
                replace(c, replies=c.replies + (reply,)) if c.id == comment_id else c
                for c in q.comments
            )
            return replace(
                q, comments=comments, last_updated=max(q.last_updated, reply.timestamp)
            )

        self._map(quotation_id, add)
