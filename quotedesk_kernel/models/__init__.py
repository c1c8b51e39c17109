"""ORM models. Importing this package registers every table on Base.metadata."""

from quotedesk_kernel.models.kv import KeyValueEntry
from quotedesk_kernel.models.quotation import (
    CommentModel,
    LineItemModel,
    QuotationModel,
    ReplyModel,
    StatusHistoryModel,
)

__all__ = [
    "CommentModel",
    "KeyValueEntry",
    "LineItemModel",
    "QuotationModel",
    "ReplyModel",
    "StatusHistoryModel",
]
