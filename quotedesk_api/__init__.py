"""HTTP surface for the quotation desk (FastAPI)."""

from quotedesk_api.app import create_app

__all__ = ["create_app"]
