"""
Quotedesk Kernel

The quotation-approval core:
- Role-based permission policy
- Status workflow with an append-only audit trail
- Threaded comments with read-time reply visibility
- Pluggable storage (in-memory and SQL)
"""

__version__ = "0.1.0"
