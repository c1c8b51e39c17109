"""
Quotedesk services -- asynchronous orchestration over the kernel.

Repository (simulated backend with latency and fault injection), status
workflow service, optimistic update coordinator, draft auto-save, session
and authentication.
"""
