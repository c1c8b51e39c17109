"""
Pytest fixtures for the quotation desk test suite.

Provides:
- Structured logging configured once per session, plus ``captured_logs``
- A deterministic clock
- Seeded in-memory desks with zero latency and a controllable fault injector
- An in-memory SQLite ``Database``

Async tests run on asyncio through the anyio pytest plugin
(``@pytest.mark.anyio``).
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from quotedesk_config import DeskSettings, load_seed_quotations
from quotedesk_kernel.db.engine import Database
from quotedesk_kernel.domain.clock import DeterministicClock
from quotedesk_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from quotedesk_kernel.stores.memory import InMemoryKeyValueStore, InMemoryQuotationStore
from quotedesk_services.bootstrap import build_desk
from quotedesk_services.fault_injection import ScriptedFaults
from quotedesk_services.quotation_repository import QuotationRepository

# Seed data is stamped up to 2025-01-15 09:00 UTC; tests start just after.
TEST_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture quotedesk logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "optimistic_rollback" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("quotedesk")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Async backend
# =============================================================================


@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(TEST_NOW)


# =============================================================================
# Repository and desk fixtures
# =============================================================================


@pytest.fixture
def seed_quotations():
    return load_seed_quotations()


@pytest.fixture
def faults():
    """Scripted injector: succeeds unless a test queues failures."""
    return ScriptedFaults([])


@pytest.fixture
def store(seed_quotations):
    return InMemoryQuotationStore(seed_quotations)


@pytest.fixture
def repository(store, deterministic_clock, faults):
    return QuotationRepository(store, clock=deterministic_clock, faults=faults)


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def test_settings():
    return DeskSettings(latency_seconds=0.0, failure_rate=0.0)


@pytest.fixture
def desk(test_settings, deterministic_clock, faults):
    desk = build_desk(test_settings, clock=deterministic_clock, faults=faults)
    yield desk
    desk.close()


@pytest.fixture
def database():
    db = Database("sqlite+pysqlite:///:memory:")
    db.create_tables()
    yield db
    db.drop_tables()
    db.dispose()
