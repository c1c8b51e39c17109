"""
quotedesk_services.bootstrap -- Wire a complete desk from settings.

``build_desk`` is the composition root: it picks the storage backend,
seeds the demo quotations into an empty store and constructs every
service with the same Clock.  Nothing here holds module-level state, so
several desks (for example one per test) can coexist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from quotedesk_config import DeskSettings, load_seed_quotations
from quotedesk_kernel.db.engine import Database
from quotedesk_kernel.domain.clock import Clock, SystemClock
from quotedesk_kernel.logging_config import configure_logging, get_logger
from quotedesk_kernel.stores.base import KeyValueStore, QuotationStore
from quotedesk_kernel.stores.memory import InMemoryKeyValueStore, InMemoryQuotationStore
from quotedesk_kernel.stores.sql import SqlKeyValueStore, SqlQuotationStore
from quotedesk_services.auth import AuthService
from quotedesk_services.coordinator import Notice, OptimisticUpdateCoordinator
from quotedesk_services.drafts import DraftAutoSaver
from quotedesk_services.fault_injection import FaultInjector, NeverFail, RandomFaults
from quotedesk_services.quotation_repository import QuotationRepository
from quotedesk_services.session import SessionStore
from quotedesk_services.status_workflow import StatusWorkflowService

logger = get_logger("services.bootstrap")


@dataclass
class Desk:
    """Every service of one quotation desk, sharing stores and clock."""

    settings: DeskSettings
    clock: Clock
    quotations: QuotationStore
    kv: KeyValueStore
    repository: QuotationRepository
    workflow: StatusWorkflowService
    drafts: DraftAutoSaver
    session: SessionStore
    auth: AuthService
    database: Database | None = None

    def coordinator(
        self, notice_sink: Callable[[Notice], None] | None = None
    ) -> OptimisticUpdateCoordinator:
        """A fresh coordinator (one per client view) over this desk."""
        return OptimisticUpdateCoordinator(
            self.repository,
            workflow=self.workflow,
            drafts=self.drafts,
            notice_sink=notice_sink,
            page_size=self.settings.page_size,
        )

    def close(self) -> None:
        self.quotations.close()
        if self.database is not None:
            self.database.dispose()


def _make_stores(
    settings: DeskSettings, clock: Clock
) -> tuple[QuotationStore, KeyValueStore, Database | None]:
    if settings.storage == "sql":
        database = Database(settings.database_url)
        database.create_tables()
        return SqlQuotationStore(database), SqlKeyValueStore(database, clock), database
    return InMemoryQuotationStore(), InMemoryKeyValueStore(), None


def build_desk(
    settings: DeskSettings,
    clock: Clock | None = None,
    faults: FaultInjector | None = None,
    sleep: Callable[[float], Awaitable[None]] | None = None,
    seed: bool = True,
) -> Desk:
    """Build a desk. ``faults`` defaults to ``RandomFaults(settings.failure_rate)``."""
    configure_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    clock = clock or SystemClock()
    if faults is None:
        faults = RandomFaults(settings.failure_rate) if settings.failure_rate > 0 else NeverFail()

    quotations, kv, database = _make_stores(settings, clock)
    repository = QuotationRepository(
        quotations,
        clock=clock,
        faults=faults,
        latency_seconds=settings.latency_seconds,
        enforce_permissions=settings.enforce_repository_permissions,
        sleep=sleep,
    )
    if seed and not quotations.list_all():
        repository.seed(load_seed_quotations(settings.seed_path))

    session = SessionStore(kv)
    desk = Desk(
        settings=settings,
        clock=clock,
        quotations=quotations,
        kv=kv,
        repository=repository,
        workflow=StatusWorkflowService(repository),
        drafts=DraftAutoSaver(kv, clock, settings.draft_debounce_seconds),
        session=session,
        auth=AuthService(
            session,
            secret=settings.token_secret,
            clock=clock,
            token_ttl_hours=settings.token_ttl_hours,
        ),
        database=database,
    )
    logger.info(
        "desk_built",
        extra={
            "storage": settings.storage,
            "quotation_count": len(quotations.list_all()),
            "fault_injector": type(faults).__name__,
        },
    )
    return desk
