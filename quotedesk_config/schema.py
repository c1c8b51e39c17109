"""
DeskSettings schema.

Runtime settings for one quotation desk.  YAML defaults, environment
overrides and explicit overrides are merged by the loader into this frozen
dataclass; nothing else reads configuration sources.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

STORAGE_BACKENDS = ("memory", "sql")


@dataclass(frozen=True)
class DeskSettings:
    """Settings for storage, simulated backend behaviour, drafts and auth."""

    database_url: str = "sqlite+pysqlite:///:memory:"
    storage: str = "memory"  # memory | sql
    latency_seconds: float = 1.0
    failure_rate: float = 0.1
    page_size: int = 8
    draft_debounce_seconds: float = 2.0
    enforce_repository_permissions: bool = True
    token_ttl_hours: int = 24
    token_secret: str = "quotedesk-dev-secret"
    log_level: str = "INFO"
    seed_path: str | None = None

    def __post_init__(self) -> None:
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage must be one of {STORAGE_BACKENDS}, got {self.storage!r}"
            )
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {self.failure_rate}")
        if self.latency_seconds < 0:
            raise ValueError("latency_seconds must not be negative")
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.token_ttl_hours <= 0:
            raise ValueError("token_ttl_hours must be positive")


def field_types() -> dict[str, str]:
    """Field name -> declared type string, used for coercion."""
    return {f.name: str(f.type) for f in fields(DeskSettings)}
