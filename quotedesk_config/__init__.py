"""
quotedesk_config -- single public entrypoint for desk configuration.

Responsibility:
    Provides the ONLY way to obtain runtime settings, through
    ``get_settings()``, and the demo quotation set through
    ``load_seed_quotations()``.  No other component reads configuration
    files or ``QUOTEDESK_*`` environment variables directly.

Architecture position:
    Configuration.  Sits above ``quotedesk_kernel`` and below
    ``quotedesk_services`` / ``quotedesk_api``.  The kernel never imports
    from this package.

Failure modes:
    - ``FileNotFoundError`` -- settings or seed file missing.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- unknown key, uncoercible or out-of-range value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from quotedesk_config.loader import build_settings, load_quotations_file, load_yaml_file
from quotedesk_config.schema import DeskSettings
from quotedesk_kernel.domain.quotation import Quotation
from quotedesk_kernel.logging_config import get_logger

logger = get_logger("config")

_PACKAGE_DIR = Path(__file__).parent
DEFAULT_SETTINGS_PATH = _PACKAGE_DIR / "settings.yaml"
DEFAULT_SEED_PATH = _PACKAGE_DIR / "seed" / "quotations.yaml"

__all__ = [
    "DEFAULT_SEED_PATH",
    "DEFAULT_SETTINGS_PATH",
    "DeskSettings",
    "get_settings",
    "load_seed_quotations",
]


def get_settings(
    config_path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> DeskSettings:
    """The ONLY public settings entrypoint.

    Precedence, lowest first: the YAML file (``settings.yaml`` beside this
    module unless ``config_path`` is given), ``QUOTEDESK_<KEY>`` environment
    variables, then ``overrides``.

    Raises:
        FileNotFoundError: the settings file does not exist.
        ValueError: unknown key or value that cannot be coerced.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_PATH
    settings = build_settings(load_yaml_file(path), environ=environ, overrides=overrides)
    logger.info(
        "settings_loaded",
        extra={
            "config_path": str(path),
            "storage": settings.storage,
            "latency_seconds": settings.latency_seconds,
            "failure_rate": settings.failure_rate,
            "enforce_repository_permissions": settings.enforce_repository_permissions,
        },
    )
    return settings


def load_seed_quotations(path: Path | str | None = None) -> list[Quotation]:
    """Demo quotations (Q-101..Q-105) as domain objects."""
    return load_quotations_file(Path(path) if path is not None else DEFAULT_SEED_PATH)
