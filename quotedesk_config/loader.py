"""
Configuration Loader (``quotedesk_config.loader``).

Responsibility
--------------
Reads the YAML settings file and the seed quotation file, applies
``QUOTEDESK_<KEY>`` environment overrides, coerces values to the declared
field types and builds the frozen ``DeskSettings`` / domain objects.  The
public entry points are ``quotedesk_config.get_settings()`` and
``quotedesk_config.load_seed_quotations()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown settings key or uncoercible value  -> ``ValueError``.
* Missing required seed keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping

import yaml

from quotedesk_config.schema import DeskSettings, field_types
from quotedesk_kernel.domain.quotation import (
    Comment,
    LineItem,
    Quotation,
    Reply,
    StatusHistoryEntry,
)
from quotedesk_kernel.domain.values import QuotationStatus, Role, to_money

ENV_PREFIX = "QUOTEDESK_"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields ``{}``."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def coerce_value(name: str, type_name: str, raw: Any) -> Any:
    """Coerce ``raw`` to the type declared for settings field ``name``."""
    try:
        if type_name == "bool":
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(raw)
        if type_name == "int":
            if isinstance(raw, bool):
                raise ValueError(raw)
            return int(str(raw).strip())
        if type_name == "float":
            if isinstance(raw, bool):
                raise ValueError(raw)
            return float(raw)
        if type_name == "str | None":
            return None if raw is None or str(raw).strip() == "" else str(raw)
        return str(raw)
    except (TypeError, ValueError):
        raise ValueError(
            f"Setting {name!r} expects {type_name}, got {raw!r}"
        ) from None


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """``QUOTEDESK_<KEY>`` variables whose key names a settings field."""
    environ = os.environ if environ is None else environ
    known = field_types()
    found: dict[str, str] = {}
    for var, value in environ.items():
        if not var.startswith(ENV_PREFIX):
            continue
        key = var[len(ENV_PREFIX):].lower()
        if key in known:
            found[key] = value
    return found


def build_settings(
    file_values: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> DeskSettings:
    """Merge file values < environment < explicit overrides."""
    known = field_types()
    merged: dict[str, Any] = {}
    for source in (file_values, env_overrides(environ), overrides or {}):
        for key, raw in source.items():
            if key not in known:
                raise ValueError(f"Unknown setting: {key!r}")
            merged[key] = coerce_value(key, known[key], raw)
    return DeskSettings(**merged)


# ---------------------------------------------------------------------------
# Seed quotations
# ---------------------------------------------------------------------------


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        raise ValueError(f"Seed timestamp must carry a UTC offset: {value!r}")
    return parsed


def _optional_money(value: Any) -> Decimal | None:
    return to_money(value) if value is not None else None


def parse_line_item(data: dict[str, Any]) -> LineItem:
    return LineItem(
        sr=int(data["sr"]),
        item=data["item"],
        sku=data["sku"],
        qty=Decimal(str(data["qty"])),
        unit=data["unit"],
        rate=to_money(data["rate"]),
    )


def parse_reply(data: dict[str, Any]) -> Reply:
    return Reply(
        id=int(data["id"]),
        author=data["author"],
        role=Role.parse(data["role"]),
        text=data["text"],
        timestamp=parse_timestamp(data["timestamp"]),
    )


def parse_comment(data: dict[str, Any]) -> Comment:
    return Comment(
        id=int(data["id"]),
        author=data["author"],
        role=Role.parse(data["role"]),
        text=data["text"],
        timestamp=parse_timestamp(data["timestamp"]),
        replies=tuple(parse_reply(r) for r in data.get("replies") or ()),
    )


def parse_history_entry(data: dict[str, Any]) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        status=QuotationStatus.parse(data["status"]),
        changed_by=data["changed_by"],
        changed_at=parse_timestamp(data["changed_at"]),
        reason=data.get("reason"),
    )


def parse_quotation(data: dict[str, Any]) -> Quotation:
    history = tuple(parse_history_entry(h) for h in data["status_history"])
    status = QuotationStatus.parse(data["status"])
    if not history or history[-1].status != status:
        raise ValueError(
            f"Seed quotation {data['id']}: last history entry must match status {status.value}"
        )
    return Quotation(
        id=data["id"],
        client=data["client"],
        amount=to_money(data["amount"]),
        status=status,
        last_updated=parse_timestamp(data["last_updated"]),
        description=data.get("description"),
        line_items=tuple(parse_line_item(li) for li in data.get("line_items") or ()),
        subtotal=_optional_money(data.get("subtotal")),
        gst=_optional_money(data.get("gst")),
        freight=_optional_money(data.get("freight")),
        rejection_reason=data.get("rejection_reason"),
        status_history=history,
        comments=tuple(parse_comment(c) for c in data.get("comments") or ()),
    )


def load_quotations_file(path: Path) -> list[Quotation]:
    data = load_yaml_file(path)
    return [parse_quotation(q) for q in data.get("quotations") or ()]
