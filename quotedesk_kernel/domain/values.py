"""
Values -- roles, statuses, users and money helpers.

Responsibility:
    Foundational value types shared by every other domain module.  A user's
    role is the sole authorization signal; no per-user ownership of
    quotations is modeled.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Failure modes:
    - UnknownRoleError / UnknownStatusError when parsing foreign strings.
    - decimal.InvalidOperation when ``to_money`` receives garbage.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from quotedesk_kernel.exceptions import UnknownRoleError, UnknownStatusError

CURRENCY_SCALE = Decimal("0.01")

UNKNOWN_ACTOR_NAME = "Unknown User"


class Role(str, Enum):
    """Desk roles."""

    MANAGER = "manager"
    SALES_REP = "sales_rep"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: "Role | str") -> "Role":
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownRoleError(str(value)) from None


class QuotationStatus(str, Enum):
    """Quotation lifecycle states. None of them is terminal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def parse(cls, value: "QuotationStatus | str") -> "QuotationStatus":
        if isinstance(value, QuotationStatus):
            return value
        normalized = str(value).strip().capitalize()
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownStatusError(str(value)) from None


@dataclass(frozen=True, slots=True)
class User:
    """A desk user. ``role`` may change at runtime via a role switch."""

    id: str
    name: str
    email: str
    role: Role

    def with_role(self, role: Role) -> User:
        return replace(self, role=role)

    def as_actor(self) -> Actor:
        return Actor(name=self.name, role=self.role)


@dataclass(frozen=True, slots=True)
class Actor:
    """The user performing a mutating operation, as attributed in the audit trail."""

    name: str
    role: Role


def to_money(value: Decimal | int | str | float) -> Decimal:
    """Quantize a value to currency scale (2 places, half-up)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CURRENCY_SCALE, rounding=ROUND_HALF_UP)
