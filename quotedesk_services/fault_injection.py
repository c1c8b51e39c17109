"""
quotedesk_services.fault_injection -- Injectable write-failure strategies.

Responsibility:
    Decide whether a backend write should fail with a transient error.  The
    repository consults its injector on every ``update`` so tests can force
    either branch deterministically, while the demo desk keeps the ~10%
    random failure rate of an unreliable backend.
"""

from __future__ import annotations

import random
from collections import deque
from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class FaultInjector(Protocol):
    def should_fail(self, operation: str, quotation_id: str) -> bool: ...


class NeverFail:
    def should_fail(self, operation: str, quotation_id: str) -> bool:
        return False


class AlwaysFail:
    def should_fail(self, operation: str, quotation_id: str) -> bool:
        return True


class RandomFaults:
    """Fail with probability ``rate``. Pass a seeded ``rng`` for reproducibility."""

    def __init__(self, rate: float = 0.1, rng: random.Random | None = None):
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"failure rate must be within [0, 1], got {rate}")
        self.rate = rate
        self._rng = rng or random.Random()

    def should_fail(self, operation: str, quotation_id: str) -> bool:
        return self._rng.random() < self.rate


class ScriptedFaults:
    """Replay a fixed sequence of outcomes, then fall back to ``default``."""

    def __init__(self, outcomes: Iterable[bool], default: bool = False):
        self._outcomes = deque(outcomes)
        self._default = default
        self.calls: list[tuple[str, str]] = []

    def should_fail(self, operation: str, quotation_id: str) -> bool:
        self.calls.append((operation, quotation_id))
        if self._outcomes:
            return self._outcomes.popleft()
        return self._default

    def queue(self, *outcomes: bool) -> None:
        """Append outcomes to replay after those already queued."""
        self._outcomes.extend(outcomes)
