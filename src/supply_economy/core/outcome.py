"""
Result type returned by every host-facing economy operation.

Expected conditions (no state yet, replica asked to mutate, unknown item) are
reported through an Outcome instead of an exception. run_safely / run_safely_async
form the boundary with host callbacks: any unexpected fault is logged with its
stack trace and turned into a FAILED outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class OutcomeStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Outcome[T]":
        return cls(OutcomeStatus.OK, value=value)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome[T]":
        return cls(OutcomeStatus.SKIPPED, error=reason)

    @classmethod
    def failed(cls, reason: str) -> "Outcome[T]":
        return cls(OutcomeStatus.FAILED, error=reason)


def run_safely(action: Callable[[], Any], logger: logging.Logger, name: str) -> Outcome[Any]:
    """Invoke a synchronous host callback; faults become a FAILED outcome."""
    try:
        result = action()
    except Exception as e:
        logger.error("%s failed: %s", name, e, exc_info=True)
        return Outcome.failed(f"{name}: {e}")
    if isinstance(result, Outcome):
        return result
    return Outcome.success(result)


async def run_safely_async(
    action: Callable[[], Awaitable[Any]], logger: logging.Logger, name: str
) -> Outcome[Any]:
    """Coroutine flavour of run_safely."""
    try:
        result = await action()
    except Exception as e:
        logger.error("%s failed: %s", name, e, exc_info=True)
        return Outcome.failed(f"{name}: {e}")
    if isinstance(result, Outcome):
        return result
    return Outcome.success(result)
