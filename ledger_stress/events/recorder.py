"""
Push-based event wait gate.

The accounting service acknowledges creates asynchronously: a create call can
return before the entity is readable. Producers (a message listener, or the
in-memory service) call `record()` when a "created" notification arrives, and
callers block in `await_notification()` until the matching one is seen.

Usage:
    recorder = EventRecorder()
    service.create_ledger(ledger)
    recorder.await_notification(POST_LEDGER, ledger.identifier, timeout=30.0)
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from typing import Protocol, Tuple, runtime_checkable

from ledger_stress.domain.errors import NotificationInterrupted, NotificationTimeout
from ledger_stress.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class NotificationGate(Protocol):
    """
    Blocks until an entity-created notification is observed.

    Implementations return normally on success and raise
    `NotificationTimeout` or `NotificationInterrupted` otherwise.
    """

    def await_notification(self, category: str, identifier: str, timeout: float) -> None:
        ...


class EventRecorder:
    """
    Thread-safe store of received notifications with blocking waits.

    A notification recorded before anyone waits for it is kept until a wait
    consumes it, so a fast acknowledgement can never be missed.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._pending: Counter[Tuple[str, str]] = Counter()
        self._cancelled = False

    def record(self, category: str, identifier: str) -> None:
        with self._condition:
            self._pending[(category, identifier)] += 1
            self._condition.notify_all()
        log.debug("Notification recorded", extra={"category": category, "identifier": identifier})

    def await_notification(self, category: str, identifier: str, timeout: float) -> None:
        key = (category, identifier)
        deadline = time.monotonic() + timeout
        with self._condition:
            while True:
                if self._cancelled:
                    raise NotificationInterrupted(category, identifier)
                if self._pending[key] > 0:
                    self._pending[key] -= 1
                    if self._pending[key] == 0:
                        del self._pending[key]
                    return
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise NotificationTimeout(category, identifier, timeout)
                self._condition.wait(remaining)

    def cancel(self) -> None:
        """Wake every waiter and make current and future waits fail as interrupted."""
        with self._condition:
            self._cancelled = True
            self._condition.notify_all()

    def reset(self) -> None:
        with self._condition:
            self._cancelled = False
            self._pending.clear()

    def pending(self) -> int:
        """Number of recorded notifications not yet consumed by a wait."""
        with self._condition:
            return sum(self._pending.values())


__all__ = ["EventRecorder", "NotificationGate"]
