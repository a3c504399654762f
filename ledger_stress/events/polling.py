"""
Pull-based event wait gate for running against a live accounting service.

Without access to the service's message broker, a "created" notification is
observed by polling the entity's read endpoint until it becomes visible.
Polling is driven by tenacity: fixed wait between probes, stop after the
wait bound. Cancellation wakes the sleeping poller immediately.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping, Optional

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from ledger_stress.domain.errors import NotificationInterrupted, NotificationTimeout
from ledger_stress.events.constants import POST_ACCOUNT, POST_LEDGER
from ledger_stress.utils.logging import get_logger

log = get_logger(__name__)

Lookup = Callable[[str], Optional[Any]]


class PollingNotificationGate:
    """
    Confirms creates by probing per-category lookup callables.

    A lookup returns the entity when it is visible and None when it is not
    (yet). Errors raised by a lookup propagate to the waiter unchanged.
    """

    def __init__(self, lookups: Mapping[str, Lookup], poll_interval: float = 0.1) -> None:
        self._lookups = dict(lookups)
        self.poll_interval = poll_interval
        self._cancelled = threading.Event()

    @classmethod
    def for_client(cls, client: Any, poll_interval: float = 0.1) -> "PollingNotificationGate":
        """Build a gate that probes `client.find_ledger` / `client.find_account`."""
        return cls(
            {POST_LEDGER: client.find_ledger, POST_ACCOUNT: client.find_account},
            poll_interval=poll_interval,
        )

    def await_notification(self, category: str, identifier: str, timeout: float) -> None:
        if category not in self._lookups:
            raise ValueError(f"No lookup registered for category '{category}'")
        if self._cancelled.is_set():
            raise NotificationInterrupted(category, identifier)

        lookup = self._lookups[category]

        def _sleep(seconds: float) -> None:
            if self._cancelled.wait(seconds):
                raise NotificationInterrupted(category, identifier)

        retryer = Retrying(
            stop=stop_after_delay(timeout),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_result(lambda found: found is None),
            sleep=_sleep,
        )
        try:
            retryer(lookup, identifier)
        except RetryError as exc:
            raise NotificationTimeout(category, identifier, timeout) from exc

        log.debug(
            "Entity visible",
            extra={
                "category": category,
                "identifier": identifier,
                "attempts": retryer.statistics.get("attempt_number"),
            },
        )

    def cancel(self) -> None:
        self._cancelled.set()

    def reset(self) -> None:
        self._cancelled.clear()


__all__ = ["PollingNotificationGate"]
