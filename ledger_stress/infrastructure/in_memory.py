"""
In-memory stand-in for the accounting service.

Used by `ledger-stress run --simulate` and by the test suite. It keeps the two
properties of the real service the harness depends on:

- creates are acknowledged asynchronously: the "created" notification is
  published to an `EventRecorder` after `event_delay_seconds`, on a timer
  thread, not by the create call itself;
- a create call blocks its caller for `latency_seconds`, so concurrency
  levels produce measurably different throughput.

Journal entries referencing unknown accounts are rejected, and a seeded
fraction of journal entry submissions can be made to fail.
"""

from __future__ import annotations

import random
import threading
import time
from typing import Dict, List, Optional, Set

from ledger_stress.domain.errors import LedgerServiceError
from ledger_stress.domain.models import Account, JournalEntry, Ledger
from ledger_stress.events.constants import POST_ACCOUNT, POST_LEDGER
from ledger_stress.events.recorder import EventRecorder
from ledger_stress.utils.logging import get_logger

log = get_logger(__name__)


class InMemoryLedgerService:
    """
    Thread-safe `LedgerManager` that stores everything in dicts.
    """

    def __init__(
        self,
        recorder: Optional[EventRecorder] = None,
        latency_seconds: float = 0.0,
        event_delay_seconds: float = 0.0,
        failure_rate: float = 0.0,
        seed: Optional[int] = None,
        publish_events: bool = True,
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self.recorder = recorder if recorder is not None else EventRecorder()
        self.latency_seconds = latency_seconds
        self.event_delay_seconds = event_delay_seconds
        self.failure_rate = failure_rate
        self.publish_events = publish_events
        self._rng = random.Random(seed)
        self._lock = threading.Lock()
        self._timers: Set[threading.Timer] = set()
        self.ledgers: Dict[str, Ledger] = {}
        self.accounts: Dict[str, Account] = {}
        self.journal_entries: List[JournalEntry] = []

    def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            time.sleep(self.latency_seconds)

    def _publish(self, category: str, identifier: str) -> None:
        if not self.publish_events:
            return
        if self.event_delay_seconds <= 0:
            self.recorder.record(category, identifier)
            return

        def _fire() -> None:
            with self._lock:
                self._timers.discard(timer)
            self.recorder.record(category, identifier)

        timer = threading.Timer(self.event_delay_seconds, _fire)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()

    def create_ledger(self, ledger: Ledger) -> None:
        self._simulate_latency()
        with self._lock:
            if ledger.identifier in self.ledgers:
                raise LedgerServiceError(
                    f"Ledger '{ledger.identifier}' already exists", status_code=409
                )
            self.ledgers[ledger.identifier] = ledger
        self._publish(POST_LEDGER, ledger.identifier)

    def create_account(self, account: Account) -> None:
        self._simulate_latency()
        with self._lock:
            if account.ledger not in self.ledgers:
                raise LedgerServiceError(f"Ledger '{account.ledger}' not found", status_code=404)
            if account.identifier in self.accounts:
                raise LedgerServiceError(
                    f"Account '{account.identifier}' already exists", status_code=409
                )
            self.accounts[account.identifier] = account
        self._publish(POST_ACCOUNT, account.identifier)

    def create_journal_entry(self, journal_entry: JournalEntry) -> None:
        self._simulate_latency()
        with self._lock:
            if self.failure_rate and self._rng.random() < self.failure_rate:
                raise LedgerServiceError("Simulated journal entry failure", status_code=503)
            for booking in (*journal_entry.debtors, *journal_entry.creditors):
                if booking.account_number not in self.accounts:
                    raise LedgerServiceError(
                        f"Account '{booking.account_number}' not found", status_code=400
                    )
            self.journal_entries.append(journal_entry)

    # Read side, matching the HTTP client so the polling gate can probe it.
    def find_ledger(self, identifier: str) -> Optional[Ledger]:
        with self._lock:
            return self.ledgers.get(identifier)

    def find_account(self, identifier: str) -> Optional[Account]:
        with self._lock:
            return self.accounts.get(identifier)

    def close(self) -> None:
        """Cancel notifications that have not fired yet."""
        with self._lock:
            timers, self._timers = self._timers, set()
        for timer in timers:
            timer.cancel()
        if timers:
            log.debug("Cancelled pending notifications", extra={"pending": len(timers)})


__all__ = ["InMemoryLedgerService"]
