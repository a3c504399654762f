"""
Fixture generation: the ledgers and accounts every load run books against.

Generation is strictly sequential. Each ledger and each account is created and
then confirmed through the notification gate before the next create is issued,
so every account in the returned pool is known to be usable as a journal entry
party. The first create or confirmation that fails aborts the whole build;
a partially built pool is never returned.
"""

from __future__ import annotations

import random
import time
from functools import partial
from typing import Callable, List, Optional

from ledger_stress.domain.errors import FixtureCreationFailed, StressTestError
from ledger_stress.domain.generators import random_account, random_ledger
from ledger_stress.domain.models import Account, AccountPool, Ledger
from ledger_stress.domain.results import FixtureSummary
from ledger_stress.events.constants import POST_ACCOUNT, POST_LEDGER
from ledger_stress.events.recorder import NotificationGate
from ledger_stress.infrastructure.abstract import LedgerManager
from ledger_stress.utils.logging import get_logger

log = get_logger(__name__)

LedgerFactory = Callable[[random.Random], Ledger]
AccountFactory = Callable[[str, random.Random], Account]


def _default_ledger_factory(rng: random.Random) -> Ledger:
    return random_ledger(rng)


def _default_account_factory(ledger_identifier: str, rng: random.Random) -> Account:
    return random_account(ledger_identifier, rng)


class FixtureGenerator:
    """
    Builds an `AccountPool` of `ledger_count x accounts_per_ledger` accounts.

    Parameters
    ----------
    service : LedgerManager
        Where ledgers and accounts are created.
    gate : NotificationGate
        Confirms each create before generation moves on.
    event_timeout : float
        Seconds to wait for each confirmation.
    seed : int | None
        Seed for the entity generators; same seed, same identifiers.
    """

    def __init__(
        self,
        service: LedgerManager,
        gate: NotificationGate,
        event_timeout: float = 30.0,
        seed: Optional[int] = None,
        ledger_factory: LedgerFactory = _default_ledger_factory,
        account_factory: AccountFactory = _default_account_factory,
    ) -> None:
        self.service = service
        self.gate = gate
        self.event_timeout = event_timeout
        self._rng = random.Random(seed)
        self._ledger_factory = ledger_factory
        self._account_factory = account_factory
        self.last_summary: Optional[FixtureSummary] = None

    def _create_confirmed(self, kind: str, identifier: str, create: Callable[[], None], category: str) -> None:
        try:
            create()
            self.gate.await_notification(category, identifier, self.event_timeout)
        except StressTestError as exc:
            log.error(
                f"[FIXTURE FAILED] {kind} {identifier}",
                extra={"entity_kind": kind, "identifier": identifier, "error": str(exc)},
            )
            raise FixtureCreationFailed(kind, identifier, str(exc)) from exc

    def build(self, ledger_count: int, accounts_per_ledger: int) -> AccountPool:
        """
        Create and confirm the fixture, returning the pool of confirmed accounts.

        Raises
        ------
        FixtureCreationFailed
            If any ledger or account could not be created or confirmed.
        """
        if ledger_count < 0 or accounts_per_ledger < 0:
            raise ValueError("ledger_count and accounts_per_ledger must be >= 0")

        total_accounts = ledger_count * accounts_per_ledger
        log.info(
            f"[FIXTURE START] {ledger_count} ledgers x {accounts_per_ledger} accounts",
            extra={"ledgers": ledger_count, "accounts_per_ledger": accounts_per_ledger},
        )

        accounts: List[Account] = []
        ledgers: List[str] = []
        preparation_time = 0.0
        for ledger_index in range(ledger_count):
            start = time.perf_counter()
            ledger = self._ledger_factory(self._rng)
            self._create_confirmed(
                "ledger", ledger.identifier, partial(self.service.create_ledger, ledger), POST_LEDGER
            )
            ledgers.append(ledger.identifier)

            for _ in range(accounts_per_ledger):
                account = self._account_factory(ledger.identifier, self._rng)
                self._create_confirmed(
                    "account",
                    account.identifier,
                    partial(self.service.create_account, account),
                    POST_ACCOUNT,
                )
                accounts.append(account)

            preparation_time += time.perf_counter() - start
            log.debug(
                f"[FIXTURE] ledger {ledger_index + 1}/{ledger_count} ready",
                extra={"ledger": ledger.identifier, "accounts": len(accounts)},
            )

        summary = FixtureSummary(
            ledgers=ledger_count, accounts=total_accounts, duration_seconds=preparation_time
        )
        self.last_summary = summary
        log.info(
            f"[FIXTURE COMPLETE] Created {ledger_count} ledgers and {total_accounts} accounts "
            f"in {preparation_time:.2f}s",
            extra={
                "ledgers": ledger_count,
                "accounts": total_accounts,
                "duration_seconds": round(preparation_time, 3),
                "mean_account_ms": round(summary.mean_account_ms, 3),
            },
        )
        return AccountPool(accounts, ledgers)


def build_fixture(
    service: LedgerManager,
    gate: NotificationGate,
    ledger_count: int,
    accounts_per_ledger: int,
    event_timeout: float = 30.0,
    seed: Optional[int] = None,
) -> AccountPool:
    """Convenience wrapper around `FixtureGenerator.build`."""
    generator = FixtureGenerator(service, gate, event_timeout=event_timeout, seed=seed)
    return generator.build(ledger_count, accounts_per_ledger)


__all__ = ["FixtureGenerator", "build_fixture"]
