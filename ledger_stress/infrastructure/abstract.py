"""
Interface to the ledger service as seen by the harness.

Both the HTTP client and the in-memory simulator implement this protocol, so
the fixture generator and workload driver never know which one they drive.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ledger_stress.domain.models import Account, JournalEntry, Ledger


@runtime_checkable
class LedgerManager(Protocol):
    """
    Synchronous create operations of the accounting service.

    Each call blocks until the service responds and raises
    `LedgerServiceError` on failure. A normal return does not imply the
    entity is readable yet; creates are acknowledged asynchronously.
    """

    def create_ledger(self, ledger: Ledger) -> None:
        ...

    def create_account(self, account: Account) -> None:
        ...

    def create_journal_entry(self, journal_entry: JournalEntry) -> None:
        ...


__all__ = ["LedgerManager"]
