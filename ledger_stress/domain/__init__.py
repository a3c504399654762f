"""
Domain package for the ledger stress harness.

Exports the service payload models, result containers and error taxonomy.
Keep this package free of I/O.
"""

from ledger_stress.domain.errors import (
    EmptyAccountPool,
    EntrySubmissionFailed,
    FixtureCreationFailed,
    LedgerServiceError,
    NotificationInterrupted,
    NotificationTimeout,
    StressTestError,
)
from ledger_stress.domain.models import Account, AccountPool, Booking, JournalEntry, Ledger
from ledger_stress.domain.results import FixtureSummary, RunStatistics, ScenarioResult, WorkerResult

__all__ = [
    # Models
    "Account",
    "AccountPool",
    "Booking",
    "JournalEntry",
    "Ledger",
    # Results
    "FixtureSummary",
    "RunStatistics",
    "ScenarioResult",
    "WorkerResult",
    # Errors
    "EmptyAccountPool",
    "EntrySubmissionFailed",
    "FixtureCreationFailed",
    "LedgerServiceError",
    "NotificationInterrupted",
    "NotificationTimeout",
    "StressTestError",
]
