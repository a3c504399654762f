"""
Error taxonomy for the ledger stress harness.

Fixture failures are fatal to a scenario. Submission failures are recovered
inside the workload workers and only ever surface as counts and log lines.
"""

from __future__ import annotations

from typing import Optional


class StressTestError(Exception):
    """Base class for all harness errors."""


class LedgerServiceError(StressTestError):
    """A call to the ledger service failed (non-2xx response or transport error)."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class NotificationTimeout(StressTestError):
    """No matching notification arrived within the wait bound."""

    def __init__(self, category: str, identifier: str, timeout: float):
        super().__init__(
            f"No '{category}' notification for '{identifier}' within {timeout:g}s"
        )
        self.category = category
        self.identifier = identifier
        self.timeout = timeout


class NotificationInterrupted(StressTestError):
    """The wait for a notification was cancelled before it completed."""

    def __init__(self, category: str, identifier: str):
        super().__init__(f"Wait for '{category}' notification of '{identifier}' was interrupted")
        self.category = category
        self.identifier = identifier


class FixtureCreationFailed(StressTestError):
    """A ledger or account could not be created or confirmed during fixture generation."""

    def __init__(self, entity_kind: str, identifier: str, reason: str):
        super().__init__(f"Fixture {entity_kind} '{identifier}' failed: {reason}")
        self.entity_kind = entity_kind
        self.identifier = identifier
        self.reason = reason


class EntrySubmissionFailed(StressTestError):
    """A single journal entry submission raised; recovered by the worker."""

    def __init__(self, transaction_identifier: str, error: BaseException):
        super().__init__(f"Journal entry '{transaction_identifier}' failed: {error}")
        self.transaction_identifier = transaction_identifier
        self.error = error

    @property
    def error_type(self) -> str:
        return type(self.error).__name__


class EmptyAccountPool(StressTestError):
    """A load run was attempted without any accounts to book against."""

    def __init__(self) -> None:
        super().__init__("Cannot run load: the account pool is empty")


__all__ = [
    "EmptyAccountPool",
    "EntrySubmissionFailed",
    "FixtureCreationFailed",
    "LedgerServiceError",
    "NotificationInterrupted",
    "NotificationTimeout",
    "StressTestError",
]
