"""
Infrastructure package for the ledger stress harness.

Adapters to the ledger service: the REST client used against a live
deployment and the in-memory simulator used offline. Keep this layer focused
on I/O, decoupled from fixture/workload logic.
"""

from ledger_stress.infrastructure.abstract import LedgerManager
from ledger_stress.infrastructure.in_memory import InMemoryLedgerService
from ledger_stress.infrastructure.ledger_client import HttpLedgerClient

__all__ = [
    "HttpLedgerClient",
    "InMemoryLedgerService",
    "LedgerManager",
]
