"""
Utilities package for the ledger stress harness.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of domain-specific logic.
"""

from ledger_stress.utils.logging import configure_logging, get_logger
from ledger_stress.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
