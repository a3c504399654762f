"""
Ledger Stress - journal entry load harness for a double-entry accounting service.

The harness runs one fixed, parameterized scenario:

- Fixture: create ledgers and accounts one by one, confirming each through an
  asynchronous "created" notification before moving on
- Load: submit random balanced journal entries from N parallel workers, for
  an ascending series of N
- Report: per-level throughput and mean latency

It targets either a live service over HTTP or an in-memory simulator.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from ledger_stress.config import Settings, get_settings
from ledger_stress.domain.errors import (
    EmptyAccountPool,
    EntrySubmissionFailed,
    FixtureCreationFailed,
    StressTestError,
)
from ledger_stress.domain.results import RunStatistics, ScenarioResult
from ledger_stress.events.recorder import EventRecorder, NotificationGate
from ledger_stress.fixture import FixtureGenerator, build_fixture
from ledger_stress.orchestrator import ScenarioConfig, run_scenario
from ledger_stress.utils.logging import configure_logging, get_logger
from ledger_stress.workload import RandomIndexSampler, WorkloadDriver, run_load

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Fixture and load
    "FixtureGenerator",
    "build_fixture",
    "RandomIndexSampler",
    "WorkloadDriver",
    "run_load",
    # Orchestration
    "ScenarioConfig",
    "run_scenario",
    "RunStatistics",
    "ScenarioResult",
    # Event gate
    "EventRecorder",
    "NotificationGate",
    # Errors
    "EmptyAccountPool",
    "EntrySubmissionFailed",
    "FixtureCreationFailed",
    "StressTestError",
    # Logging
    "configure_logging",
    "get_logger",
]
