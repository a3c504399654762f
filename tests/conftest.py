"""
Pytest configuration for the ledger stress harness.

Provides fixtures for:
- Settings isolated from the developer's environment / .env
- In-memory ledger service wired to an event recorder
- Small hand-made account pools
"""

from __future__ import annotations

import os
from typing import Iterator

import pytest

from ledger_stress.config import Settings, get_settings
from ledger_stress.domain.models import AccountPool
from ledger_stress.events.recorder import EventRecorder
from ledger_stress.infrastructure.in_memory import InMemoryLedgerService
from tests.doubles import RecordingService, make_account


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path) -> Iterator[None]:
    """
    Keep `get_settings()` from leaking values between tests or picking up a
    developer's .env file.
    """
    for key in list(os.environ):
        if key.startswith(("LEDGER_", "STRESS_", "SIMULATED_", "EVENT_", "RESULTS_")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        ledger_base_url="http://ledger.test/accounting/v1",
        ledger_tenant="stress-test",
        ledger_user="setna",
        log_level="DEBUG",
    )


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def in_memory_service(recorder: EventRecorder) -> Iterator[InMemoryLedgerService]:
    service = InMemoryLedgerService(recorder=recorder)
    try:
        yield service
    finally:
        service.close()


@pytest.fixture
def abc_pool() -> AccountPool:
    """Three accounts A, B, C in one ledger."""
    return AccountPool([make_account("A"), make_account("B"), make_account("C")], ["LEDGER01"])


@pytest.fixture
def recording_service() -> RecordingService:
    return RecordingService()
