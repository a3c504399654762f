from __future__ import annotations

import pytest

from ledger_stress.domain.errors import (
    FixtureCreationFailed,
    LedgerServiceError,
    NotificationInterrupted,
)
from ledger_stress.events.recorder import EventRecorder
from ledger_stress.fixture import FixtureGenerator, build_fixture
from ledger_stress.infrastructure.in_memory import InMemoryLedgerService

SHORT_TIMEOUT = 0.05
LEDGERS = 2
ACCOUNTS_PER_LEDGER = 3


class _AccountRejectingService(InMemoryLedgerService):
    """Accepts ledgers, rejects the n-th account create."""

    def __init__(self, recorder: EventRecorder, reject_account_number: int) -> None:
        super().__init__(recorder=recorder)
        self._reject_at = reject_account_number
        self._account_calls = 0

    def create_account(self, account) -> None:
        self._account_calls += 1
        if self._account_calls == self._reject_at:
            raise LedgerServiceError("account rejected", status_code=400)
        super().create_account(account)


def test_build_yields_ledger_count_times_accounts_per_ledger(in_memory_service, recorder) -> None:
    pool = build_fixture(in_memory_service, recorder, LEDGERS, ACCOUNTS_PER_LEDGER, SHORT_TIMEOUT)

    assert len(pool) == LEDGERS * ACCOUNTS_PER_LEDGER
    assert len(set(pool.identifiers())) == len(pool)
    assert len(pool.ledgers) == LEDGERS
    assert {account.ledger for account in pool} <= set(pool.ledgers)
    assert set(pool.ledgers) == set(in_memory_service.ledgers)
    assert set(pool.identifiers()) == set(in_memory_service.accounts)
    # every confirmation was consumed by the generator
    assert recorder.pending() == 0


def test_accounts_are_grouped_by_ledger_in_creation_order(in_memory_service, recorder) -> None:
    pool = build_fixture(in_memory_service, recorder, LEDGERS, ACCOUNTS_PER_LEDGER, SHORT_TIMEOUT)

    owners = [account.ledger for account in pool]
    expected = [ledger for ledger in pool.ledgers for _ in range(ACCOUNTS_PER_LEDGER)]
    assert owners == expected


def test_same_seed_produces_same_identifiers() -> None:
    pools = []
    for _ in range(2):
        recorder = EventRecorder()
        service = InMemoryLedgerService(recorder=recorder)
        generator = FixtureGenerator(service, recorder, event_timeout=SHORT_TIMEOUT, seed=42)
        pools.append(generator.build(1, 4))

    assert pools[0].identifiers() == pools[1].identifiers()
    assert pools[0].ledgers == pools[1].ledgers


def test_zero_sizes_produce_empty_pool(in_memory_service, recorder) -> None:
    assert len(build_fixture(in_memory_service, recorder, 0, ACCOUNTS_PER_LEDGER)) == 0
    assert len(build_fixture(in_memory_service, recorder, LEDGERS, 0, SHORT_TIMEOUT)) == 0


def test_negative_sizes_are_rejected(in_memory_service, recorder) -> None:
    with pytest.raises(ValueError):
        build_fixture(in_memory_service, recorder, -1, 1)


def test_unconfirmed_ledger_aborts_generation(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder, publish_events=False)
    generator = FixtureGenerator(service, recorder, event_timeout=SHORT_TIMEOUT)

    with pytest.raises(FixtureCreationFailed) as exc_info:
        generator.build(LEDGERS, ACCOUNTS_PER_LEDGER)

    error = exc_info.value
    assert error.entity_kind == "ledger"
    assert error.identifier in service.ledgers
    # nothing after the first ledger was attempted
    assert len(service.ledgers) == 1
    assert service.accounts == {}
    assert generator.last_summary is None


def test_unconfirmed_account_aborts_generation(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder)
    generator = FixtureGenerator(service, recorder, event_timeout=SHORT_TIMEOUT)
    original_publish = service._publish

    def drop_account_events(category: str, identifier: str) -> None:
        if category == "post-account" and len(service.accounts) == 2:
            return
        original_publish(category, identifier)

    service._publish = drop_account_events  # type: ignore[method-assign]

    with pytest.raises(FixtureCreationFailed) as exc_info:
        generator.build(LEDGERS, ACCOUNTS_PER_LEDGER)

    assert exc_info.value.entity_kind == "account"
    assert len(service.accounts) == 2
    assert isinstance(exc_info.value.__cause__, Exception)


def test_service_error_aborts_generation_identifying_the_account(recorder) -> None:
    service = _AccountRejectingService(recorder, reject_account_number=4)
    generator = FixtureGenerator(service, recorder, event_timeout=SHORT_TIMEOUT)

    with pytest.raises(FixtureCreationFailed, match="account rejected") as exc_info:
        generator.build(LEDGERS, ACCOUNTS_PER_LEDGER)

    assert exc_info.value.entity_kind == "account"
    assert isinstance(exc_info.value.__cause__, LedgerServiceError)
    assert len(service.ledgers) == LEDGERS
    assert len(service.accounts) == 3


def test_delayed_confirmations_are_awaited(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder, event_delay_seconds=0.005)
    try:
        generator = FixtureGenerator(service, recorder, event_timeout=1.0)
        pool = generator.build(1, 2)
    finally:
        service.close()

    assert len(pool) == 2
    assert generator.last_summary is not None
    assert generator.last_summary.accounts == 2
    assert generator.last_summary.duration_seconds >= 0.015


def test_interrupted_wait_aborts_generation(in_memory_service, recorder) -> None:
    recorder.cancel()
    generator = FixtureGenerator(in_memory_service, recorder, event_timeout=1.0)

    with pytest.raises(FixtureCreationFailed) as exc_info:
        generator.build(LEDGERS, ACCOUNTS_PER_LEDGER)

    assert exc_info.value.entity_kind == "ledger"
    assert exc_info.value.identifier in in_memory_service.ledgers
    assert isinstance(exc_info.value.__cause__, NotificationInterrupted)
    assert in_memory_service.accounts == {}
