from __future__ import annotations

import time

import pytest

from ledger_stress.domain.errors import LedgerServiceError
from ledger_stress.domain.generators import random_account, random_journal_entry, random_ledger
from ledger_stress.events.constants import POST_ACCOUNT, POST_LEDGER
from ledger_stress.events.recorder import EventRecorder
from ledger_stress.infrastructure.abstract import LedgerManager
from ledger_stress.infrastructure.in_memory import InMemoryLedgerService

SHORT_TIMEOUT = 0.05


def _seed(service: InMemoryLedgerService):
    ledger = random_ledger()
    service.create_ledger(ledger)
    debtor = random_account(ledger.identifier)
    creditor = random_account(ledger.identifier)
    service.create_account(debtor)
    service.create_account(creditor)
    return ledger, debtor, creditor


def test_satisfies_ledger_manager_protocol(in_memory_service) -> None:
    assert isinstance(in_memory_service, LedgerManager)


def test_creates_publish_confirmations(in_memory_service, recorder: EventRecorder) -> None:
    ledger, debtor, creditor = _seed(in_memory_service)

    recorder.await_notification(POST_LEDGER, ledger.identifier, SHORT_TIMEOUT)
    recorder.await_notification(POST_ACCOUNT, debtor.identifier, SHORT_TIMEOUT)
    recorder.await_notification(POST_ACCOUNT, creditor.identifier, SHORT_TIMEOUT)
    assert in_memory_service.find_ledger(ledger.identifier) == ledger
    assert in_memory_service.find_account("missing") is None


def test_journal_entries_are_not_confirmed(in_memory_service, recorder: EventRecorder) -> None:
    _, debtor, creditor = _seed(in_memory_service)
    pending = recorder.pending()

    in_memory_service.create_journal_entry(random_journal_entry(debtor, "1.00", creditor, "1.00"))

    assert len(in_memory_service.journal_entries) == 1
    assert recorder.pending() == pending


def test_duplicate_ledger_is_rejected(in_memory_service) -> None:
    ledger = random_ledger()
    in_memory_service.create_ledger(ledger)

    with pytest.raises(LedgerServiceError) as exc_info:
        in_memory_service.create_ledger(ledger)

    assert exc_info.value.status_code == 409


def test_account_requires_existing_ledger(in_memory_service) -> None:
    with pytest.raises(LedgerServiceError) as exc_info:
        in_memory_service.create_account(random_account("NOLEDGER"))

    assert exc_info.value.status_code == 404
    assert in_memory_service.accounts == {}


def test_entry_with_unknown_account_is_rejected(in_memory_service) -> None:
    _, debtor, _ = _seed(in_memory_service)
    stranger = random_account("ELSEWHERE")

    with pytest.raises(LedgerServiceError) as exc_info:
        in_memory_service.create_journal_entry(random_journal_entry(debtor, "1", stranger, "1"))

    assert exc_info.value.status_code == 400
    assert in_memory_service.journal_entries == []


def test_failure_rate_rejects_a_seeded_fraction(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder, failure_rate=1.0)
    _, debtor, creditor = _seed(service)

    with pytest.raises(LedgerServiceError) as exc_info:
        service.create_journal_entry(random_journal_entry(debtor, "1", creditor, "1"))

    assert exc_info.value.status_code == 503


@pytest.mark.parametrize("rate", [-0.1, 1.5])
def test_failure_rate_must_be_a_probability(rate: float) -> None:
    with pytest.raises(ValueError):
        InMemoryLedgerService(failure_rate=rate)


def test_delayed_confirmation_arrives_after_create_returns(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder, event_delay_seconds=0.05)
    try:
        ledger = random_ledger()
        service.create_ledger(ledger)
        assert recorder.pending() == 0

        recorder.await_notification(POST_LEDGER, ledger.identifier, 2.0)
    finally:
        service.close()


def test_close_cancels_unfired_confirmations(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder, event_delay_seconds=0.2)
    service.create_ledger(random_ledger())

    service.close()
    time.sleep(0.3)

    assert recorder.pending() == 0


def test_latency_blocks_the_caller(recorder) -> None:
    service = InMemoryLedgerService(recorder=recorder, latency_seconds=0.02)

    start = time.perf_counter()
    service.create_ledger(random_ledger())

    assert time.perf_counter() - start >= 0.02
