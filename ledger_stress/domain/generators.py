"""
Random domain-object generators.

All generators take an optional `random.Random` so fixture builds can be made
reproducible with a seed. Field choices only need to be structurally valid for
the service; nothing downstream inspects them.
"""

from __future__ import annotations

import random
import string
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Optional, Union

from ledger_stress.domain.models import Account, Booking, JournalEntry, Ledger

_ALPHANUMERIC = string.ascii_letters + string.digits

LEDGER_IDENTIFIER_LENGTH = 8
ACCOUNT_IDENTIFIER_LENGTH = 32
DEFAULT_CLERK = "setna"


def _alphanumeric(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(_ALPHANUMERIC, k=length))


def random_ledger(rng: Optional[random.Random] = None) -> Ledger:
    rng = rng or random.Random()
    identifier = _alphanumeric(rng, LEDGER_IDENTIFIER_LENGTH)
    return Ledger(
        identifier=identifier,
        type="ASSET",
        name=identifier,
        description=_alphanumeric(rng, 16),
        show_accounts_in_chart=True,
    )


def random_account(ledger_identifier: str, rng: Optional[random.Random] = None) -> Account:
    rng = rng or random.Random()
    identifier = _alphanumeric(rng, ACCOUNT_IDENTIFIER_LENGTH)
    return Account(
        identifier=identifier,
        ledger=ledger_identifier,
        type="ASSET",
        name=_alphanumeric(rng, 32),
        holders=(_alphanumeric(rng, 8),),
        signature_authorities=(_alphanumeric(rng, 8),),
        balance=Decimal("0.00"),
    )


def random_journal_entry(
    debtor: Account,
    debtor_amount: Union[Decimal, str],
    creditor: Account,
    creditor_amount: Union[Decimal, str],
    clerk: str = DEFAULT_CLERK,
) -> JournalEntry:
    """
    Build a journal entry booking `debtor_amount` against `debtor` and
    `creditor_amount` against `creditor`.

    The transaction identifier is a uuid4 so that entries generated
    concurrently by different workers never collide.
    """
    return JournalEntry(
        transaction_identifier=uuid.uuid4().hex,
        transaction_date=datetime.now(UTC).isoformat(timespec="milliseconds"),
        transaction_type="BCHQ",
        clerk=clerk,
        note="stress test",
        message="generated",
        debtors=(Booking(account_number=debtor.identifier, amount=Decimal(debtor_amount)),),
        creditors=(Booking(account_number=creditor.identifier, amount=Decimal(creditor_amount)),),
    )


__all__ = ["random_account", "random_journal_entry", "random_ledger"]
