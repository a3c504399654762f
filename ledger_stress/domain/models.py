"""
Domain models for the ledger stress harness.

Mirrors the payloads accepted by the accounting service's REST API. Models
serialize to camelCase JSON via `model_dump(by_alias=True, mode="json")`;
the harness never interprets balances or booking semantics.
"""
from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple, overload

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ServiceModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_payload(self) -> dict:
        """Render the model as the JSON body expected by the service."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Ledger(_ServiceModel):
    """
    A named grouping under which accounts are organized.
    """

    identifier: str = Field(..., description="Unique ledger identifier.")
    type: str = Field("ASSET", description="Account type shared by the ledger's accounts.")
    name: str = Field(..., description="Display name.")
    description: Optional[str] = Field(None, description="Free-form description.")
    show_accounts_in_chart: bool = Field(True, description="Whether accounts show in the chart.")


class Account(_ServiceModel):
    """
    An addressable balance-holding entity belonging to exactly one ledger.
    """

    identifier: str = Field(..., description="Unique account identifier.")
    ledger: str = Field(..., description="Identifier of the owning ledger.")
    type: str = Field("ASSET", description="Account type.")
    name: str = Field(..., description="Display name.")
    holders: Tuple[str, ...] = Field(default_factory=tuple)
    signature_authorities: Tuple[str, ...] = Field(default_factory=tuple)
    balance: Decimal = Field(Decimal("0.00"), description="Opening balance.")


class Booking(_ServiceModel):
    """One side of a journal entry: an account and the amount booked against it."""

    account_number: str
    amount: Decimal


class JournalEntry(_ServiceModel):
    """
    A balanced two-sided transaction record.
    """

    transaction_identifier: str
    transaction_date: str
    transaction_type: str = "BCHQ"
    clerk: str
    note: Optional[str] = None
    message: Optional[str] = None
    debtors: Tuple[Booking, ...]
    creditors: Tuple[Booking, ...]

    @property
    def is_balanced(self) -> bool:
        debit = sum((b.amount for b in self.debtors), Decimal("0"))
        credit = sum((b.amount for b in self.creditors), Decimal("0"))
        return debit == credit


class AccountPool(Sequence):
    """
    Ordered, read-only pool of confirmed accounts produced by one fixture pass.

    Indexing and `len()` go straight to the underlying tuple so workers can
    share the pool without locking.
    """

    __slots__ = ("_accounts", "_ledgers")

    def __init__(self, accounts: Sequence[Account], ledgers: Sequence[str] = ()) -> None:
        self._accounts: Tuple[Account, ...] = tuple(accounts)
        self._ledgers: Tuple[str, ...] = tuple(ledgers)

    @property
    def ledgers(self) -> Tuple[str, ...]:
        """Identifiers of the ledgers created for this pool, in creation order."""
        return self._ledgers

    @overload
    def __getitem__(self, index: int) -> Account: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[Account, ...]: ...

    def __getitem__(self, index):
        return self._accounts[index]

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts)

    def identifiers(self) -> List[str]:
        return [account.identifier for account in self._accounts]

    def __repr__(self) -> str:
        return f"AccountPool(accounts={len(self._accounts)}, ledgers={len(self._ledgers)})"


__all__ = ["Account", "AccountPool", "Booking", "JournalEntry", "Ledger"]
