"""Shared data models used across wise-ofx modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:  # pragma: no cover - type-checking imports only
    from datetime import date
    from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Transaction:
    """Single row of a Wise statement export."""

    transaction_id: str
    date: date
    amount: Decimal
    currency: str
    description: str
    payment_reference: str | None = None
    merchant: str | None = None
    running_balance: Decimal | None = None
    total_fees: Decimal | None = None
    exchange_from: str | None = None
    exchange_to: str | None = None
    exchange_rate: Decimal | None = None
    payer_name: str | None = None
    payee_name: str | None = None
    payee_account_number: str | None = None
    card_last_four: str | None = None
    card_holder_full_name: str | None = None
    attachment: str | None = None
    note: str | None = None


@dataclass(frozen=True, slots=True)
class Declaration:
    """XML declaration (``<?xml version="1.0" ...?>``)."""


@dataclass(frozen=True, slots=True)
class ProcessingInstruction:
    target: str
    data: str


@dataclass(frozen=True, slots=True)
class StartElement:
    name: str


@dataclass(frozen=True, slots=True)
class Text:
    """Character data; ``value`` is raw text and gets escaped by the writer."""

    value: str


@dataclass(frozen=True, slots=True)
class EndElement:
    name: str


XmlEvent: TypeAlias = Declaration | ProcessingInstruction | StartElement | Text | EndElement
"""Structural token of an XML document, in document order."""


@dataclass(slots=True)
class StatementSummary:
    """Fields read back from a written OFX statement."""

    account_id: str | None
    currency: str | None
    transaction_count: int
    balance: str | None
    start: str | None = None
    end: str | None = None

    def describe(self) -> str:
        """Return a human readable summary string for logging."""

        period = f'{self.start or "?"} - {self.end or "?"}'
        return (
            f'account {self.account_id}: {self.transaction_count} transactions, '
            f'balance {self.balance} {self.currency}, period {period}'
        )
