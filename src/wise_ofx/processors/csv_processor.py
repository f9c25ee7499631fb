"""Wise CSV statement loading for wise-ofx."""

from __future__ import annotations

import csv
import logging
import re
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from wise_ofx.errors import InputError, RecordError
from wise_ofx.models import Transaction

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterable, Iterator, Mapping
    from pathlib import Path

    from wise_ofx.currency import Currency

LOGGER = logging.getLogger(__name__)

DATE_FORMAT = '%d-%m-%Y'
AMOUNT_PATTERN = re.compile(r'[-+]?\d+(?:\.\d+)?')

COLUMN_ID = 'TransferWise ID'
COLUMN_DATE = 'Date'
COLUMN_AMOUNT = 'Amount'
COLUMN_CURRENCY = 'Currency'
COLUMN_DESCRIPTION = 'Description'
COLUMN_RUNNING_BALANCE = 'Running Balance'
COLUMN_TOTAL_FEES = 'Total fees'

REQUIRED_COLUMNS = (
    COLUMN_ID,
    COLUMN_DATE,
    COLUMN_AMOUNT,
    COLUMN_CURRENCY,
    COLUMN_DESCRIPTION,
    COLUMN_RUNNING_BALANCE,
    COLUMN_TOTAL_FEES,
)

OPTIONAL_TEXT_COLUMNS: dict[str, str] = {
    'Payment Reference': 'payment_reference',
    'Merchant': 'merchant',
    'Exchange From': 'exchange_from',
    'Exchange To': 'exchange_to',
    'Payer Name': 'payer_name',
    'Payee Name': 'payee_name',
    'Payee Account Number': 'payee_account_number',
    'Card Last Four Digits': 'card_last_four',
    'Card Holder Full Name': 'card_holder_full_name',
    'Attachment': 'attachment',
    'Note': 'note',
}
"""Optional string columns mapped to ``Transaction`` field names."""


def parse_date(value: str) -> date:
    """Parse a ``DD-MM-YYYY`` statement date."""

    cleaned = value.strip()
    try:
        return datetime.strptime(cleaned, DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f'unrecognized date: {value!r}') from exc


def parse_amount(value: str) -> Decimal:
    """Parse a decimal column exactly, keeping the exported scale."""

    cleaned = value.strip()
    if not cleaned:
        raise ValueError('empty amount')
    if AMOUNT_PATTERN.fullmatch(cleaned) is None:
        raise ValueError(f'unrecognized amount: {value!r}')
    return Decimal(cleaned)


def _optional(row: Mapping[str, str | None], column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _required(row: Mapping[str, str | None], column: str) -> str:
    value = row.get(column)
    if value is None:
        raise ValueError(f'missing value for column {column!r}')
    return value.strip()


def build_transaction(row: Mapping[str, str | None]) -> Transaction:
    """Map one CSV row (header name -> cell) onto a ``Transaction``."""

    transaction_id = _required(row, COLUMN_ID)
    if not transaction_id:
        raise ValueError(f'empty {COLUMN_ID}')
    exchange_rate = _optional(row, 'Exchange Rate')
    text_fields = {field: _optional(row, column) for column, field in OPTIONAL_TEXT_COLUMNS.items()}
    return Transaction(
        transaction_id=transaction_id,
        date=parse_date(_required(row, COLUMN_DATE)),
        amount=parse_amount(_required(row, COLUMN_AMOUNT)),
        currency=_required(row, COLUMN_CURRENCY).upper(),
        description=_required(row, COLUMN_DESCRIPTION),
        running_balance=parse_amount(_required(row, COLUMN_RUNNING_BALANCE)),
        total_fees=parse_amount(_required(row, COLUMN_TOTAL_FEES)),
        exchange_rate=parse_amount(exchange_rate) if exchange_rate else None,
        **text_fields,
    )


def iter_transactions(reader: csv.DictReader[str], path: Path) -> Iterator[Transaction]:
    """Yield a ``Transaction`` per data row, failing on the first bad row."""

    missing = [column for column in REQUIRED_COLUMNS if column not in (reader.fieldnames or [])]
    if reader.fieldnames is not None and missing:
        raise RecordError(path, 1, f'missing required columns: {", ".join(missing)}')

    for row in reader:
        try:
            yield build_transaction(row)
        except ValueError as exc:
            raise RecordError(path, reader.line_num, str(exc)) from exc


def _warn_foreign_currencies(transactions: Iterable[Transaction], currency: Currency, path: Path) -> None:
    foreign = sorted({txn.currency for txn in transactions if txn.currency != currency.value})
    if foreign:
        LOGGER.warning(
            '%s contains %s transactions; the statement is declared in %s',
            path,
            ', '.join(foreign),
            currency.value,
        )


def load_transactions(path: Path, *, statement_currency: Currency | None = None) -> list[Transaction]:
    """Read every transaction in the Wise CSV export at ``path``."""

    transactions: list[Transaction] = []
    try:
        with path.open('r', encoding='utf-8-sig', newline='') as handle:
            reader = csv.DictReader(handle)
            try:
                transactions.extend(iter_transactions(reader, path))
            except csv.Error as exc:
                raise RecordError(path, reader.line_num, str(exc)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise InputError(f'Failed to read from {path}: {exc}') from exc

    LOGGER.debug('Loaded %d transactions from %s', len(transactions), path)
    if statement_currency is not None:
        _warn_foreign_currencies(transactions, statement_currency, path)
    return transactions
