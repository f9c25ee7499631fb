"""OFX statement generation as a lazy stream of XML events.

The emitter never builds the document in memory: ``emit_statement`` is a
generator that yields ``XmlEvent`` tokens in document order, so a writer can
stream them straight to a file or standard output. Only the statement bounds
are computed up front (one linear scan each); the ledger balance is
accumulated while the transaction blocks are being yielded.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING

from wise_ofx.currency import DEFAULT_CURRENCY, Currency
from wise_ofx.models import (
    Declaration,
    EndElement,
    ProcessingInstruction,
    StartElement,
    Text,
    Transaction,
    XmlEvent,
)

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterator, Sequence

OFX_HEADER = 'OFXHEADER="200" VERSION="203" SECURITY="NONE" OLDFILEUID="NONE" NEWFILEUID="NONE"'
"""Data of the ``<?OFX ...?>`` processing instruction."""

TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'
STATUS_CODE = '0'
STATUS_SEVERITY = 'INFO'
LANGUAGE = 'ENG'
TRNUID = '0'


def format_timestamp(moment: datetime | date) -> str:
    """Format ``moment`` as ``YYYYMMDDHHMMSS.mmm[+0000:UTC]``.

    Plain dates render at midnight UTC; naive datetimes are taken as UTC.
    """

    if not isinstance(moment, datetime):
        moment = datetime.combine(moment, time(), tzinfo=UTC)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    else:
        moment = moment.astimezone(UTC)
    millis = moment.microsecond // 1000
    return f'{moment.strftime(TIMESTAMP_FORMAT)}.{millis:03d}[{moment.strftime("%z")}:{moment.strftime("%Z")}]'


def format_amount(amount: Decimal) -> str:
    """Render ``amount`` in positional notation, keeping sign and scale."""

    return format(amount, 'f')


def earliest_transaction(transactions: Sequence[Transaction]) -> Transaction | None:
    """Return the transaction with the lowest date, smallest id on ties."""

    selected: Transaction | None = None
    for txn in transactions:
        if selected is None or txn.date < selected.date:
            selected = txn
        elif txn.date == selected.date and selected.transaction_id > txn.transaction_id:
            selected = txn
    return selected


def latest_transaction(transactions: Sequence[Transaction]) -> Transaction | None:
    """Return the transaction with the highest date, largest id on ties."""

    selected: Transaction | None = None
    for txn in transactions:
        if selected is None or txn.date > selected.date:
            selected = txn
        elif txn.date == selected.date and selected.transaction_id < txn.transaction_id:
            selected = txn
    return selected


def total_balance(transactions: Sequence[Transaction]) -> Decimal:
    """Sum every amount exactly; an empty statement totals ``Decimal(0)``."""

    return sum((txn.amount for txn in transactions), Decimal(0))


def transaction_type(amount: Decimal) -> str:
    return 'CREDIT' if amount > 0 else 'DEBIT'


def element(name: str, value: str) -> list[XmlEvent]:
    """Events for a leaf element holding ``value``."""

    return [StartElement(name), Text(value), EndElement(name)]


def _status() -> list[XmlEvent]:
    return [
        StartElement('STATUS'),
        *element('CODE', STATUS_CODE),
        *element('SEVERITY', STATUS_SEVERITY),
        EndElement('STATUS'),
    ]


def transaction_events(txn: Transaction) -> list[XmlEvent]:
    """Events for the ``STMTTRN`` block of a single transaction."""

    reference = txn.payment_reference if txn.payment_reference is not None else txn.transaction_id
    name = txn.merchant if txn.merchant is not None else txn.description
    return [
        StartElement('STMTTRN'),
        *element('TRNTYPE', transaction_type(txn.amount)),
        *element('DTPOSTED', format_timestamp(txn.date)),
        *element('TRNAMT', format_amount(txn.amount)),
        *element('FITID', txn.transaction_id),
        *element('REFNUM', reference),
        *element('NAME', name),
        EndElement('STMTTRN'),
    ]


def _header(account_id: str, currency: Currency, server_time: str) -> Iterator[XmlEvent]:
    yield Declaration()
    yield ProcessingInstruction('OFX', OFX_HEADER)
    yield StartElement('OFX')
    yield StartElement('SIGNONMSGSRSV1')
    yield StartElement('SONRS')
    yield from _status()
    yield from element('DTSERVER', server_time)
    yield from element('LANGUAGE', LANGUAGE)
    yield EndElement('SONRS')
    yield EndElement('SIGNONMSGSRSV1')
    yield StartElement('BANKMSGSRSV1')
    yield StartElement('STMTTRNRS')
    yield from element('TRNUID', TRNUID)
    yield from _status()
    yield StartElement('STMTRS')
    # Not derived from the transactions' own currency column.
    yield from element('CURDEF', currency.value)
    yield StartElement('BANKACCTFROM')
    yield from element('ACCTID', account_id)
    yield EndElement('BANKACCTFROM')


def _footer() -> Iterator[XmlEvent]:
    yield EndElement('STMTRS')
    yield EndElement('STMTTRNRS')
    yield EndElement('BANKMSGSRSV1')
    yield EndElement('OFX')


def emit_statement(
    account_id: str,
    transactions: Sequence[Transaction],
    *,
    currency: Currency = DEFAULT_CURRENCY,
    now: datetime | None = None,
) -> Iterator[XmlEvent]:
    """Yield the events of a complete OFX bank statement for ``transactions``.

    Transactions are emitted in input order. ``DTSTART``/``DTEND`` are omitted
    for an empty list, in which case ``DTASOF`` falls back to the emission time.
    ``now`` overrides the wall clock used for ``DTSERVER``.
    """

    moment = now if now is not None else datetime.now(UTC)
    earliest = earliest_transaction(transactions)
    latest = latest_transaction(transactions)

    yield from _header(account_id, currency, format_timestamp(moment))
    yield StartElement('BANKTRANLIST')
    if earliest is not None:
        yield from element('DTSTART', format_timestamp(earliest.date))
    if latest is not None:
        yield from element('DTEND', format_timestamp(latest.date))

    total = Decimal(0)
    for txn in transactions:
        total += txn.amount
        yield from transaction_events(txn)
    yield EndElement('BANKTRANLIST')

    yield StartElement('LEDGERBAL')
    yield from element('BALAMT', format_amount(total))
    yield from element('DTASOF', format_timestamp(latest.date if latest is not None else moment))
    yield EndElement('LEDGERBAL')
    yield from _footer()
