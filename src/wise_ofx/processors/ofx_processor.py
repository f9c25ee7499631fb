"""Read back written OFX statements with ``ofxtools`` and check them."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from ofxtools.Parser import OFXTree

from wise_ofx.emitter import format_amount, total_balance
from wise_ofx.errors import InputError, VerificationError
from wise_ofx.models import StatementSummary

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Sequence
    from pathlib import Path
    from xml.etree.ElementTree import Element

    from wise_ofx.models import Transaction


def _parse_tree(path: Path) -> Element:
    """Parse ``path`` into an element tree without OFX schema conversion."""

    parser = OFXTree()
    with path.open('rb') as handle:
        parser.parse(handle)
    return parser.getroot()


def _text(root: Element, xpath: str) -> str | None:
    node = root.find(xpath)
    if node is None or node.text is None:
        return None
    return node.text.strip()


def inspect_statement(path: Path) -> StatementSummary:
    """Return the statement fields found in the OFX file at ``path``."""

    try:
        root = _parse_tree(path)
    except OSError as exc:
        raise InputError(f'Failed to read OFX file {path}: {exc}') from exc
    except Exception as exc:  # noqa: BLE001 - ofxtools raises a variety of parse errors
        raise VerificationError(f'Failed to parse OFX file {path}: {exc}') from exc

    statement = root.find('.//STMTRS')
    if statement is None:
        raise VerificationError(f'No bank statement found in {path}')
    return StatementSummary(
        account_id=_text(statement, './BANKACCTFROM/ACCTID'),
        currency=_text(statement, './CURDEF'),
        transaction_count=len(statement.findall('./BANKTRANLIST/STMTTRN')),
        balance=_text(statement, './LEDGERBAL/BALAMT'),
        start=_text(statement, './BANKTRANLIST/DTSTART'),
        end=_text(statement, './BANKTRANLIST/DTEND'),
    )


def verify_statement(summary: StatementSummary, account_id: str, transactions: Sequence[Transaction]) -> None:
    """Raise ``VerificationError`` if ``summary`` disagrees with the emitted data."""

    problems: list[str] = []
    if summary.account_id != account_id:
        problems.append(f'account {summary.account_id!r} != {account_id!r}')
    if summary.transaction_count != len(transactions):
        problems.append(f'{summary.transaction_count} transactions != {len(transactions)}')
    expected = total_balance(transactions)
    try:
        balance_matches = summary.balance is not None and Decimal(summary.balance) == expected
    except InvalidOperation:
        balance_matches = False
    if not balance_matches:
        problems.append(f'balance {summary.balance!r} != {format_amount(expected)!r}')
    if problems:
        raise VerificationError('Written statement does not match: ' + '; '.join(problems))
