import logging
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from wise_ofx.currency import Currency
from wise_ofx.errors import InputError, RecordError
from wise_ofx.processors.csv_processor import load_transactions, parse_amount, parse_date

HEADER = (
    '"TransferWise ID",Date,Amount,Currency,Description,"Payment Reference","Running Balance",'
    '"Exchange From","Exchange To","Exchange Rate","Payer Name","Payee Name","Payee Account Number",'
    'Merchant,"Card Last Four Digits","Card Holder Full Name",Attachment,Note,"Total fees"'
)


@pytest.fixture
def statement(tmp_path: Path) -> Path:
    content = '\n'.join(
        [
            HEADER,
            'CARD-101,15-01-2024,-12.34,CAD,"Card transaction of 12.34 CAD issued by Corner Cafe",,987.66,'
            ',,,,,,"Corner Cafe",0042,"Jane Doe",,,0.00',
            'TRANSFER-7,02-02-2024,1000.00,CAD,"Received money from ACME",INV-2024-1,1987.66,'
            'USD,CAD,1.3512,ACME,,,,,,,"salary",0.00',
        ]
    )
    path = tmp_path / 'statement.csv'
    path.write_text(content + '\n', encoding='utf-8')
    return path


def test_load_transactions_maps_columns(statement: Path) -> None:
    transactions = load_transactions(statement)
    assert len(transactions) == 2

    card, transfer = transactions
    assert card.transaction_id == 'CARD-101'
    assert card.date == date(2024, 1, 15)
    assert card.amount == Decimal('-12.34')
    assert card.currency == 'CAD'
    assert card.payment_reference is None
    assert card.merchant == 'Corner Cafe'
    assert card.card_last_four == '0042'
    assert card.running_balance == Decimal('987.66')

    assert transfer.payment_reference == 'INV-2024-1'
    assert transfer.merchant is None
    assert transfer.exchange_rate == Decimal('1.3512')
    assert transfer.payer_name == 'ACME'
    assert transfer.note == 'salary'
    assert transfer.total_fees == Decimal('0.00')


def test_load_transactions_ignores_bom(tmp_path: Path) -> None:
    path = tmp_path / 'bom.csv'
    row = 'T1,01-03-2024,5.00,CAD,Top up,,5.00,,,,,,,,,,,,0'
    path.write_text(f'\ufeff{HEADER}\n{row}\n', encoding='utf-8')
    transactions = load_transactions(path)
    assert transactions[0].transaction_id == 'T1'


def test_load_transactions_header_only(tmp_path: Path) -> None:
    path = tmp_path / 'empty.csv'
    path.write_text(HEADER + '\n', encoding='utf-8')
    assert load_transactions(path) == []


def test_load_transactions_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InputError, match='Failed to read from'):
        load_transactions(tmp_path / 'missing.csv')


def test_load_transactions_missing_column(tmp_path: Path) -> None:
    path = tmp_path / 'short.csv'
    path.write_text('TransferWise ID,Date,Amount\nT1,01-01-2024,1.00\n', encoding='utf-8')
    with pytest.raises(RecordError, match='missing required columns: Currency'):
        load_transactions(path)


def test_load_transactions_bad_date_reports_line(tmp_path: Path) -> None:
    path = tmp_path / 'bad.csv'
    rows = [
        'T1,01-03-2024,5.00,CAD,Top up,,5.00,,,,,,,,,,,,0',
        'T2,2024-03-02,5.00,CAD,Top up,,10.00,,,,,,,,,,,,0',
    ]
    path.write_text('\n'.join([HEADER, *rows]) + '\n', encoding='utf-8')
    with pytest.raises(RecordError) as excinfo:
        load_transactions(path)
    assert excinfo.value.line == 3
    assert 'unrecognized date' in str(excinfo.value)


def test_load_transactions_bad_amount(tmp_path: Path) -> None:
    path = tmp_path / 'bad.csv'
    path.write_text(HEADER + '\nT1,01-03-2024,five,CAD,Top up,,5.00,,,,,,,,,,,,0\n', encoding='utf-8')
    with pytest.raises(RecordError, match='unrecognized amount'):
        load_transactions(path)


def test_load_transactions_warns_on_foreign_currency(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / 'mixed.csv'
    path.write_text(HEADER + '\nT1,01-03-2024,5.00,eur,Top up,,5.00,,,,,,,,,,,,0\n', encoding='utf-8')
    with caplog.at_level(logging.WARNING, logger='wise_ofx.processors.csv_processor'):
        transactions = load_transactions(path, statement_currency=Currency.CAD)
    assert transactions[0].currency == 'EUR'
    assert 'EUR' in caplog.text


def test_parse_date_invalid() -> None:
    with pytest.raises(ValueError, match='unrecognized date'):
        parse_date('31-31-2024')


def test_parse_amount_keeps_scale() -> None:
    assert str(parse_amount(' 100.50 ')) == '100.50'


@pytest.mark.parametrize('value', ['', 'abc', 'NaN', 'Infinity', '1_000', '1e3', '.5', '1.', '1,000.00'])
def test_parse_amount_invalid(value: str) -> None:
    with pytest.raises(ValueError):
        parse_amount(value)


@pytest.mark.parametrize(('value', 'expected'), [('-20.25', '-20.25'), ('+3', '3'), ('0.00', '0.00')])
def test_parse_amount_signed(value: str, expected: str) -> None:
    assert str(parse_amount(value)) == expected


def test_load_transactions_rejects_exponent_amount(tmp_path: Path) -> None:
    path = tmp_path / 'exponent.csv'
    path.write_text(HEADER + '\nT1,01-03-2024,1e3,CAD,Top up,,1000.00,,,,,,,,,,,,0\n', encoding='utf-8')
    with pytest.raises(RecordError, match='unrecognized amount') as excinfo:
        load_transactions(path)
    assert excinfo.value.line == 2
