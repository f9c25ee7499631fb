"""Command-line interface for wise-ofx."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from wise_ofx import __version__ as pkg_version
from wise_ofx.config import WiseOfxSettings, load_settings
from wise_ofx.emitter import emit_statement
from wise_ofx.errors import ConfigError, WiseOfxError
from wise_ofx.output import open_output, write_events
from wise_ofx.processors.csv_processor import load_transactions
from wise_ofx.processors.ofx_processor import inspect_statement, verify_statement

LOGGER = logging.getLogger('wise_ofx.cli')
if not LOGGER.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    LOGGER.addHandler(handler)
LOGGER.setLevel(logging.INFO)
LOGGER.propagate = False


def _configure_verbosity(args: argparse.Namespace) -> None:
    """Apply ``--quiet``/``--verbose`` to the CLI and library loggers."""

    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    LOGGER.setLevel(level)
    library_logger = logging.getLogger('wise_ofx')
    library_logger.setLevel(level)
    if not library_logger.handlers:
        for existing in LOGGER.handlers:
            library_logger.addHandler(existing)


def _resolve_settings(args: argparse.Namespace) -> WiseOfxSettings:
    overrides = {
        'statement': str(args.statement) if args.statement else None,
        'account': args.account,
        'currency': args.currency,
        'output': str(args.out) if args.out else None,
    }
    settings = load_settings(args.config, overrides=overrides)
    if args.check and settings.output_path is None:
        raise ConfigError('--check requires an output file (--out)')
    return settings


def convert(settings: WiseOfxSettings, *, check: bool = False) -> int:
    """Run a conversion described by ``settings``; return the number of transactions written."""

    transactions = load_transactions(settings.statement_path, statement_currency=settings.currency)
    events = emit_statement(settings.account_id, transactions, currency=settings.currency)
    with open_output(settings.output_path) as sink:
        count = write_events(events, sink)
    LOGGER.debug('Wrote %d XML events', count)
    destination = settings.output_path or '<stdout>'
    LOGGER.info('Wrote %d transactions for account %s to %s', len(transactions), settings.account_id, destination)

    if check and settings.output_path is not None:
        summary = inspect_statement(settings.output_path)
        verify_statement(summary, settings.account_id, transactions)
        LOGGER.info('Verified %s', summary.describe())
    return len(transactions)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Convert a Wise CSV statement into OFX')
    parser.add_argument('--statement', type=Path, help='Statement downloaded from Wise in CSV format (default: statement.csv)')
    parser.add_argument('--account', help='Account ID to be used in OFX output (default: wise001)')
    parser.add_argument('--out', type=Path, help='Output file to write OFX into (stdout if omitted)')
    parser.add_argument('--currency', help='Statement currency written to CURDEF (default: CAD)')
    parser.add_argument('-c', '--config', type=Path, help='Path to configuration TOML')
    parser.add_argument('--check', action='store_true', help='Re-read the written OFX file and verify it')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {pkg_version}')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only report errors')
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Print verbose progress details')
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_verbosity(args)
    try:
        settings = _resolve_settings(args)
        convert(settings, check=args.check)
    except WiseOfxError as exc:
        LOGGER.error('%s', exc)
        return 1
    return 0


if __name__ == '__main__':  # pragma: no cover
    raise SystemExit(main())
