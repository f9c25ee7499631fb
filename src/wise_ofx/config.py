"""Configuration utilities and dataclasses for wise-ofx."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wise_ofx.currency import DEFAULT_CURRENCY, Currency, parse_currency
from wise_ofx.errors import ConfigError

DEFAULT_CONFIG_PATH: Path = Path.home() / '.local/etc/wise_ofx.toml'
"""Default location for the user provided TOML configuration file."""

BASE_SETTINGS: dict[str, Any] = {
    'statement': 'statement.csv',
    'account': 'wise001',
    'currency': DEFAULT_CURRENCY.value,
    'output': None,
}
"""Default settings merged with any local overrides."""


@dataclass(frozen=True, slots=True)
class WiseOfxSettings:
    """Resolved options for a single conversion run."""

    statement_path: Path
    account_id: str
    currency: Currency
    output_path: Path | None


def _prepare_settings(raw: Mapping[str, Any]) -> WiseOfxSettings:
    """Convert a raw dictionary into ``WiseOfxSettings`` with proper types."""

    output = raw.get('output')
    account = str(raw.get('account', '')).strip()
    if not account:
        raise ConfigError('account id must not be empty')
    return WiseOfxSettings(
        statement_path=Path(str(raw.get('statement', BASE_SETTINGS['statement']))).expanduser(),
        account_id=account,
        currency=parse_currency(str(raw.get('currency', DEFAULT_CURRENCY.value))),
        output_path=Path(str(output)).expanduser() if output else None,
    )


def load_settings(path: Path | None = None, overrides: Mapping[str, Any] | None = None) -> WiseOfxSettings:
    """Load ``WiseOfxSettings`` from ``path`` (or the default file) plus ``overrides``.

    An explicitly requested file must exist. The default file is optional; when
    it is absent only the built-in defaults and ``overrides`` apply. ``None``
    values in ``overrides`` are ignored so unset command-line flags fall back to
    the file.
    """

    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    file_values: dict[str, Any] = {}
    if config_path.is_file():
        try:
            with config_path.open('rb') as handle:
                file_values = tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f'Failed to read configuration {config_path}: {exc}') from exc
    elif path is not None:
        raise ConfigError(f'Configuration file not found: {config_path}')

    flag_values = {key: value for key, value in (overrides or {}).items() if value is not None}
    return _prepare_settings({**BASE_SETTINGS, **file_values, **flag_values})
