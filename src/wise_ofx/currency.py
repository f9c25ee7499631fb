"""Statement currency codes accepted for the OFX ``CURDEF`` element."""

from __future__ import annotations

from enum import Enum

from wise_ofx.errors import ConfigError


class Currency(str, Enum):
    """Currencies a statement can be declared in."""

    CAD = 'CAD'
    USD = 'USD'


DEFAULT_CURRENCY: Currency = Currency.CAD
"""``CURDEF`` used when nothing else is configured."""


def parse_currency(value: str) -> Currency:
    """Return the ``Currency`` for ``value`` (case-insensitive)."""

    try:
        return Currency(value.strip().upper())
    except ValueError as exc:
        raise ConfigError(f'unknown currency {value!r}') from exc
