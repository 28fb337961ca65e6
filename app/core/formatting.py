"""Helpers for consistent user-facing formatting (pt-BR conventions)."""
from __future__ import annotations

import os
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

DISPLAY_DATE_FORMAT = "%d/%m/%Y"
DISPLAY_DATETIME_FORMAT = "%d/%m/%Y %H:%M"
CURRENCY_SYMBOL = os.getenv("SORTEIO_CURRENCY_SYMBOL", "R$")
_CENTS = Decimal("0.01")
_STRING_PARSE_PATTERNS: Iterable[str] = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y",
)


def _coerce_to_datetime(value: Any) -> datetime | None:
    """Attempt to normalise incoming date-like values to a datetime."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            if text.endswith("Z"):
                try:
                    return datetime.fromisoformat(text.replace("Z", "+00:00"))
                except ValueError:
                    pass
            for pattern in _STRING_PARSE_PATTERNS:
                try:
                    return datetime.strptime(text, pattern)
                except ValueError:
                    continue
        return None
    return None


def format_display_date(value: Any) -> str:
    """Format a value as dd/mm/yyyy or return an empty string."""
    coerced = _coerce_to_datetime(value)
    if coerced is None:
        return "" if value in (None, "") else str(value)
    return coerced.strftime(DISPLAY_DATE_FORMAT)


def format_display_datetime(value: Any) -> str:
    """Format a value as dd/mm/yyyy hh:mm or return an empty string."""
    coerced = _coerce_to_datetime(value)
    if coerced is None:
        return "" if value in (None, "") else str(value)
    return coerced.strftime(DISPLAY_DATETIME_FORMAT)


def format_amount(value: Any) -> str:
    """Two decimals with ``.`` for thousands and ``,`` for cents: 1.234,56."""
    if value in (None, ""):
        decimal_value = Decimal("0")
    else:
        try:
            decimal_value = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            return str(value)
    if not decimal_value.is_finite():
        return str(value)

    decimal_value = decimal_value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    us_style = f"{decimal_value:,.2f}"
    return us_style.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: Any, symbol: str | None = None) -> str:
    return f"{symbol or CURRENCY_SYMBOL} {format_amount(value)}"


def format_percent(value: Any) -> str:
    """Raw stored rate followed by ``%`` (5 -> ``5%``, 7.50 -> ``7.5%``)."""
    if value in (None, ""):
        return "0%"
    try:
        decimal_value = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return f"{value}%"
    if decimal_value.is_finite() and decimal_value == decimal_value.to_integral_value():
        return f"{decimal_value.quantize(Decimal('1'))}%"
    return f"{decimal_value.normalize()}%"


__all__ = [
    "format_amount",
    "format_currency",
    "format_display_date",
    "format_display_datetime",
    "format_percent",
]
