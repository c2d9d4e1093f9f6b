"""Utility helpers for calculator modules."""

from __future__ import annotations

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}


def clamp_non_negative(value: float) -> float:
    """Return ``0.0`` for negative or zero ``value``; NaN passes through unchanged."""

    if value <= 0:
        return 0.0
    return value


def format_percentage(value: float, digits: int = 1) -> str:
    """Return a human-readable percentage label for the fraction ``value``."""

    return f"{value * 100:.{digits}f}%"


def format_currency(amount: float, currency: str = "ETB") -> str:
    """Render ``amount`` with a three-letter code and two decimals (``ETB 1,234.50``)."""

    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.2f}"


def format_foreign_currency(amount: float, currency: str) -> str:
    """Render a converted amount using the currency symbol where one is known."""

    code = currency.upper()
    sign = "-" if amount < 0 else ""
    symbol = _CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{abs(amount):,.2f}"
    return f"{sign}{code} {abs(amount):,.2f}"


def format_number(amount: float) -> str:
    """Render ``amount`` with thousands separators and up to three decimals."""

    text = f"{amount:,.3f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
