"""Centralised currency formatting for reports and exports.

Provides ``fmt_money()`` which prefixes an amount with the tenant's currency
symbol and always shows two decimal places. Formatting only: amounts are
never converted.

Usage
-----
    from app.utils.currency_fmt import currency_symbol, fmt_money

    symbol = currency_symbol("GBP")        # "£"
    text = fmt_money(Decimal("12.3"), symbol)  # "£12.30"
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_SYMBOLS = {
    "GBP": "£",
    "EUR": "€",
    "USD": "$",
}


def currency_symbol(code: str | None) -> str:
    """Display symbol for an ISO currency code; unknown codes are shown as-is."""
    if not code:
        return _SYMBOLS["GBP"]
    return _SYMBOLS.get(code.upper(), code.upper())


def fmt_money(amount: float | int | Decimal | None, symbol: str = "£") -> str:
    """Format *amount* as ``£12.34`` (symbol prefix, two decimals, half-up)."""
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value < 0:
        return f"-{symbol}{-value:.2f}"
    return f"{symbol}{value:.2f}"
