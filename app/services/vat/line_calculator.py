"""Inclusive VAT arithmetic for a single gross amount.

All prices are VAT-inclusive, so the VAT embedded in a gross amount at
rate r% is ``gross * r / (100 + r)``. Values are kept at full precision;
rounding to pennies happens once per order.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal("100")
ZERO = Decimal("0")
PENNY = Decimal("0.01")


@dataclass(frozen=True)
class LineVAT:
    gross_amount: Decimal
    vat_amount: Decimal
    net_amount: Decimal
    vat_rate: Decimal


def to_pennies(amount: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return amount.quantize(PENNY, rounding=ROUND_HALF_UP)


def vat_portion(gross: Decimal, rate: Decimal) -> Decimal:
    """VAT contained in a VAT-inclusive ``gross`` at ``rate`` percent."""
    if rate == 0:
        return ZERO
    return gross * rate / (HUNDRED + rate)


def line_breakdown(gross: Decimal, rate: Decimal) -> LineVAT:
    vat = vat_portion(gross, rate)
    # Net is always derived so that net + vat == gross exactly.
    return LineVAT(gross_amount=gross, vat_amount=vat, net_amount=gross - vat, vat_rate=rate)
