"""VAT rate resolution.

Turns the rate fields of an item or component into a single tax treatment.
An unset rate is a configuration error, never an implied 0%.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from app.core.config import settings
from app.core.exceptions import InvalidVATRateError, VATRateNotSetError
from app.models.vat_models import Component, MixedItem, SimpleItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ResolvedRate:
    rate: Decimal
    is_zero: bool
    is_exempt: bool = False

    @property
    def charges_vat(self) -> bool:
        return not (self.is_zero or self.is_exempt)


def _as_decimal(value: Any, item_name: str | None) -> Decimal:
    if isinstance(value, bool):
        raise InvalidVATRateError(value, item_name, "Rate must be a number")
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidVATRateError(value, item_name, "Rate must be a number") from exc
    if not rate.is_finite():
        raise InvalidVATRateError(value, item_name, "Rate must be finite")
    return rate


def resolve_rate(
    target: SimpleItem | Component | MixedItem,
    statutory_rates: Iterable[Decimal] | None = None,
) -> ResolvedRate:
    """Resolve the effective VAT treatment of a simple item or a component.

    Args:
        target: Simple item or mixed-item component
        statutory_rates: Rates accepted without a warning (defaults to settings)

    Returns:
        ResolvedRate with the percentage and its zero/exempt flags

    Raises:
        VATRateNotSetError: If no rate was chosen and the target is not exempt
        InvalidVATRateError: If the rate is negative, non-finite, or the target is a mixed item
    """
    name = getattr(target, "name", None) or getattr(target, "label", None)

    if isinstance(target, MixedItem):
        raise InvalidVATRateError(
            "mixed", name, "Mixed items are taxed per component and have no single rate"
        )

    if target.is_vat_exempt:
        return ResolvedRate(rate=ZERO, is_zero=True, is_exempt=True)

    if target.vat_rate is None:
        raise VATRateNotSetError(name)

    rate = _as_decimal(target.vat_rate, name)
    if rate < 0:
        raise InvalidVATRateError(rate, name, "Rate cannot be negative")
    if rate == 0:
        return ResolvedRate(rate=ZERO, is_zero=True)

    allowed = statutory_rates if statutory_rates is not None else settings.VAT_STATUTORY_RATES
    if rate not in {Decimal(str(r)) for r in allowed}:
        logger.warning("Non-statutory VAT rate %s%% used for %s", rate, name or "unnamed item")
    return ResolvedRate(rate=rate, is_zero=False)
