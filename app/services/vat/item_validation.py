"""Save-time VAT validation for menu items.

Runs when an admin saves an item so that an unset or unusable rate is caught
before any order is taken, rather than surfacing later inside a report.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from app.core.config import settings
from app.core.exceptions import MixedItemComponentsError, VATRateNotSetError
from app.models.vat_models import MixedItem, SimpleItem

from .apportionment import ApportionmentResult, apportion_mixed_item
from .line_calculator import LineVAT, line_breakdown
from .rates import resolve_rate

ZERO = Decimal("0")

VATPreview = Union[LineVAT, ApportionmentResult]


def validate_item_for_save(
    item: SimpleItem | MixedItem,
    tolerance: Optional[Decimal] = None,
) -> VATPreview:
    """Validate an item's VAT configuration and return its VAT preview.

    Raises:
        VATRateNotSetError: Simple item (or component) without a rate
        InvalidVATRateError: Negative or non-finite rate
        MixedItemComponentsError: Components missing or not adding up to the price
    """
    if tolerance is None:
        tolerance = settings.VAT_RECONCILIATION_TOLERANCE

    # Exempt items still need an explicit rate before they can be saved.
    if isinstance(item, SimpleItem):
        if item.vat_rate is None:
            raise VATRateNotSetError(item.name)
        resolved = resolve_rate(item)
        return line_breakdown(item.price or ZERO, resolved.rate)

    components = item.active_components
    if not components:
        raise MixedItemComponentsError(item.name, "Add at least one component")
    for component in components:
        if component.vat_rate is None:
            raise VATRateNotSetError(f"{item.name} / {component.label}" if item.name else component.label)
        resolve_rate(component)

    component_total = sum((c.gross_amount for c in components), ZERO)
    if item.price is None:
        raise MixedItemComponentsError(item.name, "Set a price for the item", component_total=component_total)
    if abs(component_total - item.price) > tolerance:
        raise MixedItemComponentsError(
            item.name,
            f"Component prices add up to {component_total} but the item price is {item.price}",
            component_total=component_total,
            item_price=item.price,
        )
    return apportion_mixed_item(item, item.price, tolerance=tolerance)
