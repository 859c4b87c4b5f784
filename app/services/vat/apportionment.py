"""Mixed item VAT apportionment.

A mixed item (e.g. a Biryani sold with a zero-rated Raita) is taxed per
component. Each component carries its own gross amount and rate; the item
VAT is the sum of the component VAT portions.

When the price actually charged for a line diverges from the catalog sum of
its components (discounts, price overrides) the component amounts are scaled
to the charged amount, keeping their relative weights.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from app import metrics
from app.core.config import settings
from app.core.exceptions import MixedItemComponentsError
from app.models.vat_models import ComponentType, MixedItem
from app.utils.currency_fmt import fmt_money

from .line_calculator import to_pennies, vat_portion
from .rates import resolve_rate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ComponentVAT:
    label: str
    gross_amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    is_exempt: bool = False
    component_type: ComponentType = ComponentType.OTHER


@dataclass(frozen=True)
class ApportionmentResult:
    total_vat: Decimal
    breakdown: Dict[str, Decimal] = field(default_factory=dict)
    components: List[ComponentVAT] = field(default_factory=list)
    reconciled: bool = True

    @property
    def gross_amount(self) -> Decimal:
        return sum((c.gross_amount for c in self.components), ZERO)

    @property
    def net_amount(self) -> Decimal:
        return self.gross_amount - self.total_vat

    @property
    def by_category(self) -> Dict[ComponentType, Decimal]:
        """Component VAT summed per category (hot food, cold food, ...)."""
        return category_totals(self.components)


def apportion_mixed_item(
    item: MixedItem,
    line_gross: Decimal,
    quantity: int = 1,
    tolerance: Decimal | None = None,
) -> ApportionmentResult:
    """Split the VAT of a mixed item line across its components.

    A free line whose components also sum to zero is valid and carries no VAT.

    Args:
        item: Mixed item with its catalog components
        line_gross: Amount actually charged for the line (VAT inclusive)
        quantity: Units on the line
        tolerance: Allowed gap between charged and catalog totals (defaults to settings)

    Raises:
        MixedItemComponentsError: If the item has no active components, or they sum
            to zero while the line charged something
        VATRateNotSetError / InvalidVATRateError: If a component rate is unusable
    """
    components = item.active_components
    if not components:
        raise MixedItemComponentsError(item.name, "Mixed item has no components")

    if tolerance is None:
        tolerance = settings.VAT_RECONCILIATION_TOLERANCE
    unit_total = sum((c.gross_amount for c in components), ZERO)
    catalog_total = unit_total * quantity
    reconciled = abs(line_gross - catalog_total) <= tolerance

    if unit_total == 0 and not reconciled:
        raise MixedItemComponentsError(
            item.name, "Component amounts sum to zero", component_total=unit_total
        )

    if reconciled:
        factor = Decimal(quantity)
    else:
        factor = line_gross / unit_total
        logger.warning(
            "Mixed item %s charged %s but components total %s; scaling components",
            item.name or "unnamed",
            line_gross,
            catalog_total,
        )
        metrics.vat_reconciliation_warning()

    details: list[ComponentVAT] = []
    breakdown: dict[str, Decimal] = {}
    for component in components:
        resolved = resolve_rate(component)
        gross = component.gross_amount * factor
        vat = vat_portion(gross, resolved.rate) if resolved.charges_vat else ZERO
        details.append(
            ComponentVAT(
                label=component.label,
                gross_amount=gross,
                vat_rate=resolved.rate,
                vat_amount=vat,
                is_exempt=resolved.is_exempt,
                component_type=component.component_type,
            )
        )
        breakdown[component.label] = breakdown.get(component.label, ZERO) + vat

    total_vat = sum((d.vat_amount for d in details), ZERO)
    return ApportionmentResult(
        total_vat=total_vat,
        breakdown=breakdown,
        components=details,
        reconciled=reconciled,
    )


def format_breakdown_lines(result: ApportionmentResult, symbol: str = "£") -> list[str]:
    """Human readable lines, e.g. ``["Hot Food VAT: £2.50", "Raita VAT: £0.00", "Total VAT: £2.50"]``."""
    lines = [f"{label} VAT: {fmt_money(to_pennies(vat), symbol)}" for label, vat in result.breakdown.items()]
    lines.append(f"Total VAT: {fmt_money(to_pennies(result.total_vat), symbol)}")
    return lines


def category_totals(components: Iterable[ComponentVAT]) -> Dict[ComponentType, Decimal]:
    totals: Dict[ComponentType, Decimal] = {}
    for component in components:
        totals[component.component_type] = totals.get(component.component_type, ZERO) + component.vat_amount
    return totals


def format_category_lines(totals: Dict[ComponentType, Decimal], symbol: str = "£") -> list[str]:
    """Summary lines per category, e.g. ``["Hot Food VAT: £2.50"]``. Categories without VAT are left out."""
    return [
        f"{category.label} VAT: {fmt_money(to_pennies(totals[category]), symbol)}"
        for category in ComponentType
        if totals.get(category, ZERO) > 0
    ]
