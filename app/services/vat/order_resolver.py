"""Order level VAT resolution.

An order's VAT comes from one of two places:

- ``TrustedVAT``: the figure the billing process stored on the order
  (``vat_info.total_vat``). When present and sane it wins outright.
- ``RecomputedVAT``: otherwise the VAT is rebuilt from the order lines,
  simple items at their own rate and mixed items by apportionment.

Delivery fees and other order-level charges are not lines, so they never
carry VAT on the recompute path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Union

from app.core.exceptions import OrderVATResolutionError
from app.models.vat_models import ComponentType, MixedItem, Order, SellableLine

from .apportionment import ApportionmentResult, apportion_mixed_item
from .line_calculator import to_pennies, vat_portion
from .rates import resolve_rate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ResolvedLine:
    name: Optional[str]
    quantity: int
    gross_amount: Decimal
    vat_amount: Decimal
    vat_rate: Optional[Decimal] = None  # None for mixed items
    apportionment: Optional[ApportionmentResult] = None

    @property
    def by_category(self) -> Dict[ComponentType, Decimal]:
        # Simple items have no components and count as "other".
        if self.apportionment is not None:
            return self.apportionment.by_category
        return {ComponentType.OTHER: self.vat_amount}


@dataclass(frozen=True)
class TrustedVAT:
    amount: Decimal
    kind: str = "trusted"


@dataclass(frozen=True)
class RecomputedVAT:
    amount: Decimal
    lines: List[ResolvedLine] = field(default_factory=list)
    kind: str = "recomputed"

    @property
    def category_breakdown(self) -> Dict[ComponentType, Decimal]:
        totals: Dict[ComponentType, Decimal] = {}
        for line in self.lines:
            for category, vat in line.by_category.items():
                totals[category] = totals.get(category, ZERO) + vat
        return totals


VatSource = Union[TrustedVAT, RecomputedVAT]


@dataclass(frozen=True)
class OrderVAT:
    order: Order
    gross_amount: Decimal
    vat_amount: Decimal
    net_amount: Decimal
    source: VatSource

    @property
    def effective_rate(self) -> Decimal:
        """VAT as a percentage of net (0 when there is no net amount)."""
        if self.net_amount <= 0:
            return ZERO
        return self.vat_amount / self.net_amount * HUNDRED

    @property
    def category_breakdown(self) -> Dict[ComponentType, Decimal]:
        """Recomputed VAT per component category; empty when the stored figure was used."""
        if isinstance(self.source, RecomputedVAT):
            return self.source.category_breakdown
        return {}


def trusted_vat_amount(order: Order) -> Decimal | None:
    """Stored VAT figure if it can be trusted, else None."""
    if order.vat_info is None or order.vat_info.total_vat is None:
        return None
    amount = order.vat_info.total_vat
    if not amount.is_finite():
        return None
    if amount < 0 or amount > order.total:
        logger.warning(
            "Order %s carries out of range VAT %s (total %s); recomputing",
            order.reference,
            amount,
            order.total,
        )
        return None
    return amount


def resolve_line(order: Order, line: SellableLine) -> ResolvedLine:
    item = line.menu_item
    if item is None:
        raise OrderVATResolutionError(order.reference, "line has no menu item")

    if isinstance(item, MixedItem):
        result = apportion_mixed_item(item, line.gross_amount, line.quantity)
        return ResolvedLine(
            name=item.name,
            quantity=line.quantity,
            gross_amount=line.gross_amount,
            vat_amount=result.total_vat,
            apportionment=result,
        )

    resolved = resolve_rate(item)
    vat = vat_portion(line.gross_amount, resolved.rate) if resolved.charges_vat else ZERO
    return ResolvedLine(
        name=item.name,
        quantity=line.quantity,
        gross_amount=line.gross_amount,
        vat_amount=vat,
        vat_rate=resolved.rate,
    )


def resolve_order_vat(order: Order) -> OrderVAT:
    """Resolve the VAT of one order, preferring the stored figure.

    Raises:
        VATError: If the stored figure is unusable and a line cannot be recomputed
    """
    trusted = trusted_vat_amount(order)
    source: VatSource
    if trusted is not None:
        source = TrustedVAT(amount=trusted)
        vat = trusted
    else:
        lines = [resolve_line(order, line) for line in order.items]
        vat = to_pennies(sum((ln.vat_amount for ln in lines), ZERO))
        source = RecomputedVAT(amount=vat, lines=lines)

    return OrderVAT(
        order=order,
        gross_amount=order.total,
        vat_amount=vat,
        net_amount=order.total - vat,
        source=source,
    )
