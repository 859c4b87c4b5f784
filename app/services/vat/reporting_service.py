"""VAT Reporting Service.

Folds a set of already-fetched orders into a VAT report:
window and channel filtering, per-order VAT resolution, the VAT summary and
the top-selling item views. Reports are derived on every request and never
persisted.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from app import metrics
from app.core.config import settings
from app.core.exceptions import VATError
from app.models.vat_models import Order, OrderSource, TopItem, VATSummary

from .line_calculator import to_pennies
from .order_resolver import OrderVAT, RecomputedVAT, resolve_order_vat
from .period_utils import DateWindow

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
UNKNOWN_ITEM = "Unknown Item"


class ReportScope(str, enum.Enum):
    ALL = "all"
    ONLINE = "online"
    IN_RESTAURANT = "in_restaurant"

    def includes(self, source: OrderSource) -> bool:
        return self is ReportScope.ALL or self.value == source.value


@dataclass(frozen=True)
class VATReport:
    window: DateWindow
    scope: ReportScope
    order_count: int
    total_revenue: Decimal
    average_order_value: Decimal
    summary: VATSummary
    orders: List[OrderVAT] = field(default_factory=list)
    top_by_quantity: List[TopItem] = field(default_factory=list)
    top_by_revenue: List[TopItem] = field(default_factory=list)
    failed_orders: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SourceBreakdown:
    online: VATReport
    in_restaurant: VATReport

    @property
    def total_revenue(self) -> Decimal:
        return self.online.total_revenue + self.in_restaurant.total_revenue

    @property
    def order_count(self) -> int:
        return self.online.order_count + self.in_restaurant.order_count


def summarize(results: Iterable[OrderVAT]) -> VATSummary:
    """Fold resolved orders into a VATSummary.

    Two-bucket rule: an order with any VAT counts as standard rated, an order
    with none as zero rated.
    """
    total_net = total_vat = total_gross = standard = zero_rated = ZERO
    for res in results:
        total_net += res.net_amount
        total_vat += res.vat_amount
        total_gross += res.gross_amount
        if res.vat_amount > 0:
            standard += res.vat_amount
        else:
            zero_rated += res.vat_amount
    return VATSummary(
        total_net=total_net,
        total_vat=total_vat,
        total_gross=total_gross,
        standard_rate_vat=standard,
        zero_rate_vat=zero_rated,
    )


def rank_top_items(orders: Iterable[Order], limit: int = 20) -> tuple[List[TopItem], List[TopItem]]:
    """Best sellers by quantity and by revenue.

    Lines are grouped by exact item name. Ties keep first-seen order.
    """
    quantity: dict[str, int] = {}
    revenue: dict[str, Decimal] = {}
    seen_in: dict[str, set[str]] = {}

    for index, order in enumerate(orders):
        order_key = order.id or order.order_number or f"#{index}"
        for line in order.items:
            name = line.item_name or UNKNOWN_ITEM
            quantity[name] = quantity.get(name, 0) + line.quantity
            revenue[name] = revenue.get(name, ZERO) + line.gross_amount
            seen_in.setdefault(name, set()).add(order_key)

    items = [
        TopItem(
            name=name,
            quantity=qty,
            revenue=revenue[name],
            average_price=revenue[name] / qty if qty else ZERO,
            order_count=len(seen_in[name]),
        )
        for name, qty in quantity.items()
    ]
    by_quantity = sorted(items, key=lambda it: it.quantity, reverse=True)[:limit]
    by_revenue = sorted(items, key=lambda it: it.revenue, reverse=True)[:limit]
    return by_quantity, by_revenue


class VATReportingService:
    """Service for generating VAT reports from fetched orders.

    Responsibilities:
    - Date window filtering in the tenant's report timezone
    - Channel scoping (all / online / in restaurant)
    - Per-order VAT resolution with failure isolation
    - Summary, revenue and top item analytics
    """

    def __init__(self, timezone: Optional[str] = None, top_items_limit: Optional[int] = None):
        self.timezone = timezone or settings.REPORT_TIMEZONE
        if top_items_limit is None:
            top_items_limit = settings.REPORT_TOP_ITEMS_LIMIT
        self.top_items_limit = top_items_limit

    def window(self, start: date, end: Optional[date] = None) -> DateWindow:
        return DateWindow.from_dates(start, end, tz=self.timezone)

    def _resolve(self, order: Order) -> tuple[OrderVAT, bool]:
        try:
            result = resolve_order_vat(order)
        except VATError as exc:
            logger.warning(
                "VAT resolution failed for order %s (%s): %s; reporting zero VAT",
                order.reference,
                exc.code,
                exc.message,
                extra={"order": order.reference},
            )
            metrics.order_vat_resolved("failed")
            fallback = OrderVAT(
                order=order,
                gross_amount=order.total,
                vat_amount=ZERO,
                net_amount=order.total,
                source=RecomputedVAT(amount=ZERO),
            )
            return fallback, False
        metrics.order_vat_resolved(result.source.kind)
        return result, True

    def select_orders(
        self,
        orders: Iterable[Order],
        window: DateWindow,
        scope: ReportScope = ReportScope.ALL,
    ) -> List[Order]:
        return [o for o in orders if window.contains(o.created_at) and scope.includes(o.order_source)]

    def generate_report(
        self,
        orders: Iterable[Order],
        start: date,
        end: Optional[date] = None,
        scope: ReportScope | str = ReportScope.ALL,
    ) -> VATReport:
        """Build the VAT report for orders created within [start, end].

        Args:
            orders: Orders already fetched for the tenant
            start: First day of the report (inclusive)
            end: Last day of the report (inclusive, defaults to start)
            scope: 'all', 'online' or 'in_restaurant'

        Returns:
            VATReport; an empty selection yields a zeroed summary

        Raises:
            InvalidReportRangeError: If start falls after end
        """
        scope = ReportScope(scope)
        window = self.window(start, end)
        timer = metrics.ReportTimer(scope.value)
        try:
            selected = self.select_orders(orders, window, scope)
            results: list[OrderVAT] = []
            failed: list[str] = []
            for order in selected:
                result, ok = self._resolve(order)
                results.append(result)
                if not ok:
                    failed.append(order.reference)

            summary = summarize(results)
            count = len(results)
            average = to_pennies(summary.total_gross / count) if count else ZERO
            by_quantity, by_revenue = rank_top_items(selected, self.top_items_limit)
        finally:
            timer.stop()

        logger.info(
            "VAT report %s..%s scope=%s orders=%d vat=%s failed=%d",
            window.start_date,
            window.end_date,
            scope.value,
            count,
            summary.total_vat,
            len(failed),
            extra={"scope": scope.value},
        )
        return VATReport(
            window=window,
            scope=scope,
            order_count=count,
            total_revenue=summary.total_gross,
            average_order_value=average,
            summary=summary,
            orders=results,
            top_by_quantity=by_quantity,
            top_by_revenue=by_revenue,
            failed_orders=failed,
        )

    def generate_source_breakdown(
        self,
        orders: Iterable[Order],
        start: date,
        end: Optional[date] = None,
    ) -> SourceBreakdown:
        """Online and in-restaurant reports for the same window, side by side."""
        orders = list(orders)
        return SourceBreakdown(
            online=self.generate_report(orders, start, end, ReportScope.ONLINE),
            in_restaurant=self.generate_report(orders, start, end, ReportScope.IN_RESTAURANT),
        )
