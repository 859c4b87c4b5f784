"""VAT report, validation and greeting schemas."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.vat_models import Order, TaxableItem, TopItem, VATSummary
from app.services.vat import (
    ApportionmentResult,
    LineVAT,
    OrderVAT,
    ReportScope,
    SourceBreakdown,
    VATReport,
    format_breakdown_lines,
    format_category_lines,
    to_pennies,
)
from app.utils.currency_fmt import fmt_money


def _money(value: Decimal) -> float:
    return float(to_pennies(value))


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ReportRequest(_Request):
    """Orders already fetched for the tenant plus the report window."""
    orders: list[Order] = Field(default_factory=list)
    start_date: dt.date
    end_date: dt.date | None = None
    scope: ReportScope = ReportScope.ALL
    currency: str | None = None  # display only; defaults to CURRENCY_CODE


class ItemValidateRequest(_Request):
    item: TaxableItem
    currency: str | None = None


class OrderResolveRequest(_Request):
    order: Order


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class VATSummaryOut(BaseModel):
    total_net: float
    total_vat: float
    total_gross: float
    standard_rate_vat: float
    zero_rate_vat: float

    @classmethod
    def from_summary(cls, summary: VATSummary) -> "VATSummaryOut":
        return cls(
            total_net=_money(summary.total_net),
            total_vat=_money(summary.total_vat),
            total_gross=_money(summary.total_gross),
            standard_rate_vat=_money(summary.standard_rate_vat),
            zero_rate_vat=_money(summary.zero_rate_vat),
        )


class TopItemOut(BaseModel):
    name: str
    quantity: int
    revenue: float
    average_price: float
    order_count: int

    @classmethod
    def from_item(cls, item: TopItem) -> "TopItemOut":
        return cls(
            name=item.name,
            quantity=item.quantity,
            revenue=_money(item.revenue),
            average_price=_money(item.average_price),
            order_count=item.order_count,
        )


class OrderVATOut(BaseModel):
    id: str | None
    order_number: str | None
    created_at: dt.datetime
    order_source: str
    gross_amount: float
    vat_amount: float
    net_amount: float
    vat_rate: float  # effective rate on net, one decimal place
    source: str  # "trusted" or "recomputed"
    category_breakdown: dict[str, float] = Field(default_factory=dict)  # recomputed only, keyed by component type

    @classmethod
    def from_result(cls, result: OrderVAT) -> "OrderVATOut":
        order = result.order
        return cls(
            id=order.id,
            order_number=order.order_number,
            created_at=order.created_at,
            order_source=order.order_source.value,
            gross_amount=_money(result.gross_amount),
            vat_amount=_money(result.vat_amount),
            net_amount=_money(result.net_amount),
            vat_rate=round(float(result.effective_rate), 1),
            source=result.source.kind,
            category_breakdown={c.value: _money(vat) for c, vat in result.category_breakdown.items()},
        )


class VATReportOut(BaseModel):
    start_date: dt.date
    end_date: dt.date
    scope: str
    currency: str
    order_count: int
    total_revenue: float
    average_order_value: float
    summary: VATSummaryOut
    orders: list[OrderVATOut]
    top_items_by_quantity: list[TopItemOut]
    top_items_by_revenue: list[TopItemOut]
    failed_orders: list[str]
    display: dict[str, str]  # pre-formatted totals, e.g. {"total_vat": "£4.83"}

    @classmethod
    def from_report(cls, report: VATReport, currency: str, symbol: str) -> "VATReportOut":
        summary = report.summary
        return cls(
            start_date=report.window.start_date,
            end_date=report.window.end_date,
            scope=report.scope.value,
            currency=currency,
            order_count=report.order_count,
            total_revenue=_money(report.total_revenue),
            average_order_value=_money(report.average_order_value),
            summary=VATSummaryOut.from_summary(summary),
            orders=[OrderVATOut.from_result(r) for r in report.orders],
            top_items_by_quantity=[TopItemOut.from_item(i) for i in report.top_by_quantity],
            top_items_by_revenue=[TopItemOut.from_item(i) for i in report.top_by_revenue],
            failed_orders=list(report.failed_orders),
            display={
                "total_net": fmt_money(summary.total_net, symbol),
                "total_vat": fmt_money(summary.total_vat, symbol),
                "total_gross": fmt_money(summary.total_gross, symbol),
                "average_order_value": fmt_money(report.average_order_value, symbol),
            },
        )


class SourceBreakdownOut(BaseModel):
    online: VATReportOut
    in_restaurant: VATReportOut
    order_count: int
    total_revenue: float

    @classmethod
    def from_breakdown(cls, breakdown: SourceBreakdown, currency: str, symbol: str) -> "SourceBreakdownOut":
        return cls(
            online=VATReportOut.from_report(breakdown.online, currency, symbol),
            in_restaurant=VATReportOut.from_report(breakdown.in_restaurant, currency, symbol),
            order_count=breakdown.order_count,
            total_revenue=_money(breakdown.total_revenue),
        )


class ItemPreviewOut(BaseModel):
    """Save-time VAT preview for a menu item."""
    vat_type: str
    gross_amount: float
    vat_amount: float
    net_amount: float
    vat_rate: float | None = None  # simple items only
    breakdown: dict[str, float] = Field(default_factory=dict)
    category_breakdown: dict[str, float] = Field(default_factory=dict)
    breakdown_lines: list[str] = Field(default_factory=list)
    category_lines: list[str] = Field(default_factory=list)
    reconciled: bool = True

    @classmethod
    def from_preview(cls, preview: LineVAT | ApportionmentResult, symbol: str) -> "ItemPreviewOut":
        if isinstance(preview, LineVAT):
            return cls(
                vat_type="simple",
                gross_amount=_money(preview.gross_amount),
                vat_amount=_money(preview.vat_amount),
                net_amount=_money(preview.net_amount),
                vat_rate=float(preview.vat_rate),
            )
        return cls(
            vat_type="mixed",
            gross_amount=_money(preview.gross_amount),
            vat_amount=_money(preview.total_vat),
            net_amount=_money(preview.net_amount),
            breakdown={label: _money(vat) for label, vat in preview.breakdown.items()},
            category_breakdown={c.value: _money(vat) for c, vat in preview.by_category.items()},
            breakdown_lines=format_breakdown_lines(preview, symbol),
            category_lines=format_category_lines(preview.by_category, symbol),
            reconciled=preview.reconciled,
        )


class GreetingOut(BaseModel):
    tenant_id: str
    index: int
    message: str
    source: str
