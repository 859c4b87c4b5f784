"""HMRC style CSV exports.

- export_orders_csv: one row per order plus a SUMMARY block
- export_top_items_csv: the best seller views
"""
from __future__ import annotations

import csv
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Iterable, Optional

from app import metrics
from app.models.vat_models import TopItem
from app.utils.currency_fmt import fmt_money

from .line_calculator import to_pennies
from .period_utils import financial_year_label, vat_quarter_label
from .reporting_service import ReportScope, VATReport

logger = logging.getLogger(__name__)

TOP_ITEM_ORDERINGS = ("quantity", "revenue")


def order_csv_headers(symbol: str = "£") -> list[str]:
    return [
        "Order Number",
        "Date",
        "Time",
        "Order Source",
        "Order Type",
        "Payment Method",
        f"Net Amount ({symbol})",
        f"VAT Amount ({symbol})",
        f"Gross Amount ({symbol})",
        "VAT Rate (%)",
        "Customer Name",
        "Customer Email",
        "Customer Phone",
        "Financial Year",
        "VAT Period",
    ]


def _amount(value: Decimal) -> str:
    return f"{to_pennies(value):.2f}"


def _writer(buf: StringIO):
    return csv.writer(buf, lineterminator="\n")


def export_orders_csv(report: VATReport, symbol: str = "£") -> str:
    """Render the per-order VAT rows of a report followed by its totals."""
    buf = StringIO()
    writer = _writer(buf)
    writer.writerow(order_csv_headers(symbol))

    for res in report.orders:
        order = res.order
        local = report.window.to_local(order.created_at)
        writer.writerow([
            order.order_number or order.id or "",
            local.strftime("%Y-%m-%d"),
            local.strftime("%H:%M:%S"),
            order.order_source.value,
            order.order_type or "delivery",
            order.payment_method or "card",
            _amount(res.net_amount),
            _amount(res.vat_amount),
            _amount(res.gross_amount),
            f"{res.effective_rate:.1f}",
            order.customer_name or "N/A",
            order.customer_email or "N/A",
            order.customer_phone or "N/A",
            financial_year_label(local.date()),
            vat_quarter_label(local.date()),
        ])

    summary = report.summary
    writer.writerow([])
    writer.writerow(["SUMMARY"])
    writer.writerow(["Total Orders", report.order_count])
    writer.writerow(["Total Net", fmt_money(summary.total_net, symbol)])
    writer.writerow(["Total VAT", fmt_money(summary.total_vat, symbol)])
    writer.writerow(["Total Gross", fmt_money(summary.total_gross, symbol)])

    metrics.csv_export_generated("orders")
    logger.debug("Exported %d orders to CSV", report.order_count)
    return buf.getvalue()


def export_top_items_csv(items: Iterable[TopItem], by: str = "quantity", symbol: str = "£") -> str:
    """Render a top items view (``by`` is only used to validate the ordering)."""
    if by not in TOP_ITEM_ORDERINGS:
        raise ValueError(f"Invalid ordering: {by}. Must be quantity/revenue")
    buf = StringIO()
    writer = _writer(buf)
    writer.writerow([
        "Rank",
        "Item Name",
        "Quantity Sold",
        f"Revenue ({symbol})",
        f"Average Price ({symbol})",
        "Orders",
    ])
    for rank, item in enumerate(items, start=1):
        writer.writerow([
            rank,
            item.name,
            item.quantity,
            _amount(item.revenue),
            _amount(item.average_price),
            item.order_count,
        ])
    metrics.csv_export_generated("top_items")
    return buf.getvalue()


def _scope_slug(scope: ReportScope | str) -> str:
    return ReportScope(scope).value.replace("_", "-")


def csv_filename(scope: ReportScope | str, start: date) -> str:
    """e.g. ``hmrc-in-restaurant-orders-2024-03-01.csv``."""
    return f"hmrc-{_scope_slug(scope)}-orders-{start.isoformat()}.csv"


def top_items_filename(by: str, scope: ReportScope | str, on: Optional[date] = None) -> str:
    """e.g. ``top-items-by-revenue-online-2024-03-01.csv``."""
    on = on or date.today()
    return f"top-items-by-{by}-{_scope_slug(scope)}-{on.isoformat()}.csv"
