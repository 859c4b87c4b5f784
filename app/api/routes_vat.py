"""
VAT Routes.

VAT reports over already-fetched orders, HMRC CSV downloads, save-time item
validation and single-order VAT resolution.
"""
from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Query
from fastapi.responses import Response

from app.core.config import settings
from app.models.schemas.vat import (
    ItemPreviewOut,
    ItemValidateRequest,
    OrderResolveRequest,
    OrderVATOut,
    ReportRequest,
    SourceBreakdownOut,
    VATReportOut,
)
from app.services.vat import (
    VATReportingService,
    csv_filename,
    export_orders_csv,
    export_top_items_csv,
    resolve_order_vat,
    top_items_filename,
    validate_item_for_save,
)
from app.utils.currency_fmt import currency_symbol

logger = logging.getLogger(__name__)
router = APIRouter()


def _currency(requested: str | None) -> tuple[str, str]:
    code = (requested or settings.CURRENCY_CODE).upper()
    return code, currency_symbol(code)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/reports", response_model=VATReportOut)
def generate_vat_report(payload: ReportRequest):
    """VAT summary, per-order figures and top items for the window."""
    code, symbol = _currency(payload.currency)
    report = VATReportingService().generate_report(
        payload.orders, payload.start_date, payload.end_date, payload.scope
    )
    return VATReportOut.from_report(report, code, symbol)


@router.post("/reports/breakdown", response_model=SourceBreakdownOut)
def generate_source_breakdown(payload: ReportRequest):
    """Online and in-restaurant reports side by side (scope is ignored)."""
    code, symbol = _currency(payload.currency)
    breakdown = VATReportingService().generate_source_breakdown(
        payload.orders, payload.start_date, payload.end_date
    )
    return SourceBreakdownOut.from_breakdown(breakdown, code, symbol)


@router.post("/reports/csv")
def download_vat_report_csv(payload: ReportRequest):
    """HMRC CSV of every order in the report."""
    _, symbol = _currency(payload.currency)
    report = VATReportingService().generate_report(
        payload.orders, payload.start_date, payload.end_date, payload.scope
    )
    content = export_orders_csv(report, symbol)
    return _csv_response(content, csv_filename(payload.scope, payload.start_date))


@router.post("/reports/top-items/csv")
def download_top_items_csv(
    payload: ReportRequest,
    by: Literal["quantity", "revenue"] = Query("quantity", description="Ranking: quantity or revenue"),
):
    """Top selling items CSV ranked by quantity or revenue."""
    _, symbol = _currency(payload.currency)
    report = VATReportingService().generate_report(
        payload.orders, payload.start_date, payload.end_date, payload.scope
    )
    items = report.top_by_quantity if by == "quantity" else report.top_by_revenue
    content = export_top_items_csv(items, by, symbol)
    return _csv_response(content, top_items_filename(by, payload.scope, payload.start_date))


@router.post("/items/validate", response_model=ItemPreviewOut)
def validate_item(payload: ItemValidateRequest):
    """Check an item's VAT setup before it is saved and preview its VAT."""
    _, symbol = _currency(payload.currency)
    preview = validate_item_for_save(payload.item)
    return ItemPreviewOut.from_preview(preview, symbol)


@router.post("/orders/resolve", response_model=OrderVATOut)
def resolve_order(payload: OrderResolveRequest):
    """VAT for a single order (stored figure or recomputed from its lines)."""
    return OrderVATOut.from_result(resolve_order_vat(payload.order))
