"""Pydantic schemas for API requests and responses.

Sub-modules:
- vat: VAT report, item validation, order resolution and greeting schemas
"""
from .vat import (
    GreetingOut,
    ItemPreviewOut,
    ItemValidateRequest,
    OrderResolveRequest,
    OrderVATOut,
    ReportRequest,
    SourceBreakdownOut,
    TopItemOut,
    VATReportOut,
    VATSummaryOut,
)

__all__ = [
    # Requests
    "ReportRequest",
    "ItemValidateRequest",
    "OrderResolveRequest",
    # Responses
    "VATSummaryOut",
    "TopItemOut",
    "OrderVATOut",
    "VATReportOut",
    "SourceBreakdownOut",
    "ItemPreviewOut",
    "GreetingOut",
]
