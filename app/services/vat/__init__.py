"""VAT Module.

VAT computation and reporting for restaurant orders.

Sub-modules:
- rates: rate resolution for items and components
- line_calculator: inclusive VAT arithmetic
- apportionment: mixed item component apportionment
- order_resolver: trusted vs recomputed order VAT
- period_utils: report windows and HMRC period labels
- reporting_service: VATReportingService and the VAT summary
- csv_export: HMRC CSV and top items exports
- item_validation: save-time checks for menu items
"""
from .apportionment import (
    ApportionmentResult,
    ComponentVAT,
    apportion_mixed_item,
    category_totals,
    format_breakdown_lines,
    format_category_lines,
)
from .csv_export import (
    csv_filename,
    export_orders_csv,
    export_top_items_csv,
    order_csv_headers,
    top_items_filename,
)
from .item_validation import validate_item_for_save
from .line_calculator import LineVAT, line_breakdown, to_pennies, vat_portion
from .order_resolver import OrderVAT, RecomputedVAT, ResolvedLine, TrustedVAT, resolve_order_vat
from .period_utils import DateWindow, financial_year_label, quick_range, vat_quarter_label
from .rates import ResolvedRate, resolve_rate
from .reporting_service import ReportScope, SourceBreakdown, VATReport, VATReportingService, summarize

__all__ = [
    # Rates and arithmetic
    "ResolvedRate",
    "resolve_rate",
    "LineVAT",
    "line_breakdown",
    "vat_portion",
    "to_pennies",
    # Mixed items
    "ApportionmentResult",
    "ComponentVAT",
    "apportion_mixed_item",
    "format_breakdown_lines",
    "category_totals",
    "format_category_lines",
    # Orders
    "OrderVAT",
    "TrustedVAT",
    "RecomputedVAT",
    "ResolvedLine",
    "resolve_order_vat",
    # Reports
    "DateWindow",
    "quick_range",
    "vat_quarter_label",
    "financial_year_label",
    "ReportScope",
    "VATReport",
    "SourceBreakdown",
    "VATReportingService",
    "summarize",
    # Exports
    "order_csv_headers",
    "export_orders_csv",
    "export_top_items_csv",
    "csv_filename",
    "top_items_filename",
    # Validation
    "validate_item_for_save",
]
