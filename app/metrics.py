"""Metrics facade.

Service code should ONLY call the semantic helpers here so we can change backend freely.

Metrics:
- vat_reports_generated_total        Reports built, by scope
- order_vat_resolved_total           Orders resolved, by path (trusted/recomputed/failed)
- vat_reconciliation_warnings_total  Mixed items whose charged price diverged from components
- greetings_issued_total             Rotating greetings handed out, by source (counter/fallback)
- csv_exports_total                  CSV downloads produced, by kind (orders/top_items)
- vat_report_duration_seconds        Wall time spent building a report
"""

from __future__ import annotations

import logging
import time

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_VAT_REPORTS = Counter("vat_reports_generated_total", "VAT reports generated", ["scope"])
_ORDER_VAT_RESOLVED = Counter(
    "order_vat_resolved_total", "Orders resolved to a VAT amount", ["path"]
)
_RECONCILIATION_WARNINGS = Counter(
    "vat_reconciliation_warnings_total",
    "Mixed item lines whose charged price did not reconcile with component amounts",
)
_GREETINGS_ISSUED = Counter("greetings_issued_total", "Rotating greetings issued", ["source"])
_CSV_EXPORTS = Counter("csv_exports_total", "CSV exports generated", ["kind"])
_REPORT_DURATION = Histogram(
    "vat_report_duration_seconds",
    "Time spent generating a VAT report",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5),
)


def vat_report_generated(scope: str, duration_seconds: float | None = None):
    _VAT_REPORTS.labels(scope=scope).inc()
    if duration_seconds is not None:
        _REPORT_DURATION.observe(duration_seconds)
    logger.debug("metric vat_reports_generated_total[scope=%s] += 1", scope)


def order_vat_resolved(path: str):
    _ORDER_VAT_RESOLVED.labels(path=path).inc()


def vat_reconciliation_warning():
    _RECONCILIATION_WARNINGS.inc()


def greeting_issued(source: str):
    _GREETINGS_ISSUED.labels(source=source).inc()


def csv_export_generated(kind: str):
    _CSV_EXPORTS.labels(kind=kind).inc()


class ReportTimer:
    def __init__(self, scope: str):
        self.scope = scope
        self.start = time.perf_counter()

    def stop(self) -> float:
        dur = time.perf_counter() - self.start
        vat_report_generated(self.scope, duration_seconds=dur)
        return dur


__all__ = [
    "vat_report_generated",
    "order_vat_resolved",
    "vat_reconciliation_warning",
    "greeting_issued",
    "csv_export_generated",
    "ReportTimer",
]
