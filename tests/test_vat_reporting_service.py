"""Tests for VAT report generation."""
from datetime import date
from decimal import Decimal

import pytest

from app import metrics
from app.core.exceptions import InvalidReportRangeError
from app.services.vat import ReportScope, VATReportingService
from app.services.vat import reporting_service

from factories import mixed_line, simple_line


@pytest.fixture
def service():
    return VATReportingService(timezone="Europe/London", top_items_limit=20)


def test_end_of_day_is_inclusive(service, make_order):
    orders = [
        make_order(total="12.00", created_at="2024-03-05T23:59:59.500", items=[simple_line("Curry", "12.00")]),
        make_order(total="12.00", created_at="2024-03-06T00:00:00", items=[simple_line("Curry", "12.00")]),
        make_order(total="12.00", created_at="2024-03-01T00:00:00", items=[simple_line("Curry", "12.00")]),
        make_order(total="12.00", created_at="2024-02-29T23:59:59", items=[simple_line("Curry", "12.00")]),
    ]
    report = service.generate_report(orders, date(2024, 3, 1), date(2024, 3, 5))

    assert report.order_count == 2
    assert {r.order.created_at.day for r in report.orders} == {5, 1}


def test_single_day_when_end_missing(service, make_order):
    orders = [
        make_order(created_at="2024-03-05T08:00:00"),
        make_order(created_at="2024-03-04T08:00:00"),
    ]
    report = service.generate_report(orders, date(2024, 3, 5))
    assert report.order_count == 1
    assert report.window.end_date == date(2024, 3, 5)


def test_aware_timestamps_use_report_timezone(service, make_order):
    # 23:30 UTC on 30 June is 00:30 BST on 1 July
    order = make_order(created_at="2024-06-30T23:30:00+00:00")
    assert service.generate_report([order], date(2024, 6, 30)).order_count == 0
    assert service.generate_report([order], date(2024, 7, 1)).order_count == 1


def test_inverted_range_raises(service):
    with pytest.raises(InvalidReportRangeError):
        service.generate_report([], date(2024, 3, 5), date(2024, 3, 1))
    with pytest.raises(ValueError):
        service.generate_report([], date(2024, 3, 5), date(2024, 3, 1))


def test_scope_filters_by_source(service, make_order):
    orders = [
        make_order(total="12.00", orderSource="online"),
        make_order(total="24.00", orderSource="in_restaurant"),
        make_order(total="6.00", orderSource=None),
    ]
    day = date(2024, 3, 5)
    assert service.generate_report(orders, day, scope="online").order_count == 2
    in_restaurant = service.generate_report(orders, day, scope=ReportScope.IN_RESTAURANT)
    assert in_restaurant.order_count == 1
    assert in_restaurant.total_revenue == Decimal("24.00")
    assert service.generate_report(orders, day, scope="all").order_count == 3


def test_empty_selection_gives_zeroed_summary(service):
    report = service.generate_report([], date(2024, 3, 5))

    assert report.order_count == 0
    assert report.summary.total_vat == 0
    assert report.summary.total_gross == 0
    assert report.average_order_value == 0
    assert report.top_by_quantity == []
    assert report.top_by_revenue == []


def test_summary_invariants(service, make_order):
    orders = [
        make_order(total="31.50", items=[simple_line("Lamb Curry", "29.00")]),
        make_order(total="20.00", items=[mixed_line("20.00")], vatInfo={"totalVAT": 2.5}),
        make_order(total="6.00", items=[simple_line("Lassi", "6.00", rate="0")]),
    ]
    report = service.generate_report(orders, date(2024, 3, 5))
    summary = report.summary

    assert summary.total_vat == Decimal("7.33")
    assert summary.total_gross == Decimal("57.50")
    assert summary.total_net + summary.total_vat == summary.total_gross
    assert summary.standard_rate_vat + summary.zero_rate_vat == summary.total_vat
    assert summary.zero_rate_vat == 0
    assert report.average_order_value == Decimal("19.17")


def test_bad_order_is_isolated(service, make_order, caplog):
    caplog.set_level("WARNING")
    good = make_order(total="12.00", items=[simple_line("Curry", "12.00")])
    bad = make_order(total="10.00", items=[simple_line("Mystery", "10.00", rate=None)])

    report = service.generate_report([good, bad], date(2024, 3, 5))

    assert report.order_count == 2
    assert report.summary.total_vat == Decimal("2.00")
    assert report.summary.total_gross == Decimal("22.00")
    assert report.failed_orders == [bad.reference]
    assert "VAT resolution failed" in caplog.text


def test_free_mixed_side_keeps_order_vat(service, make_order):
    free_side = mixed_line(
        "0",
        item={
            "vatType": "mixed",
            "name": "Free Poppadoms",
            "price": "0",
            "components": [{"label": "Poppadoms", "grossAmount": "0", "vatRate": "20"}],
        },
    )
    order = make_order(total="12.00", items=[simple_line("Curry", "12.00"), free_side])

    report = service.generate_report([order], date(2024, 3, 5))

    assert report.summary.total_vat == Decimal("2.00")
    assert report.failed_orders == []


def test_top_items_rankings(service, make_order):
    orders = [
        make_order(items=[simple_line("Naan", "6.00", quantity=3), simple_line("Curry", "12.00")]),
        make_order(items=[simple_line("Naan", "2.00", quantity=1), simple_line("Biryani Special", "30.00")]),
    ]
    report = service.generate_report(orders, date(2024, 3, 5))

    naan = report.top_by_quantity[0]
    assert naan.name == "Naan"
    assert naan.quantity == 4
    assert naan.revenue == Decimal("8.00")
    assert naan.average_price == Decimal("2.00")
    assert naan.order_count == 2
    assert [i.name for i in report.top_by_revenue] == ["Biryani Special", "Curry", "Naan"]


def test_top_items_ties_and_unknown_name(service, make_order):
    orders = [
        make_order(items=[
            simple_line("Samosa", "4.00"),
            simple_line("Bhaji", "4.00"),
            {"finalPrice": "3.00", "quantity": 5},
        ]),
    ]
    report = service.generate_report(orders, date(2024, 3, 5))

    assert report.top_by_quantity[0].name == "Unknown Item"
    # Samosa and Bhaji tie; either order is acceptable
    assert {i.name for i in report.top_by_quantity[1:]} == {"Samosa", "Bhaji"}


def test_item_names_are_case_sensitive(service, make_order):
    orders = [make_order(items=[simple_line("naan", "2.00"), simple_line("Naan", "2.00")])]
    report = service.generate_report(orders, date(2024, 3, 5))
    assert len(report.top_by_quantity) == 2


def test_top_items_are_limited(make_order):
    service = VATReportingService(timezone="Europe/London", top_items_limit=20)
    lines = [simple_line(f"Dish {n}", "1.00") for n in range(25)]
    report = service.generate_report([make_order(total="25.00", items=lines)], date(2024, 3, 5))
    assert len(report.top_by_quantity) == 20
    assert len(report.top_by_revenue) == 20


def test_zero_top_items_limit_is_respected(make_order):
    service = VATReportingService(timezone="Europe/London", top_items_limit=0)
    report = service.generate_report([make_order(items=[simple_line("Naan", "2.00")])], date(2024, 3, 5))
    assert report.top_by_quantity == []
    assert report.top_by_revenue == []


def test_report_timer_stops_when_resolution_raises(service, make_order, monkeypatch):
    recorded = []

    def broken(order):
        raise RuntimeError("order store went away")

    monkeypatch.setattr(reporting_service, "resolve_order_vat", broken)
    monkeypatch.setattr(
        metrics, "vat_report_generated", lambda scope, duration_seconds=None: recorded.append(scope)
    )

    with pytest.raises(RuntimeError):
        service.generate_report([make_order()], date(2024, 3, 5))
    assert recorded == ["all"]


def test_report_is_idempotent(service, make_order):
    orders = [
        make_order(total="31.50", items=[simple_line("Lamb Curry", "29.00")]),
        make_order(total="20.00", items=[mixed_line("20.00")]),
    ]
    first = service.generate_report(orders, date(2024, 3, 5))
    second = service.generate_report(orders, date(2024, 3, 5))

    assert first.summary == second.summary
    assert first.top_by_quantity == second.top_by_quantity
    assert [r.vat_amount for r in first.orders] == [r.vat_amount for r in second.orders]


def test_source_breakdown(service, make_order):
    orders = [
        make_order(total="12.00", orderSource="online", items=[simple_line("Curry", "12.00")]),
        make_order(total="24.00", orderSource="in_restaurant", items=[simple_line("Thali", "24.00")]),
    ]
    breakdown = service.generate_source_breakdown(orders, date(2024, 3, 5))

    assert breakdown.online.order_count == 1
    assert breakdown.in_restaurant.order_count == 1
    assert breakdown.in_restaurant.summary.total_vat == Decimal("4.00")
    assert breakdown.total_revenue == Decimal("36.00")
