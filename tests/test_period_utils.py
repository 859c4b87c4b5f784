from datetime import date, datetime, timezone

import pytest

from app.services.vat import DateWindow, financial_year_label, quick_range, vat_quarter_label


def test_window_bounds_are_half_open():
    window = DateWindow.from_dates(date(2024, 3, 1), date(2024, 3, 5), tz="Europe/London")
    assert window.contains(datetime(2024, 3, 1, 0, 0, 0))
    assert window.contains(datetime(2024, 3, 5, 23, 59, 59, 999999))
    assert not window.contains(datetime(2024, 3, 6, 0, 0, 0))
    assert not window.contains(datetime(2024, 2, 29, 23, 59, 59))


def test_window_converts_aware_timestamps():
    window = DateWindow.from_dates(date(2024, 1, 15), tz="Europe/London")
    # GMT in winter: UTC and London agree
    assert window.contains(datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc))


@pytest.mark.parametrize(
    "day,label",
    [
        (date(2024, 1, 1), "Q1 2024 (Jan-Mar)"),
        (date(2024, 4, 30), "Q2 2024 (Apr-Jun)"),
        (date(2024, 9, 30), "Q3 2024 (Jul-Sep)"),
        (date(2024, 12, 31), "Q4 2024 (Oct-Dec)"),
    ],
)
def test_vat_quarter_label(day, label):
    assert vat_quarter_label(day) == label


@pytest.mark.parametrize(
    "day,label",
    [
        (date(2024, 3, 31), "2023-24"),
        (date(2024, 4, 1), "2024-25"),
        (date(2099, 12, 1), "2099-00"),
    ],
)
def test_financial_year_label(day, label):
    assert financial_year_label(day) == label


def test_quick_ranges():
    today = date(2024, 8, 31)
    assert quick_range("today", today) == (today, today)
    assert quick_range("week", today) == (date(2024, 8, 24), today)
    assert quick_range("month", today) == (date(2024, 8, 1), today)
    assert quick_range("6month", today) == (date(2024, 2, 29), today)
    assert quick_range("1year", today) == (date(2023, 8, 31), today)


def test_unknown_quick_range():
    with pytest.raises(ValueError):
        quick_range("fortnight", date(2024, 1, 1))
