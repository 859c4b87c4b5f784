"""Tests for VAT rate resolution and inclusive line arithmetic."""
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidVATRateError, VATRateNotSetError
from app.models.vat_models import Component, MixedItem, SimpleItem
from app.services.vat import line_breakdown, resolve_rate, to_pennies, vat_portion


def test_standard_rate_resolves():
    resolved = resolve_rate(SimpleItem(name="Curry", vat_rate=Decimal("20")))
    assert resolved.rate == Decimal("20")
    assert not resolved.is_zero
    assert resolved.charges_vat


def test_zero_rate_is_not_exempt():
    resolved = resolve_rate(SimpleItem(name="Naan", vat_rate=Decimal("0")))
    assert resolved.is_zero
    assert not resolved.is_exempt
    assert not resolved.charges_vat


def test_exempt_overrides_nominal_rate():
    resolved = resolve_rate(SimpleItem(name="Gift card", vat_rate=Decimal("20"), is_vat_exempt=True))
    assert resolved.is_exempt
    assert resolved.is_zero
    assert resolved.rate == Decimal("0")


def test_exempt_without_rate_is_allowed():
    resolved = resolve_rate(Component(label="Service", gross_amount=Decimal("1"), is_vat_exempt=True))
    assert resolved.is_exempt


def test_unset_rate_raises():
    with pytest.raises(VATRateNotSetError) as exc:
        resolve_rate(SimpleItem(name="Lassi"))
    assert exc.value.code == "TAX310"
    assert "Lassi" in exc.value.message


def test_unset_rate_without_name_uses_generic_message():
    with pytest.raises(VATRateNotSetError) as exc:
        resolve_rate(SimpleItem())
    assert exc.value.message == "Please select a VAT rate (0% or 20%) for this item"


def test_negative_rate_raises():
    with pytest.raises(InvalidVATRateError):
        resolve_rate(SimpleItem(name="Broken", vat_rate=Decimal("-5")))


def test_non_finite_rate_raises():
    item = SimpleItem.model_construct(name="Broken", vat_rate=Decimal("NaN"), is_vat_exempt=False)
    with pytest.raises(InvalidVATRateError):
        resolve_rate(item)


def test_mixed_item_has_no_single_rate():
    item = MixedItem(name="Biryani", price=Decimal("20"), components=[])
    with pytest.raises(InvalidVATRateError):
        resolve_rate(item)


def test_non_statutory_rate_warns(caplog):
    caplog.set_level("WARNING")
    resolved = resolve_rate(SimpleItem(name="Odd", vat_rate=Decimal("12.5")))
    assert resolved.rate == Decimal("12.5")
    assert "Non-statutory VAT rate" in caplog.text


def test_reduced_rate_does_not_warn(caplog):
    caplog.set_level("WARNING")
    resolve_rate(SimpleItem(name="Hot drink", vat_rate=Decimal("5")))
    assert "Non-statutory" not in caplog.text


def test_vat_portion_standard_rate():
    assert vat_portion(Decimal("120"), Decimal("20")) == Decimal("20")
    assert to_pennies(vat_portion(Decimal("29.00"), Decimal("20"))) == Decimal("4.83")


def test_vat_portion_zero_rate_is_exact_zero():
    assert vat_portion(Decimal("45.67"), Decimal("0")) == Decimal("0")


@pytest.mark.parametrize(
    "gross,rate",
    [
        ("0", "20"),
        ("0.01", "20"),
        ("9.99", "5"),
        ("31.50", "20"),
        ("1234.56", "12.5"),
        ("7.00", "0"),
    ],
)
def test_net_plus_vat_equals_gross(gross, rate):
    line = line_breakdown(Decimal(gross), Decimal(rate))
    assert line.net_amount + line.vat_amount == line.gross_amount
    if Decimal(rate) == 0:
        assert line.net_amount == line.gross_amount


def test_to_pennies_rounds_half_up():
    assert to_pennies(Decimal("2.345")) == Decimal("2.35")
    assert to_pennies(Decimal("2.344")) == Decimal("2.34")
