"""
VAT domain models.

Input side (fed by the order-listing and menu collaborators):
- Component / SimpleItem / MixedItem (TaxableItem sum type)
- SellableLine, VatInfo, Order

Derived side (recomputed per report, never persisted):
- VATSummary, TopItem

Money is Decimal and VAT-inclusive unless a field says otherwise.
Rates are percentages (Decimal("20") == 20%).
"""
from __future__ import annotations

import datetime as dt
import enum
import math
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator
from pydantic.alias_generators import to_camel

ZERO = Decimal("0")


class OrderSource(str, enum.Enum):
    """Sales channel an order came through."""
    ONLINE = "online"
    IN_RESTAURANT = "in_restaurant"


class VatType(str, enum.Enum):
    SIMPLE = "simple"
    MIXED = "mixed"


class ComponentType(str, enum.Enum):
    """VAT category of a mixed-item component, used for the per-category breakdown."""
    HOT_FOOD = "hot_food"
    COLD_FOOD = "cold_food"
    ALCOHOL = "alcohol"
    SOFT_DRINK = "soft_drink"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _COMPONENT_TYPE_LABELS[self]


_COMPONENT_TYPE_LABELS = {
    ComponentType.HOT_FOOD: "Hot Food",
    ComponentType.COLD_FOOD: "Cold Food",
    ComponentType.ALCOHOL: "Alcohol",
    ComponentType.SOFT_DRINK: "Drinks",
    ComponentType.OTHER: "Other",
}


class _Payload(BaseModel):
    """Base for collaborator payloads: snake_case or camelCase, immutable once parsed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Menu items
# ---------------------------------------------------------------------------

class Component(_Payload):
    """Independently taxed part of a mixed item (e.g. "Hot Food", "Raita")."""

    label: str = Field(validation_alias=AliasChoices("label", "componentName", "name"))
    gross_amount: Decimal = Field(
        ge=0,
        validation_alias=AliasChoices("gross_amount", "grossAmount", "componentCost"),
    )
    vat_rate: Decimal | None = None
    component_type: ComponentType = ComponentType.OTHER
    is_vat_exempt: bool = False
    is_active: bool = True

    @field_validator("component_type", mode="before")
    @classmethod
    def _default_type(cls, v: Any) -> Any:
        return ComponentType.OTHER if v in (None, "") else v


class SimpleItem(_Payload):
    """Item taxed at a single rate."""

    vat_type: Literal["simple"] = "simple"
    name: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    vat_rate: Decimal | None = None
    is_vat_exempt: bool = False


class MixedItem(_Payload):
    """Item composed of components carrying their own VAT treatment."""

    vat_type: Literal["mixed"] = "mixed"
    name: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    components: list[Component] = Field(default_factory=list)

    @property
    def active_components(self) -> list[Component]:
        return [c for c in self.components if c.is_active]


def _item_kind(value: Any) -> str:
    """Pick the TaxableItem variant; legacy payloads without vat_type are inferred."""
    if isinstance(value, dict):
        kind = value.get("vat_type") or value.get("vatType")
        if kind is None:
            kind = VatType.MIXED.value if value.get("components") else VatType.SIMPLE.value
        return str(kind.value if isinstance(kind, VatType) else kind)
    return str(getattr(value, "vat_type", VatType.SIMPLE.value))


TaxableItem = Annotated[
    Union[Annotated[SimpleItem, Tag("simple")], Annotated[MixedItem, Tag("mixed")]],
    Discriminator(_item_kind),
]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class SellableLine(_Payload):
    """One priced line of an order. ``gross_amount`` is what was actually charged for the line."""

    gross_amount: Decimal = Field(
        ge=0,
        validation_alias=AliasChoices("gross_amount", "grossAmount", "finalPrice"),
    )
    quantity: int = Field(default=1, ge=1)
    menu_item: TaxableItem | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, v: Any) -> Any:
        return 1 if v is None else v

    @property
    def item_name(self) -> str | None:
        return self.menu_item.name if self.menu_item is not None else None


class VatInfo(_Payload):
    """VAT figure attached by the upstream billing process at order creation."""

    total_vat: Decimal | None = Field(default=None, alias="totalVAT")

    @field_validator("total_vat", mode="before")
    @classmethod
    def _numbers_only(cls, v: Any) -> Any:
        # Anything that is not a finite JSON number is treated as absent.
        if isinstance(v, bool) or not isinstance(v, (int, float, Decimal)):
            return None
        if isinstance(v, float) and not math.isfinite(v):
            return None
        if isinstance(v, Decimal) and not v.is_finite():
            return None
        return v


class Order(_Payload):
    id: str | None = None
    order_number: str | None = None
    created_at: dt.datetime
    total: Decimal = Field(ge=0)
    order_source: OrderSource = OrderSource.ONLINE
    order_type: str | None = None
    payment_method: str | None = None
    delivery_fee: Decimal = Field(default=ZERO, ge=0)
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    items: list[SellableLine] = Field(default_factory=list)
    vat_info: VatInfo | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("order_source", mode="before")
    @classmethod
    def _default_source(cls, v: Any) -> Any:
        # Orders created before channels were tracked count as online.
        return OrderSource.ONLINE if v in (None, "") else v

    @field_validator("items", mode="before")
    @classmethod
    def _none_items(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def reference(self) -> str:
        return self.order_number or self.id or "?"


# ---------------------------------------------------------------------------
# Derived report values
# ---------------------------------------------------------------------------

class VATSummary(BaseModel):
    """Folded VAT totals for a set of orders.

    ``total_net + total_vat == total_gross`` and
    ``standard_rate_vat + zero_rate_vat == total_vat``.
    """

    model_config = ConfigDict(frozen=True)

    total_net: Decimal = ZERO
    total_vat: Decimal = ZERO
    total_gross: Decimal = ZERO
    standard_rate_vat: Decimal = ZERO
    zero_rate_vat: Decimal = ZERO

    @classmethod
    def zero(cls) -> VATSummary:
        return cls()


class TopItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: int
    revenue: Decimal
    average_price: Decimal
    order_count: int
