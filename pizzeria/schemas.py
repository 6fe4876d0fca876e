from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import FulfillmentMethod, OrderStatus, PresetCategory


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)


def _optional_id(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _id_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [str(item) for item in value if item not in (None, "")]


def coerce_quantity(value: Any) -> int:
    """Quantities that are absent, non-numeric or below one fall back to 1."""
    if value is None or isinstance(value, bool):
        return 1
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(number) or number < 1:
        return 1
    return int(number)


# Catalog -----------------------------------------------------------------------------


class ComponentOption(CamelModel):
    """One selectable builder component; presentation extras (asset, layer) pass through."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True, extra="allow"
    )

    id: str
    name: str
    id_alt: Optional[str] = None
    is_available: bool = True

    @field_validator("id_alt", mode="before")
    @classmethod
    def normalize_alt_id(cls, value: Any) -> Any:
        return _optional_id(value)

    def matches(self, component_id: str) -> bool:
        return component_id == self.id or (self.id_alt is not None and component_id == self.id_alt)


class SizeOption(ComponentOption):
    price_modifier: float = 1.0


class BaseOption(ComponentOption):
    base_price: float = 0.0


class AddOnOption(ComponentOption):
    price: float = 0.0


class BuilderRules(CamelModel):
    max_toppings: int = 10
    default_size_id: str = "medium"
    default_base_id: str = "classic-dough"
    default_sauce_id: str = "marinara"
    default_cheese_id: str = "mozzarella"


class CatalogSnapshot(CamelModel):
    sizes: list[SizeOption] = Field(default_factory=list)
    bases: list[BaseOption] = Field(default_factory=list)
    sauces: list[AddOnOption] = Field(default_factory=list)
    cheeses: list[AddOnOption] = Field(default_factory=list)
    toppings: list[AddOnOption] = Field(default_factory=list)
    rules: BuilderRules = Field(default_factory=BuilderRules)


class ComponentUpsert(CamelModel):
    id: Optional[str] = None
    name: Optional[str] = None
    price: Any = None
    is_available: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _optional_id(value)


class PresetIn(CamelModel):
    name: Any = None
    description: Optional[str] = None
    price: Any = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None


class PresetOut(CamelModel):
    id: int
    name: str
    description: str
    price: float
    category: PresetCategory
    image_url: str
    is_available: bool


class PresetListOut(CamelModel):
    items: list[PresetOut]


class PresetItemOut(CamelModel):
    item: PresetOut


class MenuOut(CamelModel):
    sizes: list[SizeOption]
    bases: list[BaseOption]
    sauces: list[AddOnOption]
    cheeses: list[AddOnOption]
    toppings: list[AddOnOption]
    rules: BuilderRules
    preset_pizzas: list[PresetOut]


# Pricing -----------------------------------------------------------------------------


class PizzaConfiguration(CamelModel):
    size_id: Optional[str] = None
    base_id: Optional[str] = None
    sauce_id: Optional[str] = None
    cheese_id: Optional[str] = None
    toppings: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("toppings", "toppingIds", "topping_ids"),
    )
    quantity: int = 1

    @field_validator("size_id", "base_id", "sauce_id", "cheese_id", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> Any:
        return _optional_id(value)

    @field_validator("toppings", mode="before")
    @classmethod
    def normalize_toppings(cls, value: Any) -> list[str]:
        return _id_list(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def normalize_quantity(cls, value: Any) -> int:
        return coerce_quantity(value)


class PriceBreakdown(BaseModel):
    base: float
    sauce: float
    cheese: float
    toppings: float


class PriceDetails(CamelModel):
    size: SizeOption
    base: BaseOption
    sauce: Optional[AddOnOption] = None
    cheese: Optional[AddOnOption] = None
    toppings: list[AddOnOption] = Field(default_factory=list)


class PriceQuote(CamelModel):
    currency: str = "USD"
    quantity: int
    single_pizza_subtotal: float
    total: float
    breakdown: PriceBreakdown
    details: PriceDetails


# Cart --------------------------------------------------------------------------------


class CartLine(CamelModel):
    id: str
    name: str
    meta: str = ""
    price: float
    qty: int


class CustomLineRequest(CamelModel):
    type: Literal["custom"] = "custom"
    size_id: Optional[str] = None
    base_id: Optional[str] = None
    sauce_id: Optional[str] = None
    cheese_id: Optional[str] = None
    topping_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("toppingIds", "topping_ids", "toppings"),
    )
    quantity: Any = None

    @field_validator("size_id", "base_id", "sauce_id", "cheese_id", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> Any:
        return _optional_id(value)

    @field_validator("topping_ids", mode="before")
    @classmethod
    def normalize_toppings(cls, value: Any) -> list[str]:
        return _id_list(value)


class StandardLineRequest(CamelModel):
    name: Optional[str] = None
    meta: Optional[str] = None
    price: Any = None
    qty: Any = None


class CartAdjustRequest(CamelModel):
    delta: Any = None
    qty: Any = None


class CartView(CamelModel):
    items: list[CartLine]
    subtotal: float
    tax: float
    total: float


class CartMutationOut(CartView):
    item: Optional[CartLine] = None


# Orders ------------------------------------------------------------------------------


class CustomerIn(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None


class CustomerInfo(CamelModel):
    name: str
    phone: str
    address: str = ""
    email: Optional[str] = None


class OrderLine(CamelModel):
    name: str
    meta: str = ""
    price: float
    qty: int


class OrderTotals(CamelModel):
    subtotal: float
    tax: float
    total: float


class OrderCreate(CamelModel):
    customer: CustomerInfo
    items: list[OrderLine]
    totals: OrderTotals
    fulfillment_method: FulfillmentMethod = FulfillmentMethod.pickup
    item_count: Optional[int] = None
    status: OrderStatus = OrderStatus.pending


class OrderOut(CamelModel):
    id: int
    customer: CustomerInfo
    items: list[OrderLine]
    totals: OrderTotals
    fulfillment_method: FulfillmentMethod
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    item_count: int


class OrderTracking(CamelModel):
    order_id: int
    status: OrderStatus
    placed_at: datetime
    estimated_minutes: int


class OrderStatusUpdate(CamelModel):
    status: Any = None


class OrderStatusOut(CamelModel):
    order_id: int
    status: OrderStatus
    updated_at: datetime


class CheckoutRequest(CamelModel):
    customer: Optional[CustomerIn] = None
    cart: Optional[list[Any]] = None
    fulfillment_method: Optional[str] = None


class CheckoutOut(CamelModel):
    message: str = "Order created"
    order_id: int


# Admin -------------------------------------------------------------------------------


class AdminLogin(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ReportSummary(CamelModel):
    revenue: float
    orders: int
    items: int
