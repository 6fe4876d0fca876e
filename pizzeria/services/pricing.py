from __future__ import annotations

import math
from typing import Optional, Sequence, TypeVar

from .. import schemas
from ..core.errors import InvalidConfigurationError

CURRENCY = "USD"

OptionT = TypeVar("OptionT", bound=schemas.ComponentOption)


def round_to_cents(value: float) -> float:
    """Half-up rounding at cents, independent of float banker's rounding."""
    return math.floor(value * 100 + 0.5) / 100


def find_option(options: Sequence[OptionT], component_id: Optional[str]) -> Optional[OptionT]:
    if not component_id:
        return None
    for option in options:
        if option.matches(component_id):
            return option
    return None


def resolve_option(
    options: Sequence[OptionT], component_id: Optional[str], default_id: Optional[str]
) -> Optional[OptionT]:
    """Requested id, then the configured default, then the first available item."""
    available = [option for option in options if option.is_available]
    option = find_option(available, component_id) or find_option(available, default_id)
    if option is None and available:
        option = available[0]
    return option


def price_pizza(config: schemas.PizzaConfiguration, catalog: schemas.CatalogSnapshot) -> schemas.PriceQuote:
    rules = catalog.rules
    size = resolve_option(catalog.sizes, config.size_id, rules.default_size_id)
    base = resolve_option(catalog.bases, config.base_id, rules.default_base_id)
    sauce = resolve_option(catalog.sauces, config.sauce_id, rules.default_sauce_id)
    cheese = resolve_option(catalog.cheeses, config.cheese_id, rules.default_cheese_id)

    if size is None or base is None:
        raise InvalidConfigurationError("Invalid pizza configuration: missing size or base")

    dough_and_size = base.base_price * size.price_modifier
    sauce_price = sauce.price if sauce else 0.0
    cheese_price = cheese.price if cheese else 0.0

    available_toppings = [topping for topping in catalog.toppings if topping.is_available]
    toppings = []
    for topping_id in config.toppings[: rules.max_toppings]:
        topping = find_option(available_toppings, topping_id)
        if topping is not None:
            toppings.append(topping)
    toppings_price = sum(topping.price for topping in toppings)

    single = dough_and_size + sauce_price + cheese_price + toppings_price
    quantity = config.quantity if config.quantity >= 1 else 1

    return schemas.PriceQuote(
        currency=CURRENCY,
        quantity=quantity,
        single_pizza_subtotal=round_to_cents(single),
        total=round_to_cents(single * quantity),
        breakdown=schemas.PriceBreakdown(
            base=round_to_cents(dough_and_size),
            sauce=round_to_cents(sauce_price),
            cheese=round_to_cents(cheese_price),
            toppings=round_to_cents(toppings_price),
        ),
        details=schemas.PriceDetails(size=size, base=base, sauce=sauce, cheese=cheese, toppings=toppings),
    )


def describe_pizza(details: schemas.PriceDetails) -> str:
    """Human-readable summary used as the cart line meta for custom pizzas."""
    parts = [
        option.name for option in (details.size, details.base, details.sauce, details.cheese) if option is not None
    ]
    if details.toppings:
        parts.append("Toppings: " + ", ".join(topping.name for topping in details.toppings))
    return " | ".join(parts)
