from __future__ import annotations

import pytest

from pizzeria import schemas
from pizzeria.core.errors import InvalidConfigurationError
from pizzeria.services.catalog import CatalogStore
from pizzeria.services.pricing import describe_pizza, price_pizza, resolve_option, round_to_cents


@pytest.fixture()
def stock() -> schemas.CatalogSnapshot:
    return CatalogStore().available()


def _config(**kwargs) -> schemas.PizzaConfiguration:
    return schemas.PizzaConfiguration.model_validate(kwargs)


def test_round_to_cents_rounds_half_up() -> None:
    assert round_to_cents(0.125) == 0.13
    assert round_to_cents(32.5583) == 32.56
    assert round_to_cents(10.0) == 10.0


def test_prices_medium_with_two_toppings(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(
        _config(
            sizeId="medium",
            baseId="classic-dough",
            sauceId="marinara",
            cheeseId="mozzarella",
            toppings=["pepperoni", "mushrooms"],
            quantity=1,
        ),
        stock,
    )
    assert quote.currency == "USD"
    assert quote.breakdown.base == 8.0
    assert quote.breakdown.sauce == 0.0
    assert quote.breakdown.cheese == 0.0
    assert quote.breakdown.toppings == 2.25
    assert quote.single_pizza_subtotal == 10.25
    assert quote.total == 10.25
    assert [topping.id for topping in quote.details.toppings] == ["pepperoni", "mushrooms"]


def test_missing_ids_fall_back_to_defaults(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(_config(), stock)
    assert quote.details.size.id == "medium"
    assert quote.details.base.id == "classic-dough"
    assert quote.details.sauce.id == "marinara"
    assert quote.details.cheese.id == "mozzarella"
    assert quote.total == 8.0


def test_unknown_id_uses_default(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(_config(sizeId="family", sauceId="pesto"), stock)
    assert quote.details.size.id == "medium"
    assert quote.details.sauce.id == "marinara"


def test_alternate_id_resolves(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(_config(sauceId="bbq"), stock)
    assert quote.details.sauce.id == "barbecue"
    assert quote.breakdown.sauce == 0.75


def test_size_multiplier_and_quantity(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(_config(sizeId="large", sauceId="alfredo", toppings=["bacon"], quantity=3), stock)
    assert quote.breakdown.base == 10.4
    assert quote.single_pizza_subtotal == 12.65
    assert quote.quantity == 3
    assert quote.total == 37.95


@pytest.mark.parametrize("quantity", [0, -4, "many", None, float("nan"), True])
def test_bad_quantity_defaults_to_one(stock: schemas.CatalogSnapshot, quantity) -> None:
    quote = price_pizza(_config(quantity=quantity), stock)
    assert quote.quantity == 1
    assert quote.total == quote.single_pizza_subtotal


def test_toppings_are_clamped_to_max(stock: schemas.CatalogSnapshot) -> None:
    toppings = [
        "pepperoni",
        "italian_sausage",
        "ham",
        "salami",
        "bacon",
        "chicken",
        "beef",
        "mushrooms",
        "onions",
        "red_onions",
        "green_peppers",
        "banana_peppers",
    ]
    quote = price_pizza(_config(toppings=toppings), stock)
    assert len(quote.details.toppings) == 10
    assert quote.breakdown.toppings == 12.0


def test_unknown_toppings_are_ignored(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(_config(toppings=["anchovies", "ham"]), stock)
    assert [topping.id for topping in quote.details.toppings] == ["ham"]


def test_unavailable_default_falls_back_to_first_available() -> None:
    catalog = schemas.CatalogSnapshot.model_validate(
        {
            "sizes": [
                {"id": "small", "name": "Small", "priceModifier": 0.9},
                {"id": "medium", "name": "Medium", "priceModifier": 1.0, "isAvailable": False},
            ],
            "bases": [{"id": "classic-dough", "name": "Classic", "basePrice": 10.0}],
            "sauces": [],
            "cheeses": [],
            "toppings": [],
        }
    )
    quote = price_pizza(_config(sizeId="medium"), catalog)
    assert quote.details.size.id == "small"
    assert quote.details.sauce is None
    assert quote.total == 9.0


def test_missing_size_is_invalid_configuration() -> None:
    catalog = schemas.CatalogSnapshot.model_validate(
        {"sizes": [], "bases": [{"id": "classic-dough", "name": "Classic", "basePrice": 8.0}]}
    )
    with pytest.raises(InvalidConfigurationError):
        price_pizza(_config(), catalog)


def test_resolve_option_prefers_requested_id(stock: schemas.CatalogSnapshot) -> None:
    assert resolve_option(stock.sizes, "small", "medium").id == "small"
    assert resolve_option(stock.sizes, None, "large").id == "large"
    assert resolve_option([], "small", "medium") is None


def test_pricing_is_deterministic(stock: schemas.CatalogSnapshot) -> None:
    config = _config(sizeId="small", toppings=["ham", "pineapple"], quantity=2)
    first = price_pizza(config, stock).model_dump_json(by_alias=True)
    second = price_pizza(config, stock).model_dump_json(by_alias=True)
    assert first == second


def test_describe_pizza_lists_components(stock: schemas.CatalogSnapshot) -> None:
    quote = price_pizza(_config(sizeId="large", toppings=["bacon", "ham"]), stock)
    assert describe_pizza(quote.details) == (
        'Large (14") | Classic Hand-Tossed | Marinara | Mozzarella | Toppings: Bacon, Ham'
    )
