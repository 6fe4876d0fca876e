"""Built-in catalog defaults used to seed an empty store."""

from __future__ import annotations

import copy
from typing import Any

BUILDER_RULES: dict[str, Any] = {
    "maxToppings": 10,
    "defaultSizeId": "medium",
    "defaultBaseId": "classic-dough",
    "defaultSauceId": "marinara",
    "defaultCheeseId": "mozzarella",
}

SIZES = [
    {"id": "small", "name": 'Small (10")', "priceModifier": 0.9, "isAvailable": True},
    {"id": "medium", "name": 'Medium (12")', "priceModifier": 1.0, "isAvailable": True},
    {"id": "large", "name": 'Large (14")', "priceModifier": 1.3, "isAvailable": True},
]

BASES = [
    {
        "id": "classic-dough",
        "name": "Classic Hand-Tossed",
        "basePrice": 8.0,
        "asset": "/assets/base/crust.png",
        "layer": 10,
        "isAvailable": True,
    },
]

SAUCES = [
    {
        "id": "marinara",
        "name": "Marinara",
        "price": 0.0,
        "asset": "/assets/sauce/marinara.png",
        "layer": 20,
        "isAvailable": True,
    },
    {
        "id": "alfredo",
        "name": "Alfredo",
        "price": 0.75,
        "asset": "/assets/sauce/alfredo.png",
        "layer": 20,
        "isAvailable": True,
    },
    {
        "id": "barbecue",
        "idAlt": "bbq",
        "name": "Barbecue",
        "price": 0.75,
        "asset": "/assets/sauce/barbecue.png",
        "layer": 20,
        "isAvailable": True,
    },
]

CHEESES = [
    {
        "id": "mozzarella",
        "name": "Mozzarella",
        "price": 0.0,
        "asset": "/assets/cheese/cheese.png",
        "layer": 30,
        "isAvailable": True,
    },
]


def _topping(topping_id: str, name: str, price: float) -> dict[str, Any]:
    return {
        "id": topping_id,
        "name": name,
        "price": price,
        "asset": f"/assets/toppings/{topping_id}.png",
        "layer": 40,
        "isAvailable": True,
    }


TOPPINGS = [
    _topping("pepperoni", "Pepperoni", 1.25),
    _topping("italian_sausage", "Italian Sausage", 1.25),
    _topping("ham", "Ham", 1.25),
    _topping("salami", "Salami", 1.50),
    _topping("bacon", "Bacon", 1.50),
    _topping("chicken", "Chicken", 1.50),
    _topping("beef", "Beef", 1.25),
    _topping("mushrooms", "Mushrooms", 1.00),
    _topping("onions", "Onions", 0.75),
    _topping("red_onions", "Red Onions", 0.75),
    _topping("green_peppers", "Green Peppers", 1.00),
    _topping("banana_peppers", "Banana Peppers", 1.00),
    _topping("jalapeno", "Jalapeño", 1.00),
    _topping("spinach", "Spinach", 1.00),
    _topping("tomatoes", "Tomatoes", 1.00),
    _topping("black_olives", "Black Olives", 0.75),
    _topping("pineapple", "Pineapple", 1.00),
]

PRESET_ITEMS = [
    {
        "id": 1,
        "name": "Cowabunga Classic",
        "description": "Pepperoni, mozzarella, red sauce.",
        "price": 14.99,
        "category": "pizza",
        "image_url": "/images/pizza-classic.png",
        "is_available": True,
    },
    {
        "id": 2,
        "name": "Turtle Supreme",
        "description": "Sausage, pepperoni, peppers, onions, olives.",
        "price": 17.99,
        "category": "pizza",
        "image_url": "/images/turtle-pizza.png",
        "is_available": True,
    },
    {
        "id": 3,
        "name": "Veggie Dojo",
        "description": "Mushrooms, peppers, onions, olives, spinach.",
        "price": 15.99,
        "category": "pizza",
        "image_url": "/images/pizza-veggie.png",
        "is_available": True,
    },
]


def default_components() -> dict[str, list[dict[str, Any]]]:
    return copy.deepcopy(
        {
            "sizes": SIZES,
            "bases": BASES,
            "sauces": SAUCES,
            "cheeses": CHEESES,
            "toppings": TOPPINGS,
        }
    )


def main() -> None:
    from .core.config import get_settings
    from .core.logging import configure_logging
    from .database import build_engine, build_session_factory
    from .services.bootstrap import bootstrap

    configure_logging()
    settings = get_settings()
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    with session_factory() as db:
        bootstrap(db, settings)
    engine.dispose()
    print(f"Database at {settings.DATABASE_URL} is seeded.")


if __name__ == "__main__":
    main()
