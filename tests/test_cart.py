from __future__ import annotations

import pytest

from pizzeria import schemas
from pizzeria.core.errors import NotFoundError, ValidationError
from pizzeria.services.cart import Cart, CartRegistry
from pizzeria.services.catalog import CatalogStore

TAX_RATE = 0.086


@pytest.fixture()
def stock() -> schemas.CatalogSnapshot:
    return CatalogStore().available()


def _standard(**kwargs) -> schemas.StandardLineRequest:
    return schemas.StandardLineRequest.model_validate(kwargs)


def _custom(**kwargs) -> schemas.CustomLineRequest:
    return schemas.CustomLineRequest.model_validate({"type": "custom", **kwargs})


def _adjust(**kwargs) -> schemas.CartAdjustRequest:
    return schemas.CartAdjustRequest.model_validate(kwargs)


def test_standard_lines_merge_on_name_and_meta() -> None:
    cart = Cart()
    first = cart.add_standard(_standard(name="Cowabunga Classic", price=14.99, qty=1))
    second = cart.add_standard(_standard(name="Cowabunga Classic", price=14.99, qty="2"))
    cart.add_standard(_standard(name="Cowabunga Classic", meta="extra crispy", price=14.99))

    assert first.id == second.id
    assert len(cart) == 2
    assert cart.lines[0].qty == 3
    assert cart.lines[1].qty == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"price": 5},
        {"name": "Soda", "price": 0},
        {"name": "Soda", "price": "free"},
        {"name": "Soda", "price": 2, "qty": -1},
        {"name": "Soda", "price": 2, "qty": 1.5},
    ],
)
def test_standard_line_validation(payload) -> None:
    with pytest.raises(ValidationError):
        Cart().add_standard(_standard(**payload))


def test_identical_custom_pizzas_merge(stock: schemas.CatalogSnapshot) -> None:
    cart = Cart()
    request = dict(
        sizeId="large",
        baseId="classic-dough",
        sauceId="alfredo",
        cheeseId="mozzarella",
        toppingIds=["bacon"],
        quantity=1,
    )
    cart.add_custom(_custom(**request), stock)
    line = cart.add_custom(_custom(**request), stock)

    assert len(cart) == 1
    assert line.name == "Custom Pizza"
    assert line.qty == 2
    assert line.price == 12.65
    assert line.meta == 'Large (14") | Classic Hand-Tossed | Alfredo | Mozzarella | Toppings: Bacon'


def test_custom_unit_price_times_qty_matches_quote(stock: schemas.CatalogSnapshot) -> None:
    cart = Cart()
    line = cart.add_custom(_custom(sizeId="small", toppingIds=["ham", "onions"], quantity=3), stock)
    assert line.qty == 3
    assert line.price == pytest.approx(9.2)
    assert abs(line.price * line.qty - 27.6) <= 0.01 * line.qty


@pytest.mark.parametrize("quantity", [-2, 0, "lots"])
def test_custom_rejects_invalid_quantity(stock: schemas.CatalogSnapshot, quantity) -> None:
    with pytest.raises(ValidationError, match="Invalid quantity value"):
        Cart().add_custom(_custom(quantity=quantity), stock)


def test_custom_without_quantity_defaults_to_one(stock: schemas.CatalogSnapshot) -> None:
    line = Cart().add_custom(_custom(), stock)
    assert line.qty == 1
    assert line.price == 8.0


def test_adjust_by_delta_and_absolute_qty() -> None:
    cart = Cart()
    line = cart.add_standard(_standard(name="Wings", price=6.5, qty=2))

    cart.adjust(line.id, _adjust(delta=3))
    assert cart.lines[0].qty == 5
    cart.adjust(line.id, _adjust(qty=1))
    assert cart.lines[0].qty == 1
    cart.adjust(line.id, _adjust(delta=-1))
    assert len(cart) == 0


def test_adjust_to_negative_qty_removes_line() -> None:
    cart = Cart()
    line = cart.add_standard(_standard(name="Wings", price=6.5, qty=2))
    cart.adjust(line.id, _adjust(qty=-3))
    assert cart.lines == []


def test_adjust_errors() -> None:
    cart = Cart()
    line = cart.add_standard(_standard(name="Wings", price=6.5))

    with pytest.raises(NotFoundError):
        cart.adjust("missing", _adjust())
    with pytest.raises(ValidationError, match="No update value provided"):
        cart.adjust(line.id, _adjust())
    with pytest.raises(ValidationError, match="No update value provided"):
        cart.adjust(line.id, _adjust(delta="1"))
    with pytest.raises(ValidationError, match="Invalid quantity value"):
        cart.adjust(line.id, _adjust(qty=2.5))
    assert cart.lines[0].qty == 1


def test_insert_then_remove_leaves_cart_unchanged() -> None:
    cart = Cart()
    cart.add_standard(_standard(name="Wings", price=6.5))
    before = [line.model_dump() for line in cart.lines]

    added = cart.add_standard(_standard(name="Garlic Knots", price=4.0))
    cart.remove(added.id)

    assert [line.model_dump() for line in cart.lines] == before
    with pytest.raises(NotFoundError):
        cart.remove(added.id)


def test_view_totals() -> None:
    cart = Cart()
    cart.add_standard(_standard(name="Cowabunga Classic", price=14.99, qty=2))
    view = cart.view(TAX_RATE)

    assert view.subtotal == 29.98
    assert view.tax == 2.58
    assert view.total == 32.56
    assert abs(view.total - view.subtotal * (1 + TAX_RATE)) <= 0.01


def test_empty_cart_view() -> None:
    view = Cart().view(TAX_RATE)
    assert view.items == []
    assert (view.subtotal, view.tax, view.total) == (0.0, 0.0, 0.0)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_registry_binds_carts_to_sessions() -> None:
    registry = CartRegistry(ttl_seconds=60)
    cart = registry.get_or_create("session-a")
    cart.add_standard(_standard(name="Wings", price=6.5))

    assert registry.peek("session-a") is cart
    assert registry.peek("session-b") is None
    assert registry.peek(None) is None
    assert registry.get_or_create("session-b") is not cart

    registry.discard("session-a")
    assert registry.peek("session-a") is None


def test_registry_expires_idle_carts() -> None:
    clock = FakeClock()
    registry = CartRegistry(ttl_seconds=60, clock=clock)
    registry.get_or_create("idle")
    clock.now += 30
    registry.get_or_create("active")
    clock.now += 45

    assert registry.peek("idle") is None
    assert registry.peek("active") is not None
    assert len(registry) == 1
