from __future__ import annotations

import logging
import math
import threading
import time
import uuid
from typing import Any, Callable, Optional

from .. import schemas
from ..core.errors import NotFoundError, ValidationError
from .pricing import describe_pizza, price_pizza, round_to_cents

logger = logging.getLogger(__name__)

CUSTOM_PIZZA_NAME = "Custom Pizza"


def coerce_number(value: Any) -> Optional[float]:
    """Finite float for numbers and numeric strings, otherwise None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _positive_quantity(value: Any) -> int:
    if value is None or value == "":
        return 1
    number = coerce_number(value)
    if number is None or number <= 0 or not number.is_integer():
        raise ValidationError("Invalid quantity value")
    return int(number)


class Cart:
    """Ordered line items for one session; lines are unique by (name, meta)."""

    def __init__(self) -> None:
        self.lines: list[schemas.CartLine] = []

    def __len__(self) -> int:
        return len(self.lines)

    def find(self, line_id: str) -> schemas.CartLine:
        for line in self.lines:
            if line.id == line_id:
                return line
        raise NotFoundError("Cart item not found")

    def add_line(self, name: str, meta: str, price: float, qty: int) -> schemas.CartLine:
        for line in self.lines:
            if line.name == name and line.meta == meta:
                line.qty += qty
                return line
        line = schemas.CartLine(id=uuid.uuid4().hex, name=name, meta=meta, price=price, qty=qty)
        self.lines.append(line)
        return line

    def add_standard(self, payload: schemas.StandardLineRequest) -> schemas.CartLine:
        price = coerce_number(payload.price)
        if not payload.name or price is None or price <= 0:
            raise ValidationError("Invalid cart item payload")
        qty = _positive_quantity(payload.qty)
        return self.add_line(payload.name, payload.meta or "", price, qty)

    def add_custom(self, payload: schemas.CustomLineRequest, catalog: schemas.CatalogSnapshot) -> schemas.CartLine:
        quantity = _positive_quantity(payload.quantity)
        config = schemas.PizzaConfiguration(
            size_id=payload.size_id,
            base_id=payload.base_id,
            sauce_id=payload.sauce_id,
            cheese_id=payload.cheese_id,
            toppings=payload.topping_ids,
            quantity=quantity,
        )
        quote = price_pizza(config, catalog)
        if quote.total <= 0:
            raise ValidationError("Invalid pricing result for custom pizza")
        meta = describe_pizza(quote.details)
        return self.add_line(CUSTOM_PIZZA_NAME, meta, quote.total / quote.quantity, quote.quantity)

    def adjust(self, line_id: str, payload: schemas.CartAdjustRequest) -> None:
        line = self.find(line_id)
        delta = payload.delta if _is_number(payload.delta) else None
        qty = payload.qty if _is_number(payload.qty) else None
        if delta is None and qty is None:
            raise ValidationError("No update value provided")

        new_qty = line.qty + delta if delta is not None else qty
        if not math.isfinite(new_qty):
            raise ValidationError("Invalid quantity value")
        if new_qty <= 0:
            self.lines.remove(line)
            return
        if not float(new_qty).is_integer():
            raise ValidationError("Invalid quantity value")
        line.qty = int(new_qty)

    def remove(self, line_id: str) -> None:
        self.lines.remove(self.find(line_id))

    def clear(self) -> None:
        self.lines.clear()

    def view(self, tax_rate: float) -> schemas.CartView:
        subtotal = sum(line.price * line.qty for line in self.lines)
        return schemas.CartView(
            items=[line.model_copy() for line in self.lines],
            subtotal=round_to_cents(subtotal),
            tax=round_to_cents(subtotal * tax_rate),
            total=round_to_cents(subtotal * (1 + tax_rate)),
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CartRegistry:
    """Session id to cart mapping; carts idle past the TTL are dropped."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._carts: dict[str, tuple[Cart, float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._carts)

    def peek(self, session_id: str | None) -> Optional[Cart]:
        if not session_id:
            return None
        with self._lock:
            self._sweep()
            entry = self._carts.get(session_id)
            if entry is None:
                return None
            self._carts[session_id] = (entry[0], self._clock())
            return entry[0]

    def get_or_create(self, session_id: str) -> Cart:
        with self._lock:
            self._sweep()
            entry = self._carts.get(session_id)
            cart = entry[0] if entry is not None else Cart()
            self._carts[session_id] = (cart, self._clock())
            return cart

    def discard(self, session_id: str | None) -> None:
        if not session_id:
            return
        with self._lock:
            self._carts.pop(session_id, None)

    def _sweep(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired = [sid for sid, (_, seen) in self._carts.items() if seen < cutoff]
        for sid in expired:
            del self._carts[sid]
        if expired:
            logger.info("Expired %d idle carts", len(expired))
