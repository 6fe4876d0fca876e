from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.errors import ValidationError
from .cart import CUSTOM_PIZZA_NAME, Cart, coerce_number
from .legacy import LegacyOrderFile
from .orders import create_order
from .pricing import round_to_cents

logger = logging.getLogger(__name__)


def parse_fulfillment(value: Any) -> models.FulfillmentMethod:
    if isinstance(value, str) and value.strip().lower() == models.FulfillmentMethod.delivery.value:
        return models.FulfillmentMethod.delivery
    return models.FulfillmentMethod.pickup


def validate_customer(
    customer: Optional[schemas.CustomerIn], fulfillment: models.FulfillmentMethod
) -> schemas.CustomerInfo:
    customer = customer or schemas.CustomerIn()
    name = (customer.name or "").strip()
    phone = (customer.phone or "").strip()
    address = (customer.address or "").strip()
    email = (customer.email or "").strip() or None

    if not name:
        raise ValidationError("Customer name is required")
    if not phone:
        raise ValidationError("Customer phone is required")
    if fulfillment == models.FulfillmentMethod.delivery and not address:
        raise ValidationError("Address is required for delivery")
    return schemas.CustomerInfo(name=name, phone=phone, address=address, email=email)


def normalize_lines(lines: Iterable[Any]) -> list[schemas.OrderLine]:
    """Drop lines whose price or qty is not a positive finite number."""
    normalized = []
    for line in lines:
        if isinstance(line, schemas.CartLine):
            line = line.model_dump()
        if not isinstance(line, dict):
            continue
        price = coerce_number(line.get("price"))
        qty = line.get("qty")
        qty = 1.0 if qty is None or qty == "" else coerce_number(qty)
        if price is None or price <= 0 or qty is None or qty <= 0 or not qty.is_integer():
            continue
        normalized.append(
            schemas.OrderLine(
                name=str(line.get("name") or CUSTOM_PIZZA_NAME),
                meta=str(line.get("meta") or ""),
                price=price,
                qty=int(qty),
            )
        )
    return normalized


def submit_order(
    db: Session,
    request: schemas.CheckoutRequest,
    *,
    cart: Optional[Cart],
    tax_rate: float,
    mirror: Optional[LegacyOrderFile] = None,
) -> models.Order:
    """Validate, total and persist an order, then empty the session cart."""
    fulfillment = parse_fulfillment(request.fulfillment_method)
    customer = validate_customer(request.customer, fulfillment)

    source = copy.deepcopy(cart.lines) if cart is not None and len(cart) else (request.cart or [])
    items = normalize_lines(source)
    if not items:
        raise ValidationError("Cart is empty or invalid")

    subtotal = sum(item.price * item.qty for item in items)
    tax = subtotal * tax_rate
    totals = schemas.OrderTotals(
        subtotal=round_to_cents(subtotal),
        tax=round_to_cents(tax),
        total=round_to_cents(subtotal + tax),
    )
    order = create_order(
        db,
        schemas.OrderCreate(
            customer=customer,
            items=items,
            totals=totals,
            fulfillment_method=fulfillment,
            item_count=sum(item.qty for item in items),
        ),
        mirror=mirror,
    )
    if cart is not None:
        cart.clear()
    logger.info("Checkout complete for order %s (%s)", order.id, fulfillment.value)
    return order
