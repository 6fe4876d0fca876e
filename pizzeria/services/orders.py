from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.errors import InternalError, NotFoundError, ValidationError
from ..models import utcnow
from .legacy import LegacyOrderFile

logger = logging.getLogger(__name__)

ALLOWED_STATUSES = [status.value for status in models.OrderStatus]

# Serializes id assignment across worker threads.
_id_lock = threading.Lock()


def create_order(
    db: Session, payload: schemas.OrderCreate, *, mirror: Optional[LegacyOrderFile] = None
) -> models.Order:
    items = [item.model_dump(mode="json") for item in payload.items]
    item_count = payload.item_count if payload.item_count is not None else sum(item.qty for item in payload.items)
    now = utcnow()
    with _id_lock:
        next_id = (db.scalar(select(func.max(models.Order.id))) or 0) + 1
        order = models.Order(
            id=next_id,
            subtotal=payload.totals.subtotal,
            tax=payload.totals.tax,
            total=payload.totals.total,
            item_count=item_count,
            customer_name=payload.customer.name,
            customer_phone=payload.customer.phone,
            customer_address=payload.customer.address,
            customer_email=payload.customer.email,
            fulfillment_method=payload.fulfillment_method,
            status=payload.status,
            items=items,
            created_at=now,
            updated_at=now,
        )
        db.add(order)
        _commit(db, "Unable to save order")
    db.refresh(order)
    logger.info("Created order %s (%d items, total %.2f)", order.id, order.item_count, order.total)
    _write_mirror(db, mirror)
    return order


def get_order(db: Session, order_id: Any) -> models.Order:
    try:
        numeric_id = int(order_id)
    except (TypeError, ValueError):
        raise NotFoundError("Order not found") from None
    order = db.get(models.Order, numeric_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def list_orders(db: Session) -> Sequence[models.Order]:
    stmt = select(models.Order).order_by(models.Order.created_at.desc(), models.Order.id.desc())
    return db.scalars(stmt).all()


def parse_status(value: Any) -> models.OrderStatus:
    try:
        return models.OrderStatus(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid status value", allowed=ALLOWED_STATUSES) from None


def set_status(
    db: Session, order_id: Any, status: Any, *, mirror: Optional[LegacyOrderFile] = None
) -> models.Order:
    order = get_order(db, order_id)
    new_status = parse_status(status)
    previous = order.status
    order.status = new_status
    order.updated_at = utcnow()
    db.add(order)
    _commit(db, "Unable to update order status")
    db.refresh(order)
    logger.info("Order %s status %s -> %s", order.id, previous.value, new_status.value)
    _write_mirror(db, mirror)
    return order


def tracking(order: models.Order, estimated_minutes: int) -> schemas.OrderTracking:
    return schemas.OrderTracking(
        order_id=order.id,
        status=order.status,
        placed_at=order.created_at,
        estimated_minutes=estimated_minutes,
    )


def _timestamp(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds") + "Z"


def order_record(order: models.Order) -> dict[str, Any]:
    """camelCase document shape shared by the API and the JSON mirror."""
    return {
        "id": order.id,
        "customer": {
            "name": order.customer_name,
            "phone": order.customer_phone,
            "address": order.customer_address,
            "email": order.customer_email,
        },
        "items": order.items,
        "totals": {"subtotal": order.subtotal, "tax": order.tax, "total": order.total},
        "fulfillmentMethod": order.fulfillment_method.value,
        "status": order.status.value,
        "createdAt": _timestamp(order.created_at),
        "updatedAt": _timestamp(order.updated_at),
        "itemCount": order.item_count,
    }


def _write_mirror(db: Session, mirror: Optional[LegacyOrderFile]) -> None:
    if mirror is None:
        return
    orders = sorted(list_orders(db), key=lambda order: order.id)
    mirror.write([order_record(order) for order in orders])


def _commit(db: Session, message: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(message)
        raise InternalError(message) from exc
