from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from .. import models, schemas
from ..services import orders as order_service

logger = logging.getLogger(__name__)


def preset(item: models.MenuItem) -> schemas.PresetOut:
    return schemas.PresetOut(
        id=item.id,
        name=item.name,
        description=item.description or "",
        price=item.price,
        category=item.category,
        image_url=item.image_url or "",
        is_available=item.is_active,
    )


def order_lines(order_id: int, items: Any) -> list[schemas.OrderLine]:
    """Stored lines that still fit the line shape; anything else is skipped with a warning."""
    lines = []
    for position, item in enumerate(items if isinstance(items, list) else []):
        try:
            lines.append(schemas.OrderLine.model_validate(item))
        except SchemaValidationError:
            logger.warning("Order %s has an unreadable line item at position %d", order_id, position)
    return lines


def order(order: models.Order) -> schemas.OrderOut:
    record = order_service.order_record(order)
    record["items"] = order_lines(order.id, order.items)
    order_schema = schemas.OrderOut.model_validate(record)
    # Keep the datetimes as stored rather than the mirror's string form.
    return order_schema.model_copy(update={"created_at": order.created_at, "updated_at": order.updated_at})
