"""One-time import of the flat-file order log and the optional JSON mirror."""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..models import utcnow

logger = logging.getLogger(__name__)


class LegacyOrderFile:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read_records(self) -> list[Any]:
        if not self.path.exists():
            return []
        try:
            contents = self.path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("Unable to read legacy orders from %s", self.path)
            return []
        if not contents.strip():
            return []
        try:
            records = json.loads(contents)
        except ValueError:
            logger.warning("Legacy orders file %s is not valid JSON; ignoring it", self.path)
            return []
        if not isinstance(records, list):
            logger.warning("Legacy orders file %s does not hold a list; ignoring it", self.path)
            return []
        return records

    def write(self, records: list[dict[str, Any]]) -> None:
        """Best effort: failures are logged, never raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(records, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError:
            logger.exception("Failed to save orders to %s", self.path)


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def is_well_formed(record: Any) -> bool:
    if not isinstance(record, dict):
        return False
    totals = record.get("totals")
    return (
        _is_finite_number(record.get("id"))
        and isinstance(totals, dict)
        and _is_finite_number(totals.get("total"))
        and isinstance(record.get("items"), list)
        and isinstance(record.get("customer"), dict)
    )


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return utcnow()
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
    return utcnow()


def _number(value: Any, default: float = 0.0) -> float:
    return float(value) if _is_finite_number(value) else default


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def legacy_items(items: list[Any]) -> list[dict[str, Any]]:
    """Coerce logged line items into the stored shape; entries with no positive qty are dropped."""
    lines = []
    for item in items:
        if not isinstance(item, dict):
            continue
        qty = item.get("qty")
        qty = 1.0 if qty is None or qty == "" else _to_float(qty)
        if qty is None or qty <= 0:
            continue
        price = _to_float(item.get("price"))
        lines.append(
            {
                "name": str(item.get("name") or "Custom Pizza"),
                "meta": str(item.get("meta") or ""),
                "price": price if price is not None else 0.0,
                # Fractional quantities from older writers round to the nearest whole pizza.
                "qty": max(1, int(math.floor(qty + 0.5))),
            }
        )
    return lines


def order_from_record(record: dict[str, Any]) -> models.Order:
    customer = record["customer"]
    totals = record["totals"]
    items = legacy_items(record["items"])
    try:
        status = models.OrderStatus(record.get("status"))
    except (TypeError, ValueError):
        status = models.OrderStatus.pending
    fulfillment = (
        models.FulfillmentMethod.delivery
        if record.get("fulfillmentMethod") == models.FulfillmentMethod.delivery.value
        else models.FulfillmentMethod.pickup
    )
    item_count = record.get("itemCount")
    if not _is_finite_number(item_count):
        item_count = sum(item["qty"] for item in items)
    created_at = parse_timestamp(record.get("createdAt"))
    return models.Order(
        id=int(record["id"]),
        subtotal=_number(totals.get("subtotal")),
        tax=_number(totals.get("tax")),
        total=float(totals["total"]),
        item_count=int(item_count),
        customer_name=str(customer.get("name") or ""),
        customer_phone=str(customer.get("phone") or ""),
        customer_address=str(customer.get("address") or ""),
        customer_email=customer.get("email") or None,
        fulfillment_method=fulfillment,
        status=status,
        items=items,
        created_at=created_at,
        updated_at=parse_timestamp(record.get("updatedAt")) if record.get("updatedAt") else created_at,
    )


def migrate_legacy_orders(db: Session, legacy: LegacyOrderFile) -> int:
    """Import well-formed legacy records in one transaction when the orders table is empty."""
    if db.scalar(select(func.count()).select_from(models.Order)):
        return 0
    records = legacy.read_records()
    if not records:
        return 0

    seen: set[int] = set()
    migrated = 0
    for position, record in enumerate(records):
        if not is_well_formed(record):
            logger.warning("Skipping malformed legacy order at position %d", position)
            continue
        order_id = int(record["id"])
        if order_id in seen:
            logger.warning("Skipping duplicate legacy order id %d", order_id)
            continue
        seen.add(order_id)
        db.add(order_from_record(record))
        migrated += 1

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Legacy order migration failed; no orders were imported")
        return 0
    logger.info("Migrated %d legacy orders from %s (%d skipped)", migrated, legacy.path, len(records) - migrated)
    return migrated
