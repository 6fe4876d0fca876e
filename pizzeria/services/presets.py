from __future__ import annotations

import logging
import math
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas, seed_data
from ..core.errors import InternalError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def normalize_category(category: Any) -> models.PresetCategory:
    try:
        return models.PresetCategory(category)
    except ValueError:
        return models.PresetCategory.pizza


def seed_presets(db: Session) -> int:
    if db.scalar(select(func.count()).select_from(models.MenuItem)):
        return 0
    for item in seed_data.PRESET_ITEMS:
        db.add(
            models.MenuItem(
                id=item["id"],
                name=item["name"],
                description=item["description"],
                price=item["price"],
                category=normalize_category(item["category"]),
                image_url=item["image_url"],
                is_active=item["is_available"],
            )
        )
    _commit(db)
    logger.info("Seeded %d preset menu items", len(seed_data.PRESET_ITEMS))
    return len(seed_data.PRESET_ITEMS)


def list_presets(db: Session, *, only_available: bool = False) -> Sequence[models.MenuItem]:
    stmt = select(models.MenuItem).order_by(models.MenuItem.id)
    if only_available:
        stmt = stmt.where(models.MenuItem.is_active.is_(True))
    return db.scalars(stmt).all()


def get_preset(db: Session, preset_id: Any) -> models.MenuItem:
    try:
        numeric_id = int(preset_id)
    except (TypeError, ValueError):
        raise NotFoundError("Menu item not found") from None
    preset = db.get(models.MenuItem, numeric_id)
    if preset is None:
        raise NotFoundError("Menu item not found")
    return preset


def create_preset(db: Session, payload: schemas.PresetIn) -> models.MenuItem:
    name, price = _validate(payload)
    next_id = (db.scalar(select(func.max(models.MenuItem.id))) or 0) + 1
    preset = models.MenuItem(
        id=next_id,
        name=name,
        description=payload.description or "",
        price=price,
        category=normalize_category(payload.category),
        image_url=payload.image_url or "",
        is_active=True if payload.is_available is None else payload.is_available,
    )
    db.add(preset)
    _commit(db)
    db.refresh(preset)
    logger.info("Created preset %s (%s)", preset.id, preset.name)
    return preset


def update_preset(db: Session, preset_id: Any, payload: schemas.PresetIn) -> models.MenuItem:
    preset = get_preset(db, preset_id)
    name, price = _validate(payload)
    preset.name = name
    preset.price = price
    if payload.description is not None:
        preset.description = payload.description
    if payload.category:
        preset.category = normalize_category(payload.category)
    if payload.image_url is not None:
        preset.image_url = payload.image_url
    if payload.is_available is not None:
        preset.is_active = payload.is_available
    db.add(preset)
    _commit(db)
    db.refresh(preset)
    logger.info("Updated preset %s", preset.id)
    return preset


def delete_preset(db: Session, preset_id: Any) -> None:
    preset = get_preset(db, preset_id)
    db.delete(preset)
    _commit(db)
    logger.info("Deleted preset %s", preset.id)


def _validate(payload: schemas.PresetIn) -> tuple[str, float]:
    name = str(payload.name).strip() if payload.name is not None else ""
    if not name:
        raise ValidationError("Name is required")
    price = payload.price
    if isinstance(price, bool):
        raise ValidationError("Price must be a positive number")
    try:
        price = float(price)
    except (TypeError, ValueError):
        raise ValidationError("Price must be a positive number") from None
    if not math.isfinite(price) or price <= 0:
        raise ValidationError("Price must be a positive number")
    return name, price


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Unable to save menu items")
        raise InternalError("Unable to save menu items") from exc
