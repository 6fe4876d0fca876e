from __future__ import annotations

import copy
import json
import logging
import math
import re
import threading
from typing import Any

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas, seed_data
from ..core.errors import InternalError, InvalidCategoryError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ROW_ID = 1

CATEGORY_SCHEMAS: dict[str, type[schemas.ComponentOption]] = {
    "sizes": schemas.SizeOption,
    "bases": schemas.BaseOption,
    "sauces": schemas.AddOnOption,
    "cheeses": schemas.AddOnOption,
    "toppings": schemas.AddOnOption,
}
CATEGORIES = tuple(CATEGORY_SCHEMAS)

PRICE_KEYS = {"sizes": "priceModifier", "bases": "basePrice"}


def price_key(category: str) -> str:
    return PRICE_KEYS.get(category, "price")


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _clean_items(category: str, raw_items: Any) -> list[dict[str, Any]]:
    if not isinstance(raw_items, list):
        return []
    option_schema = CATEGORY_SCHEMAS[category]
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            option_schema.model_validate(raw)
        except SchemaValidationError:
            logger.warning("Dropping malformed %s entry from builder configuration: %r", category, raw)
            continue
        item = dict(raw)
        item["isAvailable"] = item.get("isAvailable") is not False
        items.append(item)
    return items


def sanitize_components(document: Any) -> dict[str, list[dict[str, Any]]]:
    """Replace any missing, malformed or empty category with the built-in defaults."""
    document = document if isinstance(document, dict) else {}
    defaults = seed_data.default_components()
    sanitized = {}
    for category in CATEGORIES:
        items = _clean_items(category, document.get(category))
        sanitized[category] = items or _clean_items(category, defaults[category])
    return sanitized


class CatalogStore:
    """Process-wide builder component catalog, backed by a single JSON row."""

    def __init__(self, components: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._components = sanitize_components(components if components is not None else seed_data.default_components())
        self._lock = threading.Lock()

    def load(self, db: Session) -> None:
        row = db.get(models.BuilderConfig, CONFIG_ROW_ID)
        document = None
        if row is not None and row.config_json:
            try:
                document = json.loads(row.config_json)
            except ValueError:
                logger.warning("Stored builder configuration is not valid JSON; using defaults.")
        else:
            logger.warning("No builder configuration stored; using defaults.")

        if not isinstance(document, dict):
            components = sanitize_components(seed_data.default_components())
            try:
                self._persist(db, components)
            except InternalError:
                logger.error("Continuing with in-memory builder defaults.")
        else:
            components = sanitize_components(document)
        with self._lock:
            self._components = components

    # Snapshots -----------------------------------------------------------------

    def _snapshot(self, only_available: bool) -> schemas.CatalogSnapshot:
        with self._lock:
            components = copy.deepcopy(self._components)
        payload: dict[str, Any] = {}
        for category, items in components.items():
            if only_available:
                items = [item for item in items if item.get("isAvailable") is not False]
            payload[category] = items
        payload["rules"] = seed_data.BUILDER_RULES
        return schemas.CatalogSnapshot.model_validate(payload)

    def available(self) -> schemas.CatalogSnapshot:
        return self._snapshot(only_available=True)

    def everything(self) -> schemas.CatalogSnapshot:
        return self._snapshot(only_available=False)

    # Mutations -----------------------------------------------------------------

    def upsert(self, db: Session, category: str, payload: schemas.ComponentUpsert) -> tuple[dict[str, Any], bool]:
        self._check_category(category)
        name = (payload.name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        price = _parse_price(payload.price)

        with self._lock:
            components = copy.deepcopy(self._components)
            items = components[category]
            index = next(
                (i for i, item in enumerate(items) if payload.id is not None and str(item["id"]) == payload.id),
                None,
            )
            created = index is None
            base = dict(items[index]) if index is not None else {"id": payload.id or _generate_id(category, name, items)}

            updated = {**base, "name": name, "isAvailable": bool(payload.is_available)}
            key = price_key(category)
            if price is not None:
                updated[key] = price
            elif key not in updated:
                updated[key] = 1 if key == "priceModifier" else 0

            if created:
                items.append(updated)
            else:
                items[index] = updated
            if not any(item.get("isAvailable") is not False for item in items):
                raise ValidationError(f"At least one {category[:-1]} must remain available")

            self._persist(db, components)
            self._components = components
        logger.info("%s %s item %s", "Created" if created else "Updated", category, updated["id"])
        return copy.deepcopy(updated), created

    def delete(self, db: Session, category: str, component_id: str) -> None:
        self._check_category(category)
        with self._lock:
            components = copy.deepcopy(self._components)
            items = components[category]
            remaining = [item for item in items if str(item["id"]) != str(component_id)]
            if len(remaining) == len(items):
                raise NotFoundError("Item not found")
            if not any(item.get("isAvailable") is not False for item in remaining):
                raise ValidationError(f"At least one {category[:-1]} must remain available")
            components[category] = remaining
            self._persist(db, components)
            self._components = components
        logger.info("Deleted %s item %s", category, component_id)

    # Internals -----------------------------------------------------------------

    @staticmethod
    def _check_category(category: str) -> None:
        if category not in CATEGORY_SCHEMAS:
            raise InvalidCategoryError("Invalid category", allowed=list(CATEGORIES))

    @staticmethod
    def _persist(db: Session, components: dict[str, list[dict[str, Any]]]) -> None:
        try:
            row = db.get(models.BuilderConfig, CONFIG_ROW_ID)
            if row is None:
                row = models.BuilderConfig(id=CONFIG_ROW_ID, config_json="")
                db.add(row)
            row.config_json = json.dumps(components)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Unable to save builder configuration")
            raise InternalError("Unable to save builder configuration") from exc


def _parse_price(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("Price must be a number")
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Price must be a number") from None
    if not math.isfinite(price):
        raise ValidationError("Price must be a number")
    return price


def _generate_id(category: str, name: str, items: list[dict[str, Any]]) -> str:
    base_slug = slugify(name) or f"{category}-item"
    existing = {str(item["id"]) for item in items}
    slug = base_slug
    counter = 1
    while slug in existing:
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
