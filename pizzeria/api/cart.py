from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, status
from pydantic import ValidationError as SchemaValidationError

from .. import schemas
from ..core.errors import ValidationError
from ..services.cart import Cart
from .dependencies import AppSettings, Catalog, ExistingCart, SessionCart

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.get("", response_model=schemas.CartView)
def read_cart(cart: ExistingCart, settings: AppSettings):
    return (cart if cart is not None else Cart()).view(settings.TAX_RATE)


@router.post("/items", response_model=schemas.CartMutationOut, status_code=status.HTTP_201_CREATED)
def add_item(cart: SessionCart, catalog: Catalog, settings: AppSettings, payload: dict[str, Any] = Body(...)):
    try:
        if payload.get("type") == "custom":
            line = cart.add_custom(schemas.CustomLineRequest.model_validate(payload), catalog.available())
        else:
            line = cart.add_standard(schemas.StandardLineRequest.model_validate(payload))
    except SchemaValidationError as exc:
        raise ValidationError("Invalid cart item payload") from exc
    view = cart.view(settings.TAX_RATE)
    return schemas.CartMutationOut(**view.model_dump(), item=line.model_copy())


@router.patch("/items/{item_id}", response_model=schemas.CartView)
def adjust_item(item_id: str, payload: schemas.CartAdjustRequest, cart: ExistingCart, settings: AppSettings):
    cart = cart if cart is not None else Cart()
    cart.adjust(item_id, payload)
    return cart.view(settings.TAX_RATE)


@router.delete("/items/{item_id}", response_model=schemas.CartView)
def remove_item(item_id: str, cart: ExistingCart, settings: AppSettings):
    cart = cart if cart is not None else Cart()
    cart.remove(item_id)
    return cart.view(settings.TAX_RATE)
