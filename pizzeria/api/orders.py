from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from .. import schemas
from ..services import orders as order_service
from ..services.checkout import submit_order
from .dependencies import (
    SESSION_ID_KEY,
    AppSettings,
    DbSession,
    ExistingCart,
    OrderMirror,
    get_cart_registry,
    require_admin,
)
from .serializers import order as serialize_order
from .serializers import order_status as serialize_order_status

router = APIRouter(prefix="/api", tags=["Orders"])


@router.post("/checkout", response_model=schemas.CheckoutOut, status_code=status.HTTP_201_CREATED)
def checkout(
    request: Request,
    payload: schemas.CheckoutRequest,
    db: DbSession,
    cart: ExistingCart,
    settings: AppSettings,
    mirror: OrderMirror,
):
    order = submit_order(db, payload, cart=cart, tax_rate=settings.TAX_RATE, mirror=mirror)
    get_cart_registry(request).discard(request.session.get(SESSION_ID_KEY))
    return schemas.CheckoutOut(order_id=order.id)


@router.post("/payment")
def simulate_payment():
    return {"message": "Payment processed (stub)", "status": "success"}


@router.get("/orders/{order_id}", response_model=schemas.OrderTracking)
def track_order(order_id: str, db: DbSession, settings: AppSettings):
    order = order_service.get_order(db, order_id)
    return order_service.tracking(order, settings.ESTIMATED_MINUTES)


@router.get("/orders/{order_id}/details", response_model=schemas.OrderOut)
def order_details(order_id: str, db: DbSession):
    return serialize_order(order_service.get_order(db, order_id))


@router.patch(
    "/orders/{order_id}/status",
    response_model=schemas.OrderStatusOut,
    dependencies=[Depends(require_admin)],
)
def update_order_status(order_id: str, payload: schemas.OrderStatusUpdate, db: DbSession, mirror: OrderMirror):
    order = order_service.set_status(db, order_id, payload.status, mirror=mirror)
    return serialize_order_status(order)
