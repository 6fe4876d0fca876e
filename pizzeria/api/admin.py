from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from .. import schemas
from ..core.errors import UnauthorizedError, ValidationError
from ..core.security import ensure_admin_configured, verify_admin_credentials
from ..services import orders as order_service
from ..services import presets as preset_service
from ..services import reports as report_service
from .dependencies import (
    ADMIN_FLAG_KEY,
    SESSION_ID_KEY,
    AppSettings,
    Catalog,
    DbSession,
    get_cart_registry,
    require_admin,
)
from .serializers import order as serialize_order
from .serializers import preset as serialize_preset

auth_router = APIRouter(prefix="/api/admin", tags=["Admin"])
router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


def _reset_session(request: Request) -> None:
    get_cart_registry(request).discard(request.session.get(SESSION_ID_KEY))
    request.session.clear()


@auth_router.post("/login")
def login(request: Request, payload: schemas.AdminLogin, settings: AppSettings):
    ensure_admin_configured(settings)
    username = (payload.username or "").strip()
    password = payload.password or ""
    if not username or not password:
        raise ValidationError("Please enter both username and password.")
    if not verify_admin_credentials(settings, username, password):
        raise UnauthorizedError("Invalid credentials.")
    _reset_session(request)
    request.session[ADMIN_FLAG_KEY] = True
    return {"success": True}


@auth_router.post("/logout")
def logout(request: Request):
    _reset_session(request)
    return {"success": True}


# Orders ------------------------------------------------------------------------------


@router.get("/orders", response_model=List[schemas.OrderOut])
def list_orders(db: DbSession):
    return [serialize_order(order) for order in order_service.list_orders(db)]


@router.get("/report")
def export_report(db: DbSession):
    content = report_service.orders_csv(order_service.list_orders(db))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders-report.csv"'},
    )


@router.get("/report/summary", response_model=schemas.ReportSummary)
def report_summary(db: DbSession):
    return report_service.summarize(order_service.list_orders(db))


# Builder components ------------------------------------------------------------------


@router.get("/components", response_model=schemas.CatalogSnapshot, response_model_exclude_none=True)
def list_components(catalog: Catalog):
    return catalog.everything()


@router.post("/components/{category}")
def upsert_component(
    category: str, payload: schemas.ComponentUpsert, response: Response, db: DbSession, catalog: Catalog
):
    item, created = catalog.upsert(db, category, payload)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {"item": item}


@router.delete("/components/{category}/{component_id}")
def delete_component(category: str, component_id: str, db: DbSession, catalog: Catalog):
    catalog.delete(db, category, component_id)
    return {"success": True}


# Preset menu -------------------------------------------------------------------------


@router.get("/menu", response_model=schemas.PresetListOut)
def list_presets(db: DbSession):
    return schemas.PresetListOut(items=[serialize_preset(item) for item in preset_service.list_presets(db)])


@router.post("/menu", response_model=schemas.PresetItemOut, status_code=status.HTTP_201_CREATED)
def create_preset(payload: schemas.PresetIn, db: DbSession):
    return schemas.PresetItemOut(item=serialize_preset(preset_service.create_preset(db, payload)))


@router.put("/menu/{preset_id}", response_model=schemas.PresetItemOut)
def update_preset(preset_id: str, payload: schemas.PresetIn, db: DbSession):
    return schemas.PresetItemOut(item=serialize_preset(preset_service.update_preset(db, preset_id, payload)))


@router.delete("/menu/{preset_id}")
def delete_preset(preset_id: str, db: DbSession):
    preset_service.delete_preset(db, preset_id)
    return {"success": True}
