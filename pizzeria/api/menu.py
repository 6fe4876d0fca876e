from __future__ import annotations

from fastapi import APIRouter

from .. import schemas
from ..services import presets as preset_service
from ..services.pricing import price_pizza
from .dependencies import Catalog, DbSession
from .serializers import preset as serialize_preset

router = APIRouter(prefix="/api", tags=["Menu"])


@router.get("/menu", response_model=schemas.MenuOut, response_model_exclude_none=True)
def get_menu(db: DbSession, catalog: Catalog):
    snapshot = catalog.available()
    presets = preset_service.list_presets(db, only_available=True)
    return schemas.MenuOut(
        sizes=snapshot.sizes,
        bases=snapshot.bases,
        sauces=snapshot.sauces,
        cheeses=snapshot.cheeses,
        toppings=snapshot.toppings,
        rules=snapshot.rules,
        preset_pizzas=[serialize_preset(item) for item in presets],
    )


@router.post("/price", response_model=schemas.PriceQuote, response_model_exclude_none=True)
def quote_price(payload: schemas.PizzaConfiguration, catalog: Catalog):
    return price_pizza(payload, catalog.available())
