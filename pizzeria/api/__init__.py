from __future__ import annotations

from fastapi import FastAPI

from . import admin, cart, menu, orders


def register_routers(app: FastAPI) -> None:
    app.include_router(menu.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(admin.auth_router)
    app.include_router(admin.router)
