"""Order-domain service functions for the pizzeria API."""

from . import bootstrap, cart, catalog, checkout, legacy, orders, presets, pricing, reports

__all__ = [
    "bootstrap",
    "cart",
    "catalog",
    "checkout",
    "legacy",
    "orders",
    "presets",
    "pricing",
    "reports",
]
