"""Online pizza ordering service: catalog, pricing, cart, checkout and orders."""

__version__ = "0.1.0"
