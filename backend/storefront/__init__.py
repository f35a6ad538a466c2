"""Storefront backend: catalog, session cart and checkout."""

__version__ = "0.1.0"
