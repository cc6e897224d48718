"""Storefront checkout backend: package catalog, Stripe checkout and notifications."""

__version__ = "0.1.0"
