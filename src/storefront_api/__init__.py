"""FastAPI application exposing the storefront checkout endpoints."""
