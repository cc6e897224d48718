"""Shared utilities (logging, retry)."""
