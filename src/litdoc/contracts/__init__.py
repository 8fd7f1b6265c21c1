"""Versioned JSON contracts for configuration and run reports."""

from __future__ import annotations

from .schema.validate import load_catalog, validate, validate_self

__all__ = ["load_catalog", "validate", "validate_self"]
