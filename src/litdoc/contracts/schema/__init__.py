from __future__ import annotations

from .validate import CatalogEntry, load_catalog, load_schema, validate, validate_self

__all__ = ["CatalogEntry", "load_catalog", "load_schema", "validate", "validate_self"]
