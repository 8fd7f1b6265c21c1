from __future__ import annotations

import pytest

from litdoc.contracts import load_catalog, validate
from litdoc.contracts.schema import load_schema
from litdoc.core.errors import ScriptError
from litdoc.core.exit_codes import ERR_VALIDATION


def test_catalog_entries_resolve_to_schemas() -> None:
    catalog = load_catalog()
    assert set(catalog) == {"litdoc.config.v1", "litdoc.report.v1"}
    for name in catalog:
        assert load_schema(name)["$id"] == name


def test_validation_errors_carry_the_pointer() -> None:
    with pytest.raises(ScriptError) as info:
        validate("litdoc.config.v1", {"format": {"max_length": 2}})
    assert info.value.code == ERR_VALIDATION
    assert "at format/max_length" in info.value.message


def test_unknown_schema() -> None:
    with pytest.raises(ScriptError) as info:
        load_schema("litdoc.nope.v1")
    assert info.value.kind == "unknown_schema"
