"""Shared fixtures for perfectschema tests."""

import re

import pytest

from perfectschema import Schema


@pytest.fixture
def item_schema():
    """Cart item with required, bounded, numeric and wildcard fields."""
    return Schema(
        {
            "_id": str,
            "name": {"type": str, "required": True, "min": 3},
            "qty": {"type": float, "default_value": 0},
            "price": float,
            "data": Schema.Any,
        },
        {"name": "item"},
    )


@pytest.fixture
def cart_schema(item_schema):
    """Cart holding an array of items."""
    return Schema({"items": Schema.ArrayOf(item_schema)}, {"name": "cart"})


@pytest.fixture
def chained_schemas():
    """Three schemas nested into each other: a -> b -> c."""
    c = Schema({"c": str})
    b = Schema({"b": c})
    a = Schema({"a": b})
    return a, b, c


@pytest.fixture
def invalid_values():
    """Values of every kind, none of them strings or numbers."""
    return [
        True,
        False,
        float("inf"),
        float("nan"),
        {},
        [],
        lambda: None,
        re.compile("."),
    ]
