"""Primitive type tags: boolean, string, number, integer, date, object, array."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any, Callable

from ..codes import (
    INVALID_TYPE,
    MAX_ARRAY,
    MAX_DATE,
    MAX_INTEGER,
    MAX_NUMBER,
    MAX_STRING,
    MIN_ARRAY,
    MIN_DATE,
    MIN_INTEGER,
    MIN_NUMBER,
    MIN_STRING,
)
from .base import TypeTag


class PrimitiveType(TypeTag):
    """
    Tag for a bare host type tested with a membership predicate.

    Parameters
    ----------
    name : str
        Canonical alias of the type (e.g. ``"string"``).
    marker : type
        Python type that doubles as a shorthand declaration (e.g. ``str``).
    test : callable
        Membership predicate.
    measure : callable, optional
        Maps a member to the quantity compared against the field's `min`
        and `max` (length for strings, the value itself for numbers).
    bound_codes : tuple of str, optional
        ``(min_code, max_code)`` reported when a bound is crossed.
    align : callable, optional
        ``align(quantity, bound)`` converting a quantity so it compares
        with `bound` (dates against datetimes and the reverse).
    """

    def __init__(
        self,
        name: str,
        marker: type,
        test: Callable[[Any], bool],
        measure: Callable[[Any], Any] | None = None,
        bound_codes: tuple[str, str] | None = None,
        align: Callable[[Any, Any], Any] | None = None,
    ):
        super().__init__(name)
        self.marker = marker
        self._test = test
        self._measure = measure
        self._bound_codes = bound_codes
        self._align = align or _unaligned

    def is_instance(self, value: Any) -> bool:
        return self._test(value)

    def build_check(self, field_name, field, schema):
        minimum = getattr(field, "min", None)
        maximum = getattr(field, "max", None)

        if self._measure is None or (minimum is None and maximum is None):
            return super().build_check(field_name, field, schema)

        test = self._test
        measure = self._measure
        align = self._align
        min_code, max_code = self._bound_codes

        def check(value, options, context, path):
            if not test(value):
                return INVALID_TYPE
            quantity = measure(value)
            if minimum is not None and align(quantity, minimum) < minimum:
                return min_code
            if maximum is not None and align(quantity, maximum) > maximum:
                return max_code
            return None

        return check


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        # ints are always finite; math.isfinite overflows on huge ones
        and (isinstance(value, int) or math.isfinite(value))
    )


def _is_integer(value: Any) -> bool:
    return _is_number(value) and (isinstance(value, int) or value.is_integer())


def _identity(value: Any) -> Any:
    return value


def _unaligned(quantity: Any, bound: Any) -> Any:
    return quantity


def _align_date(quantity: Any, bound: Any) -> Any:
    if isinstance(quantity, datetime) and not isinstance(bound, datetime):
        return quantity.date()
    if isinstance(bound, datetime) and not isinstance(quantity, datetime):
        return datetime.combine(quantity, time(), tzinfo=bound.tzinfo)
    return quantity


boolean_type = PrimitiveType("boolean", bool, lambda value: isinstance(value, bool))

string_type = PrimitiveType(
    "string",
    str,
    lambda value: isinstance(value, str),
    measure=len,
    bound_codes=(MIN_STRING, MAX_STRING),
)

number_type = PrimitiveType(
    "number",
    float,
    _is_number,
    measure=_identity,
    bound_codes=(MIN_NUMBER, MAX_NUMBER),
)

integer_type = PrimitiveType(
    "integer",
    int,
    _is_integer,
    measure=_identity,
    bound_codes=(MIN_INTEGER, MAX_INTEGER),
)

date_type = PrimitiveType(
    "date",
    date,
    lambda value: isinstance(value, date),
    measure=_identity,
    bound_codes=(MIN_DATE, MAX_DATE),
    align=_align_date,
)

datetime_type = PrimitiveType(
    "datetime",
    datetime,
    lambda value: isinstance(value, datetime),
    measure=_identity,
    bound_codes=(MIN_DATE, MAX_DATE),
    align=_align_date,
)

object_type = PrimitiveType("object", dict, lambda value: isinstance(value, Mapping))

array_type = PrimitiveType(
    "array",
    list,
    lambda value: isinstance(value, (list, tuple)),
    measure=len,
    bound_codes=(MIN_ARRAY, MAX_ARRAY),
)

PRIMITIVE_TYPES: tuple[PrimitiveType, ...] = (
    boolean_type,
    string_type,
    number_type,
    integer_type,
    date_type,
    datetime_type,
    object_type,
    array_type,
)
