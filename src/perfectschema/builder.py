"""Compilation of normalized field specs into callable field validators."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from .codes import INVALID, IS_NULL, REQUIRED
from .fields import FieldSpec, normalize_fields
from .types import MISSING, Check, TypeRegistry, chain

if TYPE_CHECKING:  # pragma: no cover
    from .schema import Schema

FieldValidator = Callable[..., Any]


def interpret_custom(result: Any) -> str | None:
    """Map a custom rule's return value to an error code."""
    if isinstance(result, str):
        return result or None
    if result is False:
        return INVALID
    return None


def custom_rule(custom: Callable[[Any], Any] | None) -> Check | None:
    """Wrap an author-supplied ``custom(value)`` as a type-level check."""
    if custom is None:
        return None

    def rule(value, options, context, path):
        return chain(custom(value), interpret_custom)

    return rule


async def _settled(code: str | None) -> str | None:
    return code


def build_validator(
    field_name: str | None, field: FieldSpec, schema: Schema | None = None
) -> FieldValidator:
    """
    Compile the validator of one field.

    Checks run in a fixed order and stop at the first that applies:
    presence (``required``), nullability (``isNull``), the type check from
    the field's tag, then the custom rule.

    Parameters
    ----------
    field_name : str, optional
        Name of the field; nested schema messages are prefixed with it.
    field : FieldSpec
        Normalized declaration.
    schema : Schema, optional
        Schema owning the field.

    Returns
    -------
    callable
        ``validator(value=MISSING, options=None, context=None)`` returning an
        error code, None, or an awaitable resolving to one of those. When
        `custom` is a coroutine function the result is always awaitable.
    """
    check = field.type.validator_factory(
        field_name, field, schema, custom_rule(field.custom)
    )
    required = field.required
    nullable = field.nullable
    offer_null = nullable is None and field.type.checks_null
    always_async = field.custom is not None and inspect.iscoroutinefunction(field.custom)

    def validator(value=MISSING, options=None, context=None):
        if value is MISSING:
            code = REQUIRED if required else None
        elif value is None and not offer_null:
            code = IS_NULL if nullable is False else None
        else:
            code = check(value, options, context, field_name)

        if always_async and not inspect.isawaitable(code):
            return _settled(code)
        return code

    return validator


def build_validators(
    fields: Mapping[str, FieldSpec], schema: Schema | None = None
) -> dict[str, FieldSpec]:
    """Return copies of `fields` with their compiled validator attached."""
    return {
        field_name: field.model_copy(
            update={"validator": build_validator(field_name, field, schema)}
        )
        for field_name, field in fields.items()
    }


def compile_validators(
    fields: Mapping[str, Any] | None = None,
    schema: Schema | None = None,
    registry: TypeRegistry | None = None,
) -> dict[str, FieldValidator]:
    """
    Normalize raw declarations and return one validator per field name.

    A falsy `fields` yields an empty mapping.

        >>> from perfectschema.builder import compile_validators
        >>> validators = compile_validators({"name": {"type": str, "min": 3}})
        >>> validators["name"]("ab")
        'minString'
    """
    if not fields:
        return {}
    built = build_validators(normalize_fields(fields, registry), schema)
    return {field_name: field.validator for field_name, field in built.items()}
