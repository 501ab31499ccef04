"""Type tag base class, the missing-value sentinel, and result chaining."""

from __future__ import annotations

import inspect
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from ..codes import INVALID_TYPE

if TYPE_CHECKING:  # pragma: no cover
    from ..context import ValidationContext
    from ..fields import FieldSpec
    from ..schema import Schema


# Sentinel for a value absent from the validated mapping (distinct from None)
MISSING: Any = object()

Outcome = Union[str, None, Awaitable[Union[str, None]]]
Check = Callable[[Any, Any, "ValidationContext | None", "str | None"], Outcome]


class TypeKind(str, Enum):
    """Discriminator carried by every type tag and schema."""

    PRIMITIVE = "primitive"
    ANY = "any"
    ANY_OF = "any_of"
    ARRAY_OF = "array_of"
    SCHEMA = "schema"
    LAZY = "lazy"


def chain(result: Any, callback: Callable[[Any], Any]) -> Any:
    """
    Apply `callback` to `result`, waiting for it first if it is pending.

    Synchronous results stay synchronous; an awaitable result yields a
    coroutine that resolves to the callback's (possibly awaited) return.
    """
    if inspect.isawaitable(result):

        async def _resolve():
            value = callback(await result)
            if inspect.isawaitable(value):
                value = await value
            return value

        return _resolve()
    return callback(result)


class TypeTag:
    """
    Canonical identity of a field type.

    A tag knows how to test membership of a value and how to build the
    type-specific check for a field declared with it. Tags are compared by
    identity, so every schema and every composite declaration owns its own.

    Subclasses override `is_instance` and, when they honour field options
    such as bounds, `build_check`.
    """

    kind = TypeKind.PRIMITIVE

    # Whether a None value is offered to the type check when the field
    # leaves `nullable` unset.
    checks_null = False

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"

    def is_instance(self, value: Any) -> bool:
        """Return True if `value` is a member of this type."""
        raise NotImplementedError

    def build_check(
        self, field_name: str | None, field: FieldSpec | None, schema: Schema | None
    ) -> Check:
        """Return the type-specific check for one field."""

        def check(value, options, context, path):
            return None if self.is_instance(value) else INVALID_TYPE

        return check

    def validator_factory(
        self,
        field_name: str | None,
        field: FieldSpec | None,
        schema: Schema | None = None,
        wrapped: Check | None = None,
    ) -> Check:
        """
        Build the check for a field, running `wrapped` once the type passes.

        Parameters
        ----------
        field_name : str, optional
            Name of the field, used as the path prefix for nested messages.
        field : FieldSpec, optional
            Normalized declaration carrying bounds and array options.
        schema : Schema, optional
            The schema owning the field.
        wrapped : callable, optional
            A check with the same signature, typically the custom rule.

        Returns
        -------
        callable
            ``check(value, options, context, path)`` returning an error code,
            None, or an awaitable resolving to one of those.
        """
        check = self.build_check(field_name, field, schema)
        if wrapped is None:
            return check

        def validator(value, options, context, path):
            return chain(
                check(value, options, context, path),
                lambda code: code or wrapped(value, options, context, path),
            )

        return validator
