"""Composite type tags: wildcard, unions, homogeneous arrays, and lazy references."""

from __future__ import annotations

import inspect
from functools import partial
from typing import TYPE_CHECKING, Any, Callable

from ..codes import INVALID, INVALID_TYPE
from .base import Check, TypeKind, TypeTag, chain

if TYPE_CHECKING:  # pragma: no cover
    from .registry import TypeRegistry


def first_passing(attempts: list[Callable[[], Any]], start: int = 0, error=None):
    """
    Run `attempts` in order until one reports no error.

    Returns None on the first success, otherwise the first error that is more
    specific than ``invalidType`` (or ``invalidType`` itself). Pending results
    are awaited before the next attempt starts.
    """
    for index in range(start, len(attempts)):
        result = attempts[index]()
        if inspect.isawaitable(result):
            return chain(result, partial(_resume_attempts, attempts, index, error))
        if not result:
            return None
        if error is None and result != INVALID_TYPE:
            error = result
    return error or INVALID_TYPE


def _resume_attempts(attempts, index, error, code):
    if not code:
        return None
    if error is None and code != INVALID_TYPE:
        error = code
    return first_passing(attempts, index + 1, error)


def every_element(check: Check, items, options, context, path, start=0, failed=None):
    """
    Check every element of `items`, one after the other.

    Element paths are ``"<path>.<index>"`` so nested schemas can report their
    messages per element. Returns ``invalid`` when a nested element reported
    ``invalid``, ``invalidType`` for any other failure, None otherwise.
    """
    for index in range(start, len(items)):
        element_path = f"{path}.{index}" if path else str(index)
        result = check(items[index], options, context, element_path)
        if inspect.isawaitable(result):
            return chain(
                result,
                partial(_resume_elements, check, items, options, context, path, index, failed),
            )
        failed = _worst(failed, result)
    return failed


def _resume_elements(check, items, options, context, path, index, failed, code):
    return every_element(check, items, options, context, path, index + 1, _worst(failed, code))


def _worst(failed, code):
    if not code:
        return failed
    if code == INVALID or failed == INVALID:
        return INVALID
    return INVALID_TYPE


class AnyType(TypeTag):
    """
    Wildcard tag accepting every value.

    Calling it with types returns a union of those types instead:

        >>> from perfectschema import Any
        >>> Any(str, int).kind
        <TypeKind.ANY_OF: 'any_of'>
    """

    kind = TypeKind.ANY

    def is_instance(self, value: Any) -> bool:
        return True

    def build_check(self, field_name, field, schema):
        def check(value, options, context, path):
            return None

        return check

    def __call__(self, *allowed_types: Any, registry: TypeRegistry | None = None) -> TypeTag:
        if not allowed_types:
            return self
        return AnyOfType(allowed_types, registry=registry)


class AnyOfType(TypeTag):
    """
    Union of candidate declarations, tried in declaration order.

    Each candidate is anything a field accepts: a bare type, a type tag, a
    schema, or an option record with its own bounds and custom rule, e.g.

        AnyOfType([str, {"type": float, "min": 1, "max": 3}])

    A value is valid as soon as one candidate accepts it.
    """

    kind = TypeKind.ANY_OF
    checks_null = True

    def __init__(self, candidates, registry: TypeRegistry | None = None):
        from ..fields import normalize_field

        if not candidates:
            raise TypeError("AnyOf requires at least one candidate type")

        self.candidates = tuple(
            normalize_field(candidate, registry=registry) for candidate in candidates
        )
        super().__init__("anyOf(" + ", ".join(c.type.name for c in self.candidates) + ")")

    def is_instance(self, value: Any) -> bool:
        return any(candidate.type.is_instance(value) for candidate in self.candidates)

    def build_check(self, field_name, field, schema):
        from ..builder import custom_rule

        candidate_checks = [
            (
                candidate.nullable,
                candidate.type.validator_factory(
                    field_name, candidate, schema, custom_rule(candidate.custom)
                ),
            )
            for candidate in self.candidates
        ]

        def attempt(nullable, candidate_check, value, options, path):
            if value is None:
                return None if nullable else INVALID_TYPE
            # Candidates never write into the caller's context
            return candidate_check(value, options, None, path)

        def check(value, options, context, path):
            return first_passing(
                [
                    partial(attempt, nullable, candidate_check, value, options, path)
                    for nullable, candidate_check in candidate_checks
                ]
            )

        return check


class ArrayOfType(TypeTag):
    """
    Ordered sequence whose every element satisfies `element`.

    The field's `min`/`max` apply to each element; `array_options.min` and
    `array_options.max` bound the length of the sequence.
    """

    kind = TypeKind.ARRAY_OF

    def __init__(self, element: TypeTag):
        super().__init__(f"arrayOf({element.name})")
        self.element = element

    def is_instance(self, value: Any) -> bool:
        return isinstance(value, (list, tuple)) and all(
            self.element.is_instance(item) for item in value
        )

    def build_check(self, field_name, field, schema):
        from ..codes import MAX_ARRAY, MIN_ARRAY

        element_check = self.element.validator_factory(field_name, field, schema)
        array_options = getattr(field, "array_options", None)
        minimum = getattr(array_options, "min", None)
        maximum = getattr(array_options, "max", None)

        def check(value, options, context, path):
            if not isinstance(value, (list, tuple)):
                return INVALID_TYPE
            if minimum is not None and len(value) < minimum:
                return MIN_ARRAY
            if maximum is not None and len(value) > maximum:
                return MAX_ARRAY
            return every_element(element_check, value, options, context, path)

        return check


class LazyType(TypeTag):
    """
    Deferred reference to a type, resolved on first use.

    Lets a schema refer to itself (or to a schema declared later):

        node = Schema({"children": ArrayOf(Lazy(lambda: node))})
    """

    kind = TypeKind.LAZY

    def __init__(self, thunk: Callable[[], Any], registry: TypeRegistry | None = None):
        if not callable(thunk):
            raise TypeError("Lazy expects a callable returning a type declaration")
        super().__init__(getattr(thunk, "__name__", "lazy"))
        self._thunk = thunk
        self._registry = registry
        self._target: TypeTag | None = None

    def resolve(self) -> TypeTag:
        """Return the referenced tag, evaluating the thunk once."""
        if self._target is None:
            from ..fields import resolve_type

            self._target = resolve_type(self._thunk(), registry=self._registry)
        return self._target

    def is_instance(self, value: Any) -> bool:
        return self.resolve().is_instance(value)

    def build_check(self, field_name, field, schema):
        built: list[Check] = []

        def check(value, options, context, path):
            if not built:
                built.append(self.resolve().validator_factory(field_name, field, schema))
            return built[0](value, options, context, path)

        return check


any_type = AnyType("any")
