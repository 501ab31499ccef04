"""Core `Schema` class, its nested-schema type tag, and the static type helpers."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .builder import build_validators
from .codes import INVALID, INVALID_TYPE, KEY_NOT_IN_SCHEMA
from .context import ValidationContext
from .errors import SchemaDefinitionError, StructureError
from .fields import FieldSpec, normalize_fields
from .results import ValidationResult
from .types import (
    MISSING,
    AnyOfType,
    ArrayOfType,
    LazyType,
    TypeKind,
    TypeRegistry,
    TypeTag,
    any_type,
    chain,
    integer_type,
)


class SchemaOptions(BaseModel):
    """
    Options of a schema. Unknown keys are kept for tooling built on top.

    Parameters
    ----------
    name : str, optional
        Human-readable name used for the schema's type tag and in logs.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: Optional[str] = None


class SchemaType(TypeTag):
    """
    Type tag of a schema, used when the schema is nested as a field type.

    Every field declared with it owns one validation context, created when
    the field's validator is built. Nested messages are copied into the
    parent context under ``"<path>.<child path>"`` and the field itself
    reports ``invalid``; a value that is not a mapping reports
    ``invalidType``.
    """

    kind = TypeKind.SCHEMA

    def __init__(self, schema: Schema):
        super().__init__(schema.options.name or f"schema@{id(schema):x}")
        self.schema = schema

    def is_instance(self, value: Any) -> bool:
        return isinstance(value, Mapping) and self.schema.create_context().validate(value)

    def build_check(self, field_name, field, schema):
        owned = self.schema.create_context()
        busy = False

        def check(value, options, context, path):
            nonlocal busy

            # re-entrant or concurrent use gets a throwaway context
            reentrant = busy
            nested = self.schema.create_context() if reentrant else owned
            busy = True

            def release(valid):
                nonlocal busy
                busy = reentrant
                if valid:
                    return None
                if context is not None and path:
                    for sub_path, code in nested.get_messages().items():
                        context.set_message(f"{path}.{sub_path}", code)
                return INVALID

            try:
                outcome = nested._check(value, options)
            except Exception as e:
                busy = reentrant
                if isinstance(e, StructureError):
                    return INVALID_TYPE
                raise
            if inspect.isawaitable(outcome) and context is not None:

                def abandon():
                    nonlocal busy
                    busy = reentrant
                    nested._abandon()

                context._on_abandon(abandon)
            return chain(outcome, release)

        return check


def _as_type(decl: Any) -> Any:
    """Wrap a plain field-shape mapping into an anonymous schema."""
    if (
        isinstance(decl, Mapping)
        and "type" not in decl
        and not isinstance(decl, FieldSpec)
    ):
        logger.info(f"Wrapping field mapping {sorted(decl)} into an anonymous schema")
        return Schema(decl)
    return decl


class Schema:
    """
    Declarative schema compiled into one validator per field.

    Fields are declared with a mapping of field name to declaration. A
    declaration is a bare type (``str``, ``float``, ``"integer"``, another
    schema), a one-element list meaning "array of", or an options mapping
    with a ``type`` key.

    Parameters
    ----------
    fields : Mapping
        Field declarations, in order.
    options : Mapping or SchemaOptions, optional
        Schema options.
    registry : TypeRegistry, optional
        Registry resolving type aliases and markers; the built-ins by default.

    Raises
    ------
    SchemaDefinitionError
        If `fields` is empty or not a mapping, or a declaration is malformed.

    Examples
    --------
    Nested schemas report their errors under dotted paths:

        >>> from perfectschema import Schema
        >>> item = Schema({
        ...     "name": {"type": str, "required": True, "min": 3},
        ...     "qty": {"type": "integer", "min": 0},
        ...     "data": Schema.Any,
        ... })
        >>> cart = Schema({"items": Schema.ArrayOf(item)})
        >>> context = cart.create_context()
        >>> context.validate({"items": [{"name": "foo", "qty": -1}]})
        False
        >>> context.get_messages()
        {'items.0.qty': 'minInteger', 'items': 'invalid'}
    """

    kind = TypeKind.SCHEMA

    Any = any_type
    Integer = integer_type

    @staticmethod
    def AnyOf(*candidates: Any, registry: TypeRegistry | None = None) -> TypeTag:  # noqa: N802
        """Union of `candidates`; plain field mappings become anonymous schemas."""
        if not candidates:
            return any_type
        return AnyOfType([_as_type(c) for c in candidates], registry=registry)

    @staticmethod
    def ArrayOf(element: Any, registry: TypeRegistry | None = None) -> TypeTag:  # noqa: N802
        """Array of `element`; a plain field mapping becomes an anonymous schema."""
        from .fields import resolve_type

        return ArrayOfType(resolve_type(_as_type(element), registry))

    @staticmethod
    def Lazy(thunk, registry: TypeRegistry | None = None) -> TypeTag:  # noqa: N802
        """Reference to a type declaration resolved on first validation."""
        return LazyType(thunk, registry=registry)

    def __init__(
        self,
        fields: Mapping[str, Any],
        options: Mapping[str, Any] | SchemaOptions | None = None,
        *,
        registry: TypeRegistry | None = None,
    ):
        if not fields:
            raise SchemaDefinitionError("No defined fields")
        if not isinstance(fields, Mapping):
            raise SchemaDefinitionError("Invalid fields argument")

        if isinstance(options, SchemaOptions):
            self._options = options
        else:
            self._options = SchemaOptions.model_validate(dict(options or {}))

        self._registry = registry
        self._type = SchemaType(self)
        self._named_contexts: dict[str, ValidationContext] = {}
        self._declarations: dict[str, Any] = dict(fields)

        normalized = normalize_fields(fields, registry)
        self._fields: Mapping[str, FieldSpec] = MappingProxyType(
            build_validators(normalized, self)
        )
        self._field_names: tuple[str, ...] = tuple(self._fields)

        logger.debug(f"Built {len(self._field_names)} field validators for {self.name}")

    def __repr__(self) -> str:
        return f"<Schema {self.name} fields={list(self._field_names)}>"

    @property
    def name(self) -> str:
        return self._type.name

    @property
    def options(self) -> SchemaOptions:
        return self._options

    @property
    def fields(self) -> Mapping[str, FieldSpec]:
        """Read-only mapping of field name to its normalized spec."""
        return self._fields

    @property
    def field_names(self) -> tuple[str, ...]:
        return self._field_names

    @property
    def type(self) -> SchemaType:
        """Type tag nesting this schema as a field type."""
        return self._type

    def extends(self, fields: Mapping[str, Any]) -> None:
        """
        Add or override fields.

        A mapping declaration for an existing field is merged over the
        previous declaration (so ``{"required": True}`` only changes that
        option); any other declaration replaces it. Only the touched fields
        are normalized and rebuilt.

        Raises
        ------
        SchemaDefinitionError
            If `fields` is not a mapping or a merged declaration is malformed.
        """
        if not isinstance(fields, Mapping):
            raise SchemaDefinitionError("Invalid fields argument")

        declarations = dict(self._declarations)
        for field_name, decl in fields.items():
            declarations[field_name] = _merge_declaration(
                declarations.get(field_name, MISSING), decl
            )

        touched = normalize_fields(
            {field_name: declarations[field_name] for field_name in fields},
            self._registry,
        )
        merged = dict(self._fields)
        merged.update(build_validators(touched, self))

        self._declarations = declarations
        self._fields = MappingProxyType(merged)
        self._field_names = tuple(merged)

        logger.debug(f"Extended {self.name} with fields {list(fields)}")

    def create_context(self, name: str | None = None) -> ValidationContext:
        """
        Create a validation context.

        Parameters
        ----------
        name : str, optional
            Return the context cached under `name`, creating it on first use.
        """
        if not name:
            return ValidationContext(self)

        context = self._named_contexts.get(name)
        if context is None:
            context = self._named_contexts[name] = ValidationContext(self)
            logger.debug(f"Created named context '{name}' for {self.name}")
        return context

    def validate(self, data: Mapping[str, Any] | None, options: Any = None) -> ValidationResult:
        """
        Validate one record, collecting every field error.

        A key unknown to the schema rejects the record at once with
        ``keyNotInSchema`` and no field validator runs. Otherwise every
        field validator is started; await the result to settle asynchronous
        ones.

        Returns
        -------
        ValidationResult

        Raises
        ------
        StructureError
            If `data` is neither None nor a mapping.
        """
        if data is None:
            data = {}
        elif not isinstance(data, Mapping):
            raise StructureError(
                f"{self.name} expects a mapping, got {type(data).__name__}"
            )

        unknown = [key for key in data if key not in self._fields]
        if unknown:
            return ValidationResult(
                [(str(key), data[key], KEY_NOT_IN_SCHEMA) for key in unknown],
                rejected=True,
            )

        outcomes = []
        for field_name, field in self._fields.items():
            value = data.get(field_name, MISSING)
            outcomes.append(
                (
                    field_name,
                    None if value is MISSING else value,
                    field.validator(value, options),
                )
            )
        return ValidationResult(outcomes)

    def validate_frame(self, df, *, strict: bool = False, show_violations: bool = False):
        """
        Validate every row of a Polars DataFrame.

        See `perfectschema.frames.validate_frame`.
        """
        from .frames import validate_frame

        return validate_frame(self, df, strict=strict, show_violations=show_violations)


def _merge_declaration(previous: Any, decl: Any) -> Any:
    if previous is MISSING or not isinstance(decl, Mapping):
        return decl
    return {**_as_options(previous), **dict(decl)}


def _as_options(decl: Any) -> dict[str, Any]:
    if isinstance(decl, FieldSpec):
        return decl.model_dump(exclude={"validator"})
    if isinstance(decl, Mapping) and "type" in decl:
        return dict(decl)
    return {"type": decl}
