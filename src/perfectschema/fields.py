"""Normalization of field declarations into frozen `FieldSpec` records."""

from collections.abc import Mapping
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SchemaDefinitionError
from .types import BUILTINS, ArrayOfType, TypeKind, TypeRegistry, TypeTag, is_type


class ArrayOptions(BaseModel):
    """Bounds applied to the length of an array field rather than its elements."""

    model_config = ConfigDict(frozen=True, extra="allow")

    min: Optional[int] = None
    max: Optional[int] = None


class FieldSpec(BaseModel):
    """
    Normalized declaration of one schema field.

    Built once by `normalize_field` and never mutated afterwards; the
    compiled validator is attached with `model_copy` when a schema binds it.

    Parameters
    ----------
    type : TypeTag
        Canonical type of the field. The ``[T]`` shorthand is stored as an
        `ArrayOfType` tag.
    required : bool, default False
        Report ``required`` when the value is absent.
    nullable : bool, optional
        Accept None. Unset behaves as True, except for unions with
        candidates, which then test None against every candidate.
    min, max : optional
        Bounds whose meaning depends on the type (string length, numeric
        range, date range). For array fields they apply to every element.
    array_options : ArrayOptions, optional
        Length bounds of an array field (alias ``arrayOptions``).
    custom : callable, optional
        ``custom(value)`` run after the type check passes. Returns an error
        code string, ``False`` for ``invalid``, anything else for valid, or
        an awaitable resolving to one of those.

    Unknown keys (e.g. ``default_value``) are kept as extra attributes for
    tooling built on top of the schema.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )

    type: TypeTag
    required: bool = False
    nullable: Optional[bool] = None
    min: Any = None
    max: Any = None
    array_options: Optional[ArrayOptions] = Field(default=None, alias="arrayOptions")
    custom: Optional[Callable[..., Any]] = None
    validator: Optional[Callable[..., Any]] = Field(default=None, repr=False, exclude=True)


def _suffix(field_name: Optional[str]) -> str:
    return f" for {field_name}" if field_name else ""


def resolve_type(
    decl: Any,
    registry: Optional[TypeRegistry] = None,
    field_name: Optional[str] = None,
) -> TypeTag:
    """
    Resolve a `type` declaration to a type tag.

    Accepts a type tag, a registered alias or marker, a schema (replaced by
    its own tag), or a one-element list meaning "array of".

    Raises
    ------
    SchemaDefinitionError
        If the declaration cannot be resolved.
    """
    registry = registry or BUILTINS

    if decl is None:
        raise SchemaDefinitionError("Missing field type" + _suffix(field_name))

    if isinstance(decl, list):
        if len(decl) != 1 or decl[0] is None:
            raise SchemaDefinitionError(
                "Array type must declare exactly one element type" + _suffix(field_name)
            )
        return ArrayOfType(resolve_type(decl[0], registry, field_name))

    if not is_type(decl) and getattr(decl, "kind", None) is TypeKind.SCHEMA:
        return decl.type

    tag = registry.get_type(decl)
    if not is_type(tag):
        raise SchemaDefinitionError(
            f"Invalid field type{_suffix(field_name)}: {decl!r}"
        )
    return tag


def normalize_field(
    spec: Any,
    field_name: Optional[str] = None,
    registry: Optional[TypeRegistry] = None,
) -> FieldSpec:
    """
    Convert any accepted field shorthand into a `FieldSpec`.

    Accepted forms:

    - a bare marker, alias, type tag, or schema: ``str``, ``"integer"``
    - a one-element list: ``[str]``
    - an options mapping with a ``type`` key:
      ``{"type": str, "required": True, "min": 3}``

    Raises
    ------
    SchemaDefinitionError
        On an empty spec, a missing or unresolvable type, or a malformed
        array shorthand.
    """
    if isinstance(spec, FieldSpec):
        return spec
    if not spec:
        raise SchemaDefinitionError("Empty field specification" + _suffix(field_name))

    if isinstance(spec, Mapping) and "type" in spec:
        options = dict(spec)
    else:
        options = {"type": spec}

    options["type"] = resolve_type(options["type"], registry, field_name)

    try:
        return FieldSpec.model_validate(options)
    except ValidationError as e:
        raise SchemaDefinitionError(
            f"Invalid field specification{_suffix(field_name)}: {e}"
        ) from e


def normalize_fields(
    fields: Mapping[str, Any], registry: Optional[TypeRegistry] = None
) -> dict[str, FieldSpec]:
    """Normalize every declaration of `fields`, preserving order."""
    normalized: dict[str, FieldSpec] = {}
    for field_name, spec in fields.items():
        if not isinstance(field_name, str):
            raise SchemaDefinitionError(f"Field names must be strings, got {field_name!r}")
        normalized[field_name] = normalize_field(spec, field_name, registry)
    return normalized
