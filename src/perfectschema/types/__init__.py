"""Type tags and the registry mapping declarations to them."""

from .base import MISSING, Check, TypeKind, TypeTag, chain
from .composite import AnyOfType, AnyType, ArrayOfType, LazyType, any_type
from .primitives import (
    PrimitiveType,
    array_type,
    boolean_type,
    date_type,
    datetime_type,
    integer_type,
    number_type,
    object_type,
    string_type,
)
from .registry import BUILTINS, TypeRegistry, get_type, is_primitive, is_type

__all__ = [
    "MISSING",
    "Check",
    "TypeKind",
    "TypeTag",
    "chain",
    "TypeRegistry",
    "BUILTINS",
    "get_type",
    "is_type",
    "is_primitive",
    # Tags
    "PrimitiveType",
    "AnyType",
    "AnyOfType",
    "ArrayOfType",
    "LazyType",
    "any_type",
    "array_type",
    "boolean_type",
    "date_type",
    "datetime_type",
    "integer_type",
    "number_type",
    "object_type",
    "string_type",
]
