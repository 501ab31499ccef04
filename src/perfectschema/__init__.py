"""
perfectschema: declarative schemas with composable field validators

Declare fields once, validate nested records, collect every error by path.
"""

from loguru import logger

from .builder import compile_validators
from .context import ValidationContext
from .errors import (
    AsyncValidationError,
    SchemaDefinitionError,
    StructureError,
    UnknownFieldError,
    UnknownTypeError,
)
from .fields import ArrayOptions, FieldSpec, normalize_field
from .frames import validate_frame
from .results import FieldError, ValidationResult
from .schema import Schema, SchemaOptions, SchemaType
from .types import (
    BUILTINS,
    MISSING,
    TypeKind,
    TypeRegistry,
    TypeTag,
    get_type,
    is_primitive,
    is_type,
)

__version__ = "0.3.0"

# Library logging is opt-in: logger.enable("perfectschema")
logger.disable("perfectschema")

Any = Schema.Any
AnyOf = Schema.AnyOf
ArrayOf = Schema.ArrayOf
Integer = Schema.Integer
Lazy = Schema.Lazy

__all__ = [
    # Core
    "Schema",
    "SchemaOptions",
    "ValidationContext",
    "ValidationResult",
    "FieldError",
    # Types
    "Any",
    "AnyOf",
    "ArrayOf",
    "Integer",
    "Lazy",
    "MISSING",
    "BUILTINS",
    "TypeKind",
    "TypeRegistry",
    "TypeTag",
    "SchemaType",
    "get_type",
    "is_type",
    "is_primitive",
    # Fields
    "FieldSpec",
    "ArrayOptions",
    "normalize_field",
    "compile_validators",
    # Frames
    "validate_frame",
    # Errors
    "SchemaDefinitionError",
    "UnknownTypeError",
    "UnknownFieldError",
    "StructureError",
    "AsyncValidationError",
]
