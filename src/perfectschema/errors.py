"""Structural exceptions raised while building schemas or mutating contexts.

Validation failures are never raised: they are reported as error codes in a
context's message map. Everything here signals a programming error in how a
schema is declared or used.
"""


class SchemaDefinitionError(TypeError):
    """A field declaration or schema argument is malformed."""


class UnknownTypeError(SchemaDefinitionError):
    """A string type alias is not known to the registry."""


class UnknownFieldError(SchemaDefinitionError):
    """A message was set on a field the schema does not declare."""


class StructureError(TypeError):
    """Data handed to a validation context is not a mapping."""


class AsyncValidationError(RuntimeError):
    """A synchronous validation run hit a pending (awaitable) result."""
