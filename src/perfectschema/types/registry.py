"""Lookup of type aliases and bare type markers to canonical type tags."""

from __future__ import annotations

from typing import Any

from ..errors import SchemaDefinitionError, UnknownTypeError
from .base import TypeTag
from .composite import any_type
from .primitives import PRIMITIVE_TYPES


def is_type(value: Any) -> bool:
    """Return True if `value` is already a type tag."""
    return isinstance(value, TypeTag)


class TypeRegistry:
    """
    Maps string aliases and bare type markers to type tags.

    Registries chain to a parent, so a project can add its own aliases on
    top of the built-ins without touching them:

        >>> from perfectschema import BUILTINS, TypeRegistry
        >>> registry = TypeRegistry(parent=BUILTINS)
        >>> registry.register("text", BUILTINS.get_type("string"))
        >>> registry.get_type("text") is registry.get_type(str)
        True

    Parameters
    ----------
    parent : TypeRegistry, optional
        Registry consulted when a key is not registered here.
    """

    def __init__(self, parent: TypeRegistry | None = None):
        self._parent = parent
        self._types: dict[Any, TypeTag] = {}
        self._frozen = False

    def freeze(self) -> None:
        """Reject any further `register` or `unregister` call."""
        self._frozen = True

    def register(self, key: Any, tag: TypeTag) -> None:
        """Bind an alias or marker to `tag`."""
        if self._frozen:
            raise SchemaDefinitionError("Cannot register types on a frozen registry")
        if not is_type(tag):
            raise SchemaDefinitionError(f"Not a type tag : {tag!r}")
        self._types[key] = tag

    def unregister(self, key: Any) -> None:
        """Remove a binding made on this registry (parents are untouched)."""
        if self._frozen:
            raise SchemaDefinitionError("Cannot unregister types on a frozen registry")
        self._types.pop(key, None)

    def lookup(self, key: Any) -> TypeTag | None:
        """Return the tag bound to `key`, or None."""
        try:
            tag = self._types.get(key)
        except TypeError:  # unhashable declarations are never registered
            return None
        if tag is None and self._parent is not None:
            return self._parent.lookup(key)
        return tag

    def get_type(self, decl: Any) -> Any:
        """
        Canonicalize a type declaration.

        Type tags are returned unchanged, registered aliases and markers map
        to their tag, and any other non-string value is returned as-is.

        Raises
        ------
        UnknownTypeError
            If `decl` is a string that is not a registered alias.
        """
        if is_type(decl):
            return decl
        tag = self.lookup(decl)
        if tag is not None:
            return tag
        if isinstance(decl, str):
            raise UnknownTypeError(f"Unknown type : {decl}")
        return decl

    def is_primitive(self, value: Any) -> bool:
        """Return True if `value` is a registered bare type marker."""
        return not isinstance(value, str) and self.lookup(value) is not None


def _builtin_registry() -> TypeRegistry:
    registry = TypeRegistry()
    for tag in PRIMITIVE_TYPES:
        registry.register(tag.name, tag)
        registry.register(tag.marker, tag)
    registry.register(any_type.name, any_type)
    registry.freeze()
    return registry


BUILTINS = _builtin_registry()


def get_type(decl: Any) -> Any:
    """Canonicalize `decl` against the built-in registry."""
    return BUILTINS.get_type(decl)


def is_primitive(value: Any) -> bool:
    """Return True if `value` is a built-in bare type marker."""
    return BUILTINS.is_primitive(value)
