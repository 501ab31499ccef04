"""Validation context: per-run message map and recursive aggregation."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Awaitable

from .codes import NOT_IN_SCHEMA
from .errors import AsyncValidationError, StructureError, UnknownFieldError
from .types import MISSING

if TYPE_CHECKING:  # pragma: no cover
    from .schema import Schema


class ValidationContext:
    """
    Mutable validity state of one schema.

    A context maps field paths to error codes. It is valid exactly when no
    message is set, and is reusable across any number of `validate` calls.
    Nested schema fields copy their own messages here under dotted paths
    (``"address.street"``).

    Contexts are created with `Schema.create_context`; a named context is
    shared by every caller asking for the same name, with no locking.

    Examples
    --------
        >>> from perfectschema import Schema
        >>> schema = Schema({"name": {"type": str, "required": True}})
        >>> context = schema.create_context()
        >>> context.validate({"age": 3})
        False
        >>> sorted(context.get_messages().items())
        [('age', 'notInSchema'), ('name', 'required')]
    """

    def __init__(self, schema: Schema):
        self._schema = schema
        self._messages: dict[str, str] = {}
        self._abandon_hooks: list = []

    @property
    def schema(self) -> Schema:
        """Schema this context validates against."""
        return self._schema

    def __repr__(self) -> str:
        return f"<ValidationContext {self._schema.name} messages={self._messages!r}>"

    def is_valid(self) -> bool:
        return not self._messages

    def get_messages(self) -> dict[str, str]:
        """Return a shallow copy of the field path to error code map."""
        return dict(self._messages)

    def get_message(self, field: str) -> str | None:
        return self._messages.get(field)

    def set_message(self, field: str, message: str | None) -> None:
        """
        Set or clear the error code of `field`.

        Parameters
        ----------
        field : str
            Field path; its first dotted segment must be a schema field.
        message : str or falsy
            Error code to set. A falsy value clears the entry.

        Raises
        ------
        TypeError
            If `field` is not a string or `message` is neither a string nor falsy.
        UnknownFieldError
            If the first segment of `field` is not declared by the schema.
        """
        if not isinstance(field, str):
            raise TypeError("Invalid field value")
        if field.split(".")[0] not in self._schema.fields:
            raise UnknownFieldError(f"Unknown field : {field}")
        if message and not isinstance(message, str):
            raise TypeError(f"Invalid message for {field}")

        if message:
            self._messages[field] = message
        else:
            self._messages.pop(field, None)

    def reset(self) -> None:
        """Clear every message."""
        self._messages = {}

    def validate(self, data: Mapping[str, Any], options: Any = None) -> bool:
        """
        Validate `data` and return whether it is valid.

        Keys that are not schema fields are reported as ``notInSchema``, then
        every field validator runs and its result replaces the field's
        previous message.

        Raises
        ------
        StructureError
            If `data` is not a mapping.
        AsyncValidationError
            If a field validator returned an awaitable; use `validate_async`.
            The context keeps the messages it had before the call.
        """
        previous = dict(self._messages)
        results, pending = self._start(data, options)
        if pending:
            for awaitable in pending.values():
                close = getattr(awaitable, "close", None)
                if close is not None:
                    close()
            self._abandon()
            self._messages = previous
            raise AsyncValidationError(
                f"Fields {sorted(pending)} have asynchronous validators; "
                f"use validate_async()"
            )
        return self._apply(results)

    async def validate_async(self, data: Mapping[str, Any], options: Any = None) -> bool:
        """
        Validate `data`, waiting for asynchronous validators.

        Every field validator is started before any pending result is
        awaited; validity is computed once all of them have settled.
        """
        outcome = self._check(data, options)
        if inspect.isawaitable(outcome):
            return await outcome
        return outcome

    def _check(self, data: Mapping[str, Any], options: Any = None) -> bool | Awaitable[bool]:
        """Run validation, returning the validity or an awaitable of it."""
        results, pending = self._start(data, options)
        if pending:
            return self._settle(results, pending)
        return self._apply(results)

    def _start(self, data, options):
        if not isinstance(data, Mapping):
            raise StructureError(
                f"{self._schema.name} expects a mapping, got {type(data).__name__}"
            )

        self._abandon_hooks = []
        fields = self._schema.fields

        # stale keys from a previous run (unknown keys, nested paths)
        for key in list(self._messages):
            if key not in fields:
                del self._messages[key]

        for key in data:
            if key not in fields:
                self._messages[str(key)] = NOT_IN_SCHEMA

        results = {
            field_name: field.validator(data.get(field_name, MISSING), options, self)
            for field_name, field in fields.items()
        }
        pending = {
            field_name: result
            for field_name, result in results.items()
            if inspect.isawaitable(result)
        }
        return results, pending

    def _on_abandon(self, hook) -> None:
        """Register `hook` to run if this run's pending results are dropped."""
        self._abandon_hooks.append(hook)

    def _abandon(self) -> None:
        hooks, self._abandon_hooks = self._abandon_hooks, []
        for hook in hooks:
            hook()

    async def _settle(self, results, pending) -> bool:
        settled = await asyncio.gather(*pending.values())
        results.update(zip(pending, settled))
        return self._apply(results)

    def _apply(self, results: dict[str, Any]) -> bool:
        for field_name, code in results.items():
            if code and isinstance(code, str):
                self._messages[field_name] = code
            else:
                self._messages.pop(field_name, None)
        return self.is_valid()
