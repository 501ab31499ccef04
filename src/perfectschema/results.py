"""Result of a batch `Schema.validate` run."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any

from pydantic import BaseModel, ConfigDict


class FieldError(BaseModel):
    """One field that failed validation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    field_name: str
    message: str
    value: Any = None


class ValidationResult:
    """
    Outcome of validating one record, possibly still in flight.

    Synchronous validators are settled on construction. If any field
    validator returned an awaitable, the result is not done until it is
    awaited; `is_valid` reports False until then.

    Examples
    --------
        >>> result = schema.validate({"name": "Alice"})
        >>> result.is_done(), result.is_valid()
        (True, True)
        >>> errors = await schema.validate({"email": "taken@example.com"})
    """

    def __init__(self, outcomes: list[tuple[str, Any, Any]], rejected: bool = False):
        self._outcomes = list(outcomes)
        self._rejected = rejected
        self._task: asyncio.Future | None = None
        self._done = not any(inspect.isawaitable(result) for _, _, result in self._outcomes)

    def __repr__(self) -> str:
        state = "done" if self._done else "pending"
        return f"<ValidationResult {state} errors={len(self.error_messages())}>"

    def __await__(self):
        return self.wait().__await__()

    def is_done(self) -> bool:
        return self._done

    def is_valid(self) -> bool:
        """True once every validator has settled without an error."""
        return self._done and not self.error_messages()

    def is_rejected(self) -> bool:
        """True when the record carried keys unknown to the schema."""
        return self._rejected

    def error_messages(self) -> list[FieldError]:
        """Return the errors settled so far, in field declaration order."""
        return [
            FieldError(field_name=field_name, message=code, value=value)
            for field_name, value, code in self._outcomes
            if code and isinstance(code, str)
        ]

    async def wait(self) -> list[FieldError]:
        """Wait for every pending validator, then return all errors."""
        if not self._done:
            if self._task is None:
                self._task = asyncio.ensure_future(self._settle())
            await self._task
        return self.error_messages()

    async def _settle(self) -> None:
        pending = [
            (index, result)
            for index, (_, _, result) in enumerate(self._outcomes)
            if inspect.isawaitable(result)
        ]
        codes = await asyncio.gather(*(result for _, result in pending))
        for (index, _), code in zip(pending, codes):
            field_name, value, _ = self._outcomes[index]
            self._outcomes[index] = (field_name, value, code)
        self._done = True
