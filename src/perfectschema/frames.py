"""Row-wise validation of Polars DataFrames against a schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

import polars as pl
from loguru import logger

if TYPE_CHECKING:
    from .schema import Schema

VIOLATIONS_SCHEMA = {"row": pl.UInt32, "field": pl.Utf8, "message": pl.Utf8}


def validate_frame(
    schema: Schema,
    df: pl.DataFrame,
    *,
    strict: bool = False,
    show_violations: bool = False,
) -> pl.DataFrame:
    """
    Validate every row of `df` and return the violations.

    Each row is validated as a mapping of column name to value: columns the
    schema does not declare are reported as ``notInSchema``, declared fields
    without a column are absent (so only ``required`` applies), and nulls
    are ``None``. Struct and list columns arrive as dicts and lists, which
    lets nested schemas and `ArrayOf` fields validate them.

    Parameters
    ----------
    schema : Schema
        Schema every row must satisfy.
    df : pl.DataFrame
        Input Polars DataFrame.
    strict : bool, default False
        If True, raise on the first frame with any violation.
    show_violations : bool, default False
        If True, log a summary of the violations per field.

    Returns
    -------
    pl.DataFrame
        One row per violation with columns ``row`` (index in `df`),
        ``field`` (dotted path) and ``message`` (error code). Empty when
        every row is valid.

    Raises
    ------
    ValueError
        If violations were found and `strict=True`.
    AsyncValidationError
        If a field of `schema` has an asynchronous custom validator.

    Examples
    --------
        >>> import polars as pl
        >>> from perfectschema import Schema
        >>> schema = Schema({"name": {"type": str, "min": 1}, "age": "integer"})
        >>> df = pl.DataFrame({"name": ["Alice", ""], "age": [30, 41]})
        >>> schema.validate_frame(df).rows()
        [(1, 'name', 'minString')]
    """
    context = schema.create_context()
    violations = []

    for index, row in enumerate(df.iter_rows(named=True)):
        context.reset()
        if context.validate(row):
            continue
        for field_name, message in context.get_messages().items():
            violations.append((index, field_name, message))

    result = pl.DataFrame(violations, schema=VIOLATIONS_SCHEMA, orient="row")

    if result.height > 0:
        if show_violations:
            summary = result.group_by(["field", "message"]).len().sort("field")
            for field_name, message, count in summary.iter_rows():
                logger.warning(f"Violation: {field_name} -> {message} ({count} rows)")
            logger.warning("-" * 80)

        if strict:
            raise ValueError(
                f"Schema validation failed for {schema.name}\n"
                f"Found {result.height} violations in "
                f"{result['row'].n_unique()} rows.\n"
                f"Sample violations:\n{result.head(5)}"
            )

    return result
