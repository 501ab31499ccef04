"""
ETL Pipeline Example: Validating Order Exports

This example demonstrates a small ETL (Extract, Transform, Load) workflow:
1. Extract: Read raw order rows into a Polars DataFrame
2. Transform: Validate every row against a schema, drop failing rows
3. Load: Hand the clean rows to the next stage

Struct and list columns are validated by nested schemas, so a single
declaration covers flat and nested exports alike.
"""

import polars as pl
from loguru import logger

from perfectschema import Schema

address_schema = Schema(
    {
        "city": {"type": str, "required": True, "nullable": False},
        "zip": {"type": str, "min": 4, "max": 10},
    },
    {"name": "address"},
)

order_schema = Schema(
    {
        "order_id": {"type": "integer", "required": True, "min": 1},
        "customer": {"type": str, "required": True, "min": 1},
        "total": {"type": float, "min": 0.0, "max": 10_000.0},
        "tags": [str],
        "shipping": address_schema,
    },
    {"name": "orders"},
)


def extract_data() -> pl.DataFrame:
    """Extract: build raw rows (in production: pl.read_parquet(...))."""
    print("[EXTRACT] Reading raw orders...")

    raw_data = pl.DataFrame(
        {
            "order_id": [1, 2, 3, 0],
            "customer": ["alice", "bob", "", "dave"],
            "total": [19.9, 250.0, 12.5, -3.0],
            "tags": [["gift"], [], ["express"], ["gift"]],
            "shipping": [
                {"city": "Paris", "zip": "75001"},
                {"city": None, "zip": "10115"},
                {"city": "Lyon", "zip": "69001"},
                {"city": "Nice", "zip": "06"},
            ],
        }
    )

    print(f"   [OK] Loaded {raw_data.height} rows")
    return raw_data


def transform_data(raw_df: pl.DataFrame) -> pl.DataFrame:
    """Transform: validate rows and keep only the valid ones."""
    print("\n[TRANSFORM] Validating orders...")

    # Non-strict mode reports violations instead of raising
    violations = order_schema.validate_frame(raw_df, show_violations=True)

    print(f"   [OK] Found {violations.height} violations")
    for row, field_name, message in violations.rows():
        print(f"   [WARNING] row {row}: {field_name} -> {message}")

    failing = violations["row"].unique().to_list()
    return raw_df.with_row_index("row").filter(~pl.col("row").is_in(failing)).drop("row")


def load_data(valid_df: pl.DataFrame) -> None:
    """Load: pass the validated rows on."""
    print("\n[LOAD] Storing orders...")
    records = valid_df.to_dicts()
    print(f"   [OK] Stored {len(records)} records")


def run_etl_pipeline() -> None:
    """Run the complete ETL pipeline."""
    logger.enable("perfectschema")

    print("\n" + "=" * 60)
    print("PERFECTSCHEMA ETL PIPELINE DEMONSTRATION")
    print("=" * 60 + "\n")

    raw_data = extract_data()
    valid_data = transform_data(raw_data)
    load_data(valid_data)

    print("\n" + "=" * 60)
    print("[SUCCESS] ETL PIPELINE COMPLETE")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    run_etl_pipeline()
