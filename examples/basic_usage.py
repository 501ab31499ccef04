"""
Basic Usage Example: Shopping Cart Schema

This example demonstrates the core perfectschema workflow:
1. Declare schemas with types, bounds and custom rules
2. Nest a schema inside another through ArrayOf
3. Validate records with a reusable context and read errors by path
4. Run asynchronous custom rules with validate_async
"""

import asyncio

from perfectschema import Schema

# Catalog lookups would normally hit a service
KNOWN_SKUS = {"TSHIRT-M", "MUG-01", "CAP-RED"}


async def sku_exists(sku: str):
    await asyncio.sleep(0)
    return sku in KNOWN_SKUS or "unknownSku"


# Define a schema for one cart line
item_schema = Schema(
    {
        "_id": str,
        "name": {"type": str, "required": True, "min": 3},
        "qty": {"type": "integer", "min": 1, "default_value": 1},
        "price": {"type": float, "min": 0},
        "data": Schema.Any,
    },
    {"name": "item"},
)

# The cart holds between one and ten items
cart_schema = Schema(
    {
        "customer": {"type": str, "required": True, "nullable": False},
        "items": {
            "type": Schema.ArrayOf(item_schema),
            "required": True,
            "arrayOptions": {"min": 1, "max": 10},
        },
        "coupon": Schema.AnyOf(str, {"type": "integer", "min": 100000, "max": 999999}),
    },
    {"name": "cart"},
)


def main() -> None:
    """Validate a few carts and print their messages."""

    # 1. A reusable context keeps the messages of the last run
    context = cart_schema.create_context()

    valid = context.validate(
        {
            "customer": "alice",
            "items": [{"name": "T-shirt", "qty": 2, "price": 19.9}],
            "coupon": 123456,
        }
    )
    print(f"[OK] Valid cart: {valid}")

    # 2. Nested errors are reported with their full path
    context.validate(
        {
            "customer": None,
            "items": [{"name": "Mug", "qty": 0}, {"name": "x", "price": "free"}],
            "coupon": 42,
            "note": "leave at door",
        }
    )
    print("[ERROR] Invalid cart:")
    for field_name, message in context.get_messages().items():
        print(f"   {field_name}: {message}")

    # 3. One-shot validation returns field errors with their values
    result = item_schema.validate({"name": "Cap", "qty": 1.5})
    for error in result.error_messages():
        print(f"[ERROR] {error.field_name} = {error.value!r}: {error.message}")

    # 4. Async custom rules are awaited with validate_async
    order_schema = Schema({"sku": {"type": str, "required": True, "custom": sku_exists}})
    order_context = order_schema.create_context()

    asyncio.run(order_context.validate_async({"sku": "MUG-02"}))
    print(f"[ERROR] Async check: {order_context.get_messages()}")

    print("\n[SUCCESS] Validation examples complete!")


if __name__ == "__main__":
    main()
