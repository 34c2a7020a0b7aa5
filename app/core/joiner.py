"""In-memory hash joins between result sets from separate databases."""

from __future__ import annotations

from typing import Callable, Hashable, Iterable, Optional, TypeVar

from app.core.refs import RefMap, composite_key

R = TypeVar("R")
S = TypeVar("S")


def join(
    primary_rows: Iterable[R],
    secondary: RefMap,
    key_fn: Callable[[R], Hashable],
    default: S,
) -> list[tuple[R, S]]:
    """Left join: every primary row survives, misses take ``default``."""
    return [(row, secondary.lookup_or(key_fn(row), default)) for row in primary_rows]


def location_variant_key(row: dict) -> str:
    return composite_key(row["locationId"], row["variantId"])


def user_variant_key(row: dict) -> str:
    return composite_key(row["userId"], row["variantId"])


def sell_through_rate(received: float, sold: float) -> Optional[float]:
    if not received:
        return None
    return sold / received * 100


def sell_through(received_rows: Iterable[dict], sold_rows: Iterable[dict]) -> list[dict]:
    """Received (ledger) vs sold (orders) per (location, variant).

    Driven by the received side, so a pair with sales but nothing received in
    the window does not appear.
    """
    sold = RefMap({location_variant_key(r): r["sold_qty"] for r in sold_rows})
    out = []
    for row, sold_qty in join(received_rows, sold, location_variant_key, 0):
        received_qty = row["received_qty"] or 0
        out.append({
            "locationId": row["locationId"],
            "variantId": row["variantId"],
            "received_qty": received_qty,
            "sold_qty": sold_qty,
            "sell_through_rate": sell_through_rate(received_qty, sold_qty),
        })
    return out


def sku_preference(picked_rows: Iterable[dict], sold_rows: Iterable[dict]) -> list[dict]:
    """Per-customer picks of a SKU next to how often that SKU sold overall."""
    times_sold = RefMap({r["variantId"]: r["times_sold"] for r in sold_rows})
    return [
        {
            "userId": row["userId"],
            "variantId": row["variantId"],
            "times_sold": sold,
            "times_picked": row["times_picked"],
        }
        for row, sold in join(picked_rows, times_sold, lambda r: r["variantId"], 0)
    ]
