"""Inventory state rebuilt from the append-only inventory log.

The IMS database keeps no stock column that can be trusted for a past
instant, so every figure here is replayed from signed log sums. The
repository hands over three independently aggregated pieces (balance before,
movements inside the window, balance at the end); this module combines them.

Sign convention for balances: ``inward`` and ``default`` add, ``outward``
subtracts, ``intransit`` is goods in motion and never touches on-hand stock.
The ending balance is *not* derived from start + movements: it is read back
from the ledger on its own so that any drift between the two shows up as
loss.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from app.core.refs import RefMap

LedgerKey = tuple[int, int]


class MovementType(str, Enum):
    INWARD = "inward"
    OUTWARD = "outward"
    INTRANSIT = "intransit"
    DEFAULT = "default"  # manual adjustment

    @property
    def stock_sign(self) -> int:
        if self in (MovementType.INWARD, MovementType.DEFAULT):
            return 1
        if self is MovementType.OUTWARD:
            return -1
        return 0


@dataclass(frozen=True)
class Balance:
    location_id: int
    variant_id: int
    qty: float = 0.0
    value: float = 0.0

    @property
    def key(self) -> LedgerKey:
        return (self.location_id, self.variant_id)


@dataclass(frozen=True)
class Movements:
    location_id: int
    variant_id: int
    inward_qty: float = 0.0
    outward_qty: float = 0.0
    intransit_qty: float = 0.0
    adjustment_qty: float = 0.0
    inward_value: float = 0.0
    outward_value: float = 0.0
    intransit_value: float = 0.0
    adjustment_value: float = 0.0

    @property
    def key(self) -> LedgerKey:
        return (self.location_id, self.variant_id)

    @property
    def stock_qty(self) -> float:
        return self.inward_qty - self.outward_qty + self.adjustment_qty

    @property
    def stock_value(self) -> float:
        return self.inward_value - self.outward_value + self.adjustment_value


@dataclass(frozen=True)
class InventorySnapshot:
    location_id: int
    variant_id: int
    start_qty: float
    start_value: float
    movements: Movements
    expected_qty: float
    expected_value: float
    end_qty: float
    end_value: float
    qty_loss: float
    value_loss: float

    def as_row(self) -> dict:
        m = self.movements
        return {
            "locationId": self.location_id,
            "variantId": self.variant_id,
            "start_qty": self.start_qty,
            "start_value": self.start_value,
            "inward_qty": m.inward_qty,
            "outward_qty": m.outward_qty,
            "intransit_qty": m.intransit_qty,
            "adjustment_qty": m.adjustment_qty,
            "movement_qty": m.stock_qty,
            "movement_value": m.stock_value,
            "expected_qty": self.expected_qty,
            "expected_value": self.expected_value,
            "end_qty": self.end_qty,
            "end_value": self.end_value,
            "qty_loss": self.qty_loss,
            "value_loss": self.value_loss,
        }


@dataclass(frozen=True)
class FlowRecord:
    location_id: int
    variant_id: int
    start_qty: float
    inward_qty: float
    sold_qty: float
    intransit_qty: float
    adjustment_qty: float
    expected_qty: float
    end_qty: float
    qty_loss: float = field(default=0.0)

    @property
    def loss_percentage(self) -> float:
        # Approximation kept for the flow chart: ignores sold and adjustment.
        # qty_loss is the authoritative figure.
        if self.start_qty == 0:
            return 0.0
        return (self.start_qty - self.inward_qty) / self.start_qty * 100

    def as_row(self) -> dict:
        return {
            "locationId": self.location_id,
            "variantId": self.variant_id,
            "start_qty": self.start_qty,
            "inward_qty": self.inward_qty,
            "sold_qty": self.sold_qty,
            "intransit_qty": self.intransit_qty,
            "adjustment_qty": self.adjustment_qty,
            "expected_qty": self.expected_qty,
            "end_qty": self.end_qty,
            "qty_loss": self.qty_loss,
            "loss_percentage": self.loss_percentage,
        }


def _by_key(rows) -> RefMap:
    return RefMap.build(rows, key=lambda r: r.key)


def snapshot_at(
    start_balances: Iterable[Balance],
    movements: Iterable[Movements],
    end_balances: Iterable[Balance],
) -> dict[LedgerKey, InventorySnapshot]:
    """Point-in-time snapshot for a single calendar day.

    ``start_balances`` covers log rows strictly before the day, ``movements``
    the rows on the day, ``end_balances`` every row up to and including it.
    Pairs that appear in none of the three have no history yet and are left
    out rather than reported as zero.
    """
    starts, moves, ends = _by_key(start_balances), _by_key(movements), _by_key(end_balances)
    keys = sorted(set(starts) | set(moves) | set(ends))

    result: dict[LedgerKey, InventorySnapshot] = {}
    for key in keys:
        loc, var = key
        start = starts.lookup_or(key, Balance(loc, var))
        move = moves.lookup_or(key, Movements(loc, var))
        end = ends.lookup_or(key, Balance(loc, var))

        expected_qty = start.qty + move.stock_qty
        expected_value = start.value + move.stock_value
        result[key] = InventorySnapshot(
            location_id=loc,
            variant_id=var,
            start_qty=start.qty,
            start_value=start.value,
            movements=move,
            expected_qty=expected_qty,
            expected_value=expected_value,
            end_qty=end.qty,
            end_value=end.value,
            qty_loss=expected_qty - end.qty,
            value_loss=expected_value - end.value,
        )
    return result


def snapshot_range(
    start_balances: Iterable[Balance],
    movements: Iterable[Movements],
    end_balances: Iterable[Balance],
) -> dict[LedgerKey, FlowRecord]:
    """Inventory flow across an inclusive ``[start, end]`` window.

    Rows are driven by the starting balance; movement and ending pieces that
    are missing for a pair count as zero.
    """
    starts = sorted(start_balances, key=lambda b: b.key)
    moves, ends = _by_key(movements), _by_key(end_balances)

    result: dict[LedgerKey, FlowRecord] = {}
    for start in starts:
        loc, var = start.key
        move = moves.lookup_or(start.key, Movements(loc, var))
        end = ends.lookup_or(start.key, Balance(loc, var))
        expected_qty = start.qty + move.stock_qty
        result[start.key] = FlowRecord(
            location_id=loc,
            variant_id=var,
            start_qty=start.qty,
            inward_qty=move.inward_qty,
            sold_qty=move.outward_qty,
            intransit_qty=move.intransit_qty,
            adjustment_qty=move.adjustment_qty,
            expected_qty=expected_qty,
            end_qty=end.qty,
            qty_loss=expected_qty - end.qty,
        )
    return result
