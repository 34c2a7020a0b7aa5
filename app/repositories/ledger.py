from datetime import date
from enum import Enum

from sqlalchemy import select, func, case, desc
from sqlalchemy.orm import sessionmaker

from app.core.ledger import Balance, MovementType, Movements
from app.db.models import LocationInventory, LocationInventoryLog as Log
from app.repositories.rows import as_dict, day_of, num

_ADDS = [t.value for t in MovementType if t.stock_sign > 0]
_SUBTRACTS = [t.value for t in MovementType if t.stock_sign < 0]


def stock_sum(column):
    """Signed on-hand total of ``column``; intransit rows count for nothing."""
    signed = case(
        (Log.type.in_(_ADDS), column),
        (Log.type.in_(_SUBTRACTS), -column),
        else_=0,
    )
    return func.coalesce(func.sum(signed), 0)


def bucket_sum(column, kind: MovementType):
    return func.coalesce(func.sum(case((Log.type == kind.value, column), else_=0)), 0)


class PreferenceMetric(str, Enum):
    VALUE = "value"
    VOLUME = "volume"


class LedgerRepository:
    """IMS database: per-location stock rows and their movement log."""

    source = "ims"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _keyed(self, *columns):
        return (
            select(
                LocationInventory.location_id.label("locationId"),
                LocationInventory.variant_id.label("variantId"),
                *columns,
            )
            .select_from(LocationInventory)
            .join(Log, Log.location_inventory_id == LocationInventory.id)
        )

    def _balances(self, condition) -> list[Balance]:
        value = func.coalesce(Log.price_with_tax, 0)
        stmt = (
            self._keyed(stock_sum(Log.qty).label("qty"), stock_sum(value).label("value"))
            .where(condition)
            .group_by(LocationInventory.location_id, LocationInventory.variant_id)
        )
        db = self.session_factory()
        try:
            return [
                Balance(r.locationId, r.variantId, num(r.qty), num(r.value))
                for r in db.execute(stmt).all()
            ]
        finally:
            db.close()

    def balances_before(self, day: date) -> list[Balance]:
        return self._balances(day_of(Log.created_at) < day)

    def balances_through(self, day: date) -> list[Balance]:
        return self._balances(day_of(Log.created_at) <= day)

    def movements_between(self, start: date, end: date) -> list[Movements]:
        """Per-type quantity and value totals for log rows dated start..end inclusive."""
        value = func.coalesce(Log.price_with_tax, 0)
        stmt = (
            self._keyed(
                bucket_sum(Log.qty, MovementType.INWARD).label("inward_qty"),
                bucket_sum(Log.qty, MovementType.OUTWARD).label("outward_qty"),
                bucket_sum(Log.qty, MovementType.INTRANSIT).label("intransit_qty"),
                bucket_sum(Log.qty, MovementType.DEFAULT).label("adjustment_qty"),
                bucket_sum(value, MovementType.INWARD).label("inward_value"),
                bucket_sum(value, MovementType.OUTWARD).label("outward_value"),
                bucket_sum(value, MovementType.INTRANSIT).label("intransit_value"),
                bucket_sum(value, MovementType.DEFAULT).label("adjustment_value"),
            )
            .where(day_of(Log.created_at).between(start, end))
            .group_by(LocationInventory.location_id, LocationInventory.variant_id)
        )
        db = self.session_factory()
        try:
            return [
                Movements(
                    location_id=r.locationId,
                    variant_id=r.variantId,
                    inward_qty=num(r.inward_qty),
                    outward_qty=num(r.outward_qty),
                    intransit_qty=num(r.intransit_qty),
                    adjustment_qty=num(r.adjustment_qty),
                    inward_value=num(r.inward_value),
                    outward_value=num(r.outward_value),
                    intransit_value=num(r.intransit_value),
                    adjustment_value=num(r.adjustment_value),
                )
                for r in db.execute(stmt).all()
            ]
        finally:
            db.close()

    def received_between(self, start: date, end: date) -> list[dict]:
        stmt = (
            self._keyed(bucket_sum(Log.qty, MovementType.INWARD).label("received_qty"))
            .where(day_of(Log.created_at).between(start, end))
            .group_by(LocationInventory.location_id, LocationInventory.variant_id)
        )
        db = self.session_factory()
        try:
            return [as_dict(r) for r in db.execute(stmt).all()]
        finally:
            db.close()

    def on_hand(self) -> list[dict]:
        stmt = select(
            LocationInventory.location_id.label("locationId"),
            LocationInventory.variant_id.label("variantId"),
            LocationInventory.qty.label("ims_quantity"),
        ).order_by(LocationInventory.location_id, LocationInventory.variant_id)
        db = self.session_factory()
        try:
            return [as_dict(r) for r in db.execute(stmt).all()]
        finally:
            db.close()

    def top_variants(self, metric: PreferenceMetric, limit: int = 10) -> list[dict]:
        """Lifetime top SKUs by logged value (qty x price) or by logged volume."""
        if metric is PreferenceMetric.VALUE:
            measure = func.sum(Log.qty * Log.price_with_tax).label("total_value")
        else:
            measure = func.sum(Log.qty).label("total_volume")
        stmt = (
            select(LocationInventory.variant_id.label("variantId"), measure)
            .select_from(LocationInventory)
            .join(Log, Log.location_inventory_id == LocationInventory.id)
            .group_by(LocationInventory.variant_id)
            .order_by(desc(measure).nulls_last())
            .limit(limit)
        )
        db = self.session_factory()
        try:
            return [as_dict(r) for r in db.execute(stmt).all()]
        finally:
            db.close()
