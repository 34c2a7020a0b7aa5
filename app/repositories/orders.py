from datetime import date
from enum import Enum

from sqlalchemy import select, func, extract, desc
from sqlalchemy.orm import sessionmaker

from app.core.refs import UserRef
from app.db.models import Order, OrderItem, User
from app.repositories.rows import as_dict, day_of, require_range

PAID = "paid"


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    DATERANGE = "daterange"


class Grouping(str, Enum):
    LOCATION = "location"
    CUSTOMER = "customer"


def period_columns(period: Period) -> list:
    if period is Period.DAY:
        return [day_of(Order.order_at).label("sale_day")]
    if period is Period.WEEK:
        return [
            extract("year", Order.order_at).label("sale_year"),
            extract("week", Order.order_at).label("sale_week"),
        ]
    if period is Period.MONTH:
        return [
            extract("year", Order.order_at).label("sale_year"),
            extract("month", Order.order_at).label("sale_month"),
        ]
    return []


def paid_in(stmt, start: date | None = None, end: date | None = None):
    stmt = stmt.where(Order.status == PAID)
    if start is not None or end is not None:
        start, end = require_range(start, end)
        stmt = stmt.where(day_of(Order.order_at).between(start, end))
    return stmt


class OrdersRepository:
    """Customer database: paid orders, their items, and the users placing them."""

    source = "customer"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _all(self, stmt) -> list[dict]:
        db = self.session_factory()
        try:
            return [as_dict(r) for r in db.execute(stmt).all()]
        finally:
            db.close()

    def users(self) -> list[UserRef]:
        db = self.session_factory()
        try:
            stmt = select(User.id.label("id"), User.name.label("name"), User.phone_number.label("phone_number"))
            rows = db.execute(stmt).all()
            return [UserRef(id=r.id, name=r.name, phone_number=r.phone_number) for r in rows]
        finally:
            db.close()

    def sales(
        self,
        group: Grouping,
        period: Period,
        by_sku: bool = False,
        start: date | None = None,
        end: date | None = None,
    ) -> list[dict]:
        """Paid sales per location (or per customer at a location) and period.

        With ``by_sku`` the totals come from order items and carry the
        variant and quantity; otherwise from order totals.
        """
        keys = [Order.location_id.label("locationId")]
        if group is Grouping.CUSTOMER:
            keys.insert(0, Order.user_id.label("userId"))
        periods = period_columns(period)

        if by_sku:
            keys.append(OrderItem.variant_id.label("variantId"))
            measures = [
                func.coalesce(func.sum(OrderItem.qty), 0).label("total_quantity"),
                func.coalesce(func.sum(OrderItem.selling_price * OrderItem.qty), 0).label("total_sales"),
            ]
        else:
            measures = [func.coalesce(func.sum(Order.total_amount), 0).label("total_sales")]

        stmt = select(*keys, *periods, *measures).select_from(Order)
        if by_sku:
            stmt = stmt.join(OrderItem, OrderItem.order_id == Order.id)
        if period is Period.DATERANGE:
            stmt = paid_in(stmt, *require_range(start, end))
        else:
            stmt = paid_in(stmt)
        stmt = stmt.group_by(*keys, *periods).order_by(*(desc(c.name) for c in periods))
        return self._all(stmt)

    def bills(self, period: Period, start: date | None = None, end: date | None = None) -> list[dict]:
        """Bill counts and average order value per location and period."""
        keys = [Order.location_id.label("locationId")]
        periods = period_columns(period)
        stmt = select(
            *keys,
            *periods,
            func.count(func.distinct(Order.id)).label("unique_bills"),
            func.count(Order.id).label("total_bills"),
            func.avg(Order.total_amount).label("average_order_value"),
        )
        if period is Period.DATERANGE:
            stmt = paid_in(stmt, *require_range(start, end))
        else:
            stmt = paid_in(stmt)
        stmt = stmt.group_by(*keys, *periods).order_by(*(desc(c.name) for c in periods))
        return self._all(stmt)

    def sold_quantities(self, start: date, end: date) -> list[dict]:
        stmt = (
            select(
                Order.location_id.label("locationId"),
                OrderItem.variant_id.label("variantId"),
                func.coalesce(func.sum(OrderItem.qty), 0).label("sold_qty"),
            )
            .join(OrderItem, OrderItem.order_id == Order.id)
        )
        stmt = paid_in(stmt, start, end).group_by(Order.location_id, OrderItem.variant_id)
        return self._all(stmt)

    def times_sold(self, start: date, end: date) -> list[dict]:
        """How many paid order lines carried each variant, across all customers."""
        stmt = (
            select(
                OrderItem.variant_id.label("variantId"),
                func.count(OrderItem.variant_id).label("times_sold"),
            )
            .join(Order, Order.id == OrderItem.order_id)
        )
        stmt = paid_in(stmt, start, end).group_by(OrderItem.variant_id)
        return self._all(stmt)

    def times_picked(self, start: date, end: date) -> list[dict]:
        stmt = (
            select(
                Order.user_id.label("userId"),
                OrderItem.variant_id.label("variantId"),
                func.count(OrderItem.variant_id).label("times_picked"),
            )
            .join(OrderItem, OrderItem.order_id == Order.id)
        )
        stmt = (
            paid_in(stmt, start, end)
            .group_by(Order.user_id, OrderItem.variant_id)
            .order_by(Order.user_id, OrderItem.variant_id)
        )
        return self._all(stmt)
