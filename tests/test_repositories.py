"""Source queries against the seeded SQLite databases."""

from datetime import date

import pytest

from app.repositories.ledger import PreferenceMetric
from app.repositories.orders import Grouping, Period


def by_pair(rows, field):
    return {(r["locationId"], r["variantId"]): r[field] for r in rows}


class TestLedgerRepository:

    def test_balances_before_day(self, repos):
        balances = {b.key: (b.qty, b.value) for b in repos.ledger.balances_before(date(2024, 3, 1))}
        assert balances == {(10, 1000): (90, 900), (11, 1001): (10, 100)}

    def test_balances_through_day_ignore_intransit(self, repos):
        balances = {b.key: b.qty for b in repos.ledger.balances_through(date(2024, 3, 1))}
        assert balances == {(10, 1000): 120, (10, 1001): 40, (11, 1001): 10}

    def test_movements_by_type(self, repos):
        moves = {m.key: m for m in repos.ledger.movements_between(date(2024, 3, 1), date(2024, 3, 1))}
        assert set(moves) == {(10, 1000), (10, 1001)}
        m = moves[(10, 1000)]
        assert (m.inward_qty, m.outward_qty, m.intransit_qty, m.adjustment_qty) == (50, 20, 5, 0)
        assert m.inward_value == 500

    def test_received_between(self, repos):
        received = by_pair(repos.ledger.received_between(date(2024, 3, 1), date(2024, 3, 2)), "received_qty")
        assert received == {(10, 1000): 50, (10, 1001): 40, (11, 1001): 0}

    def test_on_hand(self, repos):
        assert by_pair(repos.ledger.on_hand(), "ims_quantity") == {
            (10, 1000): 120, (10, 1001): 40, (11, 1001): 10, (99, 1002): 5,
        }

    def test_top_variants_by_volume(self, repos):
        rows = repos.ledger.top_variants(PreferenceMetric.VOLUME)
        assert [(r["variantId"], r["total_volume"]) for r in rows] == [(1000, 187), (1001, 51)]

    def test_top_variants_by_value(self, repos):
        rows = repos.ledger.top_variants(PreferenceMetric.VALUE, limit=1)
        assert rows == [{"variantId": 1000, "total_value": 130290}]


class TestOrdersRepository:

    def test_daily_sales_paid_only(self, repos):
        rows = repos.orders.sales(Grouping.LOCATION, Period.DAY)
        assert [(r["locationId"], str(r["sale_day"]), r["total_sales"]) for r in rows] == [
            (10, "2024-03-03", 30),
            (11, "2024-03-02", 50),
            (10, "2024-03-01", 300),
        ]

    def test_monthly_sales(self, repos):
        rows = repos.orders.sales(Grouping.LOCATION, Period.MONTH)
        totals = {r["locationId"]: r["total_sales"] for r in rows}
        assert totals == {10: 330, 11: 50}
        assert {int(r["sale_month"]) for r in rows} == {3}

    def test_customer_sales_in_range(self, repos):
        rows = repos.orders.sales(Grouping.CUSTOMER, Period.DATERANGE, start=date(2024, 3, 1), end=date(2024, 3, 2))
        totals = {(r["userId"], r["locationId"]): r["total_sales"] for r in rows}
        assert totals == {(1, 10): 200, (2, 10): 100, (1, 11): 50}

    def test_sku_sales(self, repos):
        rows = repos.orders.sales(Grouping.LOCATION, Period.DATERANGE, by_sku=True,
                                  start=date(2024, 3, 1), end=date(2024, 3, 1))
        assert by_pair(rows, "total_quantity") == {(10, 1000): 3, (10, 1001): 4}
        assert by_pair(rows, "total_sales") == {(10, 1000): 200, (10, 1001): 100}

    def test_daterange_needs_both_ends(self, repos):
        with pytest.raises(ValueError):
            repos.orders.sales(Grouping.LOCATION, Period.DATERANGE, start=date(2024, 3, 1))

    def test_bills(self, repos):
        rows = repos.orders.bills(Period.DATERANGE, start=date(2024, 3, 1), end=date(2024, 3, 1))
        assert len(rows) == 1
        assert rows[0]["unique_bills"] == 2
        assert rows[0]["total_bills"] == 2
        assert rows[0]["average_order_value"] == pytest.approx(150)

    def test_sold_quantities(self, repos):
        sold = by_pair(repos.orders.sold_quantities(date(2024, 3, 1), date(2024, 3, 2)), "sold_qty")
        assert sold == {(10, 1000): 3, (10, 1001): 4, (11, 1001): 2}

    def test_times_sold_and_picked(self, repos):
        start, end = date(2024, 3, 1), date(2024, 3, 3)
        sold = {r["variantId"]: r["times_sold"] for r in repos.orders.times_sold(start, end)}
        picked = {(r["userId"], r["variantId"]): r["times_picked"] for r in repos.orders.times_picked(start, end)}
        assert sold == {1000: 2, 1001: 2, 1002: 1}
        assert picked == {(1, 1000): 1, (1, 1001): 2, (2, 1000): 1, (99, 1002): 1}

    def test_users(self, repos):
        assert {u.id: u.name for u in repos.orders.users()} == {1: "Asha", 2: "bharat"}


class TestCatalogAndSensors:

    def test_locations_carry_city(self, repos):
        assert {loc.id: loc.city_name for loc in repos.catalog.locations()} == {10: "Bengaluru", 11: "Mumbai"}

    def test_variants_carry_product(self, repos):
        variants = {v.id: v for v in repos.catalog.variants()}
        assert variants[1000].product_name == "Tomato"
        assert variants[1000].unit_weight == pytest.approx(0.8)
        assert variants[1002].unit_weight is None

    def test_cities(self, repos):
        assert [c.name for c in repos.catalog.cities()] == ["Bengaluru", "Mumbai"]

    def test_latest_reading_per_variant(self, repos):
        readings = {r.variant_id: r.current_weight for r in repos.sensors.latest_readings()}
        assert readings == {1000: 96, 1001: 20, 1002: 10}
