"""Report assembly: source queries in, enriched and ordered rows out."""

import logging
from datetime import date
from typing import Optional

from app.core import discrepancy, joiner, ledger
from app.core.enrichment import enrich, sort_by_display_name, sort_by_rate
from app.core.refs import UNKNOWN
from app.repositories.ledger import PreferenceMetric
from app.repositories.orders import Grouping, Period
from app.services.reference import load_cities, load_locations, load_references
from app.services.sources import Repositories, query

logger = logging.getLogger(__name__)


async def sales(
    repos: Repositories,
    group: Grouping,
    period: Period,
    by_sku: bool = False,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[dict]:
    refs, (rows,) = await load_references(
        repos,
        query(repos.orders.sales, group, period, by_sku, start, end),
        locations=True,
        variants=by_sku,
        users=group is Grouping.CUSTOMER,
    )
    return sort_by_display_name(enrich(rows, **refs.as_kwargs()))


async def bills(
    repos: Repositories,
    period: Period,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[dict]:
    refs, (rows,) = await load_references(
        repos, query(repos.orders.bills, period, start, end), locations=True
    )
    return sort_by_display_name(enrich(rows, **refs.as_kwargs()))


async def inventory_snapshot(repos: Repositories, day: date) -> list[dict]:
    """Stock per location and variant on ``day``, replayed from the ledger."""
    refs, (before, moves, through) = await load_references(
        repos,
        query(repos.ledger.balances_before, day),
        query(repos.ledger.movements_between, day, day),
        query(repos.ledger.balances_through, day),
        locations=True,
        variants=True,
    )
    snapshots = ledger.snapshot_at(before, moves, through)
    drifted = sum(1 for s in snapshots.values() if s.qty_loss)
    if drifted:
        logger.info("inventory snapshot %s: %d of %d pairs show quantity loss", day, drifted, len(snapshots))
    rows = [s.as_row() for s in snapshots.values()]
    return sort_by_display_name(enrich(rows, **refs.as_kwargs()))


async def inventory_flow(repos: Repositories, start: date, end: date) -> list[dict]:
    refs, (before, moves, through) = await load_references(
        repos,
        query(repos.ledger.balances_before, start),
        query(repos.ledger.movements_between, start, end),
        query(repos.ledger.balances_through, end),
        locations=True,
        variants=True,
    )
    rows = [f.as_row() for f in ledger.snapshot_range(before, moves, through).values()]
    return sort_by_display_name(enrich(rows, **refs.as_kwargs()))


async def inventory_discrepancy(repos: Repositories) -> list[dict]:
    refs, (on_hand, readings) = await load_references(
        repos,
        query(repos.ledger.on_hand),
        query(repos.sensors.latest_readings),
        locations=True,
        variants=True,
    )
    records = discrepancy.reconcile(on_hand, readings, refs.variants)
    rows = []
    for record in records:
        row = record.as_row()
        loc = refs.locations.lookup_or(record.location_id, None)
        row["cityId"] = loc.city_id if loc is not None and loc.city_id is not None else UNKNOWN
        rows.append(row)
    return sort_by_display_name(enrich(rows, **refs.as_kwargs()))


async def inventory_preference(repos: Repositories, metric: PreferenceMetric) -> list[dict]:
    """Top SKUs by lifetime value or volume; rank order is kept."""
    refs, (rows,) = await load_references(
        repos, query(repos.ledger.top_variants, metric), variants=True
    )
    return enrich(rows, **refs.as_kwargs())


async def sell_through(
    repos: Repositories, start: date, end: date, descending: bool = True
) -> list[dict]:
    refs, (received, sold) = await load_references(
        repos,
        query(repos.ledger.received_between, start, end),
        query(repos.orders.sold_quantities, start, end),
        locations=True,
        variants=True,
    )
    rows = enrich(joiner.sell_through(received, sold), **refs.as_kwargs())
    # name order first so equal rates stay alphabetical
    return sort_by_rate(sort_by_display_name(rows), "sell_through_rate", descending=descending)


async def customer_sku_preference(repos: Repositories, start: date, end: date) -> list[dict]:
    refs, (picked, sold) = await load_references(
        repos,
        query(repos.orders.times_picked, start, end),
        query(repos.orders.times_sold, start, end),
        users=True,
        variants=True,
    )
    rows = joiner.sku_preference(picked, sold)
    return sort_by_display_name(enrich(rows, **refs.as_kwargs()))


async def locations(repos: Repositories) -> list[dict]:
    refs = await load_locations(repos)
    return [
        {"id": loc.id, "displayName": loc.display_name, "cityId": loc.city_id, "cityName": loc.city_name}
        for loc in refs.values()
    ]


async def cities(repos: Repositories) -> list[dict]:
    return [{"id": c.id, "name": c.name} for c in await load_cities(repos)]
