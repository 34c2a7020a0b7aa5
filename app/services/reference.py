"""Reference data loader.

Locations (with city), variants (with product) and users are small, change
slowly, and are re-read for every request. They are fetched in the same
concurrent batch as the report's own queries, so a failure in any of them
fails the report.
"""

from dataclasses import dataclass
from typing import Optional

from app.core.refs import CityRef, LocationRef, RefMap, UserRef, VariantRef
from app.services.sources import Repositories, fetch_all, query


@dataclass
class References:
    locations: Optional[RefMap[int, LocationRef]] = None
    variants: Optional[RefMap[int, VariantRef]] = None
    users: Optional[RefMap[int, UserRef]] = None

    def as_kwargs(self) -> dict:
        return {"locations": self.locations, "variants": self.variants, "users": self.users}


def by_id(rows) -> RefMap:
    return RefMap.build(rows, key=lambda r: r.id)


async def load_references(
    repos: Repositories,
    *calls,
    locations: bool = False,
    variants: bool = False,
    users: bool = False,
) -> tuple[References, list]:
    """Fetch the requested maps alongside ``calls`` in one concurrent batch.

    Returns the maps and the results of ``calls`` in order.
    """
    wanted = []
    if locations:
        wanted.append(("locations", query(repos.catalog.locations)))
    if variants:
        wanted.append(("variants", query(repos.catalog.variants)))
    if users:
        wanted.append(("users", query(repos.orders.users)))

    results = await fetch_all(repos, *(call for _, call in wanted), *calls)
    refs = References(**{name: by_id(rows) for (name, _), rows in zip(wanted, results)})
    return refs, results[len(wanted):]


async def load_locations(repos: Repositories) -> RefMap[int, LocationRef]:
    refs, _ = await load_references(repos, locations=True)
    return refs.locations


async def load_variants(repos: Repositories) -> RefMap[int, VariantRef]:
    refs, _ = await load_references(repos, variants=True)
    return refs.variants


async def load_users(repos: Repositories) -> RefMap[int, UserRef]:
    refs, _ = await load_references(repos, users=True)
    return refs.users


async def load_cities(repos: Repositories) -> list[CityRef]:
    (rows,) = await fetch_all(repos, query(repos.catalog.cities))
    return rows
