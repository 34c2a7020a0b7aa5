"""Display names onto aggregate rows, and the two canonical orderings.

Every name that cannot be resolved becomes the literal ``"Unknown"``: the
dashboard filters and searches on these strings, so ``None`` or a missing
key is never acceptable here.
"""

from __future__ import annotations

import logging
import unicodedata
from typing import Iterable, Optional

from app.core.refs import UNKNOWN, LocationRef, RefMap, UserRef, VariantRef

logger = logging.getLogger(__name__)

_NO_LOCATION = LocationRef(id=-1, display_name=UNKNOWN, city_id=None, city_name=None)
_NO_VARIANT = VariantRef(id=-1, title=UNKNOWN, product_id=None, product_name=None, unit_weight=None)
_NO_USER = UserRef(id=-1, name=None, phone_number=None)


def _or_unknown(value) -> str:
    if value is None or value == "":
        return UNKNOWN
    return value


def enrich(
    rows: Iterable[dict],
    *,
    users: Optional[RefMap] = None,
    locations: Optional[RefMap] = None,
    variants: Optional[RefMap] = None,
) -> list[dict]:
    """Return copies of ``rows`` with names from whichever maps are given.

    ``displayName`` names the row's subject: the customer when ``users`` is
    passed, otherwise the location.
    """
    out = []
    misses = 0
    for row in rows:
        enriched = dict(row)
        if locations is not None:
            loc = locations.lookup_or(row.get("locationId"), _NO_LOCATION)
            misses += loc is _NO_LOCATION
            enriched["locationName"] = _or_unknown(loc.display_name)
            enriched["cityName"] = _or_unknown(loc.city_name)
            enriched["displayName"] = enriched["locationName"]
        if users is not None:
            user = users.lookup_or(row.get("userId"), _NO_USER)
            misses += user is _NO_USER
            enriched["displayName"] = _or_unknown(user.name)
            enriched["phoneNumber"] = _or_unknown(user.phone_number)
        if variants is not None and "variantId" in row:
            var = variants.lookup_or(row.get("variantId"), _NO_VARIANT)
            misses += var is _NO_VARIANT
            enriched["variantName"] = _or_unknown(var.title)
            enriched["productName"] = _or_unknown(var.product_name)
        out.append(enriched)
    if misses:
        logger.debug("enrich: %d reference lookups fell back to %r", misses, UNKNOWN)
    return out


def collation_key(name: Optional[str]) -> str:
    """Case- and accent-insensitive sort key (``"Émile"`` sorts with ``"emile"``)."""
    decomposed = unicodedata.normalize("NFKD", name or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def sort_by_display_name(rows: Iterable[dict]) -> list[dict]:
    # Names collide across distinct ids; ties keep their incoming order.
    return sorted(rows, key=lambda r: collation_key(r.get("displayName")))


def sort_by_rate(rows: Iterable[dict], field: str, descending: bool = True) -> list[dict]:
    """Order on a computed rate with ``None`` always trailing."""
    rows = list(rows)
    rated = [r for r in rows if r.get(field) is not None]
    unrated = [r for r in rows if r.get(field) is None]
    rated.sort(key=lambda r: r[field], reverse=descending)
    return rated + unrated
