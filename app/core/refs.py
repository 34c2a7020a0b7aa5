"""Request-scoped reference data and the keyed map used for cross-source joins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterable, Iterator, Optional, TypeVar

UNKNOWN = "Unknown"

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
D = TypeVar("D")


@dataclass(frozen=True)
class LocationRef:
    id: int
    display_name: str
    city_id: Optional[int]
    city_name: Optional[str]


@dataclass(frozen=True)
class VariantRef:
    id: int
    title: str
    product_id: Optional[int]
    product_name: Optional[str]
    unit_weight: Optional[float]


@dataclass(frozen=True)
class UserRef:
    id: int
    name: Optional[str]
    phone_number: Optional[str]


@dataclass(frozen=True)
class CityRef:
    id: int
    name: str


class RefMap(Generic[K, V]):
    """Read-only key -> record map with one fallback policy for misses."""

    def __init__(self, items: Optional[dict[K, V]] = None):
        self._items: dict[K, V] = dict(items or {})

    @classmethod
    def build(cls, records: Iterable[V], key: Callable[[V], K]) -> "RefMap[K, V]":
        # last record wins on duplicate keys, same as a dict literal
        return cls({key(r): r for r in records})

    def lookup_or(self, key: Optional[K], default: D) -> V | D:
        if key is None:
            return default
        return self._items.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[K]:
        return iter(self._items)

    def values(self):
        return self._items.values()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RefMap):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"RefMap({len(self._items)} items)"


def composite_key(*parts: object) -> str:
    """Join key used when two sources only share a tuple of ids."""
    return "-".join(str(p) for p in parts)
