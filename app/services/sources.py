"""Wiring between source repositories and request handlers.

All source queries behind one response run concurrently on the thread pool
and are awaited together. The first failure or timeout fails the whole
response; nothing partial is ever returned.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import partial

from app.db.session import AdminSession, CustomerSession, ImsSession, MachineSession, settings
from app.errors import UpstreamQueryError
from app.repositories.catalog import CatalogRepository
from app.repositories.ledger import LedgerRepository
from app.repositories.orders import OrdersRepository
from app.repositories.sensors import SensorRepository

logger = logging.getLogger(__name__)


@dataclass
class Repositories:
    catalog: CatalogRepository
    orders: OrdersRepository
    ledger: LedgerRepository
    sensors: SensorRepository
    timeout: float = 30.0


def get_repositories() -> Repositories:
    return Repositories(
        catalog=CatalogRepository(AdminSession),
        orders=OrdersRepository(CustomerSession),
        ledger=LedgerRepository(ImsSession),
        sensors=SensorRepository(MachineSession),
        timeout=settings.QUERY_TIMEOUT_SECONDS,
    )


def query(method, *args, **kwargs):
    """Bind a repository method call for :func:`fetch_all`."""
    return partial(method, *args, **kwargs)


def _source_of(call) -> str:
    owner = getattr(call.func, "__self__", None)
    name = getattr(call.func, "__name__", "query")
    return f"{getattr(owner, 'source', 'unknown')}.{name}"


async def _run(call, timeout: float):
    source = _source_of(call)
    try:
        return await asyncio.wait_for(asyncio.to_thread(call), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise UpstreamQueryError(f"{source} (timed out after {timeout}s)", exc) from exc
    except Exception as exc:
        raise UpstreamQueryError(source, exc) from exc


async def fetch_all(repos: Repositories, *calls) -> list:
    """Run ``calls`` concurrently; results come back in call order."""
    tasks = [asyncio.ensure_future(_run(call, repos.timeout)) for call in calls]
    try:
        return list(await asyncio.gather(*tasks))
    except UpstreamQueryError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
