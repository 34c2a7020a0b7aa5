from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.errors import ValidationError
from app.repositories.ledger import PreferenceMetric
from app.routers.params import OutputFormat, date_range, respond
from app.services import reports
from app.services.sources import Repositories, get_repositories

router = APIRouter()


@router.get("/inventory/location-store-warehouse")
async def inventory_at_location(
    day: Optional[date] = Query(default=None, alias="date"),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    if day is None:
        raise ValidationError("Date parameter is required")
    return respond(await reports.inventory_snapshot(repos, day), fmt)


@router.get("/inventoryflow")
async def inventory_flow(
    rng=Depends(date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    return respond(await reports.inventory_flow(repos, *rng), fmt)


@router.get("/inventory-discrepancy")
async def inventory_discrepancy(
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    return respond(await reports.inventory_discrepancy(repos), fmt)


@router.get("/inventorypreference/{metric}")
async def inventory_preference(
    metric: PreferenceMetric,
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    return respond(await reports.inventory_preference(repos, metric), fmt)


@router.get("/sellthroughrate")
async def sell_through_rate(
    rng=Depends(date_range),
    order: Literal["desc", "asc"] = Query(default="desc"),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    rows = await reports.sell_through(repos, *rng, descending=order == "desc")
    return respond(rows, fmt)
