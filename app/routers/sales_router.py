from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.repositories.orders import Grouping, Period
from app.routers.params import OutputFormat, date_range, optional_date_range, respond
from app.services import reports
from app.services.sources import Repositories, get_repositories

router = APIRouter()


def period_range(period: Period, rng: tuple[Optional[date], Optional[date]]):
    if period is Period.DATERANGE:
        return date_range(*rng)
    return None, None


@router.get("/salesperlocation/{period}")
async def sales_per_location(
    period: Period,
    rng=Depends(optional_date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    start, end = period_range(period, rng)
    rows = await reports.sales(repos, Grouping.LOCATION, period, start=start, end=end)
    return respond(rows, fmt)


@router.get("/salesperlocation/sku/{period}")
async def sku_sales_per_location(
    period: Period,
    rng=Depends(optional_date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    start, end = period_range(period, rng)
    rows = await reports.sales(repos, Grouping.LOCATION, period, by_sku=True, start=start, end=end)
    return respond(rows, fmt)


@router.get("/salespercustomer/{period}")
async def sales_per_customer(
    period: Period,
    rng=Depends(optional_date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    start, end = period_range(period, rng)
    rows = await reports.sales(repos, Grouping.CUSTOMER, period, start=start, end=end)
    return respond(rows, fmt)


@router.get("/salespercustomer/sku/{period}")
async def sku_sales_per_customer(
    period: Period,
    rng=Depends(optional_date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    start, end = period_range(period, rng)
    rows = await reports.sales(repos, Grouping.CUSTOMER, period, by_sku=True, start=start, end=end)
    return respond(rows, fmt)


@router.get("/numberofbills/{period}")
async def number_of_bills(
    period: Period,
    rng=Depends(optional_date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    start, end = period_range(period, rng)
    rows = await reports.bills(repos, period, start=start, end=end)
    return respond(rows, fmt)


@router.get("/customerskupreference")
async def customer_sku_preference(
    rng=Depends(date_range),
    fmt: OutputFormat = Query(default="json", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    rows = await reports.customer_sku_preference(repos, *rng)
    return respond(rows, fmt)
