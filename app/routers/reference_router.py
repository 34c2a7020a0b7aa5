from fastapi import APIRouter, Depends

from app.services import reports
from app.services.sources import Repositories, get_repositories

router = APIRouter()


@router.get("/locations")
async def list_locations(repos: Repositories = Depends(get_repositories)):
    return await reports.locations(repos)


@router.get("/cities")
async def list_cities(repos: Repositories = Depends(get_repositories)):
    return await reports.cities(repos)
