from fastapi import APIRouter, Query

from srm_portal.dependencies import SRMApiDep
from srm_portal.schemas.responses import CustomerSearchResponse, VehicleSearchResponse

router = APIRouter(prefix="/srm")


@router.get("/customers/search", response_model=CustomerSearchResponse)
async def search_customers(
    api: SRMApiDep, q: str = Query(min_length=1)
) -> CustomerSearchResponse:
    return CustomerSearchResponse(results=await api.search_customers(q))


@router.get("/vehicles/search", response_model=VehicleSearchResponse)
async def search_vehicles(
    api: SRMApiDep, q: str = Query(min_length=1)
) -> VehicleSearchResponse:
    return VehicleSearchResponse(results=await api.search_vehicles(q))
