from typing import Annotated

from fastapi import Depends, HTTPException, Request

from srm_portal.flows import FlowStore
from srm_portal.services.booking_flow import BookingFlow
from srm_portal.services.srm_api import SRMApiService


def get_flow_store(request: Request) -> FlowStore:
    return request.app.state.flow_store


def get_srm_api(request: Request) -> SRMApiService:
    return request.app.state.srm_api


FlowStoreDep = Annotated[FlowStore, Depends(get_flow_store)]
SRMApiDep = Annotated[SRMApiService, Depends(get_srm_api)]


def get_flow(flow_id: str, store: FlowStoreDep) -> BookingFlow:
    flow = store.get_flow(flow_id)
    if flow is None:
        raise HTTPException(status_code=404, detail="Booking flow not found")
    return flow


FlowDep = Annotated[BookingFlow, Depends(get_flow)]
