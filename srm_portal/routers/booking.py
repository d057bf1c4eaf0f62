import logging

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from srm_portal.dependencies import FlowDep, FlowStoreDep
from srm_portal.schemas.responses import (
    CustomerSelection,
    FlowCreatedResponse,
    FlowSnapshot,
    FlowStep,
    QuotePreview,
    StepResult,
    StepStatus,
    VehicleSelection,
)
from srm_portal.schemas.srm import (
    CustomerDetails,
    CustomerRecord,
    PaymentDetails,
    VehicleDetails,
    VehicleRecord,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/srm/flows")

STATUS_CODES = {
    StepStatus.advanced: 200,
    StepStatus.invalid: 422,
    StepStatus.blocked: 403,
    StepStatus.restart_required: 409,
    StepStatus.remote_error: 502,
}


class CustomerSelectRequest(BaseModel):
    selection: CustomerRecord | None = None
    typed_value: str = ""


class VehicleSelectRequest(BaseModel):
    selection: VehicleRecord | None = None
    typed_value: str = ""


class PendingFileRequest(BaseModel):
    path: str


class PendingFilesResponse(BaseModel):
    pending_file_deletions: list[str]


def _step_response(result: StepResult) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES[result.status],
        content=result.model_dump(mode="json"),
    )


@router.post("", response_model=FlowCreatedResponse, status_code=201)
async def create_flow(store: FlowStoreDep) -> FlowCreatedResponse:
    flow = store.create_flow()
    logger.info("Started booking flow %s", flow.flow_id)
    return FlowCreatedResponse(flow_id=flow.flow_id, step=flow.step)


@router.get("/{flow_id}", response_model=FlowSnapshot)
async def get_flow_state(flow: FlowDep) -> FlowSnapshot:
    return flow.snapshot()


@router.delete("/{flow_id}", status_code=204)
async def abandon_flow(flow_id: str, store: FlowStoreDep, _flow: FlowDep) -> Response:
    store.discard(flow_id)
    return Response(status_code=204)


@router.post("/{flow_id}/customer/select", response_model=CustomerSelection)
async def select_customer(flow: FlowDep, request: CustomerSelectRequest) -> CustomerSelection:
    return flow.select_customer(request.selection, request.typed_value)


@router.post("/{flow_id}/vehicle/select", response_model=VehicleSelection)
async def select_vehicle(flow: FlowDep, request: VehicleSelectRequest) -> VehicleSelection:
    return flow.select_vehicle(request.selection, request.typed_value)


@router.post("/{flow_id}/customer", response_model=StepResult)
async def submit_customer(flow: FlowDep, details: CustomerDetails | None = None):
    return _step_response(await flow.submit_customer(details))


@router.post("/{flow_id}/vehicle", response_model=StepResult)
async def submit_vehicle(flow: FlowDep, details: VehicleDetails | None = None):
    return _step_response(await flow.submit_vehicle(details))


@router.post("/{flow_id}/quote", response_model=QuotePreview)
async def preview_quote(flow: FlowDep, payment: PaymentDetails) -> QuotePreview:
    return flow.preview_quote(payment)


@router.post("/{flow_id}/payment", response_model=StepResult)
async def submit_payment(flow: FlowDep, payment: PaymentDetails):
    return _step_response(await flow.submit_payment(payment))


@router.post("/{flow_id}/files/pending", response_model=PendingFilesResponse)
async def mark_file_for_deletion(flow: FlowDep, request: PendingFileRequest) -> PendingFilesResponse:
    return PendingFilesResponse(
        pending_file_deletions=flow.mark_file_for_deletion(request.path)
    )


@router.post("/{flow_id}/reenter/{step}", response_model=FlowSnapshot)
async def reenter_step(flow: FlowDep, step: FlowStep) -> FlowSnapshot:
    flow.reenter(step)
    return flow.snapshot()
