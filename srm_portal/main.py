import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from srm_portal.config import Settings
from srm_portal.exceptions.custom import (
    FlowStateError,
    MissingContextError,
    RateLimitError,
    RemoteCallError,
)
from srm_portal.exceptions.handlers import (
    flow_state_error_handler,
    missing_context_error_handler,
    rate_limit_error_handler,
    remote_call_error_handler,
)
from srm_portal.flows import FlowStore
from srm_portal.routers.booking import router as booking_router
from srm_portal.routers.search import router as search_router
from srm_portal.services.srm_api import SRMApiService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        srm_api = SRMApiService(
            client, settings.srm_api_base_url, settings.srm_api_access_token
        )
        app.state.srm_api = srm_api
        app.state.flow_store = FlowStore(
            srm_api,
            ttl_seconds=settings.flow_ttl_seconds,
            max_flows=settings.max_flows,
            default_currency=settings.default_currency,
        )

        yield


app = FastAPI(title="SRM Booking", lifespan=lifespan)

app.add_exception_handler(RemoteCallError, remote_call_error_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)
app.add_exception_handler(MissingContextError, missing_context_error_handler)
app.add_exception_handler(FlowStateError, flow_state_error_handler)

app.include_router(booking_router)
app.include_router(search_router)
