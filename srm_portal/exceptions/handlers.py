import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import FlowStateError, MissingContextError, RateLimitError, RemoteCallError

logger = logging.getLogger(__name__)


async def remote_call_error_handler(_request: Request, exc: RemoteCallError) -> JSONResponse:
    logger.error("SRM backend error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"SRM backend error: {exc.message}"},
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded for {exc.service}"},
    )


async def missing_context_error_handler(
    _request: Request, exc: MissingContextError
) -> JSONResponse:
    logger.info("Missing booking context: %s", exc.message)
    return JSONResponse(status_code=409, content={"detail": exc.message})


async def flow_state_error_handler(_request: Request, exc: FlowStateError) -> JSONResponse:
    logger.info("Rejected flow transition: %s", exc.message)
    return JSONResponse(status_code=409, content={"detail": exc.message})
