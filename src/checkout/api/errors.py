"""Maps checkout errors onto HTTP responses.

Every error response has the body ``{"error": ...}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from checkout.errors import (
    AuthenticationError,
    GatewayError,
    InvalidTransitionError,
    MalformedPayloadError,
    NotFoundError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)


def _field_path(loc) -> str:
    path = ""
    for part in loc:
        if part == "body" and not path:
            continue
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "body"


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_path(error.get("loc", ())), []).append(error.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content={"error": errors})


async def _bad_request(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _conflict(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": str(exc), "order_id": exc.order_id, "status": exc.current},
    )


async def _bad_gateway(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": str(exc), "order_id": exc.order_id, "gateway_status": exc.gateway_status},
    )


async def _unavailable(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("store_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"error": "Service temporarily unavailable, please retry"})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers plus the checkout error mapping on ``app``."""
    register_exception_handlers(app)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(AuthenticationError, _bad_request)
    app.add_exception_handler(MalformedPayloadError, _bad_request)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(InvalidTransitionError, _conflict)
    app.add_exception_handler(GatewayError, _bad_gateway)
    app.add_exception_handler(PersistenceError, _unavailable)
