"""Request logging middleware."""

import time
import uuid

from fastapi import Request
from loguru import logger
from starlette.responses import JSONResponse, Response

from src.bookstore.runtime.context import get_config

REQUEST_ID_HEADER = "X-Request-ID"


def request_id_of(request: Request) -> str:
    """Return the request id assigned by the middleware, or ``-`` outside of it."""
    return getattr(request.state, "request_id", "-")


async def log_requests(request: Request, call_next) -> Response:
    # Correlation / tracing
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id

    client_ip = request.client.host if request.client else "unknown"
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            detail = (
                str(exc)
                if get_config().app.expose_error_details
                else "Internal Server Error"
            )
            return JSONResponse(
                status_code=500,
                content={"detail": detail, "request_id": request_id},
                headers={REQUEST_ID_HEADER: request_id},
            )
