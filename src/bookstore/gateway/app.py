"""Reverse-proxy gateway in front of the book API."""

from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import quote

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from src.bookstore.api.http.middleware.request_log import (
    REQUEST_ID_HEADER,
    log_requests,
    request_id_of,
)
from src.bookstore.api.utils.app_startup import configure_logging
from src.bookstore.gateway.routes import RouteTable, load_route_table
from src.bookstore.runtime.context import get_config

# RFC 9110 section 7.6.1 connection-specific headers, never forwarded
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# Replaced with the gateway's own values rather than forwarded
GATEWAY_SET_HEADERS = frozenset(
    {"x-request-id", "x-forwarded-for", "x-forwarded-host", "x-forwarded-proto"}
)


def _request_headers(request: Request) -> dict[str, str]:
    headers = {
        name: value
        for name, value in request.headers.items()
        if name.lower()
        not in HOP_BY_HOP_HEADERS | GATEWAY_SET_HEADERS | {"host", "content-length"}
    }
    headers[REQUEST_ID_HEADER] = request_id_of(request)
    forwarded = request.headers.get("x-forwarded-for")
    if request.client:
        forwarded = f"{forwarded}, {request.client.host}" if forwarded else request.client.host
    if forwarded:
        headers["X-Forwarded-For"] = forwarded
    headers["X-Forwarded-Host"] = request.headers.get("host", "")
    headers["X-Forwarded-Proto"] = request.url.scheme
    return headers


def _response_headers(upstream: httpx.Response) -> dict[str, str]:
    # httpx has already decoded the body, so its encoding and length no longer apply
    excluded = HOP_BY_HOP_HEADERS | {"content-encoding", "content-length"}
    return {
        name: value
        for name, value in upstream.headers.items()
        if name.lower() not in excluded
    }


def _error(status_code: int, detail: str, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "request_id": request_id_of(request)},
    )


def _raw_path(request: Request) -> str:
    """The path as sent by the client, percent-escapes intact.

    Matching on the decoded path would turn an escaped ``?`` or ``/`` inside
    a placeholder value into a query string or an extra segment downstream.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        return quote(request.url.path)
    return raw_path.decode("latin-1").split("?", 1)[0]


async def proxy(request: Request) -> Response:
    """Forward the request to the downstream address of the matching route."""
    table: RouteTable = request.app.state.route_table
    client: httpx.AsyncClient = request.app.state.http_client

    path = _raw_path(request)
    match = table.match(request.method, path)
    if match is None:
        logger.info("No gateway route for {} {}", request.method, path)
        return _error(404, "No route matches the request", request)

    url = match.downstream_url
    if request.url.query:
        url = f"{url}?{request.url.query}"

    try:
        upstream = await client.request(
            request.method,
            url,
            headers=_request_headers(request),
            content=await request.body(),
        )
    except httpx.TimeoutException as e:
        logger.bind(downstream=url).warning("Downstream timed out: {}", e)
        return _error(504, "Downstream service timed out", request)
    except httpx.RequestError as e:
        logger.bind(downstream=url).error("Downstream unreachable: {}", e)
        return _error(502, "Downstream service unavailable", request)

    logger.bind(downstream=url, status_code=upstream.status_code).debug("proxied")
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=_response_headers(upstream),
    )


class ProxyEndpoint:
    """Raw ASGI endpoint so the catch-all route accepts every HTTP method.

    Method filtering is left to the route table.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await proxy(Request(scope, receive))
        await response(scope, receive, send)


def create_gateway_app(
    route_table: RouteTable | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the gateway.

    Args:
        route_table: Routes to serve; loaded from ``gateway.routes_file``
            when omitted.
        http_client: Client used to reach downstream services; created
            (and closed on shutdown) when omitted.
    """
    config = get_config()
    configure_logging(config)

    if route_table is None:
        route_table = load_route_table(Path(config.gateway.routes_file))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_client = http_client is None
        app.state.http_client = http_client or httpx.AsyncClient(
            timeout=config.gateway.timeout_seconds
        )
        logger.info("Gateway started with {} routes", len(route_table))
        try:
            yield
        finally:
            if owns_client:
                await app.state.http_client.aclose()
            logger.info("Gateway shut down")

    app = FastAPI(title="Bookstore Gateway", lifespan=lifespan, docs_url=None, redoc_url=None)
    app.state.route_table = route_table
    app.state.http_client = http_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.gateway.cors.origins,
        allow_credentials=config.gateway.cors.allow_credentials,
        allow_methods=config.gateway.cors.allow_methods,
        allow_headers=config.gateway.cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    @app.get("/health", include_in_schema=False)
    async def health(request: Request) -> dict[str, str | int]:
        return {
            "status": "healthy",
            "service": "gateway",
            "routes": len(request.app.state.route_table),
        }

    app.router.routes.append(
        Route("/{path:path}", endpoint=ProxyEndpoint(), include_in_schema=False)
    )
    return app
