"""FastAPI application for the book catalog API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse

from src.bookstore.api.http.app_data import ApplicationDependencies
from src.bookstore.api.http.middleware.request_log import log_requests, request_id_of
from src.bookstore.api.http.routers.health import router as health_router
from src.bookstore.api.http.routers.service.book import router as book_router
from src.bookstore.api.utils.app_startup import configure_logging
from src.bookstore.core.exceptions import BookStoreError
from src.bookstore.core.services import DbManageService, DbSessionService
from src.bookstore.runtime.context import get_config

# Load configuration
main_config = get_config()

# Initialize logging
configure_logging()


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="Bookstore API",
    lifespan=lifespan,
    docs_url=None if main_config.app.environment == "production" else "/docs",
    redoc_url=None if main_config.app.environment == "production" else "/redoc",
)

# expose startup for tests
__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=main_config.app.cors.origins,
    allow_credentials=main_config.app.cors.allow_credentials,
    allow_methods=main_config.app.cors.allow_methods,
    allow_headers=main_config.app.cors.allow_headers,
)

# --- Request logging middleware ---
app.middleware("http")(log_requests)


# --- Error mapping ---
@app.exception_handler(BookStoreError)
async def bookstore_error_handler(request: Request, exc: BookStoreError) -> JSONResponse:
    content = exc.to_dict()
    if exc.status_code >= 500 and not get_config().app.expose_error_details:
        content = {"detail": "Internal Server Error"}
    content["request_id"] = request_id_of(request)

    if exc.status_code >= 500:
        logger.bind(error_type=type(exc).__name__).error("request.fault: {}", exc.message)
    else:
        logger.bind(status_code=exc.status_code).info("request.rejected: {}", exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed bodies are client errors: 400 rather than FastAPI's 422
    return JSONResponse(
        status_code=400,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "request_id": request_id_of(request),
        },
    )


# --- Router registration ---
app.include_router(health_router)
app.include_router(book_router, prefix="/api/books", tags=["books"])


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Tests may install their own dependencies before the lifespan runs
    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = ApplicationDependencies(
            database_service=DbSessionService()
        )

    app_deps: ApplicationDependencies = app.state.app_dependencies
    if config.database.create_tables:
        DbManageService(app_deps.database_service.engine).create_all()


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_deps: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_deps is not None:
        app_deps.database_service.engine.dispose()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # We handle access logging in middleware
    )
