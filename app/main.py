# app/main.py

"""Rocky Blog Backend - cached post API with tag-based invalidation."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse, Response
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.configs import settings
from app.db import ping_db
from app.errors import (
    CacheExceptionError,
    DatabaseError,
    ForbiddenError,
    InvalidPostError,
    InvalidSecretError,
    PostNotFoundError,
    RevalidationError,
    UnauthenticatedError,
    UploadError,
    auth_exception_handler,
    cache_exception_handler,
    database_exception_handler,
    post_exception_handler,
    revalidate_exception_handler,
    upload_exception_handler,
    validation_exception_handler,
)
from app.managers import limiter, rate_limit_exceeded_handler
from app.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from app.monitoring import configure_logging
from app.routes import posts_router, revalidate_router, uploads_router
from app.schemas import CacheHealthResponse, HealthCheckResponse
from app.utils.helpers import today_str

configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    description="Rocky Blog Backend API",
    version="1.0.0",
    lifespan=lifespan,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
# Middleware to tell FastAPI it is behind a proxy
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


routes = [
    posts_router,
    uploads_router,
    revalidate_router,
]

_ = [app.include_router(router) for router in routes]

errors = [
    (CacheExceptionError, cache_exception_handler),
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (UnauthenticatedError, auth_exception_handler),
    (ForbiddenError, auth_exception_handler),
    (PostNotFoundError, post_exception_handler),
    (InvalidPostError, post_exception_handler),
    (DatabaseError, database_exception_handler),
    (UploadError, upload_exception_handler),
    (InvalidSecretError, revalidate_exception_handler),
    (RevalidationError, revalidate_exception_handler),
    (RequestValidationError, validation_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

app.state.limiter = limiter
limiter: Limiter = app.state.limiter

settings.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 00:00:00",
                        "database": "connected",
                        "cache": {"backend": "redis", "status": "healthy", "statistics": {}},
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request) -> ORJSONResponse:
    """
    Health check endpoint.

    Parameters
    ----------
    request : Request
        Current request context.

    Returns
    -------
    ORJSONResponse
        Overall status, database connectivity and cache health.

    Notes
    -----
    ``status`` is ``"degraded"`` when the database does not answer; the
    cache falls back to memory on its own and never degrades the status.
    """
    cache_health_data = await request.app.state.cache_manager.health_check()
    database_ok = await ping_db()

    response_data = HealthCheckResponse(
        version=app.version,
        status="ok" if database_ok else "degraded",
        timestamp=today_str(),
        database="connected" if database_ok else "unavailable",
        cache=CacheHealthResponse(**cache_health_data),
    )

    return ORJSONResponse(response_data.model_dump())


@app.get(
    "/",
    tags=["🏠 Root"],
    summary="Root access",
    response_model=dict[str, str],
    response_class=JSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"message": "Welcome to Rocky Blog Backend"},
                },
            },
        },
        429: {
            "description": "Rate limit exceeded",
            "content": {"application/json": {"example": {"error": "Rate limit exceeded"}}},
        },
    },
    operation_id="root_access",
)
@limiter.limit("5/minute")
async def root(request: Request, response: Response) -> JSONResponse:
    """
    Root endpoint.

    Notes
    -----
    Rate limited to 5 requests per minute.
    """
    return JSONResponse(content={"message": "Welcome to Rocky Blog Backend"})


if __name__ == "__main__":
    from uvicorn import run

    run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level="info",
        loop="uvloop",
        http="httptools",
    )
