"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from bloxmarket.api import api_router
from bloxmarket.core.config import settings
from bloxmarket.core.exceptions import BloxMarketError
from bloxmarket.core.limiter import limiter
from bloxmarket.core.logging import setup_logging
from bloxmarket.middleware.rate_limit import RateLimitMiddleware
from bloxmarket.middleware.request_id import RequestIdMiddleware
from bloxmarket.services.uploads import ensure_upload_dirs, upload_root

# Setup logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup and shutdown events.
    """
    logger.info(
        "Starting BloxMarket API",
        version="1.0.0",
        debug=settings.api_debug,
    )

    ensure_upload_dirs()

    if settings.auto_create_tables:
        from bloxmarket.db.session import create_all_tables
        await create_all_tables()

    yield

    logger.info("Shutting down BloxMarket API")

    from bloxmarket.db.session import engine
    await engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="BloxMarket - trade listings, forum, events, vouches and middleman verification",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add rate limiting middleware (after CORS)
app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=settings.requests_per_minute,
    auth_requests_per_minute=settings.auth_requests_per_minute,
    enabled=settings.rate_limit_enabled,
)

# Outermost, so every log line carries the request id
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(BloxMarketError)
async def domain_exception_handler(request: Request, exc: BloxMarketError):
    """Domain errors map straight onto their status code."""
    if exc.status_code >= 500:
        logger.error("Domain error", error=exc.message, error_type=type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing input is a 400, with pydantic's error list attached."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": jsonable_encoder(errors, exclude={"ctx", "input"})},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"error": f"Too many requests: {exc.detail}"},
        headers={"Retry-After": "60"},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


# Include API routes with /api prefix
app.include_router(api_router, prefix="/api")

# Uploaded files, read-only
app.mount("/uploads", StaticFiles(directory=str(upload_root()), check_dir=False), name="uploads")


def run():
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "bloxmarket.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )


if __name__ == "__main__":
    run()
