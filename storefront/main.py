"""FastAPI application entry point"""
import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront import __version__
from storefront.api import auth, health, products
from storefront.config import settings
from storefront.errors import StorefrontError
from storefront.middleware.monitoring import MonitoringMiddleware, record_revocation_registry_size
from storefront.schemas.common import describe_validation_errors, format_response
from storefront.utils.jwt_utils import TokenCodec
from storefront.utils.logger import logger, setup_logging
from storefront.utils.revocation import TokenRevocationRegistry, run_periodic_cleanup
from storefront.utils.uploads import get_upload_dir

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler

    Builds the token codec (fails fast without JWT_SECRET_KEY), the
    revocation registry and its periodic cleanup task.
    """
    # Startup
    codec = TokenCodec.from_settings(settings)
    registry = TokenRevocationRegistry(codec)
    app.state.token_codec = codec
    app.state.revocation_registry = registry

    if settings.STORAGE_TYPE == "local":
        get_upload_dir()

    cleanup_task = asyncio.create_task(
        run_periodic_cleanup(registry, settings.REVOCATION_CLEANUP_INTERVAL_SECONDS)
    )

    logger.info(
        f"Storefront API {__version__} starting up "
        f"(environment={settings.ENVIRONMENT}, storage={settings.STORAGE_TYPE}, "
        f"metrics={settings.METRICS_ENABLED})"
    )
    yield

    # Shutdown
    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task
    record_revocation_registry_size(0)
    logger.info("Storefront API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Storefront API",
    description="Jewelry store catalog with token-based back-office authentication",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    app.add_middleware(MonitoringMiddleware)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
        inprogress_name="storefront_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(products.router)

# Locally stored product images
if settings.STORAGE_TYPE == "local":
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "success": True,
        "message": "Welcome to the Storefront API",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "auth": "/api/auth",
            "products": "/api/products",
        },
        "docs": "/docs",
    }


# ===== Error Handlers =====

def _envelope(status_code: int, message: str, error: str = None, headers: dict = None) -> JSONResponse:
    body = format_response(False, message, error=error).model_dump(exclude_unset=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Known failure kinds carry their own status code"""
    if exc.status_code >= 500:
        logger.error(
            f"{exc.error_code}: {exc.message}",
            extra={"request_id": getattr(request.state, "request_id", None), "action": exc.error_code},
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _envelope(exc.status_code, exc.message, error=exc.error_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed or incomplete request bodies/queries are 400, not 422"""
    return _envelope(
        status.HTTP_400_BAD_REQUEST,
        describe_validation_errors(exc.errors()),
        error="validation_error",
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return _envelope(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        extra={"request_id": getattr(request.state, "request_id", None)},
        exc_info=True
    )
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        error=str(exc) if settings.is_development else None,
    )
