"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (body limit, request context, CORS)
  - Mount the moderation/driver/public routers under /v1
  - Expose health, readiness and metrics endpoints

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler
  - RequestContextMiddleware: Request ID, logging context and HTTP metrics
  - interfaces.api.http.router: feature routers

Constraints:
  - CORS configurable via ALLOWED_ORIGINS env var (comma-separated)
  - Health checks validate DB only

Notes:
  - Middleware order matters: BodyLimit → RequestContext → CORS → routes
  - /v1 prefix allows API versioning
  - /healthz and /readyz follow Kubernetes conventions
  - In test environments the pool is not opened (in-memory repositories)
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..container import get_audit_trail, get_offer_repository
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..identity.auth import is_auth_enabled, require_metrics_auth
from ..infrastructure.db.pool import close_pool, init_pool
from ..interfaces.api.http.router import router
from .exception_handlers import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Validates settings and initializes pool."""
    settings = get_settings()
    uses_database = not settings.is_test()

    if uses_database:
        # Initialize DB pool (must happen before any repository usage)
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        logger.info(
            "Driver Offers API starting up",
            extra={
                "app_env": settings.app_env,
                "auth_enabled": is_auth_enabled(),
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        yield

    finally:
        pending = get_audit_trail().flush_pending()
        if get_audit_trail().pending_count:
            logger.error(
                "Eventos de auditoría pendientes al apagar",
                extra={"pending": get_audit_trail().pending_count, "written": pending},
            )
        if uses_database:
            close_pool()
        logger.info("Driver Offers API shutting down")


def _get_allowed_origins() -> list[str]:
    """Get CORS origins from settings, with fallback for import-time errors."""
    try:
        return get_settings().get_allowed_origins_list()
    except Exception:
        # Fallback for tooling that imports the app without env vars
        return ["http://localhost:3000"]


app = FastAPI(
    title="Driver Offers Moderation API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "moderation",
            "description": "Admin moderation (offers:read / offers:moderate)",
        },
        {
            "name": "driver",
            "description": "Driver offer lifecycle (offers:write)",
        },
        {
            "name": "public",
            "description": "Published offers (no auth)",
        },
        {
            "name": "audit",
            "description": "Audit trail (audit:read)",
        },
    ],
)

# R: Middleware order (bottom = first to execute):
# 1. CORSMiddleware - handles preflight
# 2. RequestContextMiddleware - sets request_id
# 3. BodyLimitMiddleware - rejects oversized bodies
app.add_middleware(BodyLimitMiddleware)
app.add_middleware(RequestContextMiddleware)

try:
    _cors_allow_credentials = get_settings().cors_allow_credentials
except Exception:
    _cors_allow_credentials = False
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=_cors_allow_credentials,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "X-API-Key",
        "X-Actor-Id",
        "X-Request-Id",
    ],
)

app.include_router(router, prefix="/v1")

register_exception_handlers(app)


def _db_status() -> str:
    try:
        if get_offer_repository().ping():
            return "connected"
    except Exception as e:
        logger.warning("Health check: DB unavailable", extra={"error": str(e)})
    return "disconnected"


@app.get("/healthz")
def healthz(request: Request):
    """
    R: Liveness + DB check.

    Returns:
        ok: True if the offer store answers
        db: "connected" or "disconnected"
        audit_pending: audit events waiting to be written
        request_id: Correlation ID for this request
    """
    db_status = _db_status()
    return {
        "ok": db_status == "connected",
        "db": db_status,
        "audit_pending": get_audit_trail().pending_count,
        "request_id": getattr(request.state, "request_id", None),
    }


@app.get("/readyz")
def readyz(request: Request, response: Response):
    """R: Readiness: 503 while the DB is unreachable."""
    db_status = _db_status()
    if db_status != "connected":
        response.status_code = 503
    return {
        "ok": db_status == "connected",
        "db": db_status,
        "request_id": getattr(request.state, "request_id", None),
    }


@app.get("/metrics")
def metrics(_auth: None = Depends(require_metrics_auth())):
    """R: Expose Prometheus metrics (text format)."""
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
