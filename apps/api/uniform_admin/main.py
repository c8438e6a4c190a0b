"""FastAPI application entry point."""
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from uniform_admin.core.config import settings
from uniform_admin.core.structured_logging import build_log_context, configure_logging
from uniform_admin.db.session import engine

configure_logging()
logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Don't send PII to Sentry
    )
    logger.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from uniform_admin.core.rate_limit import limiter


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Uniform Admin API",
    description="Approval workflow and design task pipeline for the uniform store",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Assign/propagate X-Request-ID and log one line per request."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
        extra=build_log_context(
            request_id=request_id,
            route=request.url.path,
            method=request.method,
        ),
    )
    return response


# ============================================================================
# Error Handling
# ============================================================================

from uniform_admin.routers.shared import status_code_for
from uniform_admin.services.approval_service import ApprovalServiceError


@app.exception_handler(ApprovalServiceError)
async def approval_error_handler(request: Request, exc: ApprovalServiceError):
    return JSONResponse(status_code=status_code_for(exc), content={"detail": str(exc)})


# ============================================================================
# Routers
# ============================================================================

from uniform_admin.routers import approvals, auth, notifications, requests, tasks

# Auth router (always mounted)
app.include_router(auth.router, prefix="/auth", tags=["auth"])

# Approval workflow
app.include_router(approvals.router)  # Already has /approvals prefix
app.include_router(requests.router)  # Already has /requests prefix

# Design tasks
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

# Notifications (user-scoped)
app.include_router(notifications.router, prefix="/me", tags=["notifications"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
