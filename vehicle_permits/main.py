# vehicle_permits/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers for the permit workflow, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from vehicle_permits.routers import employees, health, hr_users, permits
from vehicle_permits.database import create_tables
from vehicle_permits.config import settings
from vehicle_permits.services.errors import PermitWorkflowError
from vehicle_permits.services.notification_dispatcher import drain_background_dispatches
from vehicle_permits.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Vehicle Permit API",
    description="Vehicle usage permits — employee submission, HR decision, WhatsApp-style notifications.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the HR dashboard / employee form to call the API) ────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth for HR endpoints.
    The employee form (submit + lookup) and health check stay open.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    open_paths = {"/api/v1/health", "/api/v1/employees/lookup", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        is_submission = request.method == "POST" and path == "/api/v1/permits"
        if path in self.open_paths or is_submission or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(PermitWorkflowError)
async def permit_workflow_error_handler(request: Request, exc: PermitWorkflowError):
    logger.info(f"{exc.status_code} {request.method} {request.url.path} ({type(exc).__name__}: {exc.message})")
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(permits.router,   prefix="/api/v1", tags=["🚗 Permits"])
app.include_router(employees.router, prefix="/api/v1", tags=["👤 Employees"])
app.include_router(hr_users.router,  prefix="/api/v1", tags=["🧑‍💼 HR Users"])
app.include_router(health.router,    prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Vehicle Permit backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"📨 Notifications: gateway={settings.NOTIFICATION_GATEWAY} mode={settings.DISPATCH_MODE}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Vehicle Permit backend shutting down...")
    await drain_background_dispatches()
