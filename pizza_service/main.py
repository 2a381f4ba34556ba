"""
FastAPI Application Entry Point

JWT Pizza Service - Hybrid Architecture
Talks to a mock pizza factory in development and the real one otherwise.

Endpoints:
    - /api/auth: Register, login, logout
    - /api/user: Profile read and update
    - /api/franchise: Franchises and stores
    - /api/order: Menu and orders
    - GET /api/docs: Endpoint listing
    - GET /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from pizza_service import database
from pizza_service.auth.dependencies import get_current_user
from pizza_service.core.config import get_settings, setup_logging
from pizza_service.core.exceptions import StatusCodeError
from pizza_service.database import get_db
from pizza_service.routers import auth, franchise, order, user
from pizza_service.schemas import DocsResponse, HealthResponse
from pizza_service.services.denylist import get_token_denylist
from pizza_service.services.factory import get_factory_service
from pizza_service.services.users import ensure_default_admin

logger = logging.getLogger(__name__)

API_ROUTERS = (auth.router, user.router, franchise.router, order.router)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings = get_settings()

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # Initialize database
    database.configure_engine()
    await database.init_db()
    logger.info(f"✅ Database initialized ({settings.database_dialect})")

    async with database.async_session_maker() as session:
        admin = await ensure_default_admin(session, settings)
    if admin is not None:
        logger.info(f"✅ Default admin: {admin.email}")

    # Log service configuration
    factory_service = get_factory_service()
    denylist = get_token_denylist()
    logger.info(f"✅ Factory Service: {factory_service.provider_name}")
    logger.info(f"✅ Token Denylist: {denylist.backend_name}")
    await denylist.prune()

    # Validate production config
    if settings.use_real_services:
        problems = settings.validate_production_config()
        if problems and settings.is_production:
            raise RuntimeError(f"Refusing to start with default secrets: {problems}")
        if problems:
            logger.warning(f"⚠️ Production config issues: {problems}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await database.dispose_engine()
    logger.info("✅ Cleanup complete")


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def status_code_error_handler(request: Request, exc: StatusCodeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = "unknown endpoint"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)


def _describe_validation_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(_describe_validation_error(error) for error in exc.errors())
    return JSONResponse(status_code=400, content={"message": message or "invalid request"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    content: dict[str, Any] = {"message": "internal server error"}
    if get_settings().debug:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# =============================================================================
# ROOT, HEALTH & DOCS ENDPOINTS
# =============================================================================

def _requires_auth(route: APIRoute) -> bool:
    pending = [route.dependant]
    while pending:
        dependant = pending.pop()
        if dependant.call is get_current_user:
            return True
        pending.extend(dependant.dependencies)
    return False


def _database_label(url: str) -> str:
    parsed = make_url(url)
    return parsed.host or parsed.database or parsed.drivername


def _register_root_routes(app: FastAPI) -> None:

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root."""
        return {
            "message": "welcome to JWT Pizza",
            "version": get_settings().app_version,
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
        """Verify all system components are operational."""

        # Check database
        db_status = "healthy"
        try:
            await db.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"unhealthy: {str(e)}"
            logger.error(f"Database health check failed: {e}")

        denylist = get_token_denylist()
        denylist_status = "healthy" if await denylist.health_check() else "unhealthy"

        factory_service = get_factory_service()
        factory_status = "healthy" if await factory_service.health_check() else "unhealthy"

        overall = "operational" if all(
            s == "healthy" for s in [db_status, denylist_status, factory_status]
        ) else "degraded"

        return HealthResponse(
            status=overall,
            database=db_status,
            token_denylist=f"{denylist.backend_name}: {denylist_status}",
            factory_service=f"{factory_service.provider_name}: {factory_status}",
            timestamp=datetime.now(),
        )

    @app.get(
        "/api/docs",
        response_model=DocsResponse,
        tags=["Root"],
        summary="Service documentation",
    )
    async def api_docs() -> DocsResponse:
        settings = get_settings()
        endpoints = [
            {
                "method": method,
                "path": route.path,
                "requiresAuth": _requires_auth(route),
                "description": route.summary,
            }
            for router in API_ROUTERS
            for route in router.routes
            if isinstance(route, APIRoute)
            for method in sorted(route.methods)
        ]
        return DocsResponse(
            version=settings.app_version,
            endpoints=endpoints,
            config={
                "factory": settings.factory_url,
                "db": _database_label(settings.database_url),
            },
        )


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Pizza ordering backend with JWT sessions, franchises and a pizza factory integration.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StatusCodeError, status_code_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    _register_root_routes(app)
    for router in API_ROUTERS:
        app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pizza_service.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
