"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.api.v1 import assignments, auth, locations, reports, roles, tasks, tickets, users
from fieldops.config import settings
from fieldops.core.logging import RequestIdMiddleware, setup_logging
from fieldops.database import close_db, get_db, init_db
from fieldops.dependencies import get_current_active_user

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS middleware; bearer tokens, no cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)

api = settings.API_PREFIX
authenticated = [Depends(get_current_active_user)]

# Include routers
app.include_router(auth.router, prefix=f"{api}/auth", tags=["auth"])
app.include_router(users.account_router, prefix=api, tags=["account"])
app.include_router(assignments.my_tasks_router, prefix=f"{api}/my-tasks", tags=["my-tasks"])
app.include_router(locations.router, prefix=f"{api}/locations", tags=["locations"])
app.include_router(reports.router, prefix=f"{api}/reports", tags=["reports"])
app.include_router(tickets.router, prefix=f"{api}/tickets", tags=["tickets"], dependencies=authenticated)

# Admin routers use AdminAPIRoute, which checks the role before the body is read
app.include_router(roles.router, prefix=f"{api}/admin", tags=["admin-roles"])
app.include_router(users.router, prefix=f"{api}/admin", tags=["admin-users"])
app.include_router(tasks.router, prefix=f"{api}/admin/tasks", tags=["admin-tasks"])
app.include_router(assignments.router, prefix=f"{api}/admin", tags=["admin-assignments"])
app.include_router(locations.admin_router, prefix=f"{api}/admin/locations", tags=["admin-locations"])
app.include_router(reports.admin_router, prefix=f"{api}/admin/reports", tags=["admin-reports"])


@app.get(f"{api}/test")
async def api_test():
    """Connectivity check for clients."""
    return {"message": "API Connected"}


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint."""
    health_status = {
        "status": "ok",
        "checks": {
            "database": "unknown",
        },
    }

    try:
        await db.execute(select(1))
        health_status["checks"]["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error("Health check database error: %s", e)
        health_status["checks"]["database"] = f"error: {e}"
        health_status["status"] = "degraded"

    return health_status
