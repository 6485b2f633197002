from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import time

from .core.config import settings
from .core.database import close_db_connections
from .core.cache import cache_manager
from .core.error_handlers import register_exception_handlers
from .core.logging import setup_logging

# Import all routers
from .routers import health, auth, notifications, attendance
from .routers.admin import users, extracurriculars, announcements, dashboard, reports
from .routers.pembina import (
    dashboard as pembina_dashboard,
    schedules as pembina_schedules,
    sessions as pembina_sessions,
    announcements as pembina_announcements,
)
from .routers.student import dashboard as student_dashboard, enrollments as student_enrollments

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting SIXKUL API ({settings.environment})")

    await cache_manager.connect()
    logger.info("Cache initialized" if settings.cache_enabled else "Cache disabled")

    yield

    logger.info("Shutting down SIXKUL API")
    await cache_manager.close()
    await close_db_connections()
    logger.info("Shutdown complete")


app = FastAPI(
    title="SIXKUL API",
    description="School extracurricular management: enrollments, schedules, attendance and announcements",
    version=settings.app_version,
    lifespan=lifespan
)

register_exception_handlers(app)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

# Include all routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(notifications.router)
app.include_router(attendance.router)
app.include_router(users.router)
app.include_router(extracurriculars.router)
app.include_router(announcements.router)
app.include_router(dashboard.router)
app.include_router(reports.router)
app.include_router(pembina_dashboard.router)
app.include_router(pembina_schedules.router)
app.include_router(pembina_sessions.router)
app.include_router(pembina_announcements.router)
app.include_router(student_dashboard.router)
app.include_router(student_enrollments.router)


@app.get("/")
async def root():
    return {
        "message": "SIXKUL API",
        "version": settings.app_version,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("sixkul.main:app", host="0.0.0.0", port=8000, reload=settings.environment == "development")
