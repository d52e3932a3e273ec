"""
FastAPI application for the CampusFix API.

Provides endpoints for:
- Reporting and tracking campus maintenance tickets
- The 2D campus map, walking routes and the issue overlay
- Student and admin academic dashboards
- Announcements and per-user notifications
"""
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text

from campusfix.api.academics import router as academics_router
from campusfix.api.auth import get_db_session_factory
from campusfix.api.map import router as map_router
from campusfix.api.notifications import router as notifications_router
from campusfix.api.rate_limit import limiter, rate_limit_exceeded_handler
from campusfix.api.tickets import router as tickets_router
from campusfix.config import settings
from campusfix.models.database import init_db

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - create tables on startup."""
    if settings.database_url.startswith("sqlite:///data/"):
        os.makedirs("data", exist_ok=True)
    init_db()
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
API for the CampusFix campus maintenance platform.

Features:
- Report issues with keyword triage of priority and category
- Assign tickets and track their status history
- Campus map with shortest walking routes and open issue markers
- Academic dashboards, announcements and notifications
    """,
    version=settings.app_version,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tickets_router, prefix=API_PREFIX)
app.include_router(map_router, prefix=API_PREFIX)
app.include_router(academics_router, prefix=API_PREFIX)
app.include_router(notifications_router, prefix=API_PREFIX)


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    """API root - health check and basic info."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check(session_factory=Depends(get_db_session_factory)):
    """Detailed health check."""
    try:
        with session_factory() as session:
            session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Service unhealthy: {str(e)}")
