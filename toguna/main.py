"""Toguna - call-center sales operations FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
import redis.asyncio as redis

from toguna.config import get_settings
from toguna.api import (
    auth,
    clients,
    operators,
    projects,
    companies,
    calls,
    appointments,
    schedule,
    nurturing,
    followup_rules,
    tracking,
    quality,
    golden_calls,
    pivot_alerts,
    incubation,
    sentiment,
    fraud,
    compliance,
    intelligence,
    roleplay,
    notifications,
    sales_floor,
    dashboard,
    exports,
    telephony,
    performance,
    risk_flags,
    portal,
)
from toguna.api.auth import get_current_operator, require_director
from toguna.services.database import init_db, close_db
from toguna.services.realtime import set_redis
from toguna.scheduler.jobs import start_scheduler, stop_scheduler

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    await init_db()
    await start_scheduler()

    # Redis carries realtime notifications and floor status
    app.state.redis = redis.from_url(settings.redis_url, decode_responses=True)
    set_redis(app.state.redis)

    yield

    # Shutdown
    await stop_scheduler()
    set_redis(None)
    await app.state.redis.close()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Sales operations dashboard for outbound call centers",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

signed_in = [Depends(get_current_operator)]
director_only = [Depends(require_director)]

# Public
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(tracking.router, prefix="/api/v1/track", tags=["Tracking"])
app.include_router(portal.router, prefix="/api/v1/portal", tags=["Client Portal"])

# Operator-facing
app.include_router(companies.router, prefix="/api/v1/companies", tags=["Companies"], dependencies=signed_in)
app.include_router(calls.router, prefix="/api/v1/calls", tags=["Calls"])
app.include_router(appointments.router, prefix="/api/v1/appointments", tags=["Appointments"], dependencies=signed_in)
app.include_router(roleplay.router, prefix="/api/v1/roleplay", tags=["Roleplay"])
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["Notifications"])
app.include_router(sales_floor.router, prefix="/api/v1/sales-floor", tags=["Sales Floor"])
app.include_router(telephony.router, prefix="/api/v1/telephony", tags=["Telephony"])
app.include_router(performance.router, prefix="/api/v1/performance", tags=["Performance"])

# Management
app.include_router(clients.router, prefix="/api/v1/clients", tags=["Clients"], dependencies=director_only)
app.include_router(operators.router, prefix="/api/v1/operators", tags=["Operators"], dependencies=director_only)
app.include_router(projects.router, prefix="/api/v1/projects", tags=["Projects"], dependencies=director_only)
app.include_router(schedule.router, prefix="/api/v1/schedule", tags=["Schedule"], dependencies=director_only)
app.include_router(nurturing.router, prefix="/api/v1/nurturing", tags=["Nurturing"], dependencies=director_only)
app.include_router(followup_rules.router, prefix="/api/v1/followup-rules", tags=["Followup Rules"], dependencies=director_only)
app.include_router(quality.router, prefix="/api/v1/quality", tags=["Quality"], dependencies=director_only)
app.include_router(golden_calls.router, prefix="/api/v1/golden-calls", tags=["Golden Calls"], dependencies=director_only)
app.include_router(pivot_alerts.router, prefix="/api/v1/pivot-alerts", tags=["Pivot Alerts"], dependencies=director_only)
app.include_router(incubation.router, prefix="/api/v1/incubation", tags=["Incubation"], dependencies=director_only)
app.include_router(sentiment.router, prefix="/api/v1/sentiment", tags=["Sentiment"], dependencies=director_only)
app.include_router(fraud.router, prefix="/api/v1/fraud", tags=["Fraud"], dependencies=director_only)
app.include_router(compliance.router, prefix="/api/v1/compliance", tags=["Compliance"], dependencies=director_only)
app.include_router(intelligence.router, prefix="/api/v1/intelligence", tags=["Intelligence"], dependencies=director_only)
app.include_router(risk_flags.router, prefix="/api/v1/risk-flags", tags=["Risk Flags"], dependencies=director_only)
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"], dependencies=director_only)
app.include_router(exports.router, prefix="/api/v1/exports", tags=["Exports"], dependencies=director_only)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "docs": "/docs",
        "health": "/health",
    }
