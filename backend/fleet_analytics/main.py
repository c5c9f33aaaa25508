"""
Fleet Telemetry Analytics - FastAPI Backend

Wires the analytics routers into one app. Thresholds come from FLEET_*
environment variables (see fleet_analytics.config); allowed CORS origins
come from FLEET_CORS_ORIGINS, comma separated.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleet_analytics.api.analytics import THRESHOLDS, codes_router, router as analytics_router


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


APP_NAME = "Fleet Telemetry Analytics"
APP_VERSION = "0.1.0"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FLEET_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{APP_NAME} {APP_VERSION} starting")
    logger.info(f"Active thresholds: {THRESHOLDS.as_dict()}")
    logger.info(f"CORS origins: {CORS_ORIGINS}")
    yield
    logger.info(f"{APP_NAME} stopped")


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="""
    Stateless analytics for the device-fleet dashboard.

    POST a device's raw packets to `/devices/{imei}/analytics` and get back:
    - trips (start/stop speed hysteresis) and today's distance
    - idle/moving split
    - battery runtime and drain estimates
    - alert flags, GPS/Speed/Battery labels and Online/Offline state

    Nothing is stored between calls.
    """,
    lifespan=lifespan,
)

# Credentials cannot be combined with a wildcard origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(analytics_router)
app.include_router(codes_router)


@app.get("/")
async def root():
    """Service name and version."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Liveness plus the thresholds this process is using."""
    return {
        "status": "healthy",
        "thresholds": THRESHOLDS.as_dict(),
    }
