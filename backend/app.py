"""
AquaFlow Backend Application

FastAPI application serving the simulated water heater to the dashboard.
"""

import os
import sys
import traceback
from contextlib import asynccontextmanager

import log_config  # noqa: F401
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "core"))

# Import API router
import api
from api import VERSION, load_settings_from_config
from api import router as api_router

from aquaflow.simulation_clock import SimulationClock


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan manager for startup/shutdown."""
    # Startup
    logger.info("AquaFlow starting")

    # Log registered routes
    routes = [
        f"{getattr(route, 'path', '?')} - {getattr(route, 'methods', ['MOUNT'])}"
        for route in app.routes
    ]
    logger.info(f"Registered routes: {routes}")

    # Settings errors are fatal: refuse to start with an invalid configuration
    settings = load_settings_from_config()
    logger.info(f"💧 Simulating {settings.device.model} ({settings.device.serial_number})")

    clock = SimulationClock(settings)
    await clock.start()

    # Make clock available to API
    api.clock = clock

    yield

    # Shutdown
    logger.info("AquaFlow shutting down")
    await clock.stop()
    api.clock = None


# Create FastAPI application
app = FastAPI(
    title="AquaFlow API",
    description="Simulated telemetry and threshold classification for a smart water heater",
    version=VERSION,
    lifespan=lifespan,
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions gracefully."""
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    logger.error(f"Unhandled exception: {exc}")
    logger.error(f"Request path: {request.url.path}")
    logger.error(f"Stack trace:\n{tb_str}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "type": type(exc).__name__,
            "message": "Internal server error",
        },
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


# For development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
