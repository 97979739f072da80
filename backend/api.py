"""
AquaFlow API Endpoints
"""

import json
import os
import sys

from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from pydantic import BaseModel

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "core"))

from aquaflow.settings import AquaFlowSettings, load_settings, settings_from_options
from aquaflow.simulation_clock import SimulationClock

router = APIRouter()

VERSION = "0.1.0"

# Home Assistant add-on options (production)
OPTIONS_PATH = "/data/options.json"

# Simulation clock (set by app.py during startup)
clock: SimulationClock | None = None


def load_settings_from_config() -> AquaFlowSettings:
    """Load device settings from add-on options, AQUAFLOW_CONFIG or config.yaml."""
    # Try to load from options.json (production)
    if os.path.exists(OPTIONS_PATH):
        with open(OPTIONS_PATH) as f:
            options = json.load(f)
        settings = settings_from_options(options, source=OPTIONS_PATH)
        logger.info("Loaded settings from options.json")
        return settings

    # Development: config.yaml next to the repo root unless overridden
    config_path = os.environ.get(
        "AQUAFLOW_CONFIG",
        os.path.join(os.path.dirname(__file__), "..", "config.yaml"),
    )
    return load_settings(config_path)


def _require_clock() -> SimulationClock:
    if clock is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized")
    return clock


class SetTemperatureRequest(BaseModel):
    """Request body for setting the target temperature."""
    temperature: float


class SetModeRequest(BaseModel):
    """Request body for switching eco mode."""
    eco: bool


class SetBaseValuesRequest(BaseModel):
    """Request body for the customizer (flow rate and pressure)."""
    flow_rate: float
    pressure: float


class SetConnectivityRequest(BaseModel):
    """Request body for the connect/disconnect toggle."""
    connected: bool


def _inputs_response(sim: SimulationClock) -> dict:
    return {"connected": sim.connected, **sim.inputs.to_dict()}


@router.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "AquaFlow",
        "version": VERSION,
        "connected": clock.connected if clock else False,
    }


@router.get("/api/snapshot")
async def get_snapshot():
    """Current device snapshot with all channel readings."""
    sim = _require_clock()
    return {"connected": sim.connected, **sim.get_snapshot().to_dict()}


@router.post("/api/target")
async def set_target(request: SetTemperatureRequest):
    """Set target temperature (clamped to the allowed range)."""
    sim = _require_clock()
    sim.set_target(request.temperature)
    return _inputs_response(sim)


@router.post("/api/target/increment")
async def increment_target():
    sim = _require_clock()
    sim.increment_target()
    return _inputs_response(sim)


@router.post("/api/target/decrement")
async def decrement_target():
    sim = _require_clock()
    sim.decrement_target()
    return _inputs_response(sim)


@router.post("/api/mode")
async def set_mode(request: SetModeRequest):
    """Switch between eco and normal mode."""
    sim = _require_clock()
    sim.set_mode(request.eco)
    return _inputs_response(sim)


@router.post("/api/base-values")
async def set_base_values(request: SetBaseValuesRequest):
    """Update the flow rate and pressure base values."""
    sim = _require_clock()
    sim.set_base_values(request.flow_rate, request.pressure)
    return _inputs_response(sim)


@router.post("/api/connectivity")
async def set_connectivity(request: SetConnectivityRequest):
    """Connect or disconnect the device."""
    sim = _require_clock()
    sim.set_connectivity(request.connected)
    return _inputs_response(sim)


@router.get("/api/maintenance")
async def get_maintenance():
    """Service countdown and status."""
    sim = _require_clock()
    return sim.get_maintenance().to_dict()


@router.get("/api/alerts")
async def get_alerts(limit: int = Query(default=6, ge=1, le=100)):
    """Most recent alerts, newest first."""
    sim = _require_clock()
    return {"alerts": sim.get_alerts(limit)}


@router.get("/api/device")
async def get_device_info():
    """Static device metadata and cost figures."""
    sim = _require_clock()
    device = sim.settings.device
    return {
        "model": device.model,
        "firmware_version": device.firmware_version,
        "serial_number": device.serial_number,
        "installation_date": device.installation_date,
        "components": device.component_statuses,
        "costs": {
            "electricity_rate": device.electricity_rate,
            "weekly_cost": device.weekly_cost,
            "monthly_cost": device.monthly_cost,
            "eco_monthly_savings": device.eco_monthly_savings,
        },
    }
