"""
Mode-dependent derived metrics.

Power and efficiency are drawn independently every tick from the range the
operating mode allows, so a mode switch shows up fully on the next tick.
Flow rate and pressure shown on the dashboard are short random walks around
the user's base values.
"""

from dataclasses import dataclass

import numpy as np

from .channels import TargetTracking, step
from .settings import SimulationSettings


@dataclass(frozen=True)
class DerivedMetrics:
    power: float  # kW
    efficiency: float  # %


def power_range(eco: bool, settings: SimulationSettings) -> tuple[float, float]:
    """Half-open [low, high) power range for the mode."""
    if eco:
        return settings.min_power, settings.min_power + settings.eco_power_span
    return settings.min_power, settings.max_power


def efficiency_range(eco: bool, settings: SimulationSettings) -> tuple[float, float]:
    """Half-open [low, high) efficiency range for the mode."""
    return settings.eco_efficiency if eco else settings.normal_efficiency


def derive(
    eco: bool,
    previous_power: float,
    rng: np.random.Generator,
    settings: SimulationSettings
) -> DerivedMetrics:
    """Draw power and efficiency for the current mode.

    Args:
        eco: Whether eco mode is active
        previous_power: Power from the previous snapshot (unused, no smoothing)
        rng: Random generator
        settings: Simulation settings holding the mode ranges

    Returns:
        Fresh power/efficiency pair
    """
    return DerivedMetrics(
        power=float(rng.uniform(*power_range(eco, settings))),
        efficiency=float(rng.uniform(*efficiency_range(eco, settings))),
    )


def anchored_flow_and_pressure(
    base_flow_rate: float,
    base_pressure: float,
    rng: np.random.Generator,
    settings: SimulationSettings
) -> tuple[float, float]:
    """Flow rate and pressure varying slightly around the base values."""
    flow = TargetTracking(
        initial=settings.base_flow_rate,
        magnitude=settings.flow_variance,
        lo=settings.min_flow_rate,
        hi=settings.max_flow_rate,
    )
    pressure = TargetTracking(
        initial=settings.base_pressure,
        magnitude=settings.pressure_variance,
        lo=settings.min_pressure,
        hi=settings.max_pressure,
    )
    return (
        step(base_flow_rate, flow, rng, anchor=base_flow_rate),
        step(base_pressure, pressure, rng, anchor=base_pressure),
    )
