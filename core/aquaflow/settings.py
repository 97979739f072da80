"""
AquaFlow Configuration Settings

Simulation, maintenance and static device settings.
User-facing settings are loaded from config.yaml (or the add-on options.json).
"""

import logging
import math
import os
import re
from dataclasses import dataclass, field, fields

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


def _camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _convert_keys(cls, data: dict) -> dict:
    """Convert keys to snake_case and drop ones the dataclass does not know."""
    known = {f.name for f in fields(cls) if f.init}
    converted = {_camel_to_snake(k): v for k, v in data.items()}
    unknown = set(converted) - known
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {sorted(unknown)}")
    return {k: v for k, v in converted.items() if k in known}


def _check_range(name: str, lo: float, hi: float):
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ConfigError(f"{name}: bounds must be finite, got [{lo}, {hi}]")
    if lo > hi:
        raise ConfigError(f"{name}: lower bound {lo} exceeds upper bound {hi}")


@dataclass
class SimulationSettings:
    """Tunables for the simulated water heater."""

    # Target setpoint (°C)
    min_temperature: float = 20.0
    max_temperature: float = 50.0
    temperature_step: float = 5.0
    initial_target: float = 40.0
    temperature_variance: float = 2.0  # Spread of the temperature around the target

    # Flow rate (L/min) and pressure (bar) anchored on user base values
    min_flow_rate: float = 2.0
    max_flow_rate: float = 2.5
    base_flow_rate: float = 2.2
    flow_variance: float = 0.02
    min_pressure: float = 0.6
    max_pressure: float = 1.0
    base_pressure: float = 0.8
    pressure_variance: float = 0.02

    # Power (kW) and efficiency (%) ranges per operating mode
    min_power: float = 3.0
    max_power: float = 4.5
    initial_power: float = 3.5
    eco_power_span: float = 0.5
    eco_efficiency: tuple[float, float] = (96.0, 98.0)
    normal_efficiency: tuple[float, float] = (90.0, 98.0)
    initial_efficiency: float = 94.0

    # Tick cadence (ms), drawn uniformly in [min, max)
    min_tick_interval_ms: float = 5000.0
    max_tick_interval_ms: float = 10000.0

    leak_probability: float = 0.02
    seed: int | None = None

    def __post_init__(self):
        self.eco_efficiency = tuple(self.eco_efficiency)
        self.normal_efficiency = tuple(self.normal_efficiency)
        self.validate()

    def validate(self):
        """Raise ConfigError if any bound is inverted or out of domain."""
        _check_range("temperature", self.min_temperature, self.max_temperature)
        _check_range("flow_rate", self.min_flow_rate, self.max_flow_rate)
        _check_range("pressure", self.min_pressure, self.max_pressure)
        _check_range("power", self.min_power, self.max_power)
        for name in ("eco_efficiency", "normal_efficiency"):
            bounds = getattr(self, name)
            if len(bounds) != 2:
                raise ConfigError(f"{name} must be a [low, high] pair, got {list(bounds)}")
            _check_range(name, *bounds)
        _check_range("tick_interval_ms", self.min_tick_interval_ms, self.max_tick_interval_ms)

        if self.temperature_step <= 0:
            raise ConfigError(f"temperature_step must be positive, got {self.temperature_step}")
        if self.min_tick_interval_ms < 0:
            raise ConfigError("tick interval must not be negative")
        if self.eco_power_span < 0:
            raise ConfigError(f"eco_power_span must not be negative, got {self.eco_power_span}")
        for name in ("temperature_variance", "flow_variance", "pressure_variance"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if not 0.0 <= self.leak_probability <= 1.0:
            raise ConfigError(f"leak_probability must be in [0, 1], got {self.leak_probability}")
        if not self.min_temperature <= self.initial_target <= self.max_temperature:
            raise ConfigError(f"initial_target {self.initial_target} outside temperature bounds")
        if not self.min_flow_rate <= self.base_flow_rate <= self.max_flow_rate:
            raise ConfigError(f"base_flow_rate {self.base_flow_rate} outside flow bounds")
        if not self.min_pressure <= self.base_pressure <= self.max_pressure:
            raise ConfigError(f"base_pressure {self.base_pressure} outside pressure bounds")

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationSettings":
        """Create from dictionary."""
        return cls(**_convert_keys(cls, data))


@dataclass
class MaintenanceSettings:
    """Six-month service cycle."""

    last_maintenance_days: int = 45  # Days since the last service
    interval_days: int = 180
    warning_days: int = 60

    def __post_init__(self):
        if self.interval_days <= 0:
            raise ConfigError(f"interval_days must be positive, got {self.interval_days}")
        if self.warning_days < 0:
            raise ConfigError(f"warning_days must not be negative, got {self.warning_days}")

    @classmethod
    def from_dict(cls, data: dict) -> "MaintenanceSettings":
        """Create from dictionary."""
        return cls(**_convert_keys(cls, data))


@dataclass
class DeviceInfo:
    """Static device metadata and cost figures shown on the dashboard.

    Costs are display constants and are not derived from simulated power.
    """

    model: str = "V-Guard AquaFlow Pro 2000X"
    firmware_version: str = "v3.2.1"
    serial_number: str = "VG-AF2000X-2024-1247"
    installation_date: str = "Jan 15, 2024"
    electricity_rate: float = 7.0  # ₹ per kWh
    weekly_cost: float = 58.80
    monthly_cost: float = 245.70
    eco_savings_ratio: float = 0.15
    component_statuses: dict[str, str] = field(default_factory=lambda: {
        "water_filter": "Good",
        "heat_exchanger": "Check Soon",
        "venting_system": "OK",
        "gas_valve": "Normal",
        "ignition_system": "OK",
        "exhaust_fan": "Normal",
    })

    @property
    def eco_monthly_savings(self) -> float:
        """Estimated monthly saving in eco mode."""
        return round(self.monthly_cost * self.eco_savings_ratio, 2)

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceInfo":
        """Create from dictionary."""
        return cls(**_convert_keys(cls, data))


@dataclass
class AquaFlowSettings:
    """All settings for one simulated device."""

    simulation: SimulationSettings = field(default_factory=SimulationSettings)
    maintenance: MaintenanceSettings = field(default_factory=MaintenanceSettings)
    device: DeviceInfo = field(default_factory=DeviceInfo)

    @classmethod
    def from_options(cls, options: dict) -> "AquaFlowSettings":
        """Create from the `options` mapping of config.yaml / options.json."""
        return cls(
            simulation=SimulationSettings.from_dict(options.get("simulation") or {}),
            maintenance=MaintenanceSettings.from_dict(options.get("maintenance") or {}),
            device=DeviceInfo.from_dict(options.get("device") or {}),
        )


def settings_from_options(options: dict, source: str = "options") -> AquaFlowSettings:
    """Build settings from an `options` mapping.

    Raises:
        ConfigError: If the options hold invalid values or malformed entries
    """
    if not isinstance(options, dict):
        raise ConfigError(f"{source}: expected a mapping of options")

    try:
        return AquaFlowSettings.from_options(options)
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"{source}: {e}") from e


def load_settings(path: str | None) -> AquaFlowSettings:
    """Load settings from a YAML file, falling back to defaults.

    Args:
        path: Path to config.yaml (None or missing file = defaults)

    Returns:
        Validated settings

    Raises:
        ConfigError: If the file holds invalid values
    """
    if not path or not os.path.exists(path):
        logger.info("No config file found, using default settings")
        return AquaFlowSettings()

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")

    settings = settings_from_options(config.get("options", {}) or {}, source=path)
    logger.info(f"Loaded settings from {path}")
    return settings
