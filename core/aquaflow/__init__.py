"""AquaFlow water heater simulation package."""

# Define public API
__all__ = [
    "AquaFlowSettings",
    "ChannelKind",
    "ConfigError",
    "DeviceSnapshot",
    "RangeError",
    "SimulationClock",
    "SimulationEngine",
    "Tier",
    "load_settings",
]

# Import settings
from .settings import AquaFlowSettings, load_settings

# Import models
from .models import ChannelKind, DeviceSnapshot, Tier

# Import errors
from .exceptions import ConfigError, RangeError

# Import engine and clock
from .engine import SimulationEngine
from .simulation_clock import SimulationClock
