"""
AquaFlow Data Models

Channel kinds, severity tiers and the immutable snapshot published each tick.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Tier(str, Enum):
    """Severity classification of a channel value."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class ChannelKind(str, Enum):
    """Every simulated sensor or actuator signal on the heater."""

    TEMPERATURE = "temperature"
    PRESSURE = "pressure"
    FLOW = "flow"
    VIBRATION = "vibration"
    HEAT_EXCHANGER_TEMP = "heat_exchanger_temp"
    EXHAUST_FAN = "exhaust_fan"
    WATER_INLET = "water_inlet"
    LEAK = "leak"
    GAS_VALVE = "gas_valve"
    IGNITION = "ignition"


@dataclass(frozen=True)
class ChannelState:
    """Current reading of one channel."""

    kind: ChannelKind
    value: float
    tier: Tier
    last_updated: datetime

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "tier": self.tier.value,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class TickInputs:
    """Externally-set values read at the start of a tick."""

    target_temperature: float
    eco_mode: bool
    base_flow_rate: float
    base_pressure: float

    def to_dict(self) -> dict:
        return {
            "target_temperature": self.target_temperature,
            "eco_mode": self.eco_mode,
            "base_flow_rate": self.base_flow_rate,
            "base_pressure": self.base_pressure,
        }


@dataclass(frozen=True)
class DeviceSnapshot:
    """Aggregate device state produced once per tick.

    Never mutated after publication; the next tick builds a new one.
    """

    timestamp: datetime
    sequence: int  # Number of ticks applied since start
    channels: tuple[ChannelState, ...]
    current_temperature: float  # °C, mirrors the temperature channel
    target_temperature: float  # °C
    flow_rate: float  # L/min, anchored on the base flow rate
    pressure: float  # bar, anchored on the base pressure
    power: float  # kW
    efficiency: float  # %
    eco_mode: bool
    _index: dict | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {c.kind: c for c in self.channels})

    def channel(self, kind: ChannelKind) -> ChannelState:
        """Look up one channel by kind."""
        return self._index[kind]

    def tiers(self) -> dict[ChannelKind, Tier]:
        return {c.kind: c.tier for c in self.channels}

    def worst_tier(self) -> Tier:
        """Most severe tier across all channels."""
        tiers = {c.tier for c in self.channels}
        if Tier.CRITICAL in tiers:
            return Tier.CRITICAL
        if Tier.WARNING in tiers:
            return Tier.WARNING
        return Tier.NORMAL

    def to_dict(self) -> dict:
        """Serialize for the presentation layer."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "sequence": self.sequence,
            "current_temperature": self.current_temperature,
            "target_temperature": self.target_temperature,
            "flow_rate": self.flow_rate,
            "pressure": self.pressure,
            "power": self.power,
            "efficiency": self.efficiency,
            "eco_mode": self.eco_mode,
            "status": self.worst_tier().value,
            "channels": {c.kind.value: c.to_dict() for c in self.channels},
        }
