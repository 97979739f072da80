"""
Channel Simulation

Each channel advances once per tick according to one of four update rules:

- RandomWalk: previous value plus a symmetric uniform perturbation, clamped
- TargetTracking: an anchor (e.g. the target setpoint) plus a perturbation, clamped
- BernoulliEvent: 1 with a fixed probability, else 0
- Steady: holds its value (binary safety signals)

Perturbation: delta ~ U[-magnitude/2, +magnitude/2]
"""

import math
from dataclasses import dataclass

import numpy as np

from .exceptions import ConfigError
from .models import ChannelKind
from .settings import SimulationSettings


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi].

    Raises:
        ConfigError: If lo > hi
    """
    if lo > hi:
        raise ConfigError(f"Inverted bounds [{lo}, {hi}]")
    return max(lo, min(hi, value))


def perturbation(magnitude: float, rng: np.random.Generator) -> float:
    """Draw a symmetric uniform perturbation of total width `magnitude`."""
    return (rng.random() - 0.5) * magnitude


def _check_bounds(lo: float, hi: float, magnitude: float):
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ConfigError(f"Bounds must be finite, got [{lo}, {hi}]")
    if lo > hi:
        raise ConfigError(f"Inverted bounds [{lo}, {hi}]")
    if magnitude < 0:
        raise ConfigError(f"Perturbation magnitude must not be negative, got {magnitude}")


@dataclass(frozen=True)
class RandomWalk:
    """Bounded random walk from the channel's own previous value."""

    initial: float
    magnitude: float
    lo: float
    hi: float

    def __post_init__(self):
        _check_bounds(self.lo, self.hi, self.magnitude)

    def next_value(self, previous: float, anchor: float | None, rng: np.random.Generator) -> float:
        return clamp(previous + perturbation(self.magnitude, rng), self.lo, self.hi)


@dataclass(frozen=True)
class TargetTracking:
    """Random walk around an external anchor instead of the previous value.

    Follows a setpoint change within one tick.
    """

    initial: float
    magnitude: float
    lo: float
    hi: float

    def __post_init__(self):
        _check_bounds(self.lo, self.hi, self.magnitude)

    def next_value(self, previous: float, anchor: float | None, rng: np.random.Generator) -> float:
        if anchor is None:
            raise ValueError("TargetTracking channel needs an anchor value")
        return clamp(anchor + perturbation(self.magnitude, rng), self.lo, self.hi)


@dataclass(frozen=True)
class BernoulliEvent:
    """Independent 0/1 event per tick."""

    probability: float
    initial: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.probability <= 1.0:
            raise ConfigError(f"Event probability must be in [0, 1], got {self.probability}")

    @property
    def lo(self) -> float:
        return 0.0

    @property
    def hi(self) -> float:
        return 1.0

    def next_value(self, previous: float, anchor: float | None, rng: np.random.Generator) -> float:
        return 1.0 if rng.random() < self.probability else 0.0


@dataclass(frozen=True)
class Steady:
    """Signal that holds its value (gas valve open, ignition OK)."""

    initial: float = 1.0

    @property
    def lo(self) -> float:
        return self.initial

    @property
    def hi(self) -> float:
        return self.initial

    def next_value(self, previous: float, anchor: float | None, rng: np.random.Generator) -> float:
        return previous


ChannelConfig = RandomWalk | TargetTracking | BernoulliEvent | Steady


def step(
    previous_value: float,
    config: ChannelConfig,
    rng: np.random.Generator,
    anchor: float | None = None
) -> float:
    """Advance one channel by one tick.

    Args:
        previous_value: Value published in the previous snapshot
        config: Channel update rule and bounds
        rng: Random generator
        anchor: Center for TargetTracking channels (ignored otherwise)

    Returns:
        Next value, within the channel's bounds
    """
    return config.next_value(previous_value, anchor, rng)


def build_channel_configs(settings: SimulationSettings) -> dict[ChannelKind, ChannelConfig]:
    """Per-channel update rules for the water heater."""
    configs = {
        ChannelKind.TEMPERATURE: TargetTracking(
            initial=35.0, magnitude=settings.temperature_variance, lo=15.0, hi=55.0
        ),
        ChannelKind.PRESSURE: RandomWalk(initial=0.8, magnitude=0.02, lo=0.5, hi=1.2),
        ChannelKind.FLOW: RandomWalk(initial=2.2, magnitude=0.02, lo=1.8, hi=2.7),
        ChannelKind.VIBRATION: RandomWalk(initial=0.8, magnitude=0.1, lo=0.0, hi=2.0),
        ChannelKind.HEAT_EXCHANGER_TEMP: RandomWalk(initial=45.0, magnitude=2.0, lo=30.0, hi=60.0),
        ChannelKind.EXHAUST_FAN: RandomWalk(initial=2400.0, magnitude=100.0, lo=1000.0, hi=3000.0),
        ChannelKind.WATER_INLET: RandomWalk(initial=0.8, magnitude=0.02, lo=0.5, hi=1.2),
        ChannelKind.LEAK: BernoulliEvent(probability=settings.leak_probability),
        ChannelKind.GAS_VALVE: Steady(initial=1.0),
        ChannelKind.IGNITION: Steady(initial=1.0),
    }

    missing = set(ChannelKind) - set(configs)
    if missing:
        raise ConfigError(f"No update rule for channels: {sorted(k.value for k in missing)}")

    return configs
