"""
Simulation Engine

One tick is a pure transition from the previous snapshot and the current
inputs to a new snapshot:

1. Step every channel (random walk, target tracking, event or steady)
2. Classify each new value against its threshold table
3. Redraw power/efficiency for the operating mode
4. Re-anchor flow rate and pressure on the base values
"""

import logging
from datetime import datetime, timezone

import numpy as np

from .channels import ChannelConfig, build_channel_configs, step
from .derived import anchored_flow_and_pressure, derive
from .models import ChannelKind, ChannelState, DeviceSnapshot, TickInputs
from .settings import SimulationSettings
from .thresholds import THRESHOLD_TABLES, classify

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Builds snapshots; holds no mutable state of its own."""

    def __init__(self, settings: SimulationSettings):
        self.settings = settings
        self.channel_configs: dict[ChannelKind, ChannelConfig] = build_channel_configs(settings)

    def _anchor_for(self, kind: ChannelKind, inputs: TickInputs) -> float | None:
        if kind is ChannelKind.TEMPERATURE:
            return inputs.target_temperature
        return None

    def initial_snapshot(self, inputs: TickInputs, now: datetime | None = None) -> DeviceSnapshot:
        """Snapshot before the first tick, built from configured initial values."""
        now = now or datetime.now(timezone.utc)
        channels = tuple(
            ChannelState(
                kind=kind,
                value=config.initial,
                tier=classify(config.initial, THRESHOLD_TABLES[kind]),
                last_updated=now,
            )
            for kind, config in self.channel_configs.items()
        )
        return DeviceSnapshot(
            timestamp=now,
            sequence=0,
            channels=channels,
            current_temperature=self.channel_configs[ChannelKind.TEMPERATURE].initial,
            target_temperature=inputs.target_temperature,
            flow_rate=inputs.base_flow_rate,
            pressure=inputs.base_pressure,
            power=self.settings.initial_power,
            efficiency=self.settings.initial_efficiency,
            eco_mode=inputs.eco_mode,
        )

    def advance(
        self,
        previous: DeviceSnapshot,
        inputs: TickInputs,
        rng: np.random.Generator,
        now: datetime | None = None
    ) -> DeviceSnapshot:
        """Compute the next snapshot.

        Args:
            previous: Last published snapshot (not modified)
            inputs: Target, mode and base values read at tick start
            rng: Random generator
            now: Timestamp for the new snapshot (defaults to current UTC time)

        Returns:
            New snapshot with sequence = previous.sequence + 1
        """
        now = now or datetime.now(timezone.utc)

        channels = []
        for kind, config in self.channel_configs.items():
            value = step(
                previous.channel(kind).value,
                config,
                rng,
                anchor=self._anchor_for(kind, inputs),
            )
            channels.append(ChannelState(
                kind=kind,
                value=value,
                tier=classify(value, THRESHOLD_TABLES[kind]),
                last_updated=now,
            ))

        metrics = derive(inputs.eco_mode, previous.power, rng, self.settings)
        flow_rate, pressure = anchored_flow_and_pressure(
            inputs.base_flow_rate, inputs.base_pressure, rng, self.settings
        )

        snapshot = DeviceSnapshot(
            timestamp=now,
            sequence=previous.sequence + 1,
            channels=tuple(channels),
            current_temperature=next(c.value for c in channels if c.kind is ChannelKind.TEMPERATURE),
            target_temperature=inputs.target_temperature,
            flow_rate=flow_rate,
            pressure=pressure,
            power=metrics.power,
            efficiency=metrics.efficiency,
            eco_mode=inputs.eco_mode,
        )

        logger.debug(
            f"Tick {snapshot.sequence}: "
            f"temp {snapshot.current_temperature:.1f}°C (target {inputs.target_temperature:.1f}), "
            f"power {snapshot.power:.2f} kW, efficiency {snapshot.efficiency:.1f}%, "
            f"status {snapshot.worst_tier().value}"
        )
        return snapshot
