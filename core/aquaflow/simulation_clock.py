"""
Simulation Clock

Background service that ticks the simulated heater while connected.
Each tick runs after a random delay in [min_tick_interval_ms, max_tick_interval_ms)
to mimic irregular sensor polling.

The clock owns the externally-set inputs (target, mode, base values,
connectivity) and the last published snapshot. Ticks are synchronous, so a
command never observes a half-built snapshot; the only suspension point is
the sleep between ticks, which is where disconnecting cancels.
"""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import replace

import numpy as np

from .alerts import AlertLog, detect_transitions
from .channels import clamp
from .engine import SimulationEngine
from .exceptions import RangeError
from .maintenance import MaintenanceState
from .models import DeviceSnapshot, TickInputs
from .settings import AquaFlowSettings

logger = logging.getLogger(__name__)


def check_range(name: str, value: float, lo: float, hi: float) -> float:
    """Return value unchanged if it lies in [lo, hi].

    Raises:
        RangeError: If value is outside the bounds or not finite
    """
    if not math.isfinite(value) or value < lo or value > hi:
        raise RangeError(name, value, lo, hi)
    return value


def _clamped(name: str, value: float, lo: float, hi: float) -> float:
    try:
        return check_range(name, value, lo, hi)
    except RangeError as e:
        clamped = clamp(value, lo, hi)
        logger.warning(f"{e}, clamping to {clamped}")
        return clamped


class SimulationClock:
    """Drives the tick cadence for one simulated device."""

    def __init__(
        self,
        settings: AquaFlowSettings,
        rng: np.random.Generator | None = None,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
        alert_log: AlertLog | None = None
    ):
        """Initialize the clock in the Disconnected state.

        Args:
            settings: Validated device settings
            rng: Random generator (defaults to one seeded from settings)
            sleep: Coroutine used to wait between ticks, in seconds
            alert_log: Where tier-transition alerts go
        """
        self.settings = settings
        sim = settings.simulation
        self.rng = rng if rng is not None else np.random.default_rng(sim.seed)
        self.engine = SimulationEngine(sim)
        self.alert_log = alert_log or AlertLog()
        self._sleep = sleep

        self._inputs = TickInputs(
            target_temperature=sim.initial_target,
            eco_mode=False,
            base_flow_rate=sim.base_flow_rate,
            base_pressure=sim.base_pressure,
        )
        self._snapshot = self.engine.initial_snapshot(self._inputs)

        self._task: asyncio.Task | None = None
        self._connected = False
        self.last_delay_ms: float | None = None

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def inputs(self) -> TickInputs:
        return self._inputs

    def get_snapshot(self) -> DeviceSnapshot:
        """Last published snapshot."""
        return self._snapshot

    def get_maintenance(self) -> MaintenanceState:
        return MaintenanceState.from_settings(self.settings.maintenance)

    def get_alerts(self, limit: int | None = None) -> list[dict]:
        return self.alert_log.recent(limit)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_target(self, value: float) -> float:
        """Set the target temperature, clamped to the allowed range.

        Returns:
            The target actually applied
        """
        sim = self.settings.simulation
        if not math.isfinite(value):
            logger.warning(f"Ignoring non-finite target temperature: {value}")
            return self._inputs.target_temperature

        target = _clamped("target_temperature", value, sim.min_temperature, sim.max_temperature)
        self._inputs = replace(self._inputs, target_temperature=target)
        logger.info(f"🎯 Target temperature set to {target:.1f}°C")
        return target

    def increment_target(self) -> float:
        sim = self.settings.simulation
        return self.set_target(min(sim.max_temperature, self._inputs.target_temperature + sim.temperature_step))

    def decrement_target(self) -> float:
        sim = self.settings.simulation
        return self.set_target(max(sim.min_temperature, self._inputs.target_temperature - sim.temperature_step))

    def set_mode(self, eco: bool):
        """Switch operating mode; applies from the next tick."""
        self._inputs = replace(self._inputs, eco_mode=bool(eco))
        logger.info(f"🌿 Eco mode {'ON' if eco else 'OFF'}")

    def set_base_values(self, flow_rate: float, pressure: float):
        """Move the centers of the flow rate and pressure walks."""
        sim = self.settings.simulation
        if not (math.isfinite(flow_rate) and math.isfinite(pressure)):
            logger.warning(f"Ignoring non-finite base values: flow {flow_rate}, pressure {pressure}")
            return

        flow_rate = _clamped("flow_rate", flow_rate, sim.min_flow_rate, sim.max_flow_rate)
        pressure = _clamped("pressure", pressure, sim.min_pressure, sim.max_pressure)
        self._inputs = replace(self._inputs, base_flow_rate=flow_rate, base_pressure=pressure)
        logger.info(f"Base values set: flow {flow_rate:.2f} L/min, pressure {pressure:.2f} bar")

    def set_connectivity(self, connected: bool):
        """Connect (start ticking) or disconnect (cancel the pending tick).

        Must be called from within the running event loop.
        """
        connected = bool(connected)
        if connected == self._connected:
            return

        self._connected = connected
        if connected:
            self._task = asyncio.get_running_loop().create_task(self._run_loop())
            logger.info("📶 Device connected, simulation ticking")
        else:
            if self._task:
                self._task.cancel()
                self._task = None
            logger.info("📴 Device disconnected, simulation paused")

    # ------------------------------------------------------------------
    # Service lifecycle
    # ------------------------------------------------------------------

    async def start(self):
        """Start the simulation service."""
        if self._connected:
            logger.warning("Simulation clock already running")
            return

        self.set_connectivity(True)
        sim = self.settings.simulation
        logger.info(
            f"⏱️  Simulation clock started, tick interval "
            f"{sim.min_tick_interval_ms:.0f}-{sim.max_tick_interval_ms:.0f} ms"
        )

    async def stop(self):
        """Stop the simulation service."""
        if not self._connected:
            return

        task = self._task
        self.set_connectivity(False)
        if task:
            try:
                await task
            except asyncio.CancelledError:
                pass

        logger.info("⏱️  Simulation clock stopped")

    def next_delay_ms(self) -> float:
        """Draw the wait before the next tick."""
        sim = self.settings.simulation
        self.last_delay_ms = float(self.rng.uniform(sim.min_tick_interval_ms, sim.max_tick_interval_ms))
        return self.last_delay_ms

    async def _run_loop(self):
        """Tick loop - sleeps a fresh random interval before every tick."""
        while self._connected:
            await self._sleep(self.next_delay_ms() / 1000.0)

            try:
                self.tick()
            except Exception as e:
                logger.error(f"Error in simulation tick: {e}", exc_info=True)

    def tick(self) -> DeviceSnapshot:
        """Run one full state transition and publish the result."""
        previous = self._snapshot
        snapshot = self.engine.advance(previous, self._inputs, self.rng)
        self._snapshot = snapshot

        transitions = detect_transitions(previous, snapshot)
        for alert in self.alert_log.record(transitions, snapshot.timestamp.isoformat()):
            log = logger.info if alert.severity == "info" else logger.warning
            log(f"⚠️  {alert.channel}: {alert.message}")

        return snapshot
