import asyncio
import math

import numpy as np
import pytest

from aquaflow.models import ChannelKind
from aquaflow.settings import AquaFlowSettings, SimulationSettings
from aquaflow.simulation_clock import SimulationClock, check_range
from aquaflow.exceptions import RangeError


@pytest.fixture
def clock(settings):
    return SimulationClock(settings, rng=np.random.default_rng(42))


def test_check_range():
    assert check_range("target", 40.0, 20.0, 50.0) == 40.0
    with pytest.raises(RangeError) as excinfo:
        check_range("target", 60.0, 20.0, 50.0)
    assert excinfo.value.value == 60.0


def test_starts_disconnected(clock):
    assert not clock.connected
    assert clock.get_snapshot().sequence == 0


def test_set_target_clamps(clock):
    assert clock.set_target(45.0) == 45.0
    assert clock.set_target(60.0) == 50.0
    assert clock.set_target(5.0) == 20.0
    assert clock.inputs.target_temperature == 20.0


def test_set_target_ignores_nan(clock):
    clock.set_target(45.0)
    assert clock.set_target(math.nan) == 45.0
    assert clock.inputs.target_temperature == 45.0


def test_increment_and_decrement_target(clock):
    assert clock.increment_target() == 45.0
    assert clock.increment_target() == 50.0
    assert clock.increment_target() == 50.0

    clock.set_target(27.0)
    assert clock.decrement_target() == 22.0
    assert clock.decrement_target() == 20.0


def test_set_base_values_clamps(clock):
    clock.set_base_values(3.0, 0.4)
    assert clock.inputs.base_flow_rate == 2.5
    assert clock.inputs.base_pressure == 0.6


def test_check_range_rejects_non_finite():
    for value in (math.nan, math.inf, -math.inf):
        with pytest.raises(RangeError):
            check_range("flow_rate", value, 2.0, 2.5)


@pytest.mark.parametrize("flow_rate, pressure", [
    (math.nan, 0.8),
    (2.3, math.nan),
    (math.inf, 0.8),
    (2.3, -math.inf),
])
def test_set_base_values_ignores_non_finite(clock, flow_rate, pressure):
    clock.set_base_values(2.4, 0.9)
    clock.set_base_values(flow_rate, pressure)

    assert clock.inputs.base_flow_rate == 2.4
    assert clock.inputs.base_pressure == 0.9

    for _ in range(5):
        snapshot = clock.tick()
        assert abs(snapshot.flow_rate - 2.4) <= 0.01 + 1e-9
        assert abs(snapshot.pressure - 0.9) <= 0.01 + 1e-9


def test_tick_tracks_target_immediately(clock):
    clock.set_target(45.0)
    snapshot = clock.tick()

    assert snapshot.sequence == 1
    assert 44.0 <= snapshot.current_temperature <= 46.0
    assert clock.get_snapshot() is snapshot


def test_mode_switch_via_clock(clock):
    clock.set_mode(True)
    assert 96.0 <= clock.tick().efficiency < 98.0

    clock.set_mode(False)
    snapshot = clock.tick()
    assert not snapshot.eco_mode
    assert 90.0 <= snapshot.efficiency < 98.0


def test_leak_raises_critical_alert():
    settings = AquaFlowSettings(simulation=SimulationSettings(leak_probability=1.0))
    clock = SimulationClock(settings, rng=np.random.default_rng(3))

    snapshot = clock.tick()

    assert snapshot.channel(ChannelKind.LEAK).value == 1.0
    leak_alerts = [a for a in clock.get_alerts() if a["channel"] == "leak"]
    assert leak_alerts[0]["severity"] == "critical"


def test_maintenance_from_settings(clock):
    assert clock.get_maintenance().status.value == "good"


def test_connectivity_controls_ticking(settings):
    async def scenario():
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)
            await asyncio.sleep(0)

        clock = SimulationClock(settings, rng=np.random.default_rng(9), sleep=fake_sleep)
        clock.set_connectivity(True)
        for _ in range(20):
            await asyncio.sleep(0)
        assert clock.get_snapshot().sequence > 0
        assert all(5.0 <= d < 10.0 for d in delays)

        clock.set_connectivity(False)
        frozen = clock.get_snapshot()
        for _ in range(20):
            await asyncio.sleep(0)
        assert clock.get_snapshot() is frozen

        drawn = len(delays)
        clock.set_connectivity(True)
        await asyncio.sleep(0)
        assert len(delays) == drawn + 1
        assert 5000.0 <= clock.last_delay_ms < 10000.0

        await clock.stop()
        assert not clock.connected

    asyncio.run(scenario())


def test_mode_change_does_not_reset_clock(settings):
    async def scenario():
        clock = SimulationClock(settings, rng=np.random.default_rng(9))
        await clock.start()
        task = clock._task

        clock.set_mode(True)
        clock.set_target(45.0)
        clock.set_base_values(2.3, 0.9)
        clock.set_connectivity(True)

        assert clock._task is task
        assert not task.done()
        await clock.stop()
        assert task.cancelled()

    asyncio.run(scenario())


def test_start_twice_is_noop(settings):
    async def scenario():
        clock = SimulationClock(settings, rng=np.random.default_rng(9))
        await clock.start()
        task = clock._task
        await clock.start()
        assert clock._task is task
        await clock.stop()

    asyncio.run(scenario())
