import numpy as np

from aquaflow.derived import anchored_flow_and_pressure, derive, efficiency_range, power_range


def test_eco_mode_ranges(rng, sim_settings):
    for _ in range(1000):
        metrics = derive(True, 3.5, rng, sim_settings)
        assert 3.0 <= metrics.power < 3.5
        assert 96.0 <= metrics.efficiency < 98.0


def test_normal_mode_ranges(rng, sim_settings):
    for _ in range(1000):
        metrics = derive(False, 3.5, rng, sim_settings)
        assert 3.0 <= metrics.power < 4.5
        assert 90.0 <= metrics.efficiency < 98.0


def test_normal_mode_reaches_beyond_eco_range(rng, sim_settings):
    draws = [derive(False, 3.5, rng, sim_settings) for _ in range(500)]
    assert any(m.power >= 3.5 for m in draws)
    assert any(m.efficiency < 96.0 for m in draws)


def test_previous_power_does_not_smooth(sim_settings):
    a = derive(False, 3.0, np.random.default_rng(5), sim_settings)
    b = derive(False, 4.4, np.random.default_rng(5), sim_settings)
    assert a == b


def test_mode_range_helpers(sim_settings):
    assert power_range(True, sim_settings) == (3.0, 3.5)
    assert power_range(False, sim_settings) == (3.0, 4.5)
    assert efficiency_range(True, sim_settings) == (96.0, 98.0)
    assert efficiency_range(False, sim_settings) == (90.0, 98.0)


def test_flow_and_pressure_follow_base_values(rng, sim_settings):
    for _ in range(500):
        flow, pressure = anchored_flow_and_pressure(2.4, 0.7, rng, sim_settings)
        assert abs(flow - 2.4) <= 0.01 + 1e-9
        assert abs(pressure - 0.7) <= 0.01 + 1e-9


def test_flow_and_pressure_clamped(rng, sim_settings):
    for _ in range(500):
        flow, pressure = anchored_flow_and_pressure(2.5, 0.6, rng, sim_settings)
        assert 2.0 <= flow <= 2.5
        assert 0.6 <= pressure <= 1.0
