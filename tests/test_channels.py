import pytest

from aquaflow.channels import (
    BernoulliEvent,
    RandomWalk,
    Steady,
    TargetTracking,
    build_channel_configs,
    clamp,
    step,
)
from aquaflow.exceptions import ConfigError
from aquaflow.models import ChannelKind


def test_clamp_within_and_outside_bounds():
    assert clamp(0.8, 0.5, 1.2) == 0.8
    assert clamp(0.1, 0.5, 1.2) == 0.5
    assert clamp(3.0, 0.5, 1.2) == 1.2


def test_clamp_inverted_bounds_raises():
    with pytest.raises(ConfigError):
        clamp(1.0, 2.0, 1.0)


def test_inverted_channel_bounds_rejected():
    with pytest.raises(ConfigError):
        RandomWalk(initial=1.0, magnitude=0.1, lo=2.0, hi=1.0)
    with pytest.raises(ConfigError):
        TargetTracking(initial=1.0, magnitude=0.1, lo=2.0, hi=1.0)


def test_negative_magnitude_rejected():
    with pytest.raises(ConfigError):
        RandomWalk(initial=1.0, magnitude=-0.1, lo=0.0, hi=2.0)


def test_bad_event_probability_rejected():
    with pytest.raises(ConfigError):
        BernoulliEvent(probability=1.5)


def test_random_walk_step_is_bounded_by_half_magnitude(rng):
    config = RandomWalk(initial=45.0, magnitude=2.0, lo=30.0, hi=60.0)
    for _ in range(1000):
        value = step(45.0, config, rng)
        assert 44.0 <= value <= 46.0


def test_random_walk_clamps_at_edges(rng):
    config = RandomWalk(initial=0.0, magnitude=0.1, lo=0.0, hi=2.0)
    for _ in range(1000):
        assert step(0.0, config, rng) >= 0.0
        assert step(2.0, config, rng) <= 2.0


def test_all_channels_stay_in_bounds(rng, sim_settings):
    configs = build_channel_configs(sim_settings)
    values = {kind: config.initial for kind, config in configs.items()}

    for _ in range(5000):
        for kind, config in configs.items():
            values[kind] = step(values[kind], config, rng, anchor=45.0)
            assert config.lo <= values[kind] <= config.hi, kind


def test_target_tracking_ignores_previous_value(rng):
    config = TargetTracking(initial=35.0, magnitude=2.0, lo=15.0, hi=55.0)
    for _ in range(500):
        value = step(20.0, config, rng, anchor=45.0)
        assert 44.0 <= value <= 46.0


def test_target_tracking_anchor_outside_bounds_is_clamped(rng):
    config = TargetTracking(initial=35.0, magnitude=2.0, lo=15.0, hi=55.0)
    assert step(35.0, config, rng, anchor=100.0) == 55.0


def test_target_tracking_needs_anchor(rng):
    config = TargetTracking(initial=35.0, magnitude=2.0, lo=15.0, hi=55.0)
    with pytest.raises(ValueError):
        step(35.0, config, rng)


def test_leak_rate_matches_probability(rng):
    config = BernoulliEvent(probability=0.02)
    ticks = 100_000
    leaks = 0
    for _ in range(ticks):
        value = step(0.0, config, rng)
        assert value in (0.0, 1.0)
        leaks += value

    # ~4.5 standard deviations
    assert abs(leaks / ticks - 0.02) < 0.002


def test_steady_channel_holds_value(rng):
    config = Steady(initial=1.0)
    assert all(step(1.0, config, rng) == 1.0 for _ in range(100))


def test_every_channel_kind_has_a_rule(sim_settings):
    configs = build_channel_configs(sim_settings)
    assert set(configs) == set(ChannelKind)
    assert isinstance(configs[ChannelKind.TEMPERATURE], TargetTracking)
    assert isinstance(configs[ChannelKind.LEAK], BernoulliEvent)
    assert isinstance(configs[ChannelKind.GAS_VALVE], Steady)
    assert isinstance(configs[ChannelKind.PRESSURE], RandomWalk)
