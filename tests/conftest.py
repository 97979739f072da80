import numpy as np
import pytest

from aquaflow.engine import SimulationEngine
from aquaflow.models import TickInputs
from aquaflow.settings import AquaFlowSettings, SimulationSettings


@pytest.fixture
def rng():
    return np.random.default_rng(1247)


@pytest.fixture
def sim_settings():
    return SimulationSettings()


@pytest.fixture
def settings():
    return AquaFlowSettings()


@pytest.fixture
def engine(sim_settings):
    return SimulationEngine(sim_settings)


@pytest.fixture
def inputs(sim_settings):
    return TickInputs(
        target_temperature=sim_settings.initial_target,
        eco_mode=False,
        base_flow_rate=sim_settings.base_flow_rate,
        base_pressure=sim_settings.base_pressure,
    )
