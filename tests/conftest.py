import pytest

from pension_backend.data_model import REFERENCE_SCALE, PlanParameters
from pension_backend.engine.clock import ManualClock
from pension_backend.engine.rates import FixedRateConverter
from pension_backend.engine.service import RetirementEngine
from pension_backend.engine.state import VaultState
from pension_backend.engine.transfer import InMemoryTransfer

PRICE = 3000 * 10 ** 8  # 3000 reference units per settlement unit


@pytest.fixture
def make_params():
    def _make(**overrides) -> PlanParameters:
        values = {
            "life_expectancy_years": 20,
            "monthly_spending": 5000 * REFERENCE_SCALE,
            "retirement_age": 65,
            "current_age": 30,
            "expected_yield_rate": 500,
            "inflation_rate": 200,
        }
        values.update(overrides)
        return PlanParameters(**values)

    return _make


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def transfer():
    return InMemoryTransfer()


@pytest.fixture
def vault_path(tmp_path):
    return str(tmp_path / "vault.json")


@pytest.fixture
def engine(vault_path, clock, transfer):
    return RetirementEngine(VaultState(vault_path), FixedRateConverter(PRICE), transfer, clock=clock)


@pytest.fixture
def events(engine):
    received = []
    engine.subscribe(received.append)
    return received
