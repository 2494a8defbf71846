import pytest

from farmfromspace_engine.core.config.balance import BalanceParameters
from farmfromspace_engine.core.config.content import CropCatalog, CropDefinition, RegionCatalog
from farmfromspace_engine.core.dynamics.endless import EndlessTurnEngine
from farmfromspace_engine.core.dynamics.season import SeasonTurnEngine
from farmfromspace_engine.core.structure.types import RegionType, Suitability
from tests.helpers import make_table


@pytest.fixture
def balance():
    return BalanceParameters()


@pytest.fixture
def regions():
    return RegionCatalog.default()


@pytest.fixture
def crops():
    default = list(CropCatalog.default())
    extra = [
        CropDefinition(
            name="Doomed",
            planting_cost=15,
            base_weekly_growth=5.0,
            max_age_weeks=1,
            suitability={r: Suitability.Poor for r in RegionType},
        ),
        CropDefinition(
            name="Quick",
            planting_cost=10,
            base_weekly_growth=10.0,
            maturity_target=5.0,
            suitability={r: Suitability.Good for r in RegionType},
        ),
    ]
    return CropCatalog(default + extra)


@pytest.fixture
def dry_table():
    return make_table(60)


@pytest.fixture
def season(balance, crops, regions, dry_table):
    """Six-week SemiAridSteppe season (Sandy soil, 50 mm field capacity) without rain nor ET."""
    return SeasonTurnEngine(
        balance=balance,
        crops=crops,
        regions=regions,
        region=RegionType.SemiAridSteppe,
        provider=dry_table,
        total_weeks=6,
    )


@pytest.fixture
def endless(balance, crops, regions, dry_table):
    """TropicalMonsoon endless farm (Clay soil, 70 mm field capacity) without rain nor ET."""
    return EndlessTurnEngine(
        balance=balance,
        crops=crops,
        regions=regions,
        region=RegionType.TropicalMonsoon,
        provider=dry_table,
    )
