import pytest

from farmfromspace_engine.core.config.content import RegionCatalog
from farmfromspace_engine.core.structure.types import RegionType, VegetationPhase, WeeklyEnvironment
from farmfromspace_engine.core.utils.yaml import write_yaml
from farmfromspace_engine.entities.weather.environment import (
    CachedEnvironmentProvider,
    EnvironmentProvider,
    FallbackEnvironmentProvider,
    PhaseCalendar,
    SeededEnvironmentProvider,
    TableEnvironmentProvider,
    make_default_provider,
)
from tests.helpers import make_table


class CountingProvider(EnvironmentProvider):
    def __init__(self):
        self.calls = []

    def get_weekly_environment(self, week_index):
        self.calls.append(week_index)
        return WeeklyEnvironment(float(week_index), 1.0, VegetationPhase.Peak)


class BrokenProvider(EnvironmentProvider):
    def get_weekly_environment(self, week_index):
        raise ConnectionError("service unavailable")


@pytest.fixture
def steppe():
    return RegionCatalog.default().get(RegionType.SemiAridSteppe)


def test_season_calendar():
    calendar = PhaseCalendar.season()
    phases = [calendar.phase_for_week(w) for w in range(7)]
    assert phases == [VegetationPhase.GreenUp] * 2 + [VegetationPhase.Peak] * 2 + [VegetationPhase.Senescence] * 3


def test_endless_calendar_cycles():
    calendar = PhaseCalendar.endless()
    assert calendar.phase_for_week(0) == VegetationPhase.GreenUp
    assert calendar.phase_for_week(5) == VegetationPhase.Peak
    assert calendar.phase_for_week(12) == VegetationPhase.Dormant
    assert calendar.phase_for_week(16) == VegetationPhase.GreenUp


def test_calendar_rejects_empty_segments():
    with pytest.raises(ValueError):
        PhaseCalendar([])
    with pytest.raises(ValueError):
        PhaseCalendar([("Peak", 0)])


def test_seeded_provider_is_pure_function_of_week(steppe):
    provider = SeededEnvironmentProvider(steppe, seed=42)
    forward = [provider.get_weekly_environment(w) for w in range(10)]
    backward = [provider.get_weekly_environment(w) for w in reversed(range(10))]
    assert forward == backward[::-1]
    assert SeededEnvironmentProvider(steppe, seed=42)(3) == forward[3]
    assert SeededEnvironmentProvider(steppe, seed=43)(3) != forward[3]


def test_seeded_provider_respects_region_ranges(steppe):
    provider = SeededEnvironmentProvider(steppe, seed=1)
    for week in range(50):
        env = provider.get_weekly_environment(week)
        assert 0.0 <= env.rain_mm <= 15.0
        assert 15.0 <= env.et_mm <= 25.0


def test_table_provider(tmp_path):
    path = tmp_path / "weeks.yaml"
    write_yaml(path, {"weeks": [{"rain_mm": 12.0, "et_mm": 4.5, "phase": "Peak"}]})
    provider = TableEnvironmentProvider.from_yaml(path)
    assert provider.get_weekly_environment(0) == WeeklyEnvironment(12.0, 4.5, VegetationPhase.Peak)
    with pytest.raises(KeyError):
        provider.get_weekly_environment(1)


def test_cached_provider_memoizes_with_lru_eviction():
    inner = CountingProvider()
    provider = CachedEnvironmentProvider(inner, max_weeks=2)
    provider(0)
    provider(1)
    provider(0)
    assert inner.calls == [0, 1]
    provider(2)  # evicts week 1
    provider(1)
    assert inner.calls == [0, 1, 2, 1]
    provider.clear_cache()
    provider(0)
    assert inner.calls[-1] == 0


def test_fallback_provider(steppe, caplog):
    seeded = SeededEnvironmentProvider(steppe)
    provider = FallbackEnvironmentProvider(make_table(2, rain_mm=3.0), seeded)
    assert provider(1).rain_mm == 3.0
    assert provider.is_using_primary
    with caplog.at_level("WARNING"):
        assert provider(5) == seeded(5)
    assert provider.fallback_weeks == {5}
    assert not provider.is_using_primary
    assert "week 5" in caplog.text


def test_fallback_catches_any_provider_error(steppe):
    provider = FallbackEnvironmentProvider(BrokenProvider(), SeededEnvironmentProvider(steppe))
    assert isinstance(provider(0), WeeklyEnvironment)


def test_default_provider_prefers_table(steppe):
    provider = make_default_provider(steppe, table=make_table(1, rain_mm=99.0))
    assert provider(0).rain_mm == 99.0
    assert provider(1).rain_mm <= 15.0


def test_weekly_environment_dict_round_trip():
    env = WeeklyEnvironment(1.5, 2.5, VegetationPhase.Dormant)
    assert env.to_dict() == {"rain_mm": 1.5, "et_mm": 2.5, "phase": "Dormant"}
    assert WeeklyEnvironment.from_dict(env.to_dict()) == env
