"""
Weekly environment providers.

The turn engine only needs ``get_weekly_environment(week_index)``. Providers
here cover the seeded pseudo-random generator used when no observed data is
available, replay of recorded weekly tables, memoization, and the fallback
policy applied when a primary source fails.
"""

from collections import OrderedDict

import numpy as np

from farmfromspace_engine.core.structure.types import VegetationPhase, WeeklyEnvironment, parse_enum
from farmfromspace_engine.core.utils.logging_utils import get_logger
from farmfromspace_engine.core.utils.yaml import read_yaml

logger = get_logger("farmfromspace.environment")


class PhaseCalendar:
    """
    Vegetation phase as a function of the week index, built from ordered
    ``(phase, weeks)`` segments.

    A non-cyclic calendar holds its last phase forever; a cyclic one repeats.
    """

    def __init__(self, segments, cyclic=False):
        self.segments = [(parse_enum(VegetationPhase, p), int(w)) for p, w in segments]
        if not self.segments:
            raise ValueError("A phase calendar needs at least one segment")
        if any(w <= 0 for _, w in self.segments):
            raise ValueError("Phase segments must last at least one week")
        self.cyclic = cyclic
        self.cycle_length = sum(w for _, w in self.segments)

    @classmethod
    def season(cls):
        return cls(
            [(VegetationPhase.GreenUp, 2), (VegetationPhase.Peak, 2), (VegetationPhase.Senescence, 1)]
        )

    @classmethod
    def endless(cls):
        return cls(
            [
                (VegetationPhase.GreenUp, 4),
                (VegetationPhase.Peak, 4),
                (VegetationPhase.Senescence, 4),
                (VegetationPhase.Dormant, 4),
            ],
            cyclic=True,
        )

    def phase_for_week(self, week_index):
        week = max(0, week_index)
        if self.cyclic:
            week %= self.cycle_length
        for phase, weeks in self.segments:
            if week < weeks:
                return phase
            week -= weeks
        return self.segments[-1][0]


class EnvironmentProvider:
    """
    Interface of every weekly environment source. Implementations must be a
    pure function of the week index.
    """

    def get_weekly_environment(self, week_index):
        raise NotImplementedError

    def __call__(self, week_index):
        return self.get_weekly_environment(week_index)


class SeededEnvironmentProvider(EnvironmentProvider):
    """
    Region-flavoured pseudo-random weeks. Each week draws from its own numpy
    generator seeded by ``(seed, region, week)``, so the same week always gets
    the same weather whatever the call order.
    """

    def __init__(self, region_definition, seed=12345, calendar=None):
        self.region_definition = region_definition
        self.seed = int(seed)
        self.calendar = calendar if calendar is not None else PhaseCalendar.season()

    @property
    def region(self):
        return self.region_definition.region

    def get_weekly_environment(self, week_index):
        rng = np.random.default_rng(np.random.SeedSequence([self.seed, self.region.value, max(0, week_index)]))
        rain_low, rain_high = self.region_definition.rain_range_mm
        et_low, et_high = self.region_definition.et_range_mm
        return WeeklyEnvironment(
            rain_mm=float(rng.uniform(rain_low, rain_high)),
            et_mm=float(rng.uniform(et_low, et_high)),
            phase=self.calendar.phase_for_week(week_index),
        )


class TableEnvironmentProvider(EnvironmentProvider):
    """
    Replays recorded weeks (e.g. observed satellite data exported to YAML).
    Looking past the end of the table raises KeyError.
    """

    def __init__(self, weeks):
        self.weeks = [w if isinstance(w, WeeklyEnvironment) else WeeklyEnvironment.from_dict(w) for w in weeks]

    @classmethod
    def from_yaml(cls, path):
        return cls(read_yaml(path).get("weeks", []))

    def get_weekly_environment(self, week_index):
        if not 0 <= week_index < len(self.weeks):
            raise KeyError(f"No environment recorded for week {week_index}")
        return self.weeks[week_index]


class CachedEnvironmentProvider(EnvironmentProvider):
    """Memoizes an inner provider, keeping the ``max_weeks`` most recently used weeks."""

    def __init__(self, inner, max_weeks=50):
        self.inner = inner
        self.max_weeks = max_weeks
        self._cache = OrderedDict()

    def get_weekly_environment(self, week_index):
        if week_index in self._cache:
            self._cache.move_to_end(week_index)
            return self._cache[week_index]
        env = self.inner.get_weekly_environment(week_index)
        self._cache[week_index] = env
        if len(self._cache) > self.max_weeks:
            self._cache.popitem(last=False)
        return env

    def clear_cache(self):
        self._cache.clear()


class FallbackEnvironmentProvider(EnvironmentProvider):
    """
    Asks ``primary`` first and substitutes ``fallback`` when it raises.
    """

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback
        self.fallback_weeks = set()

    @property
    def is_using_primary(self):
        return not self.fallback_weeks

    def get_weekly_environment(self, week_index):
        try:
            return self.primary.get_weekly_environment(week_index)
        except Exception as e:
            logger.warning(f"Environment unavailable for week {week_index}, using fallback: {e}")
            self.fallback_weeks.add(week_index)
            return self.fallback.get_weekly_environment(week_index)


def make_default_provider(region_definition, seed=12345, calendar=None, table=None):
    """
    Recorded table (when given) backed by the seeded generator, memoized.
    """
    seeded = SeededEnvironmentProvider(region_definition, seed=seed, calendar=calendar)
    provider = seeded if table is None else FallbackEnvironmentProvider(table, seeded)
    return CachedEnvironmentProvider(provider)


__all__ = [
    "PhaseCalendar",
    "EnvironmentProvider",
    "SeededEnvironmentProvider",
    "TableEnvironmentProvider",
    "CachedEnvironmentProvider",
    "FallbackEnvironmentProvider",
    "make_default_provider",
]
