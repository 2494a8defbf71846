from farmfromspace_engine.core.structure.types import VegetationPhase, WeeklyEnvironment
from farmfromspace_engine.entities.weather.environment import TableEnvironmentProvider


def make_table(n_weeks, rain_mm=0.0, et_mm=0.0, phases=None):
    """Recorded weeks with constant rain/ET, GreenUp unless ``phases`` says otherwise."""
    phases = phases or [VegetationPhase.GreenUp] * n_weeks
    return TableEnvironmentProvider(
        [WeeklyEnvironment(rain_mm=rain_mm, et_mm=et_mm, phase=phases[i]) for i in range(n_weeks)]
    )


def finish_week(engine):
    assert engine.end_planning_and_resolve()
    assert engine.next_week()
