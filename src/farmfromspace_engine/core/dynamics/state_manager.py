from dataclasses import dataclass

from farmfromspace_engine.core.structure.types import TurnPhase, WeeklyEnvironment, parse_enum


@dataclass(frozen=True)
class PlotView:
    """Read-only view of a plot for presentation layers."""

    index: int
    unlocked: bool
    soil_fraction: float
    preview_soil_fraction: float
    crop_name: str
    planted_week: int
    crop_age_weeks: int
    accumulated_growth: float
    maturity_target: float
    ready_for_harvest: bool
    suitability: str
    nitrogen_parts_applied: int
    pending_leach_penalty: int
    irrigation_events_this_week: int
    pending_irrigation_mm: float
    runoff_event_count: int

    @property
    def growth_progress(self):
        if self.maturity_target <= 0:
            return 0.0
        return min(1.0, self.accumulated_growth / self.maturity_target)


@dataclass(frozen=True)
class EngineSnapshot:
    mode: str
    region: str
    phase: str
    week_index: int
    week_label: str
    environment: object  # WeeklyEnvironment
    plots: tuple
    gold: int
    selected_plot_index: int
    final_score: int = None


class StateManager:
    """
    Produces the two outward views of an engine:
    - ``view()``: immutable snapshot polled by presentation layers
    - ``persist()``: plain dict handed to the save collaborator
    """

    def __init__(self, engine):
        self.engine = engine

    def view(self):
        engine = self.engine
        economy = engine.economy
        plots = tuple(
            PlotView(
                index=index,
                unlocked=economy.is_plot_unlocked(index),
                soil_fraction=plot.soil_fraction,
                preview_soil_fraction=engine.preview_soil_fraction(index),
                crop_name=plot.crop_name,
                planted_week=plot.planted_week,
                crop_age_weeks=plot.crop_age_weeks,
                accumulated_growth=plot.accumulated_growth,
                maturity_target=plot.maturity_target,
                ready_for_harvest=plot.ready_for_harvest,
                suitability=plot.suitability.name,
                nitrogen_parts_applied=plot.nitrogen_parts_applied,
                pending_leach_penalty=plot.pending_leach_penalty,
                irrigation_events_this_week=plot.irrigation_events_this_week,
                pending_irrigation_mm=engine.pending_irrigation_mm.get(index, 0.0),
                runoff_event_count=plot.runoff_event_count,
            )
            for index, plot in sorted(economy.plots.items())
        )
        return EngineSnapshot(
            mode=engine.mode.value,
            region=economy.region.name,
            phase=engine.phase.value,
            week_index=engine.week_index,
            week_label=engine.current_week_label,
            environment=engine.environment,
            plots=plots,
            gold=engine.gold,
            selected_plot_index=engine.selected_plot_index,
            final_score=engine.final_score,
        )

    def persist(self):
        engine = self.engine
        data = {
            "mode": engine.mode.value,
            "region": engine.economy.region.name,
            "phase": engine.phase.value,
            "selected_plot_index": engine.selected_plot_index,
            "pending_irrigation_mm": [
                [index, float(mm)] for index, mm in sorted(engine.pending_irrigation_mm.items())
            ],
            "environment": engine.environment.to_dict(),
        }
        data.update(engine.persist_state())
        return data

    def restore(self, data):
        """
        Reloads the turn-level fields written by ``persist()`` into the engine.
        Economy and plots are rebuilt by the mode's ``from_snapshot``.
        """
        engine = self.engine
        engine.phase = parse_enum(TurnPhase, data.get("phase", TurnPhase.Planning.value))
        if engine.phase == TurnPhase.Resolving:
            raise ValueError("Cannot restore an engine saved in the middle of a resolution")
        engine.selected_plot_index = int(data.get("selected_plot_index", 0))
        engine.pending_irrigation_mm = {
            int(index): float(mm) for index, mm in data.get("pending_irrigation_mm", [])
        }
        env = data.get("environment")
        if env is not None:
            engine.environment = WeeklyEnvironment.from_dict(env)
        elif engine.phase == TurnPhase.Harvest:
            engine.environment = engine.fetch_environment(engine.week_index - 1)
        else:
            engine.environment = engine.fetch_environment(engine.week_index)
