from farmfromspace_engine.core.config.content import CropDefinition
from farmfromspace_engine.core.dynamics.simulation_core import SimulationCore
from farmfromspace_engine.core.dynamics.state_manager import StateManager
from farmfromspace_engine.core.structure.types import TurnPhase, WeeklyEnvironment
from farmfromspace_engine.core.utils.dates import DEFAULT_START_DATE, date_for_week, formatted_week, season_for
from farmfromspace_engine.core.utils.logging_utils import get_logger
from farmfromspace_engine.core.utils.transitions import geometric_cost

logger = get_logger("farmfromspace.engine")


class TurnEngine:
    """
    Weekly turn engine shared by the fixed-season and endless modes.

    Phases go Planning -> Resolving -> End -> Planning, each transition being an
    explicit method call. Commands whose preconditions do not hold (wrong
    phase, not enough gold, invalid plot, field already set) change nothing
    and return False; commands that take effect return True.

    Parameters
    ----------
    balance : BalanceParameters
    crops : CropCatalog
        Used to resolve crops given by name.
    region_definition : RegionDefinition
    provider : EnvironmentProvider
        Weekly environment source. Failures propagate: fallback policies
        belong to the provider.
    economy : RegionEconomy
        Plot arena and purse the engine mutates.
    start_date : datetime.date
        Calendar date of week 0.
    on_phase_change, on_cue, on_save : callables, optional
        Presentation callbacks: ``on_phase_change(old, new)`` at every phase
        transition, ``on_cue(name)`` for audio/visual cues, ``on_save(dict)``
        with the persisted state when the mode autosaves.
    """

    mode = None

    def __init__(
        self,
        balance,
        crops,
        region_definition,
        provider,
        economy,
        start_date=DEFAULT_START_DATE,
        on_phase_change=None,
        on_cue=None,
        on_save=None,
    ):
        self.balance = balance
        self.crops = crops
        self.region_definition = region_definition
        self.provider = provider
        self.economy = economy
        self.start_date = start_date
        self.on_phase_change = on_phase_change
        self.on_cue = on_cue
        self.on_save = on_save

        self.sim_core = SimulationCore(balance)
        self.state_manager = StateManager(self)

        self.phase = TurnPhase.Planning
        self.selected_plot_index = 0
        self.pending_irrigation_mm = {}
        self.last_outcomes = ()
        self.environment = self.fetch_environment(self.week_index)

    # ----------------------------------------------------------------------
    # STATE ACCESS
    # ----------------------------------------------------------------------
    @property
    def week_index(self):
        raise NotImplementedError

    def _increment_week(self):
        raise NotImplementedError

    @property
    def gold(self):
        return self.economy.purse.gold

    @property
    def purse(self):
        return self.economy.purse

    @property
    def plots(self):
        return self.economy.plots

    @property
    def selected_plot(self):
        return self.economy.plots.get(self.selected_plot_index)

    @property
    def final_score(self):
        return None

    @property
    def current_date(self):
        return date_for_week(self.start_date, self.week_index)

    @property
    def current_week_label(self):
        return formatted_week(self.start_date, self.week_index)

    @property
    def current_season(self):
        return season_for(self.current_date)

    def snapshot(self):
        return self.state_manager.view()

    def to_snapshot(self):
        return self.state_manager.persist()

    def persist_state(self):
        raise NotImplementedError

    def fetch_environment(self, week):
        return self.provider.get_weekly_environment(week)

    def preview_soil_fraction(self, plot_index):
        plot = self.economy.plots.get(plot_index)
        if plot is None:
            return 0.0
        if self.phase != TurnPhase.Planning:
            return plot.soil_fraction
        return self.sim_core.preview_soil_fraction(plot, self.pending_irrigation_mm.get(plot_index, 0.0))

    def _is_active_plot(self, index):
        return self.economy.is_valid_index(index) and self.economy.is_plot_unlocked(index)

    def _set_phase(self, phase):
        old = self.phase
        self.phase = phase
        if self.on_phase_change is not None and old != phase:
            self.on_phase_change(old, phase)

    def _cue(self, name):
        if self.on_cue is not None:
            self.on_cue(name)

    # ----------------------------------------------------------------------
    # COMMANDS
    # ----------------------------------------------------------------------
    def select_plot(self, index):
        if not self._is_active_plot(index):
            return False
        self.selected_plot_index = index
        return True

    def queue_irrigation(self, plot_index=None):
        """
        Adds ``irrigation_mm`` times the tier efficiency to the plot's pending
        irrigation. Soil water is only updated at resolution.
        """
        if self.phase != TurnPhase.Planning:
            return False
        index = self.selected_plot_index if plot_index is None else plot_index
        if not self._is_active_plot(index):
            return False
        cost = self.balance.irrigation_cost
        if not self.purse.can_afford(cost):
            return False

        plot = self.economy.plots[index]
        efficiency = self.sim_core.irrigation_efficiency(plot.irrigation_events_this_week)
        mm = self.balance.irrigation_mm * efficiency
        self.pending_irrigation_mm[index] = self.pending_irrigation_mm.get(index, 0.0) + mm
        plot.irrigation_events_this_week += 1
        plot.irrigation_mm_this_week += mm
        self.purse.debit(cost)

        logger.debug(
            f"Plot {index}: +{mm:.1f}mm queued (efficiency {efficiency:.0%}) for {cost} gold, "
            f"{self.pending_irrigation_mm[index]:.1f}mm pending"
        )
        self._cue("watering")
        return True

    def resolve_crop(self, crop):
        if isinstance(crop, CropDefinition):
            return crop
        if isinstance(crop, str) and crop in self.crops:
            return self.crops.get(crop)
        return None

    def plant_crop(self, crop):
        """Plants ``crop`` (a CropDefinition or a crop name) on the selected plot."""
        if self.phase != TurnPhase.Planning:
            return False
        crop = self.resolve_crop(crop)
        plot = self.selected_plot
        if crop is None or plot is None or plot.is_planted:
            return False
        if not self._is_active_plot(self.selected_plot_index):
            return False
        cost = crop.planting_cost
        if not self.purse.can_afford(cost):
            return False

        suitability = crop.suitability_for(self.economy.region)
        plot.plant(crop, self.week_index, suitability)
        self.purse.debit(cost)
        logger.info(
            f"Planted {crop.name} on plot {self.selected_plot_index} "
            f"({suitability.name} suitability) for {cost} gold"
        )
        self._cue("plant")
        return True

    def apply_nitrogen_part_a(self):
        return self._apply_nitrogen("a", self.balance.nitrogen_part_a_cost)

    def apply_nitrogen_part_b(self):
        return self._apply_nitrogen("b", self.balance.nitrogen_part_b_cost)

    def _apply_nitrogen(self, part, cost):
        if self.phase != TurnPhase.Planning:
            return False
        plot = self.selected_plot
        if plot is None or not plot.is_planted:
            return False
        if getattr(plot, f"nitrogen_part_{part}_week") >= 0:
            return False
        if not self.purse.can_afford(cost):
            return False

        # Fertilizing a saturated soil leaches: billed at the next week change
        if plot.soil_fraction >= self.balance.runoff_threshold:
            plot.pending_leach_penalty += self.balance.gold_leaching_penalty
            logger.info(
                f"Leaching penalty scheduled on plot {self.selected_plot_index}: "
                f"-{self.balance.gold_leaching_penalty} gold next week (soil at {plot.soil_fraction:.0%})"
            )

        setattr(plot, f"nitrogen_part_{part}_week", self.week_index)
        setattr(plot, f"nitrogen_part_{part}_phase", self.environment.phase)
        plot.nitrogen_parts_applied += 1
        self.purse.debit(cost)
        self._cue("fertilizer")
        return True

    def get_next_plot_cost(self):
        steps = self.economy.unlocked_count - self.balance.starting_plots
        return geometric_cost(self.balance.base_plot_cost, self.balance.plot_cost_multiplier, steps)

    def unlock_plot(self, plot_index):
        if self.phase != TurnPhase.Planning:
            return False
        if not self.economy.is_valid_index(plot_index) or self.economy.is_plot_unlocked(plot_index):
            return False
        cost = self.get_next_plot_cost()
        if not self.purse.can_afford(cost):
            return False

        self.purse.debit(cost)
        self.economy.unlock_plot(plot_index)
        logger.info(f"Unlocked plot {plot_index} for {cost} gold, {self.gold} gold left")
        self._cue("unlock")
        return True

    def buy_new_plot(self):
        """Unlocks the lowest locked plot slot."""
        index = self.economy.next_locked_index()
        if index is None:
            return False
        return self.unlock_plot(index)

    # ----------------------------------------------------------------------
    # TRANSITIONS
    # ----------------------------------------------------------------------
    def end_planning_and_resolve(self):
        if self.phase != TurnPhase.Planning:
            return False
        self._set_phase(TurnPhase.Resolving)
        self.last_outcomes = tuple(self._resolve())
        self._set_phase(TurnPhase.End)
        return True

    def _resolve(self):
        env = self.environment
        for index, plot in self.economy.active_plots():
            outcome = self.sim_core.resolve_plot(index, plot, env, self.pending_irrigation_mm.get(index, 0.0))
            if outcome.runoff:
                self.purse.debit(self.balance.runoff_penalty)
                logger.info(f"Runoff on plot {index}: -{self.balance.runoff_penalty} gold")
                self._cue("runoff")
            if outcome.crop_failed:
                self.purse.credit(outcome.refund)
                logger.info(f"Crop failed on plot {index} (poor suitability), refunded {outcome.refund} gold")
                self._cue("crop_failed")
            yield outcome

    def next_week(self):
        if self.phase != TurnPhase.End:
            return False
        self._apply_leaching_penalties()
        for _, plot in sorted(self.economy.plots.items()):
            plot.reset_week_counters()
        self._increment_week()
        self.pending_irrigation_mm = {}
        logger.info(f"Week {self.week_index} ({self.current_week_label})")

        if self._is_over():
            self._finish()
        else:
            self.environment = self.fetch_environment(self.week_index)
            self._set_phase(TurnPhase.Planning)
        self._after_week_change()
        return True

    def _apply_leaching_penalties(self):
        total = 0
        for _, plot in sorted(self.economy.plots.items()):
            total += plot.pending_leach_penalty
            plot.pending_leach_penalty = 0
        if total > 0:
            self.purse.debit(total)
            logger.info(f"Leaching penalties applied: -{total} gold")

    def _is_over(self):
        return False

    def _finish(self):
        pass

    def _after_week_change(self):
        pass

    def __str__(self):
        s = f"{self.mode.value} farm in {self.economy.region.name}\n"
        s += f"Phase: {self.phase.value}\tWeek: {self.week_index} ({self.current_week_label})\tGold: {self.gold}\n"
        env = self.environment
        if isinstance(env, WeeklyEnvironment):
            s += f"Rain: {env.rain_mm:.1f}mm\tET: {env.et_mm:.1f}mm\tPhase: {env.phase.name}\n"
        for index, plot in self.economy.active_plots():
            marker = "*" if index == self.selected_plot_index else " "
            s += (
                f"{marker}Plot {index}: soil {plot.soil_fraction:.0%}, "
                f"{plot.crop_name or 'empty'} {plot.accumulated_growth:.1f}/{plot.maturity_target:.0f}"
                + (" READY" if plot.ready_for_harvest else "")
                + "\n"
            )
        return s
