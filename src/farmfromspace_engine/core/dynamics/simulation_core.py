from dataclasses import dataclass

from farmfromspace_engine.core.structure.types import Suitability
from farmfromspace_engine.core.utils.transitions import clamp, water_adequacy


@dataclass(frozen=True)
class PlotOutcome:
    """What happened to one plot during a weekly resolution."""

    plot_index: int
    water_in_mm: float
    water_out_mm: float
    runoff: bool = False
    crop_failed: bool = False
    refund: int = 0
    growth: float = 0.0
    became_ready: bool = False


class SimulationCore:
    """
    Implements the weekly dynamics of a single plot:
    - soil water balance and runoff detection
    - crop ageing and poor-suitability failure
    - growth accrual with stage, water, suitability and split-nitrogen factors

    Gold is never touched here: the outcome tells the engine what to debit or
    refund.
    """

    def __init__(self, balance):
        self.balance = balance

    # ----------------------------------------------------------------------
    # IRRIGATION
    # ----------------------------------------------------------------------
    def irrigation_efficiency(self, event_index):
        """Diminishing returns: 1st irrigation of the week 100%, 2nd and 3rd+ configurable."""
        if event_index <= 0:
            return 1.0
        if event_index == 1:
            return self.balance.second_irrigation_efficiency
        return self.balance.third_plus_irrigation_efficiency

    def field_capacity_mm(self, soil_texture):
        return self.balance.field_capacity(soil_texture) * 100.0

    def preview_soil_fraction(self, plot, pending_mm):
        capacity_mm = self.field_capacity_mm(plot.soil_texture)
        soil_mm = clamp(plot.soil_fraction * capacity_mm + max(0.0, pending_mm), 0.0, capacity_mm)
        return soil_mm / capacity_mm

    # ----------------------------------------------------------------------
    # WEEKLY RESOLUTION
    # ----------------------------------------------------------------------
    def resolve_plot(self, index, plot, env, pending_mm):
        """Runs one week of dynamics on ``plot`` in place."""
        water_in = env.rain_mm + pending_mm
        water_out = env.et_mm

        # 1. Water balance
        capacity_mm = self.field_capacity_mm(plot.soil_texture)
        pre_fraction = plot.soil_fraction
        soil_mm = pre_fraction * capacity_mm
        new_soil_mm = clamp(soil_mm + water_in - water_out, 0.0, capacity_mm)

        # 2. Runoff: water added to an already saturated tank
        runoff = pre_fraction >= self.balance.runoff_threshold and (water_in - water_out) > 0.0
        if runoff:
            plot.runoff_event_count += 1

        # 3. Back to a fraction of field capacity
        plot.soil_fraction = clamp(new_soil_mm / capacity_mm, 0.0, 1.0)

        # 4. Growth
        if not plot.is_planted:
            return PlotOutcome(index, water_in, water_out, runoff=runoff)

        crop = plot.planted_crop
        plot.crop_age_weeks += 1
        if plot.suitability == Suitability.Poor and plot.crop_age_weeks > crop.max_age_weeks:
            refund = int(round(crop.planting_cost * self.balance.crop_failure_refund))
            plot.clear_crop()
            return PlotOutcome(index, water_in, water_out, runoff=runoff, crop_failed=True, refund=refund)

        adequacy = water_adequacy(plot.soil_fraction, crop.optimal_soil_water)
        growth = (
            crop.base_weekly_growth
            * crop.stage_multiplier(env.phase, self.balance)
            * (0.7 + 0.3 * adequacy)
            * self.balance.suitability_multiplier(plot.suitability)
        )
        growth *= 1.0 + self.split_bonus(plot)

        was_ready = plot.ready_for_harvest
        plot.accumulated_growth += growth
        if plot.accumulated_growth >= plot.maturity_target:
            plot.ready_for_harvest = True

        return PlotOutcome(
            index,
            water_in,
            water_out,
            runoff=runoff,
            growth=growth,
            became_ready=plot.ready_for_harvest and not was_ready,
        )

    def split_bonus(self, plot):
        """
        Bonus for nitrogen split across two distinct weeks, both applied in an
        active phase (GreenUp or Peak). Zero otherwise.
        """
        week_a, week_b = plot.nitrogen_part_a_week, plot.nitrogen_part_b_week
        if week_a < 0 or week_b < 0 or week_a == week_b:
            return 0.0
        phase_a, phase_b = plot.nitrogen_part_a_phase, plot.nitrogen_part_b_phase
        if phase_a is None or phase_b is None or not (phase_a.is_active and phase_b.is_active):
            return 0.0
        crop = plot.planted_crop
        if crop.split_bonus_override is not None:
            return crop.split_bonus_override
        return self.balance.split_nitrogen_bonus
