from dataclasses import dataclass


@dataclass(frozen=True)
class PlotHarvest:
    plot_index: int
    crop_name: str
    growth: float
    gold: int


@dataclass(frozen=True)
class HarvestReport:
    harvest_gold: int
    remaining_gold: int
    final_score: int
    plots: tuple = ()


class ScoringPolicy:
    """
    Converts accumulated growth into gold: one growth point is worth one gold.
    """

    def plot_value(self, plot):
        if not plot.is_planted or plot.accumulated_growth <= 0:
            return 0
        return int(round(plot.accumulated_growth))


class SeasonScoring(ScoringPolicy):
    """Single harvest at the end of a fixed season. Only reads state."""

    def harvest_report(self, indexed_plots, gold):
        harvests = tuple(
            PlotHarvest(index, plot.crop_name, plot.accumulated_growth, self.plot_value(plot))
            for index, plot in indexed_plots
            if self.plot_value(plot) > 0
        )
        harvest_gold = sum(h.gold for h in harvests)
        return HarvestReport(
            harvest_gold=harvest_gold,
            remaining_gold=gold,
            final_score=harvest_gold + gold,
            plots=harvests,
        )


class EndlessScoring(ScoringPolicy):
    """Continuous per-plot harvests, allowed once a crop reached maturity."""

    def can_harvest(self, plot):
        return plot.is_planted and plot.ready_for_harvest
