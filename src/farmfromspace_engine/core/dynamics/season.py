from farmfromspace_engine.core.config.balance import BalanceParameters
from farmfromspace_engine.core.config.content import CropCatalog, RegionCatalog
from farmfromspace_engine.core.dynamics.scoring import SeasonScoring
from farmfromspace_engine.core.dynamics.turn_engine import TurnEngine, logger
from farmfromspace_engine.core.structure.region import Purse, RegionEconomy
from farmfromspace_engine.core.structure.types import GameMode, RegionType, SoilTexture, TurnPhase, parse_enum
from farmfromspace_engine.core.utils.dates import DEFAULT_START_DATE
from farmfromspace_engine.entities.weather.environment import PhaseCalendar, make_default_provider


class SeasonTurnEngine(TurnEngine):
    """
    Fixed-season run: ``total_weeks`` weekly turns on one region, then a single
    terminal harvest scoring ``sum(round(growth)) + remaining gold``.

    Gold is scoped to the run. ``restart()`` puts every piece of state back to
    its initial value.
    """

    mode = GameMode.Season

    def __init__(
        self,
        balance=None,
        crops=None,
        region=RegionType.SemiAridSteppe,
        regions=None,
        provider=None,
        total_weeks=6,
        plots=2,
        soil_texture=None,
        seed=12345,
        start_date=DEFAULT_START_DATE,
        on_phase_change=None,
        on_cue=None,
        on_save=None,
    ):
        balance = balance if balance is not None else BalanceParameters()
        crops = crops if crops is not None else CropCatalog.default(balance.default_planting_cost)
        regions = regions if regions is not None else RegionCatalog.default()
        region_definition = regions.get(region)
        if provider is None:
            provider = make_default_provider(region_definition, seed=seed, calendar=PhaseCalendar.season())

        self.total_weeks = max(1, int(total_weeks))
        self.initial_plots = max(1, min(int(plots), balance.max_plots_per_region))
        self.soil_texture = (
            parse_enum(SoilTexture, soil_texture)
            if soil_texture is not None
            else region_definition.soil_texture
        )
        self.scoring = SeasonScoring()
        self._harvest_report = None

        super().__init__(
            balance,
            crops,
            region_definition,
            provider,
            self._new_economy(balance, region_definition),
            start_date=start_date,
            on_phase_change=on_phase_change,
            on_cue=on_cue,
            on_save=on_save,
        )
        logger.info(
            f"New season in {region_definition.display_name}: {self.total_weeks} weeks, "
            f"{self.initial_plots} plots, {self.gold} gold"
        )

    def _new_economy(self, balance, region_definition):
        economy = RegionEconomy(
            region_definition.region,
            Purse(balance.starting_gold),
            soil_texture=self.soil_texture,
            initial_soil_fraction=balance.initial_soil_fraction,
            max_plots=balance.max_plots_per_region,
        )
        for index in range(self.initial_plots):
            economy.unlock_plot(index)
        return economy

    @property
    def week_index(self):
        return self.economy.week_index

    def _increment_week(self):
        self.economy.week_index += 1

    # ----------------------------------------------------------------------
    # HARVEST
    # ----------------------------------------------------------------------
    def _is_over(self):
        return self.week_index >= self.total_weeks

    def _finish(self):
        self._set_phase(TurnPhase.Harvest)
        report = self.harvest_report()
        for harvest in report.plots:
            logger.info(
                f"Plot {harvest.plot_index} ({harvest.crop_name}): "
                f"{harvest.growth:.1f} growth -> {harvest.gold} gold"
            )
        logger.info(
            f"Harvest gold: {report.harvest_gold}, unspent gold: {report.remaining_gold}, "
            f"final score: {report.final_score}"
        )
        self._cue("harvest")

    def harvest_report(self):
        """Terminal scoring. None before the Harvest phase; computed once, then returned as is."""
        if self.phase != TurnPhase.Harvest:
            return None
        if self._harvest_report is None:
            self._harvest_report = self.scoring.harvest_report(self.economy.active_plots(), self.gold)
        return self._harvest_report

    @property
    def harvest_gold(self):
        report = self.harvest_report()
        return report.harvest_gold if report is not None else 0

    @property
    def final_score(self):
        report = self.harvest_report()
        return report.final_score if report is not None else None

    def restart(self):
        self.economy = self._new_economy(self.balance, self.region_definition)
        self.selected_plot_index = 0
        self.pending_irrigation_mm = {}
        self.last_outcomes = ()
        self._harvest_report = None
        self.environment = self.fetch_environment(self.week_index)
        self._set_phase(TurnPhase.Planning)
        logger.info(f"Season restarted with {self.gold} gold")
        return True

    # ----------------------------------------------------------------------
    # PERSISTENCE
    # ----------------------------------------------------------------------
    def persist_state(self):
        return {
            "total_weeks": self.total_weeks,
            "initial_plots": self.initial_plots,
            "week_index": self.week_index,
            "gold": self.gold,
            "economy": self.economy.to_dict(),
        }

    @classmethod
    def from_snapshot(cls, data, balance=None, crops=None, regions=None, provider=None, **kwargs):
        if data.get("mode") != GameMode.Season.value:
            raise ValueError(f"Not a season snapshot: mode={data.get('mode')!r}")
        engine = cls(
            balance=balance,
            crops=crops,
            region=data["region"],
            regions=regions,
            provider=provider,
            total_weeks=data.get("total_weeks", 6),
            plots=data.get("initial_plots", 2),
            soil_texture=data["economy"].get("soil_texture"),
            **kwargs,
        )
        engine.economy = RegionEconomy.from_dict(
            data["economy"],
            Purse(data["gold"]),
            engine.crops,
            initial_soil_fraction=engine.balance.initial_soil_fraction,
            max_plots=engine.balance.max_plots_per_region,
        )
        engine.state_manager.restore(data)
        return engine
