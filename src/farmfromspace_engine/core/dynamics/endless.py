from farmfromspace_engine.core.config.balance import BalanceParameters
from farmfromspace_engine.core.config.content import CropCatalog, RegionCatalog
from farmfromspace_engine.core.dynamics.scoring import EndlessScoring
from farmfromspace_engine.core.dynamics.turn_engine import TurnEngine, logger
from farmfromspace_engine.core.structure.region import FarmState
from farmfromspace_engine.core.structure.types import GameMode, RegionType, TurnPhase, parse_enum
from farmfromspace_engine.core.utils.dates import DEFAULT_START_DATE
from farmfromspace_engine.entities.weather.environment import PhaseCalendar, make_default_provider


class EndlessTurnEngine(TurnEngine):
    """
    Endless farm: the week cycle never ends, plots are harvested one by one as
    their crop matures, and new plots and regions are bought with the gold.

    The ``FarmState`` (purse, global week, regions) outlives the engine: an
    engine drives one region, and switching region means building a new
    engine over the same farm state.
    """

    mode = GameMode.Endless

    def __init__(
        self,
        farm_state=None,
        region=RegionType.TropicalMonsoon,
        balance=None,
        crops=None,
        regions=None,
        provider=None,
        seed=12345,
        start_date=DEFAULT_START_DATE,
        on_phase_change=None,
        on_cue=None,
        on_save=None,
    ):
        balance = balance if balance is not None else BalanceParameters()
        crops = crops if crops is not None else CropCatalog.default(balance.default_planting_cost)
        self.regions = regions if regions is not None else RegionCatalog.default()
        self.farm_state = farm_state if farm_state is not None else FarmState.from_balance(balance)
        self.seed = seed

        region = parse_enum(RegionType, region)
        if not self.farm_state.is_region_unlocked(region):
            raise ValueError(f"Region {region.name} is locked")
        region_definition = self.regions.get(region)
        if provider is None:
            provider = make_default_provider(region_definition, seed=seed, calendar=PhaseCalendar.endless())

        economy = self.farm_state.region_state(region, soil_texture=region_definition.soil_texture)
        economy.week_index = self.farm_state.global_week
        self.scoring = EndlessScoring()

        super().__init__(
            balance,
            crops,
            region_definition,
            provider,
            economy,
            start_date=start_date,
            on_phase_change=on_phase_change,
            on_cue=on_cue,
            on_save=on_save,
        )

    @property
    def week_index(self):
        return self.farm_state.global_week

    def _increment_week(self):
        self.farm_state.global_week += 1
        self.economy.week_index = self.farm_state.global_week

    def _after_week_change(self):
        if self.on_save is not None:
            self.on_save(self.to_snapshot())

    # ----------------------------------------------------------------------
    # HARVEST
    # ----------------------------------------------------------------------
    def can_harvest_selected_plot(self):
        plot = self.selected_plot
        return (
            self.phase == TurnPhase.Planning
            and plot is not None
            and self._is_active_plot(self.selected_plot_index)
            and self.scoring.can_harvest(plot)
        )

    def harvest_selected_plot(self):
        """
        Sells the mature crop of the selected plot for ``round(growth)`` gold
        and empties the plot. A leaching penalty already scheduled stays due.
        """
        if not self.can_harvest_selected_plot():
            return False
        plot = self.selected_plot
        crop_name = plot.crop_name
        value = self.scoring.plot_value(plot)
        self.purse.credit(value)
        plot.clear_crop()
        logger.info(f"Harvested {crop_name} on plot {self.selected_plot_index} for {value} gold")
        self._cue("harvest")
        return True

    # ----------------------------------------------------------------------
    # REGIONS
    # ----------------------------------------------------------------------
    def get_region_unlock_cost(self, region):
        return self.balance.region_unlock_cost(region)

    def unlock_region(self, region):
        if self.phase != TurnPhase.Planning:
            return False
        try:
            region = parse_enum(RegionType, region)
        except ValueError:
            return False
        if self.farm_state.is_region_unlocked(region):
            return False
        cost = self.get_region_unlock_cost(region)
        if not self.purse.can_afford(cost):
            return False

        self.purse.debit(cost)
        self.farm_state.unlocked_regions.append(region)
        self.farm_state.region_state(region, soil_texture=self.regions.get(region).soil_texture)
        logger.info(f"Unlocked region {region.name} for {cost} gold, {self.gold} gold left")
        self._cue("unlock")
        return True

    def switch_region(self, region, provider=None):
        """
        Returns an engine driving ``region`` over the same farm state, with
        the same callbacks. Locked or unknown regions give back this engine.
        """
        try:
            region = parse_enum(RegionType, region)
        except ValueError:
            return self
        if region == self.economy.region or not self.farm_state.is_region_unlocked(region):
            return self
        logger.info(f"Switching to region {region.name}")
        return type(self)(
            self.farm_state,
            region,
            balance=self.balance,
            crops=self.crops,
            regions=self.regions,
            provider=provider,
            seed=self.seed,
            start_date=self.start_date,
            on_phase_change=self.on_phase_change,
            on_cue=self.on_cue,
            on_save=self.on_save,
        )

    # ----------------------------------------------------------------------
    # PERSISTENCE
    # ----------------------------------------------------------------------
    def persist_state(self):
        return {"farm": self.farm_state.to_dict()}

    @classmethod
    def from_snapshot(cls, data, balance=None, crops=None, regions=None, provider=None, **kwargs):
        if data.get("mode") != GameMode.Endless.value:
            raise ValueError(f"Not an endless snapshot: mode={data.get('mode')!r}")
        balance = balance if balance is not None else BalanceParameters()
        crops = crops if crops is not None else CropCatalog.default(balance.default_planting_cost)
        farm_state = FarmState.from_dict(
            data["farm"],
            crops,
            starting_plots=balance.starting_plots,
            max_plots=balance.max_plots_per_region,
            initial_soil_fraction=balance.initial_soil_fraction,
        )
        engine = cls(
            farm_state,
            data["region"],
            balance=balance,
            crops=crops,
            regions=regions,
            provider=provider,
            **kwargs,
        )
        engine.state_manager.restore(data)
        return engine
