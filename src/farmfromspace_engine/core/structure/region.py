from farmfromspace_engine.core.structure.plot import PlotRecord
from farmfromspace_engine.core.structure.types import RegionType, SoilTexture, parse_enum


class Purse:
    """
    Gold pool. Regions of an endless farm share one instance; a season run owns its own.

    ``debit`` does not forbid going below zero: penalties may push the pool
    negative, affordability is checked by callers before spending.
    """

    def __init__(self, gold=0):
        self.gold = int(gold)

    def can_afford(self, cost):
        return self.gold >= cost

    def debit(self, amount):
        self.gold -= int(amount)

    def credit(self, amount):
        self.gold += int(amount)

    def __repr__(self):
        return f"Purse(gold={self.gold})"


class RegionEconomy:
    """
    Plot arena and unlock state of one region, drawing on a (possibly shared) purse.
    """

    def __init__(
        self,
        region,
        purse,
        soil_texture=SoilTexture.Loam,
        initial_soil_fraction=0.6,
        max_plots=None,
        week_index=0,
    ):
        self.region = parse_enum(RegionType, region)
        self.purse = purse
        self.soil_texture = parse_enum(SoilTexture, soil_texture)
        self.initial_soil_fraction = initial_soil_fraction
        self.max_plots = max_plots
        self.week_index = week_index
        self.plots = {}  # index -> PlotRecord, materialized lazily
        self.unlocked_plots = set()

    def new_plot(self, index):
        return PlotRecord(
            id=index,
            soil_texture=self.soil_texture,
            soil_fraction=self.initial_soil_fraction,
        )

    def is_valid_index(self, index):
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            return False
        return self.max_plots is None or index < self.max_plots

    def is_plot_unlocked(self, index):
        return index in self.unlocked_plots

    @property
    def unlocked_count(self):
        return len(self.unlocked_plots)

    def ensure_plot(self, index):
        if index not in self.plots:
            self.plots[index] = self.new_plot(index)
        return self.plots[index]

    def unlock_plot(self, index):
        """Marks the slot unlocked and materializes an empty plot there if needed."""
        self.unlocked_plots.add(index)
        return self.ensure_plot(index)

    def next_locked_index(self):
        index = 0
        while index in self.unlocked_plots:
            index += 1
        if not self.is_valid_index(index):
            return None
        return index

    def active_plots(self):
        """Unlocked plots in index order."""
        return [(i, self.plots[i]) for i in sorted(self.unlocked_plots) if i in self.plots]

    def to_dict(self):
        return {
            "region": self.region.name,
            "soil_texture": self.soil_texture.name,
            "week_index": self.week_index,
            "unlocked_plots": sorted(self.unlocked_plots),
            "plots": [self.plots[i].to_dict() for i in sorted(self.plots)],
        }

    @classmethod
    def from_dict(cls, data, purse, crops, initial_soil_fraction=0.6, max_plots=None):
        economy = cls(
            region=data["region"],
            purse=purse,
            soil_texture=data.get("soil_texture", "Loam"),
            initial_soil_fraction=initial_soil_fraction,
            max_plots=max_plots,
            week_index=int(data.get("week_index", 0)),
        )
        for plot_data in data.get("plots", []):
            plot = PlotRecord.from_dict(plot_data, crops)
            economy.plots[plot.id] = plot
        for index in data.get("unlocked_plots", []):
            if not economy.is_valid_index(int(index)):
                raise ValueError(f"Plot index {index} out of range for region {economy.region.name}")
            economy.unlock_plot(int(index))
        return economy


class FarmState:
    """
    Persistent state of an endless farm: one purse and one week counter shared
    by every region, plus the per-region economies.
    """

    def __init__(self, gold, starting_plots=2, max_plots=9, initial_soil_fraction=0.6):
        self.purse = Purse(gold)
        self.global_week = 0
        self.starting_plots = starting_plots
        self.max_plots = max_plots
        self.initial_soil_fraction = initial_soil_fraction
        self.unlocked_regions = [RegionType.TropicalMonsoon]
        self.regions = {}

    @classmethod
    def from_balance(cls, balance):
        return cls(
            gold=balance.starting_gold,
            starting_plots=balance.starting_plots,
            max_plots=balance.max_plots_per_region,
            initial_soil_fraction=balance.initial_soil_fraction,
        )

    @property
    def gold(self):
        return self.purse.gold

    def is_region_unlocked(self, region):
        return parse_enum(RegionType, region) in self.unlocked_regions

    def region_state(self, region, soil_texture=SoilTexture.Loam):
        """Returns the region economy, creating it with its free starting plots on first access."""
        region = parse_enum(RegionType, region)
        if region not in self.regions:
            economy = RegionEconomy(
                region,
                self.purse,
                soil_texture=soil_texture,
                initial_soil_fraction=self.initial_soil_fraction,
                max_plots=self.max_plots,
                week_index=self.global_week,
            )
            for index in range(self.starting_plots):
                economy.unlock_plot(index)
            self.regions[region] = economy
        return self.regions[region]

    def to_dict(self):
        return {
            "global_week": self.global_week,
            "gold": self.purse.gold,
            "unlocked_regions": [r.name for r in self.unlocked_regions],
            "regions": [self.regions[r].to_dict() for r in sorted(self.regions, key=lambda r: r.value)],
        }

    @classmethod
    def from_dict(cls, data, crops, starting_plots=2, max_plots=9, initial_soil_fraction=0.6):
        state = cls(
            gold=int(data["gold"]),
            starting_plots=starting_plots,
            max_plots=max_plots,
            initial_soil_fraction=initial_soil_fraction,
        )
        state.global_week = int(data.get("global_week", 0))
        state.unlocked_regions = [
            parse_enum(RegionType, r) for r in data.get("unlocked_regions", ["TropicalMonsoon"])
        ]
        for region_data in data.get("regions", []):
            economy = RegionEconomy.from_dict(
                region_data,
                state.purse,
                crops,
                initial_soil_fraction=initial_soil_fraction,
                max_plots=max_plots,
            )
            state.regions[economy.region] = economy
        return state
