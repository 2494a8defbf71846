"""
Balance parameters: every tunable constant of the turn engine, immutable per session.
"""

from dataclasses import dataclass, field, fields

from farmfromspace_engine.core.structure.types import (
    RegionType,
    SoilTexture,
    Suitability,
    VegetationPhase,
    parse_enum,
)
from farmfromspace_engine.core.utils.yaml import read_yaml


def _default_field_capacity():
    return {SoilTexture.Sandy: 0.5, SoilTexture.Loam: 0.6, SoilTexture.Clay: 0.7}


def _default_stage_multipliers():
    return {
        VegetationPhase.Dormant: 0.6,
        VegetationPhase.GreenUp: 1.0,
        VegetationPhase.Peak: 1.1,
        VegetationPhase.Senescence: 0.7,
    }


def _default_region_unlock_costs():
    return {
        RegionType.TropicalMonsoon: 0,
        RegionType.TemperateContinental: 250,
        RegionType.SemiAridSteppe: 500,
    }


_TABLES = {
    "field_capacity_by_soil_texture": SoilTexture,
    "stage_multipliers": VegetationPhase,
    "region_unlock_costs": RegionType,
}


@dataclass(frozen=True)
class BalanceParameters:
    # Economy
    starting_gold: int = 60
    irrigation_cost: int = 5
    irrigation_mm: float = 10.0
    nitrogen_part_a_cost: int = 8
    nitrogen_part_b_cost: int = 8
    default_planting_cost: int = 15
    base_plot_cost: int = 60
    plot_cost_multiplier: float = 1.25
    starting_plots: int = 2
    max_plots_per_region: int = 9
    region_unlock_costs: dict = field(default_factory=_default_region_unlock_costs)

    # Water balance penalties
    runoff_penalty: int = 3
    gold_leaching_penalty: int = 5

    # Diminishing irrigation
    second_irrigation_efficiency: float = 0.7
    third_plus_irrigation_efficiency: float = 0.4

    # Soil & water
    field_capacity_by_soil_texture: dict = field(default_factory=_default_field_capacity)
    runoff_threshold: float = 0.85
    initial_soil_fraction: float = 0.6

    # Growth
    stage_multipliers: dict = field(default_factory=_default_stage_multipliers)
    split_nitrogen_bonus: float = 0.1
    marginal_suitability_multiplier: float = 0.8
    poor_suitability_multiplier: float = 0.6
    crop_failure_refund: float = 0.5

    def __post_init__(self):
        for name, enum_class in _TABLES.items():
            table = getattr(self, name)
            if set(table.keys()) != set(enum_class):
                raise ValueError(
                    f"{name} needs exactly one entry per {enum_class.__name__}: "
                    + ", ".join(m.name for m in enum_class)
                )
        for name in ("second_irrigation_efficiency", "third_plus_irrigation_efficiency"):
            if not 0.0 < getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must lie in (0, 1]")
        if not 0.0 <= self.runoff_threshold <= 1.0:
            raise ValueError("runoff_threshold must lie in [0, 1]")
        if not 0.0 <= self.initial_soil_fraction <= 1.0:
            raise ValueError("initial_soil_fraction must lie in [0, 1]")
        if any(c <= 0 for c in self.field_capacity_by_soil_texture.values()):
            raise ValueError("field capacities must be positive")
        if any(m < 0 for m in self.stage_multipliers.values()):
            raise ValueError("stage_multipliers must not be negative")
        for name in ("split_nitrogen_bonus", "marginal_suitability_multiplier", "poor_suitability_multiplier"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.plot_cost_multiplier <= 0:
            raise ValueError("plot_cost_multiplier must be positive")
        if self.starting_plots < 0 or self.starting_plots > self.max_plots_per_region:
            raise ValueError("starting_plots must lie in [0, max_plots_per_region]")

    # ----------------------------------------------------------------------
    # LOOKUPS
    # ----------------------------------------------------------------------
    def field_capacity(self, soil_texture):
        return self.field_capacity_by_soil_texture[soil_texture]

    def stage_multiplier(self, phase):
        return self.stage_multipliers[phase]

    def suitability_multiplier(self, suitability):
        if suitability == Suitability.Marginal:
            return self.marginal_suitability_multiplier
        if suitability == Suitability.Poor:
            return self.poor_suitability_multiplier
        return 1.0

    def region_unlock_cost(self, region):
        return self.region_unlock_costs[parse_enum(RegionType, region)]

    # ----------------------------------------------------------------------
    # LOADING
    # ----------------------------------------------------------------------
    @classmethod
    def from_dict(cls, values):
        """
        Builds parameters from a plain mapping (e.g. parsed YAML). Missing keys
        keep their defaults, tables are keyed by enum name.
        """
        values = dict(values or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError("Unknown balance parameters: " + ", ".join(unknown))
        for name, enum_class in _TABLES.items():
            if name in values:
                table = values[name]
                if not isinstance(table, dict):
                    raise ValueError(f"{name} must be a mapping keyed by {enum_class.__name__} name")
                values[name] = {parse_enum(enum_class, k): v for k, v in table.items()}
        return cls(**values)

    @classmethod
    def from_yaml(cls, path):
        return cls.from_dict(read_yaml(path))

    def to_dict(self):
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _TABLES:
                value = {k.name: v for k, v in sorted(value.items(), key=lambda kv: kv[0].value)}
            out[f.name] = value
        return out
