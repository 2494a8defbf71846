"""
Crop and region content catalogs, loaded from YAML specifications.
"""

from dataclasses import dataclass, field

from farmfromspace_engine.core.structure.types import (
    RegionType,
    SoilTexture,
    Suitability,
    VegetationPhase,
    parse_enum,
)
from farmfromspace_engine.core.utils.yaml import read_yaml
from farmfromspace_engine.specifications.specification_manager import load_yaml


@dataclass(frozen=True)
class CropDefinition:
    name: str
    planting_cost: int = 15
    base_weekly_growth: float = 1.0
    optimal_soil_water: float = 0.7
    split_bonus_override: float = None
    maturity_target: float = 100.0
    max_age_weeks: int = 20
    stage_multipliers_override: dict = None
    suitability: dict = field(default_factory=dict)  # RegionType -> Suitability

    def __post_init__(self):
        if self.maturity_target <= 0:
            raise ValueError(f"Crop {self.name}: maturity_target must be positive")
        if not 0.0 <= self.optimal_soil_water <= 1.0:
            raise ValueError(f"Crop {self.name}: optimal_soil_water must lie in [0, 1]")
        if self.base_weekly_growth < 0:
            raise ValueError(f"Crop {self.name}: base_weekly_growth must not be negative")
        if self.split_bonus_override is not None and self.split_bonus_override < 0:
            raise ValueError(f"Crop {self.name}: split_bonus_override must not be negative")
        if self.stage_multipliers_override and any(m < 0 for m in self.stage_multipliers_override.values()):
            raise ValueError(f"Crop {self.name}: stage multipliers must not be negative")

    def suitability_for(self, region):
        return self.suitability.get(parse_enum(RegionType, region), Suitability.Good)

    def stage_multiplier(self, phase, balance):
        if self.stage_multipliers_override and phase in self.stage_multipliers_override:
            return self.stage_multipliers_override[phase]
        return balance.stage_multiplier(phase)

    @classmethod
    def from_dict(cls, data, default_planting_cost=15):
        data = dict(data)
        data.setdefault("planting_cost", default_planting_cost)
        if "name" not in data:
            raise ValueError(f"Crop specification without a name: {data}")
        suitability = {
            parse_enum(RegionType, r): parse_enum(Suitability, s)
            for r, s in (data.pop("suitability", None) or {}).items()
        }
        overrides = data.pop("stage_multipliers_override", None)
        if overrides:
            overrides = {parse_enum(VegetationPhase, p): float(m) for p, m in overrides.items()}
        try:
            return cls(suitability=suitability, stage_multipliers_override=overrides or None, **data)
        except TypeError as e:
            raise ValueError(f"Invalid crop specification for {data['name']}: {e}") from e


@dataclass(frozen=True)
class RegionDefinition:
    region: RegionType
    display_name: str
    soil_texture: SoilTexture = SoilTexture.Loam
    rain_range_mm: tuple = (3.0, 18.0)
    et_range_mm: tuple = (10.0, 18.0)
    latitude: float = 0.0
    longitude: float = 0.0

    @classmethod
    def from_dict(cls, data):
        return cls(
            region=parse_enum(RegionType, data["region"]),
            display_name=data.get("display_name", data["region"]),
            soil_texture=parse_enum(SoilTexture, data.get("soil_texture", "Loam")),
            rain_range_mm=tuple(float(x) for x in data.get("rain_range_mm", (3.0, 18.0))),
            et_range_mm=tuple(float(x) for x in data.get("et_range_mm", (10.0, 18.0))),
            latitude=float(data.get("latitude", 0.0)),
            longitude=float(data.get("longitude", 0.0)),
        )


class CropCatalog:
    def __init__(self, crops):
        self.crops = {}
        for crop in crops:
            if crop.name in self.crops:
                raise ValueError(f"Duplicate crop name: {crop.name}")
            self.crops[crop.name] = crop

    def get(self, name):
        try:
            return self.crops[name]
        except KeyError:
            raise KeyError(f"Unknown crop: {name}") from None

    def names(self):
        return list(self.crops)

    def __iter__(self):
        return iter(self.crops.values())

    def __len__(self):
        return len(self.crops)

    def __contains__(self, name):
        return name in self.crops

    def available_for(self, region):
        """Crops that are not Poor in the region, best suited first."""
        region = parse_enum(RegionType, region)
        crops = [c for c in self if c.suitability_for(region) != Suitability.Poor]
        return sorted(crops, key=lambda c: c.suitability_for(region).value)

    @classmethod
    def from_list(cls, entries, default_planting_cost=15):
        """Crop specifications without a ``planting_cost`` use ``default_planting_cost``."""
        return cls(CropDefinition.from_dict(e, default_planting_cost) for e in entries)

    @classmethod
    def from_yaml(cls, path, default_planting_cost=15):
        return cls.from_list(read_yaml(path).get("crops", []), default_planting_cost)

    @classmethod
    def default(cls, default_planting_cost=15):
        return cls.from_list(load_yaml("crops.yaml")["crops"], default_planting_cost)


class RegionCatalog:
    def __init__(self, regions):
        self.regions = {r.region: r for r in regions}

    def get(self, region):
        region = parse_enum(RegionType, region)
        try:
            return self.regions[region]
        except KeyError:
            raise KeyError(f"Unknown region: {region.name}") from None

    def __iter__(self):
        return iter(self.regions.values())

    @classmethod
    def from_list(cls, entries):
        return cls(RegionDefinition.from_dict(e) for e in entries)

    @classmethod
    def from_yaml(cls, path):
        return cls.from_list(read_yaml(path).get("regions", []))

    @classmethod
    def default(cls):
        return cls.from_list(load_yaml("regions.yaml")["regions"])
