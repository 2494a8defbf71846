from dataclasses import dataclass
from enum import Enum


class SoilTexture(Enum):
    Sandy = 0
    Loam = 1
    Clay = 2


class VegetationPhase(Enum):
    Dormant = 0
    GreenUp = 1
    Peak = 2
    Senescence = 3

    @property
    def is_active(self):
        return self in (VegetationPhase.GreenUp, VegetationPhase.Peak)


class Suitability(Enum):
    Good = 0
    Marginal = 1
    Poor = 2


class RegionType(Enum):
    TropicalMonsoon = 0
    SemiAridSteppe = 1
    TemperateContinental = 2


class TurnPhase(Enum):
    Planning = "planning"
    Resolving = "resolving"
    End = "end"
    Harvest = "harvest"


class GameMode(Enum):
    Season = "season"
    Endless = "endless"


def parse_enum(enum_class, value):
    """
    Accepts an enum member, its name or its value and returns the member.
    Raises ValueError for anything else.
    """
    if isinstance(value, enum_class):
        return value
    if isinstance(value, str) and value in enum_class.__members__:
        return enum_class[value]
    try:
        return enum_class(value)
    except ValueError:
        raise ValueError(f"{value!r} is not a valid {enum_class.__name__}") from None


@dataclass(frozen=True)
class WeeklyEnvironment:
    """
    Environmental forcing for one week: rainfall and evapotranspiration in mm,
    and the vegetation-index phase.
    """

    rain_mm: float
    et_mm: float
    phase: VegetationPhase

    def to_dict(self):
        return {"rain_mm": float(self.rain_mm), "et_mm": float(self.et_mm), "phase": self.phase.name}

    @classmethod
    def from_dict(cls, data):
        return cls(
            rain_mm=float(data["rain_mm"]),
            et_mm=float(data["et_mm"]),
            phase=parse_enum(VegetationPhase, data["phase"]),
        )
