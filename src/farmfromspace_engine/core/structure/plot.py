from dataclasses import dataclass

from farmfromspace_engine.core.structure.types import SoilTexture, Suitability, VegetationPhase, parse_enum


def _phase_name(phase):
    return phase.name if phase is not None else None


def _parse_phase(name):
    return parse_enum(VegetationPhase, name) if name else None


@dataclass
class PlotRecord:
    """
    Full mutable state of one farmable cell.

    Plots live in an arena (``RegionEconomy.plots``) keyed by their index and
    are mutated in place through that index.
    """

    id: int
    soil_texture: SoilTexture = SoilTexture.Loam
    soil_fraction: float = 0.6

    planted_crop: object = None  # CropDefinition
    planted_week: int = -1
    crop_age_weeks: int = 0
    accumulated_growth: float = 0.0
    maturity_target: float = 100.0
    ready_for_harvest: bool = False
    suitability: Suitability = Suitability.Good

    nitrogen_parts_applied: int = 0
    nitrogen_part_a_week: int = -1
    nitrogen_part_b_week: int = -1
    nitrogen_part_a_phase: VegetationPhase = None
    nitrogen_part_b_phase: VegetationPhase = None
    pending_leach_penalty: int = 0

    irrigation_events_this_week: int = 0
    irrigation_mm_this_week: float = 0.0
    runoff_event_count: int = 0

    @property
    def is_planted(self):
        return self.planted_crop is not None and self.planted_week >= 0

    @property
    def crop_name(self):
        return self.planted_crop.name if self.planted_crop is not None else ""

    def plant(self, crop, week, suitability):
        self.planted_crop = crop
        self.planted_week = week
        self.crop_age_weeks = 0
        self.accumulated_growth = 0.0
        self.maturity_target = crop.maturity_target
        self.ready_for_harvest = False
        self.suitability = suitability
        self.nitrogen_parts_applied = 0
        self.nitrogen_part_a_week = -1
        self.nitrogen_part_b_week = -1
        self.nitrogen_part_a_phase = None
        self.nitrogen_part_b_phase = None

    def clear_crop(self):
        """Back to an empty plot. Soil water, runoff history and scheduled penalties are kept."""
        self.planted_crop = None
        self.planted_week = -1
        self.crop_age_weeks = 0
        self.accumulated_growth = 0.0
        self.ready_for_harvest = False
        self.suitability = Suitability.Good
        self.nitrogen_parts_applied = 0
        self.nitrogen_part_a_week = -1
        self.nitrogen_part_b_week = -1
        self.nitrogen_part_a_phase = None
        self.nitrogen_part_b_phase = None

    def reset_week_counters(self):
        self.irrigation_events_this_week = 0
        self.irrigation_mm_this_week = 0.0

    # ----------------------------------------------------------------------
    # PERSISTENCE
    # ----------------------------------------------------------------------
    def to_dict(self):
        return {
            "id": self.id,
            "soil_texture": self.soil_texture.name,
            "soil_fraction": float(self.soil_fraction),
            "crop": self.crop_name or None,
            "planted_week": self.planted_week,
            "crop_age_weeks": self.crop_age_weeks,
            "accumulated_growth": float(self.accumulated_growth),
            "maturity_target": float(self.maturity_target),
            "ready_for_harvest": self.ready_for_harvest,
            "suitability": self.suitability.name,
            "nitrogen_parts_applied": self.nitrogen_parts_applied,
            "nitrogen_part_a_week": self.nitrogen_part_a_week,
            "nitrogen_part_b_week": self.nitrogen_part_b_week,
            "nitrogen_part_a_phase": _phase_name(self.nitrogen_part_a_phase),
            "nitrogen_part_b_phase": _phase_name(self.nitrogen_part_b_phase),
            "pending_leach_penalty": self.pending_leach_penalty,
            "irrigation_events_this_week": self.irrigation_events_this_week,
            "irrigation_mm_this_week": float(self.irrigation_mm_this_week),
            "runoff_event_count": self.runoff_event_count,
        }

    @classmethod
    def from_dict(cls, data, crops):
        """
        Rebuilds a plot from ``to_dict`` output. ``crops`` resolves crop names
        (a CropCatalog); unknown names raise KeyError.
        """
        crop_name = data.get("crop")
        crop = crops.get(crop_name) if crop_name else None
        return cls(
            id=int(data["id"]),
            soil_texture=parse_enum(SoilTexture, data.get("soil_texture", "Loam")),
            soil_fraction=min(1.0, max(0.0, float(data.get("soil_fraction", 0.6)))),
            planted_crop=crop,
            planted_week=int(data.get("planted_week", -1)) if crop is not None else -1,
            crop_age_weeks=int(data.get("crop_age_weeks", 0)),
            accumulated_growth=float(data.get("accumulated_growth", 0.0)),
            maturity_target=float(data.get("maturity_target", 100.0)),
            ready_for_harvest=bool(data.get("ready_for_harvest", False)),
            suitability=parse_enum(Suitability, data.get("suitability", "Good")),
            nitrogen_parts_applied=int(data.get("nitrogen_parts_applied", 0)),
            nitrogen_part_a_week=int(data.get("nitrogen_part_a_week", -1)),
            nitrogen_part_b_week=int(data.get("nitrogen_part_b_week", -1)),
            nitrogen_part_a_phase=_parse_phase(data.get("nitrogen_part_a_phase")),
            nitrogen_part_b_phase=_parse_phase(data.get("nitrogen_part_b_phase")),
            pending_leach_penalty=int(data.get("pending_leach_penalty", 0)),
            irrigation_events_this_week=int(data.get("irrigation_events_this_week", 0)),
            irrigation_mm_this_week=float(data.get("irrigation_mm_this_week", 0.0)),
            runoff_event_count=int(data.get("runoff_event_count", 0)),
        )
