from datetime import date
from pathlib import Path

from farmfromspace_engine.core.config.setup_manager import SetupManager
from farmfromspace_engine.core.structure.types import GameMode, RegionType, parse_enum
from farmfromspace_engine.core.utils.dates import DEFAULT_START_DATE
from farmfromspace_engine.core.utils.logging_utils import get_logger
from farmfromspace_engine.core.utils.yaml import read_yaml, write_yaml
from farmfromspace_engine.entities.weather.environment import (
    PhaseCalendar,
    TableEnvironmentProvider,
    make_default_provider,
)
from farmfromspace_engine.farm import Farm

logger = get_logger("farmfromspace.make_farm")


def make_yaml_saver(path):
    """Save callback writing each autosaved snapshot to ``path``."""

    def save(snapshot):
        write_yaml(path, snapshot)
        logger.debug(f"Farm saved to {path}")

    return save


def make_farm(yamlfile):
    """
    Builds a :class:`Farm` from a farm YAML file::

        Farm:
          mode: season            # or endless
          region: SemiAridSteppe
          total_weeks: 6          # season only
          plots: 2                # season only
          seed: 42
          start_date: 2024-03-01
          max_weeks: 52           # endless only
        balance: balance.yaml     # optional, paths relative to the farm file
        crops: crops.yaml
        regions: regions.yaml
        environment: weeks.yaml   # optional recorded weeks
        save: farm_save.yaml      # optional, endless autosave target

    Missing configuration files are generated from the vanilla specifications.
    """
    yamlfile = Path(yamlfile)
    farm_yaml = read_yaml(yamlfile)
    if "Farm" not in farm_yaml:
        raise ValueError(f"{yamlfile} has no 'Farm' section")
    farm = farm_yaml["Farm"] or {}
    folder = yamlfile.parent

    def resolve(key):
        return str(folder / farm_yaml[key]) if farm_yaml.get(key) else None

    setup = SetupManager(folder / yamlfile.stem)
    balance, crops, regions = setup.ensure_configurations(
        balance=resolve("balance"), crops=resolve("crops"), regions=resolve("regions")
    )

    mode = parse_enum(GameMode, farm.get("mode", GameMode.Season.value))
    default_region = RegionType.SemiAridSteppe if mode == GameMode.Season else RegionType.TropicalMonsoon
    region = parse_enum(RegionType, farm.get("region", default_region.name))

    start_date = farm.get("start_date", DEFAULT_START_DATE)
    if isinstance(start_date, str):
        start_date = date.fromisoformat(start_date)

    engine_kwargs = {
        "balance": balance,
        "crops": crops,
        "regions": regions,
        "region": region,
        "start_date": start_date,
    }
    if mode == GameMode.Season:
        engine_kwargs["total_weeks"] = farm.get("total_weeks", 6)
        engine_kwargs["plots"] = farm.get("plots", balance.starting_plots)
    elif farm_yaml.get("save"):
        engine_kwargs["on_save"] = make_yaml_saver(resolve("save"))

    if farm_yaml.get("environment"):
        calendar = PhaseCalendar.season() if mode == GameMode.Season else PhaseCalendar.endless()
        engine_kwargs["provider"] = make_default_provider(
            regions.get(region),
            seed=farm.get("seed", 12345),
            calendar=calendar,
            table=TableEnvironmentProvider.from_yaml(resolve("environment")),
        )

    return Farm(
        mode=mode,
        engine_kwargs=engine_kwargs,
        max_weeks=farm.get("max_weeks", 52),
        seed=farm.get("seed"),
        name=yamlfile.stem,
    )
