from pathlib import Path

from farmfromspace_engine.core.config.balance import BalanceParameters
from farmfromspace_engine.core.config.content import CropCatalog, RegionCatalog
from farmfromspace_engine.core.utils.logging_utils import get_logger
from farmfromspace_engine.core.utils.yaml import write_yaml
from farmfromspace_engine.specifications.specification_manager import load_yaml

logger = get_logger("farmfromspace.config")


class SetupManager:
    """Resolves and, when missing, generates the YAML configuration files (balance, crops, regions) of a farm."""

    CONFIGURATIONS = {
        "balance": "balance.yaml",
        "crops": "crops.yaml",
        "regions": "regions.yaml",
    }

    def __init__(self, farmpath):
        self.farmpath = str(farmpath)
        self.paths = {}

    def ensure_configurations(self, balance=None, crops=None, regions=None):
        """
        Returns ``(BalanceParameters, CropCatalog, RegionCatalog)``.

        Each argument is a configuration file path or None. None means the
        ``<farmpath>_<kind>_vanilla.yaml`` file, generated on first use.
        """
        given = {"balance": balance, "crops": crops, "regions": regions}
        for kind, spec_file in self.CONFIGURATIONS.items():
            self.paths[kind] = self._setup_configuration(kind, spec_file, given[kind])

        balance = BalanceParameters.from_yaml(self.paths["balance"])
        crops = CropCatalog.from_yaml(self.paths["crops"], balance.default_planting_cost)
        regions = RegionCatalog.from_yaml(self.paths["regions"])
        return balance, crops, regions

    def _setup_configuration(self, kind, spec_file, path):
        if path is None:
            path = f"{self.farmpath}_{kind}_vanilla.yaml"
            if Path(path).exists():
                return path
        elif Path(path).exists():
            return path

        logger.warning(f"Missing {kind} configuration file.")
        write_yaml(path, load_yaml(spec_file))
        logger.warning(
            f"Vanilla {kind} configuration file automatically generated in {path} "
            "and used instead. Please, open and modify as wanted."
        )
        return path
