import os
from pathlib import Path

from farmfromspace_engine.core.utils.yaml import read_yaml

file_path = Path(os.path.realpath(__file__))
CURRENT_DIR = file_path.parent


def specification_path(spec_file):
    return CURRENT_DIR / spec_file


def load_yaml(spec_file):
    """Loads one of the YAML specifications shipped with the package (e.g. "crops.yaml")."""
    return read_yaml(specification_path(spec_file))
