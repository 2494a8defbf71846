import yaml


def read_yaml(path):
    """
    Reads a YAML file and returns its content (an empty file gives an empty dict).
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"YAML file not found: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file '{path}': {e}")
    return {} if content is None else content


def write_yaml(path, data):
    """
    Writes a plain Python structure to a YAML file.
    """
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
