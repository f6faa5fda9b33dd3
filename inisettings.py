# -*- coding: utf-8 -*-
import os
import ruamel.yaml

CONFIG_FILENAME = "inilang.yaml"

# Environment variable pointing at an alternative configuration file
CONFIG_ENV_VAR = "INILANG_CONFIG"

DEFAULT_CONFIG = {
    "base_filename": "english.ini",
    "translation_extension": ".ini",
    "langid_window": 100,
    "patch_format": "diff",
    "output_folder": None,
}


def _yaml():
    yaml = ruamel.yaml.YAML()
    yaml.preserve_quotes = True
    yaml.width = float("inf")
    return yaml


def load_config(config_filename=None):
    """
    Load settings from a YAML file on top of DEFAULT_CONFIG.

    Args:
        config_filename (str, optional): File to read. Defaults to $INILANG_CONFIG,
            then inilang.yaml in the current folder. A missing default file is not
            an error, a missing explicit one is.

    Returns:
        dict: The merged settings.
    """
    explicit = config_filename is not None or CONFIG_ENV_VAR in os.environ
    if config_filename is None:
        config_filename = os.environ.get(CONFIG_ENV_VAR, CONFIG_FILENAME)

    config = dict(DEFAULT_CONFIG)
    if not os.path.isfile(config_filename):
        if explicit:
            raise FileNotFoundError(f"Configuration file {config_filename} not found.")
        return config

    with open(config_filename, "r", encoding="utf8") as config_file:
        loaded = _yaml().load(config_file) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"{config_filename} must contain a mapping of settings.")

    unknown = [key for key in loaded if key not in DEFAULT_CONFIG]
    if unknown:
        raise ValueError(f"Unknown settings in {config_filename}: {', '.join(str(key) for key in unknown)}")

    for key, value in loaded.items():
        config[key] = value

    window = config["langid_window"]
    if isinstance(window, bool) or not isinstance(window, int) or window <= 0:
        raise ValueError(f"langid_window must be a positive integer, got {config['langid_window']!r}.")
    return config


def write_config(config_filename, config=None):
    with open(config_filename, "w", encoding="utf8", newline="\n") as config_file:
        _yaml().dump(dict(config or DEFAULT_CONFIG), config_file)
    return config_filename
