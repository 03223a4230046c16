"""Configuration loading from CLI args, env vars, and optional YAML file."""

import os
import logging
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    init: bool = False
    db_path: str = "tinder.db"
    config_file: str | None = None
    log_file: str = ""
    log_format: str = "[${datetime}] ${msg}"
    date_layout: str = "%Y-%m-%d %H:%M"
    compact: bool = False
    relax: bool = False
    buffer_size: int = 1024
    encoding: str = "utf-8"


# option name -> (env var, converter)
_OPTIONS = {
    "init": ("INIT_DB", _parse_bool),
    "db_path": ("DB_FILE", str),
    "log_file": ("LOG_FILE", str),
    "log_format": ("LOG_FORMAT", str),
    "date_layout": ("DATE_LAYOUT", str),
    "compact": ("COMPACT", _parse_bool),
    "relax": ("RELAX", _parse_bool),
    "buffer_size": ("BUFFER_SIZE", int),
    "encoding": ("LOG_ENCODING", str),
}


def load_yaml_config(path: str | None) -> dict:
    """Load option values from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build Config from defaults <- YAML data <- env vars <- CLI args.

    CLI attributes left as None are treated as not given.
    """
    kwargs: dict = {}

    for key, value in (yaml_data or {}).items():
        key = str(key).replace("-", "_")
        if key not in _OPTIONS:
            logger.warning("Ignoring unknown config option %r", key)
            continue
        kwargs[key] = _OPTIONS[key][1](value)

    for key, (env_var, convert) in _OPTIONS.items():
        raw = os.environ.get(env_var)
        if raw is not None:
            kwargs[key] = convert(raw)

    if cli_args is not None:
        for key, (_, convert) in _OPTIONS.items():
            value = getattr(cli_args, key, None)
            if value is not None:
                kwargs[key] = convert(value)
        kwargs["config_file"] = getattr(cli_args, "config_file", None)

    config = Config(**kwargs)
    if config.buffer_size < 1:
        raise ValueError(f"buffer_size must be at least 1, got {config.buffer_size}")
    return config
