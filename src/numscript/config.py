"""
Engine configuration.

Settings come from a YAML document with one mapping per section:

    lexer:
      strict: true
    interpreter:
      lenient_control_flow: false
    commands:
      sleep_scale: 1.0
      print_separator: " "
    logging:
      level: WARNING

Every key is optional; missing keys keep their defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

CONFIG_ENV_VAR = "NUMSCRIPT_CONFIG"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class EngineConfig:
    """Settings for one Engine."""
    strict_lexer: bool = True
    lenient_control_flow: bool = False
    sleep_scale: float = 1.0
    print_separator: str = " "
    log_level: str = "WARNING"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


# section -> {key -> (EngineConfig field, accepted types)}
_SCHEMA: Dict[str, Dict[str, tuple]] = {
    "lexer": {
        "strict": ("strict_lexer", (bool,)),
    },
    "interpreter": {
        "lenient_control_flow": ("lenient_control_flow", (bool,)),
    },
    "commands": {
        "sleep_scale": ("sleep_scale", (int, float)),
        "print_separator": ("print_separator", (str,)),
    },
    "logging": {
        "level": ("log_level", (str,)),
    },
}


def config_from_dict(data: Dict[str, Any]) -> EngineConfig:
    """
    Build an EngineConfig from a parsed document.

    Raises:
        ValueError: On unknown sections or keys, or values of the wrong type
    """
    if not isinstance(data, dict):
        raise ValueError(f"configuration must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - set(_SCHEMA))
    if unknown:
        raise ValueError(f"unknown configuration section(s): {', '.join(map(str, unknown))}")

    values: Dict[str, Any] = {}
    for section, raw in data.items():
        raw = raw or {}
        if not isinstance(raw, dict):
            raise ValueError(f"section '{section}' must be a mapping")
        keys = _SCHEMA[section]
        for key, value in raw.items():
            if key not in keys:
                raise ValueError(f"unknown key '{section}.{key}'")
            field_name, types = keys[key]
            # bool is an int; keep it out of numeric settings
            if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
                raise ValueError(f"'{section}.{key}' has invalid value {value!r}")
            values[field_name] = value

    if "sleep_scale" in values:
        if values["sleep_scale"] < 0:
            raise ValueError("'commands.sleep_scale' must not be negative")
        values["sleep_scale"] = float(values["sleep_scale"])
    if "log_level" in values:
        level = values["log_level"].upper()
        if level not in _LEVELS:
            raise ValueError(f"'logging.level' must be one of {', '.join(sorted(_LEVELS))}")
        values["log_level"] = level

    return EngineConfig(**values)


def load_config(path: Path | str) -> EngineConfig:
    """Load an EngineConfig from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")
    import yaml  # local import to avoid hard dependency if unused

    try:
        with config_path.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"YAML parse error in {config_path}: {e}") from e
    return config_from_dict(data)


def resolve_config(path: Optional[Path | str] = None) -> EngineConfig:
    """
    Find the configuration for a command line run.

    Uses `path` when given, then the NUMSCRIPT_CONFIG environment variable,
    then the defaults.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return EngineConfig()
    return load_config(path)
