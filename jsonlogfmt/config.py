"""Configuration: frozen dataclasses built from defaults, YAML, env vars and CLI args."""

import logging
import os
from dataclasses import dataclass, field

import yaml

from jsonlogfmt.levels import Severity

logger = logging.getLogger(__name__)

DEFAULT_TIME_LAYOUT = "rfc3339"
VALID_FORMATS = ("auto", "terminal", "logfmt")
VALID_COLORS = ("auto", "always", "never")

# YAML key -> env var
ENV_VARS = {
    "time_key": "JSONLOGFMT_TIME_KEY",
    "time_layout": "JSONLOGFMT_TIME_LAYOUT",
    "level_key": "JSONLOGFMT_LEVEL_KEY",
    "message_key": "JSONLOGFMT_MSG_KEY",
    "min_level": "JSONLOGFMT_LEVEL",
    "format": "JSONLOGFMT_FORMAT",
    "color": "JSONLOGFMT_COLOR",
}


class ConfigError(Exception):
    """Invalid or unreadable configuration."""


@dataclass(frozen=True)
class FieldMapping:
    """Which JSON keys carry the timestamp, level and message."""

    time_key: str = "t"
    level_key: str = "lvl"
    message_key: str = "msg"


@dataclass(frozen=True)
class Config:
    mapping: FieldMapping = field(default_factory=FieldMapping)
    time_layout: str = DEFAULT_TIME_LAYOUT
    min_level: Severity = Severity.INFO
    output_format: str = "auto"
    color: str = "auto"


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc.strerror}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = sorted(str(k) for k in data if k not in ENV_VARS)
    for key in unknown:
        logger.warning("Ignoring unknown config key %r in %s", key, path)
    logger.debug("Loaded YAML config from %s", path)
    return {k: v for k, v in data.items() if k in ENV_VARS}


def _pick(name: str, cli_value, yaml_data: dict, default):
    """CLI arg > env var > YAML > default."""
    if cli_value is not None:
        return cli_value
    env_value = os.environ.get(ENV_VARS[name])
    if env_value is not None:
        return env_value
    if name in yaml_data and yaml_data[name] is not None:
        return yaml_data[name]
    return default


def _key(name: str, cli_value, yaml_data: dict, default: str) -> str:
    value = _pick(name, cli_value, yaml_data, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{name} must be a non-empty string, got {value!r}")
    return value


def _choice(name: str, cli_value, yaml_data: dict, default: str, valid: tuple) -> str:
    value = str(_pick(name, cli_value, yaml_data, default)).strip().lower()
    if value not in valid:
        raise ConfigError(
            f"Invalid {name} {value!r}, expected one of: {', '.join(valid)}"
        )
    return value


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build Config from defaults <- YAML <- env vars <- CLI args (highest priority).

    ``cli_args`` is an argparse Namespace (or anything with the same
    attributes); attributes left as None fall through to the next source.
    """
    yaml_data = yaml_data or {}
    defaults = Config()

    def arg(name):
        return getattr(cli_args, name, None)

    mapping = FieldMapping(
        time_key=_key("time_key", arg("time_key"), yaml_data, defaults.mapping.time_key),
        level_key=_key("level_key", arg("level_key"), yaml_data, defaults.mapping.level_key),
        message_key=_key(
            "message_key", arg("message_key"), yaml_data, defaults.mapping.message_key
        ),
    )

    time_layout = _key("time_layout", arg("time_layout"), yaml_data, defaults.time_layout)

    level_name = _pick("min_level", arg("min_level"), yaml_data, defaults.min_level.name)
    try:
        min_level = Severity.from_name(str(level_name))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    return Config(
        mapping=mapping,
        time_layout=time_layout,
        min_level=min_level,
        output_format=_choice(
            "format", arg("output_format"), yaml_data, defaults.output_format, VALID_FORMATS
        ),
        color=_choice("color", arg("color"), yaml_data, defaults.color, VALID_COLORS),
    )
