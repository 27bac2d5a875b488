"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Reads YAML settings files, merges them, applies environment overrides and
parses the result into a frozen ``PayrollSettings``.  Callers use
``payroll_config.get_settings()``, not this module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from ``PayrollSettings``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollSettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_FILE_ENV = "PAYROLL_CONFIG_FILE"

# environment variable -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("database", "url"),
    "PAYROLL_LOG_LEVEL": ("logging", "level"),
    "PAYROLL_ISOLATION_LEVEL": ("database", "isolation_level"),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Recursive dict merge; overlay wins, nested mappings are merged."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    result = {k: dict(v) if isinstance(v, dict) else v for k, v in data.items()}
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            result.setdefault(section, {})[key] = value
    return result


def parse_settings(data: Mapping[str, Any]) -> PayrollSettings:
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    payroll = data.get("payroll") or {}
    return PayrollSettings(
        database_url=str(database.get("url", "")),
        isolation_level=str(database.get("isolation_level", "SERIALIZABLE")),
        echo_sql=bool(database.get("echo_sql", False)),
        pool_size=int(database.get("pool_size", 20)),
        max_overflow=int(database.get("max_overflow", 10)),
        log_level=str(logging_section.get("level", "INFO")),
        hours_per_working_day=int(payroll.get("hours_per_working_day", 8)),
        money_decimal_places=int(payroll.get("money_decimal_places", 2)),
    )


def load_settings(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> PayrollSettings:
    """
    Build settings from defaults, an optional overlay file and environment.

    Args:
        config_file: Overlay YAML.  Defaults to $PAYROLL_CONFIG_FILE if set.
        environ: Environment mapping.  Defaults to ``os.environ``.
    """
    environ = os.environ if environ is None else environ
    data = load_yaml_file(DEFAULTS_PATH)

    if config_file is None and environ.get(CONFIG_FILE_ENV):
        config_file = Path(environ[CONFIG_FILE_ENV])
    if config_file is not None:
        data = merge(data, load_yaml_file(Path(config_file)))

    return parse_settings(apply_env_overrides(data, environ))
