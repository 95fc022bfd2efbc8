"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all Stratus settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- Account definitions are NOT part of the loaded config: they are re-read
  by ConfigFileAccountSource on every poll cycle
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "stratus.json"


@dataclass(frozen=True)
class CloudrunConfig:
    """Cloud Run provider configuration."""
    gcloud_path: str = "gcloud"
    default_region: str = "us-central1"
    application_name: str = "stratus"
    accounts_path: str = ""


@dataclass(frozen=True)
class PollerConfig:
    """Credential poller configuration."""
    interval_seconds: float = 60.0
    max_parallel_parses: int = 8


@dataclass(frozen=True)
class ExecutorConfig:
    """External process execution configuration."""
    timeout_seconds: float = 300.0


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class StratusConfig:
    """Root configuration for the Stratus application."""
    cloudrun: CloudrunConfig = field(default_factory=CloudrunConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"
    log_json: bool = False
    config_path: str = DEFAULT_CONFIG_FILE

    @property
    def accounts_path(self) -> str:
        """File holding ``cloudrun.accounts``; the main config file by default."""
        return self.cloudrun.accounts_path or self.config_path


def _env_override(data: dict, prefix: str = "STRATUS") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern STRATUS_SECTION_KEY.
    For example: STRATUS_POLLER_INTERVAL_SECONDS=30,
    STRATUS_CLOUDRUN_GCLOUD_PATH=/opt/google/bin/gcloud
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        parts = key[len(prefix) + 1:].lower().split("_", 1)
        if len(parts) == 2 and parts[0] in _SECTIONS:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
        else:
            data["_".join(parts)] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _coerce(value, type_name: str):
    if not isinstance(value, str):
        return value
    if type_name == "int":
        return int(value)
    if type_name == "float":
        return float(value)
    if type_name == "bool":
        return value.lower() in ("true", "1", "yes")
    return value


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {
        k: _coerce(v, valid_fields[k].type)
        for k, v in data.items()
        if k in valid_fields
    }
    return cls(**filtered)


_SECTIONS = {
    "cloudrun": CloudrunConfig,
    "poller": PollerConfig,
    "executor": ExecutorConfig,
    "telemetry": TelemetryConfig,
}


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "STRATUS",
) -> StratusConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (STRATUS_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to stratus.json in CWD.
        env_prefix: Environment variable prefix. Defaults to STRATUS.
    """
    config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    sections = {
        name: _build_sub_config(cls, data.get(name) or {})
        for name, cls in _SECTIONS.items()
    }
    return StratusConfig(
        **sections,
        log_level=str(data.get("log_level", "WARNING")).upper(),
        log_json=_coerce(data.get("log_json", False), "bool"),
        config_path=str(config_path),
    )
