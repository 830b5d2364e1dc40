"""Configuration loading and validation for the Tuya sensor client."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import voluptuous as vol

from .const import (
    CONF_BACKEND_URL,
    CONF_DEVICE_ID,
    CONF_ENABLE_DEBUG,
    CONF_HOST,
    CONF_LOCAL_KEY,
    CONF_PORT,
    CONF_PROTOCOL_VERSION,
    CONF_RELAY_INTERVAL,
    CONF_RELAYS,
    CONF_SENSOR_INTERVAL,
    CONF_TIMEOUT,
    DEFAULT_PROTOCOL_VERSION,
    DEFAULT_RELAY_INTERVAL,
    DEFAULT_SENSOR_INTERVAL,
    PROTOCOL_VERSIONS,
)
from .lan import DEFAULT_PORT, DEFAULT_TIMEOUT, ERR_PARAMS, TuyaError, TuyaSession

_LOGGER = logging.getLogger(__name__)


def _strip_slash(value: str) -> str:
    return value.rstrip("/")


positive_float = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_DEVICE_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(CONF_HOST): vol.All(str, vol.Length(min=1)),
        vol.Required(CONF_LOCAL_KEY): vol.All(
            str, vol.Length(min=16, max=16, msg="local key must be 16 characters")
        ),
        vol.Required(CONF_PROTOCOL_VERSION, default=DEFAULT_PROTOCOL_VERSION): vol.All(
            vol.Coerce(str), vol.In(PROTOCOL_VERSIONS)
        ),
        vol.Required(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Required(CONF_TIMEOUT, default=float(DEFAULT_TIMEOUT)): positive_float,
        vol.Optional(CONF_BACKEND_URL): vol.All(str, vol.Url(), _strip_slash),
        vol.Required(CONF_SENSOR_INTERVAL, default=DEFAULT_SENSOR_INTERVAL): positive_float,
        vol.Required(CONF_RELAY_INTERVAL, default=DEFAULT_RELAY_INTERVAL): positive_float,
        vol.Required(CONF_RELAYS, default=list): [vol.Coerce(int)],
        vol.Required(CONF_ENABLE_DEBUG, default=False): bool,
    }
)


class ConfigError(TuyaError):
    """Configuration file missing or invalid."""
    error_code = ERR_PARAMS


def validate_config(data: Any) -> dict[str, Any]:
    """Validate a configuration mapping and fill in defaults.

    Raises:
        ConfigError: If the configuration does not match CONFIG_SCHEMA
    """
    try:
        return CONFIG_SCHEMA(data)
    except vol.Invalid as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a JSON configuration file.

    Args:
        path: Path to the JSON file.

    Returns:
        Validated configuration dict.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path.name}: {e}") from e

    config = validate_config(data)
    _LOGGER.debug(
        "Loaded configuration for device %s at %s (v%s)",
        config[CONF_DEVICE_ID],
        config[CONF_HOST],
        config[CONF_PROTOCOL_VERSION],
    )
    return config


def session_from_config(config: dict[str, Any]) -> TuyaSession:
    """Build a (not yet connected) session from a validated configuration."""
    return TuyaSession(
        device_id=config[CONF_DEVICE_ID],
        address=config[CONF_HOST],
        local_key=config[CONF_LOCAL_KEY],
        protocol_version=config[CONF_PROTOCOL_VERSION],
        port=config[CONF_PORT],
        timeout=config[CONF_TIMEOUT],
        enable_debug=config[CONF_ENABLE_DEBUG],
    )
