"""Local-network client for Tuya water quality sensors."""

__version__ = "1.0.0"

from .backend import BackendClient
from .config import ConfigError, load_config, session_from_config, validate_config
from .lan import ProtocolVersion, SensorReading, TuyaSession
from .monitor import SensorMonitor

__all__ = [
    "__version__",
    "BackendClient",
    "ConfigError",
    "load_config",
    "session_from_config",
    "validate_config",
    "ProtocolVersion",
    "SensorReading",
    "TuyaSession",
    "SensorMonitor",
]
