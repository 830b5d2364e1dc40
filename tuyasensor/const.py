"""Constants for the Tuya sensor client."""

CONF_DEVICE_ID = "device_id"
CONF_HOST = "host"
CONF_LOCAL_KEY = "local_key"
CONF_PROTOCOL_VERSION = "protocol_version"
CONF_PORT = "port"
CONF_TIMEOUT = "timeout"
CONF_BACKEND_URL = "backend_url"
CONF_SENSOR_INTERVAL = "sensor_interval"
CONF_RELAY_INTERVAL = "relay_interval"
CONF_RELAYS = "relays"
CONF_ENABLE_DEBUG = "enable_debug"

PROTOCOL_VERSIONS = ["3.3", "3.4", "3.5"]

DEFAULT_PROTOCOL_VERSION = "3.3"
DEFAULT_SENSOR_INTERVAL = 0.25  # seconds
DEFAULT_RELAY_INTERVAL = 0.1  # seconds
DEFAULT_BACKEND_TIMEOUT = 10  # seconds

# Backend endpoints
SUBMIT_PATH = "/submit-data"
RELAY_STATE_PATH = "/fetch/{relay_id}/state"

RELAY_ON_VALUES = ("1", "true", "ON")
RELAY_OFF_VALUES = ("0", "false", "OFF")
