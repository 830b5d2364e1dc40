"""Command line entry point: python -m tuyasensor CONFIG.json"""
import argparse
import asyncio
import json
import logging
import sys

from .backend import BackendClient
from .config import ConfigError, load_config, session_from_config
from .const import (
    CONF_BACKEND_URL,
    CONF_ENABLE_DEBUG,
    CONF_RELAY_INTERVAL,
    CONF_RELAYS,
    CONF_SENSOR_INTERVAL,
)
from .monitor import SensorMonitor

_LOGGER = logging.getLogger(__name__)


def _log_relay(relay_id: int, state: int) -> None:
    _LOGGER.info("[Relay %d] Set to %s", relay_id, "ON" if state else "OFF")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="tuyasensor", description="Poll a Tuya water quality sensor over the LAN"
    )
    parser.add_argument("config", help="path to the JSON configuration file")
    parser.add_argument("--once", action="store_true", help="query once and print the reading")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"tuyasensor: {e}", file=sys.stderr)
        return 2

    debug = args.debug or config[CONF_ENABLE_DEBUG]
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = session_from_config(config)
    session.enable_debug = debug

    if args.once:
        with session:
            if not session.fetch_status():
                _LOGGER.error("Query failed: %s", session.last_error)
                return 1
        print(json.dumps(session.reading.as_dict()))
        return 0

    backend = None
    if CONF_BACKEND_URL in config:
        backend = BackendClient(config[CONF_BACKEND_URL])

    monitor = SensorMonitor(
        session,
        backend=backend,
        relays=config[CONF_RELAYS],
        relay_callback=_log_relay,
        sensor_interval=config[CONF_SENSOR_INTERVAL],
        relay_interval=config[CONF_RELAY_INTERVAL],
    )
    try:
        asyncio.run(monitor.async_run())
    except KeyboardInterrupt:
        _LOGGER.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
