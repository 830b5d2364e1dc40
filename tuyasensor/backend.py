"""HTTP backend client: submits sensor readings and polls relay commands."""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from .const import (
    DEFAULT_BACKEND_TIMEOUT,
    RELAY_OFF_VALUES,
    RELAY_ON_VALUES,
    RELAY_STATE_PATH,
    SUBMIT_PATH,
)
from .lan import SensorReading

_LOGGER = logging.getLogger(__name__)


def parse_relay_command(body: str) -> int | None:
    """Translate a relay state body into 1 (on), 0 (off) or None."""
    body = body.strip()
    if body in RELAY_ON_VALUES:
        return 1
    if body in RELAY_OFF_VALUES:
        return 0
    return None


class BackendClient:
    """Client for the reading/relay backend."""

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_BACKEND_TIMEOUT,
    ):
        """Initialize the backend client.

        A session passed in is borrowed; otherwise one is created on first
        use and closed by async_close().
        """
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def async_close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def async_submit_reading(self, reading: SensorReading) -> bool:
        """POST a reading to the submit endpoint.

        Returns:
            True if the backend answered with a 2xx status.
        """
        url = f"{self._base_url}{SUBMIT_PATH}"
        try:
            async with self._get_session().post(
                url, json=reading.to_backend_payload()
            ) as resp:
                if not resp.ok:
                    _LOGGER.warning("Submit failed, status %s", resp.status)
                    return False
                _LOGGER.debug("Data sent (Code: %s)", resp.status)
                return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            _LOGGER.error("Submit request failed: %s", e)
            return False

    async def async_get_relay_command(self, relay_id: int) -> int | None:
        """GET the commanded state of one relay.

        Returns:
            1 for on, 0 for off, None if unknown or the request failed.
        """
        url = f"{self._base_url}{RELAY_STATE_PATH.format(relay_id=relay_id)}"
        try:
            async with self._get_session().get(url) as resp:
                if resp.status != 200:
                    _LOGGER.warning("Relay %d fetch failed (Code: %s)", relay_id, resp.status)
                    return None
                body = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            _LOGGER.error("Relay %d request failed: %s", relay_id, e)
            return None

        command = parse_relay_command(body)
        if command is None:
            _LOGGER.debug("Relay %d: unrecognised state %r", relay_id, body)
        return command
