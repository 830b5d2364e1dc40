"""Periodic poll loop driving a TuyaSession and the backend."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable

from .backend import BackendClient
from .const import DEFAULT_RELAY_INTERVAL, DEFAULT_SENSOR_INTERVAL
from .lan import TuyaLoggingAdapter, TuyaSession

_LOGGER = logging.getLogger(__name__)

RelayCallback = Callable[[int, int], None]


class SensorMonitor:
    """Polls the sensor and the relay commands at fixed intervals.

    Blocking session calls run in the default executor. The sensor loop is
    the only caller of the session, so calls never overlap.
    """

    def __init__(
        self,
        session: TuyaSession,
        backend: BackendClient | None = None,
        relays: Iterable[int] = (),
        relay_callback: RelayCallback | None = None,
        sensor_interval: float = DEFAULT_SENSOR_INTERVAL,
        relay_interval: float = DEFAULT_RELAY_INTERVAL,
    ):
        self.session = session
        self.backend = backend
        self.relays = list(relays)
        self.relay_callback = relay_callback
        self.sensor_interval = sensor_interval
        self.relay_interval = relay_interval
        self.relay_states: dict[int, int] = {}

        self._logger = TuyaLoggingAdapter(_LOGGER, {"device_id": session.device_id})
        self._stop_event: asyncio.Event | None = None

    async def async_update_sensor(self) -> bool:
        """Run one sensor tick: fetch, then submit or reconnect."""
        loop = asyncio.get_running_loop()
        success = await loop.run_in_executor(None, self.session.fetch_status)

        if not success:
            self._logger.info("[Sensor] Read failed. Attempting reconnect...")
            await loop.run_in_executor(None, self._reconnect)
            return False

        reading = self.session.reading
        self._logger.info(
            "[Sensor] pH: %.2f | ORP: %d | TDS: %d | Temp: %.1f",
            reading.acidity,
            reading.redox_potential,
            reading.dissolved_solids,
            reading.temperature,
        )
        if self.backend is not None:
            await self.backend.async_submit_reading(reading)
        return True

    def _reconnect(self) -> None:
        self.session.disconnect()
        self.session.connect()

    async def async_update_relays(self) -> dict[int, int]:
        """Run one relay tick.

        Returns:
            {relay_id: state} for relays with a known command this tick.
        """
        if self.backend is None:
            return {}

        commands = {}
        for relay_id in self.relays:
            command = await self.backend.async_get_relay_command(relay_id)
            if command is None:
                continue
            commands[relay_id] = command
            self.relay_states[relay_id] = command
            self._logger.debug("[Relay %d] Set to %s", relay_id, "ON" if command else "OFF")
            if self.relay_callback is not None:
                try:
                    self.relay_callback(relay_id, command)
                except Exception:
                    self._logger.exception("Error in relay callback for relay %d", relay_id)
        return commands

    async def _sensor_loop(self) -> None:
        while not self._stop_event.is_set():
            await self.async_update_sensor()
            await self._sleep(self.sensor_interval)

    async def _relay_loop(self) -> None:
        while not self._stop_event.is_set():
            await self.async_update_relays()
            await self._sleep(self.relay_interval)

    async def _sleep(self, interval: float) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    async def async_run(self) -> None:
        """Run both loops until stop() is called."""
        # Bound to the running loop
        self._stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.session.connect)

        tasks = [asyncio.create_task(self._sensor_loop())]
        if self.backend is not None and self.relays:
            tasks.append(asyncio.create_task(self._relay_loop()))

        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            await loop.run_in_executor(None, self.session.disconnect)
            if self.backend is not None:
                await self.backend.async_close()

    def stop(self) -> None:
        """Ask the loops to finish after their current tick."""
        if self._stop_event is not None:
            self._stop_event.set()
