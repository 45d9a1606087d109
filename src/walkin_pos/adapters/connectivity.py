"""Connectivity sensing for catalog sync gating.

The sensor pushes connectivity changes to listeners; the engine never polls it.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], Awaitable[None]]


class ConnectivitySensor:
    """Holds the last known connectivity state and notifies listeners on change.

    The base sensor is driven externally through ``update``, which is how a
    host platform's network callbacks feed the engine.
    """

    def __init__(self, initially_connected: bool = True) -> None:
        """Initialize the sensor.

        Args:
            initially_connected: State reported before the first refresh
        """
        self._connected = initially_connected
        self._listeners: list[ConnectivityListener] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def add_listener(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Subscribe to connectivity changes.

        Args:
            listener: Async callable receiving the new ``connected`` flag

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def refresh(self) -> bool:
        """Query the current state eagerly.

        Returns:
            bool: Current connectivity
        """
        return self._connected

    async def watch(self) -> None:
        """Background loop feeding ``update``; externally driven sensors have none."""
        return None

    async def update(self, connected: bool) -> None:
        """Record a new state, notifying listeners only when it changed.

        Args:
            connected: Whether the network is reachable
        """
        if connected == self._connected:
            return

        self._connected = connected
        logger.info(f"Connectivity changed: connected={connected}")

        for listener in list(self._listeners):
            await listener(connected)


class ProbeConnectivitySensor(ConnectivitySensor):
    """Sensor that derives connectivity from reaching a probe URL."""

    def __init__(
        self,
        probe_url: str,
        interval_seconds: float = 15.0,
        timeout_seconds: float = 3.0,
    ) -> None:
        """Initialize the probe sensor.

        Args:
            probe_url: URL that answers when the outlet is online
            interval_seconds: Delay between probes in ``watch``
            timeout_seconds: Timeout for a single probe
        """
        super().__init__(initially_connected=False)
        self.probe_url = probe_url
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds

    async def probe(self) -> bool:
        """Check whether the probe URL is reachable.

        Any HTTP answer counts as connected; only transport errors count as offline.

        Returns:
            bool: True if a response was received
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                await client.head(self.probe_url)
            return True
        except httpx.InvalidURL as e:
            logger.error(f"Connectivity probe URL {self.probe_url!r} is invalid: {e}")
            return False
        except httpx.HTTPError as e:
            logger.debug(f"Connectivity probe to {self.probe_url} failed: {e}")
            return False

    async def refresh(self) -> bool:
        await self.update(await self.probe())
        return self.is_connected

    async def watch(self) -> None:
        """Probe forever, pushing changes to listeners. Cancel the task to stop."""
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval_seconds)
