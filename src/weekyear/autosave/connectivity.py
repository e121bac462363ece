"""Online/offline signal shared by coordinators and the workbook client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import aiohttp

_logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """Holds the current connectivity signal and notifies subscribers.

    Subscribers are called synchronously, only when the value actually
    changes, with the new ``online`` value.
    """

    def __init__(self, *, online: bool = True) -> None:
        self._online = online
        self._subscribers: list[Callable[[bool], None]] = []

    @property
    def online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        _logger.debug("Connectivity changed online=%s", online)
        for callback in list(self._subscribers):
            try:
                callback(online)
            except Exception:
                _logger.debug("Connectivity subscriber failed", exc_info=True)

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Register *callback*; return a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return _unsubscribe

    async def probe(
        self,
        http_session: aiohttp.ClientSession,
        url: str,
        *,
        timeout: float = 5.0,
    ) -> bool:
        """Update the signal from whether *url* answers at all.

        Any HTTP response, whatever its status, means the network is up.
        """
        try:
            async with http_session.head(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout),
                allow_redirects=False,
            ):
                reachable = True
        except (aiohttp.ClientError, asyncio.TimeoutError):
            _logger.debug("Connectivity probe to %s failed", url, exc_info=True)
            reachable = False
        self.set_online(reachable)
        return reachable
