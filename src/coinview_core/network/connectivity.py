"""Connectivity status providers consulted before every request."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Protocol
from urllib.parse import urlsplit

import structlog

log = structlog.get_logger("connectivity")


class ConnectivityStatus(Enum):
    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"
    REQUIRES_CONNECTION = "requires_connection"
    # Monitoring hasn't reported yet.
    UNKNOWN = "unknown"


class ConnectivityMonitor(Protocol):
    def status(self) -> ConnectivityStatus: ...


class StaticConnectivity:
    """A provider that always reports the same status. Mutable for tests."""

    def __init__(self, status: ConnectivityStatus = ConnectivityStatus.SATISFIED) -> None:
        self._status = status

    def status(self) -> ConnectivityStatus:
        return self._status

    def set_status(self, status: ConnectivityStatus) -> None:
        self._status = status


class ProbeConnectivityMonitor:
    """Reports reachability of the API host via periodic TCP connects.

    Reports UNKNOWN until the first probe finishes.
    """

    def __init__(
        self,
        url: str,
        interval_s: float = 10.0,
        timeout_s: float = 3.0,
    ) -> None:
        parts = urlsplit(url)
        self.host = parts.hostname or ""
        self.port = parts.port or (443 if parts.scheme == "https" else 80)
        self._interval_s = interval_s
        self._timeout_s = timeout_s
        self._status = ConnectivityStatus.UNKNOWN
        self._task: asyncio.Task | None = None

    def status(self) -> ConnectivityStatus:
        return self._status

    async def probe(self) -> ConnectivityStatus:
        """Run one probe and record the outcome."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self._timeout_s,
            )
        except (OSError, asyncio.TimeoutError):
            status = ConnectivityStatus.UNSATISFIED
        else:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
            status = ConnectivityStatus.SATISFIED

        if status is not self._status:
            log.info("connectivity_changed", host=self.host, status=status.value)
        self._status = status
        return status

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            await self.probe()
            await asyncio.sleep(self._interval_s)
