"""Periodic console polling feeding the health reporter."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .client import SysBotClient
from .errors import SysBotError
from .health import HealthReporter

LOGGER = logging.getLogger(__name__)

COMPONENT_NAME = "console"


class ConsoleMonitor:
    """Polls program state and title id until stopped or the connection fails.

    The monitor never reconnects: the first client error marks the
    ``console`` component unhealthy and ends the loop.
    """

    def __init__(
        self,
        client: SysBotClient,
        reporter: HealthReporter,
        *,
        interval: float = 5.0,
        peer: str = "",
        request_timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._reporter = reporter
        self._interval = interval
        self._peer = peer
        self._request_timeout = request_timeout
        self._stop_event = asyncio.Event()
        self.polls = 0

    def stop(self) -> None:
        self._stop_event.set()

    async def poll_once(self) -> None:
        program_running = await asyncio.wait_for(
            self._client.is_program_running(), timeout=self._request_timeout
        )
        title_id: Optional[int] = None
        if program_running:
            title_id = await asyncio.wait_for(
                self._client.get_title_id(), timeout=self._request_timeout
            )

        self.polls += 1
        await self._reporter.record_console(
            self._peer, program_running=program_running, title_id=title_id
        )
        detail = f"title=0x{title_id:016X}" if title_id is not None else "idle"
        await self._reporter.update(COMPONENT_NAME, True, detail)

    async def run(self) -> None:
        LOGGER.info("Console monitor started (interval=%.1fs)", self._interval)
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except (SysBotError, asyncio.TimeoutError) as exc:
                LOGGER.error("Console poll failed: %s", exc)
                await self._reporter.update(
                    COMPONENT_NAME, False, f"{type(exc).__name__}: {exc}"
                )
                return

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
        LOGGER.info("Console monitor stopped after %d polls", self.polls)
