"""Health reporting for long-running sysbot-client sessions."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from aiohttp import web

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ComponentStatus:
    name: str
    healthy: bool
    detail: Optional[str] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "healthy": self.healthy,
            "detail": self.detail,
            "updatedAt": self.updated_at.isoformat(timespec="seconds"),
        }


@dataclass(slots=True)
class ConsoleSnapshot:
    """Last values observed on the console by the monitor."""

    peer: str
    program_running: Optional[bool] = None
    title_id: Optional[int] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, object]:
        return {
            "peer": self.peer,
            "programRunning": self.program_running,
            "titleId": f"{self.title_id:016X}" if self.title_id is not None else None,
            "updatedAt": self.updated_at.isoformat(timespec="seconds"),
        }


class HealthReporter:
    """Tracks component statuses and the last console observation."""

    def __init__(self) -> None:
        self._status: Dict[str, ComponentStatus] = {}
        self._console: Optional[ConsoleSnapshot] = None
        self._lock = asyncio.Lock()

    async def update(
        self, name: str, healthy: bool, detail: Optional[str] = None
    ) -> None:
        async with self._lock:
            self._status[name] = ComponentStatus(
                name=name, healthy=healthy, detail=detail
            )

    async def record_console(
        self,
        peer: str,
        *,
        program_running: Optional[bool],
        title_id: Optional[int],
    ) -> None:
        async with self._lock:
            self._console = ConsoleSnapshot(
                peer=peer, program_running=program_running, title_id=title_id
            )

    async def snapshot(self) -> Dict[str, object]:
        async with self._lock:
            components = [status.as_dict() for status in self._status.values()]
            console = self._console

        overall = "ok" if all(item["healthy"] for item in components) else "degraded"
        payload: Dict[str, object] = {"status": overall, "components": components}
        if console is not None:
            payload["console"] = console.as_dict()
        return payload


class HealthServer:
    """HTTP endpoint serving ``/healthz`` and the last ``/console`` observation.

    Binding to port 0 picks a free port; ``port`` reports the bound one once
    the server has started.
    """

    def __init__(self, reporter: HealthReporter, host: str, port: int) -> None:
        self._reporter = reporter
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None

    @property
    def port(self) -> int:
        if self._runner is not None and self._runner.addresses:
            return self._runner.addresses[0][1]
        return self._port

    async def start(self) -> None:
        if self._runner is not None:
            return

        app = web.Application()
        app.router.add_get("/healthz", self._handle_health)
        app.router.add_get("/console", self._handle_console)

        runner = web.AppRunner(app)
        await runner.setup()
        await web.TCPSite(runner, self._host, self._port).start()
        self._runner = runner
        LOGGER.info(
            "Health endpoint listening on http://%s:%s/healthz", self._host, self.port
        )

    async def stop(self) -> None:
        runner, self._runner = self._runner, None
        if runner is not None:
            await runner.cleanup()

    async def _handle_health(self, request: web.Request) -> web.Response:
        snapshot = await self._reporter.snapshot()
        status = 200 if snapshot["status"] == "ok" else 503
        return web.json_response(snapshot, status=status)

    async def _handle_console(self, request: web.Request) -> web.Response:
        snapshot = await self._reporter.snapshot()
        console = snapshot.get("console")
        if console is None:
            raise web.HTTPNotFound(text="no console observation yet")
        return web.json_response(console)
