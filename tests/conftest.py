import asyncio
from typing import Dict, Optional

import pytest_asyncio

from sysbot_client.client import SysBotClient
from sysbot_client.worker import ConnectionWorker


class ScriptedTransport:
    """Fake StreamWriter paired with a real StreamReader.

    Every write is recorded; when the written command has a scripted reply,
    the reply is fed to the reader immediately.
    """

    def __init__(self, replies: Optional[Dict[bytes, bytes]] = None) -> None:
        self.reader = asyncio.StreamReader()
        self.replies: Dict[bytes, bytes] = dict(replies or {})
        self.written: list[bytes] = []
        self.write_error: Optional[BaseException] = None
        self.closed = False

    # StreamWriter interface -------------------------------------------
    def write(self, data: bytes) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(bytes(data))
        reply = self.replies.get(bytes(data))
        if reply is not None:
            self.reader.feed_data(reply)

    async def drain(self) -> None:
        await asyncio.sleep(0)

    def close(self) -> None:
        self.closed = True

    def is_closing(self) -> bool:
        return self.closed

    async def wait_closed(self) -> None:
        return None

    # helpers ----------------------------------------------------------
    @property
    def commands(self) -> list[str]:
        return [item.decode("ascii") for item in self.written]


@pytest_asyncio.fixture
async def transport():
    """A fresh scripted transport; reads left pending are ended at teardown."""

    scripted_transport = ScriptedTransport()
    try:
        yield scripted_transport
    finally:
        scripted_transport.reader.feed_eof()


@pytest_asyncio.fixture
async def scripted(transport):
    """A started worker and client over a scripted transport."""

    worker = ConnectionWorker(transport.reader, transport, peer="scripted:6000")
    worker.start()
    client = SysBotClient(worker)
    try:
        yield transport, worker, client
    finally:
        # Unblock any read left pending by the test before closing.
        transport.reader.feed_eof()
        await client.close()


class ScriptedService:
    """Line-oriented TCP server answering commands from a reply table."""

    def __init__(self, replies: Optional[Dict[str, bytes]] = None) -> None:
        self.replies: Dict[str, bytes] = dict(replies or {})
        self.received: list[str] = []
        self.server: Optional[asyncio.Server] = None

    @property
    def port(self) -> int:
        assert self.server is not None
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def stop(self) -> None:
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                command = line.decode("ascii")
                self.received.append(command)
                reply = self.replies.get(command.rstrip("\r\n"))
                if reply is not None:
                    writer.write(reply)
                    await writer.drain()
        finally:
            writer.close()


@pytest_asyncio.fixture
async def service():
    server = ScriptedService()
    await server.start()
    try:
        yield server
    finally:
        await server.stop()
