"""Connection worker owning the sys-botbase socket.

The worker is the only code that touches the stream. Callers hand it
``RequestMessage`` objects through a queue of capacity one; the worker
processes them strictly in order, writing each command and, when a reply is
expected, reading it and resolving the message's ``reply`` future before it
takes the next message. This gives single-flight request/response
alternation without any locking on the caller side.
"""

from __future__ import annotations

import asyncio
import contextlib
import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import constants
from .errors import ReceiveError, SendError, SysBotConnectionError

LOGGER = logging.getLogger(__name__)
WIRE_LOGGER = logging.getLogger("sysbot_client.wire")


class WorkerState(str, Enum):
    """Lifecycle of a connection worker."""

    CONNECTING = "connecting"
    """Socket not yet established or worker task not yet started."""

    READY = "ready"
    """Worker task running and accepting requests."""

    CLOSED = "closed"
    """Terminal state; no further requests are processed."""


@dataclass(frozen=True, slots=True)
class RequestMessage:
    """A single unit of work for the connection worker.

    ``size`` is the exact reply length in bytes, or 0 when the reply length
    is not known in advance and a single bounded read is performed instead.
    """

    command: bytes
    expects_response: bool = False
    close: bool = False
    size: int = 0
    reply: Optional[asyncio.Future[bytes]] = None

    @classmethod
    def closing(cls) -> "RequestMessage":
        return cls(command=b"", close=True)


class ConnectionWorker:
    """Sequential consumer of request messages over one stream pair."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE,
        peer: str = "",
    ) -> None:
        if read_chunk_size <= 0:
            raise ValueError("read_chunk_size must be positive")

        self._reader = reader
        self._writer = writer
        self._read_chunk_size = read_chunk_size
        self._peer = peer

        self._queue: asyncio.Queue[RequestMessage] = asyncio.Queue(maxsize=1)
        self._state = WorkerState.CONNECTING
        self._task: Optional[asyncio.Task[None]] = None
        self._failure: Optional[BaseException] = None
        self._current: Optional[RequestMessage] = None

    @classmethod
    async def open(
        cls,
        host: str,
        port: int,
        *,
        timeout: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
        read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE,
    ) -> "ConnectionWorker":
        """Connect to ``host:port`` and start a worker for the stream.

        Raises:
            SysBotConnectionError: If the address is invalid or the
                connection cannot be established. No retry is attempted.
        """

        try:
            address = ipaddress.ip_address(host)
        except ValueError as exc:
            raise SysBotConnectionError(f"Invalid IP address: {host!r}") from exc
        if not 0 < port <= 65535:
            raise SysBotConnectionError(f"Invalid port: {port!r}")

        peer = f"{address}:{port}"
        LOGGER.info("Connecting to sys-botbase at %s", peer)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(str(address), port), timeout=timeout
            )
        except asyncio.TimeoutError as exc:
            raise SysBotConnectionError(
                f"Timed out connecting to {peer} after {timeout:.1f}s"
            ) from exc
        except OSError as exc:
            raise SysBotConnectionError(f"Failed to connect to {peer}: {exc}") from exc

        worker = cls(reader, writer, read_chunk_size=read_chunk_size, peer=peer)
        worker.start()
        LOGGER.info("Connected to sys-botbase at %s", peer)
        return worker

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == WorkerState.READY

    @property
    def failure(self) -> Optional[BaseException]:
        """The I/O error that terminated the worker, if any."""
        return self._failure

    @property
    def peer(self) -> str:
        return self._peer

    def start(self) -> None:
        if self._task is not None:
            LOGGER.warning("Connection worker already started")
            return

        self._state = WorkerState.READY
        self._task = asyncio.create_task(self._run(), name=f"sysbot-worker {self._peer}")

    async def submit(self, message: RequestMessage) -> None:
        """Hand a message to the worker.

        Suspends while the previous message is still queued.

        Raises:
            SendError: If the worker is no longer accepting messages.
        """

        if not self.is_running:
            raise SendError("Connection worker is not running")

        await self._queue.put(message)

        if not self.is_running:
            # The worker stopped while we were waiting for queue capacity.
            self._fail_pending()
            reply = message.reply
            if reply is not None and reply.done() and not reply.cancelled():
                # The caller sees SendError; consume the reply's error here.
                reply.exception()
            raise SendError("Connection worker stopped before accepting the request")

    async def join(self) -> None:
        """Wait for the worker task to terminate."""

        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            LOGGER.error(
                "Connection worker for %s crashed", self._peer, exc_info=task.exception()
            )

    async def abort(self) -> None:
        """Stop the worker without a close message."""

        if self._task is None:
            await self._close_stream()
            self._state = WorkerState.CLOSED
            return
        if not self._task.done():
            self._task.cancel()
        await self.join()

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------
    async def _run(self) -> None:
        try:
            while True:
                message = await self._queue.get()
                if message.close:
                    LOGGER.debug("Close message received for %s", self._peer)
                    break
                self._current = message
                await self._exchange(message)
                self._current = None
        except (OSError, asyncio.IncompleteReadError) as exc:
            self._failure = exc
            LOGGER.error("Connection to %s failed: %s", self._peer, exc)
        finally:
            self._state = WorkerState.CLOSED
            self._fail_current()
            self._fail_pending()
            await self._close_stream()
            LOGGER.info("Connection worker for %s stopped", self._peer)

    async def _exchange(self, message: RequestMessage) -> None:
        WIRE_LOGGER.debug("%s -> %r", self._peer, message.command)
        self._writer.write(message.command)
        await self._writer.drain()

        if not message.expects_response:
            return

        if message.size > 0:
            payload = await self._read_exact(message.size)
        else:
            payload = await self._read_bounded()
        WIRE_LOGGER.debug("%s <- %r", self._peer, payload)

        reply = message.reply
        if reply is not None and not reply.done():
            reply.set_result(payload)

    async def _read_exact(self, size: int) -> bytes:
        """Read ``size`` reply bytes, skipping framing left by the previous reply."""

        payload = await self._reader.readexactly(size)
        skipped = len(payload) - len(payload.lstrip(constants.LINE_FRAMING))
        while skipped:
            payload = payload[skipped:] + await self._reader.readexactly(skipped)
            skipped = len(payload) - len(payload.lstrip(constants.LINE_FRAMING))
        return payload

    async def _read_bounded(self) -> bytes:
        while True:
            payload = await self._reader.read(self._read_chunk_size)
            if not payload:
                raise ConnectionResetError("Connection closed by sys-botbase")
            if payload.lstrip(constants.LINE_FRAMING):
                return payload.lstrip(constants.LINE_FRAMING)

    def _fail_current(self) -> None:
        message = self._current
        self._current = None
        if message is not None:
            self._fail_reply(message)

    def _fail_pending(self) -> None:
        while True:
            try:
                message = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._fail_reply(message)

    def _fail_reply(self, message: RequestMessage) -> None:
        reply = message.reply
        if reply is None or reply.done():
            return
        error = ReceiveError(f"Connection to {self._peer} closed before a response arrived")
        error.__cause__ = self._failure
        reply.set_exception(error)

    async def _close_stream(self) -> None:
        writer = self._writer
        if writer.is_closing():
            return
        writer.close()
        with contextlib.suppress(OSError, asyncio.CancelledError):
            await writer.wait_closed()
