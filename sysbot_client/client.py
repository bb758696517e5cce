"""Typed asyncio client for the sys-botbase memory/controller service."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Iterable, Sequence, TypeVar

from . import constants, protocol
from .errors import NotConnectedError, SendError
from .types import (
    Button,
    ConfigureOption,
    PeekArgs,
    PokeArgs,
    SeqStep,
    Stick,
    StickMovement,
)
from .worker import ConnectionWorker, RequestMessage

if TYPE_CHECKING:
    from .config import SysBotConfig

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class SysBotClient:
    """Facade over a single sys-botbase connection.

    All traffic goes through one ``ConnectionWorker``; at most one request is
    in flight at a time, so the client may be shared by several tasks.

    Usage::

        async with await SysBotClient.connect("192.168.0.20", 6000) as client:
            data = await client.peek(PeekArgs(0x1000, 4))
    """

    def __init__(self, worker: ConnectionWorker) -> None:
        self._worker = worker
        self._connected = True

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int = constants.DEFAULT_PORT,
        *,
        timeout: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
        read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE,
    ) -> "SysBotClient":
        """Open a connection and start its worker.

        Raises:
            SysBotConnectionError: If the address is invalid or unreachable.
        """

        worker = await ConnectionWorker.open(
            host, port, timeout=timeout, read_chunk_size=read_chunk_size
        )
        return cls(worker)

    @classmethod
    async def from_config(cls, config: "SysBotConfig") -> "SysBotClient":
        connection = config.connection
        return await cls.connect(
            connection.host,
            connection.port,
            timeout=connection.connect_timeout_seconds,
            read_chunk_size=connection.read_chunk_size,
        )

    @property
    def is_connected(self) -> bool:
        return self._connected and self._worker.is_running

    @property
    def peer(self) -> str:
        return self._worker.peer

    async def __aenter__(self) -> "SysBotClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop the worker and release the socket. Safe to call repeatedly.

        Every caller returns only once the worker has terminated, including
        callers that arrive while another close is still in progress.
        """

        if not self._connected:
            await self._worker.join()
            return
        self._connected = False

        if self._worker.is_running:
            try:
                await self._worker.submit(RequestMessage.closing())
            except SendError as exc:
                LOGGER.warning("Failed to send close message to worker: %s", exc)
            except asyncio.CancelledError:
                await self._worker.abort()
                raise
        await self._worker.join()

    async def aclose(self) -> None:  # alias for explicit closing
        await self.close()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------
    def _check_connected(self) -> None:
        if not self._connected:
            raise NotConnectedError("SysBotClient is closed")
        if not self._worker.is_running:
            raise NotConnectedError(
                "SysBotClient not connected"
            ) from self._worker.failure

    async def _send(self, command: str) -> None:
        self._check_connected()
        await self._worker.submit(RequestMessage(protocol.encode_command(command)))

    async def _request(
        self, command: str, decode: Callable[[bytes], T], *, size: int = 0
    ) -> T:
        self._check_connected()
        reply: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()
        message = RequestMessage(
            protocol.encode_command(command),
            expects_response=True,
            size=size,
            reply=reply,
        )
        await self._worker.submit(message)
        payload = await reply
        return decode(payload)

    async def _peek(self, name: str, args: PeekArgs) -> bytes:
        return await self._request(
            protocol.peek_command(name, args),
            protocol.decode_hex_bytes,
            size=protocol.hex_reply_size(args.size),
        )

    async def _peek_multi(self, name: str, args: Iterable[PeekArgs]) -> bytes:
        command, total = protocol.peek_multi_command(name, args)
        return await self._request(
            command, protocol.decode_hex_bytes, size=protocol.hex_reply_size(total)
        )

    async def _request_u64(self, command: str) -> int:
        return await self._request(
            command, protocol.decode_u64, size=constants.U64_REPLY_SIZE
        )

    # ------------------------------------------------------------------
    # Memory reads
    # ------------------------------------------------------------------
    async def peek(self, args: PeekArgs) -> bytes:
        """Read ``args.size`` bytes at a heap-relative address."""
        return await self._peek("peek", args)

    async def peek_absolute(self, args: PeekArgs) -> bytes:
        return await self._peek("peekAbsolute", args)

    async def peek_main(self, args: PeekArgs) -> bytes:
        """Read ``args.size`` bytes relative to the main module base."""
        return await self._peek("peekMain", args)

    async def peek_multi(self, args: Iterable[PeekArgs]) -> bytes:
        """Read several heap-relative ranges; the result is their concatenation."""
        return await self._peek_multi("peekMulti", args)

    async def peek_absolute_multi(self, args: Iterable[PeekArgs]) -> bytes:
        return await self._peek_multi("peekAbsoluteMulti", args)

    async def peek_main_multi(self, args: Iterable[PeekArgs]) -> bytes:
        return await self._peek_multi("peekMainMulti", args)

    # ------------------------------------------------------------------
    # Memory writes
    # ------------------------------------------------------------------
    async def poke(self, args: PokeArgs) -> None:
        await self._send(protocol.poke_command("poke", args))

    async def poke_absolute(self, args: PokeArgs) -> None:
        await self._send(protocol.poke_command("pokeAbsolute", args))

    async def poke_main(self, args: PokeArgs) -> None:
        await self._send(protocol.poke_command("pokeMain", args))

    # ------------------------------------------------------------------
    # Controller input
    # ------------------------------------------------------------------
    async def click(self, button: Button) -> None:
        await self._send(protocol.button_command("click", button))

    async def press(self, button: Button) -> None:
        await self._send(protocol.button_command("press", button))

    async def release(self, button: Button) -> None:
        await self._send(protocol.button_command("release", button))

    async def click_sequence(self, steps: Iterable[SeqStep]) -> None:
        await self._send(protocol.click_sequence_command(steps))

    async def click_cancel(self) -> None:
        """Abort a running click sequence."""
        await self._send("clickCancel")

    async def set_stick(self, stick: Stick, x: int, y: int) -> None:
        await self._send(protocol.set_stick_command(stick, StickMovement(x, y)))

    async def detach_controller(self) -> None:
        await self._send("detachController")

    async def configure(self, option: ConfigureOption) -> None:
        await self._send(protocol.configure_command(option))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    async def get_title_id(self) -> int:
        return await self._request_u64("getTitleID")

    async def get_system_language(self) -> int:
        return await self._request("getSystemLanguage", protocol.decode_small_int)

    async def get_main_nso_base(self) -> int:
        return await self._request_u64("getMainNsoBase")

    async def get_build_id(self) -> int:
        return await self._request_u64("getBuildID")

    async def get_heap_base(self) -> int:
        return await self._request_u64("getHeapBase")

    async def is_program_running(self) -> bool:
        """Probe the heap base; a reply led by a NUL byte means no program."""
        return await self._request(
            "getHeapBase", protocol.decode_bool, size=constants.U64_REPLY_SIZE
        )

    async def get_version(self) -> str:
        return await self._request("getVersion", protocol.decode_text)

    # ------------------------------------------------------------------
    # Pointer chains
    # ------------------------------------------------------------------
    async def pointer(self, jumps: Sequence[int]) -> int:
        """Resolve a pointer chain starting at the main module base."""
        return await self._request_u64(protocol.pointer_command("pointer", jumps))

    async def pointer_all(self, jumps: Sequence[int]) -> int:
        return await self._request_u64(protocol.pointer_command("pointerAll", jumps))

    async def pointer_relative(self, jumps: Sequence[int]) -> int:
        return await self._request_u64(
            protocol.pointer_command("pointerRelative", jumps)
        )

    async def pointer_peek(self, jumps: Sequence[int], size: int) -> bytes:
        return await self._request(
            protocol.pointer_peek_command(jumps, size),
            protocol.decode_hex_bytes,
            size=protocol.hex_reply_size(size),
        )

    async def pointer_poke(self, jumps: Sequence[int], data: bytes) -> None:
        await self._send(protocol.pointer_poke_command(jumps, data))

    # ------------------------------------------------------------------
    # Freezes
    # ------------------------------------------------------------------
    async def freeze(self, args: PokeArgs) -> None:
        await self._send(protocol.freeze_command(args))

    async def unfreeze(self, address: int) -> None:
        await self._send(protocol.unfreeze_command(address))

    async def freeze_clear(self) -> None:
        await self._send("freezeClear")

    async def freeze_pause(self) -> None:
        await self._send("freezePause")

    async def freeze_unpause(self) -> None:
        await self._send("freezeUnpause")


async def connect(
    host: str,
    port: int = constants.DEFAULT_PORT,
    *,
    timeout: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
    read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE,
) -> SysBotClient:
    """Shorthand for ``SysBotClient.connect``."""

    return await SysBotClient.connect(
        host, port, timeout=timeout, read_chunk_size=read_chunk_size
    )
