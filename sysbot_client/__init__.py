"""Asyncio client for the sys-botbase memory inspection and controller service."""

from .client import SysBotClient, connect
from .errors import (
    DecodeError,
    NotConnectedError,
    ReceiveError,
    SendError,
    SysBotConnectionError,
    SysBotError,
)
from .types import (
    Button,
    ConfigureKey,
    ConfigureOption,
    HidDeviceType,
    PeekArgs,
    PokeArgs,
    SeqStep,
    Stick,
    StickMovement,
)
from .worker import ConnectionWorker, RequestMessage, WorkerState

__version__ = "0.1.0"

__all__ = [
    "Button",
    "ConfigureKey",
    "ConfigureOption",
    "ConnectionWorker",
    "DecodeError",
    "HidDeviceType",
    "NotConnectedError",
    "PeekArgs",
    "PokeArgs",
    "ReceiveError",
    "RequestMessage",
    "SendError",
    "SeqStep",
    "Stick",
    "StickMovement",
    "SysBotClient",
    "SysBotConnectionError",
    "SysBotError",
    "WorkerState",
    "connect",
]
