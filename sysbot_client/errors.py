"""Exception hierarchy for sysbot-client."""

from __future__ import annotations

from typing import Optional


class SysBotError(RuntimeError):
    """Base class for every error raised by the client."""


class SysBotConnectionError(SysBotError):
    """Raised when the address cannot be parsed or the connection cannot be established."""


class NotConnectedError(SysBotError):
    """Raised when an operation is attempted after close or worker termination."""


class SendError(SysBotError):
    """Raised when a request cannot be handed to the connection worker."""


class ReceiveError(SysBotError):
    """Raised when the worker terminates before delivering a response."""


class DecodeError(SysBotError):
    """Raised when a response payload cannot be decoded."""

    def __init__(self, message: str, payload: Optional[bytes] = None) -> None:
        if payload is not None:
            message = f"{message} (payload={payload!r})"
        super().__init__(message)
        self.payload = payload
