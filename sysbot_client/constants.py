"""Constants used across the sysbot-client package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "sysbot-client"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_LOG_PATH: Path | None = None

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6000

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_READ_CHUNK_SIZE = 1024

LINE_TERMINATOR = "\r\n"

# Bytes the decoders strip around a reply.
REPLY_FRAMING = b"\r\n\x00"
# Terminator bytes left over from the previous reply, skipped before reading.
LINE_FRAMING = b"\r\n"
U64_REPLY_SIZE = 8 * 2

# Byte substituted for an incomplete trailing hex chunk.
HEX_SENTINEL_BYTE = 0x0A

U64_MAX = 2**64 - 1
I16_MIN = -(2**15)
I16_MAX = 2**15 - 1
