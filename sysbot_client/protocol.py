"""Line protocol codec for the sys-botbase service.

Requests are single ASCII lines, fields separated by one space, numeric
fields rendered as ``0x`` followed by uppercase hexadecimal, and terminated
with CRLF before transmission::

    peek 0x1000 0x4
    setStick LSTICK 100 -200
    clickSeq A,W500,+B,%0,32767

Replies are either ASCII hex text (memory reads, addresses, identifiers)
or short free text (language code, version string). Everything in this
module is pure: no I/O and no state.
"""

from __future__ import annotations

import logging
import string
from typing import Iterable, Sequence

from . import constants
from .errors import DecodeError
from .types import (
    Button,
    ConfigureOption,
    PeekArgs,
    PokeArgs,
    SeqStep,
    Stick,
    StickMovement,
    require_int,
)

LOGGER = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------
def format_hex(value: int) -> str:
    return f"0x{value:X}"


def format_data(data: bytes) -> str:
    """Render a poke buffer as ``0x`` plus two hex digits per byte."""

    return "0x" + bytes(data).hex().upper()


def build_command(name: str, *fields: str) -> str:
    return " ".join((name, *fields))


def encode_command(command: str) -> bytes:
    return (command + constants.LINE_TERMINATOR).encode("ascii")


def hex_reply_size(size: int) -> int:
    """Hex digits the service sends back for a dump of ``size`` bytes."""

    return size * 2


def _jumps(jumps: Sequence[int]) -> list[str]:
    if not jumps:
        raise ValueError("Pointer chain requires at least one jump")
    for jump in jumps:
        if not 0 <= require_int(jump, "Pointer jump") <= constants.U64_MAX:
            raise ValueError(f"Pointer jump out of unsigned 64-bit range: {jump!r}")
    return [format_hex(jump) for jump in jumps]


def peek_command(name: str, args: PeekArgs) -> str:
    return build_command(name, format_hex(args.address), format_hex(args.size))


def peek_multi_command(name: str, args: Iterable[PeekArgs]) -> tuple[str, int]:
    """Build a multi-range read and return it with the total byte count."""

    fields: list[str] = []
    total = 0
    for item in args:
        fields.extend((format_hex(item.address), format_hex(item.size)))
        total += item.size
    if not fields:
        raise ValueError("Multi peek requires at least one range")
    return build_command(name, *fields), total


def poke_command(name: str, args: PokeArgs) -> str:
    return build_command(name, format_hex(args.address), format_data(args.data))


def pointer_command(name: str, jumps: Sequence[int]) -> str:
    return build_command(name, *_jumps(jumps))


def pointer_peek_command(jumps: Sequence[int], size: int) -> str:
    if require_int(size, "Size") <= 0:
        raise ValueError(f"Size must be positive: {size!r}")
    return build_command("pointerPeek", format_hex(size), *_jumps(jumps))


def pointer_poke_command(jumps: Sequence[int], data: bytes) -> str:
    if not data:
        raise ValueError("Poke data must not be empty")
    return build_command("pointerPoke", format_data(data), *_jumps(jumps))


def button_command(name: str, button: Button) -> str:
    return build_command(name, Button(button).value)


def click_sequence_command(steps: Iterable[SeqStep]) -> str:
    rendered = [step.render() for step in steps]
    if not rendered:
        raise ValueError("Click sequence requires at least one step")
    return build_command("clickSeq", ",".join(rendered))


def set_stick_command(stick: Stick, movement: StickMovement) -> str:
    return build_command("setStick", Stick(stick).value, *movement.as_fields())


def configure_command(option: ConfigureOption) -> str:
    return build_command("configure", option.key.value, option.render_value())


def freeze_command(args: PokeArgs) -> str:
    return poke_command("freeze", args)


def unfreeze_command(address: int) -> str:
    if not 0 <= require_int(address, "Address") <= constants.U64_MAX:
        raise ValueError(f"Address out of unsigned 64-bit range: {address!r}")
    return build_command("unFreeze", format_hex(address))


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------
def decode_hex_bytes(payload: bytes) -> bytes:
    """Decode an ASCII hex reply into raw bytes.

    Surrounding CR/LF/NUL framing is ignored. Any other non-hex character is a
    decode failure. When an odd number of digits remains, the incomplete
    trailing chunk becomes ``constants.HEX_SENTINEL_BYTE`` instead of being
    dropped, so callers see that the reply was cut short.
    """

    text = bytes(payload).strip(constants.REPLY_FRAMING)
    try:
        digits = text.decode("ascii")
    except UnicodeDecodeError as exc:
        raise DecodeError("Hex reply is not ASCII", payload) from exc

    if any(char not in _HEX_DIGITS for char in digits):
        raise DecodeError("Hex reply contains non-hex characters", payload)

    result = bytearray()
    for index in range(0, len(digits), 2):
        chunk = digits[index : index + 2]
        if len(chunk) == 2:
            result.append(int(chunk, 16))
        else:
            LOGGER.debug(
                "Incomplete trailing hex chunk %r; substituting 0x%02X",
                chunk,
                constants.HEX_SENTINEL_BYTE,
            )
            result.append(constants.HEX_SENTINEL_BYTE)
    return bytes(result)


def decode_u64(payload: bytes) -> int:
    data = decode_hex_bytes(payload)
    if len(data) < 8:
        raise DecodeError(
            f"Expected at least 8 bytes for a 64-bit value, got {len(data)}", payload
        )
    return int.from_bytes(data[:8], "big")


def _decode_utf8(payload: bytes) -> str:
    try:
        text = bytes(payload).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("Reply is not valid UTF-8", payload) from exc
    return text.replace("\x00", "").strip()


def decode_small_int(payload: bytes, *, maximum: int = 0xFF) -> int:
    text = _decode_utf8(payload)
    try:
        value = int(text, 10)
    except ValueError as exc:
        raise DecodeError("Reply is not a decimal integer", payload) from exc
    if not 0 <= value <= maximum:
        raise DecodeError(f"Integer reply out of range 0..{maximum}", payload)
    return value


def decode_bool(payload: bytes) -> bool:
    if not payload:
        raise DecodeError("Empty reply where a flag was expected", payload)
    return payload[0] != 0


def decode_text(payload: bytes) -> str:
    return _decode_utf8(payload)
