"""Tests for the line protocol codec."""

import pytest

from sysbot_client import protocol
from sysbot_client.constants import HEX_SENTINEL_BYTE
from sysbot_client.errors import DecodeError
from sysbot_client.types import (
    Button,
    ConfigureOption,
    HidDeviceType,
    PeekArgs,
    PokeArgs,
    SeqStep,
    Stick,
    StickMovement,
)


def test_format_hex_uses_uppercase_with_prefix():
    assert protocol.format_hex(0) == "0x0"
    assert protocol.format_hex(0xDEADBEEF) == "0xDEADBEEF"
    assert protocol.format_hex(2**64 - 1) == "0xFFFFFFFFFFFFFFFF"


def test_format_data_zero_pads_each_byte():
    assert protocol.format_data(b"\x05\x00\xab") == "0x0500AB"


def test_encode_command_appends_crlf():
    assert protocol.encode_command("getVersion") == b"getVersion\r\n"


def test_peek_command():
    command = protocol.peek_command("peek", PeekArgs(0x1000, 4))
    assert command == "peek 0x1000 0x4"


def test_peek_multi_command_returns_total_size():
    command, total = protocol.peek_multi_command(
        "peekMainMulti", [PeekArgs(0x10, 2), PeekArgs(0x20, 0x10)]
    )

    assert command == "peekMainMulti 0x10 0x2 0x20 0x10"
    assert total == 0x12


def test_peek_multi_command_rejects_empty_ranges():
    with pytest.raises(ValueError):
        protocol.peek_multi_command("peekMulti", [])


def test_poke_command():
    command = protocol.poke_command("pokeAbsolute", PokeArgs(0xABC, b"\x01\x02"))
    assert command == "pokeAbsolute 0xABC 0x0102"


def test_pointer_commands():
    assert protocol.pointer_command("pointer", [0x10, 0x20]) == "pointer 0x10 0x20"
    assert protocol.pointer_peek_command([0x4], 8) == "pointerPeek 0x8 0x4"
    assert (
        protocol.pointer_poke_command([0x4, 0x8], b"\xff")
        == "pointerPoke 0xFF 0x4 0x8"
    )


@pytest.mark.parametrize("jumps", [[], [-1], [2**64]])
def test_pointer_command_rejects_invalid_jumps(jumps):
    with pytest.raises(ValueError):
        protocol.pointer_command("pointer", jumps)


def test_set_stick_command():
    command = protocol.set_stick_command(Stick.LEFT, StickMovement(100, -200))
    assert protocol.encode_command(command) == b"setStick LSTICK 100 -200\r\n"


def test_click_sequence_command_renders_every_step_kind():
    command = protocol.click_sequence_command(
        [
            SeqStep.click(Button.A),
            SeqStep.press(Button.ZL),
            SeqStep.release(Button.ZL),
            SeqStep.move_left(0, 32767),
            SeqStep.move_right(-32768, 5),
            SeqStep.wait(500),
            SeqStep.click(Button.DLEFT),
        ]
    )

    assert command == "clickSeq A,+ZL,-ZL,%0,32767,&-32768,5,W500,DL"


def test_configure_command_renders_values():
    assert (
        protocol.configure_command(ConfigureOption.echo_commands(True))
        == "configure echoCommands true"
    )
    assert (
        protocol.configure_command(ConfigureOption.poll_rate(17))
        == "configure pollRate 17"
    )
    assert (
        protocol.configure_command(
            ConfigureOption.controller_type(HidDeviceType.LAGER)
        )
        == "configure controllerType 28"
    )


def test_freeze_commands():
    assert (
        protocol.freeze_command(PokeArgs(0x100, b"\x00\x01"))
        == "freeze 0x100 0x0001"
    )
    assert protocol.unfreeze_command(0x100) == "unFreeze 0x100"


def test_decode_hex_bytes_round_trip():
    data = bytes(range(256))
    assert protocol.decode_hex_bytes(data.hex().upper().encode()) == data
    assert protocol.decode_hex_bytes(data.hex().encode()) == data


def test_decode_hex_bytes_ignores_line_terminator():
    assert protocol.decode_hex_bytes(b"DEADBEEF\n") == b"\xde\xad\xbe\xef"
    assert protocol.decode_hex_bytes(b"DEADBEEF\r\n") == b"\xde\xad\xbe\xef"


def test_decode_hex_bytes_odd_length_appends_sentinel():
    decoded = protocol.decode_hex_bytes(b"DEADBEE")

    assert decoded == b"\xde\xad\xbe" + bytes([HEX_SENTINEL_BYTE])
    assert decoded != b"\xde\xad\xbe"


@pytest.mark.parametrize("payload", [b"DEADBEEG", b"12 34", "éé".encode()])
def test_decode_hex_bytes_rejects_malformed_payload(payload):
    with pytest.raises(DecodeError) as excinfo:
        protocol.decode_hex_bytes(payload)

    assert excinfo.value.payload == payload


def test_decode_u64_reads_first_eight_bytes_big_endian():
    value = 0x0100000000001234
    payload = value.to_bytes(8, "big").hex().encode() + b"\n"

    assert protocol.decode_u64(payload) == value


def test_decode_u64_rejects_truncated_payload():
    with pytest.raises(DecodeError):
        protocol.decode_u64(b"00112233")


def test_decode_small_int_strips_nul_and_whitespace():
    assert protocol.decode_small_int(b" 12\n\x00\x00") == 12


@pytest.mark.parametrize("payload", [b"", b"abc", b"256", b"\xff"])
def test_decode_small_int_rejects_invalid_payload(payload):
    with pytest.raises(DecodeError):
        protocol.decode_small_int(payload)


def test_decode_bool():
    assert protocol.decode_bool(b"1") is True
    assert protocol.decode_bool(b"\x00\x00") is False
    with pytest.raises(DecodeError):
        protocol.decode_bool(b"")


def test_decode_text_trims_padding():
    assert protocol.decode_text(b"v1.2 \x00\x00") == "v1.2"


def test_decode_text_rejects_invalid_utf8():
    with pytest.raises(DecodeError):
        protocol.decode_text(b"\xc3\x28")


@pytest.mark.parametrize("value", [1.5, True])
def test_pointer_and_unfreeze_reject_non_integers(value):
    with pytest.raises(ValueError):
        protocol.pointer_command("pointer", [0x10, value])
    with pytest.raises(ValueError):
        protocol.pointer_peek_command([0x10], value)
    with pytest.raises(ValueError):
        protocol.unfreeze_command(value)
