"""Typed values accepted by the client operations.

Every enumeration here is closed: the wire name of a member is its value,
so rendering a command never involves free-form strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

from . import constants


def require_int(value: object, what: str) -> int:
    """Reject anything but a plain ``int``; ``bool`` and ``float`` included."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer: {value!r}")
    return value


def _check_address(value: int) -> int:
    if not 0 <= require_int(value, "Address") <= constants.U64_MAX:
        raise ValueError(f"Address out of unsigned 64-bit range: {value!r}")
    return value


def _check_size(value: int) -> int:
    if require_int(value, "Size") <= 0:
        raise ValueError(f"Size must be positive: {value!r}")
    return value


class Stick(str, Enum):
    """Analog sticks addressable by `setStick`."""

    LEFT = "LSTICK"
    RIGHT = "RSTICK"


class Button(str, Enum):
    """Controller buttons understood by click/press/release."""

    A = "A"
    B = "B"
    X = "X"
    Y = "Y"
    LSTICK = "LSTICK"
    """Left stick click."""
    RSTICK = "RSTICK"
    """Right stick click."""
    L = "L"
    R = "R"
    ZL = "ZL"
    ZR = "ZR"
    PLUS = "PLUS"
    MINUS = "MINUS"
    DLEFT = "DL"
    DUP = "DU"
    DDOWN = "DD"
    DRIGHT = "DR"
    HOME = "HOME"
    CAPTURE = "CAPTURE"

    @classmethod
    def for_stick(cls, stick: Stick) -> "Button":
        return cls.LSTICK if stick is Stick.LEFT else cls.RSTICK


class HidDeviceType(IntEnum):
    """Controller hardware the service emulates when injecting input."""

    JOY_RIGHT_1 = 1
    JOY_LEFT_2 = 2
    FULL_KEY_3 = 3
    JOY_LEFT_4 = 4
    JOY_RIGHT_5 = 5
    FULL_KEY_6 = 6
    LARK_HVC_LEFT = 7
    LARK_HVC_RIGHT = 8
    LARK_NES_LEFT = 9
    LARK_NES_RIGHT = 10
    LUCIA = 11
    PALMA = 12
    FULL_KEY_13 = 13
    FULL_KEY_15 = 15
    DEBUG_PAD = 17
    SYSTEM_19 = 19
    SYSTEM_20 = 20
    SYSTEM_21 = 21
    LAGON = 22
    LAGER = 28


@dataclass(frozen=True, slots=True)
class StickMovement:
    """Signed 16-bit stick deflection."""

    x: int
    y: int

    def __post_init__(self) -> None:
        for axis in (self.x, self.y):
            value = require_int(axis, "Stick deflection")
            if not constants.I16_MIN <= value <= constants.I16_MAX:
                raise ValueError(f"Stick deflection out of 16-bit range: {axis!r}")

    def as_sequence(self) -> str:
        return f"{self.x},{self.y}"

    def as_fields(self) -> tuple[str, str]:
        return str(self.x), str(self.y)


class SeqKind(str, Enum):
    CLICK = "click"
    PRESS = "press"
    RELEASE = "release"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    WAIT = "wait"


@dataclass(frozen=True, slots=True)
class SeqStep:
    """One item of a `clickSeq` command.

    Use the classmethod constructors rather than building instances directly.
    """

    kind: SeqKind
    value: Union[Button, StickMovement, int]

    @classmethod
    def click(cls, button: Button) -> "SeqStep":
        return cls(SeqKind.CLICK, Button(button))

    @classmethod
    def press(cls, button: Button) -> "SeqStep":
        return cls(SeqKind.PRESS, Button(button))

    @classmethod
    def release(cls, button: Button) -> "SeqStep":
        return cls(SeqKind.RELEASE, Button(button))

    @classmethod
    def move_left(cls, x: int, y: int) -> "SeqStep":
        return cls(SeqKind.MOVE_LEFT, StickMovement(x, y))

    @classmethod
    def move_right(cls, x: int, y: int) -> "SeqStep":
        return cls(SeqKind.MOVE_RIGHT, StickMovement(x, y))

    @classmethod
    def wait(cls, milliseconds: int) -> "SeqStep":
        if require_int(milliseconds, "Wait") < 0:
            raise ValueError(f"Wait must be non-negative: {milliseconds!r}")
        return cls(SeqKind.WAIT, milliseconds)

    def render(self) -> str:
        value = self.value
        if self.kind is SeqKind.CLICK:
            return value.value
        if self.kind is SeqKind.PRESS:
            return f"+{value.value}"
        if self.kind is SeqKind.RELEASE:
            return f"-{value.value}"
        if self.kind is SeqKind.MOVE_LEFT:
            return f"%{value.as_sequence()}"
        if self.kind is SeqKind.MOVE_RIGHT:
            return f"&{value.as_sequence()}"
        if self.kind is SeqKind.WAIT:
            return f"W{value}"
        raise ValueError(f"Unknown sequence step kind: {self.kind!r}")


class ConfigureKey(str, Enum):
    """Runtime tunables accepted by `configure`."""

    MAIN_LOOP_SLEEP_TIME = "mainLoopSleepTime"
    BUTTON_CLICK_SLEEP_TIME = "buttonClickSleepTime"
    ECHO_COMMANDS = "echoCommands"
    PRINT_DEBUG_RESULT_CODES = "printDebugResultCodes"
    KEY_SLEEP_TIME = "keySleepTime"
    FINGER_DIAMETER = "fingerDiameter"
    POLL_RATE = "pollRate"
    FREEZE_RATE = "freezeRate"
    CONTROLLER_TYPE = "controllerType"


def _check_unsigned(value: int) -> int:
    if require_int(value, "Configure value") < 0:
        raise ValueError(f"Expected a non-negative integer: {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class ConfigureOption:
    """A single `configure <key> <value>` setting."""

    key: ConfigureKey
    value: Union[int, bool, HidDeviceType]

    @classmethod
    def main_loop_sleep_time(cls, milliseconds: int) -> "ConfigureOption":
        return cls(ConfigureKey.MAIN_LOOP_SLEEP_TIME, _check_unsigned(milliseconds))

    @classmethod
    def button_click_sleep_time(cls, milliseconds: int) -> "ConfigureOption":
        return cls(ConfigureKey.BUTTON_CLICK_SLEEP_TIME, _check_unsigned(milliseconds))

    @classmethod
    def echo_commands(cls, enabled: bool) -> "ConfigureOption":
        return cls(ConfigureKey.ECHO_COMMANDS, bool(enabled))

    @classmethod
    def print_debug_result_codes(cls, enabled: bool) -> "ConfigureOption":
        return cls(ConfigureKey.PRINT_DEBUG_RESULT_CODES, bool(enabled))

    @classmethod
    def key_sleep_time(cls, milliseconds: int) -> "ConfigureOption":
        return cls(ConfigureKey.KEY_SLEEP_TIME, _check_unsigned(milliseconds))

    @classmethod
    def finger_diameter(cls, diameter: int) -> "ConfigureOption":
        return cls(ConfigureKey.FINGER_DIAMETER, _check_unsigned(diameter))

    @classmethod
    def poll_rate(cls, milliseconds: int) -> "ConfigureOption":
        return cls(ConfigureKey.POLL_RATE, _check_unsigned(milliseconds))

    @classmethod
    def freeze_rate(cls, milliseconds: int) -> "ConfigureOption":
        return cls(ConfigureKey.FREEZE_RATE, _check_unsigned(milliseconds))

    @classmethod
    def controller_type(cls, device: HidDeviceType) -> "ConfigureOption":
        return cls(ConfigureKey.CONTROLLER_TYPE, HidDeviceType(device))

    def render_value(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(int(self.value))


@dataclass(frozen=True, slots=True)
class PeekArgs:
    address: int
    size: int

    def __post_init__(self) -> None:
        _check_address(self.address)
        _check_size(self.size)


@dataclass(frozen=True, slots=True)
class PokeArgs:
    address: int
    data: bytes

    def __post_init__(self) -> None:
        _check_address(self.address)
        if not self.data:
            raise ValueError("Poke data must not be empty")
