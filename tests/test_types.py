import pytest

from sysbot_client.types import (
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


def test_button_wire_names():
    assert Button.DLEFT.value == "DL"
    assert Button.DUP.value == "DU"
    assert Button.DDOWN.value == "DD"
    assert Button.DRIGHT.value == "DR"
    assert Button.for_stick(Stick.LEFT) is Button.LSTICK
    assert Button.for_stick(Stick.RIGHT) is Button.RSTICK


def test_stick_wire_names():
    assert Stick.LEFT.value == "LSTICK"
    assert Stick.RIGHT.value == "RSTICK"


def test_hid_device_type_numbers_are_not_contiguous():
    assert HidDeviceType.FULL_KEY_15 == 15
    assert HidDeviceType.DEBUG_PAD == 17
    assert HidDeviceType.LAGER == 28
    with pytest.raises(ValueError):
        HidDeviceType(14)


@pytest.mark.parametrize("x,y", [(32768, 0), (0, -32769)])
def test_stick_movement_rejects_out_of_range(x, y):
    with pytest.raises(ValueError):
        StickMovement(x, y)


def test_stick_movement_renderings():
    movement = StickMovement(-1, 2)

    assert movement.as_sequence() == "-1,2"
    assert movement.as_fields() == ("-1", "2")


def test_seq_step_wait_rejects_negative_duration():
    with pytest.raises(ValueError):
        SeqStep.wait(-1)


def test_seq_step_accepts_button_values():
    assert SeqStep.click("HOME").render() == "HOME"


def test_configure_option_rejects_negative_numbers():
    with pytest.raises(ValueError):
        ConfigureOption.freeze_rate(-5)
    with pytest.raises(ValueError):
        ConfigureOption.key_sleep_time(True)


def test_configure_option_keys():
    assert ConfigureOption.finger_diameter(50).key is ConfigureKey.FINGER_DIAMETER
    assert ConfigureOption.print_debug_result_codes(False).render_value() == "false"
    assert (
        ConfigureOption.controller_type(HidDeviceType.PALMA).render_value() == "12"
    )


@pytest.mark.parametrize(
    "address,size", [(-1, 4), (2**64, 4), (0, 0), (0x10, -2)]
)
def test_peek_args_validation(address, size):
    with pytest.raises(ValueError):
        PeekArgs(address, size)


def test_poke_args_rejects_empty_data():
    with pytest.raises(ValueError):
        PokeArgs(0x10, b"")


@pytest.mark.parametrize("value", [1.5, True, "1"])
def test_stick_movement_rejects_non_integers(value):
    with pytest.raises(ValueError):
        StickMovement(value, 0)
    with pytest.raises(ValueError):
        StickMovement(0, value)


@pytest.mark.parametrize("value", [1.5, True, 100.0])
def test_integer_fields_reject_non_integers(value):
    with pytest.raises(ValueError):
        SeqStep.wait(value)
    with pytest.raises(ValueError):
        ConfigureOption.poll_rate(value)
    with pytest.raises(ValueError):
        PeekArgs(value, 4)
    with pytest.raises(ValueError):
        PeekArgs(0x10, value)
    with pytest.raises(ValueError):
        PokeArgs(value, b"\x01")
