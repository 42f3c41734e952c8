import pytest

from ubxgnss.types import (
    SYNC_CHAR_1,
    SYNC_CHAR_2,
    MsgClass,
    UbxType,
    storage_size,
    to_hex,
)


@pytest.mark.parametrize("ubx_type", [t for t in UbxType if t is not UbxType.L])
def test_storage_size_matches_width_in_type_name(ubx_type):
    assert storage_size(ubx_type) == int(ubx_type.name[1:])


def test_storage_size_of_boolean_is_one_byte():
    assert storage_size(UbxType.L) == storage_size(UbxType.U1)


def test_storage_size_accepts_type_name():
    assert storage_size("R8") == storage_size(UbxType.R8)


def test_storage_size_rejects_unknown_type():
    with pytest.raises(ValueError):
        storage_size("Q3")


def test_sync_chars_as_hex():
    assert to_hex(SYNC_CHAR_1) + to_hex(SYNC_CHAR_2) == "b562"


def test_ack_class_as_hex():
    assert to_hex(MsgClass.ACK) == "05"


def test_to_hex_sync_char():
    assert to_hex(SYNC_CHAR_1) == "b5"


@pytest.mark.parametrize("value", range(256))
def test_to_hex_round_trip(value):
    text = to_hex(value)
    assert len(text) == 2
    assert int(text, 16) == value


@pytest.mark.parametrize("value", [-1, 256])
def test_to_hex_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        to_hex(value)