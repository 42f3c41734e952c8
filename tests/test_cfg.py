import struct

import pytest

from ubxgnss.cfg import (
    NAV_BBR_COLD_START,
    CfgItem,
    CfgKeyId,
    CfgRstPayload,
    CfgValGetPayload,
    CfgValSetPayload,
    KeyValue,
    Layer,
    UbxCfg,
    encode_key_value,
)
from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Frame
from ubxgnss.types import MsgClass, UbxType

RATE_ITEM = CfgItem("TEST-RATE", 0x30210001, UbxType.U2)
FLAG_ITEM = CfgItem("TEST-FLAG", 0x10740001, UbxType.L)
WIDE_ITEM = CfgItem("TEST-WIDE", 0x50000001, UbxType.U8)
FLOAT_ITEM = CfgItem("TEST-FLOAT", 0x40000002, UbxType.R4)


class FakeComms:
    def __init__(self):
        self.writes = []

    def write_buffer_async(self, data):
        self.writes.append(bytes(data))


@pytest.fixture
def comms():
    return FakeComms()


@pytest.fixture
def cfg(comms):
    return UbxCfg(comms)


@pytest.mark.parametrize(
    "key, size",
    [(0x10740001, 1), (0x20910001, 1), (0x30210001, 2), (0x40520001, 4), (0x50000001, 8)],
)
def test_key_storage_size(key, size):
    assert CfgKeyId(key).storage_size() == size


def test_key_invalid_size_field_raises():
    with pytest.raises(UbxValueError):
        CfgKeyId(0x70000001).storage_size()


def test_key_to_hex_is_zero_padded():
    assert CfgKeyId(0x30210001).to_hex() == "0x30210001"


def test_encode_u2_value():
    kv = KeyValue.from_value(RATE_ITEM, 1000)
    assert encode_key_value(kv) == struct.pack("<IH", 0x30210001, 1000)
    assert kv.value == 1000


def test_encode_bool_value():
    kv = KeyValue.from_value(FLAG_ITEM, True)
    encoded = encode_key_value(kv)
    assert encoded[:4] == struct.pack("<I", 0x10740001)
    assert encoded[4:] == b"\x01"
    assert kv.value is True


def test_float_value_round_trips():
    kv = KeyValue.from_value(FLOAT_ITEM, 0.5)
    assert kv.value == 0.5


def test_encode_unknown_type_raises():
    with pytest.raises(UbxValueError, match="not found"):
        encode_key_value(KeyValue(CfgKeyId(0x30210001), b"\x01\x00"))


def test_encode_unimplemented_type_raises():
    kv = KeyValue.from_value(WIDE_ITEM, 5)
    with pytest.raises(UbxValueError, match="not implemented"):
        encode_key_value(kv)


def test_wrong_value_type_raises(cfg):
    with pytest.raises(UbxValueError, match="wrong value type"):
        cfg.val_set_key_append(RATE_ITEM, 1.5)
    with pytest.raises(UbxValueError):
        cfg.val_set_key_append(RATE_ITEM, 70000)
    assert cfg.val_set_payload.cfg_data == []


def test_mismatched_item_type_raises(cfg):
    item = CfgItem("TEST-BAD", 0x30210001, UbxType.U4)
    with pytest.raises(UbxValueError):
        cfg.val_set_key_append(item, 1)


def test_valget_parse_and_str():
    data = bytes([1, 0]) + struct.pack("<H", 0) + struct.pack("<IH", 0x30210001, 1000)
    payload = CfgValGetPayload.from_bytes(data)
    assert payload.version == 1
    assert payload.layer == Layer.RAM
    assert [kv.key_id for kv in payload.cfg_data] == [CfgKeyId(0x30210001)]
    assert payload.cfg_data[0].data == struct.pack("<H", 1000)
    assert str(payload) == (
        "version: 0x01 layer: 0x00 position: 0x0000 "
        "cfg_data - key values(1): 0x30210001:0xe803"
    )


def test_valget_parse_several_keys():
    data = (bytes([1, 7, 0, 0]) + struct.pack("<IB", 0x10740001, 1)
            + struct.pack("<IH", 0x30210001, 200))
    payload = CfgValGetPayload.from_bytes(data)
    assert payload.layer == Layer.DEFAULT
    assert [kv.key_id.value for kv in payload.cfg_data] == [0x10740001, 0x30210001]
    assert payload.cfg_data[0].data == b"\x01"


def test_valget_poll_payload_contains_keys():
    payload = CfgValGetPayload(layer=Layer.FLASH, keys=[CfgKeyId(0x30210001)])
    assert payload.poll_payload() == bytes([0, 2, 0, 0]) + struct.pack("<I", 0x30210001)


def test_val_get_poll_all_layers(cfg, comms):
    cfg.val_get_key_append(RATE_ITEM)
    cfg.val_get_key_append(0x10740001)
    cfg.val_get_poll_async_all_layers()
    assert len(comms.writes) == 2
    frames = [Frame.from_bytes(w) for w in comms.writes]
    assert [f.payload[1] for f in frames] == [Layer.DEFAULT, Layer.RAM]
    for frame in frames:
        assert frame.msg_class == MsgClass.CFG
        assert frame.msg_id == CfgValGetPayload.MSG_ID
        assert frame.checksum() == (frame.ck_a, frame.ck_b)
        assert frame.payload[4:] == struct.pack("<II", 0x30210001, 0x10740001)


def test_val_get_keys_clear(cfg):
    cfg.val_get_key_append(RATE_ITEM)
    cfg.val_get_keys_clear()
    assert cfg.val_get_payload_poll.keys == []


def test_set_invalid_layer_raises(cfg):
    with pytest.raises(UbxValueError):
        cfg.set_val_get_layer(5)


def test_set_val_get_frame(cfg):
    body = bytes([0, 0, 0, 0]) + struct.pack("<IH", 0x30210001, 250)
    cfg.set_val_get_frame(Frame(MsgClass.CFG, CfgValGetPayload.MSG_ID, body))
    assert cfg.val_get_payload.cfg_data[0].key_id == RATE_ITEM.key_id
    assert cfg.val_get_frame.payload == body


def test_set_val_get_frame_wrong_id_raises(cfg):
    with pytest.raises(UbxValueError):
        cfg.set_val_get_frame(Frame(MsgClass.CFG, CfgValSetPayload.MSG_ID, b""))


def test_val_set_poll_async(cfg, comms):
    cfg.val_set_layer_ram(True)
    cfg.val_set_layer_flash(True)
    cfg.val_set_transaction(1)
    cfg.val_set_key_append(RATE_ITEM, 1000)
    cfg.val_set_key_append(FLAG_ITEM, False)
    cfg.val_set_poll_async()
    frame = Frame.from_bytes(comms.writes[0])
    assert frame == cfg.val_set_frame
    assert frame.msg_id == CfgValSetPayload.MSG_ID
    assert frame.payload == (
        bytes([0, 0b101, 1, 0])
        + struct.pack("<IH", 0x30210001, 1000)
        + struct.pack("<IB", 0x10740001, 0)
    )


def test_val_set_retry_resets_transaction(cfg, comms):
    cfg.val_set_transaction(3)
    cfg.val_set_poll_retry_async()
    frame = Frame.from_bytes(comms.writes[-1])
    assert frame.payload[2] == 0
    assert cfg.val_set_payload.transaction == 0


def test_val_set_transaction_out_of_range(cfg):
    with pytest.raises(UbxValueError, match="between 0 and 3"):
        cfg.val_set_transaction(4)


def test_val_set_cfgdata_clear(cfg):
    cfg.val_set_key_append(RATE_ITEM, 5)
    cfg.val_set_cfgdata_clear()
    assert cfg.val_set_frame_poll().payload == bytes(4)


def test_val_set_binary_append(cfg):
    cfg.val_set_key_append_binary(RATE_ITEM, b"\x10\x20\x30")
    assert cfg.val_set_payload.cfg_data[0].data == b"\x10\x20"
    with pytest.raises(UbxValueError):
        cfg.val_set_key_append_binary(RATE_ITEM, b"\x10")


def test_val_set_layers_bitmask():
    payload = CfgValSetPayload(bbr=True)
    assert payload.layers == 0b010


def test_rst_command(cfg, comms):
    cfg.rst_set_nav_bbr_mask(NAV_BBR_COLD_START)
    cfg.rst_set_reset_mode(1)
    cfg.rst_command_async()
    frame = Frame.from_bytes(comms.writes[0])
    assert frame.msg_id == CfgRstPayload.MSG_ID
    assert frame.payload == struct.pack("<HBB", 0xFFFF, 1, 0)


def test_rst_default_is_hot_start():
    assert CfgRstPayload().poll_payload() == bytes(4)