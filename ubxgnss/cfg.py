"""UBX-CFG: configuration value get/set and receiver reset."""

import struct
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Frame, FrameContainer, Payload
from ubxgnss.types import MsgClass, UbxType, storage_size

CFG_RST = 0x04
CFG_VALSET = 0x8A
CFG_VALGET = 0x8B

# Size field (bits 28..30) of a configuration key id -> bytes of storage.
_KEY_SIZES = {1: 1, 2: 1, 3: 2, 4: 4, 5: 8}

_FORMATS = {
    UbxType.U1: "B",
    UbxType.I1: "b",
    UbxType.E1: "B",
    UbxType.X1: "B",
    UbxType.U2: "H",
    UbxType.I2: "h",
    UbxType.E2: "H",
    UbxType.X2: "H",
    UbxType.U4: "I",
    UbxType.I4: "i",
    UbxType.E4: "I",
    UbxType.X4: "I",
    UbxType.R4: "f",
    UbxType.U8: "Q",
    UbxType.I8: "q",
    UbxType.X8: "Q",
    UbxType.R8: "d",
}

# Types a value of which cannot be written in a VALSET message.
_UNENCODABLE = {UbxType.E2, UbxType.E4, UbxType.U8, UbxType.I8, UbxType.X8}


class Layer(IntEnum):
    """Configuration layer read by a VALGET poll."""

    RAM = 0
    BBR = 1
    FLASH = 2
    DEFAULT = 7


@dataclass(frozen=True)
class CfgKeyId:
    """A 32-bit configuration key identifier."""

    value: int

    def __post_init__(self):
        if not 0 <= self.value <= 0xFFFFFFFF:
            raise UbxValueError(f"key id out of range: {self.value}")

    def storage_size(self):
        """Bytes used to store the key's value on the wire."""
        size_code = (self.value >> 28) & 0x7
        try:
            return _KEY_SIZES[size_code]
        except KeyError:
            raise UbxValueError(
                f"key id {self.to_hex()} has invalid size field {size_code}"
            ) from None

    def to_hex(self):
        return f"0x{self.value:08x}"


def _key_id(key):
    if isinstance(key, CfgItem):
        return key.key_id
    if isinstance(key, CfgKeyId):
        return key
    return CfgKeyId(key)


@dataclass
class CfgItem:
    """A named configuration item with its key id and value type."""

    name: str
    key_id: CfgKeyId
    ubx_type: UbxType

    def __post_init__(self):
        if not isinstance(self.key_id, CfgKeyId):
            self.key_id = CfgKeyId(self.key_id)
        self.ubx_type = UbxType(self.ubx_type)


@dataclass(frozen=True)
class KeyValue:
    """A configuration key and its value as stored on the wire."""

    key_id: CfgKeyId
    data: bytes
    ubx_type: UbxType | None = None

    @classmethod
    def from_value(cls, item, value):
        """Encode a Python value for the given item."""
        key_id = item.key_id
        if storage_size(item.ubx_type) != key_id.storage_size():
            raise UbxValueError("wrong value type for " + key_id.to_hex())
        if item.ubx_type is UbxType.L:
            data = bytes([1 if value else 0])
        else:
            try:
                data = struct.pack("<" + _FORMATS[item.ubx_type], value)
            except (struct.error, TypeError):
                raise UbxValueError("wrong value type for " + key_id.to_hex()) from None
        return cls(key_id, data, item.ubx_type)

    @property
    def value(self):
        """The decoded value, or the raw bytes when the type is unknown."""
        if self.ubx_type is None:
            return self.data
        if self.ubx_type is UbxType.L:
            return bool(self.data[0] & 0x01)
        return struct.unpack("<" + _FORMATS[self.ubx_type], self.data)[0]


def encode_key_value(key_value):
    """Return the key id and value of a configuration entry as VALSET bytes."""
    key_id = key_value.key_id
    if key_value.ubx_type is None:
        raise UbxValueError(
            f"ubx_key_id: {key_id.to_hex()} not found in configuration items"
        )
    if key_value.ubx_type in _UNENCODABLE:
        raise UbxValueError(f"ubx_type: {key_value.ubx_type.value} not implemented")
    size = storage_size(key_value.ubx_type)
    if len(key_value.data) != size:
        raise UbxValueError(
            f"value for {key_id.to_hex()} must be {size} bytes, got {len(key_value.data)}"
        )
    return struct.pack("<I", key_id.value) + key_value.data


@dataclass
class CfgValGetPayload(Payload):
    """Poll for, and response with, configuration values."""

    MSG_CLASS = MsgClass.CFG
    MSG_ID = CFG_VALGET

    version: int = 0
    layer: int = Layer.RAM
    position: int = 0
    keys: list = field(default_factory=list)
    cfg_data: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < 4:
            raise UbxValueError(f"CFG-VALGET payload too short: {len(data)} bytes")
        version, layer, position = struct.unpack_from("<BBH", data)
        cfg_data = []
        idx = 4
        while idx < len(data) - 4:
            key_id = CfgKeyId(struct.unpack_from("<I", data, idx)[0])
            idx += 4
            size = key_id.storage_size()
            chunk = data[idx:idx + size]
            if len(chunk) < size:
                raise UbxValueError(f"value for {key_id.to_hex()} is truncated")
            idx += size
            cfg_data.append(KeyValue(key_id, chunk))
        return cls(raw=data, version=version, layer=layer, position=position,
                   cfg_data=cfg_data)

    def poll_payload(self):
        head = struct.pack("<BBH", self.version, self.layer, self.position)
        return head + b"".join(struct.pack("<I", k.value) for k in self.keys)

    def __str__(self):
        parts = [
            f"version: 0x{self.version:02x}",
            f"layer: 0x{self.layer:02x}",
            f"position: 0x{self.position:04x}",
            f"cfg_data - key values({len(self.cfg_data)}):",
        ]
        text = " ".join(parts)
        for kv in self.cfg_data:
            text += f" {kv.key_id.to_hex()}:0x{kv.data.hex()}"
        return text


@dataclass
class CfgValSetPayload(Payload):
    """Set configuration values in one or more layers."""

    MSG_CLASS = MsgClass.CFG
    MSG_ID = CFG_VALSET

    version: int = 0
    ram: bool = False
    bbr: bool = False
    flash: bool = False
    transaction: int = 0
    reserved0: int = 0
    cfg_data: list = field(default_factory=list)

    @property
    def layers(self):
        return int(bool(self.ram)) | int(bool(self.bbr)) << 1 | int(bool(self.flash)) << 2

    def poll_payload(self):
        head = bytes([self.version, self.layers, self.transaction & 0x3, self.reserved0])
        return head + b"".join(encode_key_value(kv) for kv in self.cfg_data)


class NavBbrMask(IntFlag):
    """Battery-backed RAM sections to clear on reset."""

    EPH = 0x0001
    ALM = 0x0002
    HEALTH = 0x0004
    KLOB = 0x0008
    POS = 0x0010
    CLKD = 0x0020
    OSC = 0x0040
    UTC = 0x0080
    RTC = 0x0100
    AOP = 0x0200


NAV_BBR_HOT_START = NavBbrMask(0x0000)
NAV_BBR_WARM_START = NavBbrMask(0x0001)
NAV_BBR_COLD_START = NavBbrMask(0xFFFF)


@dataclass
class CfgRstPayload(Payload):
    """Reset the receiver and clear backup data."""

    MSG_CLASS = MsgClass.CFG
    MSG_ID = CFG_RST

    nav_bbr_mask: int = NAV_BBR_HOT_START
    reset_mode: int = 0
    reserved0: int = 0

    def poll_payload(self):
        return struct.pack("<HBB", int(self.nav_bbr_mask), self.reset_mode, self.reserved0)


class UbxCfg:
    """Builds and sends configuration get, set and reset requests."""

    def __init__(self, comms):
        self.comms = comms
        self.val_get = FrameContainer(CfgValGetPayload)
        self.val_set_payload = CfgValSetPayload()
        self.val_set_frame = None
        self.rst = FrameContainer(CfgRstPayload)

    @property
    def val_get_payload_poll(self):
        return self.val_get.payload_poll

    @property
    def val_get_payload(self):
        return self.val_get.payload

    @property
    def val_get_frame(self):
        return self.val_get.frame

    @property
    def rst_payload_poll(self):
        return self.rst.payload_poll

    def val_get_key_append(self, key):
        self.val_get_payload_poll.keys.append(_key_id(key))

    def val_get_keys_clear(self):
        self.val_get_payload_poll.keys.clear()

    def set_val_get_layer(self, layer):
        try:
            self.val_get_payload_poll.layer = Layer(layer)
        except ValueError:
            raise UbxValueError(f"unknown configuration layer: {layer}") from None

    def val_set_key_append(self, item, value):
        self.val_set_payload.cfg_data.append(KeyValue.from_value(item, value))

    def val_set_key_append_binary(self, item, data):
        size = item.key_id.storage_size()
        data = bytes(data)
        if len(data) < size:
            raise UbxValueError(
                f"value for {item.key_id.to_hex()} needs {size} bytes, got {len(data)}"
            )
        self.val_set_payload.cfg_data.append(KeyValue(item.key_id, data[:size], item.ubx_type))

    def val_set_cfgdata_clear(self):
        self.val_set_payload.cfg_data.clear()

    def val_set_layer_ram(self, bit):
        self.val_set_payload.ram = bool(bit)

    def val_set_layer_bbr(self, bit):
        self.val_set_payload.bbr = bool(bit)

    def val_set_layer_flash(self, bit):
        self.val_set_payload.flash = bool(bit)

    def val_set_transaction(self, action):
        if not 0 <= action <= 3:
            raise UbxValueError("transaction action value must be between 0 and 3")
        self.val_set_payload.transaction = action

    def val_set_frame_poll(self):
        """Build a VALSET frame from the pending configuration data."""
        return Frame(MsgClass.CFG, CFG_VALSET, self.val_set_payload.poll_payload())

    def set_val_get_frame(self, frame):
        self.val_get.set_frame(frame)

    def val_get_poll_async(self):
        frame = self.val_get.make_frame_poll()
        self.comms.write_buffer_async(frame.build())

    def val_get_poll_async_all_layers(self):
        # Defaults first, then RAM, so the active layer's values arrive last.
        self.set_val_get_layer(Layer.DEFAULT)
        self.val_get_poll_async()
        self.set_val_get_layer(Layer.RAM)
        self.val_get_poll_async()

    def val_set_poll_async(self):
        self.val_set_frame = self.val_set_frame_poll()
        self.comms.write_buffer_async(self.val_set_frame.build())

    def val_set_poll_retry_async(self):
        self.val_set_transaction(0)
        self.val_set_poll_async()

    def rst_set_nav_bbr_mask(self, mask):
        self.rst_payload_poll.nav_bbr_mask = NavBbrMask(mask)

    def rst_set_reset_mode(self, mode):
        self.rst_payload_poll.reset_mode = mode

    def rst_command_async(self):
        frame = self.rst.make_frame_poll()
        self.comms.write_buffer_async(frame.build())