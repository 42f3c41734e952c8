"""UBX primitive value types, message classes and small helpers."""

from enum import Enum, IntEnum

SYNC_CHAR_1 = 0xB5
SYNC_CHAR_2 = 0x62

ACK_NAK = 0x00
ACK_ACK = 0x01


class UbxType(Enum):
    """Value types allowed for configuration items."""

    L = "L"
    U1 = "U1"
    I1 = "I1"
    E1 = "E1"
    X1 = "X1"
    U2 = "U2"
    I2 = "I2"
    E2 = "E2"
    X2 = "X2"
    U4 = "U4"
    I4 = "I4"
    E4 = "E4"
    X4 = "X4"
    R4 = "R4"
    U8 = "U8"
    I8 = "I8"
    X8 = "X8"
    R8 = "R8"


class MsgClass(IntEnum):
    """UBX message class identifiers."""

    NAV = 0x01
    RXM = 0x02
    INF = 0x04
    ACK = 0x05
    CFG = 0x06
    UPD = 0x09
    MON = 0x0A
    TIM = 0x0D
    ESF = 0x10
    MGA = 0x13
    LOG = 0x21
    SEC = 0x27
    HNR = 0x28


_STORAGE_SIZES = {
    UbxType.L: 1,
    UbxType.U1: 1,
    UbxType.I1: 1,
    UbxType.E1: 1,
    UbxType.X1: 1,
    UbxType.U2: 2,
    UbxType.I2: 2,
    UbxType.E2: 2,
    UbxType.X2: 2,
    UbxType.U4: 4,
    UbxType.I4: 4,
    UbxType.E4: 4,
    UbxType.X4: 4,
    UbxType.R4: 4,
    UbxType.U8: 8,
    UbxType.I8: 8,
    UbxType.X8: 8,
    UbxType.R8: 8,
}


def storage_size(ubx_type):
    """Return the number of bytes a value of the given type occupies on the wire."""
    return _STORAGE_SIZES[UbxType(ubx_type)]


def to_hex(value):
    """Format a single byte as two lower-case hex digits."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"byte value out of range: {value}")
    return f"{value:02x}"