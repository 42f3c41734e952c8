"""UBX-ACK payloads."""

from dataclasses import dataclass

from ubxgnss.frame import Payload
from ubxgnss.types import ACK_ACK, ACK_NAK, MsgClass


@dataclass
class AckPayload(Payload):
    """Class and id of the message being acknowledged."""

    msg_class: int = 0
    msg_id: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) == 2:
            return cls(raw=data, msg_class=data[0], msg_id=data[1])
        return cls(raw=data)

    def to_bytes(self):
        return bytes([self.msg_class, self.msg_id])

    def __str__(self):
        return f"class: 0x{self.msg_class:02x} id: 0x{self.msg_id:02x}"


class AckAckPayload(AckPayload):
    """Message acknowledged."""

    MSG_CLASS = MsgClass.ACK
    MSG_ID = ACK_ACK


class AckNakPayload(AckPayload):
    """Message not acknowledged."""

    MSG_CLASS = MsgClass.ACK
    MSG_ID = ACK_NAK