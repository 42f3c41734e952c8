"""UBX-NAV-STATUS: receiver navigation status."""

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.nav_relposned import CarrierSolution
from ubxgnss.types import MsgClass

NAV_STATUS = 0x03

_STATUS = struct.Struct("<IBBBBII")


class GpsFix(IntEnum):
    """GPS fix type."""

    NO_FIX = 0
    DEAD_RECKONING_ONLY = 1
    FIX_2D = 2
    FIX_3D = 3
    GPS_PLUS_DEAD_RECKONING = 4
    TIME_ONLY = 5


class MapMatchingStatus(IntEnum):
    """Map matching status."""

    NONE = 0
    VALID_NOT_USED = 1
    VALID_AND_USED = 2
    VALID_DEAD_RECKONING = 3


class PsmState(IntEnum):
    """Power save mode state."""

    ACQUISITION = 0
    TRACKING = 1
    POWER_OPTIMIZED_TRACKING = 2
    INACTIVE = 3


class SpoofDetState(IntEnum):
    """Spoofing detection state."""

    UNKNOWN_OR_DEACTIVATED = 0
    NO_SPOOFING = 1
    SPOOFING = 2
    MULTIPLE_SPOOFING = 3


def _enum(enum_type, value):
    try:
        return enum_type(value)
    except ValueError:
        return value


def _bit(value, position):
    return bool((value >> position) & 0x1)


@dataclass(frozen=True)
class NavStatusFlags:
    """Navigation status flags."""

    gps_fix_ok: bool = False
    diff_soln: bool = False
    wkn_set: bool = False
    tow_set: bool = False


@dataclass(frozen=True)
class NavFixStatus:
    """Fix status information."""

    diff_corr: bool = False
    carr_soln_valid: bool = False
    map_matching: MapMatchingStatus = MapMatchingStatus.NONE


@dataclass(frozen=True)
class NavStatusFlags2:
    """Further information about the navigation output."""

    psm_state: PsmState = PsmState.ACQUISITION
    spoof_det_state: SpoofDetState = SpoofDetState.UNKNOWN_OR_DEACTIVATED
    carr_soln: int = CarrierSolution.NONE


def _flags(value):
    return NavStatusFlags(_bit(value, 0), _bit(value, 1), _bit(value, 2), _bit(value, 3))


def _fix_status(value):
    return NavFixStatus(_bit(value, 0), _bit(value, 1), MapMatchingStatus((value >> 2) & 0x3))


def _flags2(value):
    return NavStatusFlags2(
        PsmState(value & 0x3),
        SpoofDetState((value >> 2) & 0x3),
        _enum(CarrierSolution, (value >> 4) & 0x3),
    )


@dataclass
class NavStatusPayload(Payload):
    """Fix type, status flags, time to first fix and time since startup."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_STATUS

    itow: int = 0
    gps_fix: int = GpsFix.NO_FIX
    flags: NavStatusFlags = field(default_factory=NavStatusFlags)
    fix_stat: NavFixStatus = field(default_factory=NavFixStatus)
    flags2: NavStatusFlags2 = field(default_factory=NavStatusFlags2)
    ttff: int = 0
    msss: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < _STATUS.size:
            raise UbxValueError(
                f"NAV-STATUS payload too short: expected {_STATUS.size} bytes,"
                f" got {len(data)}"
            )
        itow, gps_fix, flags, fix_stat, flags2, ttff, msss = _STATUS.unpack_from(data)
        return cls(
            data, itow, _enum(GpsFix, gps_fix), _flags(flags), _fix_status(fix_stat),
            _flags2(flags2), ttff, msss,
        )

    def __str__(self):
        return (
            f"iTOW: {self.itow} gpsFix: {int(self.gps_fix)}"
            f" gpsFixOk: {int(self.flags.gps_fix_ok)}"
            f" diffSoln: {int(self.flags.diff_soln)}"
            f" wknSet: {int(self.flags.wkn_set)}"
            f" towSet: {int(self.flags.tow_set)}"
            f" diffCorr: {int(self.fix_stat.diff_corr)}"
            f" carrSolnValid: {int(self.fix_stat.carr_soln_valid)}"
            f" mapMatching: {int(self.fix_stat.map_matching):02b}"
            f" psmState: {int(self.flags2.psm_state)}"
            f" spoofDetState: {int(self.flags2.spoof_det_state)}"
            f" carrSoln: {int(self.flags2.carr_soln)}"
            f" ttff: {self.ttff} msss: {self.msss}"
        )