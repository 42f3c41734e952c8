"""UBX-NAV-SAT: per-satellite tracking information."""

import struct
from dataclasses import dataclass, field

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

NAV_SAT = 0x35

_HEADER = struct.Struct("<IBB2x")
_SAT = struct.Struct("<BBBbhhI")


def _bit(value, position):
    return bool((value >> position) & 0x1)


@dataclass(frozen=True)
class SatFlags:
    """Bitfield flags of one satellite entry."""

    quality_ind: int = 0
    sv_used: bool = False
    health: int = 0
    diff_corr: bool = False
    smoothed: bool = False
    orbit_source: int = 0
    eph_avail: bool = False
    alm_avail: bool = False
    ano_avail: bool = False
    aop_avail: bool = False
    sbas_corr_used: bool = False
    rtcm_corr_used: bool = False
    slas_corr_used: bool = False
    spartn_corr_used: bool = False
    pr_corr_used: bool = False
    cr_corr_used: bool = False
    do_corr_used: bool = False
    clas_corr_used: bool = False

    @classmethod
    def from_int(cls, value):
        """Decode the 32-bit flags field."""
        return cls(
            quality_ind=value & 0x7,
            sv_used=_bit(value, 3),
            health=(value >> 4) & 0x3,
            diff_corr=_bit(value, 6),
            smoothed=_bit(value, 7),
            orbit_source=(value >> 8) & 0x7,
            eph_avail=_bit(value, 11),
            alm_avail=_bit(value, 12),
            ano_avail=_bit(value, 13),
            aop_avail=_bit(value, 14),
            sbas_corr_used=_bit(value, 15),
            rtcm_corr_used=_bit(value, 16),
            slas_corr_used=_bit(value, 17),
            spartn_corr_used=_bit(value, 18),
            pr_corr_used=_bit(value, 19),
            cr_corr_used=_bit(value, 20),
            do_corr_used=_bit(value, 21),
            clas_corr_used=_bit(value, 22),
        )


@dataclass(frozen=True)
class SatData:
    """Signal and orbit information for one satellite."""

    gnss_id: int
    sv_id: int
    cno: int
    elev: int
    azim: int
    pr_res: int
    flags: SatFlags


_FLAG_NAMES = [
    ("quality_ind", "quality_ind"),
    ("sv_used", "sv_used"),
    ("health", "health"),
    ("diff_corr", "diff_corr"),
    ("smoothed", "smoothed"),
    ("orbit_source", "orbit_source"),
    ("eph_avail", "eph_avail"),
    ("alm_avail", "alm_avail"),
    ("ano_avail", "ano_avail"),
    ("aop_avail", "aop_avail"),
    ("sbas_corr_used", "sbas_corr_used"),
    ("rtcm_corr_used", "rtcm_corr_used"),
    ("slas_corr_used", "slas_corr_used"),
    ("spartn_corr_used", "spartn_corr_used"),
    ("pr_corr_used", "pr_corr_used"),
    ("cr_corr_used", "cr_corr_used"),
    ("do_corr_used", "do_corr_used"),
    ("clas_corr_used", "clas_corr_used"),
]


@dataclass
class NavSatPayload(Payload):
    """Satellites tracked by the receiver; pr_res in 0.1 m."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_SAT

    itow: int = 0
    version: int = 0
    num_svs: int = 0
    sat_data: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise UbxValueError(
                f"NAV-SAT payload too short: expected {_HEADER.size} bytes, got {len(data)}"
            )
        itow, version, num_svs = _HEADER.unpack_from(data)
        end = _HEADER.size + num_svs * _SAT.size
        if len(data) < end:
            raise UbxValueError(
                f"NAV-SAT payload truncated: {num_svs} satellites need {end} bytes,"
                f" got {len(data)}"
            )
        sats = [
            SatData(gnss_id, sv_id, cno, elev, azim, pr_res, SatFlags.from_int(flags))
            for gnss_id, sv_id, cno, elev, azim, pr_res, flags
            in _SAT.iter_unpack(data[_HEADER.size:end])
        ]
        return cls(data, itow, version, num_svs, sats)

    def __str__(self):
        text = f"itow: {self.itow}, version: {self.version}, num_svs: {self.num_svs}"
        for index, sat in enumerate(self.sat_data):
            flags = ", ".join(
                f"{label}: {int(getattr(sat.flags, attr))}" for label, attr in _FLAG_NAMES
            )
            text += (
                f"\n  sat {index}: gnss_id: {sat.gnss_id}, sv_id: {sat.sv_id},"
                f" cno: {sat.cno}, elev: {sat.elev}, azim: {sat.azim},"
                f" pr_res: {sat.pr_res * 0.1:g}, flags: {{{flags}}}"
            )
        return text