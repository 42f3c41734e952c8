import struct

import pytest

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Frame
from ubxgnss.nav_sat import NavSatPayload, SatData, SatFlags

HEADER = struct.Struct("<IBB2x")
SAT = struct.Struct("<BBBbhhI")

SATS = [
    (0, 12, 45, 60, 270, -15, 0x0F),
    (2, 7, 38, -5, 45, 20, 1 << 11),
]


def build(sats=SATS, itow=250000, version=1, num_svs=None):
    count = len(sats) if num_svs is None else num_svs
    return HEADER.pack(itow, version, count) + b"".join(SAT.pack(*s) for s in sats)


def test_header_and_satellites_round_trip():
    payload = NavSatPayload.from_bytes(build())
    assert payload.itow == 250000
    assert payload.version == 1
    assert payload.num_svs == len(SATS)
    assert [
        (s.gnss_id, s.sv_id, s.cno, s.elev, s.azim, s.pr_res) for s in payload.sat_data
    ] == [s[:6] for s in SATS]
    assert payload.sat_data[1].flags == SatFlags.from_int(SATS[1][6])


def test_message_identity():
    header = Frame(NavSatPayload.MSG_CLASS, NavSatPayload.MSG_ID).build()[2:4]
    assert header == bytes([0x01, 0x35])


def test_no_satellites():
    payload = NavSatPayload.from_bytes(build(sats=[]))
    assert payload.sat_data == []
    assert str(payload) == "itow: 250000, version: 1, num_svs: 0"


def test_truncated_satellite_block_rejected():
    with pytest.raises(UbxValueError):
        NavSatPayload.from_bytes(build(num_svs=3))
    with pytest.raises(UbxValueError):
        NavSatPayload.from_bytes(b"\x00" * 7)


def test_zero_flags():
    assert SatFlags.from_int(0) == SatFlags()


def test_all_flags_set():
    flags = SatFlags.from_int(0xFFFFFFFF)
    assert flags.quality_ind == 7
    assert flags.health == 3
    assert flags.orbit_source == 7
    assert flags.sv_used and flags.eph_avail and flags.clas_corr_used


def test_fields_do_not_overlap():
    flags = SatFlags.from_int(2 << 8)
    assert flags.orbit_source == 2
    assert flags.quality_ind == 0
    assert not flags.eph_avail
    assert not flags.smoothed


def test_sat_data_is_dataclass_value():
    payload = NavSatPayload.from_bytes(build(sats=[SATS[0]]))
    flags = SatFlags.from_int(SATS[0][6])
    assert payload.sat_data[0] == SatData(*SATS[0][:6], flags)


def test_str_lists_each_satellite():
    text = str(NavSatPayload.from_bytes(build()))
    lines = text.split("\n")
    assert len(lines) == 1 + len(SATS)
    assert lines[1].startswith("  sat 0: gnss_id: 0, sv_id: 12, cno: 45, elev: 60, azim: 270")
    assert "pr_res: -1.5" in lines[1]
    assert lines[2].startswith("  sat 1: gnss_id: 2, sv_id: 7")
    assert lines[2].endswith("clas_corr_used: 0}")