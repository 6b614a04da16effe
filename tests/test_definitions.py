import struct

import pytest

from lidarproto.definitions import (
    CartesianHighPoint,
    CartesianLowPoint,
    CmdPacket,
    DeviceType,
    EthernetPacket,
    FovCfg,
    FuncIOCfg,
    ImuRawPoint,
    InstallAttitude,
    ParamKey,
    PointDataType,
    SdkVersion,
    SphericalPoint,
    Status,
    sdk_version,
)


def _packet(data_type, dot_num, payload):
    header = struct.pack(
        "<BHHHHBBB12sIQ", 0, 36 + len(payload), 100, dot_num, 7, 3, data_type, 0,
        b"\x00" * 12, 0xDEADBEEF, 123456789,
    )
    return header + payload


def test_sdk_version():
    assert sdk_version() == SdkVersion(1, 2, 5)
    assert str(sdk_version()) == "1.2.5"


def test_enum_values_from_header():
    assert DeviceType(9) is DeviceType.MID360
    assert DeviceType.PA == 16
    assert ParamKey.WORK_MODE_AFTER_BOOT == 0x0020
    assert ParamKey.ROI_MODE == 0xFFFE
    assert Status.SEND_FAILED == -9
    assert Status.SUCCESS == 0


@pytest.mark.parametrize(
    "cls, fmt, values",
    [
        (ImuRawPoint, "<6f", (0.5, 1.0, -1.5, 0.0, 2.0, -9.75)),
        (CartesianHighPoint, "<iiiBB", (1000, -2000, 3000, 50, 1)),
        (CartesianLowPoint, "<hhhBB", (1, -2, 3, 4, 5)),
        (SphericalPoint, "<IHHBB", (5000, 100, 200, 9, 2)),
    ],
)
def test_record_parses_packed_layout(cls, fmt, values):
    raw = struct.pack(fmt, *values)
    assert cls.LAYOUT.size == len(raw)
    assert cls.from_bytes(raw) == cls(*values)
    with pytest.raises(ValueError):
        cls.from_bytes(raw[:-1])


def test_install_attitude_round_trip():
    att = InstallAttitude(1.5, -2.25, 90.0, 100, -200, 300)
    assert InstallAttitude.from_bytes(att.to_bytes()) == att
    assert len(att.to_bytes()) == InstallAttitude.LAYOUT.size


def test_fov_cfg_round_trip():
    fov = FovCfg(-10, 10, -5, 5)
    assert FovCfg.from_bytes(fov.to_bytes()) == fov


def test_func_io_cfg_round_trip_and_bytes():
    cfg = FuncIOCfg(8, 10, 12, 11)
    assert cfg.to_bytes() == bytes([8, 10, 12, 11])
    assert FuncIOCfg.from_bytes(cfg.to_bytes()) == cfg


@pytest.mark.parametrize(
    "cls", [ImuRawPoint, CartesianHighPoint, CartesianLowPoint, SphericalPoint,
            InstallAttitude, FovCfg, FuncIOCfg, EthernetPacket, CmdPacket],
)
def test_short_input_rejected(cls):
    with pytest.raises(ValueError):
        cls.from_bytes(b"\x01")


def test_ethernet_packet_header_fields():
    pkt = EthernetPacket.from_bytes(_packet(PointDataType.CARTESIAN_HIGH, 0, b"abc"))
    assert pkt.dot_num == 0
    assert pkt.time_interval == 100
    assert pkt.crc32 == 0xDEADBEEF
    assert pkt.timestamp == 123456789
    assert pkt.data == b"abc"


def test_ethernet_packet_high_points():
    payload = struct.pack("<iiiBB", 1000, -2000, 3000, 50, 1) + struct.pack(
        "<iiiBB", -1, 2, -3, 255, 0
    )
    pkt = EthernetPacket.from_bytes(_packet(PointDataType.CARTESIAN_HIGH, 2, payload))
    assert pkt.points() == [
        CartesianHighPoint(1000, -2000, 3000, 50, 1),
        CartesianHighPoint(-1, 2, -3, 255, 0),
    ]


def test_ethernet_packet_points_capped_by_dot_num():
    payload = struct.pack("<hhhBB", 1, 2, 3, 4, 5) * 3
    pkt = EthernetPacket.from_bytes(_packet(PointDataType.CARTESIAN_LOW, 2, payload))
    points = pkt.points()
    assert len(points) == 2
    assert points[0] == CartesianLowPoint(1, 2, 3, 4, 5)


def test_ethernet_packet_spherical_and_imu():
    sph = struct.pack("<IHHBB", 5000, 100, 200, 9, 2)
    pkt = EthernetPacket.from_bytes(_packet(PointDataType.SPHERICAL, 1, sph))
    assert pkt.points() == [SphericalPoint(5000, 100, 200, 9, 2)]

    imu = struct.pack("<6f", 0.5, 1.0, -1.5, 0.0, 2.0, -9.75)
    pkt = EthernetPacket.from_bytes(_packet(PointDataType.IMU, 1, imu))
    assert pkt.points() == [ImuRawPoint(0.5, 1.0, -1.5, 0.0, 2.0, -9.75)]


def test_ethernet_packet_unknown_type():
    pkt = EthernetPacket.from_bytes(_packet(0x7F, 1, b"\x00" * 16))
    with pytest.raises(ValueError):
        pkt.points()


def test_cmd_packet_parse():
    raw = struct.pack("<BBHIHBB6sHI", 0xAA, 0, 28, 42, 0x0102, 1, 0, b"\x00" * 6, 0x1234, 0x55667788)
    raw += b"\x01\x02\x03\x04"
    pkt = CmdPacket.from_bytes(raw)
    assert pkt.sof == 0xAA
    assert pkt.seq_num == 42
    assert pkt.cmd_id == 0x0102
    assert pkt.crc16_h == 0x1234
    assert pkt.crc32_d == 0x55667788
    assert pkt.data == b"\x01\x02\x03\x04"