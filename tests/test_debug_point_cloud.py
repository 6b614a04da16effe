import os
import re
import time

from lidarproto.debug_point_cloud import (
    FILE_SUFFIX,
    DebugPointCloudManager,
    DebugPointCloudWriter,
    build_file_header,
    crc16_ccitt,
)


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_crc16_check_value():
    assert crc16_ccitt(b"123456789") == 0x29B1


def test_crc16_empty_is_initial_value():
    assert crc16_ccitt(b"") == 0xFFFF


def test_file_header_layout():
    header = build_file_header(9, "SN0000TEST")
    assert header[0] == 0x01
    assert header[1] == 9
    assert header[2] == 0x01
    assert header[3:19] == b"SN0000TEST".ljust(16, b"\0")
    assert int.from_bytes(header[-2:], "little") == crc16_ccitt(header[:-2])


def test_file_header_truncates_long_serial():
    short = build_file_header(15, "A" * 16)
    long = build_file_header(15, "A" * 40)
    assert short == long


def test_writer_writes_header_then_data(tmp_path):
    payload = b"\x01\x02\x03\x04" * 10
    writer = DebugPointCloudWriter(7, "SN0000TEST", 9, str(tmp_path) + "/")
    header = build_file_header(9, "SN0000TEST")
    with writer:
        assert writer.store_data(payload) is True
        writer.enable(True)
        assert wait_until(lambda: writer.file_size >= len(header) + len(payload))
    assert re.fullmatch(r"lidar_7_\d{4}(_\d{2}){5}" + re.escape(FILE_SUFFIX), writer.file_name)
    content = (tmp_path / writer.file_name).read_bytes()
    assert content == header + payload


def test_writer_rejects_missing_data(tmp_path):
    writer = DebugPointCloudWriter(1, "SN0000TEST", 9, str(tmp_path))
    assert writer.store_data(None) is False


def test_writer_stops_at_size_limit(tmp_path):
    writer = DebugPointCloudWriter(1, "SN0000TEST", 9, str(tmp_path), max_file_size=0)
    writer.store_data(b"abc")
    writer.enable(True)
    writer.close()
    assert os.listdir(tmp_path) == []


def test_manager_records_known_device(tmp_path):
    manager = DebugPointCloudManager()
    assert manager.set_store_path(str(tmp_path) + "/") is True
    assert manager.path == str(tmp_path)
    manager.add_device(5, "SN0000TEST", 15, (192, 168, 1, 50), 56000)
    manager.enable(True)
    assert manager.handle_data(5, 57000, b"point-bytes") is True
    header = build_file_header(15, "SN0000TEST")

    def written():
        files = list(tmp_path.iterdir())
        return len(files) == 1 and files[0].stat().st_size >= len(header) + 11

    assert wait_until(written)
    manager.enable(False)
    content = next(tmp_path.iterdir()).read_bytes()
    assert content == header + b"point-bytes"


def test_manager_ignores_data_when_disabled_or_unknown(tmp_path):
    manager = DebugPointCloudManager()
    manager.set_store_path(str(tmp_path))
    manager.add_device(5, "SN0000TEST", 15, "192.168.1.50", 56000)
    assert manager.handle_data(5, 57000, b"x") is False
    manager.enable(True)
    assert manager.handle_data(6, 57000, b"x") is False
    manager.enable(False)
    assert os.listdir(tmp_path) == []