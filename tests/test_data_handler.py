import pytest

from lidarproto.data_handler import DataHandler
from lidarproto.definitions import CartesianHighPoint, EthernetPacket, PointDataType


def make_packet(data_type, payload=b"", dot_num=0):
    header = EthernetPacket.HEADER.pack(
        0, EthernetPacket.HEADER.size + len(payload), 0, dot_num, 0, 0,
        data_type, 0, bytes(12), 0, 0,
    )
    return header + payload


def recorder(store):
    def callback(handle, dev_type, packet):
        store.append((handle, dev_type, packet))
    return callback


def test_imu_packet_goes_to_imu_callback_only():
    handler = DataHandler()
    imu, points = [], []
    handler.set_imu_data_callback(recorder(imu))
    handler.set_point_data_callback(recorder(points))
    handler.handle(9, 42, make_packet(PointDataType.IMU, bytes(24), 1))
    assert len(imu) == 1
    assert points == []
    assert imu[0][0] == 42
    assert imu[0][1] == 9
    assert imu[0][2].data_type == PointDataType.IMU


def test_point_packet_goes_to_point_callback():
    handler = DataHandler()
    imu, points = [], []
    handler.set_imu_data_callback(recorder(imu))
    handler.set_point_data_callback(recorder(points))
    payload = CartesianHighPoint.LAYOUT.pack(1, -2, 3, 50, 0)
    returned = handler.handle(10, 7, make_packet(PointDataType.CARTESIAN_HIGH, payload, 1))
    assert imu == []
    assert len(points) == 1
    assert points[0][2] == returned
    assert returned.points() == [CartesianHighPoint(1, -2, 3, 50, 0)]


def test_observers_receive_every_packet_until_removed():
    handler = DataHandler()
    seen = []
    observer_id = handler.add_point_cloud_observer(recorder(seen))
    handler.handle(9, 1, make_packet(PointDataType.IMU))
    handler.handle(9, 1, make_packet(PointDataType.SPHERICAL))
    assert [p.data_type for _, _, p in seen] == [PointDataType.IMU, PointDataType.SPHERICAL]
    handler.remove_point_cloud_observer(observer_id)
    handler.handle(9, 1, make_packet(PointDataType.IMU))
    assert len(seen) == 2


def test_observer_ids_are_unique_and_wrap():
    handler = DataHandler()
    ids = [handler.add_point_cloud_observer(lambda *a: None) for _ in range(65535)]
    assert len(set(ids)) == 65535
    assert ids[1] == ids[0] + 1
    assert max(ids) == 65535
    assert ids[-1] == 1


def test_clear_removes_everything():
    handler = DataHandler()
    seen = []
    handler.set_point_data_callback(recorder(seen))
    handler.add_point_cloud_observer(recorder(seen))
    handler.clear()
    handler.handle(9, 1, make_packet(PointDataType.CARTESIAN_LOW))
    assert seen == []


def test_short_packet_is_rejected():
    handler = DataHandler()
    with pytest.raises(ValueError):
        handler.handle(9, 1, b"\x00\x01")