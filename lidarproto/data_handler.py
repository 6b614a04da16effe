"""Dispatch of point cloud and IMU packets to registered callbacks."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from lidarproto.definitions import EthernetPacket, PointDataType

DataCallback = Callable[[int, int, EthernetPacket], None]

_MAX_OBSERVER_ID = 0xFFFF


class DataHandler:
    """Routes incoming data packets to the point, IMU and observer callbacks.

    Callbacks are called as ``callback(handle, dev_type, packet)``.
    """

    def __init__(self) -> None:
        self._point_callback: Optional[DataCallback] = None
        self._imu_callback: Optional[DataCallback] = None
        self._observers: dict[int, DataCallback] = {}
        self._lock = threading.Lock()
        self._last_observer_id = 1

    def handle(self, dev_type: int, handle: int, data: bytes) -> EthernetPacket:
        """Decode ``data`` as a data packet and deliver it; returns the packet.

        Raises ValueError when ``data`` is shorter than a packet header.
        """
        packet = EthernetPacket.from_bytes(data)
        if packet.data_type == PointDataType.IMU:
            callback = self._imu_callback
        else:
            callback = self._point_callback
        if callback is not None:
            callback(handle, dev_type, packet)

        with self._lock:
            observers = list(self._observers.values())
        for observer in observers:
            observer(handle, dev_type, packet)
        return packet

    def add_point_cloud_observer(self, callback: DataCallback) -> int:
        """Register an observer of every packet and return its id."""
        with self._lock:
            observer_id = self._next_observer_id()
            self._observers[observer_id] = callback
        return observer_id

    def remove_point_cloud_observer(self, observer_id: int) -> None:
        with self._lock:
            self._observers.pop(observer_id, None)

    def set_point_data_callback(self, callback: Optional[DataCallback]) -> None:
        self._point_callback = callback

    def set_imu_data_callback(self, callback: Optional[DataCallback]) -> None:
        self._imu_callback = callback

    def clear(self) -> None:
        """Drop all callbacks and observers."""
        self._point_callback = None
        self._imu_callback = None
        with self._lock:
            self._observers.clear()

    def _next_observer_id(self) -> int:
        if self._last_observer_id == _MAX_OBSERVER_ID:
            self._last_observer_id = 1
        else:
            self._last_observer_id += 1
        return self._last_observer_id