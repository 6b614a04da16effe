"""Recording of debug point cloud streams into per-lidar files."""

from __future__ import annotations

import logging
import os
import struct
import threading
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 4 * 1024 * 1024 * 1024
FILE_SUFFIX = ".LivoxDebugPointCloudData"
FILE_VERSION = 0x01
DATA_TYPE = 0x01
SN_SIZE = 16
_RESERVED_SIZE = 11

_HEADER_BODY = struct.Struct(f"<BBB{SN_SIZE}s{_RESERVED_SIZE}s")


def crc16_ccitt(data: bytes) -> int:
    """CRC-16/CCITT (polynomial 0x1021, initial value 0xFFFF, unreflected)."""
    crc = 0xFFFF
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return crc


def build_file_header(dev_type: int, sn: Union[str, bytes]) -> bytes:
    """Build the header written at the start of every debug point cloud file."""
    raw_sn = sn.encode("utf-8") if isinstance(sn, str) else bytes(sn)
    body = _HEADER_BODY.pack(FILE_VERSION, dev_type, DATA_TYPE, raw_sn[:SN_SIZE], b"")
    return body + struct.pack("<H", crc16_ccitt(body))


def _strip_slash(path: str) -> str:
    return path[:-1] if path.endswith("/") else path


class DebugPointCloudWriter:
    """Buffers debug point cloud data for one lidar and writes it from a thread."""

    def __init__(
        self,
        handle: int,
        sn: Union[str, bytes],
        dev_type: int,
        path: str,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self.handle = handle
        self.sn = sn
        self.dev_type = dev_type
        self.directory = _strip_slash(path)
        self.max_file_size = max_file_size
        self.file_name = ""
        self.file_size = 0
        self._buffer = bytearray()
        self._cond = threading.Condition()
        self._enabled = False
        self._thread: Optional[threading.Thread] = None
        self._file = None

    def store_data(self, data: Optional[bytes]) -> bool:
        """Queue ``data`` for writing; returns False when there is none."""
        if data is None:
            return False
        with self._cond:
            self._buffer.extend(data)
            self._cond.notify()
        return True

    def enable(self, enabled: bool) -> bool:
        """Start or stop the writer thread."""
        with self._cond:
            self._enabled = enabled
            self._cond.notify_all()
        if enabled and (self._thread is None or not self._thread.is_alive()):
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return True

    def close(self) -> None:
        """Stop the writer thread and close the output file."""
        self.enable(False)
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "DebugPointCloudWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _open_file(self) -> bool:
        stamp = time.strftime("%Y_%m_%d_%H_%M_%S", time.localtime())
        self.file_name = f"lidar_{self.handle}_{stamp}{FILE_SUFFIX}"
        try:
            self._file = open(os.path.join(self.directory, self.file_name), "wb")
        except OSError:
            logger.error("failed to open %s path", self.directory)
            return False
        header = build_file_header(self.dev_type, self.sn)
        self._file.write(header)
        self.file_size += len(header)
        return True

    def _run(self) -> None:
        while True:
            with self._cond:
                if not self._enabled:
                    return
                self._cond.wait_for(lambda: bool(self._buffer) or not self._enabled, timeout=1.0)
                if not self._enabled:
                    return
                if self.file_size >= self.max_file_size:
                    logger.warning("%s file size over limit", self.file_name)
                    return
                chunk = bytes(self._buffer)
                self._buffer.clear()
            if self._file is None and not self._open_file():
                return
            self._file.write(chunk)
            self._file.flush()
            self.file_size += len(chunk)


@dataclass(frozen=True)
class _DeviceInfo:
    sn: Union[str, bytes]
    dev_type: int
    lidar_ip: str
    cmd_port: int


class DebugPointCloudManager:
    """Keeps one writer per known lidar and feeds it incoming debug data."""

    def __init__(self, max_file_size: int = MAX_FILE_SIZE) -> None:
        self.path = ""
        self.max_file_size = max_file_size
        self._enabled = False
        self._devices: dict[int, _DeviceInfo] = {}
        self._writers: dict[int, DebugPointCloudWriter] = {}
        self._lock = threading.Lock()

    def add_device(
        self,
        handle: int,
        sn: Union[str, bytes],
        dev_type: int,
        lidar_ip: Union[str, Iterable[int]],
        cmd_port: int,
    ) -> None:
        """Remember a detected lidar; the first registration of a handle wins."""
        if not isinstance(lidar_ip, str):
            lidar_ip = ".".join(str(octet) for octet in lidar_ip)
        with self._lock:
            self._devices.setdefault(handle, _DeviceInfo(sn, dev_type, lidar_ip, cmd_port))

    def handle_data(self, handle: int, lidar_port: int, data: bytes) -> bool:
        """Queue data from a lidar; returns False when recording is off or the lidar is unknown."""
        with self._lock:
            if not self._enabled:
                return False
            writer = self._writers.get(handle)
            if writer is None:
                device = self._devices.get(handle)
                if device is None:
                    return False
                writer = DebugPointCloudWriter(
                    handle, device.sn, device.dev_type, self.path, self.max_file_size
                )
                self._writers[handle] = writer
                writer.enable(True)
        return writer.store_data(data)

    def enable(self, enabled: bool) -> bool:
        """Turn recording on or off; turning it off closes all writers."""
        with self._lock:
            self._enabled = enabled
            writers = list(self._writers.values())
            if not enabled:
                self._writers.clear()
        for writer in writers:
            if enabled:
                writer.enable(True)
            else:
                writer.close()
        return True

    def set_store_path(self, path: str) -> bool:
        self.path = _strip_slash(path)
        return True