"""Decoding of the key/value state information pushed by a lidar."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Callable

from lidarproto.definitions import FovCfg, FuncIOCfg, InstallAttitude, ParamKey

_COUNT_HEADER_SIZE = 4  # uint16 key count followed by a reserved uint16
_KV_HEADER_SIZE = 4  # uint16 key, uint16 length
_KV_MIN_SIZE = 5  # packed key/value record with a one-byte value


@dataclass(frozen=True)
class IpCfg:
    """A host address with destination (host) and source (lidar) ports."""

    ip: str = ""
    dst_port: int = 0
    src_port: int = 0


def _zero_attitude() -> InstallAttitude:
    return InstallAttitude(0.0, 0.0, 0.0, 0, 0, 0)


def _zero_fov() -> FovCfg:
    return FovCfg(0, 0, 0, 0)


def _zero_func_io() -> FuncIOCfg:
    return FuncIOCfg(0, 0, 0, 0)


@dataclass(frozen=True)
class LidarStateInfo:
    """State parameters reported by a lidar; unreported fields stay zero."""

    pcl_data_type: int = 0
    pattern_mode: int = 0
    dual_emit_en: int = 0
    point_send_en: int = 0
    lidar_ip: str = ""
    lidar_subnet_mask: str = ""
    lidar_gateway: str = ""
    state_info_host_ipcfg: IpCfg = field(default_factory=IpCfg)
    pointcloud_host_ipcfg: IpCfg = field(default_factory=IpCfg)
    imu_host_ipcfg: IpCfg = field(default_factory=IpCfg)
    ctl_host_ipcfg: IpCfg = field(default_factory=IpCfg)
    log_host_ipcfg: IpCfg = field(default_factory=IpCfg)
    vehicle_speed: int = 0
    environment_temp: int = 0
    install_attitude: InstallAttitude = field(default_factory=_zero_attitude)
    blind_spot_set: int = 0
    frame_rate: int = 0
    fov_cfg0: FovCfg = field(default_factory=_zero_fov)
    fov_cfg1: FovCfg = field(default_factory=_zero_fov)
    fov_cfg_en: int = 0
    detect_mode: int = 0
    func_io_cfg: FuncIOCfg = field(default_factory=_zero_func_io)
    work_tgt_mode: int = 0
    glass_heat: int = 0
    imu_data_en: int = 0
    fusa_en: int = 0
    sn: str = ""
    product_info: str = ""
    version_app: tuple[int, ...] = (0, 0, 0, 0)
    version_loader: tuple[int, ...] = (0, 0, 0, 0)
    version_hardware: tuple[int, ...] = (0, 0, 0, 0)
    mac: tuple[int, ...] = (0, 0, 0, 0, 0, 0)
    cur_work_state: int = 0
    core_temp: int = 0
    powerup_cnt: int = 0
    local_time_now: int = 0
    last_sync_time: int = 0
    time_offset: int = 0
    time_sync_type: int = 0
    status_code: tuple[int, ...] = (0,) * 32
    lidar_diag_status: int = 0
    lidar_flash_status: int = 0
    fw_type: int = 0
    hms_code: tuple[int, ...] = (0,) * 8
    roi_mode: int = 0


_Decoder = Callable[[bytes], dict]


def _dotted(raw: bytes) -> str:
    return ".".join(str(octet) for octet in raw[:4])


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _scalar(name: str, fmt: str) -> tuple[int, _Decoder]:
    layout = struct.Struct("<" + fmt)
    return layout.size, lambda raw: {name: layout.unpack(raw)[0]}


def _array(name: str, fmt: str, count: int) -> tuple[int, _Decoder]:
    layout = struct.Struct(f"<{count}{fmt}")
    return layout.size, lambda raw: {name: tuple(layout.unpack(raw))}


def _text(name: str, size: int) -> tuple[int, _Decoder]:
    return size, lambda raw: {name: _c_string(raw)}


def _record(name: str, cls) -> tuple[int, _Decoder]:
    return cls.LAYOUT.size, lambda raw: {name: cls.from_bytes(raw)}


def _host_cfg(name: str) -> tuple[int, _Decoder]:
    def decode(raw: bytes) -> dict:
        dst_port, src_port = struct.unpack_from("<HH", raw, 4)
        return {name: IpCfg(_dotted(raw[:4]), dst_port, src_port)}

    return 8, decode


def _lidar_ip_cfg() -> tuple[int, _Decoder]:
    def decode(raw: bytes) -> dict:
        return {
            "lidar_ip": _dotted(raw[0:4]),
            "lidar_subnet_mask": _dotted(raw[4:8]),
            "lidar_gateway": _dotted(raw[8:12]),
        }

    return 12, decode


_DECODERS: dict[ParamKey, tuple[int, _Decoder]] = {
    ParamKey.PCL_DATA_TYPE: _scalar("pcl_data_type", "B"),
    ParamKey.PATTERN_MODE: _scalar("pattern_mode", "B"),
    ParamKey.DUAL_EMIT_EN: _scalar("dual_emit_en", "B"),
    ParamKey.POINT_SEND_EN: _scalar("point_send_en", "B"),
    ParamKey.LIDAR_IP_CFG: _lidar_ip_cfg(),
    ParamKey.STATE_INFO_HOST_IP_CFG: _host_cfg("state_info_host_ipcfg"),
    ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG: _host_cfg("pointcloud_host_ipcfg"),
    ParamKey.LIDAR_IMU_HOST_IP_CFG: _host_cfg("imu_host_ipcfg"),
    ParamKey.CTL_HOST_IP_CFG: _host_cfg("ctl_host_ipcfg"),
    ParamKey.LOG_HOST_IP_CFG: _host_cfg("log_host_ipcfg"),
    ParamKey.VEHICLE_SPEED: _scalar("vehicle_speed", "i"),
    ParamKey.ENVIRONMENT_TEMP: _scalar("environment_temp", "i"),
    ParamKey.INSTALL_ATTITUDE: _record("install_attitude", InstallAttitude),
    ParamKey.BLIND_SPOT_SET: _scalar("blind_spot_set", "I"),
    ParamKey.FRAME_RATE: _scalar("frame_rate", "B"),
    ParamKey.FOV_CFG0: _record("fov_cfg0", FovCfg),
    ParamKey.FOV_CFG1: _record("fov_cfg1", FovCfg),
    ParamKey.FOV_CFG_EN: _scalar("fov_cfg_en", "B"),
    ParamKey.DETECT_MODE: _scalar("detect_mode", "B"),
    ParamKey.FUNC_IO_CFG: _record("func_io_cfg", FuncIOCfg),
    ParamKey.WORK_MODE: _scalar("work_tgt_mode", "B"),
    ParamKey.GLASS_HEAT: _scalar("glass_heat", "B"),
    ParamKey.IMU_DATA_EN: _scalar("imu_data_en", "B"),
    ParamKey.FUSA_EN: _scalar("fusa_en", "B"),
    ParamKey.SN: _text("sn", 16),
    ParamKey.PRODUCT_INFO: _text("product_info", 64),
    ParamKey.VERSION_APP: _array("version_app", "B", 4),
    ParamKey.VERSION_LOADER: _array("version_loader", "B", 4),
    ParamKey.VERSION_HARDWARE: _array("version_hardware", "B", 4),
    ParamKey.MAC: _array("mac", "B", 6),
    ParamKey.CUR_WORK_STATE: _scalar("cur_work_state", "B"),
    ParamKey.CORE_TEMP: _scalar("core_temp", "i"),
    ParamKey.POWER_UP_CNT: _scalar("powerup_cnt", "I"),
    ParamKey.LOCAL_TIME_NOW: _scalar("local_time_now", "Q"),
    ParamKey.LAST_SYNC_TIME: _scalar("last_sync_time", "Q"),
    ParamKey.TIME_OFFSET: _scalar("time_offset", "q"),
    ParamKey.TIME_SYNC_TYPE: _scalar("time_sync_type", "B"),
    ParamKey.STATUS_CODE: _array("status_code", "B", 32),
    ParamKey.LIDAR_DIAG_STATUS: _scalar("lidar_diag_status", "H"),
    ParamKey.LIDAR_FLASH_STATUS: _scalar("lidar_flash_status", "B"),
    ParamKey.FW_TYPE: _scalar("fw_type", "B"),
    ParamKey.HMS_CODE: _array("hms_code", "I", 8),
    ParamKey.ROI_MODE: _scalar("roi_mode", "B"),
}


def parse_state_info(data: bytes) -> tuple[LidarStateInfo, set[ParamKey]]:
    """Decode a state push payload into its values and the set of keys present.

    Unknown keys are skipped. Raises ValueError when the payload is truncated.
    """
    data = bytes(data)
    if len(data) < 2:
        raise ValueError("state info payload too short for key count")
    (key_num,) = struct.unpack_from("<H", data, 0)
    offset = _COUNT_HEADER_SIZE

    values: dict = {}
    keys: set[ParamKey] = set()
    for _ in range(key_num):
        if offset + _KV_MIN_SIZE > len(data):
            raise ValueError(f"state info truncated at offset {offset}")
        key, val_len = struct.unpack_from("<HH", data, offset)
        offset += _KV_HEADER_SIZE
        if offset + val_len > len(data):
            raise ValueError(f"value of key 0x{key:04X} truncated")
        raw = data[offset : offset + val_len]
        offset += val_len

        try:
            param = ParamKey(key)
        except ValueError:
            continue
        spec = _DECODERS.get(param)
        if spec is None:
            continue
        size, decode = spec
        keys.add(param)
        values.update(decode(raw[:size].ljust(size, b"\0")))

    return LidarStateInfo(**values), keys