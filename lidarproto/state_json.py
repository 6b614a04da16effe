"""Rendering of lidar state information as pretty-printed JSON."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable

from lidarproto.definitions import ParamKey
from lidarproto.state_info import IpCfg, LidarStateInfo, parse_state_info

_UINT32_MASK = 0xFFFFFFFF


def _ip_cfg(cfg: IpCfg) -> dict[str, Any]:
    return {"ip": cfg.ip, "dst_port": cfg.dst_port, "src_port": cfg.src_port}


def _lidar_ipcfg(info: LidarStateInfo) -> dict[str, Any]:
    return {
        "lidar_ip": info.lidar_ip,
        "lidar_subnet_mask": info.lidar_subnet_mask,
        "lidar_gateway": info.lidar_gateway,
    }


def _install_attitude(info: LidarStateInfo) -> dict[str, Any]:
    attitude = info.install_attitude
    # Offsets are emitted as unsigned 32-bit values.
    return {
        "roll_deg": float(attitude.roll_deg),
        "pitch_deg": float(attitude.pitch_deg),
        "yaw_deg": float(attitude.yaw_deg),
        "x_mm": attitude.x & _UINT32_MASK,
        "y_mm": attitude.y & _UINT32_MASK,
        "z_mm": attitude.z & _UINT32_MASK,
    }


def _fov(cfg) -> dict[str, Any]:
    return {
        "yaw_start": cfg.yaw_start,
        "yaw_stop": cfg.yaw_stop,
        "pitch_start": cfg.pitch_start,
        "pitch_stop": cfg.pitch_stop,
    }


def _func_io(info: LidarStateInfo) -> dict[str, Any]:
    cfg = info.func_io_cfg
    return {"IN0": cfg.in0, "IN1": cfg.in1, "OUT0": cfg.out0, "OUT1": cfg.out1}


def _status_code(info: LidarStateInfo) -> str:
    return " ".join(format(byte, "x") for byte in reversed(info.status_code))


_FIELDS: list[tuple[ParamKey, str, Callable[[LidarStateInfo], Any]]] = [
    (ParamKey.PCL_DATA_TYPE, "pcl_data_type", lambda i: i.pcl_data_type),
    (ParamKey.PATTERN_MODE, "pattern_mode", lambda i: i.pattern_mode),
    (ParamKey.DUAL_EMIT_EN, "dual_emit_en", lambda i: i.dual_emit_en),
    (ParamKey.POINT_SEND_EN, "point_send_en", lambda i: i.point_send_en),
    (ParamKey.LIDAR_IP_CFG, "lidar_ipcfg", _lidar_ipcfg),
    (ParamKey.STATE_INFO_HOST_IP_CFG, "state_info_host_ipcfg",
     lambda i: _ip_cfg(i.state_info_host_ipcfg)),
    (ParamKey.LIDAR_POINT_DATA_HOST_IP_CFG, "ponitcloud_host_ipcfg",
     lambda i: _ip_cfg(i.pointcloud_host_ipcfg)),
    (ParamKey.LIDAR_IMU_HOST_IP_CFG, "imu_host_ipcfg", lambda i: _ip_cfg(i.imu_host_ipcfg)),
    (ParamKey.CTL_HOST_IP_CFG, "ctl_host_ipcfg", lambda i: _ip_cfg(i.ctl_host_ipcfg)),
    (ParamKey.LOG_HOST_IP_CFG, "log_host_ipcfg", lambda i: _ip_cfg(i.log_host_ipcfg)),
    (ParamKey.VEHICLE_SPEED, "vehicle_speed", lambda i: i.vehicle_speed),
    (ParamKey.ENVIRONMENT_TEMP, "environment_temp", lambda i: i.environment_temp),
    (ParamKey.INSTALL_ATTITUDE, "install_attitude", _install_attitude),
    (ParamKey.BLIND_SPOT_SET, "blind_spot_set", lambda i: i.blind_spot_set),
    (ParamKey.FRAME_RATE, "frame_rate", lambda i: i.frame_rate),
    (ParamKey.FOV_CFG0, "fov_cfg0", lambda i: _fov(i.fov_cfg0)),
    (ParamKey.FOV_CFG1, "fov_cfg1", lambda i: _fov(i.fov_cfg1)),
    (ParamKey.FOV_CFG_EN, "fov_cfg_en", lambda i: i.fov_cfg_en),
    (ParamKey.DETECT_MODE, "detect_mode", lambda i: i.detect_mode),
    (ParamKey.FUNC_IO_CFG, "func_io_cfg", _func_io),
    (ParamKey.WORK_MODE, "work_tgt_mode", lambda i: i.work_tgt_mode),
    (ParamKey.GLASS_HEAT, "glass_heat", lambda i: i.glass_heat),
    (ParamKey.IMU_DATA_EN, "imu_data_en", lambda i: i.imu_data_en),
    (ParamKey.FUSA_EN, "fusa_en", lambda i: i.fusa_en),
    (ParamKey.SN, "sn", lambda i: i.sn),
    (ParamKey.PRODUCT_INFO, "product_info", lambda i: i.product_info),
    (ParamKey.VERSION_APP, "version_app", lambda i: list(i.version_app)),
    (ParamKey.VERSION_LOADER, "version_loader", lambda i: list(i.version_loader)),
    (ParamKey.VERSION_HARDWARE, "version_hardware", lambda i: list(i.version_hardware)),
    (ParamKey.MAC, "mac", lambda i: list(i.mac)),
    (ParamKey.CUR_WORK_STATE, "cur_work_state", lambda i: i.cur_work_state),
    (ParamKey.CORE_TEMP, "core_temp", lambda i: i.core_temp),
    (ParamKey.POWER_UP_CNT, "powerup_cnt", lambda i: i.powerup_cnt),
    (ParamKey.LOCAL_TIME_NOW, "local_time_now", lambda i: i.local_time_now),
    (ParamKey.LAST_SYNC_TIME, "last_sync_time", lambda i: i.last_sync_time),
    (ParamKey.TIME_OFFSET, "time_offset", lambda i: i.time_offset),
    (ParamKey.TIME_SYNC_TYPE, "time_sync_type", lambda i: i.time_sync_type),
    (ParamKey.STATUS_CODE, "status_code", _status_code),
    (ParamKey.LIDAR_DIAG_STATUS, "lidar_diag_status", lambda i: i.lidar_diag_status),
    (ParamKey.LIDAR_FLASH_STATUS, "lidar_flash_status", lambda i: i.lidar_flash_status),
    (ParamKey.FW_TYPE, "FW_TYPE", lambda i: i.fw_type),
    (ParamKey.HMS_CODE, "hms_code", lambda i: list(i.hms_code)),
    (ParamKey.ROI_MODE, "ROI_Mode", lambda i: i.roi_mode),
]


def state_info_to_json(info: LidarStateInfo, keys: Iterable[ParamKey]) -> str:
    """Render the fields of ``info`` named by ``keys`` as an indented JSON object.

    Fields appear in a fixed protocol order regardless of the order of ``keys``.
    """
    present = set(keys)
    document = {name: render(info) for key, name, render in _FIELDS if key in present}
    return json.dumps(document, indent=4, ensure_ascii=False)


def parse(data: bytes) -> str:
    """Decode a state push payload and render it as JSON.

    Raises ValueError when the payload is truncated.
    """
    info, keys = parse_state_info(data)
    return state_info_to_json(info, keys)