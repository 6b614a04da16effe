# lidarproto

Pure-Python tools for the data that Livox lidars send to a host: protocol
constants, packed record decoding, state-info parsing, packet dispatch and
debug point cloud recording. It uses only the standard library.

## Modules

### `lidarproto.definitions`

- Enumerations: `DeviceType`, `ParamKey`, `PointDataType`, `LogType`, `Status`,
  `ScanPattern`, `FrameRate`, `WorkMode`, `WorkModeAfterBoot`, `DetectMode`,
  `GlassHeat`, `UpgradeFsmState`, `UpgradeFsmEvent`.
- Little-endian packed records with a `from_bytes` class method:
  `ImuRawPoint`, `CartesianHighPoint` (millimetres), `CartesianLowPoint`
  (centimetres), `SphericalPoint`, `InstallAttitude`, `FovCfg`, `FuncIOCfg`.
  `InstallAttitude`, `FovCfg` and `FuncIOCfg` also have `to_bytes`.
  `from_bytes` raises `ValueError` when given too few bytes.
- `EthernetPacket.from_bytes` decodes a 36-byte data packet header and keeps
  the rest as `data`; `EthernetPacket.points()` decodes that payload into
  records of the packet's `data_type`, at most `dot_num` of them when
  `dot_num` is non-zero. An unknown data type raises `ValueError`.
- `CmdPacket.from_bytes` decodes a control frame header and keeps the payload.
- `sdk_version()` returns an `SdkVersion` (`1.2.5`).

### `lidarproto.state_info`

`parse_state_info(data)` decodes the key/value payload of a state push
message. It returns a `LidarStateInfo` (fields not reported stay zero or
empty) and the set of `ParamKey` values that were present. Unknown keys are
skipped; a truncated payload raises `ValueError`. Host address settings are
returned as `IpCfg(ip, dst_port, src_port)`.

### `lidarproto.state_json`

`state_info_to_json(info, keys)` renders the fields named by `keys` as a JSON
object indented by four spaces, in a fixed protocol order. `parse(data)` does
the decoding and the rendering in one step.

### `lidarproto.data_handler`

`DataHandler.handle(dev_type, handle, data)` decodes `data` as an
`EthernetPacket`, passes it to the IMU callback (for IMU packets) or the
point-data callback (for all others), then to every observer, and returns the
packet. Callbacks are called as `callback(handle, dev_type, packet)`.
Observers are added with `add_point_cloud_observer` (which returns an id from
2 up to 65535, then wrapping to 1) and removed with
`remove_point_cloud_observer`. `clear()` drops all callbacks and observers.

### `lidarproto.debug_point_cloud`

- `DebugPointCloudManager` keeps one writer per lidar. Register lidars with
  `add_device(handle, sn, dev_type, lidar_ip, cmd_port)`, choose a directory
  with `set_store_path`, switch recording with `enable(True)` / `enable(False)`,
  and feed datagrams with `handle_data(handle, lidar_port, data)`, which
  returns `False` when recording is off or the lidar is unknown.
- `DebugPointCloudWriter` buffers data for one lidar and writes it from a
  background thread to `lidar_<handle>_<YYYY_MM_DD_HH_MM_SS>.LivoxDebugPointCloudData`.
  Writing stops once a file reaches `max_file_size` (4 GiB by default). Use
  `close()` or a `with` block to stop it.
- `build_file_header(dev_type, sn)` builds the 32-byte file header, ending in a
  CRC-16/CCITT of the first 30 bytes computed by `crc16_ccitt(data)`.

## Example

```python
import struct

from lidarproto.data_handler import DataHandler
from lidarproto.definitions import PointDataType

header = struct.pack(
    "<BHHHHBBB12sIQ",
    0, 50, 0, 1, 0, 0, PointDataType.CARTESIAN_HIGH, 0, b"", 0, 0,
)
datagram = header + struct.pack("<iiiBB", 1000, -250, 30, 80, 0)

handler = DataHandler()
handler.set_point_data_callback(
    lambda handle, dev_type, packet: print(handle, packet.points())
)
packet = handler.handle(9, 1, datagram)
```

## What it does not do

The package works on bytes already received. It opens no sockets: it does not
discover lidars, send commands or configuration, receive UDP traffic, or
upgrade firmware, and it has no command-line program.

## Tests

```
pip install -e .[test]
pytest
```