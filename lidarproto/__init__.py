"""Protocol definitions, state-info parsing, data dispatch and debug point cloud recording for lidars."""

__version__ = "0.1.0"

__all__ = [
    "definitions",
    "state_info",
    "state_json",
    "data_handler",
    "debug_point_cloud",
]