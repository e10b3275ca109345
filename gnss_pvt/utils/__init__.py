"""Utilities shared by the GNSS PVT modules.

NOTE: Keep this package lightweight; it is imported by every other subpackage.
"""

from gnss_pvt.utils.angles import elev_az_from_rx_sv, elevation_rad
from gnss_pvt.utils.logging import get_logger
from gnss_pvt.utils.wgs84 import (
    ecef_to_enu_matrix,
    ecef_to_lla,
    ecef_to_ned_matrix,
    ecef_to_ned_velocity,
    enu_from_ecef_delta,
    lla_to_ecef,
    ned_to_ecef_velocity,
)

__all__ = [
    "ecef_to_enu_matrix",
    "ecef_to_lla",
    "ecef_to_ned_matrix",
    "ecef_to_ned_velocity",
    "elev_az_from_rx_sv",
    "elevation_rad",
    "enu_from_ecef_delta",
    "get_logger",
    "lla_to_ecef",
    "ned_to_ecef_velocity",
]
