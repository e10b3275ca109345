"""Elevation-mask filtering of satellite states."""

from __future__ import annotations

import numpy as np

from gnss_pvt.models import SvState
from gnss_pvt.utils.wgs84 import ecef_to_enu_matrix, ecef_to_lla


def sv_elevations_rad(receiver_ecef_m: np.ndarray, sv_states: list[SvState]) -> np.ndarray:
    """Elevation of every satellite above the receiver's local horizon."""

    if not sv_states:
        return np.zeros(0)
    lat_deg, lon_deg, _ = ecef_to_lla(*receiver_ecef_m)
    rot = ecef_to_enu_matrix(lat_deg, lon_deg)
    deltas = np.array([state.pos_ecef_m for state in sv_states]) - np.asarray(receiver_ecef_m, dtype=float)
    enu = deltas @ rot.T
    return np.arctan2(enu[:, 2], np.hypot(enu[:, 0], enu[:, 1]))


def visible_sv_states(
    receiver_ecef_m: np.ndarray,
    sv_states: list[SvState],
    elevation_mask_deg: float = 10.0,
) -> list[SvState]:
    """Keep the satellites at or above the elevation mask."""

    elevations = sv_elevations_rad(receiver_ecef_m, sv_states)
    mask_rad = np.deg2rad(elevation_mask_deg)
    return [state for state, elev in zip(sv_states, elevations) if elev >= mask_rad]
