"""Circular-orbit GNSS constellation generator."""

from __future__ import annotations

import numpy as np

from gnss_pvt.config import GnssConfig
from gnss_pvt.meas.pseudorange import OMEGA_EARTH
from gnss_pvt.models import Constellation, SvState

MU_EARTH = 3.986004418e14
NUM_PLANES = 6


class CircularOrbitConstellation(Constellation):
    """Deterministic constellation with satellites spread over six planes.

    Satellite ``j`` (1-based) has argument of latitude
    ``2*pi*(j - 1)/N + omega_is*(t + timing_offset)`` and its plane's
    ascending node sits at ``pi*(j mod 6)/3 + lon_offset - omega_ie*t`` in ECEF.
    """

    def __init__(self, config: GnssConfig | None = None) -> None:
        self.config = config or GnssConfig()
        self._num_sats = self.config.num_sats
        self._radius_m = self.config.orbit_radius_m
        self._inclination_rad = np.deg2rad(self.config.inclination_deg)
        self._lon_offset_rad = np.deg2rad(self.config.const_lon_offset_deg)
        self._mean_motion = float(np.sqrt(MU_EARTH / self._radius_m**3))

    @property
    def mean_motion_rps(self) -> float:
        return self._mean_motion

    def get_sv_states(self, t: float) -> list[SvState]:
        """Return ECEF satellite states at the requested epoch."""

        cos_inc = np.cos(self._inclination_rad)
        sin_inc = np.sin(self._inclination_rad)
        sv_states: list[SvState] = []
        for idx in range(self._num_sats):
            arg_lat = (
                2.0 * np.pi * idx / self._num_sats
                + self._mean_motion * (t + self.config.const_timing_offset_s)
            )
            x_orb = self._radius_m * np.cos(arg_lat)
            y_orb = self._radius_m * np.sin(arg_lat)
            vx_orb = -self._radius_m * self._mean_motion * np.sin(arg_lat)
            vy_orb = self._radius_m * self._mean_motion * np.cos(arg_lat)

            raan = np.pi * ((idx + 1) % NUM_PLANES) / 3.0 + self._lon_offset_rad - OMEGA_EARTH * t
            cos_raan = np.cos(raan)
            sin_raan = np.sin(raan)

            pos = np.array(
                [
                    x_orb * cos_raan - y_orb * cos_inc * sin_raan,
                    x_orb * sin_raan + y_orb * cos_inc * cos_raan,
                    y_orb * sin_inc,
                ],
                dtype=float,
            )
            vel = np.array(
                [
                    vx_orb * cos_raan - vy_orb * cos_inc * sin_raan + OMEGA_EARTH * pos[1],
                    vx_orb * sin_raan + vy_orb * cos_inc * cos_raan - OMEGA_EARTH * pos[0],
                    vy_orb * sin_inc,
                ],
                dtype=float,
            )
            sv_states.append(SvState(sv_id=f"G{idx + 1:02d}", t=t, pos_ecef_m=pos, vel_ecef_mps=vel))
        return sv_states
