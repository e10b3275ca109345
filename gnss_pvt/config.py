"""Configuration objects for GNSS constellation and measurement simulation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

MIN_SATELLITES = 4


@dataclass(frozen=True)
class GnssConfig:
    """Constellation and error-model defaults.

    Distances are in meters, rates in meters/second. Receiver clock terms are
    expressed as range equivalents (offset in m, drift in m/s).
    """

    epoch_interval_s: float = 1.0
    num_sats: int = 30
    orbit_radius_m: float = 2.656175e7
    inclination_deg: float = 55.0
    const_lon_offset_deg: float = 0.0
    const_timing_offset_s: float = 0.0
    mask_angle_deg: float = 10.0
    sis_error_sd_m: float = 1.0
    zenith_iono_sd_m: float = 2.0
    zenith_tropo_sd_m: float = 0.2
    code_tracking_sd_m: float = 1.0
    range_rate_tracking_sd_mps: float = 0.02
    rx_clock_offset_m: float = 10_000.0
    rx_clock_drift_mps: float = 100.0

    def __post_init__(self) -> None:
        if self.epoch_interval_s < 0.0:
            raise ValueError("epoch_interval_s must be non-negative")
        if self.num_sats < MIN_SATELLITES:
            raise ValueError(f"num_sats must be >= {MIN_SATELLITES}")
        if self.orbit_radius_m <= 0.0:
            raise ValueError("orbit_radius_m must be > 0")
        if not 0.0 <= self.mask_angle_deg <= 90.0:
            raise ValueError("mask_angle_deg must be within [0, 90]")
        for name in (
            "sis_error_sd_m",
            "zenith_iono_sd_m",
            "zenith_tropo_sd_m",
            "code_tracking_sd_m",
            "range_rate_tracking_sd_mps",
        ):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative")

    @property
    def mask_angle_rad(self) -> float:
        return float(np.deg2rad(self.mask_angle_deg))
