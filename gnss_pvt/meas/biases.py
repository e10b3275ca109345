"""Elevation-dependent signal-in-space and atmospheric range biases."""

from __future__ import annotations

import numpy as np

from gnss_pvt.config import GnssConfig
from gnss_pvt.utils.angles import elevation_rad


def iono_sigma_m(elev_rad: float, zenith_sd_m: float) -> float:
    """Ionosphere error SD mapped from zenith to the given elevation."""

    return float(zenith_sd_m / np.sqrt(1.0 - 0.899 * np.cos(elev_rad) ** 2))


def tropo_sigma_m(elev_rad: float, zenith_sd_m: float) -> float:
    """Troposphere error SD mapped from zenith to the given elevation."""

    return float(zenith_sd_m / np.sqrt(1.0 - 0.998 * np.cos(elev_rad) ** 2))


def generate_bias_m(
    sv_ecef_m: np.ndarray,
    receiver_ecef_m: np.ndarray,
    config: GnssConfig,
    rng: np.random.Generator,
) -> float:
    """Draw a constant pseudorange bias for one satellite.

    The bias is the sum of independent Gaussian signal-in-space, ionosphere
    and troposphere errors, the latter two scaled by elevation.
    """

    elev = elevation_rad(receiver_ecef_m, sv_ecef_m)
    sis = config.sis_error_sd_m * rng.standard_normal()
    iono = iono_sigma_m(elev, config.zenith_iono_sd_m) * rng.standard_normal()
    tropo = tropo_sigma_m(elev, config.zenith_tropo_sd_m) * rng.standard_normal()
    return float(sis + iono + tropo)


def generate_biases(
    sv_positions_ecef_m: list[np.ndarray],
    receiver_ecef_m: np.ndarray,
    config: GnssConfig,
    rng: np.random.Generator,
) -> list[float | None]:
    """Return one bias per satellite, ``None`` where it is below the mask."""

    biases: list[float | None] = []
    for sv_pos in sv_positions_ecef_m:
        if elevation_rad(receiver_ecef_m, sv_pos) < config.mask_angle_rad:
            biases.append(None)
            continue
        biases.append(generate_bias_m(sv_pos, receiver_ecef_m, config, rng))
    return biases
