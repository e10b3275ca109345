"""Pseudorange and pseudorange-rate observation model.

Implements the single-point-positioning geometry of Groves (2013), eqs.
8.35-8.44 and 9.143-9.144: the satellite position is rotated by the angle the
Earth turns during the signal transit time (Sagnac correction) before the range,
line of sight and range rate are formed. Every function is pure so the same
model serves the estimator and the measurement simulator.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

LIGHT_SPEED_MPS = 299_792_458.0
OMEGA_EARTH = 7.292115e-5


def skew(vector: np.ndarray) -> np.ndarray:
    """Return the skew-symmetric (cross-product) matrix of a 3-vector."""

    x, y, z = np.asarray(vector, dtype=float)
    return np.array(
        [
            [0.0, -z, y],
            [z, 0.0, -x],
            [-y, x, 0.0],
        ],
        dtype=float,
    )


# Earth-rotation-rate matrix, Omega_ie.
OMEGA_IE = skew([0.0, 0.0, OMEGA_EARTH])


def geometric_range_m(receiver_ecef_m: np.ndarray, sv_ecef_m: np.ndarray) -> float:
    """Straight-line range between receiver and satellite (no Sagnac term)."""

    return float(np.linalg.norm(np.asarray(sv_ecef_m, dtype=float) - np.asarray(receiver_ecef_m, dtype=float)))


def sagnac_rotation(transit_time_s: float) -> np.ndarray:
    """First-order frame rotation about the polar axis during signal transit."""

    angle = OMEGA_EARTH * transit_time_s
    c_e = np.eye(3)
    c_e[0, 1] = angle
    c_e[1, 0] = -angle
    return c_e


@dataclass(frozen=True, eq=False)
class ObservationPrediction:
    """Predicted observables and line of sight for one satellite."""

    range_m: float
    los_unit: np.ndarray
    pseudorange_m: float
    range_rate_mps: float
    pseudorange_rate_mps: float
    sagnac_matrix: np.ndarray

    @property
    def h_row(self) -> np.ndarray:
        """Design-matrix row ``[-u_x, -u_y, -u_z, 1]``.

        The same row applies to the position/clock-offset block and to the
        velocity/clock-drift block.
        """

        return np.append(-self.los_unit, 1.0)


def sagnac_range_m(
    receiver_ecef_m: np.ndarray, sv_ecef_m: np.ndarray
) -> tuple[float, np.ndarray, np.ndarray]:
    """Return corrected range, unit line of sight and the rotation matrix used.

    Raises:
        ValueError: If receiver and satellite positions coincide.
    """

    rx = np.asarray(receiver_ecef_m, dtype=float)
    sv = np.asarray(sv_ecef_m, dtype=float)
    approx_range = geometric_range_m(rx, sv)
    c_e = sagnac_rotation(approx_range / LIGHT_SPEED_MPS)
    delta = c_e @ sv - rx
    range_m = float(np.linalg.norm(delta))
    if range_m <= 0.0:
        raise ValueError("receiver and satellite positions coincide")
    return range_m, delta / range_m, c_e


def predict_observation(
    receiver_ecef_m: np.ndarray,
    receiver_vel_ecef_mps: np.ndarray,
    clock_offset_m: float,
    clock_drift_mps: float,
    sv_ecef_m: np.ndarray,
    sv_vel_ecef_mps: np.ndarray,
) -> ObservationPrediction:
    """Predict pseudorange and pseudorange rate for a receiver/satellite pair."""

    rx = np.asarray(receiver_ecef_m, dtype=float)
    rx_vel = np.asarray(receiver_vel_ecef_mps, dtype=float)
    sv = np.asarray(sv_ecef_m, dtype=float)
    sv_vel = np.asarray(sv_vel_ecef_mps, dtype=float)

    range_m, los_unit, c_e = sagnac_range_m(rx, sv)
    relative_vel = c_e @ (sv_vel + OMEGA_IE @ sv) - (rx_vel + OMEGA_IE @ rx)
    range_rate = float(los_unit @ relative_vel)
    return ObservationPrediction(
        range_m=range_m,
        los_unit=los_unit,
        pseudorange_m=range_m + float(clock_offset_m),
        range_rate_mps=range_rate,
        pseudorange_rate_mps=range_rate + float(clock_drift_mps),
        sagnac_matrix=c_e,
    )
