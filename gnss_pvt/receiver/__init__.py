"""Receiver-side estimation."""

from gnss_pvt.receiver.kalman_state import GnssKalmanState
from gnss_pvt.receiver.lsq_pvt import (
    CONVERGENCE_THRESHOLD,
    MAX_ITERATIONS,
    MIN_MEASUREMENTS,
    GnssLsqPvtEstimator,
    GnssLsqResult,
    LsqPvtListener,
    lsq_pvt,
)

__all__ = [
    "CONVERGENCE_THRESHOLD",
    "GnssKalmanState",
    "GnssLsqPvtEstimator",
    "GnssLsqResult",
    "LsqPvtListener",
    "MAX_ITERATIONS",
    "MIN_MEASUREMENTS",
    "lsq_pvt",
]
