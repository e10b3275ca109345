"""GNSS single-epoch position, velocity and clock estimation."""

from gnss_pvt.config import GnssConfig
from gnss_pvt.errors import GnssError, GnssNumericalError, LockedError, NotReadyError
from gnss_pvt.models import EcefPositionAndVelocity, GnssEstimation, GnssMeasurement
from gnss_pvt.receiver import GnssKalmanState, GnssLsqPvtEstimator, GnssLsqResult, lsq_pvt

__all__ = [
    "EcefPositionAndVelocity",
    "GnssConfig",
    "GnssError",
    "GnssEstimation",
    "GnssKalmanState",
    "GnssLsqPvtEstimator",
    "GnssLsqResult",
    "GnssMeasurement",
    "GnssNumericalError",
    "LockedError",
    "NotReadyError",
    "lsq_pvt",
    "meas",
    "receiver",
    "sat",
    "utils",
]
