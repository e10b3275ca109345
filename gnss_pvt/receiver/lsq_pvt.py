"""Iterative least-squares position, velocity and clock estimator.

A single-epoch Gauss-Newton solve over the 8-parameter receiver state
``[x, y, z, vx, vy, vz, clock_offset, clock_drift]``. Each iteration stacks one
pseudorange row and one pseudorange-rate row per measurement, solves the
unweighted normal equations and applies the correction, stopping once the
position correction falls below the convergence threshold.
"""

from __future__ import annotations

import logging
import threading
import warnings
from collections.abc import Collection, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

import astropy.units as u
import numpy as np
import scipy.linalg

from gnss_pvt.errors import GnssNumericalError, LockedError, NotReadyError
from gnss_pvt.meas.pseudorange import predict_observation
from gnss_pvt.models import DopMetrics, EcefPositionAndVelocity, GnssEstimation, GnssMeasurement
from gnss_pvt.utils import units
from gnss_pvt.utils.wgs84 import ecef_to_enu_matrix, ecef_to_lla

MIN_MEASUREMENTS = 4
CONVERGENCE_THRESHOLD = 1e-4
MAX_ITERATIONS = 20
STATE_DIM = GnssEstimation.NUM_PARAMETERS

# State-vector columns fed by each observation type.
_PR_COLUMNS = [0, 1, 2, 6]
_PRR_COLUMNS = [3, 4, 5, 7]

_LOG = logging.getLogger(__name__)


class LsqPvtListener:
    """Receives synchronous notifications from :class:`GnssLsqPvtEstimator`.

    Both callbacks run on the thread that called ``estimate`` while the
    estimator is locked.
    """

    def on_estimate_start(self, estimator: GnssLsqPvtEstimator) -> None:
        """Called before the first iteration."""

    def on_estimate_end(self, estimator: GnssLsqPvtEstimator) -> None:
        """Called once the estimate is finished, whether it succeeded or not."""


@dataclass(frozen=True, eq=False)
class GnssLsqResult:
    """Least-squares fix with post-fit diagnostics."""

    pos_ecef_m: np.ndarray
    vel_ecef_mps: np.ndarray
    clock_offset_m: float
    clock_drift_mps: float
    iterations: int
    pr_residuals_m: np.ndarray
    prr_residuals_mps: np.ndarray
    dop: DopMetrics

    @property
    def pos_quantity(self) -> u.Quantity:
        return units.distance(self.pos_ecef_m)

    @property
    def vel_quantity(self) -> u.Quantity:
        return units.speed(self.vel_ecef_mps)

    @property
    def clock_offset_quantity(self) -> u.Quantity:
        return units.distance(self.clock_offset_m)

    @property
    def clock_drift_quantity(self) -> u.Quantity:
        return units.speed(self.clock_drift_mps)

    @property
    def position_and_velocity(self) -> EcefPositionAndVelocity:
        return EcefPositionAndVelocity.from_vectors(self.pos_ecef_m, self.vel_ecef_mps)

    def to_estimation(self, out: GnssEstimation | None = None) -> GnssEstimation:
        estimation = out if out is not None else GnssEstimation()
        estimation.pos_ecef_m = self.pos_ecef_m
        estimation.vel_ecef_mps = self.vel_ecef_mps
        estimation.clock_offset_m = self.clock_offset_m
        estimation.clock_drift_mps = self.clock_drift_mps
        return estimation


def build_linear_system(
    state: GnssEstimation, measurements: Sequence[GnssMeasurement]
) -> tuple[np.ndarray, np.ndarray]:
    """Linearize every measurement about ``state``.

    Returns:
        ``(h, dz)`` where ``h`` is the ``2N x 8`` design matrix (pseudorange rows
        first, then pseudorange-rate rows) and ``dz`` the observed-minus-predicted
        residual vector.
    """

    n = len(measurements)
    h = np.zeros((2 * n, STATE_DIM), dtype=float)
    dz = np.zeros(2 * n, dtype=float)
    pos = state.pos_ecef_m
    vel = state.vel_ecef_mps
    for j, meas in enumerate(measurements):
        try:
            prediction = predict_observation(
                pos,
                vel,
                state.clock_offset_m,
                state.clock_drift_mps,
                meas.sat_pos_ecef_m,
                meas.sat_vel_ecef_mps,
            )
        except ValueError as exc:
            raise GnssNumericalError(f"degenerate geometry for measurement {j}") from exc
        row = prediction.h_row
        h[j, _PR_COLUMNS] = row
        h[n + j, _PRR_COLUMNS] = row
        dz[j] = meas.pr_m - prediction.pseudorange_m
        dz[n + j] = meas.prr_mps - prediction.pseudorange_rate_mps
    return h, dz


def solve_normal_equations(h: np.ndarray, dz: np.ndarray) -> np.ndarray:
    """Ordinary least-squares correction from ``(H^T H) dx = H^T dz``.

    Raises:
        GnssNumericalError: If the inputs are not finite or the normal matrix
            is singular or ill-conditioned.
    """

    if not (np.all(np.isfinite(h)) and np.all(np.isfinite(dz))):
        raise GnssNumericalError("non-finite values in the linearized system")
    normal = h.T @ h
    with warnings.catch_warnings():
        warnings.simplefilter("error", scipy.linalg.LinAlgWarning)
        try:
            delta = scipy.linalg.solve(normal, h.T @ dz, assume_a="pos")
        except (np.linalg.LinAlgError, scipy.linalg.LinAlgWarning) as exc:
            raise GnssNumericalError("normal equations are singular or ill-conditioned") from exc
    if not np.all(np.isfinite(delta)):
        raise GnssNumericalError("least-squares update is not finite")
    return delta


def compute_dop(h: np.ndarray, pos_ecef_m: np.ndarray) -> DopMetrics:
    """DOP from pseudorange geometry rows, with the position block in local ENU."""

    geometry = h[:, _PR_COLUMNS]
    try:
        q = np.linalg.inv(geometry.T @ geometry)
    except np.linalg.LinAlgError:
        inf = float("inf")
        return DopMetrics(gdop=inf, pdop=inf, hdop=inf, vdop=inf, tdop=inf)
    lat_deg, lon_deg, _ = ecef_to_lla(*pos_ecef_m)
    rot = ecef_to_enu_matrix(lat_deg, lon_deg)
    q_enu = rot @ q[:3, :3] @ rot.T
    return DopMetrics(
        gdop=float(np.sqrt(np.trace(q))),
        pdop=float(np.sqrt(np.trace(q_enu))),
        hdop=float(np.sqrt(q_enu[0, 0] + q_enu[1, 1])),
        vdop=float(np.sqrt(q_enu[2, 2])),
        tdop=float(np.sqrt(q[3, 3])),
    )


class GnssLsqPvtEstimator:
    """Single-epoch least-squares estimator of receiver position, velocity and clock.

    The estimator is reusable: configure it, call :meth:`estimate`, reconfigure
    and run again. While an estimate is in flight every mutator and any nested
    ``estimate`` call raises :class:`LockedError`. Measurements and priors are
    read, never modified, and are not copied.
    """

    def __init__(
        self,
        measurements: Collection[GnssMeasurement] | None = None,
        prior: EcefPositionAndVelocity | GnssEstimation | None = None,
        listener: LsqPvtListener | None = None,
        *,
        convergence_threshold: float = CONVERGENCE_THRESHOLD,
        max_iterations: int = MAX_ITERATIONS,
    ) -> None:
        self._lock = threading.Lock()
        self._running = False
        self._measurements: Collection[GnssMeasurement] | None = None
        self._prior: EcefPositionAndVelocity | GnssEstimation | None = None
        self._listener: LsqPvtListener | None = None
        self._convergence_threshold = CONVERGENCE_THRESHOLD
        self._max_iterations = MAX_ITERATIONS

        if measurements is not None:
            self.measurements = measurements
        self.prior = prior
        self.listener = listener
        self.convergence_threshold = convergence_threshold
        self.max_iterations = max_iterations

    @staticmethod
    def is_valid_measurements(measurements: Collection[GnssMeasurement] | None) -> bool:
        """True if ``measurements`` holds at least ``MIN_MEASUREMENTS`` items."""

        return measurements is not None and len(measurements) >= MIN_MEASUREMENTS

    @contextmanager
    def _configuring(self) -> Iterator[None]:
        with self._lock:
            if self._running:
                raise LockedError("estimator is running")
            yield

    @property
    def measurements(self) -> Collection[GnssMeasurement] | None:
        return self._measurements

    @measurements.setter
    def measurements(self, value: Collection[GnssMeasurement]) -> None:
        with self._configuring():
            if not self.is_valid_measurements(value):
                raise ValueError(f"at least {MIN_MEASUREMENTS} measurements are required")
            self._measurements = value

    @property
    def prior(self) -> EcefPositionAndVelocity | GnssEstimation | None:
        """Initial guess: a position/velocity pair or a full estimation."""

        return self._prior

    @prior.setter
    def prior(self, value: EcefPositionAndVelocity | GnssEstimation | None) -> None:
        if value is not None and not isinstance(value, (EcefPositionAndVelocity, GnssEstimation)):
            raise TypeError(f"unsupported prior type: {type(value).__name__}")
        with self._configuring():
            self._prior = value

    @property
    def prior_position_and_velocity(self) -> EcefPositionAndVelocity | None:
        if isinstance(self._prior, GnssEstimation):
            return self._prior.position_and_velocity
        return self._prior

    def set_prior_position_and_velocity(self, value: EcefPositionAndVelocity | None) -> None:
        self.prior = value

    def set_prior_from_estimation(self, value: GnssEstimation | None) -> None:
        """Seed position, velocity and clock terms from a previous estimation."""

        self.prior = value

    @property
    def listener(self) -> LsqPvtListener | None:
        return self._listener

    @listener.setter
    def listener(self, value: LsqPvtListener | None) -> None:
        with self._configuring():
            self._listener = value

    @property
    def convergence_threshold(self) -> float:
        """Position-correction norm (m) below which iteration stops."""

        return self._convergence_threshold

    @convergence_threshold.setter
    def convergence_threshold(self, value: float) -> None:
        with self._configuring():
            if not value > 0.0:
                raise ValueError("convergence_threshold must be > 0")
            self._convergence_threshold = float(value)

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        with self._configuring():
            if value < 1:
                raise ValueError("max_iterations must be >= 1")
            self._max_iterations = int(value)

    @property
    def is_ready(self) -> bool:
        return self.is_valid_measurements(self._measurements)

    @property
    def is_running(self) -> bool:
        return self._running

    def estimate(self, result: GnssEstimation | None = None) -> GnssEstimation:
        """Run the solver and return the converged state.

        Args:
            result: Optional estimation to overwrite instead of allocating one.

        Raises:
            NotReadyError: Fewer than ``MIN_MEASUREMENTS`` measurements are set.
            LockedError: Another estimate is already running on this instance.
            GnssNumericalError: The normal equations could not be solved or the
                iteration did not converge within ``max_iterations``.
        """

        return self.estimate_result().to_estimation(result)

    def estimate_result(self) -> GnssLsqResult:
        """Like :meth:`estimate` but returns the fix with its diagnostics."""

        with self._lock:
            if not self.is_ready:
                raise NotReadyError(f"at least {MIN_MEASUREMENTS} measurements are required")
            if self._running:
                raise LockedError("estimator is running")
            self._running = True
        try:
            listener = self._listener
            if listener is not None:
                listener.on_estimate_start(self)
            try:
                return self._solve(list(self._measurements), self._initial_state())
            finally:
                if listener is not None:
                    listener.on_estimate_end(self)
        finally:
            with self._lock:
                self._running = False

    def _initial_state(self) -> GnssEstimation:
        if isinstance(self._prior, GnssEstimation):
            return self._prior.copy()
        if isinstance(self._prior, EcefPositionAndVelocity):
            return GnssEstimation.from_position_and_velocity(self._prior)
        return GnssEstimation()

    def _solve(self, measurements: list[GnssMeasurement], state: GnssEstimation) -> GnssLsqResult:
        for iteration in range(1, self._max_iterations + 1):
            h, dz = build_linear_system(state, measurements)
            delta = solve_normal_equations(h, dz)
            state.set_from_array(state.to_array() + delta)
            step_m = float(np.linalg.norm(delta[:3]))
            _LOG.debug("iteration %d: position correction %.6g m", iteration, step_m)
            if step_m < self._convergence_threshold:
                break
        else:
            raise GnssNumericalError(
                f"no convergence within {self._max_iterations} iterations "
                f"(last position correction {step_m:.6g} m)"
            )

        h, dz = build_linear_system(state, measurements)
        n = len(measurements)
        _LOG.debug("converged after %d iterations with %d measurements", iteration, n)
        return GnssLsqResult(
            pos_ecef_m=state.pos_ecef_m,
            vel_ecef_mps=state.vel_ecef_mps,
            clock_offset_m=state.clock_offset_m,
            clock_drift_mps=state.clock_drift_mps,
            iterations=iteration,
            pr_residuals_m=dz[:n].copy(),
            prr_residuals_mps=dz[n:].copy(),
            dop=compute_dop(h, state.pos_ecef_m),
        )


def lsq_pvt(
    measurements: Collection[GnssMeasurement],
    prior: EcefPositionAndVelocity | GnssEstimation | None = None,
    *,
    convergence_threshold: float = CONVERGENCE_THRESHOLD,
    max_iterations: int = MAX_ITERATIONS,
) -> GnssLsqResult:
    """Solve one epoch without keeping an estimator around.

    Raises:
        ValueError: If fewer than ``MIN_MEASUREMENTS`` measurements are given.
        GnssNumericalError: If the solve fails.
    """

    estimator = GnssLsqPvtEstimator(
        measurements,
        prior,
        convergence_threshold=convergence_threshold,
        max_iterations=max_iterations,
    )
    return estimator.estimate_result()
