"""State container for a recursive GNSS filter."""

from __future__ import annotations

import numpy as np

from gnss_pvt.models import GnssEstimation

STATE_DIM = GnssEstimation.NUM_PARAMETERS


def _validated_covariance(covariance: np.ndarray) -> np.ndarray:
    matrix = np.array(covariance, dtype=float)
    if matrix.shape != (STATE_DIM, STATE_DIM):
        raise ValueError(f"covariance must have shape ({STATE_DIM}, {STATE_DIM}), got {matrix.shape}")
    return matrix


class GnssKalmanState:
    """Estimation plus its 8x8 error covariance. Either part may be unset.

    Copies only transfer the parts the source actually holds: copying from a
    state with no covariance leaves the destination's covariance as it was.
    """

    def __init__(
        self,
        estimation: GnssEstimation | None = None,
        covariance: np.ndarray | None = None,
    ) -> None:
        self.estimation = estimation
        self._covariance: np.ndarray | None = None
        if covariance is not None:
            self.covariance = covariance

    @property
    def covariance(self) -> np.ndarray | None:
        return self._covariance

    @covariance.setter
    def covariance(self, value: np.ndarray) -> None:
        self._covariance = _validated_covariance(value)

    def copy(self) -> GnssKalmanState:
        result = GnssKalmanState()
        self.copy_to(result)
        return result

    def copy_to(self, output: GnssKalmanState) -> None:
        output.copy_from(self)

    def copy_from(self, source: GnssKalmanState) -> None:
        if source.estimation is not None:
            if self.estimation is None:
                self.estimation = source.estimation.copy()
            else:
                self.estimation.copy_from(source.estimation)
        if source.covariance is not None:
            self._covariance = source.covariance.copy()

    def is_close(self, other: GnssKalmanState | None, threshold: float = 0.0) -> bool:
        """Compare estimation and covariance element-wise within ``threshold``.

        Unset parts only match unset parts.
        """

        if other is None:
            return False
        if (self.estimation is None) != (other.estimation is None):
            return False
        if (self._covariance is None) != (other.covariance is None):
            return False
        if self.estimation is not None and not self.estimation.is_close(other.estimation, threshold):
            return False
        if self._covariance is not None:
            return bool(np.all(np.abs(self._covariance - other.covariance) <= threshold))
        return True
