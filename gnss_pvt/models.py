"""Core data models and interfaces for GNSS point positioning."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import ClassVar

import astropy.units as u
import numpy as np

from gnss_pvt.utils import units


def _as_vector3(value: np.ndarray | list[float] | tuple[float, ...], name: str) -> np.ndarray:
    vector = np.array(value, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"{name} must have exactly 3 components, got shape {np.shape(value)}")
    return vector


@dataclass
class EcefPositionAndVelocity:
    """ECEF position (m) and velocity (m/s) of a receiver or satellite."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0

    def __post_init__(self) -> None:
        for name in ("x", "y", "z", "vx", "vy", "vz"):
            setattr(self, name, float(getattr(self, name)))

    @classmethod
    def from_vectors(
        cls,
        pos_ecef_m: np.ndarray,
        vel_ecef_mps: np.ndarray | None = None,
    ) -> EcefPositionAndVelocity:
        pos = _as_vector3(pos_ecef_m, "pos_ecef_m")
        vel = np.zeros(3) if vel_ecef_mps is None else _as_vector3(vel_ecef_mps, "vel_ecef_mps")
        return cls(*pos, *vel)

    @classmethod
    def from_quantities(
        cls,
        x: u.Quantity,
        y: u.Quantity,
        z: u.Quantity,
        vx: u.Quantity = 0.0 * units.METERS_PER_SECOND,
        vy: u.Quantity = 0.0 * units.METERS_PER_SECOND,
        vz: u.Quantity = 0.0 * units.METERS_PER_SECOND,
    ) -> EcefPositionAndVelocity:
        return cls(
            units.to_meters(x),
            units.to_meters(y),
            units.to_meters(z),
            units.to_meters_per_second(vx),
            units.to_meters_per_second(vy),
            units.to_meters_per_second(vz),
        )

    @property
    def pos_ecef_m(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @pos_ecef_m.setter
    def pos_ecef_m(self, value: np.ndarray) -> None:
        self.x, self.y, self.z = (float(v) for v in _as_vector3(value, "pos_ecef_m"))

    @property
    def vel_ecef_mps(self) -> np.ndarray:
        return np.array([self.vx, self.vy, self.vz], dtype=float)

    @vel_ecef_mps.setter
    def vel_ecef_mps(self, value: np.ndarray) -> None:
        self.vx, self.vy, self.vz = (float(v) for v in _as_vector3(value, "vel_ecef_mps"))

    @property
    def pos_quantity(self) -> u.Quantity:
        return units.distance(self.pos_ecef_m)

    @property
    def vel_quantity(self) -> u.Quantity:
        return units.speed(self.vel_ecef_mps)

    def copy(self) -> EcefPositionAndVelocity:
        return replace(self)

    def copy_to(self, output: EcefPositionAndVelocity) -> None:
        output.copy_from(self)

    def copy_from(self, source: EcefPositionAndVelocity) -> None:
        self.x, self.y, self.z = source.x, source.y, source.z
        self.vx, self.vy, self.vz = source.vx, source.vy, source.vz

    def is_close(self, other: EcefPositionAndVelocity | None, threshold: float = 0.0) -> bool:
        """Component-wise comparison within ``threshold``."""

        if other is None:
            return False
        return bool(
            np.all(np.abs(self.pos_ecef_m - other.pos_ecef_m) <= threshold)
            and np.all(np.abs(self.vel_ecef_mps - other.vel_ecef_mps) <= threshold)
        )


@dataclass(frozen=True, eq=False)
class SvState:
    """Satellite ECEF state at a given epoch."""

    sv_id: str
    t: float
    pos_ecef_m: np.ndarray
    vel_ecef_mps: np.ndarray

    @property
    def position_and_velocity(self) -> EcefPositionAndVelocity:
        return EcefPositionAndVelocity.from_vectors(self.pos_ecef_m, self.vel_ecef_mps)


@dataclass(frozen=True, eq=False)
class GnssMeasurement:
    """Single-satellite pseudorange/pseudorange-rate observation.

    The satellite state is the ECEF position/velocity at time of transmission.
    The vectors are stored read-only so consumers cannot alter a caller's
    measurement in place.
    """

    pr_m: float
    prr_mps: float
    sat_pos_ecef_m: np.ndarray
    sat_vel_ecef_mps: np.ndarray = field(default_factory=lambda: np.zeros(3))
    sv_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "pr_m", float(self.pr_m))
        object.__setattr__(self, "prr_mps", float(self.prr_mps))
        for name in ("sat_pos_ecef_m", "sat_vel_ecef_mps"):
            vector = _as_vector3(getattr(self, name), name)
            vector.flags.writeable = False
            object.__setattr__(self, name, vector)

    @classmethod
    def from_position_and_velocity(
        cls,
        pr_m: float,
        prr_mps: float,
        sat: EcefPositionAndVelocity,
        sv_id: str | None = None,
    ) -> GnssMeasurement:
        return cls(pr_m, prr_mps, sat.pos_ecef_m, sat.vel_ecef_mps, sv_id=sv_id)

    @classmethod
    def from_quantities(
        cls,
        pseudorange: u.Quantity,
        pseudorange_rate: u.Quantity,
        sat: EcefPositionAndVelocity,
        sv_id: str | None = None,
    ) -> GnssMeasurement:
        return cls.from_position_and_velocity(
            units.to_meters(pseudorange),
            units.to_meters_per_second(pseudorange_rate),
            sat,
            sv_id=sv_id,
        )

    @property
    def sat_state(self) -> EcefPositionAndVelocity:
        return EcefPositionAndVelocity.from_vectors(self.sat_pos_ecef_m, self.sat_vel_ecef_mps)

    @property
    def pr_quantity(self) -> u.Quantity:
        return units.distance(self.pr_m)

    @property
    def prr_quantity(self) -> u.Quantity:
        return units.speed(self.prr_mps)

    def is_close(self, other: GnssMeasurement | None, threshold: float = 0.0) -> bool:
        """Component-wise comparison within ``threshold`` (``sv_id`` is ignored)."""

        if other is None:
            return False
        return bool(
            abs(self.pr_m - other.pr_m) <= threshold
            and abs(self.prr_mps - other.prr_mps) <= threshold
            and np.all(np.abs(self.sat_pos_ecef_m - other.sat_pos_ecef_m) <= threshold)
            and np.all(np.abs(self.sat_vel_ecef_mps - other.sat_vel_ecef_mps) <= threshold)
        )


@dataclass
class GnssEstimation:
    """Receiver state: ECEF position/velocity plus clock offset/drift.

    Clock terms are range equivalents (meters and meters/second). The
    flat-vector layout is ``[x, y, z, vx, vy, vz, clock_offset, clock_drift]``.
    """

    NUM_PARAMETERS: ClassVar[int] = 8

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    clock_offset_m: float = 0.0
    clock_drift_mps: float = 0.0

    def __post_init__(self) -> None:
        self._assign(np.array(self._values(), dtype=float))

    @classmethod
    def from_position_and_velocity(
        cls,
        position_and_velocity: EcefPositionAndVelocity,
        clock_offset_m: float = 0.0,
        clock_drift_mps: float = 0.0,
    ) -> GnssEstimation:
        pv = position_and_velocity
        return cls(pv.x, pv.y, pv.z, pv.vx, pv.vy, pv.vz, clock_offset_m, clock_drift_mps)

    @classmethod
    def from_quantities(
        cls,
        pos: tuple[u.Quantity, u.Quantity, u.Quantity],
        vel: tuple[u.Quantity, u.Quantity, u.Quantity],
        clock_offset: u.Quantity,
        clock_drift: u.Quantity,
    ) -> GnssEstimation:
        return cls(
            *(units.to_meters(q) for q in pos),
            *(units.to_meters_per_second(q) for q in vel),
            units.to_meters(clock_offset),
            units.to_meters_per_second(clock_drift),
        )

    @classmethod
    def from_array(cls, array: np.ndarray) -> GnssEstimation:
        estimation = cls()
        estimation.set_from_array(array)
        return estimation

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> GnssEstimation:
        estimation = cls()
        estimation.set_from_matrix(matrix)
        return estimation

    @property
    def pos_ecef_m(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @pos_ecef_m.setter
    def pos_ecef_m(self, value: np.ndarray) -> None:
        self.x, self.y, self.z = (float(v) for v in _as_vector3(value, "pos_ecef_m"))

    @property
    def vel_ecef_mps(self) -> np.ndarray:
        return np.array([self.vx, self.vy, self.vz], dtype=float)

    @vel_ecef_mps.setter
    def vel_ecef_mps(self, value: np.ndarray) -> None:
        self.vx, self.vy, self.vz = (float(v) for v in _as_vector3(value, "vel_ecef_mps"))

    @property
    def position_and_velocity(self) -> EcefPositionAndVelocity:
        return EcefPositionAndVelocity(self.x, self.y, self.z, self.vx, self.vy, self.vz)

    @position_and_velocity.setter
    def position_and_velocity(self, value: EcefPositionAndVelocity) -> None:
        self.x, self.y, self.z = value.x, value.y, value.z
        self.vx, self.vy, self.vz = value.vx, value.vy, value.vz

    @property
    def pos_quantity(self) -> u.Quantity:
        return units.distance(self.pos_ecef_m)

    @property
    def vel_quantity(self) -> u.Quantity:
        return units.speed(self.vel_ecef_mps)

    @property
    def clock_offset_quantity(self) -> u.Quantity:
        return units.distance(self.clock_offset_m)

    @clock_offset_quantity.setter
    def clock_offset_quantity(self, value: u.Quantity) -> None:
        self.clock_offset_m = units.to_meters(value)

    @property
    def clock_drift_quantity(self) -> u.Quantity:
        return units.speed(self.clock_drift_mps)

    @clock_drift_quantity.setter
    def clock_drift_quantity(self, value: u.Quantity) -> None:
        self.clock_drift_mps = units.to_meters_per_second(value)

    def to_array(self, out: np.ndarray | None = None) -> np.ndarray:
        """Return the 8-element state vector, optionally filling ``out``."""

        if out is None:
            return np.array(self._values(), dtype=float)
        if np.shape(out) != (self.NUM_PARAMETERS,):
            raise ValueError(f"output array must have shape ({self.NUM_PARAMETERS},), got {np.shape(out)}")
        out[:] = self._values()
        return out

    def set_from_array(self, array: np.ndarray) -> None:
        values = np.asarray(array, dtype=float)
        if values.shape != (self.NUM_PARAMETERS,):
            raise ValueError(f"array must have shape ({self.NUM_PARAMETERS},), got {values.shape}")
        self._assign(values)

    def to_matrix(self) -> np.ndarray:
        """Return the state as an 8x1 column matrix."""

        return self.to_array().reshape(self.NUM_PARAMETERS, 1)

    def set_from_matrix(self, matrix: np.ndarray) -> None:
        values = np.asarray(matrix, dtype=float)
        if values.shape != (self.NUM_PARAMETERS, 1):
            raise ValueError(f"matrix must have shape ({self.NUM_PARAMETERS}, 1), got {values.shape}")
        self._assign(values[:, 0])

    def copy(self) -> GnssEstimation:
        return replace(self)

    def copy_to(self, output: GnssEstimation) -> None:
        output.copy_from(self)

    def copy_from(self, source: GnssEstimation) -> None:
        self._assign(np.array(source._values(), dtype=float))

    def is_close(self, other: GnssEstimation | None, threshold: float = 0.0) -> bool:
        """Component-wise comparison of all 8 parameters within ``threshold``."""

        if other is None:
            return False
        return bool(np.all(np.abs(self.to_array() - other.to_array()) <= threshold))

    def _values(self) -> tuple[float, ...]:
        return (
            self.x,
            self.y,
            self.z,
            self.vx,
            self.vy,
            self.vz,
            self.clock_offset_m,
            self.clock_drift_mps,
        )

    def _assign(self, values: np.ndarray) -> None:
        (
            self.x,
            self.y,
            self.z,
            self.vx,
            self.vy,
            self.vz,
            self.clock_offset_m,
            self.clock_drift_mps,
        ) = (float(v) for v in values)


@dataclass(frozen=True)
class DopMetrics:
    """Dilution of precision metrics."""

    gdop: float
    pdop: float
    hdop: float
    vdop: float
    tdop: float


class Constellation(ABC):
    """Interface for satellite constellation state providers."""

    @abstractmethod
    def get_sv_states(self, t: float) -> list[SvState]:
        """Return satellite states for the given epoch time."""


class MeasurementSource(ABC):
    """Interface for measurement sources."""

    @abstractmethod
    def get_measurements(self, t: float) -> list[GnssMeasurement]:
        """Return measurements for the given epoch time."""
