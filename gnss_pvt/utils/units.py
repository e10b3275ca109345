"""Bridge between plain SI values and ``astropy.units`` quantities."""

from __future__ import annotations

import astropy.units as u
import numpy as np

METERS = u.m
METERS_PER_SECOND = u.m / u.s


def distance(value_m: float | np.ndarray) -> u.Quantity:
    """Wrap a value (or vector) in meters as a distance quantity."""

    return np.asarray(value_m, dtype=float) * METERS


def speed(value_mps: float | np.ndarray) -> u.Quantity:
    """Wrap a value (or vector) in meters/second as a speed quantity."""

    return np.asarray(value_mps, dtype=float) * METERS_PER_SECOND


def to_meters(quantity: u.Quantity) -> float:
    """Return a scalar length quantity expressed in meters.

    Raises:
        astropy.units.UnitConversionError: If the quantity is not a length.
    """

    return float(u.Quantity(quantity).to_value(METERS))


def to_meters_per_second(quantity: u.Quantity) -> float:
    """Return a scalar speed quantity expressed in meters/second."""

    return float(u.Quantity(quantity).to_value(METERS_PER_SECOND))
