"""Exceptions raised by the GNSS PVT library.

Invalid arguments (wrong shapes, undersized measurement sets, bad thresholds)
raise the built-in ``ValueError``; the classes below cover estimator state and
numerical failures.
"""

from __future__ import annotations


class GnssError(Exception):
    """Base class for GNSS estimation failures."""


class LockedError(GnssError):
    """An estimator was reconfigured or re-entered while running."""


class NotReadyError(GnssError):
    """An estimator was asked to run without enough measurements."""


class GnssNumericalError(GnssError):
    """The least-squares solve failed to produce a usable update."""
