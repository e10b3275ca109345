"""Satellite models."""

from gnss_pvt.sat.constellation import CircularOrbitConstellation
from gnss_pvt.sat.visibility import visible_sv_states

__all__ = [
    "CircularOrbitConstellation",
    "visible_sv_states",
]
