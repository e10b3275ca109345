"""Observation model, range biases and measurement simulation."""

from gnss_pvt.meas.biases import generate_bias_m, generate_biases, iono_sigma_m, tropo_sigma_m
from gnss_pvt.meas.pseudorange import (
    LIGHT_SPEED_MPS,
    OMEGA_EARTH,
    OMEGA_IE,
    ObservationPrediction,
    geometric_range_m,
    predict_observation,
    sagnac_range_m,
    sagnac_rotation,
    skew,
)
from gnss_pvt.meas.simulator import (
    SyntheticMeasurementSource,
    generate_measurement,
    generate_measurements,
)

__all__ = [
    "LIGHT_SPEED_MPS",
    "OMEGA_EARTH",
    "OMEGA_IE",
    "ObservationPrediction",
    "SyntheticMeasurementSource",
    "generate_bias_m",
    "generate_biases",
    "generate_measurement",
    "generate_measurements",
    "geometric_range_m",
    "iono_sigma_m",
    "predict_observation",
    "sagnac_range_m",
    "sagnac_rotation",
    "skew",
    "tropo_sigma_m",
]
