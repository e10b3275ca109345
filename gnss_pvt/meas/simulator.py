"""Synthetic pseudorange/pseudorange-rate measurement generation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np

from gnss_pvt.config import GnssConfig
from gnss_pvt.meas.biases import generate_bias_m
from gnss_pvt.meas.pseudorange import predict_observation
from gnss_pvt.models import Constellation, EcefPositionAndVelocity, GnssMeasurement, MeasurementSource
from gnss_pvt.sat.visibility import visible_sv_states
from gnss_pvt.utils.angles import elevation_rad


def generate_measurement(
    t: float,
    sat: EcefPositionAndVelocity,
    user: EcefPositionAndVelocity,
    bias_m: float,
    config: GnssConfig,
    rng: np.random.Generator,
    sv_id: str | None = None,
) -> GnssMeasurement | None:
    """Simulate one measurement, or ``None`` if the satellite is below the mask.

    The receiver clock offset grows linearly with ``t`` at the configured drift.
    """

    if elevation_rad(user.pos_ecef_m, sat.pos_ecef_m) < config.mask_angle_rad:
        return None
    prediction = predict_observation(
        user.pos_ecef_m,
        user.vel_ecef_mps,
        config.rx_clock_offset_m + config.rx_clock_drift_mps * t,
        config.rx_clock_drift_mps,
        sat.pos_ecef_m,
        sat.vel_ecef_mps,
    )
    pr_m = prediction.pseudorange_m + bias_m + config.code_tracking_sd_m * rng.standard_normal()
    prr_mps = prediction.pseudorange_rate_mps + config.range_rate_tracking_sd_mps * rng.standard_normal()
    return GnssMeasurement.from_position_and_velocity(pr_m, prr_mps, sat, sv_id=sv_id)


def generate_measurements(
    t: float,
    sats: list[EcefPositionAndVelocity],
    user: EcefPositionAndVelocity,
    biases_m: list[float | None],
    config: GnssConfig,
    rng: np.random.Generator,
    sv_ids: list[str] | None = None,
) -> list[GnssMeasurement]:
    """Simulate measurements for every satellite with a bias above the mask."""

    if len(sats) != len(biases_m):
        raise ValueError(f"got {len(sats)} satellites but {len(biases_m)} biases")
    if sv_ids is not None and len(sv_ids) != len(sats):
        raise ValueError(f"got {len(sats)} satellites but {len(sv_ids)} sv ids")
    measurements: list[GnssMeasurement] = []
    for idx, (sat, bias_m) in enumerate(zip(sats, biases_m)):
        if bias_m is None:
            continue
        meas = generate_measurement(
            t,
            sat,
            user,
            bias_m,
            config,
            rng,
            sv_id=sv_ids[idx] if sv_ids is not None else None,
        )
        if meas is not None:
            measurements.append(meas)
    return measurements


@dataclass
class SyntheticMeasurementSource(MeasurementSource):
    """Measurements for a receiver moving at constant ECEF velocity.

    One bias per satellite is drawn the first time it rises above the mask and
    then held constant, as for slowly varying atmospheric errors.
    """

    constellation: Constellation
    receiver_truth: EcefPositionAndVelocity
    config: GnssConfig = field(default_factory=GnssConfig)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    _biases_m: dict[str, float] = field(init=False, default_factory=dict)

    def receiver_truth_at(self, t: float) -> EcefPositionAndVelocity:
        truth = self.receiver_truth
        return EcefPositionAndVelocity.from_vectors(
            truth.pos_ecef_m + truth.vel_ecef_mps * t,
            truth.vel_ecef_mps,
        )

    def get_measurements(self, t: float) -> list[GnssMeasurement]:
        user = self.receiver_truth_at(t)
        measurements: list[GnssMeasurement] = []
        sv_states = self.constellation.get_sv_states(t)
        for state in visible_sv_states(user.pos_ecef_m, sv_states, self.config.mask_angle_deg):
            bias_m = self._biases_m.get(state.sv_id)
            if bias_m is None:
                bias_m = generate_bias_m(state.pos_ecef_m, user.pos_ecef_m, self.config, self.rng)
                self._biases_m[state.sv_id] = bias_m
            meas = generate_measurement(
                t,
                state.position_and_velocity,
                user,
                bias_m,
                self.config,
                self.rng,
                sv_id=state.sv_id,
            )
            if meas is not None:
                measurements.append(meas)
        return measurements

    def run(self, duration_s: float, start_s: float = 0.0) -> Iterator[tuple[float, list[GnssMeasurement]]]:
        """Yield ``(t, measurements)`` every ``config.epoch_interval_s``."""

        if self.config.epoch_interval_s <= 0.0:
            raise ValueError("epoch_interval_s must be > 0 to step a simulation")
        for t in np.arange(start_s, start_s + duration_s, self.config.epoch_interval_s):
            yield float(t), self.get_measurements(float(t))
