from dataclasses import replace

import numpy as np
import pytest

from gnss_pvt.config import GnssConfig
from gnss_pvt.meas.pseudorange import predict_observation
from gnss_pvt.meas.simulator import SyntheticMeasurementSource, generate_measurement, generate_measurements
from gnss_pvt.models import EcefPositionAndVelocity
from gnss_pvt.sat.constellation import CircularOrbitConstellation
from gnss_pvt.utils.wgs84 import lla_to_ecef

QUIET = replace(GnssConfig(), code_tracking_sd_m=0.0, range_rate_tracking_sd_mps=0.0)


def _receiver() -> EcefPositionAndVelocity:
    return EcefPositionAndVelocity.from_vectors(lla_to_ecef(48.0, 2.0, 35.0), np.array([1.0, -0.5, 0.2]))


def test_measurement_adds_bias_and_clock() -> None:
    user = _receiver()
    sat = EcefPositionAndVelocity.from_vectors(lla_to_ecef(50.0, 5.0, 20_200_000.0), np.array([100.0, 2000.0, -500.0]))
    t = 10.0

    meas = generate_measurement(t, sat, user, 3.0, QUIET, np.random.default_rng(0), sv_id="G05")
    expected = predict_observation(
        user.pos_ecef_m,
        user.vel_ecef_mps,
        QUIET.rx_clock_offset_m + QUIET.rx_clock_drift_mps * t,
        QUIET.rx_clock_drift_mps,
        sat.pos_ecef_m,
        sat.vel_ecef_mps,
    )

    assert meas is not None
    assert meas.sv_id == "G05"
    assert meas.pr_m == pytest.approx(expected.pseudorange_m + 3.0)
    assert meas.prr_mps == pytest.approx(expected.pseudorange_rate_mps)
    assert np.array_equal(meas.sat_pos_ecef_m, sat.pos_ecef_m)


def test_measurement_below_mask_is_skipped() -> None:
    user = _receiver()
    sat = EcefPositionAndVelocity.from_vectors(lla_to_ecef(-48.0, -178.0, 20_200_000.0))

    assert generate_measurement(0.0, sat, user, 0.0, QUIET, np.random.default_rng(0)) is None


def test_generate_measurements_skips_missing_biases() -> None:
    user = _receiver()
    states = CircularOrbitConstellation().get_sv_states(0.0)
    sats = [state.position_and_velocity for state in states]
    sv_ids = [state.sv_id for state in states]
    biases: list[float | None] = [0.0] * len(sats)
    everything = generate_measurements(0.0, sats, user, biases, QUIET, np.random.default_rng(0), sv_ids)
    visible_ids = [meas.sv_id for meas in everything]
    biases[sv_ids.index(visible_ids[0])] = None

    fewer = generate_measurements(0.0, sats, user, biases, QUIET, np.random.default_rng(0), sv_ids)

    assert len(everything) >= 4
    assert [meas.sv_id for meas in fewer] == visible_ids[1:]
    with pytest.raises(ValueError):
        generate_measurements(0.0, sats, user, biases[:-1], QUIET, np.random.default_rng(0))


def test_source_holds_bias_per_satellite() -> None:
    source = SyntheticMeasurementSource(
        constellation=CircularOrbitConstellation(QUIET),
        receiver_truth=EcefPositionAndVelocity.from_vectors(lla_to_ecef(48.0, 2.0, 35.0)),
        config=QUIET,
        rng=np.random.default_rng(5),
    )

    first = source.get_measurements(0.0)
    second = source.get_measurements(0.0)

    assert len(first) >= 4
    assert [m.sv_id for m in first] == [m.sv_id for m in second]
    assert [m.pr_m for m in first] == [m.pr_m for m in second]


def test_source_moves_receiver_truth() -> None:
    source = SyntheticMeasurementSource(
        constellation=CircularOrbitConstellation(QUIET),
        receiver_truth=_receiver(),
        config=QUIET,
    )

    truth = source.receiver_truth_at(10.0)

    assert np.allclose(truth.pos_ecef_m, _receiver().pos_ecef_m + 10.0 * _receiver().vel_ecef_mps)
    assert np.array_equal(truth.vel_ecef_mps, _receiver().vel_ecef_mps)


def test_run_steps_by_epoch_interval() -> None:
    config = replace(QUIET, epoch_interval_s=2.0)
    source = SyntheticMeasurementSource(
        constellation=CircularOrbitConstellation(config),
        receiver_truth=_receiver(),
        config=config,
        rng=np.random.default_rng(1),
    )

    epochs = list(source.run(6.0))

    assert [t for t, _ in epochs] == [0.0, 2.0, 4.0]
    assert all(len(meas) >= 4 for _, meas in epochs)


def test_run_rejects_zero_interval() -> None:
    config = replace(QUIET, epoch_interval_s=0.0)
    source = SyntheticMeasurementSource(
        constellation=CircularOrbitConstellation(config),
        receiver_truth=_receiver(),
        config=config,
    )

    with pytest.raises(ValueError):
        list(source.run(5.0))
