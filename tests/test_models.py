import astropy.units as u
import numpy as np
import pytest

from gnss_pvt.models import EcefPositionAndVelocity, GnssEstimation, GnssMeasurement


def _estimation() -> GnssEstimation:
    return GnssEstimation(1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0)


def test_position_and_velocity_copies_are_independent() -> None:
    original = EcefPositionAndVelocity(1.0, 2.0, 3.0, 0.1, 0.2, 0.3)

    clone = original.copy()
    clone.x = 100.0
    target = EcefPositionAndVelocity()
    original.copy_to(target)

    assert original.x == 1.0
    assert target == original
    assert target.is_close(original)
    assert not clone.is_close(original, threshold=1.0)
    assert not original.is_close(None)


def test_position_and_velocity_from_quantities() -> None:
    pv = EcefPositionAndVelocity.from_quantities(
        1.0 * u.km, 2.0 * u.km, 3.0 * u.km, vx=36.0 * u.km / u.h
    )

    assert np.allclose(pv.pos_ecef_m, [1000.0, 2000.0, 3000.0])
    assert pv.vx == pytest.approx(10.0)
    assert pv.pos_quantity.to_value(u.km)[2] == pytest.approx(3.0)


def test_estimation_array_and_matrix_roundtrip() -> None:
    estimation = _estimation()

    array = estimation.to_array()
    matrix = estimation.to_matrix()

    assert np.array_equal(array, np.arange(1.0, 9.0))
    assert matrix.shape == (8, 1)
    assert GnssEstimation.from_array(array) == estimation
    assert GnssEstimation.from_matrix(matrix) == estimation


def test_estimation_rejects_wrong_shapes() -> None:
    estimation = _estimation()

    with pytest.raises(ValueError):
        estimation.set_from_array(np.zeros(7))
    with pytest.raises(ValueError):
        estimation.set_from_matrix(np.zeros((8, 2)))
    with pytest.raises(ValueError):
        estimation.set_from_matrix(np.zeros(8))
    with pytest.raises(ValueError):
        estimation.to_array(np.zeros(9))
    assert estimation == _estimation()


def test_estimation_fills_output_buffer() -> None:
    out = np.zeros(8)

    returned = _estimation().to_array(out)

    assert returned is out
    assert out[-1] == 8.0


def test_estimation_views_and_quantities() -> None:
    estimation = GnssEstimation.from_position_and_velocity(
        EcefPositionAndVelocity(1.0, 2.0, 3.0, 4.0, 5.0, 6.0), clock_offset_m=7.0, clock_drift_mps=8.0
    )

    assert estimation == _estimation()
    assert estimation.position_and_velocity == EcefPositionAndVelocity(1.0, 2.0, 3.0, 4.0, 5.0, 6.0)

    estimation.clock_offset_quantity = 2.0 * u.km
    estimation.position_and_velocity = EcefPositionAndVelocity()
    assert estimation.clock_offset_m == pytest.approx(2000.0)
    assert np.array_equal(estimation.pos_ecef_m, np.zeros(3))

    from_quantities = GnssEstimation.from_quantities(
        (1.0 * u.m, 2.0 * u.m, 3.0 * u.m),
        (4.0 * u.m / u.s, 5.0 * u.m / u.s, 6.0 * u.m / u.s),
        7.0 * u.m,
        8.0 * u.m / u.s,
    )
    assert from_quantities.is_close(_estimation(), 1e-12)


def test_estimation_copy_from() -> None:
    target = GnssEstimation()

    target.copy_from(_estimation())

    assert target == _estimation()
    assert target.copy() is not target
    assert not target.is_close(GnssEstimation(), threshold=7.5)


def test_measurement_vectors_are_read_only() -> None:
    sat = EcefPositionAndVelocity(2.0e7, 1.0e7, 5.0e6, 100.0, -200.0, 300.0)
    measurement = GnssMeasurement.from_position_and_velocity(2.2e7, -150.0, sat, sv_id="G07")

    with pytest.raises(ValueError):
        measurement.sat_pos_ecef_m[0] = 0.0
    assert measurement.sat_state == sat
    assert measurement.sv_id == "G07"
    assert measurement.pr_quantity.to_value(u.km) == pytest.approx(2.2e4)


def test_measurement_is_close_ignores_sv_id() -> None:
    sat = EcefPositionAndVelocity(2.0e7, 1.0e7, 5.0e6)
    a = GnssMeasurement.from_position_and_velocity(2.2e7, 1.0, sat, sv_id="G01")
    b = GnssMeasurement.from_quantities(2.2e4 * u.km, 1.0 * u.m / u.s, sat, sv_id="G02")

    assert a.is_close(b, threshold=1e-6)
    assert not a.is_close(GnssMeasurement(2.2e7 + 1.0, 1.0, sat.pos_ecef_m))
    assert not a.is_close(None)


def test_measurement_rejects_bad_vector() -> None:
    with pytest.raises(ValueError):
        GnssMeasurement(1.0, 0.0, np.zeros(2))
