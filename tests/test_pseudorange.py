import numpy as np
import pytest

from gnss_pvt.meas.pseudorange import (
    LIGHT_SPEED_MPS,
    OMEGA_EARTH,
    OMEGA_IE,
    geometric_range_m,
    predict_observation,
    sagnac_range_m,
    sagnac_rotation,
    skew,
)
from gnss_pvt.utils.wgs84 import lla_to_ecef


def test_skew_matches_cross_product() -> None:
    a = np.array([1.0, -2.0, 3.0])
    b = np.array([0.5, 4.0, -1.5])

    assert np.allclose(skew(a) @ b, np.cross(a, b))
    assert np.allclose(OMEGA_IE @ b, np.cross([0.0, 0.0, OMEGA_EARTH], b))


def test_sagnac_rotation_is_identity_at_zero_transit() -> None:
    assert np.array_equal(sagnac_rotation(0.0), np.eye(3))

    c_e = sagnac_rotation(0.07)
    assert c_e[0, 1] == pytest.approx(OMEGA_EARTH * 0.07)
    assert c_e[1, 0] == pytest.approx(-OMEGA_EARTH * 0.07)
    assert c_e[2, 2] == 1.0


def test_sagnac_correction_matches_first_order_formula() -> None:
    receiver = lla_to_ecef(0.0, 0.0, 0.0)
    sv = lla_to_ecef(0.0, 30.0, 20_200_000.0)

    range_m, los_unit, _ = sagnac_range_m(receiver, sv)

    expected = OMEGA_EARTH / LIGHT_SPEED_MPS * (sv[0] * receiver[1] - sv[1] * receiver[0])
    assert abs(expected) > 10.0
    assert range_m - geometric_range_m(receiver, sv) == pytest.approx(expected, abs=1e-3)
    assert np.linalg.norm(los_unit) == pytest.approx(1.0)


def test_coincident_positions_rejected() -> None:
    position = np.array([1.0, 2.0, 3.0])

    with pytest.raises(ValueError):
        sagnac_range_m(position, position)


def test_prediction_adds_clock_terms() -> None:
    receiver = lla_to_ecef(45.0, 10.0, 100.0)
    sv = lla_to_ecef(50.0, 20.0, 20_200_000.0)
    sv_vel = np.array([1500.0, -2000.0, 800.0])

    base = predict_observation(receiver, np.zeros(3), 0.0, 0.0, sv, sv_vel)
    shifted = predict_observation(receiver, np.zeros(3), 250.0, -3.5, sv, sv_vel)

    assert shifted.range_m == base.range_m
    assert shifted.pseudorange_m == pytest.approx(base.pseudorange_m + 250.0)
    assert shifted.pseudorange_rate_mps == pytest.approx(base.pseudorange_rate_mps - 3.5)
    assert np.allclose(shifted.h_row, np.append(-base.los_unit, 1.0))


def test_receding_satellite_has_positive_range_rate() -> None:
    receiver = lla_to_ecef(0.0, 0.0, 0.0)
    sv = np.array([2.6e7, 0.0, 0.0])

    prediction = predict_observation(receiver, np.zeros(3), 0.0, 0.0, sv, np.array([1000.0, 0.0, 0.0]))

    assert prediction.range_rate_mps == pytest.approx(1000.0, abs=0.05)


def test_receiver_velocity_enters_with_opposite_sign() -> None:
    receiver = lla_to_ecef(30.0, -60.0, 0.0)
    sv = lla_to_ecef(35.0, -50.0, 20_200_000.0)
    rx_vel = np.array([10.0, -5.0, 3.0])

    still = predict_observation(receiver, np.zeros(3), 0.0, 0.0, sv, np.zeros(3))
    moving = predict_observation(receiver, rx_vel, 0.0, 0.0, sv, np.zeros(3))

    assert moving.range_rate_mps - still.range_rate_mps == pytest.approx(-float(still.los_unit @ rx_vel))
