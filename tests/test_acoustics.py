import pytest

from fanmatch.acoustics import motor_efficiency, noise_spectrum
from fanmatch.formulas import OCTAVE_BANDS_HZ
from fanmatch.schemas import Defaults, MotorRecord


def test_reference_duty_point() -> None:
    s = noise_spectrum(5.0, 500.0, motor_eff=0.85, variance_pct=5, directivity=2, distance_m=1)
    assert s is not None
    assert s.motor_input_power == pytest.approx(6.17647, abs=1e-5)
    assert s.lw_a == pytest.approx(96.897, abs=1e-3)
    assert s.distance_attenuation == pytest.approx(7.9818, abs=1e-4)
    assert s.lp_a == pytest.approx(88.915, abs=1e-3)
    d = s.to_dict()
    assert d["lwA"] == 96.9 and d["lpA"] == 88.9


def test_band_levels_follow_corrections() -> None:
    s = noise_spectrum(5.0, 500.0, motor_eff=0.85)
    assert s is not None
    assert [b.frequency_hz for b in s.lw_spectrum] == list(OCTAVE_BANDS_HZ)
    assert s.lw_spectrum[0].level_db == pytest.approx(s.lw_a - 31.7)
    assert s.lp_spectrum[2].level_db == pytest.approx(s.lp_a - 4.31)
    rows = s.to_dict()["lpSpectrum"]
    assert rows[0]["frequency"] == "62" and "soundPressure" in rows[0]


def test_zero_variance_is_honored() -> None:
    s = noise_spectrum(5.0, 500.0, motor_eff=0.85, variance_pct=0)
    assert s is not None
    assert s.motor_input_power == pytest.approx(5.0 / 0.85)


def test_zero_q_and_r_fall_back() -> None:
    s = noise_spectrum(5.0, 500.0, directivity=0, distance_m=None)
    assert s is not None
    assert (s.directivity, s.distance_m) == (2.0, 1.0)


def test_farther_is_quieter() -> None:
    near = noise_spectrum(5.0, 500.0, distance_m=1)
    far = noise_spectrum(5.0, 500.0, distance_m=4)
    assert near is not None and far is not None
    assert far.lp_a < near.lp_a
    assert far.lw_a == near.lw_a


@pytest.mark.parametrize("power,pressure", [(0, 500), (-1, 500), (None, 500), (5, 0), (5, None)])
def test_unavailable_without_positive_inputs(power, pressure) -> None:
    assert noise_spectrum(power, pressure) is None


def test_motor_efficiency_mean_or_default() -> None:
    m = MotorRecord(id=1, net_power=5.0, poles=4, eff_curve=[0.88, 0.87, 0.85])
    assert motor_efficiency(m) == pytest.approx((0.88 + 0.87 + 0.85) / 3)
    assert motor_efficiency(None) == 0.85
    assert motor_efficiency(MotorRecord(id=2, net_power=1.0, poles=2)) == 0.85
    assert motor_efficiency(None, defaults=Defaults(motor_efficiency=0.8)) == 0.8
