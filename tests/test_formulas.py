import math

import pytest

from fanmatch import formulas as F
from fanmatch.errors import InvalidInput


def test_density_at_20c_rounds_to_1_20() -> None:
    assert F.air_density_from_celsius(20) == pytest.approx(1.20)


def test_density_decreases_with_temperature() -> None:
    temps = [-20, 0, 20, 40, 60, 80, 120]
    rhos = [F.air_density_from_celsius(t) for t in temps]
    assert all(a > b for a, b in zip(rhos, rhos[1:]))


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "warm", None, True])
def test_density_rejects_non_finite(bad) -> None:
    with pytest.raises(InvalidInput):
        F.air_density_from_celsius(bad)


def test_density_accepts_numeric_string() -> None:
    # catalog/request values arrive as strings sometimes
    assert F.air_density_from_celsius("20") == 1.2


def test_poles_from_rpm_thresholds() -> None:
    assert F.poles_from_rpm(700) == 8
    assert F.poles_from_rpm(750) == 8
    assert F.poles_from_rpm(960) == 6
    assert F.poles_from_rpm(1440) == 4
    assert F.poles_from_rpm(1500) == 4
    assert F.poles_from_rpm(2900) == 2
    assert F.poles_from_rpm(3600) is None
    assert F.poles_from_rpm(None) is None


def test_fan_efficiency_rules() -> None:
    assert F.fan_efficiency(500.0, 4.0, 2.5) == pytest.approx(0.8)
    assert F.fan_efficiency(500.0, 4.0, 0.0) is None
    assert F.fan_efficiency(500.0, 4.0, None) is None
    # brak ciśnienia liczony jako 0
    assert F.fan_efficiency(None, 4.0, 2.5) == 0.0


def test_affinity_factors() -> None:
    n, r = F.affinity_ratios(2880, 1440, 1.1, 1.2)
    assert n == 2.0
    assert F.flow_factor(n) == 2.0
    assert F.pressure_factor(n, r) == pytest.approx(4.0 * 1.1 / 1.2)
    assert F.power_factor(n, r) == pytest.approx(8.0 * 1.1 / 1.2)


def test_affinity_rejects_bad_design_values() -> None:
    with pytest.raises(InvalidInput):
        F.affinity_ratios(1440, 0, 1.2, 1.2)
    with pytest.raises(InvalidInput):
        F.affinity_ratios(1440, 1440, 1.2, None)


def test_distance_attenuation_positive_for_q2_r1() -> None:
    att = F.distance_attenuation(2.0, 1.0)
    assert att == pytest.approx(abs(10 * math.log10(2.0 / (4 * math.pi))))
    assert att > 0
