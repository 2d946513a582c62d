import logging

import pytest

from fanmatch.convert import convert_array, convert_fan_units, unit_factor
from fanmatch.errors import InvalidInput
from fanmatch.formulas import AIR_FLOW_FACTORS
from fanmatch.schemas import ConversionUnits, Defaults

from conftest import make_fan, P_STAT, POWER, Q


def test_base_units_are_identity() -> None:
    conv = convert_fan_units(make_fan(), ConversionUnits())
    assert conv.air_flow == Q
    assert conv.static_pressure == P_STAT
    assert conv.input_power == POWER
    assert (conv.air_flow_unit, conv.pressure_unit, conv.power_unit) == ("m^3/s", "Pa", "kW")


def test_display_units_multiply_each_point() -> None:
    units = ConversionUnits(air_flow="CFM", pressure="kPa", power="W", fan_type="AF-L")
    conv = convert_fan_units(make_fan(), units)
    assert conv.air_flow[0] == pytest.approx(2118.880003)
    assert conv.static_pressure[4] == pytest.approx(0.48)
    assert conv.input_power[-1] == pytest.approx(6800.0)


def test_raw_arrays_untouched() -> None:
    fan = make_fan()
    conv = convert_fan_units(fan, ConversionUnits(air_flow="m^3/hr"))
    assert conv.raw is fan
    assert fan.air_flow == Q
    assert conv.air_flow[1] == pytest.approx(7200.0)


def test_non_numeric_points_become_none() -> None:
    assert convert_array([1.0, None, "x", float("nan"), True, 2], 10.0) == [
        10.0,
        None,
        None,
        None,
        None,
        20.0,
    ]


def test_unknown_unit_falls_back_to_base(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="fanmatch.convert"):
        k = unit_factor(AIR_FLOW_FACTORS, "furlong/s", "m^3/s", kind="airflow")
    assert k == 1.0
    assert "furlong/s" in caplog.text


def test_unknown_unit_strict_raises() -> None:
    with pytest.raises(InvalidInput):
        convert_fan_units(
            make_fan(), ConversionUnits(pressure="mmHg"), defaults=Defaults(strict_units=True)
        )
