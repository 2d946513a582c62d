import logging
from dataclasses import replace

import pytest

from fanmatch.match import (
    ModelCode,
    evaluate_fan,
    evaluate_fans,
    in_static_band,
    is_candidate,
    predict_at,
    rank_by_efficiency,
)
from fanmatch.scaling import recalc_fan
from fanmatch.schemas import (
    BladeSpec,
    ConversionUnits,
    ImpellerSpec,
    OperatingConditions,
    PredictionResult,
)

from conftest import make_fan

UNITS = ConversionUnits(fan_type="AF-L")
COND = OperatingConditions(
    rpm=1440, temp_c=20, air_flow=5, static_pressure=500, phases=3, variance_pct=10
)


def test_predict_at_sample_point() -> None:
    scaled = recalc_fan(make_fan(), UNITS, COND)
    pred = predict_at(scaled, 5.0)
    assert pred is not None
    assert pred.static_pressure == pytest.approx(480.0)
    assert pred.input_power == pytest.approx(4.4)
    assert pred.velocity_pressure == pytest.approx(50.0)
    assert pred.total_efficiency == pytest.approx(530 * 5 / 4400)
    assert pred.static_efficiency == pytest.approx(480 * 5 / 4400)


def test_predict_at_range_boundaries() -> None:
    scaled = recalc_fan(make_fan(), UNITS, COND)
    assert predict_at(scaled, 1.0) is not None
    assert predict_at(scaled, 10.0) is not None
    assert predict_at(scaled, 0.99) is None
    assert predict_at(scaled, 10.01) is None


def test_out_of_range_fan_carries_reason() -> None:
    ev = evaluate_fan(make_fan(q=[v * 0.1 for v in range(1, 11)]), UNITS, COND)
    assert ev.prediction is None
    assert "out of range" in (ev.reason or "")


def test_static_band_is_inclusive() -> None:
    assert in_static_band(450.0, 500.0, 10)
    assert in_static_band(550.0, 500.0, 10)
    assert not in_static_band(449.9, 500.0, 10)
    assert not in_static_band(None, 500.0, 10)
    assert in_static_band(500.0, 500.0, 0)


def test_candidate_without_static_target() -> None:
    ev = evaluate_fan(make_fan(p_scale=2.0), UNITS, replace(COND, static_pressure=None))
    assert is_candidate(ev, replace(COND, static_pressure=None))
    assert not is_candidate(ev, COND)


def test_candidate_needs_a_numeric_prediction() -> None:
    ev = evaluate_fan(make_fan(), UNITS, COND)
    empty = replace(ev, prediction=PredictionResult())
    assert not is_candidate(empty, replace(COND, static_pressure=None))


def test_model_code_parts() -> None:
    code = ModelCode.for_fan(make_fan(), UNITS, COND)
    assert str(code) == "AF-L-630-6\\30\\AlS-4T"
    assert str(code.with_motor(7.5)) == "AF-L-630-6\\30\\AlS-4T-7.5"
    # the base code is not modified
    assert str(code) == "AF-L-630-6\\30\\AlS-4T"


def test_model_code_without_phase_count_is_single_phase() -> None:
    cond = OperatingConditions.from_dict({"RPM": 1440, "TempC": 20, "airFlow": 5})
    assert cond.phases is None
    assert "NoPhases" not in cond.to_dict()
    assert str(ModelCode.for_fan(make_fan(), UNITS, cond)) == "AF-L-630-6\\30\\AlS-4M"
    cond = OperatingConditions.from_dict({"RPM": 1440, "TempC": 20, "airFlow": 5, "NoPhases": "3"})
    assert str(ModelCode.for_fan(make_fan(), UNITS, cond)) == "AF-L-630-6\\30\\AlS-4T"


def test_model_code_single_phase_and_missing_parts() -> None:
    fan = replace(make_fan(), blades=BladeSpec(symbol="", material="PP", count=5.0, angle=0), impeller=ImpellerSpec())
    code = ModelCode.for_fan(fan, ConversionUnits(), replace(COND, phases=1, rpm=3600))
    assert str(code) == "--5\\\\PP-M"


def test_rank_is_stable_and_missing_efficiency_last() -> None:
    items = [
        ("a", PredictionResult(total_efficiency=0.5)),
        ("b", PredictionResult(total_efficiency=None)),
        ("c", PredictionResult(total_efficiency=0.7)),
        ("d", PredictionResult(total_efficiency=0.5)),
    ]
    ranked = rank_by_efficiency(items, key=lambda it: it[1])
    assert [name for name, _ in ranked] == ["c", "a", "d", "b"]


def test_bad_fan_is_reported_not_fatal(caplog) -> None:
    bad = replace(make_fan(fan_id=9), input_power=[1.0, 2.0])
    with caplog.at_level(logging.WARNING, logger="fanmatch.match"):
        evs, rejected = evaluate_fans([make_fan(), bad], UNITS, COND)
    assert [e.fan.id for e in evs] == [1]
    assert rejected[0]["id"] == 9
    assert "fanInputPow" in rejected[0]["error"]
    assert "skipping fan 9" in caplog.text


def test_unknown_unit_warned_once_per_request(caplog) -> None:
    units = ConversionUnits(pressure="mmHg", fan_type="AF-L")
    fans = [make_fan(fan_id=i) for i in range(1, 5)]
    with caplog.at_level(logging.WARNING, logger="fanmatch.convert"):
        evs, rejected = evaluate_fans(fans, units, COND)
    assert len(evs) == 4 and rejected == []
    warnings = [r for r in caplog.records if "unknown pressure unit" in r.getMessage()]
    assert len(warnings) == 1
