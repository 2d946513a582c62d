from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .acoustics import motor_efficiency, noise_spectrum
from .errors import EmptyCatalog
from .interpolate import sample_curve, system_curve
from .match import evaluate_fans, is_candidate, predict_at, rank_by_efficiency
from .motors import attach_motors
from .scaling import recalc_fan
from .schemas import (
    ConversionUnits,
    Defaults,
    FanCurveRecord,
    MatchResult,
    MotorRecord,
    OperatingConditions,
)

log = logging.getLogger(__name__)

CHART_CURVES: Tuple[Tuple[str, str], ...] = (
    ("StaticPressureNew", "static_pressure"),
    ("FanInputPowerNew", "input_power"),
    ("VelocityPressureNew", "velocity_pressure"),
    ("FanStaticEfficiency", "static_efficiency"),
    ("FanTotalEfficiency", "total_efficiency"),
)


def match_fans(
    fans: Sequence[FanCurveRecord],
    motors: Sequence[MotorRecord],
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> Tuple[List[MatchResult], List[Dict[str, Any]]]:
    """
    Pełny dobór: przeliczenie, skalowanie, predykcja, filtr, silnik, ranking.
    Zwraca (ranked results, rejected fans).
    """
    if not fans:
        raise EmptyCatalog("no fan records supplied")
    evaluations, rejected = evaluate_fans(fans, units, conditions, defaults=defaults)
    for ev in evaluations:
        if ev.prediction is None:
            rejected.append({"id": ev.fan.id, "error": ev.reason})
    kept = [ev for ev in evaluations if is_candidate(ev, conditions, defaults=defaults)]
    results = attach_motors(kept, motors, units, conditions, defaults=defaults)
    ranked = rank_by_efficiency(results)
    log.info(
        "matched %d of %d fans (%d rejected)", len(ranked), len(fans), len(rejected)
    )
    return ranked, rejected


def run_match(
    fans: Sequence[FanCurveRecord],
    motors: Sequence[MotorRecord],
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> Dict[str, Any]:
    """Same as match_fans, as a JSON-ready dict."""
    ranked, rejected = match_fans(fans, motors, units, conditions, defaults=defaults)
    return {
        "results": [r.to_dict() for r in ranked],
        "rejected": rejected,
        "params": {
            "units": units.to_dict(),
            "input": conditions.to_dict(),
            "defaults": defaults.to_dict(),
        },
    }


def run_noise(
    result: MatchResult,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> Optional[Dict[str, Any]]:
    """Noise spectrum for one selected match; None when it cannot be computed."""
    spectrum = noise_spectrum(
        result.prediction.input_power,
        result.prediction.static_pressure,
        motor_eff=motor_efficiency(result.matched_motor, defaults=defaults),
        variance_pct=conditions.variance(defaults),
        directivity=conditions.directivity,
        distance_m=conditions.distance_m,
        defaults=defaults,
    )
    if spectrum is None:
        log.info("no noise spectrum for %s: missing power or static pressure", result.fan_model)
        return None
    return spectrum.to_dict()


def run_curves(
    fan: FanCurveRecord,
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> Dict[str, Any]:
    """
    Chart data for one fan: sampled scaled curves (same interpolator as the
    matching pipeline), the duty-point prediction and the system curve.
    """
    scaled = recalc_fan(fan, units, conditions, defaults=defaults)
    x = scaled.air_flow
    curves: Dict[str, Any] = {}
    for key, attr in CHART_CURVES:
        pts = sample_curve(x, getattr(scaled, attr), defaults.chart_samples)
        curves[key] = [{"x": px, "y": py} for px, py in pts]

    pred = predict_at(scaled, conditions.air_flow)
    system: List[Dict[str, float]] = []
    if pred is not None and pred.static_pressure and conditions.air_flow > 0:
        xs = [p["x"] for p in curves["StaticPressureNew"]]
        system = [
            {"x": sx, "y": sy}
            for sx, sy in system_curve(pred.static_pressure, conditions.air_flow, xs)
        ]
    return {
        "fan": fan.id,
        "curves": curves,
        "systemCurve": system,
        "predictions": pred.to_dict() if pred is not None else None,
        "duty": {"airFlow": conditions.air_flow, "staticPressure": conditions.static_pressure},
    }
