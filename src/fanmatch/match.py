from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidInput
from .formulas import is_number, poles_from_rpm
from .convert import unit_factors
from .interpolate import CurveInterpolator, sort_by_x
from .scaling import recalc_fan
from .schemas import (
    ConversionUnits,
    Defaults,
    FanCurveRecord,
    OperatingConditions,
    PredictionResult,
    ScaledCurve,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FanEvaluation:
    """Entry of the recalculated set: prediction is None when out of range."""

    fan: FanCurveRecord
    scaled: ScaledCurve
    prediction: Optional[PredictionResult]
    reason: Optional[str] = None


def predict_at(scaled: ScaledCurve, air_flow: float) -> Optional[PredictionResult]:
    """Evaluate the five prediction curves at `air_flow` (airflow as x).

    Returns None when `air_flow` is outside the sampled airflow range.
    """
    x, (sp, vp, pw, eta_s, eta_t) = sort_by_x(
        scaled.air_flow,
        scaled.static_pressure,
        scaled.velocity_pressure,
        scaled.input_power,
        scaled.static_efficiency,
        scaled.total_efficiency,
    )
    if not (x[0] <= air_flow <= x[-1]):
        return None

    def at(y: Sequence[Optional[float]]) -> Optional[float]:
        return CurveInterpolator(x, y).at(air_flow)

    return PredictionResult(
        static_pressure=at(sp),
        velocity_pressure=at(vp),
        input_power=at(pw),
        static_efficiency=at(eta_s),
        total_efficiency=at(eta_t),
    )


def evaluate_fan(
    fan: FanCurveRecord,
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
    factors: Optional[Tuple[float, float, float]] = None,
) -> FanEvaluation:
    """Convert, scale and predict one fan. Raises InvalidInput for bad data."""
    scaled = recalc_fan(fan, units, conditions, defaults=defaults, factors=factors)
    pred = predict_at(scaled, conditions.air_flow)
    if pred is None:
        xs = [v for v in scaled.air_flow if v is not None]
        reason = f"x={conditions.air_flow} is out of range [{min(xs)}, {max(xs)}] for this fan."
        return FanEvaluation(fan=fan, scaled=scaled, prediction=None, reason=reason)
    return FanEvaluation(fan=fan, scaled=scaled, prediction=pred)


def in_static_band(static_pressure: Any, target: float, variance_pct: float) -> bool:
    """target*(1 - v/100) <= p_s <= target*(1 + v/100)"""
    if not is_number(static_pressure):
        return False
    lower = target * (1.0 - variance_pct / 100.0)
    upper = target * (1.0 + variance_pct / 100.0)
    return lower <= static_pressure <= upper


def is_candidate(
    ev: FanEvaluation, conditions: OperatingConditions, *, defaults: Defaults = Defaults()
) -> bool:
    if ev.prediction is None or not ev.prediction.has_numeric():
        return False
    if conditions.static_pressure is None:
        return True
    return in_static_band(
        ev.prediction.static_pressure, conditions.static_pressure, conditions.variance(defaults)
    )


def _part(v: Any) -> str:
    # empty for None/""/0, integral numbers without a trailing .0
    if v is None or v == "" or v is False or (is_number(v) and v == 0):
        return ""
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


@dataclass(frozen=True)
class ModelCode:
    """Descriptive fan model code, assembled once from immutable parts.

    {fanType}-{innerDia}-{blades}\\{angle}\\{material}{symbol}-{poles}{T|M}[-{motorHP}]
    """

    fan_type: Any
    inner_dia: Any
    blades: Any
    angle: Any
    material: Any
    symbol: Any
    poles: Optional[int]
    three_phase: bool
    motor_hp: Optional[Any] = None
    with_motor_suffix: bool = False

    @classmethod
    def for_fan(
        cls,
        fan: FanCurveRecord,
        units: ConversionUnits,
        conditions: OperatingConditions,
        *,
        defaults: Defaults = Defaults(),
    ) -> "ModelCode":
        return cls(
            fan_type=units.fan_type,
            inner_dia=fan.impeller.inner_dia,
            blades=fan.blades.count,
            angle=fan.blades.angle,
            material=fan.blades.material,
            symbol=fan.blades.symbol,
            poles=poles_from_rpm(conditions.rpm, defaults.pole_thresholds),
            three_phase=conditions.phases == 3,
        )

    def with_motor(self, power_hp: Any) -> "ModelCode":
        return replace(self, motor_hp=power_hp, with_motor_suffix=True)

    def __str__(self) -> str:
        poles = "" if self.poles is None else str(self.poles)
        code = (
            f"{_part(self.fan_type)}-{_part(self.inner_dia)}-{_part(self.blades)}"
            f"\\{_part(self.angle)}\\{_part(self.material)}{_part(self.symbol)}"
            f"-{poles}{'T' if self.three_phase else 'M'}"
        )
        if self.with_motor_suffix:
            code += f"-{_part(self.motor_hp)}"
        return code


def total_efficiency_key(pred: Optional[PredictionResult]) -> float:
    v = pred.total_efficiency if pred is not None else None
    return float(v) if is_number(v) else -math.inf  # type: ignore[arg-type]


def rank_by_efficiency(items: Iterable[Any], key=None) -> List[Any]:
    """Stable sort, total efficiency descending; missing values last.

    `key` maps an item to its PredictionResult (defaults to `.prediction`).
    """
    get = key or (lambda it: it.prediction)
    return sorted(items, key=lambda it: total_efficiency_key(get(it)), reverse=True)


def evaluate_fans(
    fans: Sequence[FanCurveRecord],
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> tuple[List[FanEvaluation], List[dict]]:
    """
    Evaluate every fan; a fan with malformed data is skipped and reported
    in the second list ({'id', 'error'}) without stopping the others.
    Unit factors are resolved once; in strict mode an unknown unit fails
    the whole request.
    """
    factors = unit_factors(units, defaults)
    evaluations: List[FanEvaluation] = []
    rejected: List[dict] = []
    for fan in fans:
        try:
            evaluations.append(
                evaluate_fan(fan, units, conditions, defaults=defaults, factors=factors)
            )
        except InvalidInput as e:
            log.warning("skipping fan %r: %s", fan.id, e)
            rejected.append({"id": fan.id, "error": str(e)})
    return evaluations, rejected
