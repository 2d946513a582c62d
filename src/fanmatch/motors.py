from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .formulas import is_number
from .match import FanEvaluation, ModelCode
from .schemas import (
    ConversionUnits,
    Defaults,
    MatchResult,
    MotorRecord,
    OperatingConditions,
)

log = logging.getLogger(__name__)


def required_net_power(fan_power_kw: float, safety_pct: float) -> float:
    """P_net >= P_fan * (1 + safety/100)"""
    return fan_power_kw * (1.0 + safety_pct / 100.0)


def find_motor(
    fan_power_kw: Optional[float],
    poles: Optional[int],
    motors: Sequence[MotorRecord],
    *,
    safety_pct: float,
) -> Optional[Tuple[MotorRecord, float]]:
    """
    Smallest-net-power motor with enough headroom and the same pole count.
    Returns (motor, net - fan_power) or None. Ties keep catalog order.
    """
    if not is_number(fan_power_kw) or poles is None:
        return None
    need = required_net_power(fan_power_kw, safety_pct)  # type: ignore[arg-type]
    best: Optional[MotorRecord] = None
    for m in motors:
        if not is_number(m.net_power) or m.poles != poles:
            continue
        if m.net_power < need:  # type: ignore[operator]
            continue
        if best is None or m.net_power < best.net_power:  # type: ignore[operator]
            best = m
    if best is None:
        return None
    return best, best.net_power - fan_power_kw  # type: ignore[operator]


def attach_motors(
    evaluations: Sequence[FanEvaluation],
    motors: Sequence[MotorRecord],
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> List[MatchResult]:
    """Build a MatchResult per evaluation (which must carry a prediction)."""
    safety = conditions.variance(defaults)
    out: List[MatchResult] = []
    for ev in evaluations:
        if ev.prediction is None:
            raise ValueError(f"fan {ev.fan.id!r} has no prediction")
        code = ModelCode.for_fan(ev.fan, units, conditions, defaults=defaults)
        found = find_motor(ev.prediction.input_power, code.poles, motors, safety_pct=safety)
        if found is None:
            log.debug("no compatible motor for fan %r", ev.fan.id)
            out.append(
                MatchResult(
                    fan=ev.fan, prediction=ev.prediction, fan_model=str(code), scaled=ev.scaled
                )
            )
            continue
        motor, diff = found
        out.append(
            MatchResult(
                fan=ev.fan,
                prediction=ev.prediction,
                fan_model=str(code.with_motor(motor.power_hp)),
                matched_motor=motor,
                power_diff=diff,
                scaled=ev.scaled,
            )
        )
    return out
