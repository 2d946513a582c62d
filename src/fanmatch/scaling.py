from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .convert import ConvertedFan, convert_fan_units
from .errors import InvalidInput
from .formulas import (
    affinity_ratios,
    air_density_from_celsius,
    fan_efficiency,
    flow_factor,
    is_number,
    power_factor,
    pressure_factor,
)
from .schemas import ConversionUnits, Curve, Defaults, FanCurveRecord, OperatingConditions, ScaledCurve


def check_curve_lengths(fan: FanCurveRecord, expected: int = 10) -> None:
    """All five curves must have exactly `expected` points."""
    for name, curve in fan.curves().items():
        if len(curve) != expected:
            raise InvalidInput(
                f"fan {fan.id!r}: expected {expected} values for {name}, got {len(curve)}"
            )


def _scale(values: Sequence[object], factor: float) -> Curve:
    return [float(v) * factor if is_number(v) else None for v in values]  # type: ignore[arg-type]


def efficiency_curves(fan: FanCurveRecord) -> tuple[Curve, Curve]:
    """(static, total) efficiency from the raw catalog values.

    Efficiency is invariant under the similarity laws, so the scaled curves
    are not used here.
    """
    static = [
        fan_efficiency(p, q, w)
        for p, q, w in zip(fan.static_pressure, fan.air_flow, fan.input_power)
    ]
    total = [
        fan_efficiency(p, q, w)
        for p, q, w in zip(fan.total_pressure, fan.air_flow, fan.input_power)
    ]
    return static, total


def scale_fan(
    conv: ConvertedFan,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
) -> ScaledCurve:
    """
    Przeskaluj przeliczone krzywe do zadanych obrotów i gęstości:
      Q' = Q * n,  p' = p * n^2 * r,  P' = P * n^3 * r
    gdzie n = RPM/RPM_kat, r = rho(T)/rho_kat.
    """
    fan = conv.raw
    check_curve_lengths(fan, defaults.curve_points)
    density = air_density_from_celsius(conditions.temp_c)
    rpm_ratio, density_ratio = affinity_ratios(
        conditions.rpm, fan.rpm, density, fan.design_density
    )
    k_p = pressure_factor(rpm_ratio, density_ratio)
    static_eff, total_eff = efficiency_curves(fan)
    return ScaledCurve(
        air_flow=_scale(conv.air_flow, flow_factor(rpm_ratio)),
        total_pressure=_scale(conv.total_pressure, k_p),
        velocity_pressure=_scale(conv.velocity_pressure, k_p),
        static_pressure=_scale(conv.static_pressure, k_p),
        input_power=_scale(conv.input_power, power_factor(rpm_ratio, density_ratio)),
        static_efficiency=static_eff,
        total_efficiency=total_eff,
        density=density,
        rpm_ratio=rpm_ratio,
        density_ratio=density_ratio,
    )


def recalc_fan(
    fan: FanCurveRecord,
    units: ConversionUnits,
    conditions: OperatingConditions,
    *,
    defaults: Defaults = Defaults(),
    factors: Optional[Tuple[float, float, float]] = None,
) -> ScaledCurve:
    """Unit conversion followed by affinity scaling for one fan."""
    check_curve_lengths(fan, defaults.curve_points)
    conv = convert_fan_units(fan, units, defaults=defaults, factors=factors)
    return scale_fan(conv, conditions, defaults=defaults)
