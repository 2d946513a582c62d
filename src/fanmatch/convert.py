from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .errors import InvalidInput
from .formulas import AIR_FLOW_FACTORS, PRESSURE_FACTORS, POWER_FACTORS, is_number
from .schemas import ConversionUnits, Curve, Defaults, FanCurveRecord

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConvertedFan:
    """Fan po przeliczeniu jednostek. `raw` zostaje bez zmian (do sprawności)."""

    raw: FanCurveRecord
    air_flow: Curve
    total_pressure: Curve
    velocity_pressure: Curve
    static_pressure: Curve
    input_power: Curve
    air_flow_unit: str
    pressure_unit: str
    power_unit: str


def unit_factor(
    table: Dict[str, float], unit: Optional[str], base: str, *, kind: str, strict: bool = False
) -> float:
    """Factor for `unit` relative to the base unit of `table`.

    Unknown units fall back to 1.0 (base unit) with a warning, or raise
    InvalidInput when `strict` is set.
    """
    code = unit or base
    if code in table:
        return table[code]
    if strict:
        raise InvalidInput(f"unknown {kind} unit: {code!r}")
    log.warning("unknown %s unit %r, using base unit %r", kind, code, base)
    return 1.0


def convert_array(values: Sequence[object], factor: float) -> Curve:
    """Multiply each numeric point; anything else becomes None."""
    return [float(v) * factor if is_number(v) else None for v in values]  # type: ignore[arg-type]


def unit_factors(units: ConversionUnits, defaults: Defaults = Defaults()) -> Tuple[float, float, float]:
    """(airflow, pressure, power) factors for the selected display units."""
    air_unit = units.air_flow or defaults.air_flow_unit
    p_unit = units.pressure or defaults.pressure_unit
    pw_unit = units.power or defaults.power_unit

    k_q = unit_factor(
        AIR_FLOW_FACTORS, air_unit, defaults.air_flow_unit, kind="airflow", strict=defaults.strict_units
    )
    k_p = unit_factor(
        PRESSURE_FACTORS, p_unit, defaults.pressure_unit, kind="pressure", strict=defaults.strict_units
    )
    k_w = unit_factor(
        POWER_FACTORS, pw_unit, defaults.power_unit, kind="power", strict=defaults.strict_units
    )

    return k_q, k_p, k_w


def convert_fan_units(
    fan: FanCurveRecord,
    units: ConversionUnits,
    *,
    defaults: Defaults = Defaults(),
    factors: Optional[Tuple[float, float, float]] = None,
) -> ConvertedFan:
    """Convert every curve of `fan`; `factors` skips resolving the units again."""
    k_q, k_p, k_w = factors if factors is not None else unit_factors(units, defaults)
    return ConvertedFan(
        raw=fan,
        air_flow=convert_array(fan.air_flow, k_q),
        total_pressure=convert_array(fan.total_pressure, k_p),
        velocity_pressure=convert_array(fan.velocity_pressure, k_p),
        static_pressure=convert_array(fan.static_pressure, k_p),
        input_power=convert_array(fan.input_power, k_w),
        air_flow_unit=units.air_flow or defaults.air_flow_unit,
        pressure_unit=units.pressure or defaults.pressure_unit,
        power_unit=units.power or defaults.power_unit,
    )
