from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from typing import Optional, Any, Dict, List, Tuple

from .errors import InvalidInput
from .formulas import (
    BASE_AIR_FLOW_UNIT,
    BASE_PRESSURE_UNIT,
    BASE_POWER_UNIT,
    POLE_THRESHOLDS,
    is_number,
)

Curve = List[Optional[float]]

CURVE_KEYS: Tuple[str, ...] = (
    "airFlow",
    "totPressure",
    "velPressure",
    "staticPressure",
    "fanInputPow",
)


def _pos(name: str, v: float) -> float:
    if v <= 0:
        raise InvalidInput(f"{name} must be > 0, got {v}")
    return v


def _finite(name: str, v: Any) -> float:
    if not is_number(v):
        raise InvalidInput(f"{name} must be a finite number, got {v!r}")
    return float(v)


def _omit_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _first(d: Dict[str, Any], *keys: str) -> Any:
    """First non-None value under any of the given keys."""
    for k in keys:
        v = d.get(k)
        if v is not None:
            return v
    return None


def _as_number(v: Any) -> Optional[float]:
    """Lenient numeric parse for catalog/request fields ('1440' -> 1440.0)."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v) if math.isfinite(v) else None
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            n = float(s)
        except ValueError:
            return None
        return n if math.isfinite(n) else None
    return None


def _required_number(d: Dict[str, Any], name: str, *keys: str) -> float:
    raw = _first(d, *keys)
    n = _as_number(raw)
    if n is None:
        raise InvalidInput(f"{name} is required and must be numeric, got {raw!r}")
    return n


@dataclass(frozen=True)
class Defaults:
    """Fallback values shared by every stage of the pipeline."""

    air_flow_unit: str = BASE_AIR_FLOW_UNIT
    pressure_unit: str = BASE_PRESSURE_UNIT
    power_unit: str = BASE_POWER_UNIT
    strict_units: bool = False
    motor_efficiency: float = 0.85
    variance_pct: float = 5.0
    directivity: float = 2.0
    distance_m: float = 1.0
    curve_points: int = 10
    chart_samples: int = 100
    pole_thresholds: Tuple[Tuple[float, int], ...] = POLE_THRESHOLDS

    def __post_init__(self) -> None:
        _pos("motor_efficiency", self.motor_efficiency)
        _pos("directivity", self.directivity)
        _pos("distance_m", self.distance_m)
        if self.variance_pct < 0:
            raise InvalidInput("variance_pct must be >= 0")
        if self.curve_points < 2:
            raise InvalidInput("curve_points must be >= 2")
        if self.chart_samples < 2:
            raise InvalidInput("chart_samples must be >= 2")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["pole_thresholds"] = [list(t) for t in self.pole_thresholds]
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Defaults":
        d = dict(d)
        if "pole_thresholds" in d:
            try:
                d["pole_thresholds"] = tuple((float(a), int(b)) for a, b in d["pole_thresholds"])
            except (TypeError, ValueError) as e:
                raise InvalidInput(f"pole_thresholds must be [max_rpm, poles] pairs: {e}") from e
        try:
            return cls(**d)
        except TypeError as e:
            raise InvalidInput(f"unknown defaults field: {e}") from e


@dataclass(frozen=True)
class BladeSpec:
    symbol: str = ""
    material: str = ""
    count: Optional[float] = None
    angle: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "material": self.material,
            "noBlades": self.count,
            "angle": self.angle,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BladeSpec":
        return cls(
            symbol=str(_first(d, "symbol", "bladesSymbol") or ""),
            material=str(_first(d, "material", "bladesMaterial") or ""),
            count=_first(d, "noBlades", "count"),
            angle=_first(d, "angle", "bladesAngle"),
        )


@dataclass(frozen=True)
class ImpellerSpec:
    inner_dia: Optional[float] = None
    conf: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"innerDia": self.inner_dia, "conf": self.conf}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ImpellerSpec":
        return cls(
            inner_dia=_first(d, "innerDia", "impellerInnerDia", "inner_dia"),
            conf=str(_first(d, "conf", "impellerConf") or ""),
        )


_FAN_KNOWN_KEYS = frozenset(
    {
        "Id",
        "id",
        "RPM",
        "rpm",
        "desigDensity",
        "Blades",
        "Impeller",
        "bladesSymbol",
        "bladesMaterial",
        "noBlades",
        "bladesAngle",
        "impellerConf",
        "impellerInnerDia",
        *CURVE_KEYS,
    }
)


@dataclass(frozen=True)
class FanCurveRecord:
    """Catalog test data of one fan, measured at design RPM and density.

    Curve lengths are not validated here; see scaling.check_curve_lengths.
    """

    id: Any
    rpm: Any
    design_density: Any
    blades: BladeSpec = field(default_factory=BladeSpec)
    impeller: ImpellerSpec = field(default_factory=ImpellerSpec)
    air_flow: Curve = field(default_factory=list)
    total_pressure: Curve = field(default_factory=list)
    velocity_pressure: Curve = field(default_factory=list)
    static_pressure: Curve = field(default_factory=list)
    input_power: Curve = field(default_factory=list)
    # pass-through catalog fields (No, Model, hubType, ...)
    meta: Dict[str, Any] = field(default_factory=dict)

    def curves(self) -> Dict[str, Curve]:
        return {
            "airFlow": self.air_flow,
            "totPressure": self.total_pressure,
            "velPressure": self.velocity_pressure,
            "staticPressure": self.static_pressure,
            "fanInputPow": self.input_power,
        }

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.meta)
        out.update(
            {
                "Id": self.id,
                "RPM": self.rpm,
                "desigDensity": self.design_density,
                "Blades": self.blades.to_dict(),
                "Impeller": self.impeller.to_dict(),
            }
        )
        out.update({k: list(v) for k, v in self.curves().items()})
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FanCurveRecord":
        blades_src = d.get("Blades") if isinstance(d.get("Blades"), dict) else d
        impeller_src = d.get("Impeller") if isinstance(d.get("Impeller"), dict) else d

        def curve(key: str) -> Curve:
            v = d.get(key)
            if v is None:
                return []
            if not isinstance(v, (list, tuple)):
                raise InvalidInput(f"{key} must be a list, got {type(v).__name__}")
            return list(v)

        return cls(
            id=_first(d, "Id", "id"),
            rpm=_first(d, "RPM", "rpm"),
            design_density=d.get("desigDensity"),
            blades=BladeSpec.from_dict(blades_src),
            impeller=ImpellerSpec.from_dict(impeller_src),
            air_flow=curve("airFlow"),
            total_pressure=curve("totPressure"),
            velocity_pressure=curve("velPressure"),
            static_pressure=curve("staticPressure"),
            input_power=curve("fanInputPow"),
            meta={k: v for k, v in d.items() if k not in _FAN_KNOWN_KEYS},
        )


_MOTOR_KNOWN_KEYS = frozenset(
    {
        "id",
        "Id",
        "model",
        "Model",
        "powerKW",
        "powerKw",
        "netpower",
        "netPower",
        "NoPoles",
        "Phase",
        "effCurve",
        "frameSize",
        "shaftDia",
        "shaftLength",
        "powerHorse",
    }
)


@dataclass(frozen=True)
class MotorRecord:
    """Motor catalog entry. net_power is the shaft-available power [kW]."""

    id: Any
    net_power: Optional[float]
    poles: Optional[int]
    model: Optional[str] = None
    power_kw: Optional[float] = None
    phase: Optional[Any] = None
    eff_curve: List[Optional[float]] = field(default_factory=list)
    frame_size: Optional[str] = None
    shaft_dia: Optional[float] = None
    shaft_length: Optional[float] = None
    power_hp: Optional[Any] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def average_efficiency(self) -> Optional[float]:
        """Mean of the numeric efficiency samples, or None."""
        vals = [float(v) for v in self.eff_curve if is_number(v)]
        if not vals:
            return None
        return sum(vals) / len(vals)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.meta)
        out.update(
            {
                "id": self.id,
                "model": self.model,
                "powerKW": self.power_kw,
                "netpower": self.net_power,
                "NoPoles": self.poles,
                "Phase": self.phase,
                "effCurve": list(self.eff_curve),
                "frameSize": self.frame_size,
                "shaftDia": self.shaft_dia,
                "shaftLength": self.shaft_length,
                "powerHorse": self.power_hp,
            }
        )
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MotorRecord":
        power_kw = _as_number(_first(d, "powerKW", "powerKw"))
        eff_curve = list(d.get("effCurve") or [])
        net = _as_number(_first(d, "netpower", "netPower"))
        if net is None and power_kw is not None:
            # catalog import rule: net = rated * efficiency@50Hz
            eff50 = _as_number(eff_curve[0]) if eff_curve else None
            net = power_kw * eff50 if eff50 is not None else power_kw
        poles = _as_number(d.get("NoPoles"))
        return cls(
            id=_first(d, "id", "Id"),
            net_power=net,
            poles=int(poles) if poles is not None else None,
            model=_first(d, "model", "Model"),
            power_kw=power_kw,
            phase=d.get("Phase"),
            eff_curve=eff_curve,
            frame_size=d.get("frameSize"),
            shaft_dia=d.get("shaftDia"),
            shaft_length=d.get("shaftLength"),
            power_hp=d.get("powerHorse"),
            meta={k: v for k, v in d.items() if k not in _MOTOR_KNOWN_KEYS},
        )


@dataclass(frozen=True)
class ConversionUnits:
    """Display units selected by the user; None means the base unit."""

    air_flow: Optional[str] = None
    pressure: Optional[str] = None
    power: Optional[str] = None
    fan_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "airFlow": self.air_flow,
            "pressure": self.pressure,
            "power": self.power,
            "fanType": self.fan_type,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ConversionUnits":
        return cls(
            air_flow=_first(d, "airFlow", "air_flow") or None,
            pressure=d.get("pressure") or None,
            power=d.get("power") or None,
            fan_type=str(_first(d, "fanType", "fan_type") or ""),
        )


@dataclass(frozen=True)
class OperatingConditions:
    """Requested duty point. air_flow and static_pressure are in display units."""

    rpm: float
    temp_c: float
    air_flow: float
    static_pressure: Optional[float] = None
    phases: Optional[int] = None
    # one tolerance used for the static band, motor headroom and acoustic margin
    variance_pct: Optional[float] = None
    directivity: Optional[float] = None
    distance_m: Optional[float] = None

    def __post_init__(self) -> None:
        _pos("rpm", _finite("rpm", self.rpm))
        _finite("temp_c", self.temp_c)
        _finite("air_flow", self.air_flow)
        if self.static_pressure is not None:
            _finite("static_pressure", self.static_pressure)
        if self.variance_pct is not None and _finite("variance_pct", self.variance_pct) < 0:
            raise InvalidInput("variance_pct must be >= 0")

    def variance(self, defaults: Defaults) -> float:
        return self.variance_pct if self.variance_pct is not None else defaults.variance_pct

    def to_dict(self) -> Dict[str, Any]:
        return _omit_none(
            {
                "RPM": self.rpm,
                "TempC": self.temp_c,
                "airFlow": self.air_flow,
                "staticPressure": self.static_pressure,
                "NoPhases": self.phases,
                "variance": self.variance_pct,
                "directivityFactor": self.directivity,
                "distanceFromSource": self.distance_m,
            }
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OperatingConditions":
        phases = _as_number(_first(d, "NoPhases", "phases"))
        return cls(
            rpm=_required_number(d, "RPM", "RPM", "rpm"),
            temp_c=_required_number(d, "TempC", "TempC", "temp_c"),
            air_flow=_required_number(d, "airFlow", "airFlow", "air_flow"),
            static_pressure=_as_number(_first(d, "staticPressure", "StaticPressure", "static_pressure")),
            phases=int(phases) if phases is not None else None,
            variance_pct=_as_number(_first(d, "variance", "variance_pct", "SPF", "Safety")),
            directivity=_as_number(_first(d, "directivityFactor", "directivity")),
            distance_m=_as_number(_first(d, "distanceFromSource", "distance_m")),
        )


@dataclass(frozen=True)
class MatchRequest:
    """API payload: { "units": {...}, "input": {...}, "defaults": {...} }."""

    units: ConversionUnits
    conditions: OperatingConditions
    defaults: Defaults = field(default_factory=Defaults)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "units": self.units.to_dict(),
            "input": self.conditions.to_dict(),
            "defaults": self.defaults.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MatchRequest":
        if not isinstance(d.get("input"), dict):
            raise InvalidInput("request must contain an 'input' object")
        return cls(
            units=ConversionUnits.from_dict(d.get("units") or {}),
            conditions=OperatingConditions.from_dict(d["input"]),
            defaults=Defaults.from_dict(d["defaults"]) if d.get("defaults") else Defaults(),
        )


@dataclass(frozen=True)
class ScaledCurve:
    """Curves after unit conversion and affinity scaling, plus efficiencies."""

    air_flow: Curve
    total_pressure: Curve
    velocity_pressure: Curve
    static_pressure: Curve
    input_power: Curve
    static_efficiency: Curve
    total_efficiency: Curve
    density: float
    rpm_ratio: float
    density_ratio: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "InputDensity": self.density,
            "AirFlowNew": list(self.air_flow),
            "TotalPressureNew": list(self.total_pressure),
            "VelocityPressureNew": list(self.velocity_pressure),
            "StaticPressureNew": list(self.static_pressure),
            "FanInputPowerNew": list(self.input_power),
            "FanStaticEfficiency": list(self.static_efficiency),
            "FanTotalEfficiency": list(self.total_efficiency),
        }


@dataclass(frozen=True)
class PredictionResult:
    """Single-point evaluation of a ScaledCurve at the requested airflow."""

    static_pressure: Optional[float] = None
    velocity_pressure: Optional[float] = None
    input_power: Optional[float] = None
    static_efficiency: Optional[float] = None
    total_efficiency: Optional[float] = None

    def values(self) -> List[Optional[float]]:
        return [
            self.static_pressure,
            self.velocity_pressure,
            self.input_power,
            self.static_efficiency,
            self.total_efficiency,
        ]

    def has_numeric(self) -> bool:
        return any(is_number(v) for v in self.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "StaticPressurePred": self.static_pressure,
            "VelocityPressurePred": self.velocity_pressure,
            "FanInputPowerPred": self.input_power,
            "FanStaticEfficiencyPred": self.static_efficiency,
            "FanTotalEfficiencyPred": self.total_efficiency,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PredictionResult":
        return cls(
            static_pressure=d.get("StaticPressurePred"),
            velocity_pressure=d.get("VelocityPressurePred"),
            input_power=d.get("FanInputPowerPred"),
            static_efficiency=d.get("FanStaticEfficiencyPred"),
            total_efficiency=d.get("FanTotalEfficiencyPred"),
        )


@dataclass(frozen=True)
class MatchResult:
    """One ranked candidate: fan, prediction, model code and motor."""

    fan: FanCurveRecord
    prediction: PredictionResult
    fan_model: str
    matched_motor: Optional[MotorRecord] = None
    power_diff: Optional[float] = None
    scaled: Optional[ScaledCurve] = None

    def to_dict(self) -> Dict[str, Any]:
        out = self.fan.to_dict()
        if self.scaled is not None:
            out.update(self.scaled.to_dict())
        out.update(
            {
                "FanModel": self.fan_model,
                "predictions": self.prediction.to_dict(),
                "matchedMotor": self.matched_motor.to_dict() if self.matched_motor else None,
                "powerDiff": self.power_diff,
            }
        )
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MatchResult":
        """Rebuild from a results row (curves are recomputed on demand)."""
        motor = d.get("matchedMotor")
        fan_fields = {
            k: v
            for k, v in d.items()
            if k not in ("FanModel", "predictions", "matchedMotor", "powerDiff")
            and not k.endswith("New")
            and k not in ("InputDensity", "FanStaticEfficiency", "FanTotalEfficiency")
        }
        return cls(
            fan=FanCurveRecord.from_dict(fan_fields),
            prediction=PredictionResult.from_dict(d.get("predictions") or {}),
            fan_model=str(d.get("FanModel") or ""),
            matched_motor=MotorRecord.from_dict(motor) if motor else None,
            power_diff=d.get("powerDiff"),
        )
