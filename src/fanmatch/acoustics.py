from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import formulas as F
from .schemas import Defaults, MotorRecord


@dataclass(frozen=True)
class OctaveBand:
    frequency_hz: int
    correction_db: float
    level_db: float

    def to_dict(self, key: str) -> Dict[str, Any]:
        return {
            "frequency": str(self.frequency_hz),
            "freqValue": self.frequency_hz,
            key: round(self.level_db, 1),
            "correction": self.correction_db,
        }


@dataclass(frozen=True)
class NoiseSpectrum:
    """Poziomy akustyczne w punkcie pracy (dB(A)) i widma oktawowe."""

    lw_a: float
    lp_a: float
    motor_input_power: float
    distance_attenuation: float
    directivity: float
    distance_m: float
    lw_spectrum: List[OctaveBand] = field(default_factory=list)
    lp_spectrum: List[OctaveBand] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lwA": round(self.lw_a, 1),
            "lpA": round(self.lp_a, 1),
            "motorInputPower": round(self.motor_input_power, 2),
            "distanceAttenuation": round(self.distance_attenuation, 2),
            "Q": self.directivity,
            "r": self.distance_m,
            "lwSpectrum": [b.to_dict("soundPower") for b in self.lw_spectrum],
            "lpSpectrum": [b.to_dict("soundPressure") for b in self.lp_spectrum],
        }


def motor_efficiency(motor: Optional[MotorRecord], *, defaults: Defaults = Defaults()) -> float:
    """Mean of the motor efficiency curve, or the default when unavailable."""
    if motor is None:
        return defaults.motor_efficiency
    eff = motor.average_efficiency()
    if eff is None or eff <= 0:
        return defaults.motor_efficiency
    return eff


def _or_default(v: Optional[float], fallback: float) -> float:
    # None and 0 both mean "not given"
    return float(v) if F.is_number(v) and v != 0 else fallback  # type: ignore[arg-type]


def noise_spectrum(
    fan_input_power: Optional[float],
    static_pressure: Optional[float],
    *,
    motor_eff: Optional[float] = None,
    variance_pct: Optional[float] = None,
    directivity: Optional[float] = None,
    distance_m: Optional[float] = None,
    defaults: Defaults = Defaults(),
) -> Optional[NoiseSpectrum]:
    """
    LW(A) = 62 + 10*log10(P_m) + 10*log10(p_s), P_m = (P_fan/eta_m)*(1 + v/100)
    LP(A) = LW(A) - |10*log10(Q / (4*pi*r^2))|
    Zwraca None, gdy moc lub ciśnienie nie są dodatnie.
    """
    if not F.is_number(fan_input_power) or fan_input_power <= 0:  # type: ignore[operator]
        return None
    if not F.is_number(static_pressure) or static_pressure <= 0:  # type: ignore[operator]
        return None

    eta = motor_eff if F.is_number(motor_eff) and motor_eff > 0 else defaults.motor_efficiency  # type: ignore[operator]
    v = variance_pct if F.is_number(variance_pct) else defaults.variance_pct
    q = _or_default(directivity, defaults.directivity)
    r = _or_default(distance_m, defaults.distance_m)

    p_m = F.motor_input_power(fan_input_power, eta, v)  # type: ignore[arg-type]
    lw = F.sound_power_level(p_m, static_pressure)  # type: ignore[arg-type]
    att = F.distance_attenuation(q, r)
    lp = lw - att

    lw_bands = [
        OctaveBand(hz, c, lw + c) for hz, c in zip(F.OCTAVE_BANDS_HZ, F.LW_BAND_CORRECTIONS_DB)
    ]
    lp_bands = [
        OctaveBand(hz, c, lp + c) for hz, c in zip(F.OCTAVE_BANDS_HZ, F.LP_BAND_CORRECTIONS_DB)
    ]
    return NoiseSpectrum(
        lw_a=lw,
        lp_a=lp,
        motor_input_power=p_m,
        distance_attenuation=att,
        directivity=q,
        distance_m=r,
        lw_spectrum=lw_bands,
        lp_spectrum=lp_bands,
    )
