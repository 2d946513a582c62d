# formulas.py
# -----------------------------------------------------------------------------
# Otwarte wzory doboru wentylatora i silnika
# -----------------------------------------------------------------------------
# Bazowy układ jednostek: m^3/s, Pa, kW, °C. Tablice przeliczników są
# zdefiniowane względem tej bazy (mnożymy wartość bazową przez współczynnik).
# Ten moduł jest bezstanowy i deterministyczny; idealny pod testy jednostkowe.
#
# Zakres:
# - Gęstość powietrza z temperatury (model katalogowy, zaokrąglony)
# - Tablice przeliczników jednostek (przepływ, ciśnienie, moc)
# - Prawa podobieństwa wentylatorów (obroty, gęstość)
# - Sprawność statyczna/całkowita z danych katalogowych
# - Liczba biegunów silnika z obrotów
# - Poziom mocy/ciśnienia akustycznego i pasma oktawowe
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence, Tuple

from .errors import InvalidInput

# -----------------------------------------------------------------------------
# 1) Stałe fizyczne
# -----------------------------------------------------------------------------

P_ATM_PA: float = 101325.0
R_AIR_CATALOG: float = 287.1  # J/(kg*K), value used by the catalog sheets
KELVIN_OFFSET: float = 273.15


def is_number(v: object) -> bool:
    """True for finite int/float values (bool excluded)."""
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return math.isfinite(v)


def air_density_from_celsius(temp_c: float) -> float:
    """Gęstość powietrza [kg/m^3] z temperatury [°C], zaokrąglona do 0.01.

    rho = 101325 / ((T + 273.15) * 287.1)
    """
    if isinstance(temp_c, bool):
        raise InvalidInput("Invalid temperature for density calculation")
    try:
        t = float(temp_c)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid temperature for density calculation") from None
    if not math.isfinite(t):
        raise InvalidInput("Invalid temperature for density calculation")
    rho = P_ATM_PA / ((t + KELVIN_OFFSET) * R_AIR_CATALOG)
    return round(rho, 2)


# -----------------------------------------------------------------------------
# 2) Tablice przeliczników jednostek (baza: m^3/s, Pa, kW)
# -----------------------------------------------------------------------------

AIR_FLOW_FACTORS: Dict[str, float] = {
    "m^3/s": 1.0,
    "m^3/min": 60.0,
    "m^3/hr": 3600.0,
    "L/s": 1000.0,
    "L/min": 60000.0,
    "L/hr": 3600000.0,
    "CFM": 2118.880003,
}

PRESSURE_FACTORS: Dict[str, float] = {
    "Pa": 1.0,
    "kPa": 0.001,
    "bar": 1e-5,
    "Psi": 0.000145038,
    "in.wg": 0.004018647,
}

POWER_FACTORS: Dict[str, float] = {
    "kW": 1.0,
    "W": 1000.0,
    "HP": 1.34,
}

BASE_AIR_FLOW_UNIT = "m^3/s"
BASE_PRESSURE_UNIT = "Pa"
BASE_POWER_UNIT = "kW"


# -----------------------------------------------------------------------------
# 3) Prawa podobieństwa
# -----------------------------------------------------------------------------


def affinity_ratios(
    rpm: float, design_rpm: float, density: float, design_density: float
) -> Tuple[float, float]:
    """Return (rpm_ratio, density_ratio) for the similarity laws."""
    if not is_number(design_rpm) or design_rpm <= 0:
        raise InvalidInput(f"design RPM must be > 0, got {design_rpm!r}")
    if not is_number(design_density) or design_density <= 0:
        raise InvalidInput(f"design density must be > 0, got {design_density!r}")
    return rpm / design_rpm, density / design_density


def flow_factor(rpm_ratio: float) -> float:
    """Q ~ N"""
    return rpm_ratio


def pressure_factor(rpm_ratio: float, density_ratio: float) -> float:
    """p ~ N^2 * rho"""
    return rpm_ratio**2 * density_ratio


def power_factor(rpm_ratio: float, density_ratio: float) -> float:
    """P ~ N^3 * rho"""
    return rpm_ratio**3 * density_ratio


def fan_efficiency(
    pressure_pa: Optional[float], air_flow_m3s: Optional[float], power_kw: Optional[float]
) -> Optional[float]:
    """Sprawność = p*Q / (P*1000). Brak p lub Q liczy się jako 0; P<=0 -> None."""
    if not is_number(power_kw) or power_kw <= 0:
        return None
    p = pressure_pa if is_number(pressure_pa) else 0.0
    q = air_flow_m3s if is_number(air_flow_m3s) else 0.0
    return (p * q) / (power_kw * 1000.0)


# -----------------------------------------------------------------------------
# 4) Silnik: liczba biegunów z obrotów
# -----------------------------------------------------------------------------

# (max RPM inclusive, poles)
POLE_THRESHOLDS: Tuple[Tuple[float, int], ...] = (
    (750.0, 8),
    (1000.0, 6),
    (1500.0, 4),
    (3000.0, 2),
)


def poles_from_rpm(
    rpm: Optional[float], thresholds: Sequence[Tuple[float, int]] = POLE_THRESHOLDS
) -> Optional[int]:
    """Pole count for the requested speed; None above the last threshold."""
    if not is_number(rpm):
        return None
    for max_rpm, poles in thresholds:
        if rpm <= max_rpm:
            return poles
    return None


# -----------------------------------------------------------------------------
# 5) Akustyka: LW(A), LP(A), pasma oktawowe
# -----------------------------------------------------------------------------

OCTAVE_BANDS_HZ: Tuple[int, ...] = (62, 125, 250, 500, 1000, 2000, 4000, 8000)
LW_BAND_CORRECTIONS_DB: Tuple[float, ...] = (-31.7, -20.7, -4.2, -6.7, -5.7, -7.7, -10.7, -15.7)
LP_BAND_CORRECTIONS_DB: Tuple[float, ...] = (
    -31.81,
    -20.81,
    -4.31,
    -6.81,
    -5.81,
    -7.81,
    -10.81,
    -15.81,
)
LW_BASE_DB: float = 62.0


def motor_input_power(fan_power_kw: float, motor_eff: float, margin_pct: float) -> float:
    """P_m = (P_fan / eta_m) * (1 + margin/100)"""
    if motor_eff <= 0:
        raise ValueError("motor efficiency must be > 0")
    return (fan_power_kw / motor_eff) * (1.0 + margin_pct / 100.0)


def sound_power_level(motor_power_kw: float, static_pressure_pa: float) -> float:
    """LW(A) = 62 + 10*log10(P_m [kW]) + 10*log10(p_s [Pa])"""
    if motor_power_kw <= 0 or static_pressure_pa <= 0:
        raise ValueError("power and static pressure must be > 0")
    return LW_BASE_DB + 10.0 * math.log10(motor_power_kw) + 10.0 * math.log10(static_pressure_pa)


def distance_attenuation(directivity: float, distance_m: float) -> float:
    """|10*log10(Q / (4*pi*r^2))|"""
    if directivity <= 0 or distance_m <= 0:
        raise ValueError("Q and r must be > 0")
    return abs(10.0 * math.log10(directivity / (4.0 * math.pi * distance_m**2)))
