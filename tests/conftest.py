from __future__ import annotations

from typing import List, Optional

from fanmatch.schemas import BladeSpec, FanCurveRecord, ImpellerSpec

Q = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0]
P_TOT = [600.0, 590.0, 575.0, 555.0, 530.0, 500.0, 465.0, 425.0, 380.0, 330.0]
P_VEL = [2.0, 8.0, 18.0, 32.0, 50.0, 72.0, 98.0, 128.0, 162.0, 200.0]
P_STAT = [598.0, 582.0, 557.0, 523.0, 480.0, 428.0, 367.0, 297.0, 218.0, 130.0]
POWER = [2.0, 2.6, 3.2, 3.8, 4.4, 5.0, 5.5, 6.0, 6.4, 6.8]


def make_fan(
    fan_id: object = 1,
    *,
    rpm: float = 1440.0,
    density: float = 1.2,
    q: Optional[List[float]] = None,
    p_stat: Optional[List[float]] = None,
    p_scale: float = 1.0,
    power: Optional[List[float]] = None,
) -> FanCurveRecord:
    ps = p_stat if p_stat is not None else P_STAT
    return FanCurveRecord(
        id=fan_id,
        rpm=rpm,
        design_density=density,
        blades=BladeSpec(symbol="S", material="Al", count=6, angle=30),
        impeller=ImpellerSpec(inner_dia=630, conf="A"),
        air_flow=list(q if q is not None else Q),
        total_pressure=[v * p_scale for v in P_TOT],
        velocity_pressure=list(P_VEL),
        static_pressure=[v * p_scale for v in ps],
        input_power=list(power if power is not None else POWER),
    )
