from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from .api import run_match, run_noise
from .errors import FanMatchError
from .io_json import (
    read_fans,
    read_motors,
    read_request,
    read_results,
    write_fans,
    write_json,
    write_motors,
    write_request,
)
from .schemas import (
    BladeSpec,
    ConversionUnits,
    FanCurveRecord,
    ImpellerSpec,
    MatchRequest,
    MotorRecord,
    OperatingConditions,
)


def _request_with_overrides(args: argparse.Namespace) -> MatchRequest:
    req = read_request(args.request)
    if getattr(args, "strict_units", False):
        req = replace(req, defaults=replace(req.defaults, strict_units=True))
    return req


def _cmd_match(args: argparse.Namespace) -> int:
    req = _request_with_overrides(args)
    fans = read_fans(args.fans)
    motors = read_motors(args.motors) if args.motors else []
    result = run_match(fans, motors, req.units, req.conditions, defaults=req.defaults)
    out = Path(args.output)
    write_json(out, result)
    print(f"[fanmatch] {len(result['results'])} matches, saved results to {out}")
    return 0


def _cmd_noise(args: argparse.Namespace) -> int:
    req = read_request(args.request)
    results = read_results(args.results)
    if not (0 <= args.index < len(results)):
        print(f"[fanmatch] index {args.index} out of range (0..{len(results) - 1})", file=sys.stderr)
        return 2
    spectrum = run_noise(results[args.index], req.conditions, defaults=req.defaults)
    if spectrum is None:
        print("[fanmatch] noise spectrum unavailable (missing power or static pressure)", file=sys.stderr)
        return 1
    out = Path(args.output)
    write_json(out, spectrum)
    print(f"[fanmatch] Saved noise spectrum to {out}")
    return 0


def _cmd_plot(args: argparse.Namespace) -> int:
    from .charts import plot_performance

    req = read_request(args.request)
    fans = read_fans(args.fans)
    by_id = {str(f.id): f for f in fans}
    fan = by_id.get(str(args.fan_id))
    if fan is None:
        print(f"[fanmatch] fan {args.fan_id} not found", file=sys.stderr)
        return 2
    out = plot_performance(
        fan, req.units, req.conditions, args.output, curve=args.curve, defaults=req.defaults
    )
    print(f"[fanmatch] Saved chart to {out}")
    return 0


def _cmd_example(args: argparse.Namespace) -> int:
    # minimalny katalog: jeden wentylator, dwa silniki
    fan = FanCurveRecord(
        id=1,
        rpm=1440,
        design_density=1.2,
        blades=BladeSpec(symbol="S", material="Al", count=6, angle=30),
        impeller=ImpellerSpec(inner_dia=630, conf="A"),
        air_flow=[1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        total_pressure=[600, 590, 575, 555, 530, 500, 465, 425, 380, 330],
        velocity_pressure=[2, 8, 18, 32, 50, 72, 98, 128, 162, 200],
        static_pressure=[598, 582, 557, 523, 480, 428, 367, 297, 218, 130],
        input_power=[2.0, 2.6, 3.2, 3.8, 4.4, 5.0, 5.5, 6.0, 6.4, 6.8],
    )
    motors = [
        MotorRecord(id=1, net_power=5.0, poles=4, model="M4-5.5", power_kw=5.5, eff_curve=[0.88, 0.87, 0.85], power_hp=7.5),
        MotorRecord(id=2, net_power=6.8, poles=4, model="M4-7.5", power_kw=7.5, eff_curve=[0.89, 0.88, 0.86], power_hp=10),
    ]
    req = MatchRequest(
        units=ConversionUnits(air_flow="m^3/s", pressure="Pa", power="kW", fan_type="AF-L"),
        conditions=OperatingConditions(
            rpm=1440, temp_c=20, air_flow=5, static_pressure=500, phases=3, variance_pct=10
        ),
    )
    out_dir = Path(args.out_dir)
    write_fans(out_dir / "fans.json", [fan])
    write_motors(out_dir / "motors.json", motors)
    write_request(out_dir / "request.json", req)
    print(f"[fanmatch] Wrote example catalog and request to {out_dir}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="fanmatch", description="Fan scaling and matching CLI")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_match = sub.add_parser("match", help="Rank fans (and motors) for a request")
    p_match.add_argument("--fans", required=True, help="fan catalog JSON")
    p_match.add_argument("--motors", default=None, help="motor catalog JSON")
    p_match.add_argument("--request", required=True, help="request JSON {units, input}")
    p_match.add_argument("--out", dest="output", required=True, help="output results.json")
    p_match.add_argument("--strict-units", action="store_true", help="fail on unknown units")
    p_match.set_defaults(func=_cmd_match)

    p_noise = sub.add_parser("noise", help="Noise spectrum for one ranked result")
    p_noise.add_argument("--results", required=True, help="results.json from 'match'")
    p_noise.add_argument("--index", type=int, default=0)
    p_noise.add_argument("--request", required=True)
    p_noise.add_argument("--out", dest="output", required=True)
    p_noise.set_defaults(func=_cmd_noise)

    p_plot = sub.add_parser("plot", help="Render scaled curves of one fan")
    p_plot.add_argument("--fans", required=True)
    p_plot.add_argument("--request", required=True)
    p_plot.add_argument("--fan-id", dest="fan_id", required=True)
    p_plot.add_argument(
        "--curve",
        default="StaticPressureNew",
        choices=(
            "StaticPressureNew",
            "FanInputPowerNew",
            "VelocityPressureNew",
            "FanStaticEfficiency",
            "FanTotalEfficiency",
        ),
    )
    p_plot.add_argument("--out", dest="output", required=True, help="output image (png/svg)")
    p_plot.set_defaults(func=_cmd_plot)

    p_ex = sub.add_parser("example", help="Write an example catalog and request")
    p_ex.add_argument("--out-dir", dest="out_dir", required=True)
    p_ex.set_defaults(func=_cmd_example)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        rv = args.func(args)
    except FanMatchError as e:
        print(f"[fanmatch] error: {e}", file=sys.stderr)
        return 2
    return int(rv)


if __name__ == "__main__":
    raise SystemExit(main())
