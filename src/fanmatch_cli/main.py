from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Literal, Optional

import typer

from fanmatch_core import (  # type: ignore[attr-defined]
    FanMatchError,
    read_fans,
    read_motors,
    read_request,
    read_results,
    write_json,
    run_match,
    run_noise,
    load_preset_json,
)

app = typer.Typer(help="Fan scaling and matching CLI (Typer)")


@app.callback()
def _setup(verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def match(
    fans: Path = typer.Option(..., "--fans", help="Fan catalog JSON"),
    request: Path = typer.Option(..., "--request", help="Request JSON {units, input}"),
    out: Path = typer.Option(..., "--out", help="Output results.json"),
    motors: Optional[Path] = typer.Option(None, "--motors", help="Motor catalog JSON"),
    variance: Optional[float] = typer.Option(None, "--variance", help="Override variance %"),
    strict_units: bool = typer.Option(False, "--strict-units"),
) -> None:
    """Rank fans for a duty point and attach motors."""
    try:
        req = read_request(str(request))
        conditions = req.conditions
        if variance is not None:
            conditions = replace(conditions, variance_pct=variance)
        defaults = replace(req.defaults, strict_units=True) if strict_units else req.defaults
        res = run_match(
            read_fans(str(fans)),
            read_motors(str(motors)) if motors else [],
            req.units,
            conditions,
            defaults=defaults,
        )
    except FanMatchError as e:
        typer.echo(f"[fanmatch] error: {e}", err=True)
        raise typer.Exit(code=2)
    write_json(out, res)
    typer.echo(f"[fanmatch] {len(res['results'])} matches, saved results to {out}")


@app.command()
def noise(
    results: Path = typer.Option(..., "--results", help="results.json from 'match'"),
    request: Path = typer.Option(..., "--request"),
    out: Path = typer.Option(..., "--out"),
    index: int = typer.Option(0, "--index"),
) -> None:
    """Write the octave-band noise spectrum of one ranked result."""
    try:
        req = read_request(str(request))
        rows = read_results(str(results))
    except FanMatchError as e:
        typer.echo(f"[fanmatch] error: {e}", err=True)
        raise typer.Exit(code=2)
    if not (0 <= index < len(rows)):
        typer.echo(f"[fanmatch] index {index} out of range", err=True)
        raise typer.Exit(code=2)
    spectrum = run_noise(rows[index], req.conditions, defaults=req.defaults)
    if spectrum is None:
        typer.echo("[fanmatch] noise spectrum unavailable", err=True)
        raise typer.Exit(code=1)
    write_json(out, spectrum)
    typer.echo(f"[fanmatch] Saved noise spectrum to {out}")


@app.command()
def plot(
    fans: Path = typer.Option(..., "--fans"),
    request: Path = typer.Option(..., "--request"),
    fan_id: str = typer.Option(..., "--fan-id"),
    out: Path = typer.Option(..., "--out"),
    curve: Literal[
        "StaticPressureNew",
        "FanInputPowerNew",
        "VelocityPressureNew",
        "FanStaticEfficiency",
        "FanTotalEfficiency",
    ] = typer.Option("StaticPressureNew", "--curve"),
) -> None:
    """Render the scaled curve of one fan with its system curve."""
    from fanmatch.charts import plot_performance

    try:
        req = read_request(str(request))
        fan = next((f for f in read_fans(str(fans)) if str(f.id) == fan_id), None)
        if fan is None:
            typer.echo(f"[fanmatch] fan {fan_id} not found", err=True)
            raise typer.Exit(code=2)
        p = plot_performance(
            fan, req.units, req.conditions, out, curve=curve, defaults=req.defaults
        )
    except FanMatchError as e:
        typer.echo(f"[fanmatch] error: {e}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"[fanmatch] Saved chart to {p}")


@app.command()
def preset(name: str = typer.Argument("sample")) -> None:
    """Print a builtin preset JSON to stdout."""
    data = load_preset_json(name)
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
