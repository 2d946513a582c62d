from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .api import run_curves
from .schemas import ConversionUnits, Defaults, FanCurveRecord, OperatingConditions


class ChartCanvas(FigureCanvasAgg):
    """Headless matplotlib canvas (Agg)."""

    def __init__(self) -> None:
        self.fig = Figure(figsize=(8, 5))
        self.ax = self.fig.add_subplot(111)
        super().__init__(self.fig)

    def clear(self) -> None:
        self.ax.clear()

    def plot_xy(
        self,
        x: Sequence[float],
        y: Sequence[Optional[float]],
        label: str | None = None,
        *,
        style: str = "-",
        xlabel: str | None = None,
        ylabel: str | None = None,
        title: str | None = None,
    ) -> None:
        # matplotlib leaves gaps for NaN
        ys = [float("nan") if v is None else v for v in y]
        self.ax.plot(x, ys, style, label=label)
        if xlabel:
            self.ax.set_xlabel(xlabel)
        if ylabel:
            self.ax.set_ylabel(ylabel)
        if title:
            self.ax.set_title(title)
        if label:
            self.ax.legend()

    def save(self, path: str | Path) -> Path:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        self.draw()
        self.fig.savefig(p)
        return p


def plot_performance(
    fan: FanCurveRecord,
    units: ConversionUnits,
    conditions: OperatingConditions,
    out: str | Path,
    *,
    curve: str = "StaticPressureNew",
    defaults: Defaults = Defaults(),
) -> Path:
    """Scaled curve + system curve + duty point for one fan, saved as an image."""
    data = run_curves(fan, units, conditions, defaults=defaults)
    pts = data["curves"][curve]
    c = ChartCanvas()
    flow_unit = units.air_flow or defaults.air_flow_unit
    c.plot_xy(
        [p["x"] for p in pts],
        [p["y"] for p in pts],
        label=curve,
        xlabel=f"Air flow [{flow_unit}]",
        title=f"Fan {fan.id} @ {conditions.rpm:g} RPM",
    )
    if curve == "StaticPressureNew" and data["systemCurve"]:
        sc = data["systemCurve"]
        c.plot_xy([p["x"] for p in sc], [p["y"] for p in sc], label="System curve", style="--")
    pred = data["predictions"]
    if pred is not None and pred.get("StaticPressurePred") is not None and curve == "StaticPressureNew":
        c.ax.plot([conditions.air_flow], [pred["StaticPressurePred"]], "o", label="Duty point")
        c.ax.legend()
    return c.save(out)


def plot_noise(spectrum: Dict[str, Any], out: str | Path) -> Path:
    """Octave-band LW/LP spectrum (dict from api.run_noise)."""
    c = ChartCanvas()
    lw = spectrum["lwSpectrum"]
    lp = spectrum["lpSpectrum"]
    labels = [b["frequency"] for b in lw]
    xs = list(range(len(labels)))
    width = 0.4
    c.ax.bar([x - width / 2 for x in xs], [b["soundPower"] for b in lw], width, label="LW")
    c.ax.bar([x + width / 2 for x in xs], [b["soundPressure"] for b in lp], width, label="LP")
    c.ax.set_xticks(xs)
    c.ax.set_xticklabels(labels)
    c.ax.set_xlabel("Octave band [Hz]")
    c.ax.set_ylabel("dB")
    c.ax.set_title(f"LW(A) {spectrum['lwA']} dB, LP(A) {spectrum['lpA']} dB")
    c.ax.legend()
    return c.save(out)
