from pathlib import Path

from fanmatch.api import run_noise, match_fans
from fanmatch.charts import ChartCanvas, plot_noise, plot_performance
from fanmatch.io_json import read_fans, read_motors, read_request

DATA = Path(__file__).resolve().parent / "data"


def test_canvas_plot_xy_keeps_gaps() -> None:
    c = ChartCanvas()
    c.plot_xy([1, 2, 3], [1.0, None, 3.0], label="a")
    (line,) = c.ax.get_lines()
    ys = list(line.get_ydata())
    assert ys[0] == 1.0 and ys[1] != ys[1]


def test_plot_performance_writes_png(tmp_path: Path) -> None:
    req = read_request(DATA / "request.json")
    fan = read_fans(DATA / "fans.json")[0]
    out = plot_performance(fan, req.units, req.conditions, tmp_path / "perf.png")
    assert out.exists() and out.stat().st_size > 0


def test_plot_noise_writes_png(tmp_path: Path) -> None:
    req = read_request(DATA / "request.json")
    ranked, _ = match_fans(
        read_fans(DATA / "fans.json"), read_motors(DATA / "motors.json"), req.units, req.conditions
    )
    spectrum = run_noise(ranked[0], req.conditions)
    assert spectrum is not None
    out = plot_noise(spectrum, tmp_path / "noise.png")
    assert out.exists()
