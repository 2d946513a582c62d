"""fanmatch: skalowanie krzywych wentylatorów i dobór silnika (bez GUI)."""

__all__: list[str] = [
    "schemas",
    "errors",
    "formulas",
    "convert",
    "scaling",
    "interpolate",
    "match",
    "motors",
    "acoustics",
    "io_json",
    "api",
    "charts",
    "cli",
]
