from __future__ import annotations

"""Core re-exports for a UI-agnostic API.

This package provides a stable, import-friendly surface over the fanmatch
modules, plus a loader for the builtin sample catalog preset.
"""

# ruff: noqa: E402 - Re-export pattern after docstring
import json
from importlib import resources
from pathlib import Path
from typing import Any, Dict

# Re-export records and IO helpers
from fanmatch.schemas import (  # noqa: F401
    BladeSpec,
    ImpellerSpec,
    FanCurveRecord,
    MotorRecord,
    ConversionUnits,
    OperatingConditions,
    Defaults,
    MatchRequest,
    MatchResult,
    PredictionResult,
    ScaledCurve,
)
from fanmatch.errors import FanMatchError, InvalidInput, EmptyCatalog  # noqa: F401
from fanmatch.io_json import (  # noqa: F401
    read_fans,
    read_motors,
    read_request,
    read_results,
    write_fans,
    write_motors,
    write_request,
    write_json,
)

# Re-export computation entry points and utilities
from fanmatch.api import match_fans, run_match, run_noise, run_curves  # noqa: F401
from fanmatch.interpolate import CurveInterpolator, sample_curve, system_curve  # noqa: F401
from fanmatch import formulas  # noqa: F401


def load_preset_json(name: str) -> Dict[str, Any]:
    """Load a builtin preset JSON from fanmatch_core.presets.

    Example: load_preset_json("sample")
    """
    pkg = __package__ + ".presets"
    candidate = f"{name}.json" if not name.lower().endswith(".json") else name
    try:
        with resources.files(pkg).joinpath(candidate).open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Preset '{candidate}' not found in {pkg}")


def get_preset_path(name: str) -> Path:
    """Return filesystem path to a builtin preset (for debugging/docs)."""
    pkg = __package__ + ".presets"
    candidate = f"{name}.json" if not name.lower().endswith(".json") else name
    return Path(str(resources.files(pkg).joinpath(candidate)))


def load_preset(name: str = "sample") -> Dict[str, Any]:
    """Preset parsed into records: {'fans', 'motors', 'request'}."""
    data = load_preset_json(name)
    return {
        "fans": [FanCurveRecord.from_dict(d) for d in data.get("fans", [])],
        "motors": [MotorRecord.from_dict(d) for d in data.get("motors", [])],
        "request": MatchRequest.from_dict(data["request"]) if data.get("request") else None,
    }
