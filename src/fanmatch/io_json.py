from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .errors import InvalidInput
from .schemas import FanCurveRecord, MatchRequest, MatchResult, MotorRecord


def _read_json(path: str | Path) -> Any:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"{p}: invalid JSON ({e})") from e


def _read_list(path: str | Path, key: str) -> List[Dict[str, Any]]:
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        raise InvalidInput(f"{path}: expected a JSON list (or an object with '{key}')")
    return data


def write_json(path: str | Path, data: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def read_fans(path: str | Path) -> List[FanCurveRecord]:
    return [FanCurveRecord.from_dict(d) for d in _read_list(path, "fans")]


def write_fans(path: str | Path, fans: Sequence[FanCurveRecord]) -> None:
    write_json(path, [f.to_dict() for f in fans])


def read_motors(path: str | Path) -> List[MotorRecord]:
    return [MotorRecord.from_dict(d) for d in _read_list(path, "motors")]


def write_motors(path: str | Path, motors: Sequence[MotorRecord]) -> None:
    write_json(path, [m.to_dict() for m in motors])


def read_request(path: str | Path) -> MatchRequest:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise InvalidInput(f"{path}: request must be a JSON object")
    return MatchRequest.from_dict(data)


def write_request(path: str | Path, request: MatchRequest) -> None:
    write_json(path, request.to_dict())


def read_results(path: str | Path) -> List[MatchResult]:
    return [MatchResult.from_dict(d) for d in _read_list(path, "results")]
