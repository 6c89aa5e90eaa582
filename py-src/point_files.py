from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import numpy as np

from common_quantum import Orbital
from orbital_sampler import SampleResult

PathLike = Union[str, Path]


def save_points(path: PathLike, orbital: Orbital, result: SampleResult, time: float) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "n": orbital.n,
        "l": orbital.l,
        "m": orbital.m,
        "name": orbital.name,
        "time": time,
        "status": result.status.value,
        "points": result.points.tolist(),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f)
    return path


def load_points(path: PathLike) -> tuple[np.ndarray, dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    with path.open("r", encoding="utf-8") as f:
        obj = json.load(f)

    if not isinstance(obj, dict) or "points" not in obj:
        raise ValueError(f"{path}: not a point cloud file")

    try:
        points = np.asarray(obj["points"], dtype=float).reshape(-1, 3)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{path}: malformed points: {exc}") from exc

    header = {k: v for k, v in obj.items() if k != "points"}
    return points, header
