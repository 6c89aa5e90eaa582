import json

import numpy as np
import pytest

from common_quantum import find_orbital
from orbital_sampler import SamplerConfig, generate_points
from point_files import load_points, save_points


def test_save_and_load(tmp_path):
    orbital = find_orbital("2py")
    result = generate_points(orbital, 2.5, SamplerConfig(num_points=300), rng=6)
    path = save_points(tmp_path / "orbitals" / "orbital_n2_l1_m-1.json", orbital, result, 2.5)

    points, header = load_points(path)
    assert np.allclose(points, result.points)
    assert header == {"n": 2, "l": 1, "m": -1, "name": "2py", "time": 2.5, "status": "done"}


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_points(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "payload",
    [
        [1, 2, 3],
        {"n": 1},
        {"points": [[1.0, 2.0], [3.0]]},
        {"points": [1.0, 2.0, 3.0, 4.0]},
        {"points": [["a", "b", "c"]]},
    ],
)
def test_load_malformed(tmp_path, payload):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError):
        load_points(path)


def test_load_empty_cloud(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"name": "1s", "points": []}), encoding="utf-8")
    points, header = load_points(path)
    assert points.shape == (0, 3)
    assert header == {"name": "1s"}
