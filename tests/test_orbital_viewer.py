import pytest

pytest.importorskip("glfw")
pytest.importorskip("OpenGL.GL")

import orbital_viewer
from common_quantum import ORBITALS
from orbital_sampler import SampleStatus, estimate_acceptance_bound, generate_points
from point_files import load_points


def test_defaults_follow_multi_variant():
    config = orbital_viewer.build_config(orbital_viewer.parse_args([]))
    assert config.r_max == 8.0
    assert config.max_prob is None
    assert config.num_points == 10000
    assert config.convention == "real"


def test_single_variant_overrides():
    args = orbital_viewer.parse_args(["--variant", "single", "--points", "50", "--convention", "real"])
    config = orbital_viewer.build_config(args)
    assert config.r_max == 5.0
    assert config.num_points == 50
    assert config.convention == "real"


def test_default_bound_is_searched_per_orbital():
    config = orbital_viewer.build_config(orbital_viewer.parse_args([]))
    bounds = {o.name: config.bound_for(o) for o in ORBITALS}
    for orbital in ORBITALS:
        assert bounds[orbital.name] == pytest.approx(estimate_acceptance_bound(orbital, 8.0))
    assert bounds["2pz"] < bounds["1s"] / 5.0


def test_fixed_bound_flag():
    config = orbital_viewer.build_config(orbital_viewer.parse_args(["--max-prob", "0.5"]))
    assert all(config.bound_for(o) == 0.5 for o in ORBITALS)


@pytest.mark.parametrize("orbital", ORBITALS, ids=lambda o: o.name)
def test_default_cli_config_completes_every_orbital(orbital):
    config = orbital_viewer.build_config(orbital_viewer.parse_args([]))
    result = generate_points(orbital, 0.0, config, rng=1)
    assert result.status is SampleStatus.DONE
    assert result.accepted == 10000


def test_invalid_flag_values_raise():
    with pytest.raises(ValueError):
        orbital_viewer.build_config(orbital_viewer.parse_args(["--max-prob", "0"]))


def test_self_test(capsys):
    orbital_viewer.main(["--self-test", "--seed", "3"])
    assert "SELFTEST_OK orbitals=4" in capsys.readouterr().out


def test_export(tmp_path, capsys):
    path = tmp_path / "cloud.json"
    orbital_viewer.main(["--export", str(path), "--orbital", "2pz", "--points", "120", "--seed", "1"])
    points, header = load_points(path)
    assert points.shape == (120, 3)
    assert header["name"] == "2pz"
    assert "Saved 120 samples" in capsys.readouterr().out


def test_orbital_outside_variant_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        orbital_viewer.main(["--variant", "single", "--orbital", "2px", "--export", str(tmp_path / "x.json")])
