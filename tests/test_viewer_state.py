import numpy as np
import pytest

from common_quantum import ORBITALS
from orbital_sampler import SampleStatus, SamplerConfig
from viewer_state import REGENERATION_INTERVAL, ViewerState


@pytest.fixture
def state():
    return ViewerState(config=SamplerConfig(num_points=200))


def test_first_frame_generates(state):
    assert state.due(0.0)
    result = state.maybe_regenerate(0.0, rng=1)
    assert result is not None
    assert state.points.shape == (200, 3)
    assert state.status is SampleStatus.DONE
    assert state.last_generation_time == 0.0


def test_regeneration_waits_for_interval(state):
    state.maybe_regenerate(1.0, rng=1)
    cached = state.points
    assert state.maybe_regenerate(1.0 + REGENERATION_INTERVAL, rng=2) is None
    assert state.points is cached
    assert state.maybe_regenerate(1.0 + REGENERATION_INTERVAL + 0.01, rng=2) is not None
    assert state.points is not cached


def test_regeneration_replaces_the_cloud_without_touching_the_old_one(state):
    state.maybe_regenerate(0.0, rng=1)
    old = state.points
    snapshot = old.copy()
    state.maybe_regenerate(5.0, rng=2)
    assert np.array_equal(old, snapshot)
    assert not np.array_equal(state.points, snapshot)


def test_select_forces_regeneration(state):
    state.maybe_regenerate(10.0, rng=1)
    assert not state.due(10.1)
    assert state.select(3)
    assert state.orbital.name == "2pz"
    assert state.due(10.1)


def test_select_out_of_range_is_ignored(state):
    assert not state.select(4)
    assert not state.select(-1)
    assert state.current == 0


def test_scaled_points_apply_orbital_scale(state):
    state.maybe_regenerate(0.0, rng=3)
    assert np.allclose(state.scaled_points(), state.points * ORBITALS[0].scale)


def test_show_freezes_until_next_selection(state):
    cloud = np.arange(12, dtype=float).reshape(4, 3)
    state.show(cloud)
    assert not state.due(100.0)
    assert state.maybe_regenerate(100.0) is None
    assert np.array_equal(state.points, cloud)
    state.select(1)
    assert state.due(100.0)


def test_invalid_construction():
    with pytest.raises(ValueError):
        ViewerState(orbitals=())
    with pytest.raises(ValueError):
        ViewerState(interval=-1.0)


@pytest.mark.parametrize("index", [-1, 4, 9])
def test_out_of_range_initial_index_raises(index):
    with pytest.raises(ValueError):
        ViewerState(current=index)


def test_initial_index_selects_orbital():
    assert ViewerState(current=3).orbital.name == "2pz"


@pytest.mark.parametrize("index", range(len(ORBITALS)))
def test_default_settings_regenerate_full_clouds(index):
    state = ViewerState(current=index)
    result = state.maybe_regenerate(0.0, rng=5)
    assert result.status is SampleStatus.DONE
    assert state.points.shape == (10000, 3)
