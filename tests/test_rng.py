import numpy as np
import pytest

from core.rng import make_rng

def test_streams_are_deterministic():
    a = make_rng(42, 3, 7).random(1000)
    b = make_rng(42, 3, 7).random(1000)
    np.testing.assert_array_equal(a, b)

@pytest.mark.parametrize("other", [(43, 3, 7), (42, 4, 7), (42, 3, 8)])
def test_streams_differ_per_seed_frame_and_tile(other):
    a = make_rng(42, 3, 7).random(1000)
    b = make_rng(*other).random(1000)
    assert not np.array_equal(a, b)

def test_neighbouring_tile_streams_are_uncorrelated():
    a = make_rng(1, 0, 0).random(20000)
    b = make_rng(1, 0, 1).random(20000)
    assert abs(np.corrcoef(a, b)[0, 1]) < 0.03

def test_uniform_mean():
    values = make_rng(0, 0, 0).random(50000)
    assert values.min() >= 0.0
    assert values.max() < 1.0
    assert values.mean() == pytest.approx(0.5, abs=0.01)

def test_negative_inputs_raise():
    with pytest.raises(ValueError):
        make_rng(-1, 0, 0)
