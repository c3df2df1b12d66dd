import math
import random

import pytest

from quantum.amplitudes import normalize, pick_collapse_index, probability


def test_normalize_scales_to_unit_norm():
    assert normalize([3.0, 4.0]) == pytest.approx([0.6, 0.8])


def test_normalize_keeps_signs_unless_asked_for_magnitudes():
    assert normalize([-3.0, 4.0]) == pytest.approx([-0.6, 0.8])
    assert normalize([-3.0, 4.0], signed=False) == pytest.approx([0.6, 0.8])


def test_normalize_vanished_vector_falls_back_to_uniform():
    out = normalize([0.0, 0.0, 0.0, 0.0])
    assert out == pytest.approx([0.5, 0.5, 0.5, 0.5])
    assert not any(math.isnan(a) for a in out)
    assert normalize([]) == []


def test_probability_is_square():
    assert probability(-0.5) == pytest.approx(0.25)


def test_pick_collapse_index_walks_cumulative(fixed_draw):
    amps = [1 / math.sqrt(2), -1 / math.sqrt(2)]
    assert pick_collapse_index(amps, fixed_draw(0.1)) == 0
    assert pick_collapse_index(amps, fixed_draw(0.49)) == 0
    assert pick_collapse_index(amps, fixed_draw(0.51)) == 1
    assert pick_collapse_index(amps, fixed_draw(0.99)) == 1


def test_pick_collapse_index_underflow_falls_back_to_first(fixed_draw):
    # cumulative sum only reaches 0.02
    assert pick_collapse_index([0.1, 0.1], fixed_draw(0.9)) == 0


def test_pick_collapse_index_follows_probabilities():
    rng = random.Random(42)
    amps = [math.sqrt(0.8), math.sqrt(0.2)]
    hits = sum(1 for _ in range(4000) if pick_collapse_index(amps, rng) == 0)
    assert 0.75 < hits / 4000 < 0.85
