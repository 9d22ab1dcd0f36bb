import math

import pytest

from pommikit.probability import new, new_with_seed


def test_length_mismatch_raises():
    with pytest.raises(ValueError, match="same len"):
        new(["a", "b"], [1.0])


def test_sum_above_one_raises():
    with pytest.raises(ValueError, match="Sum of weights"):
        new(["a", "b"], [0.7, 0.7])


def test_sum_within_tolerance_accepted():
    gen = new(["a", "b"], [0.5, 0.50005])
    assert len(gen) == 2


def test_sum_below_one_accepted():
    gen = new(["a", "b"], [0.1, 0.2])
    assert len(gen) == 2


def test_len_matches_values():
    values = ["a", "b", "c", "d"]
    gen = new(values, [0.25, 0.25, 0.25, 0.25])
    assert len(gen) == len(values)


def test_weights_are_cumulative_and_sorted():
    weights = [0.1, 0.2, 0.3, 0.4]
    gen = new(["a", "b", "c", "d"], weights)
    assert list(gen.weights) == sorted(gen.weights)
    assert math.isclose(gen.weights[-1], sum(weights))
    assert gen.values == ("a", "b", "c", "d")


def test_negative_weight_reorders_values():
    gen = new(["a", "b", "c"], [0.6, -0.2, 0.6])
    assert gen.values == ("b", "a", "c")
    assert list(gen.weights) == sorted(gen.weights)


def test_values_are_copied():
    values = ["a", "b"]
    gen = new(values, [0.5, 0.5])
    values.append("c")
    values[0] = "z"
    assert set(gen.values) == {"a", "b"}


def test_seed_is_kept():
    gen = new_with_seed(["a"], [1.0], 42)
    assert gen.seed == 42


def test_empty_is_allowed():
    gen = new([], [])
    assert len(gen) == 0