"""Tests for the N-back match finder."""

import pytest

from nback.matches import find_matches, match_indices
from nback.models import Modality, Stimulus


def make_sequence(positions, sounds=None, colors=None):
    sounds = sounds or ["A"] * len(positions)
    colors = colors or ["#000000"] * len(positions)
    return [Stimulus(p, s, c) for p, s, c in zip(positions, sounds, colors)]


def test_alternating_positions_two_back():
    seq = make_sequence([0, 1, 0, 1, 0, 1])
    matches = find_matches(seq, 2)
    assert matches.position == (2, 3, 4, 5)


def test_all_modalities_computed_independently():
    seq = make_sequence(
        [4, 4, 3, 3],
        sounds=["A", "E", "E", "I"],
        colors=["#111111", "#111111", "#222222", "#111111"],
    )
    matches = find_matches(seq, 1)
    assert matches.position == (1, 3)
    assert matches.sound == (2,)
    assert matches.color == (1,)
    assert matches.for_modality(Modality.SOUND) == (2,)


def test_sequence_not_longer_than_n_has_no_matches():
    seq = make_sequence([1, 1, 1])
    matches = find_matches(seq, 3)
    assert matches.position == ()
    assert matches.sound == ()
    assert matches.color == ()
    assert find_matches([], 1).position == ()


def test_match_indices_strictly_increasing():
    values = [5, 5, 5, 5, 2, 5]
    assert match_indices(values, 1) == (1, 2, 3)
    assert match_indices(values, 2) == (2, 3, 5)


def test_find_matches_rejects_zero_lag():
    with pytest.raises(ValueError):
        find_matches(make_sequence([0, 0]), 0)
