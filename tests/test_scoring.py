"""Tests for the score engine, XP and level adaptation."""

import pytest

from nback.models import GameMode, MatchSets, Modality, Speed
from nback.scoring import (
    best_level,
    next_level,
    rank_for_xp,
    score_modality,
    score_session,
    xp_for_session,
)


def test_score_modality_example():
    score = score_modality([2, 5, 9], [2, 5, 7], limit_index=10)
    assert score.correct == 2
    assert score.false_alarms == 1
    assert score.missed == 1
    assert score.total_possible == 3


def test_score_modality_without_inputs():
    score = score_modality([], [3, 8, 15], limit_index=10)
    assert score.correct == 0
    assert score.false_alarms == 0
    assert score.missed == 2
    assert score.total_possible == 2


def test_score_modality_ignores_steps_not_shown():
    score = score_modality([4, 29, 25], [4, 29], limit_index=20)
    assert score.total_possible == 1
    assert score.correct == 1
    assert score.false_alarms == 0
    assert score.missed == 0


def test_score_modality_counts_repeated_press_once():
    score = score_modality([3, 3, 4, 4], [3], limit_index=10)
    assert score.correct == 1
    assert score.false_alarms == 1


def test_score_modality_rejects_negative_limit():
    with pytest.raises(ValueError):
        score_modality([], [], limit_index=-1)


def test_score_session_position_mode_ignores_other_modalities():
    matches = MatchSets(position=(2, 4), sound=(3,), color=(5,))
    inputs = {Modality.POSITION: [2], Modality.SOUND: [1, 3], Modality.COLOR: [5]}
    details = score_session("position", inputs, matches, limit_index=10)
    assert details.overall.total_correct == 1
    assert details.overall.total_missed == 1
    assert details.overall.total_false_alarms == 0
    assert details.overall.percentage == 50
    # per-modality results are still reported
    assert details.sound.correct == 1
    assert details.sound.false_alarms == 1


def test_score_session_triple_sums_all_modalities():
    matches = MatchSets(position=(2, 4), sound=(3, 6), color=(5, 7))
    inputs = {
        Modality.POSITION: [2, 4],
        Modality.SOUND: [3],
        Modality.COLOR: [1, 7],
    }
    details = score_session(GameMode.TRIPLE, inputs, matches, limit_index=8)
    assert details.overall.total_correct == 4
    assert details.overall.total_possible == 6
    assert details.overall.total_missed == 2
    assert details.overall.total_false_alarms == 1
    assert details.overall.percentage == 67


def test_score_session_dual_excludes_color():
    matches = MatchSets(position=(2,), sound=(3,), color=(4, 5))
    inputs = {Modality.POSITION: [2], Modality.SOUND: [3]}
    details = score_session("dual", inputs, matches, limit_index=6)
    assert details.overall.total_possible == 2
    assert details.overall.percentage == 100
    assert details.color.missed == 2


def test_percentage_is_zero_when_nothing_possible():
    details = score_session("dual", {Modality.POSITION: [0, 1]}, MatchSets(), limit_index=5)
    assert details.overall.percentage == 0
    assert details.overall.total_false_alarms == 2


def test_percentage_rounds_half_up():
    # 1/8 = 12.5% -> 13, as the web game shows it
    matches = MatchSets(position=tuple(range(1, 9)))
    details = score_session("position", {Modality.POSITION: [1]}, matches, limit_index=10)
    assert details.overall.percentage == 13


def test_early_stop_excludes_later_matches():
    matches = MatchSets(position=(5, 12, 29))
    inputs = {Modality.POSITION: [5, 12, 29]}
    details = score_session("position", inputs, matches, limit_index=20)
    assert details.position.total_possible == 2
    assert details.overall.percentage == 100
    assert details.overall.total_false_alarms == 0


def test_xp_for_session():
    # 80% * 2 = 160 base, dual 1.5, normal 1.0, level 2 -> 1.4
    assert xp_for_session(80, "dual", 2, "normal") == 336
    assert xp_for_session(100, GameMode.TRIPLE, 3, Speed.FAST) == 915
    assert xp_for_session(95, "dual", 4, "slow") == 359
    assert xp_for_session(0, "triple", 5, "slow") == 0


def test_xp_rejects_unknown_speed():
    with pytest.raises(ValueError):
        xp_for_session(50, "dual", 2, "ludicrous")


def test_rank_for_xp():
    assert rank_for_xp(0) == "Novice"
    assert rank_for_xp(499) == "Novice"
    assert rank_for_xp(500) == "Focus Intern"
    assert rank_for_xp(12000) == "Neuro Grandmaster"
    assert rank_for_xp(1500, "tr") == "Zihin Mimarı"
    assert rank_for_xp(1500, "xx") == "Mind Architect"


def test_next_level():
    assert next_level(3, 90) == 4
    assert next_level(9, 100) == 9
    assert next_level(3, 59) == 2
    assert next_level(1, 10) == 1
    assert next_level(3, 75) == 3


def test_best_level():
    assert best_level(2, 4, 86) == 4
    assert best_level(2, 4, 85) == 2
    assert best_level(5, 3, 100) == 5
