"""Tests for persistent stats and history."""

import json
from datetime import date

from nback import stats
from nback.models import GameMode, ScoreDetails, SessionRecord, Speed


def make_record(score=80, level=2, xp=336, **kwargs):
    return SessionRecord(
        id=kwargs.pop("id", "abc"),
        date="2025-03-14T10:00:00",
        level=level,
        mode=GameMode.DUAL,
        speed=Speed.NORMAL,
        score=score,
        xp_earned=xp,
        details=ScoreDetails(),
        **kwargs,
    )


def test_load_stats_defaults_when_missing(tmp_path):
    player = stats.load_stats(str(tmp_path / "stats.json"))
    assert player == stats.UserStats()
    assert stats.load_history(str(tmp_path / "stats.json")) == []


def test_load_stats_ignores_corrupt_file(tmp_path):
    path = tmp_path / "stats.json"
    path.write_text("{not json")
    assert stats.load_stats(str(path)).xp == 0


def test_record_session_accumulates(tmp_path):
    path = str(tmp_path / "nested" / "stats.json")
    day = date(2025, 3, 14)
    player = stats.record_session(make_record(), path, today=day)
    assert player.xp == 336
    assert player.streak == 1
    assert player.last_played == "2025-03-14"
    assert player.best_n == 1  # 80% does not count toward best N

    player = stats.record_session(make_record(score=90, xp=100, id="def"), path, today=day)
    assert player.xp == 436
    assert player.streak == 1  # same day
    assert player.best_n == 2

    history = stats.load_history(path)
    assert [r.id for r in history] == ["def", "abc"]
    assert history[0].mode is GameMode.DUAL
    assert history[0].details == ScoreDetails()


def test_streak_continues_and_breaks(tmp_path):
    path = str(tmp_path / "stats.json")
    stats.record_session(make_record(), path, today=date(2025, 3, 14))
    player = stats.record_session(make_record(), path, today=date(2025, 3, 15))
    assert player.streak == 2
    player = stats.record_session(make_record(), path, today=date(2025, 3, 18))
    assert player.streak == 1


def test_load_stats_resets_stale_streak(tmp_path):
    path = str(tmp_path / "stats.json")
    stats.record_session(make_record(), path, today=date(2025, 3, 14))
    stats.record_session(make_record(), path, today=date(2025, 3, 15))
    assert stats.load_stats(path, today=date(2025, 3, 16)).streak == 2
    assert stats.load_stats(path, today=date(2025, 3, 17)).streak == 0


def test_history_is_capped(tmp_path):
    path = str(tmp_path / "stats.json")
    for i in range(5):
        stats.record_session(make_record(id=str(i)), path,
                             today=date(2025, 3, 14), history_limit=3)
    with open(path) as f:
        raw = json.load(f)
    assert [r["id"] for r in raw["history"]] == ["4", "3", "2"]


def test_reset_removes_progress(tmp_path):
    path = str(tmp_path / "stats.json")
    stats.record_session(make_record(), path, today=date(2025, 3, 14))
    stats.reset(path)
    assert stats.load_stats(path).xp == 0
    stats.reset(path)  # already gone


def test_next_streak():
    today = date(2025, 3, 14)
    assert stats.next_streak(stats.UserStats(), today) == 1
    assert stats.next_streak(stats.UserStats(streak=4, last_played="2025-03-13"), today) == 5
    assert stats.next_streak(stats.UserStats(streak=4, last_played="2025-03-14"), today) == 4
    assert stats.next_streak(stats.UserStats(streak=4, last_played="2025-03-01"), today) == 1
