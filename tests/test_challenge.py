"""Tests for challenge links and seeds."""

from datetime import date, datetime

from nback.challenge import (
    CHALLENGE_SEED_RANGE,
    ChallengeParams,
    build_challenge_url,
    daily_seed,
    new_challenge_seed,
    parse_challenge,
)
from nback.models import GameMode, Speed


def test_build_and_parse_challenge_link():
    params = ChallengeParams(seed=4242, level=3, mode=GameMode.TRIPLE,
                             speed=Speed.FAST, score=87)
    url = build_challenge_url("https://nback.example/play?lang=tr", params)
    assert url.startswith("https://nback.example/play?type=challenge&seed=4242")
    assert "lang=tr" not in url
    assert parse_challenge(url) == params


def test_parse_bare_query_string():
    parsed = parse_challenge("type=challenge&seed=77&level=2&mode=dual&speed=slow&score=50")
    assert parsed == ChallengeParams(seed=77, level=2, mode=GameMode.DUAL,
                                     speed=Speed.SLOW, score=50)


def test_parse_applies_defaults():
    parsed = parse_challenge("https://x.example/?type=challenge&seed=9")
    assert parsed.level == 1
    assert parsed.mode is GameMode.POSITION
    assert parsed.speed is Speed.NORMAL
    assert parsed.score == 0


def test_parse_falls_back_on_unknown_values():
    parsed = parse_challenge("?type=challenge&seed=9&mode=quad&speed=warp&level=x")
    assert parsed.mode is GameMode.POSITION
    assert parsed.speed is Speed.NORMAL
    assert parsed.level == 1


def test_parse_rejects_non_challenges():
    assert parse_challenge("https://x.example/?seed=9") is None
    assert parse_challenge("https://x.example/?type=challenge&seed=0") is None
    assert parse_challenge("https://x.example/?type=challenge") is None
    assert parse_challenge("https://x.example/") is None


def test_daily_seed_is_local_midnight_in_ms():
    day = date(2025, 3, 14)
    expected = int(datetime(2025, 3, 14).timestamp()) * 1000
    assert daily_seed(day) == expected
    assert daily_seed(day) == daily_seed(day)
    assert daily_seed(date(2025, 3, 15)) > daily_seed(day)


def test_new_challenge_seed_in_range():
    for _ in range(50):
        assert 0 <= new_challenge_seed() < CHALLENGE_SEED_RANGE
