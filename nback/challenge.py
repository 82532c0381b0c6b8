"""Challenge links and seeds.

A challenge is just a seed plus session parameters carried in a URL query
string; each player regenerates the same sequence locally from it.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, datetime
from urllib.parse import parse_qs, urlencode, urlsplit

from nback.models import GameMode, Speed

CHALLENGE_SEED_RANGE = 10_000_000


@dataclass(frozen=True)
class ChallengeParams:
    seed: int
    level: int = 1
    mode: GameMode = GameMode.POSITION
    speed: Speed = Speed.NORMAL
    score: int = 0  # creator's percentage, display only


def daily_seed(day: date | None = None) -> int:
    """Local midnight of `day` in epoch milliseconds; everyone shares it that day."""
    day = day or date.today()
    return int(datetime.combine(day, datetime.min.time()).timestamp()) * 1000


def new_challenge_seed() -> int:
    return random.randrange(CHALLENGE_SEED_RANGE)


def build_challenge_url(base_url: str, params: ChallengeParams) -> str:
    """Shareable link; any existing query string on base_url is dropped."""
    query = urlencode({
        "type": "challenge",
        "seed": params.seed,
        "level": params.level,
        "mode": params.mode.value,
        "speed": params.speed.value,
        "score": params.score,
    })
    return f"{base_url.split('?')[0]}?{query}"


def _int(raw: dict, key: str, default: int) -> int:
    try:
        return int(raw[key][0])
    except (KeyError, IndexError, ValueError):
        return default


def parse_challenge(url: str) -> ChallengeParams | None:
    """Read challenge parameters from a link or bare query string.

    Returns None unless the link is a challenge with a non-zero seed.
    Unknown modes and speeds fall back to position / normal.
    """
    query = urlsplit(url).query if "?" in url or "://" in url else url
    raw = parse_qs(query)
    if raw.get("type", [""])[0] != "challenge":
        return None
    seed = _int(raw, "seed", 0)
    if not seed:
        return None

    try:
        mode = GameMode.parse(raw.get("mode", ["position"])[0])
    except ValueError:
        mode = GameMode.POSITION
    try:
        speed = Speed.parse(raw.get("speed", ["normal"])[0])
    except ValueError:
        speed = Speed.NORMAL

    return ChallengeParams(
        seed=seed,
        level=max(1, _int(raw, "level", 1)),
        mode=mode,
        speed=speed,
        score=_int(raw, "score", 0),
    )
