"""Persistent player stats and session history.

Stores XP, daily streak, best N and the newest sessions in
~/.streamdeck-nback/stats.json.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass
from datetime import date, timedelta

from nback.models import SessionRecord
from nback.scoring import best_level

logger = logging.getLogger(__name__)

DEFAULT_STATS_FILE = os.path.expanduser("~/.streamdeck-nback/stats.json")
HISTORY_LIMIT = 100
_lock = threading.Lock()


@dataclass
class UserStats:
    xp: int = 0
    streak: int = 0
    last_played: str | None = None  # ISO date of the last finished session
    best_n: int = 1


def _load_all(path: str) -> dict:
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        logger.warning("ignoring unreadable stats file %s", path)
        return {}


def _write_all(path: str, data: dict) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def next_streak(stats: UserStats, today: date) -> int:
    """Streak after finishing a session today."""
    if stats.last_played is None:
        return 1
    last = date.fromisoformat(stats.last_played)
    if last == today:
        return stats.streak
    if last == today - timedelta(days=1):
        return stats.streak + 1
    return 1


def load_stats(path: str = DEFAULT_STATS_FILE, today: date | None = None) -> UserStats:
    """Load stats; a streak not continued since yesterday reads as 0."""
    today = today or date.today()
    stats = UserStats(**(_load_all(path).get("stats") or {}))
    if stats.last_played and date.fromisoformat(stats.last_played) < today - timedelta(days=1):
        stats.streak = 0
    return stats


def load_history(path: str = DEFAULT_STATS_FILE) -> list[SessionRecord]:
    """Finished sessions, newest first."""
    return [SessionRecord.from_dict(r) for r in _load_all(path).get("history") or []]


def record_session(record: SessionRecord, path: str = DEFAULT_STATS_FILE,
                   today: date | None = None,
                   history_limit: int = HISTORY_LIMIT) -> UserStats:
    """Add a finished session to history and fold it into the stats."""
    today = today or date.today()
    with _lock:
        data = _load_all(path)
        stats = UserStats(**(data.get("stats") or {}))
        stats = UserStats(
            xp=stats.xp + record.xp_earned,
            streak=next_streak(stats, today),
            last_played=today.isoformat(),
            best_n=best_level(stats.best_n, record.level, record.score),
        )
        history = [record.to_dict()] + list(data.get("history") or [])
        data["history"] = history[:history_limit]
        data["stats"] = asdict(stats)
        _write_all(path, data)
    return stats


def reset(path: str = DEFAULT_STATS_FILE) -> None:
    """Forget all progress."""
    with _lock:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
