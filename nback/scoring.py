"""Score engine — per-modality hits, misses and false alarms, XP and ranks."""

import math
from collections.abc import Iterable, Mapping

from nback.constants import (
    MAX_LEVEL,
    MODE_XP_MULTIPLIERS,
    RANKS,
    SPEED_XP_MULTIPLIERS,
)
from nback.models import (
    GameMode,
    MatchSets,
    Modality,
    ModalityScore,
    OverallScore,
    ScoreDetails,
    Speed,
)

LEVEL_UP_PERCENTAGE = 90
LEVEL_DOWN_PERCENTAGE = 60
BEST_N_PERCENTAGE = 85


def _round_half_up(x: float) -> int:
    # the web game rounds .5 up, Python's round() would go to even
    return math.floor(x + 0.5)


def score_modality(inputs: Iterable[int], matches: Iterable[int],
                   limit_index: int) -> ModalityScore:
    """Score one modality over the steps actually shown (index < limit_index)."""
    if limit_index < 0:
        raise ValueError(f"limit_index must be >= 0, got {limit_index}")
    relevant_matches = {m for m in matches if m < limit_index}
    relevant_inputs = [i for i in dict.fromkeys(inputs) if i < limit_index]
    correct = sum(1 for i in relevant_inputs if i in relevant_matches)
    return ModalityScore(
        correct=correct,
        missed=len(relevant_matches) - correct,
        false_alarms=len(relevant_inputs) - correct,
        total_possible=len(relevant_matches),
    )


def score_session(mode: GameMode | str,
                  inputs: Mapping[Modality, Iterable[int]],
                  matches: MatchSets,
                  limit_index: int) -> ScoreDetails:
    """Score a whole session.

    Every modality is scored, but only the ones the mode tracks count
    toward the overall totals. The percentage is correct / possible,
    rounded half-up, and 0 when nothing was possible.
    """
    mode = GameMode.parse(mode)
    per_modality = {
        m: score_modality(inputs.get(m, ()), matches.for_modality(m), limit_index)
        for m in Modality
    }
    counted = [per_modality[m] for m in mode.modalities]

    total_correct = sum(s.correct for s in counted)
    total_possible = sum(s.total_possible for s in counted)
    raw = total_correct / total_possible * 100 if total_possible > 0 else 0
    overall = OverallScore(
        percentage=max(0, _round_half_up(raw)),
        total_correct=total_correct,
        total_missed=sum(s.missed for s in counted),
        total_false_alarms=sum(s.false_alarms for s in counted),
        total_possible=total_possible,
    )
    return ScoreDetails(
        position=per_modality[Modality.POSITION],
        sound=per_modality[Modality.SOUND],
        color=per_modality[Modality.COLOR],
        overall=overall,
    )


def xp_for_session(percentage: int, mode: GameMode | str, level: int,
                   speed: Speed | str = Speed.NORMAL) -> int:
    """XP earned: twice the percentage, scaled by mode, speed and level."""
    mode = GameMode.parse(mode)
    speed = Speed.parse(speed)
    base = percentage * 2
    level_mult = 1 + level * 0.2
    return _round_half_up(
        base * MODE_XP_MULTIPLIERS[mode] * SPEED_XP_MULTIPLIERS[speed] * level_mult
    )


def rank_for_xp(xp: int, language: str = "en") -> str:
    """Highest rank whose XP threshold has been reached."""
    ranks = RANKS.get(language, RANKS["en"])
    name = ranks[0][1]
    for threshold, rank_name in ranks:
        if xp >= threshold:
            name = rank_name
    return name


def next_level(level: int, percentage: int) -> int:
    """Adaptive level for the next regular session."""
    if percentage >= LEVEL_UP_PERCENTAGE and level < MAX_LEVEL:
        return level + 1
    if percentage < LEVEL_DOWN_PERCENTAGE and level > 1:
        return level - 1
    return level


def best_level(best_n: int, level: int, percentage: int) -> int:
    """Best N reached so far; a level counts once scored above 85%."""
    if percentage > BEST_N_PERCENTAGE:
        return max(best_n, level)
    return best_n
