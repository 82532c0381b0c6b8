"""Sequence generator — seeded stimulus streams with controlled matches.

A session is built column by column (one list per modality) in a draft
owned by `generate_sequence`; the caller only ever receives the finished
tuple of frozen `Stimulus` values. Steps, in order:

1. draw the match floor (5..8) every active modality should reach
2. fill positions, letters and colors at random, damping immediate
   position repeats
3. break up runs of three consecutive matches ("triplets")
4. inject matches until each active modality reaches the floor
5. break up any triplets the injection created

Every random draw goes through one stream, in a fixed order, so the same
seed and parameters reproduce the web game's sequence exactly. Both repair
steps are bounded and best-effort: residual triplets or a short match count
are accepted rather than looping.
"""

import logging
from collections.abc import Sequence

from nback.constants import CLASSIC_PALETTE
from nback.matches import match_indices
from nback.models import GRID_CELLS, GameMode, Modality, Stimulus
from nback.prng import RandomSource, pick, random_source

logger = logging.getLogger(__name__)

TRIPLET_PASSES = 5
INJECT_ATTEMPTS = 100
REPEAT_KEEP_CHANCE = 0.3  # immediate position repeats survive ~30% of draws
MIN_MATCHES_BASE = 5
MIN_MATCHES_SPREAD = 4


def count_triplets(matches: Sequence[int]) -> int:
    """Number of (overlapping) three-in-a-row windows in a match list."""
    return sum(
        1 for i in range(len(matches) - 2)
        if matches[i + 1] == matches[i] + 1 and matches[i + 2] == matches[i + 1] + 1
    )


def _redraw(values: list, idx: int, n: int, pool: Sequence, rand: RandomSource) -> None:
    """Replace values[idx] with a pool value differing from itself and idx - n."""
    excluded = (values[idx], values[idx - n])
    if all(v in excluded for v in pool):
        return  # pool too small to break the run
    new = pick(rand, pool)
    while new in excluded:
        new = pick(rand, pool)
    values[idx] = new


def prevent_triplets(values: Sequence, n: int, pool: Sequence,
                     rand: RandomSource) -> list:
    """Return a copy of one modality column with match triplets broken up.

    Each pass rescans the matches and redraws the middle step of every
    three-in-a-row window found in that scan. Stops when a pass finds
    nothing or after TRIPLET_PASSES passes.
    """
    values = list(values)
    fixed = False
    passes = 0
    while not fixed and passes < TRIPLET_PASSES:
        fixed = True
        matches = match_indices(values, n)
        for i in range(len(matches) - 2):
            a, b, c = matches[i], matches[i + 1], matches[i + 2]
            if b == a + 1 and c == b + 1:
                fixed = False
                _redraw(values, b, n, pool, rand)
        passes += 1
    if not fixed:
        logger.debug("triplet repair gave up after %d passes", passes)
    return values


def _forms_triplet(matches: set[int], i: int) -> bool:
    """Would turning step i into a match complete a run of three?"""
    before = i - 1 in matches
    after = i + 1 in matches
    return ((before and i - 2 in matches)
            or (before and after)
            or (after and i + 2 in matches))


def inject_matches(values: Sequence, n: int, min_matches: int,
                   rand: RandomSource) -> list:
    """Return a copy of one modality column with at least `min_matches` matches.

    Copies the value from n steps back onto randomly chosen non-matching
    steps whose conversion would not create a triplet. Stops early when no
    safe step is left or after INJECT_ATTEMPTS injections.
    """
    values = list(values)
    matches = set(match_indices(values, n))
    attempts = 0
    while attempts < INJECT_ATTEMPTS and len(matches) < min_matches:
        available = [
            i for i in range(n, len(values))
            if i not in matches and not _forms_triplet(matches, i)
        ]
        if not available:
            logger.debug("no safe injection point left (%d/%d matches)",
                         len(matches), min_matches)
            break
        i = pick(rand, available)
        values[i] = values[i - n]
        matches = set(match_indices(values, n))
        attempts += 1
    return values


def _base_fill(length: int, pools: dict[Modality, Sequence],
               rand: RandomSource) -> dict[Modality, list]:
    columns: dict[Modality, list] = {m: [] for m in Modality}
    last_position = -1
    for _ in range(length):
        position = pick(rand, pools[Modality.POSITION])
        while position == last_position and rand() > REPEAT_KEEP_CHANCE:
            position = pick(rand, pools[Modality.POSITION])
        last_position = position
        columns[Modality.POSITION].append(position)
        columns[Modality.SOUND].append(pick(rand, pools[Modality.SOUND]))
        columns[Modality.COLOR].append(pick(rand, pools[Modality.COLOR]))
    return columns


def _repair_all(columns: dict[Modality, list], n: int, mode: GameMode,
                pools: dict[Modality, Sequence], rand: RandomSource) -> None:
    for modality in mode.modalities:
        columns[modality] = prevent_triplets(columns[modality], n, pools[modality], rand)


def generate_sequence(
    level: int,
    mode: GameMode | str,
    length: int,
    alphabet: Sequence[str],
    seed: int | None = None,
    palette: Sequence[str] = CLASSIC_PALETTE,
) -> tuple[Stimulus, ...]:
    """Build a session's stimulus sequence.

    With a seed, the result is identical for identical arguments (and
    matches sequences shared from the web game). Without one, a fresh
    OS-seeded stream is used.
    """
    mode = GameMode.parse(mode)
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    if length < 0:
        raise ValueError(f"length must be >= 0, got {length}")
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    if not palette:
        raise ValueError("palette must not be empty")

    rand = random_source(seed)
    pools: dict[Modality, Sequence] = {
        Modality.POSITION: tuple(range(GRID_CELLS)),
        Modality.SOUND: tuple(alphabet),
        Modality.COLOR: tuple(palette),
    }

    min_matches = int(rand() * MIN_MATCHES_SPREAD) + MIN_MATCHES_BASE
    columns = _base_fill(length, pools, rand)
    _repair_all(columns, level, mode, pools, rand)
    for modality in mode.modalities:
        columns[modality] = inject_matches(columns[modality], level, min_matches, rand)
    _repair_all(columns, level, mode, pools, rand)

    logger.debug(
        "generated %d steps (level=%d mode=%s seed=%s floor=%d): %s",
        length, level, mode.value, seed, min_matches,
        ", ".join(f"{m.value}={len(match_indices(columns[m], level))}"
                  for m in mode.modalities),
    )
    return tuple(
        Stimulus(position=p, sound=s, color=c)
        for p, s, c in zip(columns[Modality.POSITION],
                           columns[Modality.SOUND],
                           columns[Modality.COLOR])
    )
