"""Match finder — which steps repeat the value N steps back."""

from collections.abc import Sequence

from nback.models import MatchSets, Modality, Stimulus


def match_indices(values: Sequence, n: int) -> tuple[int, ...]:
    """Indices i >= n where values[i] == values[i - n]."""
    return tuple(i for i in range(n, len(values)) if values[i] == values[i - n])


def find_matches(sequence: Sequence[Stimulus], n: int) -> MatchSets:
    """Compute match indices for all three modalities.

    All modalities are computed regardless of game mode. Empty when
    len(sequence) <= n.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    found = {m: match_indices([s.value(m) for s in sequence], n) for m in Modality}
    return MatchSets(
        position=found[Modality.POSITION],
        sound=found[Modality.SOUND],
        color=found[Modality.COLOR],
    )
