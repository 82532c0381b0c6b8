"""Session controller — steps through a sequence and records responses.

Owns everything a front end needs between "start" and "results": the
generated sequence, its match sets, the player's per-modality input
indices, reaction times and the marathon stop rule. Pacing (timers) stays
with the front end, which calls `next_stimulus()` once per tick and
`respond()` whenever a match key is pressed.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime

from nback.constants import CLASSIC_PALETTE, LETTERS_EN, sequence_length
from nback.matches import find_matches
from nback.models import (
    GameMode,
    Modality,
    SessionRecord,
    Speed,
    Stimulus,
)
from nback.scoring import score_session, xp_for_session
from nback.sequence import generate_sequence

logger = logging.getLogger(__name__)


class NBackSession:
    def __init__(
        self,
        level: int,
        mode: GameMode | str = GameMode.DUAL,
        speed: Speed | str = Speed.NORMAL,
        alphabet: Sequence[str] = LETTERS_EN,
        palette: Sequence[str] = CLASSIC_PALETTE,
        seed: int | None = None,
        practice: bool = False,
        marathon: bool = False,
        daily: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.level = level
        self.mode = GameMode.parse(mode)
        self.speed = Speed.parse(speed)
        self.seed = seed
        self.practice = practice
        self.marathon = marathon
        self.daily = daily
        self._clock = clock

        length = sequence_length(level, practice or marathon)
        self.sequence: tuple[Stimulus, ...] = generate_sequence(
            level, self.mode, length, alphabet, seed=seed, palette=palette,
        )
        self.matches = find_matches(self.sequence, level)
        self._match_lookup = {m: set(self.matches.for_modality(m)) for m in Modality}

        self.current_index = 0  # steps shown so far
        self.inputs: dict[Modality, list[int]] = {m: [] for m in Modality}
        self.reaction_times: list[int] = []
        self.combo = 0
        self.max_combo = 0
        self.result: SessionRecord | None = None
        self._shown_at: float | None = None

    @property
    def finished(self) -> bool:
        return self.result is not None

    def is_match(self, modality: Modality, index: int) -> bool:
        return index in self._match_lookup[modality]

    def _missed_last_step(self) -> bool:
        last = self.current_index - 1
        return any(
            self.is_match(m, last) and last not in self.inputs[m]
            for m in self.mode.modalities
        )

    def next_stimulus(self) -> Stimulus | None:
        """Show the next step, or finish and return None when the run is over."""
        if self.finished:
            return None
        if self.marathon and self.current_index >= self.level and self._missed_last_step():
            logger.debug("marathon ended on missed match at step %d", self.current_index - 1)
            self.finish()
            return None
        if self.current_index >= len(self.sequence):
            self.finish()
            return None

        stimulus = self.sequence[self.current_index]
        self._shown_at = self._clock()
        self.current_index += 1
        return stimulus

    def respond(self, modality: Modality) -> bool | None:
        """Register a match signal for the step currently shown.

        Returns True/False for a correct press or a false alarm, or None
        when the press is ignored (too early, inactive modality, repeated
        press, session over).
        """
        if self.finished or self.current_index < self.level:
            return None
        if modality not in self.mode.modalities:
            return None
        target = self.current_index - 1
        if target in self.inputs[modality]:
            return None

        self.inputs[modality].append(target)
        correct = self.is_match(modality, target)
        if correct:
            if self._shown_at is not None:
                self.reaction_times.append(int((self._clock() - self._shown_at) * 1000))
            self.combo += 1
            self.max_combo = max(self.max_combo, self.combo)
        else:
            self.combo = 0
            if self.marathon:
                logger.debug("marathon ended on false alarm at step %d", target)
                self.finish()
        return correct

    def finish(self) -> SessionRecord:
        """Score the steps shown so far. Safe to call more than once."""
        if self.result is not None:
            return self.result

        limit = self.current_index
        details = score_session(self.mode, self.inputs, self.matches, limit)
        percentage = details.overall.percentage
        position_inputs = set(self.inputs[Modality.POSITION])
        self.result = SessionRecord(
            id=uuid.uuid4().hex,
            date=datetime.now().isoformat(timespec="seconds"),
            level=self.level,
            mode=self.mode,
            speed=self.speed,
            score=percentage,
            xp_earned=xp_for_session(percentage, self.mode, self.level, self.speed),
            details=details,
            reaction_times=list(self.reaction_times),
            missed_positions=[
                self.sequence[i].position
                for i in self.matches.position
                if i < limit and i not in position_inputs
            ],
            is_daily=self.daily,
            seed=self.seed,
        )
        logger.debug("session finished at step %d/%d: %d%%",
                     limit, len(self.sequence), percentage)
        return self.result
