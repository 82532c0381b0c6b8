"""Core data types — stimuli, game modes, match sets, scores."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class Modality(str, Enum):
    POSITION = "position"
    SOUND = "sound"
    COLOR = "color"


class GameMode(str, Enum):
    POSITION = "position"
    DUAL = "dual"
    TRIPLE = "triple"

    @property
    def modalities(self) -> tuple[Modality, ...]:
        """Tracked modalities, always in position -> sound -> color order."""
        if self is GameMode.TRIPLE:
            return (Modality.POSITION, Modality.SOUND, Modality.COLOR)
        if self is GameMode.DUAL:
            return (Modality.POSITION, Modality.SOUND)
        return (Modality.POSITION,)

    @classmethod
    def parse(cls, value: str | GameMode) -> GameMode:
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown game mode: {value!r}") from None


class Speed(str, Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"

    @classmethod
    def parse(cls, value: str | Speed) -> Speed:
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown speed: {value!r}") from None


GRID_CELLS = 9  # 3x3 position grid


@dataclass(frozen=True)
class Stimulus:
    position: int  # 0..8, row-major on the 3x3 grid
    sound: str
    color: str

    def value(self, modality: Modality):
        if modality is Modality.POSITION:
            return self.position
        if modality is Modality.SOUND:
            return self.sound
        if modality is Modality.COLOR:
            return self.color
        raise ValueError(f"unknown modality: {modality!r}")


@dataclass(frozen=True)
class MatchSets:
    """Strictly increasing match indices per modality."""

    position: tuple[int, ...] = ()
    sound: tuple[int, ...] = ()
    color: tuple[int, ...] = ()

    def for_modality(self, modality: Modality) -> tuple[int, ...]:
        if modality is Modality.POSITION:
            return self.position
        if modality is Modality.SOUND:
            return self.sound
        if modality is Modality.COLOR:
            return self.color
        raise ValueError(f"unknown modality: {modality!r}")


@dataclass(frozen=True)
class ModalityScore:
    correct: int = 0
    missed: int = 0
    false_alarms: int = 0
    total_possible: int = 0


@dataclass(frozen=True)
class OverallScore:
    percentage: int = 0
    total_correct: int = 0
    total_missed: int = 0
    total_false_alarms: int = 0
    total_possible: int = 0


@dataclass(frozen=True)
class ScoreDetails:
    position: ModalityScore = field(default_factory=ModalityScore)
    sound: ModalityScore = field(default_factory=ModalityScore)
    color: ModalityScore = field(default_factory=ModalityScore)
    overall: OverallScore = field(default_factory=OverallScore)

    def for_modality(self, modality: Modality) -> ModalityScore:
        if modality is Modality.POSITION:
            return self.position
        if modality is Modality.SOUND:
            return self.sound
        if modality is Modality.COLOR:
            return self.color
        raise ValueError(f"unknown modality: {modality!r}")

    @classmethod
    def from_dict(cls, raw: dict) -> ScoreDetails:
        return cls(
            position=ModalityScore(**raw.get("position", {})),
            sound=ModalityScore(**raw.get("sound", {})),
            color=ModalityScore(**raw.get("color", {})),
            overall=OverallScore(**raw.get("overall", {})),
        )


@dataclass
class SessionRecord:
    """One finished session, as kept in the history file."""

    id: str
    date: str  # ISO timestamp
    level: int
    mode: GameMode
    speed: Speed
    score: int  # overall percentage
    xp_earned: int
    details: ScoreDetails
    reaction_times: list[int] = field(default_factory=list)  # ms, correct responses
    missed_positions: list[int] = field(default_factory=list)
    is_daily: bool = False
    seed: int | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mode"] = self.mode.value
        data["speed"] = self.speed.value
        return data

    @classmethod
    def from_dict(cls, raw: dict) -> SessionRecord:
        data = dict(raw)
        data["mode"] = GameMode.parse(data["mode"])
        data["speed"] = Speed.parse(data.get("speed", "normal"))
        data["details"] = ScoreDetails.from_dict(data.get("details") or {})
        return cls(**data)
