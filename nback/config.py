"""Config loader — YAML to dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from nback.constants import ALPHABETS, PALETTES
from nback.models import GameMode, Speed
from nback.stats import DEFAULT_STATS_FILE, HISTORY_LIMIT


@dataclass
class DeckConfig:
    brightness: int = 80


@dataclass
class GameConfig:
    level: int = 1
    mode: str = "dual"  # "position" | "dual" | "triple"
    speed: str = "normal"  # "slow" | "normal" | "fast"
    language: str = "en"  # "en" | "tr"
    palette: str = "classic"  # "classic" | "extended"
    practice: bool = False
    marathon: bool = False
    share_url: str = ""  # base URL for printed challenge links

    @property
    def game_mode(self) -> GameMode:
        return GameMode.parse(self.mode)

    @property
    def game_speed(self) -> Speed:
        return Speed.parse(self.speed)

    @property
    def alphabet(self) -> tuple[str, ...]:
        if self.language not in ALPHABETS:
            raise ValueError(f"unknown language: {self.language!r}")
        return ALPHABETS[self.language]

    @property
    def colors(self) -> tuple[str, ...]:
        if self.palette not in PALETTES:
            raise ValueError(f"unknown palette: {self.palette!r}")
        return PALETTES[self.palette]


@dataclass
class AudioConfig:
    sfx: bool = True
    voices: bool = True
    volume: float = 0.3


@dataclass
class StatsConfig:
    path: str = DEFAULT_STATS_FILE
    history_limit: int = HISTORY_LIMIT


@dataclass
class AppConfig:
    deck: DeckConfig = field(default_factory=DeckConfig)
    game: GameConfig = field(default_factory=GameConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)


def load_config(path: Path) -> AppConfig:
    """Load config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    deck = DeckConfig(**(raw.get("deck") or {}))
    game = GameConfig(**(raw.get("game") or {}))
    audio = AudioConfig(**(raw.get("audio") or {}))
    stats = StatsConfig(**(raw.get("stats") or {}))
    stats.path = str(Path(stats.path).expanduser())

    return AppConfig(deck=deck, game=game, audio=audio, stats=stats)
