"""N-Back — dual/triple N-back on a Stream Deck.

A 3x3 grid of keys lights up one cell per step while a letter is spoken.
Press POS / SOUND / COLOR when the cell, letter or color matches the one
from N steps ago. Sessions replay exactly from a seed, so daily races and
challenge links give every player the same sequence.

Usage:
    uv run streamdeck-nback --config config.yaml
    uv run streamdeck-nback --daily
    uv run streamdeck-nback --challenge "https://…/?type=challenge&seed=…"
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path

from PIL import Image
from StreamDeck.DeviceManager import DeviceManager
from StreamDeck.ImageHelpers import PILHelper

from nback import stats
from nback.audio import AudioEngine
from nback.challenge import (
    ChallengeParams,
    build_challenge_url,
    daily_seed,
    new_challenge_seed,
    parse_challenge,
)
from nback.config import AppConfig, load_config
from nback.constants import SPEED_INTERVAL_MS, STIMULUS_DURATION_MS
from nback.models import Modality, SessionRecord
from nback.renderer import (
    POSITION_ONLY_COLOR,
    render_cell,
    render_match_key,
    render_start,
    render_stat,
    render_text_button,
)
from nback.scoring import next_level, rank_for_xp
from nback.session import NBackSession

logger = logging.getLogger(__name__)

GRID_SIDE = 3
FEEDBACK_TIME = 0.25  # seconds a match key stays green/red


@dataclass(frozen=True)
class DeckLayout:
    grid: tuple[int, ...]  # key for each cell, row-major
    position_key: int
    sound_key: int
    color_key: int
    start_key: int
    hud: tuple[int, ...]  # every other key, in key order

    def match_key(self, modality: Modality) -> int:
        if modality is Modality.POSITION:
            return self.position_key
        if modality is Modality.SOUND:
            return self.sound_key
        return self.color_key

    def modality_for_key(self, key: int) -> Modality | None:
        for modality in Modality:
            if self.match_key(modality) == key:
                return modality
        return None


def deck_layout(rows: int, cols: int) -> DeckLayout:
    """Place the grid centered on the bottom three rows, controls at the sides."""
    if rows < GRID_SIDE or cols < GRID_SIDE + 2:
        raise ValueError(f"deck too small for the grid: {rows}x{cols}")
    top = rows - GRID_SIDE
    left = (cols - GRID_SIDE) // 2
    grid = tuple(
        (top + r) * cols + left + c
        for r in range(GRID_SIDE) for c in range(GRID_SIDE)
    )
    position_key = (rows - 1) * cols
    sound_key = (rows - 1) * cols + cols - 1
    color_key = (rows - 2) * cols + cols - 1
    start_key = (rows - 2) * cols
    used = set(grid) | {position_key, sound_key, color_key, start_key}
    hud = tuple(k for k in range(rows * cols) if k not in used)
    return DeckLayout(grid, position_key, sound_key, color_key, start_key, hud)


def find_deck():
    """Find first visual Stream Deck device."""
    for deck in DeviceManager().enumerate():
        if deck.is_visual():
            return deck
    return None


class DeckGame:
    def __init__(self, deck, config: AppConfig, audio: AudioEngine,
                 seed: int | None = None, daily: bool = False,
                 challenge: ChallengeParams | None = None):
        self.deck = deck
        self.config = config
        self.audio = audio
        self.seed = seed
        self.daily = daily
        self.challenge = challenge
        self.layout = deck_layout(*deck.key_layout())
        self.state = "idle"  # idle | playing | finished
        self.session: NBackSession | None = None
        self.lock = threading.Lock()
        self._timers: list[threading.Timer] = []

    # -- drawing -----------------------------------------------------------

    def set_key(self, key: int, img: Image.Image):
        native = PILHelper.to_native_key_format(self.deck, img)
        with self.deck:
            self.deck.set_key_image(key, native)

    def _draw_hud(self, tiles: list[Image.Image]):
        for i, key in enumerate(self.layout.hud):
            self.set_key(key, tiles[i] if i < len(tiles) else render_text_button())

    def _draw_match_keys(self, state: str = "idle"):
        mode = self.session.mode if self.session else self.config.game.game_mode
        active = mode.modalities
        for modality in Modality:
            key_state = state if modality in active else "disabled"
            self.set_key(self.layout.match_key(modality),
                         render_match_key(modality.value, key_state))

    def _clear_grid(self):
        for key in self.layout.grid:
            self.set_key(key, render_cell())

    def _playing_hud(self) -> list[Image.Image]:
        s = self.session
        return [
            render_stat("LEVEL", f"{s.level}-back", "#60a5fa"),
            render_stat("STEP", f"{s.current_index}/{len(s.sequence)}", "#e5e7eb"),
            render_stat("COMBO", str(s.combo), "#a78bfa"),
            render_stat("MODE", s.mode.value.upper(), "#fbbf24"),
        ]

    def show_idle(self):
        """Show start screen."""
        self.state = "idle"
        game = self.config.game
        level = self.challenge.level if self.challenge else game.level
        mode = self.challenge.mode if self.challenge else game.game_mode
        player = stats.load_stats(self.config.stats.path)
        self._draw_hud([
            render_text_button(lines=["N-BACK", mode.value.upper()],
                               colors=["#a78bfa", "#7c3aed"]),
            render_stat("LEVEL", f"{level}-back", "#60a5fa"),
            render_stat("STREAK", str(player.streak), "#f97316"),
            render_stat("XP", str(player.xp), "#34d399"),
            render_text_button(lines=[rank_for_xp(player.xp, game.language)],
                               font_sizes=[12], colors=["#c4b5fd"]),
        ])
        self._clear_grid()
        self._draw_match_keys("disabled")
        label = "CHALLENGE" if self.challenge else "DAILY" if self.daily else "START"
        self.set_key(self.layout.start_key, render_start(label))

    # -- timers ------------------------------------------------------------

    def _schedule(self, delay: float, fn, *args):
        timer = threading.Timer(delay, fn, args=args)
        timer.daemon = True
        self._timers.append(timer)
        timer.start()

    def _cancel_timers(self):
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()

    def stop(self):
        """Cancel pending steps and silence audio."""
        with self.lock:
            self._cancel_timers()
        self.audio.stop_all()

    # -- game flow -----------------------------------------------------------

    def _new_session(self) -> NBackSession:
        game = self.config.game
        if self.challenge:
            return NBackSession(
                level=self.challenge.level, mode=self.challenge.mode,
                speed=self.challenge.speed, alphabet=game.alphabet,
                palette=game.colors, seed=self.challenge.seed,
            )
        seed = daily_seed() if self.daily else self.seed
        return NBackSession(
            level=game.level, mode=game.game_mode, speed=game.game_speed,
            alphabet=game.alphabet, palette=game.colors, seed=seed,
            practice=game.practice, marathon=game.marathon, daily=self.daily,
        )

    def start_game(self):
        """Begin a new session."""
        with self.lock:
            self._cancel_timers()
            self.session = self._new_session()
            self.state = "playing"
        logger.info("session start: level=%d mode=%s seed=%s",
                    self.session.level, self.session.mode.value, self.session.seed)

        self.audio.play_sfx("start")
        self._clear_grid()
        self.set_key(self.layout.start_key, render_text_button())
        self._draw_match_keys("idle")
        self._draw_hud(self._playing_hud())
        self._schedule(1.0, self._tick)

    def _tick(self):
        """Show the next stimulus and schedule the one after it."""
        with self.lock:
            if self.state != "playing":
                return
            stimulus = self.session.next_stimulus()
        if stimulus is None:
            self._show_results()
            return

        mode = self.session.mode
        color = stimulus.color if Modality.COLOR in mode.modalities else POSITION_ONLY_COLOR
        key = self.layout.grid[stimulus.position]
        self.set_key(key, render_cell(color))
        if Modality.SOUND in mode.modalities:
            self.audio.speak(stimulus.sound)
        else:
            self.audio.play_sfx("show")
        self._draw_match_keys("active")
        self._draw_hud(self._playing_hud())

        self._schedule(STIMULUS_DURATION_MS / 1000, self._clear_cell, key)
        self._schedule(SPEED_INTERVAL_MS[self.session.speed] / 1000, self._tick)

    def _clear_cell(self, key: int):
        if self.state == "playing":
            self.set_key(key, render_cell())

    def _reset_match_key(self, modality: Modality):
        if self.state == "playing":
            self.set_key(self.layout.match_key(modality), render_match_key(modality.value, "active"))

    def _on_match(self, modality: Modality):
        with self.lock:
            if self.state != "playing":
                return
            correct = self.session.respond(modality)
            ended = self.session.finished
        if correct is None:
            return

        self.audio.play_sfx("correct" if correct else "wrong")
        self.set_key(self.layout.match_key(modality),
                     render_match_key(modality.value, "correct" if correct else "wrong"))
        if ended:
            self._show_results()
            return
        self._draw_hud(self._playing_hud())
        self._schedule(FEEDBACK_TIME, self._reset_match_key, modality)

    def _show_results(self):
        """Score the session, save it, and show the summary."""
        with self.lock:
            if self.state != "playing":
                return
            self.state = "finished"
            self._cancel_timers()
            record = self.session.finish()

        player = stats.record_session(record, self.config.stats.path,
                                      history_limit=self.config.stats.history_limit)
        if not self.challenge and not self.config.game.practice:
            self.config.game.level = next_level(record.level, record.score)
        self.audio.play_sfx("finish")
        self._print_summary(record)

        details = record.details
        self._draw_hud([
            render_stat("SCORE", f"{record.score}%", "#fbbf24"),
            render_stat("XP", f"+{record.xp_earned}", "#34d399"),
            render_stat("STREAK", str(player.streak), "#f97316"),
            render_stat("NEXT", f"{self.config.game.level}-back", "#60a5fa"),
        ])
        self._clear_grid()
        for i, modality in enumerate(self.session.mode.modalities):
            s = details.for_modality(modality)
            self.set_key(self.layout.grid[i], render_text_button(lines=[
                modality.value.upper(),
                f"{s.correct}/{s.total_possible}",
                f"FA {s.false_alarms}",
            ]))
        self._draw_match_keys("disabled")
        self.set_key(self.layout.start_key, render_start("AGAIN"))

    def _print_summary(self, record: SessionRecord):
        overall = record.details.overall
        print(f"{record.level}-back {record.mode.value}: {record.score}% "
              f"({overall.total_correct}/{overall.total_possible} hits, "
              f"{overall.total_false_alarms} false alarms) +{record.xp_earned} XP")
        share_url = self.config.game.share_url
        if record.seed is not None and not record.is_daily and share_url:
            params = ChallengeParams(seed=record.seed, level=record.level,
                                     mode=record.mode, speed=record.speed,
                                     score=record.score)
            print(f"Challenge a friend: {build_challenge_url(share_url, params)}")

    def on_key(self, _deck, key: int, pressed: bool):
        if not pressed:
            return

        if key == self.layout.start_key and self.state in ("idle", "finished"):
            self.start_game()
            return

        modality = self.layout.modality_for_key(key)
        if modality is not None:
            self._on_match(modality)


# -- main ------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(description="Dual/triple N-back on a Stream Deck")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--seed", type=int, help="Replay a fixed sequence")
    group.add_argument("--new-challenge", action="store_true",
                       help="Play a fresh seeded sequence and print a challenge link")
    group.add_argument("--daily", action="store_true", help="Play today's daily race")
    group.add_argument("--challenge", metavar="URL", help="Play a friend's challenge link")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config_path = Path(args.config)
    if config_path.exists():
        config = load_config(config_path)
    elif args.config != parser.get_default("config"):
        print(f"Config not found: {config_path}")
        sys.exit(1)
    else:
        config = AppConfig()

    challenge = None
    if args.challenge:
        challenge = parse_challenge(args.challenge)
        if challenge is None:
            print("Not a challenge link.")
            sys.exit(1)
    seed = new_challenge_seed() if args.new_challenge else args.seed

    deck = find_deck()
    if deck is None:
        print("No Stream Deck found. Is it plugged in?")
        sys.exit(1)

    audio = AudioEngine(
        sfx_enabled=config.audio.sfx,
        voices_enabled=config.audio.voices,
        volume=config.audio.volume,
        language=config.game.language,
    )
    try:
        audio.prepare()
        print("Sound effects: ON")
    except OSError:
        audio.sfx_enabled = False
        print("Sound effects: OFF (generation failed)")

    deck.open()
    deck.reset()
    deck.set_brightness(config.deck.brightness)
    print(f"Connected: {deck.deck_type()} ({deck.key_count()} keys)")

    game = DeckGame(deck, config, audio, seed=seed, daily=args.daily, challenge=challenge)
    if challenge:
        print(f"Challenge: {challenge.level}-back {challenge.mode.value}, "
              f"beat {challenge.score}%")
    print("N-BACK! Press START to begin.")
    game.show_idle()
    deck.set_key_callback(game.on_key)

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        game.stop()
        deck.reset()
        deck.close()
        audio.cleanup()
        print("Done.")


if __name__ == "__main__":
    main()
