"""Audio for the deck front end — 8-bit sound effects and spoken letters.

Playback goes through afplay / say subprocesses that are tracked so they
can be reaped and killed on exit. Audio is best-effort: a missing player
binary never interrupts a session.
"""

import logging
import os
import shutil
import struct
import subprocess
import tempfile
import threading
import wave

from nback.constants import PHONETIC_TR

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
MAX_CONCURRENT = 4

VOICES = {
    "en": "Samantha",
    "tr": "Yelda",
}


def _triangle(freq: float, dur: float, vol: float = 1.0) -> list[float]:
    samples = []
    n = int(SAMPLE_RATE * dur)
    for i in range(n):
        phase = (i / SAMPLE_RATE * freq) % 1.0
        val = (4 * abs(phase - 0.5) - 1) * vol
        env = min(1.0, i / (SAMPLE_RATE * 0.003))
        tail = max(0.0, 1.0 - (i / n) * 0.5)
        samples.append(val * env * tail)
    return samples


def _square(freq: float, dur: float, vol: float = 1.0) -> list[float]:
    samples = []
    n = int(SAMPLE_RATE * dur)
    for i in range(n):
        phase = (i / SAMPLE_RATE * freq) % 1.0
        val = vol if phase < 0.5 else -vol
        env = min(1.0, i / (SAMPLE_RATE * 0.003))
        tail = max(0.0, 1.0 - (i / n) * 0.8)
        samples.append(val * env * tail)
    return samples


def write_wav(path: str, samples: list[float]) -> None:
    with wave.open(path, "w") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(SAMPLE_RATE)
        w.writeframes(b"".join(
            struct.pack("<h", int(max(-0.95, min(0.95, s)) * 32767)) for s in samples
        ))


def sfx_samples(volume: float) -> dict[str, list[float]]:
    """Waveforms for every game event."""
    v = volume
    return {
        # soft blip when a cell lights up
        "show": _triangle(523, 0.06, v * 0.4),
        # rising C-E-G
        "correct": (_triangle(523, 0.06, v * 0.5)
                    + _triangle(659, 0.06, v * 0.55)
                    + _triangle(784, 0.1, v * 0.6)),
        # falling A-E-C
        "wrong": (_square(440, 0.08, v * 0.4)
                  + _square(330, 0.10, v * 0.35)
                  + _square(262, 0.14, v * 0.3)),
        "start": (_triangle(523, 0.06, v * 0.4)
                  + _triangle(659, 0.06, v * 0.45)
                  + _triangle(784, 0.06, v * 0.5)),
        "finish": (_triangle(523, 0.08, v * 0.5)
                   + _triangle(784, 0.08, v * 0.55)
                   + _triangle(1047, 0.08, v * 0.6)
                   + _triangle(1319, 0.30, v * 0.7)),
    }


def spoken_form(letter: str, language: str) -> str:
    """Text handed to the speech engine for one letter."""
    if language == "tr":
        return PHONETIC_TR.get(letter, letter.lower())
    return letter


class AudioEngine:
    """Tracks playback subprocesses; flags can be flipped at runtime."""

    def __init__(self, sfx_enabled: bool = True, voices_enabled: bool = True,
                 volume: float = 0.3, language: str = "en"):
        self.sfx_enabled = sfx_enabled
        self.voices_enabled = voices_enabled
        self.volume = volume
        self.language = language
        self._processes: list[subprocess.Popen] = []
        self._lock = threading.Lock()
        self._sfx: dict[str, str] = {}
        self._sfx_dir = ""

    def prepare(self) -> None:
        """Render all sound effects to WAV files in a temp dir."""
        self._sfx_dir = tempfile.mkdtemp(prefix="nback-sfx-")
        for name, samples in sfx_samples(self.volume).items():
            path = os.path.join(self._sfx_dir, f"{name}.wav")
            write_wav(path, samples)
            self._sfx[name] = path

    def _reap(self) -> None:
        self._processes[:] = [p for p in self._processes if p.poll() is None]

    def _spawn(self, cmd: list[str]) -> None:
        with self._lock:
            self._reap()
            while len(self._processes) >= MAX_CONCURRENT:
                old = self._processes.pop(0)
                old.kill()
                old.wait()
            try:
                p = subprocess.Popen(cmd, stdout=subprocess.DEVNULL,
                                     stderr=subprocess.DEVNULL)
            except OSError as e:
                logger.debug("audio command %s failed: %s", cmd[0], e)
                return
            self._processes.append(p)

    def play_sfx(self, name: str) -> None:
        if not self.sfx_enabled:
            return
        path = self._sfx.get(name)
        if path and os.path.exists(path):
            self._spawn(["afplay", path])

    def speak(self, letter: str) -> None:
        """Say one stimulus letter in the configured language."""
        if not self.voices_enabled:
            return
        cmd = ["say", "-r", "160"]
        voice = VOICES.get(self.language)
        if voice:
            cmd += ["-v", voice]
        self._spawn(cmd + [spoken_form(letter, self.language)])

    def stop_all(self) -> None:
        with self._lock:
            for p in self._processes:
                p.kill()
                p.wait()
            self._processes.clear()

    def cleanup(self) -> None:
        self.stop_all()
        if self._sfx_dir and os.path.isdir(self._sfx_dir):
            shutil.rmtree(self._sfx_dir, ignore_errors=True)
        self._sfx.clear()
