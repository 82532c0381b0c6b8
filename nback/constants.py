"""Game tables — alphabets, palettes, pacing, ranks, XP multipliers."""

from nback.models import GameMode, Speed

LETTERS_EN = ("A", "E", "I", "O", "U", "C", "T", "S", "Y")
LETTERS_TR = ("A", "E", "İ", "O", "U", "C", "T", "S", "Y")

ALPHABETS = {
    "en": LETTERS_EN,
    "tr": LETTERS_TR,
}

# Spoken forms for the Turkish voice (letter names read badly on their own)
PHONETIC_TR = {
    "A": "aa",
    "E": "eee",
    "İ": "iii",
    "O": "oo",
    "U": "uu",
    "C": "cee",
    "T": "tee",
    "S": "seee",
    "Y": "yee",
}

# Shipped game palette; changing it changes every seeded sequence
CLASSIC_PALETTE = (
    "#ef4444",  # red
    "#3b82f6",  # blue
    "#22c55e",  # green
    "#eab308",  # yellow
    "#a855f7",  # purple
    "#f97316",  # orange
    "#06b6d4",  # cyan
    "#ec4899",  # pink
    "#f8fafc",  # near-white
)

EXTENDED_PALETTE = (
    "#ef4444", "#3b82f6", "#22c55e", "#eab308",
    "#06b6d4", "#d946ef", "#f97316", "#ec4899",
    "#6366f1", "#14b8a6", "#84cc16", "#f43f5e",
)

PALETTES = {
    "classic": CLASSIC_PALETTE,
    "extended": EXTENDED_PALETTE,
}

# Pacing (milliseconds)
SPEED_INTERVAL_MS = {
    Speed.SLOW: 3500,
    Speed.NORMAL: 2500,
    Speed.FAST: 1500,
}
STIMULUS_DURATION_MS = 500

PRACTICE_LENGTH = 1000
MAX_LEVEL = 9

RANKS = {
    "en": (
        (0, "Novice"),
        (500, "Focus Intern"),
        (1500, "Mind Architect"),
        (4000, "Memory Master"),
        (10000, "Neuro Grandmaster"),
    ),
    "tr": (
        (0, "Çömez"),
        (500, "Odak Stajyeri"),
        (1500, "Zihin Mimarı"),
        (4000, "Hafıza Ustası"),
        (10000, "Nöro Grandmaster"),
    ),
}

MODE_XP_MULTIPLIERS = {
    GameMode.POSITION: 1.0,
    GameMode.DUAL: 1.5,
    GameMode.TRIPLE: 2.2,
}

SPEED_XP_MULTIPLIERS = {
    Speed.FAST: 1.3,
    Speed.NORMAL: 1.0,
    Speed.SLOW: 0.7,
}


def sequence_length(level: int, practice: bool = False) -> int:
    """Number of steps in a session. Practice and marathon runs are open-ended."""
    if practice:
        return PRACTICE_LENGTH
    if level == 1:
        return 21
    if level == 2:
        return 25
    return 30
