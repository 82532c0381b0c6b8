"""PIL-based key images for the N-back deck."""

from PIL import Image, ImageDraw, ImageFont

SIZE = (96, 96)
FONT_PATH = "/System/Library/Fonts/Helvetica.ttc"

EMPTY_COLOR = "#0f172a"
HUD_BG = "#111827"
POSITION_ONLY_COLOR = "#6366f1"  # lit cell color when color isn't scored

FEEDBACK_COLORS = {
    "correct": ("#14532d", "#4ade80"),
    "wrong": ("#7f1d1d", "#ef4444"),
    "active": ("#065f46", "#4ade80"),
    "idle": ("#1f2937", "#9ca3af"),
    "disabled": ("#111827", "#374151"),
}

MATCH_LABELS = {
    "position": "POS",
    "sound": "SOUND",
    "color": "COLOR",
}


def _font(size: int) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError:
        return ImageFont.load_default()


def feedback_colors(state: str) -> tuple[str, str]:
    """(background, foreground) for a match key state."""
    return FEEDBACK_COLORS.get(state, FEEDBACK_COLORS["idle"])


def render_cell(color: str | None = None, size: tuple[int, int] = SIZE) -> Image.Image:
    """Grid cell: dark when empty, filled with a glow border when lit."""
    if color is None:
        return Image.new("RGB", size, EMPTY_COLOR)
    img = Image.new("RGB", size, color)
    d = ImageDraw.Draw(img)
    d.rectangle([8, 8, size[0] - 9, size[1] - 9], outline="white", width=2)
    return img


def render_match_key(modality: str, state: str = "idle",
                     hint: str | None = None,
                     size: tuple[int, int] = SIZE) -> Image.Image:
    """Match button for one modality, tinted by its state."""
    bg, fg = feedback_colors(state)
    lines = [MATCH_LABELS.get(modality, modality.upper()), "MATCH"]
    if hint:
        lines.append(hint)
    return render_text_button(size=size, lines=lines, bg_color=bg,
                              colors=[fg, fg, "#9ca3af"])


def render_text_button(
    size: tuple[int, int] = SIZE,
    lines: list[str] | None = None,
    bg_color: str = HUD_BG,
    font_sizes: list[int] | None = None,
    colors: list[str] | None = None,
) -> Image.Image:
    """Render a text-only button — big readable text, centered vertically.

    lines: up to 4 lines of text
    font_sizes: per-line font sizes (default shrinks as lines are added)
    colors: per-line colors (default: white, then progressively dimmer)
    """
    img = Image.new("RGB", size, bg_color)
    if not lines:
        return img

    draw = ImageDraw.Draw(img)
    n = len(lines)

    if not font_sizes:
        font_sizes = {1: [22], 2: [18, 14], 3: [16, 13, 11]}.get(n, [14, 12, 10, 9])
    if not colors:
        colors = ["#ffffff", "#dddddd", "#aaaaaa", "#888888"][:n]

    font_sizes = list(font_sizes)
    colors = list(colors)
    while len(font_sizes) < n:
        font_sizes.append(font_sizes[-1])
    while len(colors) < n:
        colors.append(colors[-1])

    fonts = [_font(s) for s in font_sizes]
    line_heights = [f.getbbox("Ag")[3] - f.getbbox("Ag")[1] for f in fonts]
    spacing = 4
    total_h = sum(line_heights) + spacing * (n - 1)
    y = (size[1] - total_h) // 2

    for i, text in enumerate(lines):
        draw.text((size[0] // 2, y), text, font=fonts[i], fill=colors[i], anchor="mt")
        y += line_heights[i] + spacing

    return img


def render_stat(title: str, value: str, value_color: str = "#fbbf24",
                size: tuple[int, int] = SIZE) -> Image.Image:
    """HUD tile: small grey caption over a large value."""
    return render_text_button(size=size, lines=[title, value],
                              font_sizes=[13, 22],
                              colors=["#9ca3af", value_color])


def render_start(label: str = "START", size: tuple[int, int] = SIZE) -> Image.Image:
    return render_text_button(size=size, lines=["PRESS", label],
                              bg_color="#065f46", font_sizes=[16, 16],
                              colors=["#ffffff", "#34d399"])
