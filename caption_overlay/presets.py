"""Style presets and timing constants for the caption overlay.

WHY: Creators pick a look ("Hormozi", "Classic") rather than tuning a
dozen fields. Keeping the presets as importable constants lets the CLI,
the session service, and tests select a style by name, and keeps the
animation timing constants in one place next to them.

HOW: Each preset is a frozen CaptionStyle. PRESETS maps preset ids to
styles. The module-level constants define the windowing and animation
envelopes used by core.map_caption_frame.

RULES:
- Presets are frozen values; callers derive variants with dataclasses.replace
- Preset ids are kebab-case and unique
- "default" is an alias for "simple"
"""

from typing import Dict

from .models import CaptionAnimation, CaptionStyle

# Windowing: transcripts longer than this only render words near the playhead.
WINDOW_THRESHOLD = 12
WINDOW_SECONDS = 3.0

# Fade-in: the current word reaches full opacity after this fraction of its duration.
FADE_IN_FRACTION = 0.2

# Bounce: triangular scale envelope over this fraction of the current word.
BOUNCE_FRACTION = 0.4

DEFAULT_GLOW_COLOR = "#FFD700"

PRESET_SIMPLE = CaptionStyle(
    animation=CaptionAnimation.FADE,
    highlight_enabled=False,
    highlight_color="#FFFFFF",
    font_family="Inter",
    font_size=32,
)

PRESET_CLASSIC = CaptionStyle(
    animation=CaptionAnimation.BOUNCE,
    highlight_color="#FFFF00",
    font_family="Poppins",
    font_size=32,
)

PRESET_HORMOZI = CaptionStyle(
    animation=CaptionAnimation.KARAOKE,
    highlight_color="#FFD700",
    font_family="Anton",
    font_size=48,
)

PRESET_GARYVEE = CaptionStyle(
    animation=CaptionAnimation.WORD_BY_WORD,
    highlight_color="#FF0000",
    font_family="Bebas Neue",
    font_size=44,
)

PRESET_TIKTOK_NATIVE = CaptionStyle(
    animation=CaptionAnimation.KARAOKE,
    highlight_color="#FE2C55",
    font_family="Proxima Nova",
    font_size=36,
)

PRESET_GOLD_LUXE = CaptionStyle(
    animation=CaptionAnimation.KARAOKE,
    highlight_color="#FFD700",
    highlight_scale=1.25,
    glow_enabled=True,
    text_transform="uppercase",
    font_family="Playfair Display",
    font_size=42,
)

PRESET_CINEMATIC = CaptionStyle(
    animation=CaptionAnimation.FADE,
    highlight_enabled=False,
    highlight_color="#F0E6D3",
    text_color="#F0E6D3",
    font_family="Montserrat",
    font_size=34,
)

PRESET_ELECTRIC_BLUE = CaptionStyle(
    animation=CaptionAnimation.BOUNCE,
    highlight_color="#00FFFF",
    highlight_scale=1.30,
    text_transform="uppercase",
    font_family="Russo One",
    font_size=46,
)

PRESET_ICE_COLD = CaptionStyle(
    animation=CaptionAnimation.WORD_BY_WORD,
    highlight_color="#FFFFFF",
    highlight_scale=1.20,
    text_color="#B8E8FF",
    text_transform="uppercase",
    font_family="Black Ops One",
    font_size=44,
)

PRESET_PLAIN = CaptionStyle(
    animation=CaptionAnimation.NONE,
    highlight_enabled=False,
)

# Preset lookup by id
PRESETS: Dict[str, CaptionStyle] = {
    "simple": PRESET_SIMPLE,
    "default": PRESET_SIMPLE,  # Alias
    "classic": PRESET_CLASSIC,
    "hormozi": PRESET_HORMOZI,
    "garyvee": PRESET_GARYVEE,
    "tiktok-native": PRESET_TIKTOK_NATIVE,
    "gold-luxe": PRESET_GOLD_LUXE,
    "cinematic": PRESET_CINEMATIC,
    "electric-blue": PRESET_ELECTRIC_BLUE,
    "ice-cold": PRESET_ICE_COLD,
    "plain": PRESET_PLAIN,
}


def get_preset(name: str) -> CaptionStyle:
    """Look up a preset by id.

    Raises:
        ValueError: If the preset id is unknown.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(name, ", ".join(sorted(PRESETS)))
        ) from None
