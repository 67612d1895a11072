"""Caption overlay library: animated word captions driven by playback time.

WHY: The editor's preview paints captions over a playing video. The
painter needs, for every tick, which word is current and how each word
should look (opacity, scale, color) under the chosen animation style.
This package owns that mapping and nothing else, so any surface (web
preview, CLI frame dump, HTTP session service) can use it.

HOW: The single public entry point is map_frame(words, time, style). The
style may be a CaptionStyle or a preset id. All work happens in
core.map_caption_frame, which is pure.

RULES:
- map_frame() is the public API; core functions are importable for tests
- Preset ids come from presets.PRESETS; unknown ids raise ValueError
- Never mutate preset constants; use dataclasses.replace for variants
"""

from typing import List, Optional, Sequence, Union

from .core import find_current_index, map_caption_frame, visible_indices
from .models import CaptionAnimation, CaptionStyle, CaptionWord, VisualWordState
from .presets import PRESETS, get_preset

__all__ = [
    "map_frame",
    "map_caption_frame",
    "find_current_index",
    "visible_indices",
    "CaptionAnimation",
    "CaptionStyle",
    "CaptionWord",
    "VisualWordState",
    "PRESETS",
    "get_preset",
]


def map_frame(
    words: Sequence[CaptionWord],
    current_time: float,
    style: Optional[Union[CaptionStyle, str]] = None,
) -> List[VisualWordState]:
    """Map caption words to their visual state at current_time.

    Args:
        words: Caption words ordered by start.
        current_time: Playback time in seconds.
        style: CaptionStyle, preset id, or None for the default style.

    Returns:
        Visual state per emitted word.

    Raises:
        ValueError: If style is a string that is not a known preset id.
    """
    if isinstance(style, str):
        style = get_preset(style)
    return map_caption_frame(words, current_time, style)
