"""Data models for the caption overlay.

WHY: The overlay renderer runs every playback tick and must not depend on
the editor's transcript types. These models are the small, stable
contract between whatever holds the words and whatever paints them.

HOW: CaptionWord is the input unit (one timed word). CaptionStyle is the
read-only style configuration. VisualWordState is the per-frame output
for one word. CaptionAnimation enumerates the supported animation modes.

RULES:
- Times are float seconds
- CaptionStyle.highlight_scale is a factor (1.25), not a percentage;
  from_dict() converts upstream percentages (125) to factors
- VisualWordState is derived every frame and never stored
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


class CaptionAnimation(str, enum.Enum):
    """Animation modes of the caption overlay.

    Inherits from str so values compare and serialize as plain strings.
    """

    NONE = "none"
    FADE = "fade"
    KARAOKE = "karaoke"
    WORD_BY_WORD = "word-by-word"
    BOUNCE = "bounce"


@dataclass(frozen=True)
class CaptionWord:
    """A single timed word as the overlay sees it.

    Attributes:
        id: Stable identifier used by the painter to key elements.
        text: The word text as typed by the editor.
        start: Start time in seconds.
        end: End time in seconds.
    """

    id: str
    text: str
    start: float
    end: float


@dataclass(frozen=True)
class CaptionStyle:
    """Caption style configuration consumed by the time mapper.

    Layout fields (position, alignment, font) are carried through for the
    painter; only the animation and highlight fields affect the mapping.
    """

    animation: CaptionAnimation = CaptionAnimation.NONE
    highlight_enabled: bool = True
    highlight_color: Optional[str] = "#FFD700"
    highlight_scale: float = 1.25
    text_color: str = "#FFFFFF"
    past_opacity: float = 0.7
    glow_enabled: bool = False
    glow_color: Optional[str] = None
    text_transform: str = "none"
    position: str = "bottom"
    alignment: str = "center"
    font_family: str = "sans-serif"
    font_size: int = 24

    def __post_init__(self) -> None:
        # Accept plain strings ("karaoke") as well as enum members.
        object.__setattr__(self, "animation", CaptionAnimation(self.animation))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CaptionStyle:
        """Build a style from a snake_case or camelCase configuration dict.

        RULES:
        - Unknown keys are ignored
        - highlightScale / highlight_scale above 10 is read as a percentage
        - Raises ValueError for an unknown animation name
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_TO_SNAKE.get(key, key)
            if name in known:
                kwargs[name] = value
        scale = kwargs.get("highlight_scale")
        if scale is not None and scale > 10:
            kwargs["highlight_scale"] = scale / 100.0
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["animation"] = self.animation.value
        return result


_CAMEL_TO_SNAKE = {
    "highlightEnabled": "highlight_enabled",
    "highlightColor": "highlight_color",
    "highlightScale": "highlight_scale",
    "textColor": "text_color",
    "pastOpacity": "past_opacity",
    "glowEnabled": "glow_enabled",
    "glowColor": "glow_color",
    "textTransform": "text_transform",
    "fontFamily": "font_family",
    "fontSize": "font_size",
}


@dataclass(frozen=True)
class VisualWordState:
    """Render-ready state of one word at one instant.

    Attributes:
        word_id: CaptionWord.id of the source word.
        text: Text to paint (after text_transform).
        is_current: The playback time lies inside this word.
        is_past: The word ended before the playback time.
        opacity: 0.0-1.0.
        scale: Multiplicative scale, 1.0 = natural size.
        color: CSS color string.
        glow_color: Glow color for the current word, or None.
    """

    word_id: str
    text: str
    is_current: bool
    is_past: bool
    opacity: float
    scale: float
    color: str
    glow_color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wordId": self.word_id,
            "text": self.text,
            "isCurrent": self.is_current,
            "isPast": self.is_past,
            "opacity": self.opacity,
            "scale": self.scale,
            "color": self.color,
            "glowColor": self.glow_color,
        }
