"""Time → visual state mapping for the caption overlay.

WHY: The overlay is repainted for every playback tick. Deriving each
frame from (words, time, style) alone means seeks, scrubbing, and
out-of-order ticks can never leave the captions in a stale animation
state, and the renderer can be tested by feeding arbitrary times.

HOW: Three steps per call:
  1. find the current word (start <= t <= end)
  2. window long transcripts to words near the playhead
  3. apply the animation rule of style.animation to every emitted word

RULES:
- Pure: no state is kept between calls
- At most one current word: the first whose interval contains t
- More than WINDOW_THRESHOLD words → only words overlapping
  [t - WINDOW_SECONDS, t + WINDOW_SECONDS] are emitted
- word-by-word emits only words up to and including the current word;
  between words it emits the words that have already started
- Times outside the transcript give "no current word", never an error
"""

from typing import List, Optional, Sequence

from .models import CaptionAnimation, CaptionStyle, CaptionWord, VisualWordState
from .presets import (
    BOUNCE_FRACTION,
    DEFAULT_GLOW_COLOR,
    FADE_IN_FRACTION,
    WINDOW_SECONDS,
    WINDOW_THRESHOLD,
)

_DEFAULT_STYLE = CaptionStyle()


def find_current_index(words: Sequence[CaptionWord], current_time: float) -> Optional[int]:
    """Index of the word whose interval contains current_time, or None."""
    for index, word in enumerate(words):
        if word.start <= current_time <= word.end:
            return index
    return None


def visible_indices(
    words: Sequence[CaptionWord],
    current_time: float,
    threshold: int = WINDOW_THRESHOLD,
    window_s: float = WINDOW_SECONDS,
) -> List[int]:
    """Indices of the words worth rendering at current_time.

    Short transcripts are rendered whole; longer ones only near the playhead.
    """
    if len(words) <= threshold:
        return list(range(len(words)))
    low = current_time - window_s
    high = current_time + window_s
    return [
        index for index, word in enumerate(words)
        if word.end >= low and word.start <= high
    ]


def word_progress(word: CaptionWord, current_time: float) -> float:
    """Fraction of the word elapsed at current_time, clamped to [0, 1]."""
    duration = word.end - word.start
    if duration <= 0:
        return 1.0
    progress = (current_time - word.start) / duration
    return min(max(progress, 0.0), 1.0)


def bounce_scale(progress: float, highlight_scale: float) -> float:
    """Triangular scale envelope over the first BOUNCE_FRACTION of a word.

    Rises linearly to highlight_scale at half the window, falls back to 1
    at the end of the window, and stays at 1 afterwards.
    """
    half = BOUNCE_FRACTION / 2.0
    if progress < half:
        factor = progress / half
    elif progress < BOUNCE_FRACTION:
        factor = (BOUNCE_FRACTION - progress) / half
    else:
        factor = 0.0
    return 1.0 + (highlight_scale - 1.0) * factor


def _word_state(
    word: CaptionWord,
    is_current: bool,
    current_time: float,
    style: CaptionStyle,
) -> VisualWordState:
    is_past = word.end < current_time
    animation = style.animation
    highlighted = is_current and style.highlight_enabled
    highlight_color = style.highlight_color or style.text_color

    opacity = 1.0
    scale = 1.0
    color = style.text_color

    if animation == CaptionAnimation.FADE:
        if is_current:
            opacity = min(word_progress(word, current_time) / FADE_IN_FRACTION, 1.0)
        elif is_past:
            opacity = 1.0
        else:
            opacity = 0.0
    elif animation in (CaptionAnimation.KARAOKE, CaptionAnimation.WORD_BY_WORD):
        if highlighted:
            scale = style.highlight_scale
            color = highlight_color
        if is_past and animation == CaptionAnimation.KARAOKE:
            opacity = style.past_opacity
    elif animation == CaptionAnimation.BOUNCE:
        if is_current:
            scale = bounce_scale(word_progress(word, current_time), style.highlight_scale)
        if highlighted:
            color = highlight_color
        if is_past:
            opacity = style.past_opacity
    else:
        if is_past:
            opacity = style.past_opacity

    glow_color = None
    if is_current and style.glow_enabled:
        glow_color = style.glow_color or style.highlight_color or DEFAULT_GLOW_COLOR

    text = word.text.upper() if style.text_transform == "uppercase" else word.text

    return VisualWordState(
        word_id=word.id,
        text=text,
        is_current=is_current,
        is_past=is_past,
        opacity=opacity,
        scale=scale,
        color=color,
        glow_color=glow_color,
    )


def map_caption_frame(
    words: Sequence[CaptionWord],
    current_time: float,
    style: Optional[CaptionStyle] = None,
) -> List[VisualWordState]:
    """Compute the visual state of every emitted word at current_time.

    Args:
        words: Caption words ordered by start.
        current_time: Playback time in seconds (any value, including seeks
            backwards and times outside the transcript).
        style: Style configuration; defaults to CaptionStyle().

    Returns:
        One VisualWordState per emitted word, in word order.
    """
    style = style or _DEFAULT_STYLE
    current = find_current_index(words, current_time)
    indices = visible_indices(words, current_time)

    if style.animation == CaptionAnimation.WORD_BY_WORD:
        if current is not None:
            indices = [i for i in indices if i <= current]
        else:
            indices = [i for i in indices if words[i].start <= current_time]

    return [
        _word_state(words[i], i == current, current_time, style)
        for i in indices
    ]
