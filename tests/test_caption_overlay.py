"""Tests for the caption overlay time mapper, styles and presets.

WHY: The overlay is evaluated on every playback tick, including seeks and
scrubbing. Each frame must depend only on (words, time, style), pick at
most one current word, and apply the animation envelopes exactly.

HOW: A three-word transcript A[0,1] B[1,2] C[2,3] drives most tests.
  - TestCurrentWord: interval containment and boundary ties
  - TestKaraoke / TestFade / TestBounce / TestWordByWord / TestNone
  - TestWindowing: long transcripts only emit words near the playhead
  - TestDeterminism: repeated and out-of-order calls agree
  - TestStyleDecoration: glow and uppercase transform
  - TestCaptionStyle / TestPresets: configuration parsing and lookup

RULES:
- Envelope values are compared with pytest.approx
"""

import pytest

from caption_overlay import (
    PRESETS,
    CaptionAnimation,
    CaptionStyle,
    CaptionWord,
    find_current_index,
    get_preset,
    map_caption_frame,
    map_frame,
    visible_indices,
)
from caption_overlay.core import bounce_scale

GOLD = "#FFD700"


@pytest.fixture
def words():
    return [
        CaptionWord(id="a", text="Hello", start=0.0, end=1.0),
        CaptionWord(id="b", text="big", start=1.0, end=2.0),
        CaptionWord(id="c", text="world", start=2.0, end=3.0),
    ]


def _style(animation, **kwargs):
    return CaptionStyle(animation=animation, **kwargs)


class TestCurrentWord:
    def test_inside_interval(self, words):
        assert find_current_index(words, 1.5) == 1

    def test_boundary_goes_to_earlier_word(self, words):
        assert find_current_index(words, 1.0) == 0

    def test_before_and_after_transcript(self, words):
        assert find_current_index(words, -0.5) is None
        assert find_current_index(words, 3.5) is None

    def test_gap_between_words(self):
        gapped = [
            CaptionWord(id="a", text="a", start=0.0, end=1.0),
            CaptionWord(id="b", text="b", start=2.0, end=3.0),
        ]
        assert find_current_index(gapped, 1.5) is None

    def test_at_most_one_current(self, words):
        states = map_caption_frame(words, 1.0, _style(CaptionAnimation.KARAOKE))
        assert sum(1 for s in states if s.is_current) == 1

    def test_out_of_range_is_not_an_error(self, words):
        states = map_caption_frame(words, 100.0, _style(CaptionAnimation.KARAOKE))
        assert not any(s.is_current for s in states)
        assert all(s.is_past for s in states)


class TestKaraoke:
    def test_highlight_scenario(self, words):
        style = _style(CaptionAnimation.KARAOKE, highlight_color=GOLD, highlight_scale=1.25)
        a, b, c = map_caption_frame(words, 1.5, style)

        assert b.is_current
        assert b.scale == pytest.approx(1.25)
        assert b.color == GOLD
        assert b.opacity == 1.0

        assert a.is_past and not a.is_current
        assert a.opacity == pytest.approx(0.7)
        assert a.scale == 1.0

        assert not c.is_past and not c.is_current
        assert c.opacity == 1.0
        assert c.scale == 1.0
        assert c.color == "#FFFFFF"

    def test_highlight_disabled(self, words):
        style = _style(CaptionAnimation.KARAOKE, highlight_enabled=False)
        states = map_caption_frame(words, 1.5, style)
        assert states[1].scale == 1.0
        assert states[1].color == style.text_color


class TestFade:
    def test_current_fades_in_over_first_fifth(self, words):
        style = _style(CaptionAnimation.FADE)
        assert map_caption_frame(words, 0.1, style)[0].opacity == pytest.approx(0.5)
        assert map_caption_frame(words, 0.5, style)[0].opacity == pytest.approx(1.0)

    def test_past_visible_future_hidden(self, words):
        states = map_caption_frame(words, 1.5, _style(CaptionAnimation.FADE))
        assert states[0].opacity == 1.0
        assert states[2].opacity == 0.0

    def test_zero_duration_word_is_fully_visible(self):
        word = CaptionWord(id="z", text="z", start=1.0, end=1.0)
        states = map_caption_frame([word], 1.0, _style(CaptionAnimation.FADE))
        assert states[0].opacity == 1.0


class TestBounce:
    @pytest.mark.parametrize("t,expected", [
        (0.0, 1.0),
        (0.1, 1.125),
        (0.2, 1.25),
        (0.3, 1.125),
        (0.4, 1.0),
        (0.7, 1.0),
    ])
    def test_triangular_envelope(self, words, t, expected):
        states = map_caption_frame(words, t, _style(CaptionAnimation.BOUNCE, highlight_scale=1.25))
        assert states[0].scale == pytest.approx(expected)

    def test_non_current_words_unscaled(self, words):
        states = map_caption_frame(words, 1.2, _style(CaptionAnimation.BOUNCE))
        assert states[0].scale == 1.0
        assert states[2].scale == 1.0

    def test_recolors_current_and_dims_past(self, words):
        states = map_caption_frame(words, 1.2, _style(CaptionAnimation.BOUNCE, highlight_color=GOLD))
        assert states[1].color == GOLD
        assert states[0].opacity == pytest.approx(0.7)

    def test_envelope_helper(self):
        assert bounce_scale(0.2, 1.5) == pytest.approx(1.5)
        assert bounce_scale(1.0, 1.5) == 1.0


class TestWordByWord:
    def test_emits_up_to_current(self, words):
        states = map_caption_frame(words, 1.5, _style(CaptionAnimation.WORD_BY_WORD))
        assert [s.word_id for s in states] == ["a", "b"]
        assert states[1].scale == pytest.approx(1.25)

    def test_past_words_not_dimmed(self, words):
        states = map_caption_frame(words, 2.5, _style(CaptionAnimation.WORD_BY_WORD))
        assert [s.opacity for s in states] == [1.0, 1.0, 1.0]

    def test_gap_emits_started_words(self):
        gapped = [
            CaptionWord(id="a", text="a", start=0.0, end=1.0),
            CaptionWord(id="b", text="b", start=2.0, end=3.0),
        ]
        states = map_caption_frame(gapped, 1.5, _style(CaptionAnimation.WORD_BY_WORD))
        assert [s.word_id for s in states] == ["a"]

    def test_before_first_word_emits_nothing(self, words):
        assert map_caption_frame(words, -1.0, _style(CaptionAnimation.WORD_BY_WORD)) == []


class TestNone:
    def test_static_with_dimmed_past(self, words):
        states = map_caption_frame(words, 1.5, _style(CaptionAnimation.NONE))
        assert [s.opacity for s in states] == [pytest.approx(0.7), 1.0, 1.0]
        assert all(s.scale == 1.0 for s in states)

    def test_default_style(self, words):
        states = map_caption_frame(words, 1.5)
        assert len(states) == 3
        assert states[1].is_current


class TestWindowing:
    def test_long_transcript_is_windowed(self):
        many = [
            CaptionWord(id=str(i), text="w{}".format(i), start=float(i), end=float(i + 1))
            for i in range(20)
        ]
        states = map_caption_frame(many, 10.0, _style(CaptionAnimation.KARAOKE))
        assert [s.word_id for s in states] == [str(i) for i in range(6, 14)]

    def test_short_transcript_is_not_windowed(self):
        few = [
            CaptionWord(id=str(i), text="w", start=float(i * 10), end=float(i * 10 + 1))
            for i in range(12)
        ]
        assert len(visible_indices(few, 0.0)) == 12


class TestDeterminism:
    def test_same_inputs_same_output(self, words):
        style = get_preset("classic")
        assert map_caption_frame(words, 1.3, style) == map_caption_frame(words, 1.3, style)

    def test_seek_order_does_not_matter(self, words):
        style = get_preset("hormozi")
        forward = [map_caption_frame(words, t, style) for t in (0.5, 1.5, 2.5)]
        backward = [map_caption_frame(words, t, style) for t in (2.5, 1.5, 0.5)]
        assert forward == list(reversed(backward))


class TestStyleDecoration:
    def test_glow_on_current_word(self, words):
        style = _style(CaptionAnimation.KARAOKE, glow_enabled=True, glow_color="#00FFFF")
        states = map_caption_frame(words, 1.5, style)
        assert states[1].glow_color == "#00FFFF"
        assert states[0].glow_color is None

    def test_glow_falls_back_to_highlight_color(self, words):
        style = _style(CaptionAnimation.KARAOKE, glow_enabled=True, highlight_color="#FF0000")
        assert map_caption_frame(words, 1.5, style)[1].glow_color == "#FF0000"

    def test_uppercase_transform(self, words):
        style = _style(CaptionAnimation.NONE, text_transform="uppercase")
        assert [s.text for s in map_caption_frame(words, 0.5, style)] == ["HELLO", "BIG", "WORLD"]

    def test_to_dict_is_camel_case(self, words):
        state = map_caption_frame(words, 0.5)[0]
        assert set(state.to_dict()) == {
            "wordId", "text", "isCurrent", "isPast", "opacity", "scale", "color", "glowColor",
        }


class TestCaptionStyle:
    def test_from_dict_accepts_camel_case_and_percent_scale(self):
        style = CaptionStyle.from_dict({
            "animation": "karaoke",
            "highlightColor": "#FF0000",
            "highlightScale": 125,
            "unknownKey": True,
        })
        assert style.animation == CaptionAnimation.KARAOKE
        assert style.highlight_color == "#FF0000"
        assert style.highlight_scale == pytest.approx(1.25)

    def test_from_dict_keeps_factor_scale(self):
        assert CaptionStyle.from_dict({"highlight_scale": 1.5}).highlight_scale == 1.5

    def test_unknown_animation(self):
        with pytest.raises(ValueError):
            CaptionStyle(animation="spin")

    def test_string_animation_is_coerced(self):
        assert CaptionStyle(animation="word-by-word").animation == CaptionAnimation.WORD_BY_WORD

    def test_to_dict_serializes_animation_value(self):
        assert CaptionStyle(animation=CaptionAnimation.BOUNCE).to_dict()["animation"] == "bounce"


class TestPresets:
    def test_default_is_simple(self):
        assert get_preset("default") is PRESETS["simple"]

    def test_unknown_preset_lists_available(self):
        with pytest.raises(ValueError, match="hormozi"):
            get_preset("nope")

    def test_map_frame_accepts_preset_name(self, words):
        states = map_frame(words, 1.5, "gold-luxe")
        assert states[1].text == "BIG"
        assert states[1].glow_color == GOLD

    def test_every_preset_maps(self, words):
        for key in PRESETS:
            states = map_frame(words, 1.5, key)
            assert sum(1 for s in states if s.is_current) == 1
