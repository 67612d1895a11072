"""Tests for transcript JSON loading, validation and dumping.

WHY: Every session starts from an upstream transcript document. Bad
documents must fail with one readable TranscriptFormatError, and good
ones must survive a load/dump cycle with ids and confidences intact.

HOW:
  - TestParse: defaults, id generation, numeric ids
  - TestValidation: schema violations and their error locations
  - TestLoad: reading from disk, invalid JSON
  - TestDump: transcript_to_dict shape
"""

from __future__ import annotations

import json

import pytest

from caption_editor.core.transcript_io import (
    TranscriptFormatError,
    load_transcript,
    parse_transcript,
    transcript_to_dict,
    validate_transcript,
)


# ---------------------------------------------------------------------------
# TestParse
# ---------------------------------------------------------------------------


class TestParse:
    def test_sample_transcript(self, sample_transcript_dict):
        segments = parse_transcript(sample_transcript_dict)
        assert [s.id for s in segments] == ["s1", "s2"]
        assert segments[0].words[0].confidence == 0.9
        assert segments[1].words[3].text == "test"

    def test_missing_word_fields_get_defaults(self):
        segments = parse_transcript({
            "segments": [{
                "id": "a",
                "text": "one two",
                "start": 0,
                "end": 1,
                "words": [
                    {"text": "one", "start": 0, "end": 0.5},
                    {"text": "two", "start": 0.5, "end": 1},
                ],
            }]
        })
        words = segments[0].words
        assert [w.id for w in words] == ["a-w0", "a-w1"]
        assert all(w.confidence == 1.0 for w in words)
        assert isinstance(words[1].end, float)

    def test_numeric_ids_become_strings(self):
        segments = parse_transcript({
            "segments": [{
                "id": 7,
                "text": "x",
                "start": 0,
                "end": 1,
                "words": [{"id": 3, "text": "x", "start": 0, "end": 1}],
            }]
        })
        assert segments[0].id == "7"
        assert segments[0].words[0].id == "3"

    def test_segment_without_words(self):
        segments = parse_transcript({"segments": [{"id": "a", "text": "", "start": 1, "end": 2}]})
        assert segments[0].words == ()

    def test_empty_transcript(self):
        assert parse_transcript({"segments": []}) == ()


# ---------------------------------------------------------------------------
# TestValidation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_valid_document_passes(self, sample_transcript_dict):
        validate_transcript(sample_transcript_dict)

    def test_missing_segments_key(self):
        with pytest.raises(TranscriptFormatError, match="<root>"):
            validate_transcript({"words": []})

    def test_error_names_location(self, sample_transcript_dict):
        del sample_transcript_dict["segments"][1]["words"][2]["start"]
        with pytest.raises(TranscriptFormatError, match="segments/1/words/2"):
            parse_transcript(sample_transcript_dict)

    def test_negative_time_rejected(self, sample_transcript_dict):
        sample_transcript_dict["segments"][0]["start"] = -1
        with pytest.raises(TranscriptFormatError):
            parse_transcript(sample_transcript_dict)

    def test_confidence_out_of_range(self, sample_transcript_dict):
        sample_transcript_dict["segments"][0]["words"][0]["confidence"] = 1.5
        with pytest.raises(TranscriptFormatError):
            parse_transcript(sample_transcript_dict)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_transcript([])


# ---------------------------------------------------------------------------
# TestLoad
# ---------------------------------------------------------------------------


class TestLoad:
    def test_load_from_file(self, sample_transcript_file):
        segments = load_transcript(sample_transcript_file)
        assert len(segments) == 2

    def test_accepts_str_path(self, sample_transcript_file):
        assert load_transcript(str(sample_transcript_file))[0].text == "Hello world"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(TranscriptFormatError, match="not valid JSON"):
            load_transcript(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_transcript(tmp_path / "missing.json")


# ---------------------------------------------------------------------------
# TestDump
# ---------------------------------------------------------------------------


class TestDump:
    def test_dump_matches_sample_with_defaults(self, sample_transcript_dict):
        dumped = transcript_to_dict(parse_transcript(sample_transcript_dict))
        first_word = dumped["segments"][0]["words"][0]
        assert first_word == {
            "id": "s1-w0", "text": "Hello", "start": 0.0, "end": 1.0, "confidence": 0.9,
        }
        assert dumped["segments"][1]["words"][0]["confidence"] == 1.0

    def test_dump_is_loadable(self, sample_transcript_dict):
        segments = parse_transcript(sample_transcript_dict)
        dumped = json.loads(json.dumps(transcript_to_dict(segments)))
        assert parse_transcript(dumped) == segments
