"""Editing session: the one owner of a transcript's undo history.

WHY: The aligner and the history machine are pure building blocks. An
editor needs one object that applies a text edit through the aligner,
records the result in history, validates manual timing nudges, knows
which segments differ from the last saved state, and can render the
current words as a caption frame.

HOW: EditSession holds an EditHistory over EditSnapshot values plus a
baseline snapshot (the last state known to be persisted). Every edit
builds a new snapshot with dataclasses.replace and hands it to
EditHistory.set(). Undo/redo delegate to the history. pending_changes()
diffs present against baseline into TextUpdate / WordTimingUpdate
payloads.

RULES:
- All edits go through EditHistory.set(); nothing mutates a snapshot
- Whitespace-only text edits update the text but keep the words as they are
- Explicit timing adjustments are validated and rejected, never corrected
- sync_with_server() and confirm_saved() are the only places that reset
  history; both also move the baseline
- Single owner, single thread; the session service serializes access
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple, Union

from caption_editor.adapters.overlay_adapter import snapshot_to_caption_words
from caption_editor.config import HISTORY_LIMIT, MIN_WORD_DURATION_S
from caption_editor.core.aligner import needs_timing_recalculation, preserve_word_timing
from caption_editor.core.history import EditHistory
from caption_editor.core.ir import (
    EditSnapshot,
    Segment,
    TextUpdate,
    WordTimingUpdate,
    segment_bounds_from_words,
)
from caption_overlay import CaptionStyle, VisualWordState, map_frame

logger = logging.getLogger(__name__)

PendingChange = Union[TextUpdate, WordTimingUpdate]


class SessionError(ValueError):
    """Base class for rejected editing operations."""


class UnknownSegmentError(SessionError):
    """Raised when an edit names a segment id that is not in the transcript."""

    def __init__(self, segment_id: str) -> None:
        self.segment_id = segment_id
        super().__init__("Unknown segment: {}".format(segment_id))


class InvalidWordTimingError(SessionError):
    """Raised when an explicit word timing adjustment is not acceptable.

    RULES:
    - start and end must be finite, >= 0, and start < end
    - word_index must address an existing word of the segment
    - the new interval must not overlap the previous or next word
    """


class EditSession:
    """Editable transcript with bounded undo/redo and save tracking.

    Args:
        segments: Initial transcript segments (becomes present and baseline).
        history_limit: Maximum number of undo steps kept.
        min_duration: Minimum word duration passed to the aligner.
        similarity_threshold: Optional fuzzy-match ratio for the aligner.
    """

    def __init__(
        self,
        segments: Sequence[Segment] = (),
        history_limit: int = HISTORY_LIMIT,
        min_duration: float = MIN_WORD_DURATION_S,
        similarity_threshold: Optional[float] = None,
    ) -> None:
        snapshot: EditSnapshot = tuple(segments)
        self._history: EditHistory[EditSnapshot] = EditHistory(snapshot, limit=history_limit)
        self._baseline: EditSnapshot = snapshot
        self.min_duration = min_duration
        self.similarity_threshold = similarity_threshold

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def segments(self) -> EditSnapshot:
        return self._history.present

    @property
    def baseline(self) -> EditSnapshot:
        return self._baseline

    @property
    def history(self) -> EditHistory[EditSnapshot]:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def is_dirty(self) -> bool:
        return self.segments != self._baseline

    def segment(self, segment_id: str) -> Segment:
        return self.segments[self._index_of(segment_id)]

    def _index_of(self, segment_id: str) -> int:
        for index, segment in enumerate(self.segments):
            if segment.id == segment_id:
                return index
        raise UnknownSegmentError(segment_id)

    def _replace_segment(self, index: int, segment: Segment) -> bool:
        snapshot = self.segments[:index] + (segment,) + self.segments[index + 1:]
        return self._history.set(snapshot)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def update_segment_text(self, segment_id: str, text: str) -> bool:
        """Replace a segment's text, keeping timing for unchanged words.

        Returns True if a new history entry was recorded.

        Raises:
            UnknownSegmentError: If segment_id is not in the transcript.
        """
        index = self._index_of(segment_id)
        segment = self.segments[index]

        if not needs_timing_recalculation(segment.text, text):
            changed = self._replace_segment(index, replace(segment, text=text))
            logger.debug("Segment %s: whitespace-only edit (changed=%s)", segment_id, changed)
            return changed

        words = preserve_word_timing(
            segment.words,
            text,
            segment.start,
            segment.end,
            min_duration=self.min_duration,
            similarity_threshold=self.similarity_threshold,
            id_prefix="{}-w".format(segment.id),
        )
        updated = segment_bounds_from_words(replace(segment, text=text, words=tuple(words)))
        changed = self._replace_segment(index, updated)
        logger.debug(
            "Segment %s: text edit realigned %d -> %d words",
            segment_id, len(segment.words), len(words),
        )
        return changed

    def update_word_timing(
        self,
        segment_id: str,
        word_index: int,
        start: float,
        end: float,
    ) -> bool:
        """Set one word's start/end explicitly.

        Returns True if a new history entry was recorded.

        Raises:
            UnknownSegmentError: If segment_id is not in the transcript.
            InvalidWordTimingError: If the timing is invalid for that word.
        """
        index = self._index_of(segment_id)
        segment = self.segments[index]
        words = segment.words

        if word_index < 0 or word_index >= len(words):
            raise InvalidWordTimingError(
                "Word index {} out of range for segment {} ({} words)".format(
                    word_index, segment_id, len(words)
                )
            )
        if not (math.isfinite(start) and math.isfinite(end)):
            raise InvalidWordTimingError(
                "Word timing must be finite, got {}-{}".format(start, end)
            )
        if start < 0 or end < 0:
            raise InvalidWordTimingError(
                "Word timing must be non-negative, got {}-{}".format(start, end)
            )
        if start >= end:
            raise InvalidWordTimingError(
                "Word start must be before end, got {}-{}".format(start, end)
            )
        if word_index > 0 and start < words[word_index - 1].end:
            raise InvalidWordTimingError(
                "Word {} would overlap the previous word (ends at {})".format(
                    word_index, words[word_index - 1].end
                )
            )
        if word_index < len(words) - 1 and end > words[word_index + 1].start:
            raise InvalidWordTimingError(
                "Word {} would overlap the next word (starts at {})".format(
                    word_index, words[word_index + 1].start
                )
            )

        new_word = replace(words[word_index], start=start, end=end)
        new_words = words[:word_index] + (new_word,) + words[word_index + 1:]
        updated = segment_bounds_from_words(replace(segment, words=new_words))
        changed = self._replace_segment(index, updated)
        logger.debug(
            "Segment %s word %d: timing set to %.3f-%.3f", segment_id, word_index, start, end
        )
        return changed

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        changed = self._history.undo()
        logger.debug("Undo (changed=%s, past=%d)", changed, self._history.history_size)
        return changed

    def redo(self) -> bool:
        changed = self._history.redo()
        logger.debug("Redo (changed=%s, future=%d)", changed, self._history.redo_size)
        return changed

    def clear_history(self) -> bool:
        return self._history.clear_history()

    def sync_with_server(self, segments: Sequence[Segment]) -> None:
        """Adopt authoritative segments: new present and baseline, empty history."""
        snapshot: EditSnapshot = tuple(segments)
        self._history.reset(snapshot)
        self._baseline = snapshot
        logger.info("Synced %d segments; history cleared", len(snapshot))

    def confirm_saved(self) -> None:
        """Mark the present state as persisted."""
        self.sync_with_server(self.segments)

    # ------------------------------------------------------------------
    # Downstream
    # ------------------------------------------------------------------

    def pending_changes(self) -> List[PendingChange]:
        """Save payloads that bring the baseline up to the present state.

        RULES:
        - A segment whose text differs (or is new) yields one TextUpdate
        - A segment with identical text yields one WordTimingUpdate per word
          whose start or end differs from the baseline
        - Segments removed since the baseline are not reported
        """
        baseline = {segment.id: segment for segment in self._baseline}
        changes: List[PendingChange] = []
        for segment in self.segments:
            old = baseline.get(segment.id)
            if old is None or old.text != segment.text:
                changes.append(TextUpdate(segment_id=segment.id, text=segment.text))
                continue
            if old.words == segment.words:
                continue
            for word_index, (old_word, word) in enumerate(zip(old.words, segment.words)):
                if old_word.start != word.start or old_word.end != word.end:
                    changes.append(
                        WordTimingUpdate(
                            segment_id=segment.id,
                            word_index=word_index,
                            start=word.start,
                            end=word.end,
                        )
                    )
        return changes

    def frame(
        self,
        current_time: float,
        style: Optional[Union[CaptionStyle, str]] = None,
    ) -> List[VisualWordState]:
        """Visual state of the present transcript's words at current_time."""
        return map_frame(snapshot_to_caption_words(self.segments), current_time, style)

    def history_counts(self) -> Tuple[int, int]:
        """(undo steps, redo steps) currently available."""
        return self._history.history_size, self._history.redo_size
