"""Word timing realignment after a segment's text is edited.

WHY: When a user retypes or fixes a transcript segment, the words that did
not change must keep the timing the transcription produced. Throwing the
old timing away and spreading words evenly would make every caption drift
from the audio after a single typo fix.

HOW: The new text is tokenized with the same whitespace rule that produced
the old words. A longest-common-subsequence diff over normalized tokens
(lowercased, punctuation stripped) yields match / insert / delete
operations. Matched tokens copy the old word's start/end verbatim. Each
maximal run of inserted tokens shares the time gap between its two anchors
(matched words, or the segment bounds at either end). A final pass clamps
the result into a strictly increasing, non-overlapping word list that
starts at the segment start and ends at the segment end.

RULES:
- Tokens are whitespace-delimited; punctuation stays attached ("world!")
- Comparison is case-insensitive and punctuation-insensitive
- Matched words keep start/end exactly unless the final clamp must move them
- Inserted runs split their gap evenly; every inserted word gets at least
  min_duration, reclaimed first from the neighbouring anchors' slack
  (split evenly between them), then by compressing the run
- Output ids are fresh: "{id_prefix}{index}"
- Malformed input timing (overlaps, inverted words) is corrected, never raised
- Empty new text returns []; empty old words fall back to even distribution
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Callable, List, Optional, Sequence

from caption_editor.config import (
    FUZZY_MATCH_CONFIDENCE_FACTOR,
    INTERPOLATED_CONFIDENCE,
    MIN_WORD_DURATION_S,
)
from caption_editor.core.ir import Word, normalize_whitespace

logger = logging.getLogger(__name__)

# Characters ignored when comparing tokens (anything that is not a word
# character or whitespace).
_PUNCTUATION_RE = re.compile(r"[^\w\s]")

MATCH = "match"
INSERT = "insert"
DELETE = "delete"


@dataclass(frozen=True)
class WordOp:
    """One step of the old → new token alignment.

    old_index is None for inserts; new_index is None for deletes.
    """

    kind: str
    old_index: Optional[int] = None
    new_index: Optional[int] = None


@dataclass
class _Slot:
    """Mutable timing slot for one output token while runs are placed."""

    text: str
    start: float
    end: float
    confidence: float
    matched: bool


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def tokenize(text: str) -> List[str]:
    """Split segment text into word tokens (whitespace rule)."""
    return text.split()


def comparison_key(token: str) -> str:
    """Normalize a token for matching.

    Pure-punctuation tokens ("-", "...") keep their lowercased form so
    they can still match each other.
    """
    stripped = _PUNCTUATION_RE.sub("", token).casefold()
    return stripped if stripped else token.casefold()


def needs_timing_recalculation(old_text: str, new_text: str) -> bool:
    """Return False when an edit only changed whitespace.

    WHY: Most keystrokes that reach the editor (trailing spaces, double
    spaces, reflowed lines) leave every word untouched. Skipping the
    alignment for those keeps the hot path cheap.

    RULES:
    - Texts are trimmed and internal whitespace collapsed before comparing
    - Case changes count as changes (the aligner still keeps their timing)
    """
    return normalize_whitespace(old_text) != normalize_whitespace(new_text)


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def _token_matcher(
    similarity_threshold: Optional[float],
) -> Callable[[str, str], bool]:
    if similarity_threshold is None:
        return lambda a, b: a == b

    def _matches(a: str, b: str) -> bool:
        if a == b:
            return True
        return SequenceMatcher(None, a, b).ratio() >= similarity_threshold

    return _matches


def compute_word_diff(
    old_texts: Sequence[str],
    new_tokens: Sequence[str],
    similarity_threshold: Optional[float] = None,
) -> List[WordOp]:
    """Compute match/insert/delete operations between two token sequences.

    WHY: The timing policy only needs to know which new tokens correspond
    to which old words. An LCS keeps the largest possible set of matched
    words in order, so the most timing survives an edit.

    HOW: Suffix-table LCS (dp[i][j] = LCS of old[i:] and new[j:]), then a
    forward walk that emits a match whenever the tokens match, otherwise
    drops whichever side keeps the longer remaining LCS.

    RULES:
    - Tokens are compared by comparison_key()
    - similarity_threshold (0-1) additionally matches tokens whose
      difflib ratio reaches the threshold, so typo fixes keep timing
    - On ties a delete is emitted before an insert
    - Matches appear in increasing old and new index order
    """
    old_keys = [comparison_key(t) for t in old_texts]
    new_keys = [comparison_key(t) for t in new_tokens]
    matches = _token_matcher(similarity_threshold)

    m = len(old_keys)
    n = len(new_keys)
    equal = [[matches(old_keys[i], new_keys[j]) for j in range(n)] for i in range(m)]

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        row = dp[i]
        below = dp[i + 1]
        for j in range(n - 1, -1, -1):
            if equal[i][j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops: List[WordOp] = []
    i = j = 0
    while i < m and j < n:
        if equal[i][j]:
            ops.append(WordOp(MATCH, old_index=i, new_index=j))
            i += 1
            j += 1
        elif dp[i + 1][j] >= dp[i][j + 1]:
            ops.append(WordOp(DELETE, old_index=i))
            i += 1
        else:
            ops.append(WordOp(INSERT, new_index=j))
            j += 1
    while i < m:
        ops.append(WordOp(DELETE, old_index=i))
        i += 1
    while j < n:
        ops.append(WordOp(INSERT, new_index=j))
        j += 1
    return ops


# ---------------------------------------------------------------------------
# Timing assignment
# ---------------------------------------------------------------------------


def distribute_evenly(
    tokens: Sequence[str],
    start: float,
    end: float,
    confidence: float = INTERPOLATED_CONFIDENCE,
) -> List[_Slot]:
    """Spread tokens contiguously and evenly across [start, end]."""
    if not tokens:
        return []
    step = (end - start) / len(tokens)
    return [
        _Slot(
            text=token,
            start=start + step * index,
            end=start + step * (index + 1),
            confidence=confidence,
            matched=False,
        )
        for index, token in enumerate(tokens)
    ]


def _slack_before(anchor: Optional[_Slot], left: float, min_duration: float) -> float:
    if anchor is None:
        return 0.0
    return max(left - anchor.start - min_duration, 0.0)


def _slack_after(anchor: Optional[_Slot], right: float, min_duration: float) -> float:
    if anchor is None:
        return 0.0
    return max(anchor.end - right - min_duration, 0.0)


def _place_run(
    tokens: Sequence[str],
    before: Optional[_Slot],
    after: Optional[_Slot],
    segment_start: float,
    segment_end: float,
    min_duration: float,
) -> List[_Slot]:
    """Assign timing to one maximal run of inserted tokens.

    WHY: Inserted words have no timing of their own. The only honest
    source is the time between the words around them.

    HOW: The run occupies [before.end, after.start] (segment bounds stand
    in for missing anchors). If that gap is shorter than
    len(tokens) * min_duration, the deficit is reclaimed from the anchors:
    half from each, capped by each anchor's slack above min_duration, with
    any shortfall taken from whichever anchor still has slack. Anchors are
    trimmed in place. Whatever span results is then split evenly.

    RULES:
    - Segment bounds are never moved; only anchor words give up time
    - An anchor never shrinks below min_duration
    - If both anchors run out of slack the run is compressed evenly
    """
    left = before.end if before is not None else segment_start
    right = after.start if after is not None else segment_end
    if right < left:
        # Overlapping anchors; the run starts where the earlier one ends.
        right = left

    deficit = len(tokens) * min_duration - (right - left)
    if deficit > 0:
        slack_b = _slack_before(before, left, min_duration)
        slack_a = _slack_after(after, right, min_duration)
        take_b = min(deficit / 2.0, slack_b)
        take_a = min(deficit / 2.0, slack_a)
        remainder = deficit - take_b - take_a
        extra_b = min(remainder, slack_b - take_b)
        take_b += extra_b
        remainder -= extra_b
        take_a += min(remainder, slack_a - take_a)

        if take_b > 0 and before is not None:
            left -= take_b
            before.end = left
        if take_a > 0 and after is not None:
            right += take_a
            after.start = right

    return distribute_evenly(tokens, left, right)


def _fill_inserted_runs(
    slots: List[Optional[_Slot]],
    tokens: Sequence[str],
    segment_start: float,
    segment_end: float,
    min_duration: float,
) -> None:
    """Fill every None slot by placing maximal runs between matched anchors."""
    n = len(slots)
    i = 0
    while i < n:
        if slots[i] is not None:
            i += 1
            continue
        run_start = i
        while i < n and slots[i] is None:
            i += 1
        before = slots[run_start - 1] if run_start > 0 else None
        after = slots[i] if i < n else None
        placed = _place_run(
            tokens[run_start:i], before, after, segment_start, segment_end, min_duration
        )
        slots[run_start:i] = placed


def _finalize(
    slots: List[_Slot],
    segment_start: float,
    segment_end: float,
    min_duration: float,
    id_prefix: str,
) -> List[Word]:
    """Clamp slots into a valid word list and assign fresh ids.

    WHY: Upstream timing is best-effort. Overlaps, inverted words, or
    words outside the segment must be corrected before anyone renders them.

    HOW: A forward pass pushes each word to start no earlier than the
    previous end and last at least its floor. A backward pass pulls words
    back inside the segment end. First start and last end are then pinned
    to the segment bounds.

    RULES:
    - Degenerate bounds (end <= start) widen to start + n * min_duration
    - The floor is min_duration, reduced to span / n when the segment is
      too short to give every word min_duration
    - Matched words that were already positive and shorter than the floor
      keep their own duration as floor, so valid input is left untouched
    """
    n = len(slots)
    if segment_end <= segment_start:
        segment_end = segment_start + n * min_duration
    span = segment_end - segment_start
    floor = min(min_duration, span / n)

    starts: List[float] = []
    ends: List[float] = []
    floors: List[float] = []
    for slot in slots:
        starts.append(min(max(slot.start, segment_start), segment_end))
        ends.append(min(max(slot.end, segment_start), segment_end))
        own = slot.end - slot.start
        if slot.matched and own > 0:
            floors.append(min(own, floor))
        else:
            floors.append(floor)

    prev_end = segment_start
    for k in range(n):
        starts[k] = max(starts[k], prev_end)
        if ends[k] - starts[k] < floors[k]:
            ends[k] = starts[k] + floors[k]
        prev_end = ends[k]

    next_start = segment_end
    for k in range(n - 1, -1, -1):
        ends[k] = min(ends[k], next_start)
        if ends[k] - starts[k] < floors[k]:
            starts[k] = ends[k] - floors[k]
        next_start = starts[k]

    starts[0] = segment_start
    ends[-1] = segment_end

    return [
        Word(
            id="{}{}".format(id_prefix, index),
            text=slot.text,
            start=starts[index],
            end=ends[index],
            confidence=slot.confidence,
        )
        for index, slot in enumerate(slots)
    ]


def _is_malformed(words: Sequence[Word]) -> bool:
    """True if any word is inverted or starts before the previous one ends."""
    prev_end = None
    for word in words:
        if word.duration < 0:
            return True
        if prev_end is not None and word.start < prev_end:
            return True
        prev_end = word.end
    return False


def preserve_word_timing(
    old_words: Sequence[Word],
    new_text: str,
    segment_start: float,
    segment_end: float,
    min_duration: float = MIN_WORD_DURATION_S,
    similarity_threshold: Optional[float] = None,
    id_prefix: str = "w-",
) -> List[Word]:
    """Build a new word list for edited text, keeping old timing where possible.

    WHY: This is the single entry point the editing session calls after a
    text edit. It guarantees that untouched words keep their timing and
    that the result is always renderable.

    HOW: tokenize → compute_word_diff → copy timing for matches →
    _fill_inserted_runs for inserts → _finalize.

    RULES:
    - Zero tokens → [] (the caller decides whether to drop the segment)
    - No old words → tokens spread evenly across the segment
    - Matched words keep the old confidence (scaled by 0.8 for fuzzy matches);
      inserted words get INTERPOLATED_CONFIDENCE

    Args:
        old_words: The segment's current words (any order, any quality).
        new_text: The edited segment text.
        segment_start: Segment start time in seconds.
        segment_end: Segment end time in seconds.
        min_duration: Shortest duration assigned to a word.
        similarity_threshold: Optional difflib ratio for fuzzy matching.
        id_prefix: Prefix for the fresh word ids.

    Returns:
        New Word list ordered by start.
    """
    tokens = tokenize(new_text)
    if not tokens:
        return []

    old_words = list(old_words)
    if _is_malformed(old_words):
        logger.warning(
            "Correcting malformed word timing (%d words, segment %.3f-%.3f)",
            len(old_words), segment_start, segment_end,
        )
    if not old_words:
        even = distribute_evenly(tokens, segment_start, segment_end)
        return _finalize(even, segment_start, segment_end, min_duration, id_prefix)

    ops = compute_word_diff(
        [w.text for w in old_words], tokens, similarity_threshold
    )

    slots: List[Optional[_Slot]] = [None] * len(tokens)
    for op in ops:
        if op.kind != MATCH:
            continue
        old = old_words[op.old_index]
        token = tokens[op.new_index]
        confidence = old.confidence
        if comparison_key(old.text) != comparison_key(token):
            confidence *= FUZZY_MATCH_CONFIDENCE_FACTOR
        slots[op.new_index] = _Slot(
            text=token,
            start=old.start,
            end=old.end,
            confidence=confidence,
            matched=True,
        )

    _fill_inserted_runs(slots, tokens, segment_start, segment_end, min_duration)
    return _finalize(slots, segment_start, segment_end, min_duration, id_prefix)
