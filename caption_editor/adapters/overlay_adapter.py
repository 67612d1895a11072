"""Adapter: transcript snapshot to caption overlay CaptionWord objects.

WHY: The caption overlay renders a flat word stream and knows nothing
about segments, confidence, or edit history. The editor keeps words
nested inside segments. This adapter flattens one into the other so the
two sides can evolve independently.

HOW: Walks segments in order and emits one CaptionWord per Word, keeping
id, text, start and end.

RULES:
- Input snapshot is never modified
- Segment order is preserved; segments without words contribute nothing
- Word ids pass through unchanged (the painter keys elements by them)
"""

from typing import List

from caption_overlay.models import CaptionWord
from caption_editor.core.ir import EditSnapshot


def snapshot_to_caption_words(snapshot: EditSnapshot) -> List[CaptionWord]:
    """Flatten a transcript snapshot into the overlay's word list."""
    return [
        CaptionWord(id=word.id, text=word.text, start=word.start, end=word.end)
        for segment in snapshot
        for word in segment.words
    ]
