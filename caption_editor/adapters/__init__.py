"""Adapter modules for converting between the editor IR and external libraries.

WHY: The editor IR (Word, Segment, EditSnapshot) uses a different data
model than the caption overlay library (caption_overlay.CaptionWord).
Adapters bridge these representations so each side can evolve
independently.

RULES:
- Adapters are pure data transformations, no I/O, no side effects
- Adapters must not modify the source IR objects
"""

from caption_editor.adapters.overlay_adapter import snapshot_to_caption_words

__all__ = ["snapshot_to_caption_words"]
