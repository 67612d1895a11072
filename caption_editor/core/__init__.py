"""Core editing modules: IR, aligner, history, session, transcript I/O.

WHY: The core package holds the timing-critical logic of the editor. It
is consumed by the session service and the CLI and has no knowledge of
either.

HOW: ir.py defines the immutable data structures, aligner.py rebuilds
word timing after text edits, history.py holds the undo/redo reducer,
session.py combines them into an editing session, transcript_io.py
loads and dumps the JSON input format.

RULES:
- IR dataclasses are the contract; change with care
- No I/O outside transcript_io.py
"""
