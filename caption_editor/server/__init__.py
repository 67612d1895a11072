"""HTTP session service for the caption editor (FastAPI).

Exposes EditSession operations over HTTP for local preview and editing
front ends. Sessions live in memory only and expire when idle.
"""
