"""Session service client package: HTTP interface to caption_editor.server.

WHY: Tools that drive editing sessions remotely need one typed entry
point instead of hand-built requests.

HOW: SessionClient wraps httpx.Client; SessionAPIError carries non-2xx
responses.

RULES:
- All HTTP calls to the session service go through SessionClient
"""

from caption_editor.api.client import SessionAPIError, SessionClient

__all__ = ["SessionAPIError", "SessionClient"]
