"""HTTP client for the caption editor session service.

WHY: Scripts, tests, and other tools drive editing sessions over HTTP.
Wrapping the routes in one client keeps URL building and error handling
out of every caller.

HOW: Uses a synchronous httpx.Client. Each route is one method returning
the decoded JSON body. Non-2xx responses raise SessionAPIError carrying
the status code and the service's detail message. An existing
httpx.Client (for example FastAPI's TestClient) can be injected; it is
then used as-is and not closed by this class.

RULES:
- Use as a context manager, or call close() when done
- base_url defaults to API_URL from config
- Error messages come from the ErrorResponse "detail" field when present
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from caption_editor.config import API_URL

_DEFAULT_TIMEOUT_S = 30.0


class SessionAPIError(Exception):
    """Raised when the session service returns an error response.

    RULES:
    - Always include status_code and message
    - message is the response "detail" or the raw body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Session API error {status_code}: {message}")


class SessionClient:
    """Synchronous client for the session service routes.

    Args:
        base_url: Service root URL. Ignored when http is given.
        http: Optional pre-configured httpx.Client to use.
        timeout: Request timeout in seconds for the owned client.
    """

    def __init__(
        self,
        base_url: str | None = None,
        http: httpx.Client | None = None,
        timeout: float = _DEFAULT_TIMEOUT_S,
    ) -> None:
        self._owns_http = http is None
        if http is None:
            http = httpx.Client(base_url=(base_url or API_URL).rstrip("/"), timeout=timeout)
        self._http = http

    def __enter__(self) -> SessionClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._http.request(method, path, **kwargs)
        if resp.status_code >= 400:
            raise SessionAPIError(resp.status_code, _error_detail(resp))
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(
        self,
        segments: List[Dict[str, Any]],
        name: str | None = None,
        similarity_threshold: float | None = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"segments": segments}
        if name is not None:
            body["name"] = name
        if similarity_threshold is not None:
            body["similarity_threshold"] = similarity_threshold
        return self._request("POST", "/sessions", json=body)

    def get_session(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", "/sessions/{}".format(session_id))

    def delete_session(self, session_id: str) -> None:
        self._request("DELETE", "/sessions/{}".format(session_id))

    # ------------------------------------------------------------------
    # Edits and history
    # ------------------------------------------------------------------

    def update_segment_text(self, session_id: str, segment_id: str, text: str) -> Dict[str, Any]:
        return self._request(
            "PUT",
            "/sessions/{}/segments/{}/text".format(session_id, segment_id),
            json={"text": text},
        )

    def update_word_timing(
        self,
        session_id: str,
        segment_id: str,
        word_index: int,
        start: float,
        end: float,
    ) -> Dict[str, Any]:
        return self._request(
            "PUT",
            "/sessions/{}/segments/{}/words/{}/timing".format(session_id, segment_id, word_index),
            json={"start": start, "end": end},
        )

    def undo(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", "/sessions/{}/undo".format(session_id))

    def redo(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", "/sessions/{}/redo".format(session_id))

    def clear_history(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", "/sessions/{}/clear-history".format(session_id))

    def sync(self, session_id: str, segments: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request(
            "POST", "/sessions/{}/sync".format(session_id), json={"segments": segments}
        )

    def confirm_save(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", "/sessions/{}/confirm-save".format(session_id))

    def pending_changes(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", "/sessions/{}/changes".format(session_id))

    # ------------------------------------------------------------------
    # Captions and service
    # ------------------------------------------------------------------

    def frame(self, session_id: str, t: float, preset: str = "default") -> Dict[str, Any]:
        return self._request(
            "GET",
            "/sessions/{}/frame".format(session_id),
            params={"t": t, "preset": preset},
        )

    def presets(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/presets")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")


def _error_detail(resp: httpx.Response) -> str:
    """Extract the ErrorResponse detail, falling back to the body text."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict) and "detail" in data:
        detail = data["detail"]
        return detail if isinstance(detail, str) else str(detail)
    return resp.text
