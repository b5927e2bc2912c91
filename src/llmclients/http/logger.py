"""
HTTP traffic logger for auditing API calls.

Writes every outgoing request, every received response and every
streamed event chunk to a file, one line per entry, with timestamps,
session IDs, direction indicators and full payloads.
"""

import json
from collections.abc import Mapping
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any
from typing import Protocol

SENSITIVE_HEADERS = frozenset({"authorization", "x-api-key", "api-key"})


class HTTPLogger(Protocol):
    """Protocol for HTTP traffic logging callbacks."""

    def log_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any,
        session_id: str | None = None,
    ) -> None:
        """Log an outgoing HTTP request."""
        ...

    def log_response(
        self,
        url: str,
        status: int,
        body: str,
        session_id: str | None = None,
    ) -> None:
        """Log an incoming HTTP response."""
        ...

    def log_stream_chunk(
        self,
        url: str,
        data: str,
        session_id: str | None = None,
    ) -> None:
        """Log one decoded chunk of a streamed response."""
        ...


def mask_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Mask credential-bearing header values."""
    masked = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            # Keep the first 10 and last 4 chars of long values
            masked[key] = value[:10] + "..." + value[-4:] if len(value) > 14 else "***"
        else:
            masked[key] = value
    return masked


def _maybe_json(data: str) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return data


class FileHTTPLogger:
    """
    Logs HTTP traffic to a file.

    Format:
        [timestamp] [session_id] [direction] [type] payload

    Where:
        - timestamp: ISO 8601 format
        - session_id: The session ID or "no-session"
        - direction: >>> for outgoing, <<< for incoming
        - type: REQUEST, RESPONSE, or CHUNK
        - payload: JSON-formatted data
    """

    def __init__(self, log_file: Path):
        """
        Initialize the file logger.

        Args:
            log_file: Path to the log file. Parent directories will be created
                      if they don't exist.
        """
        self.log_file = log_file
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.log_file.touch(exist_ok=True)

    def _write(self, session_id: str | None, marker: str, payload: dict[str, Any]) -> None:
        timestamp = datetime.now(UTC).isoformat(timespec="milliseconds")
        sid = session_id or "no-session"
        entry = f"[{timestamp}] [{sid}] {marker} {json.dumps(payload, ensure_ascii=False, default=str)}"
        with self.log_file.open("a", encoding="utf-8") as f:
            f.write(entry + "\n")

    def log_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any,
        session_id: str | None = None,
    ) -> None:
        """Log an outgoing HTTP request."""
        payload = {
            "method": method,
            "url": url,
            "headers": mask_headers(headers),
            "body": _maybe_json(body) if isinstance(body, str) else body,
        }
        self._write(session_id, ">>> REQUEST", payload)

    def log_response(
        self,
        url: str,
        status: int,
        body: str,
        session_id: str | None = None,
    ) -> None:
        """Log an incoming HTTP response."""
        self._write(session_id, "<<< RESPONSE", {"url": url, "status": status, "body": _maybe_json(body)})

    def log_stream_chunk(
        self,
        url: str,
        data: str,
        session_id: str | None = None,
    ) -> None:
        """Log one decoded chunk of a streamed response."""
        self._write(session_id, "<<< CHUNK", {"url": url, "data": _maybe_json(data)})
