"""
Request/response logging.

``RequestLogger`` writes one ``Request`` record before a request is
handled and one ``Response`` record after the response is built.  Records
are serialised as JSON and emitted at INFO on the logger passed in,
normally the ``requests`` channel.

Request bodies are only logged for non-GET requests that do not upload
files, with password fields removed.  Response bodies longer than
``max_content_length`` characters are replaced by a placeholder.  A
failure while logging never affects the request.
"""

import json
import logging
from datetime import datetime
from http import HTTPStatus
from typing import Any, Dict, Optional

from fastapi import Request


logger = logging.getLogger(__name__)

REDACTED_FIELDS = frozenset({"password", "password_confirmation"})
MAX_CONTENT_LENGTH = 10000
TOO_LARGE = "[Content too large to log]"


def _now() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def status_text(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def has_file_payload(request: Request) -> bool:
    """Whether the request body is an upload rather than JSON.

    The API only decodes JSON bodies and never parses multipart forms,
    so any ``multipart/form-data`` request counts as a file payload and
    its body is left out of the record, whether or not a file part is
    actually present.
    """
    content_type = request.headers.get("content-type", "")
    return content_type.startswith("multipart/form-data")


class RequestLogger:
    """Logs every request/response pair on a single channel."""

    def __init__(self, channel: logging.Logger, max_content_length: int = MAX_CONTENT_LENGTH) -> None:
        self.channel = channel
        self.max_content_length = max_content_length

    def _emit(self, message: str, data: Dict[str, Any]) -> None:
        self.channel.info(
            "%s %s",
            message,
            json.dumps(data, default=str, ensure_ascii=False),
            extra={"context": data},
        )

    def log_request(self, request: Request, payload: Optional[Dict[str, Any]] = None) -> None:
        """Record request metadata and, where allowed, its input."""
        try:
            data: Dict[str, Any] = {
                "time": _now(),
                "ip": request.client.host if request.client else None,
                "method": request.method,
                "url": str(request.url),
                "user_agent": request.headers.get("user-agent"),
                "headers": dict(request.headers),
            }
            if request.method != "GET" and not has_file_payload(request):
                body = {**request.query_params, **(payload or {})}
                data["body"] = {
                    key: value for key, value in body.items() if key not in REDACTED_FIELDS
                }
            self._emit("Request", data)
        except Exception:
            logger.warning("Could not log request", exc_info=True)

    def log_response(self, request: Request, status_code: int, content: str) -> None:
        """Record the response status and body."""
        try:
            if len(content) > self.max_content_length:
                content = TOO_LARGE
            self._emit(
                "Response",
                {
                    "time": _now(),
                    "url": str(request.url),
                    "status": status_code,
                    "status_text": status_text(status_code),
                    "content": content,
                },
            )
        except Exception:
            logger.warning("Could not log response", exc_info=True)
