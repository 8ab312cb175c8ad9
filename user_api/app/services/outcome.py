"""
Result values produced by request handlers.

An ``Outcome`` is a status code plus a JSON-serialisable body.  Handlers
return outcomes instead of raising, and the dispatcher turns them into
HTTP responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    STORE = "store"
    UNHANDLED = "unhandled"


STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 422,
    ErrorKind.STORE: 500,
    ErrorKind.UNHANDLED: 500,
}


@dataclass
class Outcome:
    status_code: int
    body: Any

    @classmethod
    def success(cls, body: Any, status_code: int = 200) -> "Outcome":
        return cls(status_code, body)

    @classmethod
    def error(cls, kind: ErrorKind, description: str) -> "Outcome":
        return cls(STATUS_CODES[kind], {"error": description})

    @classmethod
    def invalid(cls, message: str, errors: Dict[str, List[str]]) -> "Outcome":
        return cls(STATUS_CODES[ErrorKind.VALIDATION], {"message": message, "errors": errors})
