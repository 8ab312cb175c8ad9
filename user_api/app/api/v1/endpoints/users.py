"""
User endpoints for API v1.

Each function serves one route of the table in ``router.py``.  By the
time it runs, the request has been logged and, for create and update,
the payload has passed validation; ``call.data`` then holds only the
validated fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from user_api.app.services.outcome import ErrorKind, Outcome
from user_api.app.services.user_handler import USER_NOT_FOUND, UserHandler


@dataclass
class Call:
    """Arguments extracted from a request for an endpoint."""

    user_id: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)


def _not_found() -> Outcome:
    return Outcome.error(ErrorKind.NOT_FOUND, USER_NOT_FOUND)


async def list_users(users: UserHandler, call: Call) -> Outcome:
    """Return every user (projected fields only)."""
    return await users.list_users()


async def get_user(users: UserHandler, call: Call) -> Outcome:
    if call.user_id is None:
        return _not_found()
    return await users.get_user(call.user_id)


async def create_user(users: UserHandler, call: Call) -> Outcome:
    """Create a user from a validated payload."""
    return await users.create_user(call.data)


async def update_user(users: UserHandler, call: Call) -> Outcome:
    """Update name, email and/or age of a user; omitted fields are kept."""
    if call.user_id is None:
        return _not_found()
    return await users.update_user(call.user_id, call.data)


async def delete_user(users: UserHandler, call: Call) -> Outcome:
    """Delete a user by ID."""
    if call.user_id is None:
        return _not_found()
    return await users.delete_user(call.user_id)
