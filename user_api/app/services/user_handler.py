"""
Business logic for the user resource.

``UserHandler`` implements the five user operations on top of a
``UserStore``.  Payloads reaching ``create_user`` and ``update_user`` have
already passed validation.  Every operation returns an ``Outcome`` and
handles its own store failures; no store detail is exposed to clients.
"""

import logging
from typing import Any, Dict

from user_api.app.services.outcome import ErrorKind, Outcome
from user_api.app.services.user_store import DuplicateEmailError, StoreError, UserStore
from user_api.app.services.validation import unique_violation


logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


class UserHandler:
    """Operations on the user resource."""

    def __init__(self, store: UserStore, validation_message: str = "Validation failed") -> None:
        self.store = store
        self.validation_message = validation_message

    def _duplicate_email(self) -> Outcome:
        return Outcome.invalid(self.validation_message, unique_violation("email").errors)

    async def list_users(self) -> Outcome:
        """Return all users, projected to id, name, email and age."""
        try:
            users = await self.store.list_users()
        except StoreError:
            logger.exception("Failed to list users")
            return Outcome.error(ErrorKind.STORE, "Failed to retrieve users")
        return Outcome.success([user.project().model_dump() for user in users])

    async def get_user(self, user_id: int) -> Outcome:
        try:
            user = await self.store.get_user(user_id)
        except StoreError:
            logger.exception("Failed to fetch user %s", user_id)
            return Outcome.error(ErrorKind.STORE, "Failed to retrieve user")
        if user is None:
            return Outcome.error(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return Outcome.success(user.project().model_dump())

    async def create_user(self, fields: Dict[str, Any]) -> Outcome:
        """Insert a validated user and return it with its new id (201).

        The unique index on ``users.email`` catches a concurrent insert of
        the same address; that case is reported like a validation failure.
        """
        try:
            user = await self.store.insert_user(fields)
        except DuplicateEmailError:
            return self._duplicate_email()
        except StoreError:
            logger.exception("Failed to create user")
            return Outcome.error(ErrorKind.STORE, "Failed to create user")
        return Outcome.success(user.model_dump(), status_code=201)

    async def update_user(self, user_id: int, fields: Dict[str, Any]) -> Outcome:
        """Apply only the supplied fields to an existing user."""
        try:
            if await self.store.get_user(user_id) is None:
                return Outcome.error(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
            user = await self.store.update_user(user_id, fields)
        except DuplicateEmailError:
            return self._duplicate_email()
        except StoreError:
            logger.exception("Failed to update user %s", user_id)
            return Outcome.error(ErrorKind.STORE, "Failed to update user")
        # Deleted between the lookup and the update.
        if user is None:
            return Outcome.error(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return Outcome.success(user.model_dump())

    async def delete_user(self, user_id: int) -> Outcome:
        try:
            if await self.store.get_user(user_id) is None:
                return Outcome.error(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
            deleted = await self.store.delete_user(user_id)
        except StoreError:
            logger.exception("Failed to delete user %s", user_id)
            return Outcome.error(ErrorKind.STORE, "Failed to delete user")
        if not deleted:
            return Outcome.error(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return Outcome.success({"message": "User deleted successfully"})
