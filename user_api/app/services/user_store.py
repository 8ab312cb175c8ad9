"""
Persistence of user rows.

``UserStore`` is the only component that talks to the database.  Each
operation opens its own connection and runs as a single transaction, so
row-level atomicity is provided by SQLite.  All queries use parameterized
statements, and only the columns in ``WRITABLE_FIELDS`` are ever written.

Absent rows are a normal result (``None``/``False``).  Database failures
are raised as ``StoreError``; a violated e-mail uniqueness constraint is
raised as ``DuplicateEmailError``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from user_api.app.core.db import get_connection
from user_api.app.schemas.user import WRITABLE_FIELDS, UserRecord


logger = logging.getLogger(__name__)

_COLUMNS = "id, name, email, age, created_at, updated_at"


class StoreError(Exception):
    """The database could not complete an operation."""


class DuplicateEmailError(StoreError):
    """Another user already has this e-mail address."""


def _writable(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: fields[key] for key in WRITABLE_FIELDS if key in fields}


def _wrap(exc: sqlite3.Error) -> StoreError:
    message = str(exc)
    if isinstance(exc, sqlite3.IntegrityError) and "UNIQUE" in message and "users.email" in message:
        return DuplicateEmailError(str(exc))
    return StoreError(str(exc))


class UserStore:
    """Data access for the ``users`` table."""

    def __init__(self, database_path: str) -> None:
        self.database_path = database_path

    def _connect(self) -> sqlite3.Connection:
        try:
            return get_connection(self.database_path)
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            age=row["age"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    async def list_users(self) -> List[UserRecord]:
        """Return all users ordered by id."""
        conn = self._connect()
        try:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM users ORDER BY id").fetchall()
            return [self._row_to_user(row) for row in rows]
        except sqlite3.Error as e:
            raise _wrap(e) from e
        finally:
            conn.close()

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        """Retrieve a user by ID, or ``None`` if there is no such row."""
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return self._row_to_user(row) if row else None
        except sqlite3.Error as e:
            raise _wrap(e) from e
        finally:
            conn.close()

    async def insert_user(self, fields: Dict[str, Any]) -> UserRecord:
        """Insert a user and return the stored row including its new id."""
        values = _writable(fields)
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO users ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            user_id = cursor.lastrowid
            row = cursor.execute(
                f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            conn.commit()
            logger.info("Created user %s", user_id)
            return self._row_to_user(row)
        except sqlite3.Error as e:
            conn.rollback()
            raise _wrap(e) from e
        finally:
            conn.close()

    async def update_user(self, user_id: int, fields: Dict[str, Any]) -> Optional[UserRecord]:
        """Apply the provided fields to a user.

        Fields missing from ``fields`` keep their stored values.  Returns
        the updated row, or ``None`` if the user does not exist.
        """
        values = _writable(fields)
        conn = self._connect()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                return None
            if values:
                assignments = ", ".join(f"{key} = ?" for key in values)
                cursor.execute(
                    f"UPDATE users SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*values.values(), user_id),
                )
            updated = cursor.execute(
                f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            conn.commit()
            if values:
                logger.info("Updated user %s (%s)", user_id, ", ".join(values))
            return self._row_to_user(updated)
        except sqlite3.Error as e:
            conn.rollback()
            raise _wrap(e) from e
        finally:
            conn.close()

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user.  Returns ``True`` if a row was removed."""
        conn = self._connect()
        try:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            conn.commit()
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info("Deleted user %s", user_id)
            return deleted
        except sqlite3.Error as e:
            conn.rollback()
            raise _wrap(e) from e
        finally:
            conn.close()

    async def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """Check whether any user other than ``exclude_id`` has ``email``."""
        query = "SELECT 1 FROM users WHERE email = ?"
        params: List[Any] = [email]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        conn = self._connect()
        try:
            return conn.execute(query, tuple(params)).fetchone() is not None
        except sqlite3.Error as e:
            raise _wrap(e) from e
        finally:
            conn.close()
