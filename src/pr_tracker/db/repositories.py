"""Data access layer for pr-tracker.

User-owned tables (personal_records, workout_scores) are only reachable
through repositories bound to an owning user id; every select and delete
is filtered by it, so one user can never read or remove another's rows.
"""

import functools
import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..errors import RecordStoreError
from ..models.records import Movement, MovementCategory, PersonalRecord, WorkoutScore
from ..models.user import User
from .engine import connect, get_db_path

logger = logging.getLogger(__name__)


def store_call(f):
    """Re-raise driver errors from a repository coroutine as RecordStoreError."""

    @functools.wraps(f)
    async def wrapper(*args, **kwargs):
        try:
            return await f(*args, **kwargs)
        except aiosqlite.Error as e:
            logger.error("Record store call %s failed: %s", f.__qualname__, e)
            raise RecordStoreError(str(e)) from e

    return wrapper


def _timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


class MovementRepository:
    """Repository for the shared movement catalog."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    @store_call
    async def list_all(self) -> list[Movement]:
        """List all movements ordered by name."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT id, name, category FROM movements ORDER BY name COLLATE NOCASE, id"
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    @store_call
    async def create(self, name: str, category: MovementCategory) -> int:
        """Add a movement to the catalog."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO movements (name, category) VALUES (?, ?)",
                (name, category.value),
            )
            await db.commit()
            return cursor.lastrowid

    def _row_to_movement(self, row: aiosqlite.Row) -> Movement:
        return Movement(
            id=row["id"],
            name=row["name"],
            category=MovementCategory.parse(row["category"]),
        )


class PersonalRecordRepository:
    """Repository for one user's personal records."""

    def __init__(self, user_id: str, db_path: Path | None = None):
        self.user_id = user_id
        self.db_path = db_path or get_db_path()

    @store_call
    async def list_all(self) -> list[PersonalRecord]:
        """List the user's records, newest date first, joined with movement info."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT pr.*, m.name AS movement_name, m.category AS movement_category
                FROM personal_records pr
                LEFT JOIN movements m ON m.id = pr.movement_id
                WHERE pr.user_id = ?
                ORDER BY pr.date DESC, pr.id DESC
                """,
                (self.user_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]

    @store_call
    async def create(
        self,
        movement_id: int,
        value: str,
        date: str,
        notes: str | None = None,
    ) -> int:
        """Insert a record owned by this repository's user."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO personal_records (user_id, movement_id, value, date, notes)
                VALUES (?, ?, ?, ?, ?)
                """,
                (self.user_id, movement_id, value, date, notes),
            )
            await db.commit()
            return cursor.lastrowid

    @store_call
    async def delete(self, record_id: int) -> bool:
        """Delete a record if this user owns it.

        Returns:
            True when a row was removed
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM personal_records WHERE id = ? AND user_id = ?",
                (record_id, self.user_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    def _row_to_record(self, row: aiosqlite.Row) -> PersonalRecord:
        return PersonalRecord(
            id=row["id"],
            user_id=row["user_id"],
            movement_id=row["movement_id"],
            value=row["value"],
            date=row["date"],
            notes=row["notes"],
            created_at=_timestamp(row["created_at"]),
            movement_name=row["movement_name"],
            movement_category=row["movement_category"],
        )


class WorkoutScoreRepository:
    """Repository for one user's benchmark workout scores."""

    def __init__(self, user_id: str, db_path: Path | None = None):
        self.user_id = user_id
        self.db_path = db_path or get_db_path()

    @store_call
    async def list_all(self) -> list[WorkoutScore]:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workout_scores
                WHERE user_id = ?
                ORDER BY date DESC, id DESC
                """,
                (self.user_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_score(row) for row in rows]

    @store_call
    async def create(
        self,
        wod_name: str,
        score: str,
        date: str,
        notes: str | None = None,
    ) -> int:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO workout_scores (user_id, wod_name, score, date, notes)
                VALUES (?, ?, ?, ?, ?)
                """,
                (self.user_id, wod_name, score, date, notes),
            )
            await db.commit()
            return cursor.lastrowid

    @store_call
    async def delete(self, score_id: int) -> bool:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM workout_scores WHERE id = ? AND user_id = ?",
                (score_id, self.user_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    def _row_to_score(self, row: aiosqlite.Row) -> WorkoutScore:
        return WorkoutScore(
            id=row["id"],
            user_id=row["user_id"],
            wod_name=row["wod_name"],
            score=row["score"],
            date=row["date"],
            notes=row["notes"],
            created_at=_timestamp(row["created_at"]),
        )


class UserRepository:
    """Repository for accounts and their signed-in sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    @store_call
    async def create(
        self,
        user_id: str,
        email: str,
        password_hash: str,
        salt: str,
        confirmation_token: str,
    ) -> None:
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO users (id, email, password_hash, salt, confirmation_token)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, email, password_hash, salt, confirmation_token),
            )
            await db.commit()

    @store_call
    async def get_credentials(self, email: str) -> tuple[User, str, str] | None:
        """Get a user with its stored password hash and salt."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM users WHERE email = ?", (email,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_user(row), row["password_hash"], row["salt"]

    @store_call
    async def get_by_email(self, email: str) -> User | None:
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM users WHERE email = ?", (email,))
            row = await cursor.fetchone()
            return self._row_to_user(row) if row else None

    @store_call
    async def confirm(self, confirmation_token: str) -> User | None:
        """Mark the account holding this token as confirmed."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM users WHERE confirmation_token = ?", (confirmation_token,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            await db.execute(
                "UPDATE users SET confirmed = 1, confirmation_token = NULL WHERE id = ?",
                (row["id"],),
            )
            await db.commit()
            user = self._row_to_user(row)
            user.confirmed = True
            return user

    @store_call
    async def create_session(self, token: str, user_id: str) -> None:
        async with connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO auth_sessions (token, user_id) VALUES (?, ?)",
                (token, user_id),
            )
            await db.commit()

    @store_call
    async def get_session(self, token: str) -> tuple[User, datetime | None] | None:
        """Get the user behind a session token and when it was issued."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT u.*, s.created_at AS session_created_at
                FROM auth_sessions s
                JOIN users u ON u.id = s.user_id
                WHERE s.token = ?
                """,
                (token,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_user(row), _timestamp(row["session_created_at"])

    @store_call
    async def delete_session(self, token: str) -> bool:
        async with connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM auth_sessions WHERE token = ?", (token,))
            await db.commit()
            return cursor.rowcount > 0

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            confirmed=bool(row["confirmed"]),
            created_at=_timestamp(row["created_at"]),
        )
