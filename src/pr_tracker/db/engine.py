"""Database engine setup and initialization."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from ..config import DATA_DIR


def get_db_path(data_dir: Path | None = None, db_name: str = "pr_tracker.db") -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / db_name


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with mapping rows and foreign keys enforced."""
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        yield db


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # Accounts (the auth boundary)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                salt TEXT NOT NULL,
                confirmed INTEGER DEFAULT 0,
                confirmation_token TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Signed-in sessions, kept across restarts
        await db.execute("""
            CREATE TABLE IF NOT EXISTS auth_sessions (
                token TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
            )
        """)

        # Shared movement catalog (duplicates by name are allowed)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS movements (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                category TEXT NOT NULL DEFAULT 'Other'
            )
        """)

        # Personal records, one row per logged attempt
        await db.execute("""
            CREATE TABLE IF NOT EXISTS personal_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                movement_id INTEGER NOT NULL,
                value TEXT NOT NULL,
                date TEXT NOT NULL,
                notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                FOREIGN KEY (movement_id) REFERENCES movements(id)
            )
        """)

        # Benchmark workout scores
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_scores (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                wod_name TEXT NOT NULL,
                score TEXT NOT NULL,
                date TEXT NOT NULL,
                notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_personal_records_user
            ON personal_records(user_id, date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_scores_user
            ON workout_scores(user_id, date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_auth_sessions_user
            ON auth_sessions(user_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_movements_name
            ON movements(name)
        """)

        await db.commit()


async def seed_movements(db_path: Path | None = None) -> int:
    """Seed the movement catalog if it is empty.

    Returns:
        Number of movements inserted (0 when the catalog already had rows)
    """
    from ..models.records import STARTER_MOVEMENTS

    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        cursor = await db.execute("SELECT COUNT(*) FROM movements")
        (count,) = await cursor.fetchone()
        if count:
            return 0

        await db.executemany(
            "INSERT INTO movements (name, category) VALUES (?, ?)",
            [(m.name, m.category.value) for m in STARTER_MOVEMENTS],
        )
        await db.commit()

    return len(STARTER_MOVEMENTS)
