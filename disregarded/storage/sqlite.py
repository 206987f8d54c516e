"""
SQLite storage implementations.

One connection per operation; each operation is a single transaction.
Ownership predicates live in the WHERE clause of the write itself, so a
write either applies to the caller's row or to nothing.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from disregarded.core.errors import DuplicateNameError
from disregarded.core.models import Account, AuthoredEssay, Essay, EssayStatus
from disregarded.storage.base import (
    AccountStorage,
    EssayStorage,
    IdentifierCollision,
    StorageProvider,
)

logger = logging.getLogger(__name__)


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS essays (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        short_id TEXT UNIQUE NOT NULL,
        user_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'draft',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_essays_user_id ON essays(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_essays_status ON essays(status)",
)

# Seconds a writer waits on a locked database before failing
BUSY_TIMEOUT = 30.0

ESSAY_COLUMNS = "short_id, user_id, title, content, status, created_at, updated_at"
AUTHORED_ESSAY_SELECT = (
    "SELECT e.short_id, e.user_id, e.title, e.content, e.status, "
    "e.created_at, e.updated_at, u.username AS author "
    "FROM essays e JOIN users u ON u.id = e.user_id"
)


def _timestamp(value: datetime) -> str:
    # Fixed precision keeps lexical order equal to chronological order
    return value.isoformat(timespec="microseconds")


class SqliteDatabase:
    """Owns the database file and the schema."""

    def __init__(self, path: str, timeout: float = BUSY_TIMEOUT):
        self.path = path
        self.timeout = timeout
        self._ensure_schema()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection; commit on success, roll back on error."""
        conn = sqlite3.connect(self.path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self.connect() as conn:
            # Stored in the file; later connections inherit it
            conn.execute("PRAGMA journal_mode = WAL")
            for statement in SCHEMA:
                conn.execute(statement)


# =============================================================================
# Accounts
# =============================================================================


class SqliteAccountStorage(AccountStorage):
    """SQLite-backed account storage (the `users` table)."""

    def __init__(self, db: SqliteDatabase):
        self._db = db

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Account:
        return Account(
            id=row["id"],
            name=row["username"],
            password_hash=row["password_hash"],
            created_at=row["created_at"],
        )

    def create(self, name: str, password_hash: str, created_at: datetime) -> Account:
        try:
            with self._db.connect() as conn:
                row = conn.execute(
                    "INSERT INTO users (username, password_hash, created_at) "
                    "VALUES (?, ?, ?) RETURNING *",
                    (name, password_hash, _timestamp(created_at)),
                ).fetchall()[0]
        except sqlite3.IntegrityError as e:
            if "users.username" in str(e):
                raise DuplicateNameError() from e
            raise
        return self._to_domain(row)

    def get_by_name(self, name: str) -> Account | None:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ?", (name,)
            ).fetchone()
        return self._to_domain(row) if row else None

    def get_by_id(self, account_id: int) -> Account | None:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE id = ?", (account_id,)
            ).fetchone()
        return self._to_domain(row) if row else None

    def update_password_hash(self, account_id: int, password_hash: str) -> bool:
        with self._db.connect() as conn:
            cur = conn.execute(
                "UPDATE users SET password_hash = ? WHERE id = ?",
                (password_hash, account_id),
            )
            changed = cur.rowcount
        return changed > 0


# =============================================================================
# Essays
# =============================================================================


class SqliteEssayStorage(EssayStorage):
    """SQLite-backed essay storage (the `essays` table)."""

    def __init__(self, db: SqliteDatabase):
        self._db = db

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Essay:
        return Essay(
            id=row["short_id"],
            owner_id=row["user_id"],
            title=row["title"],
            content=row["content"],
            status=EssayStatus(row["status"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    def _to_authored(cls, row: sqlite3.Row) -> AuthoredEssay:
        return AuthoredEssay(**cls._to_domain(row).model_dump(), author=row["author"])

    def create(
        self,
        essay_id: str,
        owner_id: int,
        title: str,
        content: str,
        now: datetime,
    ) -> Essay:
        stamp = _timestamp(now)
        try:
            with self._db.connect() as conn:
                row = conn.execute(
                    "INSERT INTO essays "
                    "(short_id, user_id, title, content, status, created_at, updated_at) "
                    f"VALUES (?, ?, ?, ?, ?, ?, ?) RETURNING {ESSAY_COLUMNS}",
                    (essay_id, owner_id, title, content, EssayStatus.DRAFT.value, stamp, stamp),
                ).fetchall()[0]
        except sqlite3.IntegrityError as e:
            if "essays.short_id" in str(e):
                raise IdentifierCollision(essay_id) from e
            raise
        return self._to_domain(row)

    def get(self, essay_id: str) -> AuthoredEssay | None:
        with self._db.connect() as conn:
            row = conn.execute(
                f"{AUTHORED_ESSAY_SELECT} WHERE e.short_id = ?", (essay_id,)
            ).fetchone()
        return self._to_authored(row) if row else None

    def exists(self, essay_id: str) -> bool:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM essays WHERE short_id = ?", (essay_id,)
            ).fetchone()
        return row is not None

    def list_by_owner(self, owner_id: int) -> list[Essay]:
        with self._db.connect() as conn:
            rows = conn.execute(
                f"SELECT {ESSAY_COLUMNS} FROM essays WHERE user_id = ? "
                "ORDER BY updated_at DESC, id DESC",
                (owner_id,),
            ).fetchall()
        return [self._to_domain(row) for row in rows]

    def list_published(self) -> list[AuthoredEssay]:
        with self._db.connect() as conn:
            rows = conn.execute(
                f"{AUTHORED_ESSAY_SELECT} WHERE e.status = ? "
                "ORDER BY e.updated_at DESC, e.id DESC",
                (EssayStatus.PUBLISHED.value,),
            ).fetchall()
        return [self._to_authored(row) for row in rows]

    def update_owned(
        self,
        essay_id: str,
        owner_id: int,
        title: str | None,
        content: str | None,
        now: datetime,
    ) -> Essay | None:
        with self._db.connect() as conn:
            rows = conn.execute(
                "UPDATE essays SET title = COALESCE(?, title), "
                "content = COALESCE(?, content), updated_at = ? "
                f"WHERE short_id = ? AND user_id = ? RETURNING {ESSAY_COLUMNS}",
                (title, content, _timestamp(now), essay_id, owner_id),
            ).fetchall()
        return self._to_domain(rows[0]) if rows else None

    def set_status_owned(
        self,
        essay_id: str,
        owner_id: int,
        status: EssayStatus,
        now: datetime,
    ) -> Essay | None:
        with self._db.connect() as conn:
            rows = conn.execute(
                "UPDATE essays SET status = ?, updated_at = ? "
                f"WHERE short_id = ? AND user_id = ? RETURNING {ESSAY_COLUMNS}",
                (status.value, _timestamp(now), essay_id, owner_id),
            ).fetchall()
        return self._to_domain(rows[0]) if rows else None

    def delete_owned(self, essay_id: str, owner_id: int) -> bool:
        with self._db.connect() as conn:
            cur = conn.execute(
                "DELETE FROM essays WHERE short_id = ? AND user_id = ?",
                (essay_id, owner_id),
            )
            changed = cur.rowcount
        return changed > 0


# =============================================================================
# Factory
# =============================================================================


def create_sqlite_storage(path: str) -> StorageProvider:
    """Create a StorageProvider backed by a single SQLite file."""
    db = SqliteDatabase(path)
    logger.info(f"Using database: {path}")
    return StorageProvider(
        accounts=SqliteAccountStorage(db),
        essays=SqliteEssayStorage(db),
    )
