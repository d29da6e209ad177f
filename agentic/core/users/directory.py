import asyncio
import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from agentic.core.contracts import User, utc_now

MAX_NAME_LENGTH = 100
MAX_JOB_TITLE_LENGTH = 100
MIN_AGE, MAX_AGE = 1, 150

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  age INTEGER NOT NULL,
  job_title TEXT NOT NULL DEFAULT '',
  created_at TEXT NOT NULL,
  updated_at TEXT
)
"""

_COLUMNS = "id, name, age, job_title, created_at, updated_at"


class UserDirectory:
    """Protocol for user directories - CRUD over user records."""

    async def create(self, name: str, age: int, job_title: str) -> User:
        raise NotImplementedError

    async def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    async def update(
        self,
        user_id: int,
        name: Optional[str] = None,
        age: Optional[int] = None,
        job_title: Optional[str] = None,
    ) -> Optional[User]:
        """Merge-patch: None fields are left unchanged."""
        raise NotImplementedError

    async def delete(self, user_id: int) -> bool:
        raise NotImplementedError

    async def delete_all(self) -> int:
        raise NotImplementedError

    async def list(
        self,
        job_title_filter: Optional[str] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
    ) -> List[User]:
        raise NotImplementedError

    async def ping(self) -> bool:
        return True


def validate_fields(name: Optional[str], age: Optional[int], job_title: Optional[str]) -> None:
    """
    Validate user fields that are present.

    Raises:
        ValueError: If a field is out of range
    """
    if name is not None:
        if not name.strip():
            raise ValueError("Name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValueError(f"Name must not exceed {MAX_NAME_LENGTH} characters")
    if age is not None and not MIN_AGE <= age <= MAX_AGE:
        raise ValueError(f"Age must be between {MIN_AGE} and {MAX_AGE}")
    if job_title is not None and len(job_title) > MAX_JOB_TITLE_LENGTH:
        raise ValueError(f"Job title must not exceed {MAX_JOB_TITLE_LENGTH} characters")


class SqliteUserDirectory(UserDirectory):
    """
    User directory stored in a SQLite file.

    Each operation opens its own connection and runs in a worker thread,
    so concurrent requests never share a cursor. SQLite serializes writes.

    Usage:
        directory = SqliteUserDirectory("agentic.db")
        user = await directory.create("Ahmed", 30, "Engineer")
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self.log = logging.getLogger("user_directory")
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.db_path)) as conn:
            with conn:
                yield conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_SCHEMA)
        self.log.debug("Schema ready at %s", self.db_path)

    async def create(self, name: str, age: int, job_title: str) -> User:
        validate_fields(name, age, job_title)
        return await asyncio.to_thread(self._create, name, age, job_title)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await asyncio.to_thread(self._get, user_id)

    async def update(
        self,
        user_id: int,
        name: Optional[str] = None,
        age: Optional[int] = None,
        job_title: Optional[str] = None,
    ) -> Optional[User]:
        validate_fields(name, age, job_title)
        return await asyncio.to_thread(self._update, user_id, name, age, job_title)

    async def delete(self, user_id: int) -> bool:
        return await asyncio.to_thread(self._delete, user_id)

    async def delete_all(self) -> int:
        return await asyncio.to_thread(self._delete_all)

    async def list(
        self,
        job_title_filter: Optional[str] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
    ) -> List[User]:
        return await asyncio.to_thread(self._list, job_title_filter, min_age, max_age)

    async def ping(self) -> bool:
        try:
            await asyncio.to_thread(self._ping)
        except sqlite3.Error as e:
            self.log.error("Database health check failed: %s", e)
            return False
        return True

    # Blocking implementations

    def _create(self, name: str, age: int, job_title: str) -> User:
        created_at = utc_now()
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO users (name, age, job_title, created_at) VALUES (?, ?, ?, ?)",
                (name, age, job_title, created_at),
            )
            user_id = cursor.lastrowid
        self.log.info("Registered new user: %s (id=%d)", name, user_id)
        return User(id=user_id, name=name, age=age, job_title=job_title, created_at=created_at)

    def _get(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        return _row_to_user(row) if row else None

    def _update(
        self,
        user_id: int,
        name: Optional[str],
        age: Optional[int],
        job_title: Optional[str],
    ) -> Optional[User]:
        updates = {"name": name, "age": age, "job_title": job_title}
        assignments = [f"{column} = ?" for column, value in updates.items() if value is not None]
        values = [value for value in updates.values() if value is not None]
        assignments.append("updated_at = ?")
        values.append(utc_now())
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id = ?",
                (*values, user_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        self.log.info("Updated user %d (%s)", user_id, ", ".join(k for k, v in updates.items() if v is not None) or "timestamp only")
        return _row_to_user(row)

    def _delete(self, user_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            self.log.info("Deleted user %d", user_id)
        return deleted

    def _delete_all(self) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM users")
        self.log.info("Deleted all users (%d)", cursor.rowcount)
        return cursor.rowcount

    def _list(
        self,
        job_title_filter: Optional[str],
        min_age: Optional[int],
        max_age: Optional[int],
    ) -> List[User]:
        filters: list[str] = []
        values: list = []
        if job_title_filter:
            # instr() keeps the match case-sensitive
            filters.append("instr(job_title, ?) > 0")
            values.append(job_title_filter)
        if min_age is not None:
            filters.append("age >= ?")
            values.append(min_age)
        if max_age is not None:
            filters.append("age <= ?")
            values.append(max_age)
        where = f"WHERE {' AND '.join(filters)}" if filters else ""
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM users {where} ORDER BY id", tuple(values)).fetchall()
        return [_row_to_user(row) for row in rows]

    def _ping(self) -> None:
        with self._connect() as conn:
            conn.execute("SELECT 1").fetchone()


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        name=row[1],
        age=row[2],
        job_title=row[3],
        created_at=row[4],
        updated_at=row[5],
    )
