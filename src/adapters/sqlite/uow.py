"""
SQLite unit of work.

One connection per unit of work, opened in autocommit mode so transactions are
driven explicitly. Write units take the database write lock up front with
BEGIN IMMEDIATE, which serializes concurrent writers at the start of the
transaction instead of failing them at commit.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from uuid import uuid4

from src.adapters.sqlite.repos import (
    SQLiteCommentRepo,
    SQLitePostRepo,
    SQLitePublishRequestRepo,
    SQLiteTagRepo,
    SQLiteUserRepo,
    dict_factory,
)


class SQLiteUnitOfWork:
    def __init__(self, db_path: str, *, read_only: bool = False, timeout: float = 5.0):
        self.db_path = db_path
        self.read_only = read_only
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        try:
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute("BEGIN" if self.read_only else "BEGIN IMMEDIATE")
        except sqlite3.Error:
            conn.close()
            raise

        self._conn = conn
        self.users = SQLiteUserRepo(conn)
        self.posts = SQLitePostRepo(conn)
        self.tags = SQLiteTagRepo(conn)
        self.publish_requests = SQLitePublishRequestRepo(conn)
        self.comments = SQLiteCommentRepo(conn)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        conn = self._conn
        if conn is None:
            return
        self._conn = None
        try:
            if exc_type is None:
                conn.execute("COMMIT")
            elif conn.in_transaction:
                conn.execute("ROLLBACK")
        finally:
            conn.close()

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        if self._conn is None:
            raise RuntimeError("Unit of work is not active")

        conn = self._conn
        name = f"sp_{uuid4().hex}"
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield
        except BaseException:
            conn.execute(f"ROLLBACK TO {name}")
            conn.execute(f"RELEASE {name}")
            raise
        else:
            conn.execute(f"RELEASE {name}")


class SQLiteUnitOfWorkFactory:
    """Opens a fresh SQLiteUnitOfWork per call."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def __call__(self, *, read_only: bool = False) -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(self.db_path, read_only=read_only, timeout=self.timeout)
