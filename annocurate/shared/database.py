"""Lightweight SQLite helpers and simple ORM primitives for annocurate."""
from __future__ import annotations

import contextlib
import sqlite3
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Type, TypeVar

Row = sqlite3.Row
T = TypeVar("T", bound="Record")


class Database:
    """A thin wrapper around sqlite3 with sane defaults for shared project files.

    Several curators and annotators may work on the same ``project.db`` at
    once, each touching their own snapshot rows.  WAL journaling lets readers
    proceed while one writer commits, and every write goes through
    :meth:`transaction` so a snapshot is never observed half written.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA foreign_keys=ON")

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        self._apply_pragmas(conn)
        return conn

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextlib.contextmanager
    def reading(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection for read-only work and close it afterwards."""

        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()


class Record:
    """Base class for ORM style records."""

    __tablename__: str = ""

    @classmethod
    def from_row(cls: Type[T], row: Row) -> T:
        data = {field.name: row[field.name] for field in fields(cls) if field.name in row.keys()}
        return cls(**data)  # type: ignore[arg-type]

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def insert_many(cls, conn: sqlite3.Connection, records: Iterable[T]) -> None:
        names = [f.name for f in fields(cls)]
        placeholders = ", ".join(":" + name for name in names)
        sql = f"INSERT OR REPLACE INTO {cls.__tablename__}({', '.join(names)}) VALUES ({placeholders})"
        conn.executemany(sql, [r.to_row() for r in records])

    def save(self, conn: sqlite3.Connection) -> None:
        names = [f.name for f in fields(self)]
        placeholders = ", ".join(":" + name for name in names)
        sql = f"INSERT OR REPLACE INTO {self.__tablename__}({', '.join(names)}) VALUES ({placeholders})"
        conn.execute(sql, self.to_row())


def fetch_all(conn: sqlite3.Connection, sql: str, params: Sequence[Any] | None = None) -> List[sqlite3.Row]:
    cur = conn.execute(sql, params or [])
    return cur.fetchall()


def fetch_one(conn: sqlite3.Connection, sql: str, params: Sequence[Any] | None = None) -> Optional[sqlite3.Row]:
    cur = conn.execute(sql, params or [])
    return cur.fetchone()
