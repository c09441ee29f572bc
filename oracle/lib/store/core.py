"""Store collaborator: CRUD over named record collections plus an insert change feed."""

import asyncio
import json
import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import fields
from pathlib import Path
from typing import Any, Protocol, TypeVar

from oracle.errors import StoreError
from oracle.lib import config, paths
from oracle.lib.uuid7 import timestamp, uuid7

from . import migrations

logger = logging.getLogger(__name__)

# Sessions in other processes write the same file; wait this long on their locks.
BUSY_TIMEOUT = 5.0

T = TypeVar("T")

Record = dict[str, Any]
Listener = Callable[[str, Record], None]

# collection -> primary key column
COLLECTIONS = {
    "profiles": "id",
    "teams": "id",
    "messages": "id",
    "updates": "id",
    "team_status": "team_id",
}
JSON_COLUMNS = {"profiles": {"skills"}}
TIMESTAMPED = {"profiles", "teams", "messages", "updates"}

_OPS = {"eq": "=", "gt": ">", "gte": ">=", "lt": "<", "lte": "<="}


def from_row(row: dict[str, Any] | Any, dataclass_type: type[T]) -> T:
    """Convert dict-like row to dataclass instance, ignoring unknown keys."""
    field_names = {f.name for f in fields(dataclass_type)}
    row_dict = dict(row) if not isinstance(row, dict) else row
    kwargs = {key: row_dict[key] for key in field_names if key in row_dict}
    return dataclass_type(**kwargs)


class Store(Protocol):
    async def insert(self, collection: str, record: Record) -> Record: ...

    async def insert_many(self, collection: str, records: Iterable[Record]) -> list[Record]: ...

    async def update(self, collection: str, record_id: str, patch: Record) -> Record | None: ...

    async def update_where(self, collection: str, where: Record, patch: Record) -> int: ...

    async def upsert(self, collection: str, record: Record) -> Record: ...

    async def select(
        self,
        collection: str,
        where: Record | None = None,
        *,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> list[Record]: ...

    async def delete(self, collection: str, record_id: str) -> bool: ...

    def listen(self, callback: Listener) -> Callable[[], None]: ...


class SqliteStore:
    """SQLite-backed store. Blocking calls run in a worker thread, one at a time."""

    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        self._columns: dict[str, set[str]] = {}
        self._listeners: list[Listener] = []

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            conn = self._open()
            migrations.migrate(conn, migrations.MIGRATIONS)
            self._conn = conn
        return self._conn

    def _open(self) -> sqlite3.Connection:
        in_memory = str(self.db_path) == ":memory:"
        if not in_memory:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        start = time.perf_counter()
        # One connection, used under self._lock from worker threads.
        conn = sqlite3.connect(
            self.db_path, timeout=BUSY_TIMEOUT, isolation_level=None, check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        if not in_memory:
            # Pollers in other sessions read while this one writes.
            try:
                conn.execute("PRAGMA journal_mode = WAL")
            except sqlite3.Error:
                conn.close()
                raise
        elapsed = time.perf_counter() - start
        if elapsed > 0.1:
            logger.warning(f"Opening {self.db_path} took {elapsed:.3f}s (another session holds a lock)")
        return conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def listen(self, callback: Listener) -> Callable[[], None]:
        """Register an insert listener. Returns a function that removes it."""
        self._listeners.append(callback)

        def unlisten() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unlisten

    def _notify(self, collection: str, records: list[Record]) -> None:
        for record in records:
            for listener in list(self._listeners):
                try:
                    listener(collection, dict(record))
                except Exception:
                    logger.exception(f"Insert listener failed for {collection}")

    async def _run(self, action: str, collection: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        def call() -> T:
            with self._lock:
                return fn(self._connection())

        try:
            return await asyncio.to_thread(call)
        except StoreError:
            raise
        except sqlite3.Error as e:
            logger.error(f"Store {action} on {collection} failed: {e}")
            raise StoreError(f"{action} on {collection} failed") from e

    def _table_columns(self, conn: sqlite3.Connection, collection: str) -> set[str]:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection '{collection}'")
        cols = self._columns.get(collection)
        if cols is None:
            cols = {row[1] for row in conn.execute(f"PRAGMA table_info({collection})")}
            self._columns[collection] = cols
        return cols

    def _check_columns(self, conn: sqlite3.Connection, collection: str, names: Iterable[str]):
        cols = self._table_columns(conn, collection)
        unknown = [name for name in names if name not in cols]
        if unknown:
            raise StoreError(f"Unknown column(s) for {collection}: {', '.join(unknown)}")

    def _encode(self, collection: str, record: Record) -> Record:
        json_cols = JSON_COLUMNS.get(collection, set())
        return {
            key: json.dumps(value) if key in json_cols and value is not None else value
            for key, value in record.items()
        }

    def _decode(self, collection: str, row: sqlite3.Row) -> Record:
        record = dict(row)
        for key in JSON_COLUMNS.get(collection, set()):
            if record.get(key):
                record[key] = json.loads(record[key])
            elif key in record:
                record[key] = []
        return record

    def _prepare(self, collection: str, record: Record) -> Record:
        prepared = dict(record)
        pk = COLLECTIONS.get(collection)
        if pk == "id" and not prepared.get("id"):
            prepared["id"] = uuid7()
        if collection in TIMESTAMPED and not prepared.get("created_at"):
            prepared["created_at"] = timestamp()
        return prepared

    def _insert_rows(self, conn: sqlite3.Connection, collection: str, rows: list[Record]) -> None:
        conn.execute("BEGIN")
        try:
            for row in rows:
                self._check_columns(conn, collection, row)
                encoded = self._encode(collection, row)
                columns = ", ".join(encoded)
                placeholders = ", ".join("?" for _ in encoded)
                conn.execute(
                    f"INSERT INTO {collection} ({columns}) VALUES ({placeholders})",
                    tuple(encoded.values()),
                )
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise

    async def insert(self, collection: str, record: Record) -> Record:
        inserted = await self.insert_many(collection, [record])
        return inserted[0]

    async def insert_many(self, collection: str, records: Iterable[Record]) -> list[Record]:
        rows = [self._prepare(collection, record) for record in records]
        if not rows:
            return []
        await self._run("insert", collection, lambda conn: self._insert_rows(conn, collection, rows))
        self._notify(collection, rows)
        return rows

    async def update(self, collection: str, record_id: str, patch: Record) -> Record | None:
        pk = COLLECTIONS.get(collection)

        def op(conn: sqlite3.Connection) -> Record | None:
            self._check_columns(conn, collection, patch)
            if patch:
                encoded = self._encode(collection, patch)
                assignments = ", ".join(f"{key} = ?" for key in encoded)
                conn.execute(
                    f"UPDATE {collection} SET {assignments} WHERE {pk} = ?",
                    (*encoded.values(), record_id),
                )
            row = conn.execute(f"SELECT * FROM {collection} WHERE {pk} = ?", (record_id,)).fetchone()
            return self._decode(collection, row) if row else None

        return await self._run("update", collection, op)

    async def update_where(self, collection: str, where: Record, patch: Record) -> int:
        """Patch every row matching `where` in one statement. Returns the rows changed.

        The match and the write are a single UPDATE, so a filter such as
        `read_at__isnull` acts as a compare-and-set between concurrent writers.
        """

        def op(conn: sqlite3.Connection) -> int:
            if not patch:
                return 0
            self._check_columns(conn, collection, patch)
            clause, params = self._where(conn, collection, where)
            encoded = self._encode(collection, patch)
            assignments = ", ".join(f"{key} = ?" for key in encoded)
            cursor = conn.execute(
                f"UPDATE {collection} SET {assignments}{clause}",
                (*encoded.values(), *params),
            )
            return cursor.rowcount

        return await self._run("update", collection, op)

    async def upsert(self, collection: str, record: Record) -> Record:
        """Insert or replace by primary key. Last write wins, no field merge."""
        prepared = self._prepare(collection, record)

        def op(conn: sqlite3.Connection) -> Record:
            self._check_columns(conn, collection, prepared)
            encoded = self._encode(collection, prepared)
            columns = ", ".join(encoded)
            placeholders = ", ".join("?" for _ in encoded)
            conn.execute(
                f"INSERT OR REPLACE INTO {collection} ({columns}) VALUES ({placeholders})",
                tuple(encoded.values()),
            )
            return prepared

        return await self._run("upsert", collection, op)

    async def select(
        self,
        collection: str,
        where: Record | None = None,
        *,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        def op(conn: sqlite3.Connection) -> list[Record]:
            clause, params = self._where(conn, collection, where or {})
            sql = f"SELECT * FROM {collection}{clause}"
            if order_by:
                self._check_columns(conn, collection, [order_by])
                sql += f" ORDER BY {order_by} {'DESC' if desc else 'ASC'}"
            if limit is not None:
                sql += " LIMIT ?"
                params.append(int(limit))
            return [self._decode(collection, row) for row in conn.execute(sql, params)]

        return await self._run("select", collection, op)

    async def delete(self, collection: str, record_id: str) -> bool:
        pk = COLLECTIONS.get(collection)

        def op(conn: sqlite3.Connection) -> bool:
            self._table_columns(conn, collection)
            cursor = conn.execute(f"DELETE FROM {collection} WHERE {pk} = ?", (record_id,))
            return cursor.rowcount > 0

        return await self._run("delete", collection, op)

    def _where(self, conn: sqlite3.Connection, collection: str, where: Record) -> tuple[str, list]:
        """Build a WHERE clause from equality filters with Django-style suffixes.

        Supported suffixes: __gt, __gte, __lt, __lte, __in, __isnull.
        """
        parts: list[str] = []
        params: list[Any] = []
        for key, value in where.items():
            column, _, op = key.partition("__")
            self._check_columns(conn, collection, [column])
            op = op or "eq"
            if op == "isnull":
                parts.append(f"{column} IS {'NULL' if value else 'NOT NULL'}")
            elif op == "in":
                values = list(value)
                if not values:
                    parts.append("0")
                    continue
                parts.append(f"{column} IN ({', '.join('?' for _ in values)})")
                params.extend(values)
            elif op == "eq" and value is None:
                parts.append(f"{column} IS NULL")
            elif op in _OPS:
                parts.append(f"{column} {_OPS[op]} ?")
                params.append(value)
            else:
                raise StoreError(f"Unsupported filter '{key}'")
        clause = f" WHERE {' AND '.join(parts)}" if parts else ""
        return clause, params


def open_store(db_path: Path | str | None = None) -> SqliteStore:
    """Open the store configured for this oracle home."""
    if db_path is None:
        db_path = paths.database(config.get("database", "oracle.db"))
    return SqliteStore(db_path)
