"""Key-value stores backed by the name usage match table.

The table is kept in row-key order, which is what makes salting the keys
worthwhile. It is created with:

CREATE TABLE IF NOT EXISTS `name_usage_match` (
    `row_key` BLOB NOT NULL,
    `family` BLOB NOT NULL,
    `qualifier` BLOB NOT NULL,
    `value` BLOB,
    PRIMARY KEY (`row_key`, `family`, `qualifier`)
) WITHOUT ROWID;

Reads go through KeyValueStore.get(); writes are expressed as Mutations and
applied by a separate TableWriter, so the read path never writes on its own
unless it is explicitly given a writer.

"""

import logging
import re
import sqlite3
from abc import abstractmethod
from collections.abc import Iterable
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any, Generic, Self, TypeVar

from taxonkv.apis.name_match import NameMatcher, match_request
from taxonkv.config import Options
from taxonkv.db.mutation import Mutation, build_mutation
from taxonkv.db.salt import SaltedKeyGenerator
from taxonkv.species.match import NameUsageMatch
from taxonkv.species.request import ClassificationRequest

logger = logging.getLogger(__name__)

KeyT = TypeVar("KeyT")
ValueT = TypeVar("ValueT")

_TABLE_NAME_RGX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class KeyValueStore(Generic[KeyT, ValueT]):
    """Store of values indexed by a key.

    Stores hold connections, so use them as context managers: the connections
    are released on the way out no matter how the block exits. close() is
    idempotent.

    """

    @abstractmethod
    def get(self, key: KeyT) -> ValueT | None:
        """Returns the value associated with key, or None."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


@dataclass
class LRU(Generic[KeyT, ValueT]):
    max_size: int
    _cache: dict[KeyT, ValueT] = field(default_factory=dict, init=False)

    def __getitem__(self, key: KeyT) -> ValueT:
        value = self._cache.pop(key)
        self._cache[key] = value
        return value

    def __contains__(self, key: KeyT) -> bool:
        return key in self._cache

    def __setitem__(self, key: KeyT, value: ValueT) -> None:
        if key not in self._cache and len(self._cache) >= self.max_size:
            key_to_remove = next(iter(self._cache))
            del self._cache[key_to_remove]
        self._cache.pop(key, None)
        self._cache[key] = value

    def __len__(self) -> int:
        return len(self._cache)


def check_table_name(table_name: str) -> str:
    if not _TABLE_NAME_RGX.match(table_name):
        raise ValueError(f"invalid table name: {table_name!r}")
    return table_name


def create_table(conn: sqlite3.Connection, table_name: str) -> None:
    with conn:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS `{check_table_name(table_name)}` (
                `row_key` BLOB NOT NULL,
                `family` BLOB NOT NULL,
                `qualifier` BLOB NOT NULL,
                `value` BLOB,
                PRIMARY KEY (`row_key`, `family`, `qualifier`)
            ) WITHOUT ROWID
            """
        )


def _prefix_end(prefix: bytes) -> bytes | None:
    """Smallest key greater than every key starting with prefix (None if unbounded)."""
    stripped = prefix.rstrip(b"\xff")
    if not stripped:
        return None
    return stripped[:-1] + bytes([stripped[-1] + 1])


class _TableConnection:
    def __init__(self, conn: sqlite3.Connection, table_name: str) -> None:
        self._conn: sqlite3.Connection | None = conn
        self.table_name = check_table_name(table_name)

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError(f"{self!r} is closed")
        return self._conn

    @property
    def is_closed(self) -> bool:
        return self._conn is None

    def run_query(self, sql: str, args: tuple[object, ...]) -> list[tuple[Any, ...]]:
        db = self.conn
        with db:
            cursor = db.execute(sql, args)
            return cursor.fetchall()

    def close(self) -> None:
        if self._conn is None:
            return
        conn = self._conn
        self._conn = None
        conn.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.table_name}>"

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class TableStore(_TableConnection, KeyValueStore[bytes, bytes]):
    """Reads a single cell (column family + qualifier) of the table by row key."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        table_name: str,
        column_family: bytes,
        column_qualifier: bytes,
    ) -> None:
        super().__init__(conn, table_name)
        self.column_family = column_family
        self.column_qualifier = column_qualifier

    @classmethod
    def open(
        cls,
        filename: Path | str,
        table_name: str,
        column_family: bytes,
        column_qualifier: bytes,
    ) -> Self:
        conn = sqlite3.connect(str(filename))
        try:
            create_table(conn, table_name)
        except BaseException:
            conn.close()
            raise
        return cls(conn, table_name, column_family, column_qualifier)

    def get(self, key: bytes) -> bytes | None:
        rows = self.run_query(
            f"""
            SELECT `value`
            FROM `{self.table_name}`
            WHERE `row_key` = ? AND `family` = ? AND `qualifier` = ?
            """,
            (key, self.column_family, self.column_qualifier),
        )
        if not rows:
            return None
        return rows[0][0]

    def scan_prefix(self, prefix: bytes) -> list[tuple[bytes, bytes]]:
        """Returns (row key, value) pairs for all rows whose key starts with prefix.

        With salted keys, passing a bucket prefix scans a single bucket.

        """
        end = _prefix_end(prefix)
        sql = f"""
            SELECT `row_key`, `value`
            FROM `{self.table_name}`
            WHERE `family` = ? AND `qualifier` = ? AND `row_key` >= ?
        """
        args: tuple[object, ...] = (self.column_family, self.column_qualifier, prefix)
        if end is not None:
            sql += " AND `row_key` < ?"
            args = (*args, end)
        sql += " ORDER BY `row_key`"
        return [(bytes(row_key), value) for row_key, value in self.run_query(sql, args)]


class TableWriter(_TableConnection):
    """Applies mutations to the table. Writes are last-write-wins."""

    @classmethod
    def open(cls, filename: Path | str, table_name: str) -> Self:
        conn = sqlite3.connect(str(filename))
        try:
            create_table(conn, table_name)
        except BaseException:
            conn.close()
            raise
        return cls(conn, table_name)

    def write(self, mutations: Iterable[Mutation]) -> int:
        rows = [
            (mutation.row, mutation.family, mutation.qualifier, mutation.value)
            for mutation in mutations
        ]
        db = self.conn
        with db:
            db.executemany(
                f"""
                INSERT OR REPLACE INTO `{self.table_name}`(`row_key`, `family`, `qualifier`, `value`)
                VALUES(?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)


class CachedKeyValueStore(KeyValueStore[KeyT, ValueT]):
    """Keeps recently read values of another store in memory. Misses are not cached."""

    def __init__(self, store: KeyValueStore[KeyT, ValueT], max_size: int) -> None:
        self.store = store
        self._cache: LRU[KeyT, ValueT] = LRU(max_size)

    def get(self, key: KeyT) -> ValueT | None:
        if key in self._cache:
            return self._cache[key]
        value = self.store.get(key)
        if value is not None:
            self._cache[key] = value
        return value

    def close(self) -> None:
        self.store.close()


class NameUsageMatchStore(KeyValueStore[ClassificationRequest, NameUsageMatch]):
    """Looks up matches by request, optionally computing and persisting missing ones.

    On a miss, the loader (if any) is asked for a match; when it finds one and
    a writer is configured, the match is written back under the request's
    salted key before being returned.

    """

    def __init__(
        self,
        table: TableStore,
        key_generator: SaltedKeyGenerator,
        *,
        loader: NameMatcher | None = None,
        writer: TableWriter | None = None,
    ) -> None:
        self.table = table
        self.key_generator = key_generator
        self.loader = loader
        self.writer = writer

    def get(self, key: ClassificationRequest) -> NameUsageMatch | None:
        salted_key = self.key_generator.compute_key(key.logical_key)
        value = self.table.get(salted_key)
        if value is not None:
            return NameUsageMatch.deserialize(value)
        if self.loader is None:
            return None
        match = match_request(self.loader, key)
        if match is None:
            logger.debug("no match for %s", key.logical_key)
            return None
        if self.writer is not None:
            self.writer.write(
                [
                    build_mutation(
                        salted_key,
                        match,
                        self.table.column_family,
                        self.table.column_qualifier,
                    )
                ]
            )
            logger.debug("stored match for %s", key.logical_key)
        return match

    def close(self) -> None:
        with ExitStack() as stack:
            stack.callback(self.table.close)
            if self.writer is not None:
                stack.callback(self.writer.close)


def open_name_usage_match_store(
    options: Options, *, loader: NameMatcher | None = None
) -> KeyValueStore[ClassificationRequest, NameUsageMatch]:
    """Opens the match store described by the configuration.

    The store only writes when it is given a loader to compute missing matches.

    """
    column_family = options.column_family.encode("utf-8")
    column_qualifier = options.value_column_qualifier.encode("utf-8")
    with ExitStack() as stack:
        table = stack.enter_context(
            TableStore.open(
                options.store_filename,
                options.table_name,
                column_family,
                column_qualifier,
            )
        )
        writer = None
        if loader is not None:
            writer = stack.enter_context(
                TableWriter.open(options.store_filename, options.table_name)
            )
        store: KeyValueStore[ClassificationRequest, NameUsageMatch] = NameUsageMatchStore(
            table,
            SaltedKeyGenerator(options.num_of_key_buckets),
            loader=loader,
            writer=writer,
        )
        if options.cache_size > 0:
            store = CachedKeyValueStore(store, options.cache_size)
        stack.pop_all()
    return store
