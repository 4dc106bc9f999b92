"""In-memory connection pool that understands the bot's result queries."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class PoolConfig:
    """Connection pool settings."""

    conn_string: str = ""
    max_conns: int = 0
    acquire_timeout: timedelta = field(default_factory=timedelta)
    max_conn_idle_time: timedelta = field(default_factory=timedelta)
    max_conn_lifetime: timedelta = field(default_factory=timedelta)


class RowNotFoundError(LookupError):
    """Raised when a single-row query matches nothing."""


def parse_config(dsn: str) -> PoolConfig:
    """Build a configuration from a connection string."""
    return PoolConfig(conn_string=dsn)


@dataclass
class _Row:
    chat_id: int
    data: str
    created_at: datetime
    seq: int


def _keyword(query: str) -> str:
    return query.strip().upper()


class MemoryPool:
    """Thread-safe store of bot results, driven by SQL-like statements."""

    def __init__(self, config: Optional[PoolConfig] = None) -> None:
        self.config = config if config is not None else PoolConfig()
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._seq = itertools.count()
        self._rows: Dict[int, _Row] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("pool is closed")

    def query_row(self, query: str, *args: Any) -> Tuple[Any, ...]:
        """Run a single-row statement and return the row's values."""
        q = _keyword(query)
        with self._lock:
            self._ensure_open()
            if q.startswith("INSERT"):
                chat_id, data = args[0], args[1]
                row_id = next(self._ids)
                self._rows[row_id] = _Row(
                    chat_id, data, datetime.now(timezone.utc), next(self._seq)
                )
                return (row_id,)
            if q.startswith("SELECT"):
                row_id = args[0]
                row = self._rows.get(row_id)
                if row is None:
                    raise RowNotFoundError("not found")
                return (row_id, row.chat_id, row.data, row.created_at)
            return ()

    def execute(self, query: str, *args: Any) -> None:
        """Run a statement that returns no rows."""
        q = _keyword(query)
        with self._lock:
            self._ensure_open()
            if not q.startswith("DELETE"):
                return
            if "CHAT_ID" in q:
                chat_id = args[0]
                self._rows = {
                    row_id: row
                    for row_id, row in self._rows.items()
                    if row.chat_id != chat_id
                }
            else:
                self._rows.pop(args[0], None)

    def query(self, query: str, *args: Any) -> List[Tuple[Any, ...]]:
        """Run a multi-row statement; results for a chat come newest first."""
        q = _keyword(query)
        with self._lock:
            self._ensure_open()
            if not (q.startswith("SELECT") and "CHAT_ID" in q):
                return []
            chat_id, limit = args[0], args[1]
            matches = [
                (row_id, row)
                for row_id, row in self._rows.items()
                if row.chat_id == chat_id
            ]
        matches.sort(key=lambda item: (item[1].created_at, item[1].seq), reverse=True)
        return [
            (row_id, row.chat_id, row.data, row.created_at)
            for row_id, row in matches[: max(limit, 0)]
        ]

    def close(self) -> None:
        """Release the pool; later statements raise ``RuntimeError``."""
        with self._lock:
            self._closed = True
            self._rows.clear()