"""Storage of bot results."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, List, Optional

from legalbot.pool import MemoryPool, parse_config


@dataclass
class Result:
    """A saved bot result."""

    id: int
    chat_id: int
    data: str
    created_at: datetime


class RepositoryError(Exception):
    """Raised when a storage operation fails."""


@contextmanager
def _wrapped(operation: str) -> Iterator[None]:
    try:
        yield
    except RepositoryError:
        raise
    except Exception as exc:
        raise RepositoryError(f"{operation}: {exc}") from exc


class Repository:
    """Access to the ``bot_results`` table through a connection pool."""

    def __init__(self, pool: MemoryPool, logger: Optional[logging.Logger] = None) -> None:
        self.pool = pool
        self.logger = logger

    def _log(self, msg: str, *args: object) -> None:
        if self.logger is not None:
            self.logger.info(msg, *args)

    def close(self) -> None:
        """Close the underlying pool."""
        self.pool.close()

    def save_result(self, chat_id: int, data: str) -> int:
        """Insert a result and return its id."""
        with _wrapped("save result"):
            (result_id,) = self.pool.query_row(
                "INSERT INTO bot_results (chat_id, data) VALUES ($1, $2) RETURNING id",
                chat_id,
                data,
            )
        self._log("result saved chat_id=%s", chat_id)
        return result_id

    def get_result(self, result_id: int) -> Result:
        """Fetch a result by id."""
        with _wrapped("get result"):
            res = Result(
                *self.pool.query_row(
                    "SELECT id, chat_id, data, created_at FROM bot_results WHERE id=$1",
                    result_id,
                )
            )
        self._log("result retrieved chat_id=%s", res.chat_id)
        return res

    def delete_result(self, result_id: int) -> None:
        """Remove a result by id."""
        with _wrapped("delete result"):
            self.pool.execute("DELETE FROM bot_results WHERE id=$1", result_id)
        self._log("result deleted id=%s", result_id)

    def recent_results(self, chat_id: int, limit: int) -> List[Result]:
        """Return up to ``limit`` results for a chat, newest first."""
        with _wrapped("recent results"):
            rows = self.pool.query(
                "SELECT id, chat_id, data, created_at FROM bot_results "
                "WHERE chat_id=$1 ORDER BY created_at DESC LIMIT $2",
                chat_id,
                limit,
            )
        with _wrapped("scan result"):
            results = [Result(*row) for row in rows]
        self._log("recent results fetched chat_id=%s count=%d", chat_id, len(results))
        return results

    def delete_history(self, chat_id: int) -> None:
        """Remove every result for a chat."""
        with _wrapped("delete history"):
            self.pool.execute("DELETE FROM bot_results WHERE chat_id=$1", chat_id)
        self._log("chat history deleted chat_id=%s", chat_id)


def connect(logger: Optional[logging.Logger] = None) -> Repository:
    """Open a repository using the DSN in ``POSTGRES_DSN``."""
    dsn = os.environ.get("POSTGRES_DSN", "")
    if not dsn:
        raise RepositoryError("POSTGRES_DSN is not set")
    config = parse_config(dsn)
    config.max_conns = 4
    config.acquire_timeout = timedelta(seconds=5)
    config.max_conn_idle_time = timedelta(minutes=5)
    config.max_conn_lifetime = timedelta(hours=1)
    pool = MemoryPool(config)
    return Repository(pool, logger if logger is not None else logging.getLogger("legalbot"))