"""
Store connections: the hosted REST backend and a local SQLite backend.

Both expose the same small query surface used by the repositories:
``select``, ``insert`` and ``delete`` against a named table with simple
column filters.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

import requests

from voldash.errors import RemoteStoreError

logger = logging.getLogger(__name__)

# Supported filter operators and their SQL spelling.
OPERATORS = {
    "eq": "=",
    "gte": ">=",
    "lte": "<=",
    "in": "IN",
}


@dataclass(frozen=True)
class Filter:
    """A single column condition."""

    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Order:
    """Sort order for a select."""

    column: str
    ascending: bool = True


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def in_(column: str, values: Sequence[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


class Store(ABC):
    """Generic table access."""

    @abstractmethod
    def select(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return matching rows as dicts."""
        pass

    @abstractmethod
    def insert(self, table: str, rows: Sequence[dict[str, Any]]) -> None:
        """Insert rows."""
        pass

    @abstractmethod
    def delete(self, table: str, filters: Sequence[Filter]) -> None:
        """Delete rows matching all filters."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass


class RestStore(Store):
    """Client for a PostgREST-style backend (``{url}/rest/v1/{table}``)."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize REST store client.

        Args:
            url: Project base URL
            anon_key: Public access key sent with every request
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session
        """
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Content-Type": "application/json",
        })

    def select(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        params: list[tuple[str, str]] = [("select", ",".join(columns))]
        params.extend(self._filter_params(filters))
        if order is not None:
            direction = "asc" if order.ascending else "desc"
            params.append(("order", f"{order.column}.{direction}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        response = self._request("GET", table, params=params)
        try:
            return response.json()
        except ValueError as e:
            # A proxy error page can arrive with a 2xx status
            raise RemoteStoreError(
                f"GET {table} failed",
                status_code=response.status_code,
                detail=response.text,
            ) from e

    def insert(self, table: str, rows: Sequence[dict[str, Any]]) -> None:
        self._request(
            "POST",
            table,
            json=list(rows),
            headers={"Prefer": "return=minimal"},
        )

    def delete(self, table: str, filters: Sequence[Filter]) -> None:
        if not filters:
            # PostgREST rejects unfiltered deletes; refuse before sending.
            raise ValueError("delete requires at least one filter")
        self._request("DELETE", table, params=self._filter_params(filters))

    def close(self) -> None:
        self.session.close()

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        return str(value)

    def _filter_params(self, filters: Sequence[Filter]) -> list[tuple[str, str]]:
        params = []
        for f in filters:
            if f.op == "in":
                values = ",".join(self._format_value(v) for v in f.value)
                params.append((f.column, f"in.({values})"))
            else:
                params.append((f.column, f"{f.op}.{self._format_value(f.value)}"))
        return params

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        """Send a request and translate failures into RemoteStoreError."""
        url = f"{self.base_url}/{table}"
        logger.debug(f"{method} {url} {kwargs.get('params', '')}")
        try:
            response = self.session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise RemoteStoreError(f"{method} {table} failed", detail=str(e)) from e

        if not response.ok:
            raise RemoteStoreError(
                f"{method} {table} failed",
                status_code=response.status_code,
                detail=response.text,
            )
        return response


class Database(Store):
    """SQLite store with the same tables as the hosted backend."""

    def __init__(self, db_path: str):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory DB.
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self) -> None:
        """Establish database connection."""
        if self.db_path != ":memory:":
            # Ensure parent directory exists
            path = Path(self.db_path)
            path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(self.db_path)
        self._connection.row_factory = sqlite3.Row

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the database connection."""
        if self._connection is None:
            raise sqlite3.ProgrammingError("Database connection is closed")
        return self._connection

    def initialize(self) -> None:
        """Create database schema if it doesn't exist."""
        cursor = self.connection.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS volatility_prices (
                date TEXT NOT NULL,
                symbol TEXT NOT NULL,
                close REAL NOT NULL,
                UNIQUE (date, symbol)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS alert_rules (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                email TEXT NOT NULL,
                symbol_code TEXT NOT NULL,
                direction TEXT NOT NULL,
                threshold REAL NOT NULL,
                severity TEXT NOT NULL,
                enabled INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS vol_feedback (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category TEXT NOT NULL,
                message TEXT NOT NULL,
                contact TEXT,
                user_agent TEXT,
                page_path TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_prices_date ON volatility_prices(date)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_alert_rules_email ON alert_rules(email)
        """)

        self.connection.commit()

    def select(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        filters: Sequence[Filter] = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        where, args = self._where(filters)
        sql = f"SELECT {', '.join(columns)} FROM {table}{where}"
        if order is not None:
            sql += f" ORDER BY {order.column} {'ASC' if order.ascending else 'DESC'}"
        if limit is not None:
            sql += " LIMIT ?"
            args.append(limit)

        cursor = self._execute(sql, args)
        return [dict(row) for row in cursor.fetchall()]

    def insert(self, table: str, rows: Sequence[dict[str, Any]]) -> None:
        if not rows:
            return
        columns = list(rows[0].keys())
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        try:
            self.connection.executemany(
                sql, [tuple(row[c] for c in columns) for row in rows]
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise RemoteStoreError(f"INSERT {table} failed", detail=str(e)) from e

    def delete(self, table: str, filters: Sequence[Filter]) -> None:
        if not filters:
            raise ValueError("delete requires at least one filter")
        where, args = self._where(filters)
        self._execute(f"DELETE FROM {table}{where}", args)
        self.connection.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def _execute(self, sql: str, args: Sequence[Any]) -> sqlite3.Cursor:
        try:
            return self.connection.execute(sql, tuple(args))
        except sqlite3.Error as e:
            raise RemoteStoreError("SQLite query failed", detail=str(e)) from e

    @staticmethod
    def _where(filters: Sequence[Filter]) -> tuple[str, list[Any]]:
        clauses = []
        args: list[Any] = []
        for f in filters:
            if f.op == "in":
                placeholders = ", ".join("?" for _ in f.value)
                clauses.append(f"{f.column} IN ({placeholders})")
                args.extend(f.value)
            else:
                clauses.append(f"{f.column} {OPERATORS[f.op]} ?")
                args.append(f.value)
        if not clauses:
            return "", args
        return " WHERE " + " AND ".join(clauses), args
