"""
PostgreSQL client with connection pooling and RLS user isolation.

Uses psycopg2 with ThreadedConnectionPool. User isolation enforced via
PostgreSQL Row Level Security - automatically reads user ID from contextvar
and sets app.current_user_id on each connection.

Services talk to the database through a small table API (insert, update,
increment, select, delete). The same API is available on a Transaction so a
multi-step workflow can commit or roll back as one unit.

Security: No user context = see nothing (RLS blocks all rows). This is safe.
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple
from uuid import UUID

import psycopg2
import psycopg2.extras
import psycopg2.pool
from psycopg2 import sql

from utils.user_context import rls_setting_value

logger = logging.getLogger(__name__)

# Global JSONB registration flag
_jsonb_registered = False

_ORDER_DIRECTIONS = {"ASC", "DESC"}


class DatabaseError(Exception):
    """Database operation failed. Message is the backend's own error text."""


def _backend_message(error: psycopg2.Error) -> str:
    """Extract the server-reported message from a driver error."""
    message = getattr(error, "pgerror", None) or str(error)
    return message.strip()


def _convert_value(value: Any) -> Any:
    """Convert Python values to driver-friendly parameters."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return psycopg2.extras.Json(value)
    return value


def _order_clause(order_by: str | None) -> sql.Composable:
    """Build an ORDER BY clause from 'column' or 'column DESC'."""
    if not order_by:
        return sql.SQL("")

    parts = order_by.split()
    column = parts[0]
    direction = parts[1].upper() if len(parts) > 1 else "ASC"
    if direction not in _ORDER_DIRECTIONS:
        raise ValueError(f"Invalid sort direction '{parts[1]}'")

    return sql.SQL(" ORDER BY {} {}").format(sql.Identifier(column), sql.SQL(direction))


class TableOperations:
    """
    Table-level CRUD shared by PostgresClient and Transaction.

    Subclasses provide _run(), which executes one statement and returns rows.

    Filters:
    - filters: {column: value} equality; None means IS NULL, a list/tuple
      means = ANY(...)
    - search: {column: term} case-insensitive substring match (ILIKE)
    - between: {column: (low, high)} inclusive bounds, either may be None
    """

    def _run(self, query: sql.Composable, params: Tuple | None = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row, return it as stored."""
        return self.insert_many(table, [record])[0]

    def insert_many(self, table: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert rows sharing the same columns, return them as stored."""
        if not records:
            return []

        columns = list(records[0].keys())
        row_template = sql.SQL("({})").format(
            sql.SQL(", ").join(sql.Placeholder() * len(columns))
        )
        query = sql.SQL("INSERT INTO {} ({}) VALUES {} RETURNING *").format(
            sql.Identifier(table),
            sql.SQL(", ").join(map(sql.Identifier, columns)),
            sql.SQL(", ").join([row_template] * len(records)),
        )
        params = tuple(
            _convert_value(record[column])
            for record in records
            for column in columns
        )
        return self._run(query, params)

    def update(self, table: str, row_id: UUID, patch: Dict[str, Any]) -> Dict[str, Any] | None:
        """Update one row by id. Returns the updated row, or None if no row matched."""
        if not patch:
            return self.select_one(table, {"id": row_id})

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in patch
        )
        query = sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING *").format(
            sql.Identifier(table), assignments
        )
        params = tuple(_convert_value(v) for v in patch.values()) + (_convert_value(row_id),)
        rows = self._run(query, params)
        return rows[0] if rows else None

    def increment(self, table: str, row_id: UUID, column: str, delta: Any) -> Dict[str, Any] | None:
        """Atomically add delta to a numeric column. Returns the updated row."""
        query = sql.SQL("UPDATE {table} SET {col} = {col} + %s WHERE id = %s RETURNING *").format(
            table=sql.Identifier(table), col=sql.Identifier(column)
        )
        rows = self._run(query, (delta, _convert_value(row_id)))
        return rows[0] if rows else None

    def select(
        self,
        table: str,
        filters: Dict[str, Any] | None = None,
        *,
        search: Dict[str, str] | None = None,
        between: Dict[str, Tuple[Any, Any]] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        for_update: bool = False,
    ) -> List[Dict[str, Any]]:
        """Select rows matching all conditions. Empty list if none."""
        conditions = []
        params: list = []

        for column, value in (filters or {}).items():
            if value is None:
                conditions.append(sql.SQL("{} IS NULL").format(sql.Identifier(column)))
            elif isinstance(value, (list, tuple)):
                conditions.append(sql.SQL("{} = ANY(%s)").format(sql.Identifier(column)))
                params.append([_convert_value(v) for v in value])
            else:
                conditions.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
                params.append(_convert_value(value))

        for column, term in (search or {}).items():
            conditions.append(sql.SQL("{} ILIKE %s").format(sql.Identifier(column)))
            params.append(f"%{term}%")

        for column, (low, high) in (between or {}).items():
            if low is not None:
                conditions.append(sql.SQL("{} >= %s").format(sql.Identifier(column)))
                params.append(low)
            if high is not None:
                conditions.append(sql.SQL("{} <= %s").format(sql.Identifier(column)))
                params.append(high)

        query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table))
        if conditions:
            query += sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions)
        query += _order_clause(order_by)
        if limit is not None:
            query += sql.SQL(" LIMIT %s")
            params.append(limit)
        if offset:
            query += sql.SQL(" OFFSET %s")
            params.append(offset)
        if for_update:
            query += sql.SQL(" FOR UPDATE")

        return self._run(query, tuple(params))

    def select_one(self, table: str, filters: Dict[str, Any] | None = None, **kwargs) -> Dict[str, Any] | None:
        """Select first matching row or None."""
        rows = self.select(table, filters, limit=1, **kwargs)
        return rows[0] if rows else None

    def delete(self, table: str, row_id: UUID) -> bool:
        """Hard delete one row by id. True if a row was removed."""
        query = sql.SQL("DELETE FROM {} WHERE id = %s RETURNING id").format(sql.Identifier(table))
        return bool(self._run(query, (_convert_value(row_id),)))


class Transaction(TableOperations):
    """Table API bound to one open connection. Committed by PostgresClient.transaction()."""

    def __init__(self, conn):
        self._conn = conn

    def _run(self, query: sql.Composable, params: Tuple | None = None) -> List[Dict[str, Any]]:
        try:
            with self._conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                if cur.description:
                    return [dict(row) for row in cur.fetchall()]
                return []
        except psycopg2.Error as e:
            raise DatabaseError(_backend_message(e)) from e


class PostgresClient(TableOperations):
    """
    PostgreSQL client with automatic RLS context from contextvar.

    User context is read from utils.user_context contextvar on each query.
    - User context set → sees only their data (RLS filtered)
    - No user context → sees nothing (RLS blocks all rows)

    Usage:
        db = PostgresClient(database_url)

        with user_context(user_id):
            products = db.select("products", {"deleted_at": None}, order_by="name")

            with db.transaction() as tx:
                invoice = tx.insert("invoices", {...})
                tx.insert_many("invoice_items", [...])
    """

    # Class-level connection pools shared across instances
    _connection_pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str):
        self._database_url = database_url
        self._ensure_connection_pool()

    def _ensure_connection_pool(self) -> None:
        """Create connection pool if it doesn't exist."""
        with self._pools_lock:
            if self._database_url not in self._connection_pools:
                pool = psycopg2.pool.ThreadedConnectionPool(
                    minconn=2,
                    maxconn=20,
                    dsn=self._database_url,
                    connect_timeout=30,
                )

                global _jsonb_registered
                if not _jsonb_registered:
                    psycopg2.extras.register_default_jsonb(globally=True)
                    _jsonb_registered = True

                self._connection_pools[self._database_url] = pool
                logger.info("Connection pool created")

    @contextmanager
    def get_connection(self):
        """Get connection with RLS context from contextvar."""
        if self._database_url not in self._connection_pools:
            self._ensure_connection_pool()

        pool = self._connection_pools[self._database_url]
        conn = None

        try:
            conn = pool.getconn()
            if conn is None:
                raise RuntimeError("Could not get connection from pool")

            with conn.cursor() as cur:
                cur.execute("SET app.current_user_id = %s", (rls_setting_value(),))

            yield conn

        finally:
            if conn:
                pool.putconn(conn)

    def _run(self, query: sql.Composable, params: Tuple | None = None) -> List[Dict[str, Any]]:
        """Execute a single statement in its own transaction."""
        with self.get_connection() as conn:
            try:
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    cur.execute(query, params)
                    rows = [dict(row) for row in cur.fetchall()] if cur.description else []
                conn.commit()
                return rows
            except psycopg2.Error as e:
                conn.rollback()
                raise DatabaseError(_backend_message(e)) from e

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Run several statements as one unit.

        Commits when the block exits normally, rolls back on any exception.
        """
        with self.get_connection() as conn:
            tx = Transaction(conn)
            try:
                yield tx
            except Exception:
                conn.rollback()
                raise

            try:
                conn.commit()
            except psycopg2.Error as e:
                conn.rollback()
                raise DatabaseError(_backend_message(e)) from e

    def ping(self) -> bool:
        """Health check. Raises DatabaseError if the database is unreachable."""
        self._run(sql.SQL("SELECT 1"))
        return True

    def close(self) -> None:
        """Close connection pool."""
        with self._pools_lock:
            if self._database_url in self._connection_pools:
                self._connection_pools[self._database_url].closeall()
                del self._connection_pools[self._database_url]

    @classmethod
    def close_all_pools(cls) -> None:
        """Close all connection pools."""
        with cls._pools_lock:
            for pool in cls._connection_pools.values():
                pool.closeall()
            cls._connection_pools.clear()
