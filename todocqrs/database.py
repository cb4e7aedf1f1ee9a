"""Database connection handling with explicit transactions."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

_LOG_FILE = "postgres.go"


class Transaction:
    """A unit of work on one connection, finished by commit or rollback."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection
        self._cursor = connection.cursor()
        self._done = False

    def _check_open(self) -> None:
        if self._done:
            raise RuntimeError("sql: transaction has already been committed or rolled back")

    def execute(self, query: str, params: Sequence[Any] = ()) -> Any:
        """Run ``query`` inside the transaction and return the cursor."""
        self._check_open()
        self._cursor.execute(query, tuple(params))
        return self._cursor

    def commit(self) -> None:
        self._check_open()
        self._done = True
        self._cursor.close()
        self.connection.commit()

    def rollback(self) -> None:
        self._check_open()
        self._done = True
        self._cursor.close()
        self.connection.rollback()


class Database:
    """Wraps a DB-API connection and hands out transactions."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    def db(self) -> Any:
        """Return the underlying connection for read queries."""
        return self._connection

    def start_transaction(self) -> Transaction:
        return Transaction(self._connection)

    def commit_transaction(self, tx: Transaction) -> None:
        tx.commit()

    def rollback_transaction(self, tx: Transaction) -> None:
        tx.rollback()

    def close(self) -> None:
        self._connection.close()


def build_dsn(config: Any) -> str:
    """Return the connection string for the configured database."""
    pg = config.postgres
    return (
        f"host={pg.host} port={pg.port} user={pg.user} password={pg.password} "
        f"dbname={pg.name} sslmode={pg.ssl}"
    )


def connect_database(config: Any, log: Any, connect: Callable[[str], Any]) -> Database:
    """Open a connection with ``connect`` and check that it answers."""
    try:
        connection = connect(build_dsn(config))
        cursor = connection.cursor()
        try:
            cursor.execute("SELECT 1")
            cursor.fetchall()
        finally:
            cursor.close()
    except Exception as exc:
        log.start_logger(_LOG_FILE, "NewPostgres").error(f"error connecting to postgres: {exc}")
        raise
    log.start_logger(_LOG_FILE, "NewPostgres").info("connected to postgres")
    return Database(connection)