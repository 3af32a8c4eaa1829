"""Abstract DatabaseService interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator

from cycleload.types import Params, ParamsList


class DatabaseService(ABC):
    """Database-agnostic interface for the staging and target writes.

    Design principles:
    - Stateless: no mutable state beyond the connection pool
    - Thread-safe: each transaction() acquires its own connection
    - DB-agnostic: the importer programs against this ABC, never a concrete backend
    """

    #: DB-API parameter marker used by the backend's driver.
    placeholder: str = "?"

    @abstractmethod
    def connect(self) -> None:
        """Initialize the connection pool."""

    @abstractmethod
    def close(self) -> None:
        """Close all connections and release resources."""

    @abstractmethod
    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        """Execute a single SQL statement and return rows as dicts."""

    @abstractmethod
    def execute_many(self, sql: str, params_list: ParamsList) -> None:
        """Execute a SQL statement for each parameter set."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Context manager: acquires a connection, commits on success, rolls back on error."""

    @abstractmethod
    def execute_ddl(self, sql: str) -> None:
        """Execute DDL statements (DROP TABLE, CREATE TABLE, CREATE INDEX, etc.)."""

    def index_ddl(self, name: str, table: str, columns: list[str]) -> str:
        """CREATE INDEX statement; the index is created in the table's schema."""
        return f"CREATE INDEX IF NOT EXISTS {name} ON {table}({', '.join(columns)});"

    def batch_insert(self, table: str, columns: list[str], rows: list[tuple]) -> None:
        """Insert multiple rows into a table inside the current transaction."""
        if not rows:
            return
        cols = ", ".join(columns)
        placeholders = ", ".join(self.placeholder for _ in columns)
        sql = f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
        self.execute_many(sql, rows)
