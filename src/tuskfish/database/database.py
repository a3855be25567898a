"""
Content Database

Thin SQLite wrapper that executes the statements rendered by ``SqlRenderer``.
Criteria are checked against the live table schema before a statement is
run, driver errors are wrapped in ``DatabaseError`` and every write runs in
a transaction.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from tuskfish.core.config.models import DatabaseConfig
from tuskfish.core.exceptions import DatabaseError, ErrorCode, InvalidColumnName
from tuskfish.core.validation import DataValidator
from tuskfish.criteria.base import Criteria
from tuskfish.database.sql import TAGLINK_TABLE, CompiledQuery, SqlRenderer


logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class Database:
    """
    SQLite query executor for the content and taglink tables.

    The connection is opened lazily on first use and closed with ``close()``
    or by leaving a ``with`` block.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None,
                 path: Optional[Union[str, Path]] = None,
                 validator: Optional[DataValidator] = None):
        """
        Initialize the database wrapper.

        Args:
            config: Database settings (path, timeout, PRAGMAs)
            path: Overrides ``config.path`` when given
            validator: Validator used for identifiers (a DataValidator by default)
        """
        self.config = config or DatabaseConfig()
        if path is not None:
            self.config = self.config.model_copy(update={'path': Path(path)})
        self.validator = validator or DataValidator()
        self.renderer = SqlRenderer(self.validator)
        self._connection: Optional[sqlite3.Connection] = None
        self._columns: Dict[str, List[str]] = {}
        self._transaction_depth = 0

    @property
    def path(self) -> Path:
        return self.config.path

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = self._connect()
        return self._connection

    def _connect(self) -> sqlite3.Connection:
        is_memory = str(self.config.path) == ':memory:'
        if not is_memory:
            self.config.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(str(self.config.path), timeout=self.config.timeout)
            conn.row_factory = sqlite3.Row
            self._configure_database(conn, is_memory)
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Could not open database {self.config.path}: {e}",
                error_code=ErrorCode.DATABASE_CONNECTION_FAILED,
                cause=e,
            )
        logger.debug("Opened database %s", self.config.path)
        return conn

    def _configure_database(self, conn: sqlite3.Connection, is_memory: bool) -> None:
        """Apply PRAGMA settings from the database config."""
        if not is_memory:
            conn.execute(f"PRAGMA journal_mode = {self.config.journal_mode}")
        conn.execute(f"PRAGMA synchronous = {self.config.synchronous}")
        if self.config.foreign_keys:
            conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA cache_size = -16000")

    @contextmanager
    def _transaction(self):
        """
        Run the enclosed statements atomically.

        A transaction opened inside another one joins it; only the outermost
        block commits or rolls back.
        """
        conn = self.connection
        if self._transaction_depth:
            self._transaction_depth += 1
            try:
                yield conn
            finally:
                self._transaction_depth -= 1
            return

        self._transaction_depth = 1
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._transaction_depth = 0

    def transaction(self):
        """Group several writes so that they are committed or rolled back together."""
        return self._transaction()

    def _execute(self, query: CompiledQuery, table: Optional[str] = None) -> sqlite3.Cursor:
        logger.debug("SQL: %s %s", query.sql, query.params)
        try:
            return self.connection.execute(query.sql, query.params)
        except sqlite3.Error as e:
            raise self._wrap_error(e, query, table)

    def _execute_write(self, query: CompiledQuery, table: Optional[str] = None) -> sqlite3.Cursor:
        with self._transaction():
            return self._execute(query, table)

    @staticmethod
    def _wrap_error(error: sqlite3.Error, query: CompiledQuery,
                    table: Optional[str]) -> DatabaseError:
        error_code = ErrorCode.DATABASE_QUERY_FAILED
        if 'no such table' in str(error) or 'no such column' in str(error):
            error_code = ErrorCode.DATABASE_SCHEMA_ERROR
        return DatabaseError(
            f"Query failed: {error}",
            error_code=error_code,
            table=table,
            sql=query.sql,
            cause=error,
        )

    def initialize_schema(self) -> None:
        """Create the content and taglink tables if they do not exist."""
        with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        try:
            with self._transaction() as conn:
                conn.executescript(schema_sql)
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to create schema: {e}",
                error_code=ErrorCode.DATABASE_SCHEMA_ERROR,
                cause=e,
            )
        self._columns.clear()
        logger.info("Database schema initialised at %s", self.config.path)

    def get_columns(self, table: str) -> List[str]:
        """Column names of a table, read from the live schema and cached."""
        clean_table = self.validator.validate_table_name(table)
        if clean_table not in self._columns:
            query = CompiledQuery(f"PRAGMA table_info({self.renderer.escape_identifier(clean_table)})")
            rows = self._execute(query, clean_table).fetchall()
            if not rows:
                raise DatabaseError(
                    f"Table '{clean_table}' does not exist",
                    error_code=ErrorCode.DATABASE_SCHEMA_ERROR,
                    table=clean_table,
                )
            self._columns[clean_table] = [row['name'] for row in rows]
        return self._columns[clean_table]

    def validate_columns(self, table: str, columns: Iterable[str]) -> None:
        """
        Check that every column exists on the table.

        Raises:
            InvalidColumnName: If a column is unknown
        """
        known = {column.lower() for column in self.get_columns(table)}
        for column in columns:
            if column.lower() not in known:
                raise InvalidColumnName(
                    f"Column '{column}' does not exist in table '{table}'",
                    field_name='column',
                    field_value=column,
                )

    def validate_criteria(self, table: str, criteria: Optional[Criteria]) -> None:
        """Check the columns referenced by criteria against the table schema."""
        if criteria is None:
            return
        columns = [item.column for item in criteria.items]
        columns.extend(column for column in (criteria.group_by, criteria.order,
                                             criteria.secondary_order) if column)
        self.validate_columns(table, columns)
        if criteria.tags:
            self.validate_columns(TAGLINK_TABLE, ['tag_id', 'content_id'])

    def select(self, table: str, criteria: Optional[Criteria] = None,
               columns: Optional[Sequence[str]] = None) -> List[sqlite3.Row]:
        self.validate_criteria(table, criteria)
        if columns:
            self.validate_columns(table, columns)
        query = self.renderer.select(table, criteria, columns)
        return self._execute(query, table).fetchall()

    def select_count(self, table: str, criteria: Optional[Criteria] = None,
                     column: Optional[str] = None) -> int:
        self.validate_criteria(table, criteria)
        if column:
            self.validate_columns(table, [column])
        query = self.renderer.select_count(table, criteria, column)
        return int(self._execute(query, table).fetchone()[0])

    def select_distinct(self, table: str, columns: Sequence[str],
                        criteria: Optional[Criteria] = None) -> List[sqlite3.Row]:
        self.validate_criteria(table, criteria)
        self.validate_columns(table, columns)
        query = self.renderer.select_distinct(table, columns, criteria)
        return self._execute(query, table).fetchall()

    def insert(self, table: str, values: Dict[str, Any]) -> int:
        """Insert a row and return its id."""
        self.validate_columns(table, values.keys())
        cursor = self._execute_write(self.renderer.insert(table, values), table)
        return cursor.lastrowid

    def update(self, table: str, row_id: int, values: Dict[str, Any]) -> bool:
        """Update one row by id; True if a row was changed."""
        self.validator.validate_positive_int(row_id, 'id')
        self.validate_columns(table, values.keys())
        cursor = self._execute_write(self.renderer.update(table, row_id, values), table)
        return cursor.rowcount > 0

    def update_all(self, table: str, values: Dict[str, Any],
                   criteria: Optional[Criteria] = None) -> int:
        """Update every row matching criteria; returns the number of rows changed."""
        self.validate_columns(table, values.keys())
        self.validate_criteria(table, criteria)
        cursor = self._execute_write(self.renderer.update_all(table, values, criteria), table)
        return cursor.rowcount

    def delete(self, table: str, row_id: int) -> bool:
        self.validator.validate_positive_int(row_id, 'id')
        cursor = self._execute_write(self.renderer.delete(table, row_id), table)
        return cursor.rowcount > 0

    def delete_all(self, table: str, criteria: Criteria) -> int:
        self.validate_criteria(table, criteria)
        cursor = self._execute_write(self.renderer.delete_all(table, criteria), table)
        return cursor.rowcount

    def toggle_boolean(self, table: str, row_id: int, column: str) -> bool:
        self.validator.validate_positive_int(row_id, 'id')
        self.validate_columns(table, [column])
        cursor = self._execute_write(self.renderer.toggle_boolean(table, row_id, column), table)
        return cursor.rowcount > 0

    def update_counter(self, table: str, row_id: int, column: str) -> bool:
        self.validator.validate_positive_int(row_id, 'id')
        self.validate_columns(table, [column])
        cursor = self._execute_write(self.renderer.update_counter(table, row_id, column), table)
        return cursor.rowcount > 0

    def search(self, table: str, terms: Sequence[str], escaped_terms: Sequence[str],
               andor: str, excluded_type: str, limit: int = 0,
               offset: int = 0) -> Tuple[int, List[sqlite3.Row]]:
        """Run a free-text search; returns (total matches, rows in the requested page)."""
        count_query, select_query = self.renderer.search(
            table, terms, escaped_terms, andor, excluded_type, limit, offset
        )
        count = int(self._execute(count_query, table).fetchone()[0])
        rows = self._execute(select_query, table).fetchall()
        return count, rows

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("Closed database %s", self.config.path)

    def __enter__(self) -> 'Database':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
