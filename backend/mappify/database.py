import sqlite3
import threading
from contextlib import contextmanager

from mappify import config
from mappify.exceptions import DatabaseError, TransactionError
from mappify.logger import get_logger


class QueryResult:
    """Outcome of a statement that returns no rows (INSERT, UPDATE, DELETE, DDL)."""

    def __init__(self, insert_id=None, affected_rows=0):
        self.insert_id = insert_id
        self.affected_rows = affected_rows

    def __repr__(self):
        return f"<QueryResult insert_id={self.insert_id} affected_rows={self.affected_rows}>"


class DatabaseEngine:
    logger = get_logger(__name__)

    def __init__(self, db_path=None, timeout=None, log_sql=None):
        self.db_path = db_path or config.DB_PATH
        self.log_sql = config.LOG_SQL if log_sql is None else log_sql
        try:
            # Autocommit mode: transactions are opened explicitly with begin().
            self.connection = sqlite3.connect(
                self.db_path,
                timeout=config.DB_TIMEOUT if timeout is None else timeout,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as e:
            self.logger.error("error connecting to %s: %s", self.db_path, e)
            raise DatabaseError(f"error connecting to {self.db_path}: {e}") from e
        self.connection.row_factory = sqlite3.Row
        self._in_transaction = False
        self._lock = threading.RLock()
        self.logger.debug("Connected to %s", self.db_path)

    def _log(self, sql, params=None):
        if not self.log_sql:
            return
        msg = f"[SQL EXECUTE]: {sql}"
        if params:
            msg += f" | [PARAMS]: {list(params)}"
        self.logger.info(msg)

    def query(self, sql, params=None):
        """Run one statement.

        Returns a list of column-keyed dicts when the statement produces rows,
        otherwise a QueryResult carrying ``insert_id`` and ``affected_rows``.
        """
        params = tuple(params or ())
        with self._lock:
            self._log(sql, params)
            try:
                cursor = self.connection.execute(sql, params)
            except sqlite3.Error as e:
                self.logger.error("Query failed: %s | %s", sql, e)
                raise DatabaseError(f"Query failed: {e} [{sql}]", sql=sql, params=params) from e

            if cursor.description is not None:
                return [dict(row) for row in cursor.fetchall()]
            return QueryResult(insert_id=cursor.lastrowid, affected_rows=cursor.rowcount)

    def execute_script(self, script):
        with self._lock:
            self._log(script)
            try:
                self.connection.executescript(script)
            except sqlite3.Error as e:
                raise DatabaseError(f"Script failed: {e}", sql=script) from e

    @property
    def in_transaction(self):
        return self._in_transaction

    def begin(self):
        # The lock stays held until commit/rollback, so other threads queue behind the transaction.
        self._lock.acquire()
        if self._in_transaction:
            self._lock.release()
            raise TransactionError("A transaction is already active on this connection")
        try:
            self.query("BEGIN")
        except DatabaseError:
            self._lock.release()
            raise
        self._in_transaction = True
        self.logger.debug("Transaction started")

    def _end_transaction(self):
        self._in_transaction = False
        self._lock.release()

    def commit(self):
        with self._lock:
            if not self._in_transaction:
                raise TransactionError("commit() called without an active transaction")
            try:
                self.query("COMMIT")
            except DatabaseError:
                # A failed COMMIT (deferred constraint, busy database) can leave the transaction open.
                if not self.connection.in_transaction:
                    self._end_transaction()
                raise
            self._end_transaction()
        self.logger.debug("Transaction committed")

    def rollback(self):
        with self._lock:
            if not self._in_transaction:
                raise TransactionError("rollback() called without an active transaction")
            try:
                self.query("ROLLBACK")
            finally:
                self._end_transaction()
        self.logger.debug("Transaction rolled back")

    @contextmanager
    def transaction(self):
        self.begin()
        try:
            yield self
            self.commit()
        except BaseException:
            if self._in_transaction:
                self.rollback()
            raise

    def close(self):
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._in_transaction:
            self.rollback()
        self.close()
