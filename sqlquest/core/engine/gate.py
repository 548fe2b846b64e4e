import logging
import sqlite3
from enum import Enum
from typing import Optional

from sqlalchemy import Connection, RootTransaction
from sqlalchemy.exc import SQLAlchemyError, DBAPIError

from sqlquest.core.errors import ExecutionError, TransactionError

logger = logging.getLogger(__name__)


class GateState(Enum):
    IDLE = "idle"
    BEGAN = "began"
    EXECUTED = "executed"
    FAILED = "failed"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


def _driver_message(error: SQLAlchemyError) -> str:
    # Surface the store's own wording, not SQLAlchemy's wrapper text
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error)


class TransactionGate:
    """
    Begin / execute / commit-or-rollback around one submitted statement.

    The gate never decides between commit and rollback on its own: a failed
    execute only marks it FAILED and the caller rolls back.
    """

    def __init__(self, conn: Connection):
        self.conn = conn
        self.state = GateState.IDLE
        self._transaction: Optional[RootTransaction] = None

    @property
    def is_open(self) -> bool:
        return self._transaction is not None and self._transaction.is_active

    @property
    def needs_rollback(self) -> bool:
        # Still true after a failed commit, when the transaction is no longer active
        return self._transaction is not None

    def begin(self) -> None:
        if self.is_open or self.conn.in_transaction():
            raise TransactionError("A transaction is already open on this connection")
        try:
            self._transaction = self.conn.begin()
        except SQLAlchemyError as error:
            raise TransactionError(f"Could not begin transaction: {_driver_message(error)}") from error
        self.state = GateState.BEGAN

    def execute(self, sql: str) -> int:
        """
        Run the statement and return how many rows it inserted/updated/deleted.

        changes() keeps the count of the last DML statement even after DDL runs,
        so total_changes() is compared first to see whether anything moved.
        """
        if self.state is not GateState.BEGAN:
            raise TransactionError(f"Cannot execute from state {self.state.value}")
        try:
            before = self.conn.exec_driver_sql("SELECT total_changes()").scalar_one()
            self.conn.exec_driver_sql(sql)
            after = self.conn.exec_driver_sql("SELECT total_changes()").scalar_one()
            affected = 0
            if after != before:
                affected = self.conn.exec_driver_sql("SELECT changes()").scalar_one()
        except SQLAlchemyError as error:
            self.state = GateState.FAILED
            raise ExecutionError(_driver_message(error)) from error

        self.state = GateState.EXECUTED
        return int(affected)

    def commit(self) -> None:
        if not self.is_open:
            raise TransactionError("No open transaction to commit")
        try:
            self._transaction.commit()
        except SQLAlchemyError as error:
            # Deferred constraint checks can fail here; the caller rolls back
            self.state = GateState.FAILED
            raise TransactionError(f"Commit failed: {_driver_message(error)}") from error
        self.state = GateState.COMMITTED
        self._transaction = None

    def rollback(self) -> None:
        if self._transaction is None:
            raise TransactionError("No transaction to roll back")
        try:
            if self._transaction.is_active:
                self._transaction.rollback()
            else:
                # After a failed COMMIT SQLAlchemy has already let go of the
                # transaction, but SQLite still holds it open
                self._transaction.rollback()
                self.conn.connection.dbapi_connection.rollback()
        except (SQLAlchemyError, sqlite3.Error) as error:
            raise TransactionError(f"Rollback failed: {_driver_message(error)}") from error
        finally:
            self._transaction = None
        self.state = GateState.ROLLED_BACK
