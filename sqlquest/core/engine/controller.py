import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from sqlalchemy import Connection
from sqlalchemy.ext.asyncio import AsyncConnection

from sqlquest.core.engine import classifier
from sqlquest.core.engine.gate import TransactionGate
from sqlquest.core.engine.introspector import SchemaIntrospector
from sqlquest.core.engine.session import ChallengeSession
from sqlquest.core.engine.validators import dispatch
from sqlquest.core.errors import (
    OperationRejected,
    TransactionError,
    ValidatorInvocationError,
)
from sqlquest.core.schemas import ExecutionOutcome, SubmissionState

logger = logging.getLogger(__name__)

NO_PHASE_MESSAGE = "No challenge phase is open."
EMPTY_MESSAGE = "Type a SQL statement."
SELECT_MESSAGE = "SELECT not supported in this phase."
UNKNOWN_MESSAGE = "Unrecognized operation."
OBJECTIVE_NOT_MET_MESSAGE = "Statement did not meet the objective. Changes were rolled back."


def only_allowed_message(operation: str) -> str:
    return f"This phase only accepts {operation}."


class Stage(Enum):
    IDLE = "idle"
    CLASSIFIED = "classified"
    EXECUTING = "executing"
    VALIDATING = "validating"


class ChallengeController:
    """
    Owns the active phase, the challenge connection and the pending close timer.

    Collaborators are injected:
        report_feedback(message)  text for the console panel
        request_close()           tear down the phase UI
        mark_complete(index)      best-effort progress flag
    """

    def __init__(
        self,
        conn: AsyncConnection,
        report_feedback: Callable[[str], Any],
        request_close: Callable[[], Any],
        mark_complete: Callable[[int], Any],
    ):
        self.conn = conn
        self.report_feedback = report_feedback
        self.request_close = request_close
        self.mark_complete = mark_complete

        self.stage = Stage.IDLE
        self._session: Optional[ChallengeSession] = None
        self._close_handle: Optional[asyncio.TimerHandle] = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Optional[ChallengeSession]:
        return self._session

    @property
    def close_pending(self) -> bool:
        return self._close_handle is not None and not self._close_handle.cancelled()

    # =========================
    # Phase lifecycle
    # =========================
    def open_phase(self, session: ChallengeSession) -> None:
        # A timer left over from the previous phase must not close this one
        self.cancel_close()
        self._session = session
        self.report_feedback("")
        logger.info(
            f"Phase opened (operation={session.allowed_operation or 'any'}, "
            f"index={session.challenge_index})"
        )

    def close(self) -> None:
        self.cancel_close()
        self._session = None
        self.request_close()
        logger.info("Phase closed")

    def schedule_close(self, delay: float, session: ChallengeSession) -> asyncio.TimerHandle:
        self.cancel_close()
        loop = asyncio.get_running_loop()
        self._close_handle = loop.call_later(delay, self._close_if_current, session)
        return self._close_handle

    def cancel_close(self) -> None:
        if self._close_handle is not None:
            self._close_handle.cancel()
            self._close_handle = None

    def _close_if_current(self, session: ChallengeSession) -> None:
        self._close_handle = None
        if self._session is session:
            self.close()

    # =========================
    # Submission
    # =========================
    def check_operation(self, session: Optional[ChallengeSession], sql: str) -> str:
        """Classify and apply the phase whitelist. Raises OperationRejected."""
        if session is None:
            raise OperationRejected(NO_PHASE_MESSAGE)

        if not (sql or "").strip():
            raise OperationRejected(EMPTY_MESSAGE)

        # Leading punctuation or a comment yields no operation, which the checks below reject
        operation = classifier.classify(sql)
        self.stage = Stage.CLASSIFIED
        if operation == "SELECT":
            raise OperationRejected(SELECT_MESSAGE)
        if session.allowed_operation and operation != session.allowed_operation.upper():
            raise OperationRejected(only_allowed_message(session.allowed_operation))
        if not classifier.is_supported(operation):
            raise OperationRejected(UNKNOWN_MESSAGE)
        return operation

    async def submit(self, sql: str) -> ExecutionOutcome:
        """
        Grade one statement end to end and report the outcome.

        Never raises for store, validator or transaction failures: those are
        turned into an ERRORED outcome after a rollback attempt.
        """
        async with self._lock:
            session = self._session
            sql = (sql or "").strip()
            try:
                try:
                    operation = self.check_operation(session, sql)
                except OperationRejected as rejection:
                    logger.info(f"Statement rejected: {rejection}")
                    outcome = ExecutionOutcome(
                        state=SubmissionState.REJECTED,
                        error_message=str(rejection),
                        message=str(rejection),
                    )
                else:
                    logger.info(f"Running {operation} statement")
                    outcome = await self.conn.run_sync(self._run_cycle, sql, session)
                    if outcome.committed:
                        self._after_commit(session)
            finally:
                self.stage = Stage.IDLE

            self.report_feedback(outcome.message)
            return outcome

    def _run_cycle(
        self, sync_conn: Connection, sql: str, session: ChallengeSession
    ) -> ExecutionOutcome:
        # Runs inside run_sync: begin to commit/rollback is one call for the loop
        gate = TransactionGate(sync_conn)
        affected = 0
        try:
            self.stage = Stage.EXECUTING
            gate.begin()
            affected = gate.execute(sql)

            self.stage = Stage.VALIDATING
            passed = dispatch(session.validator, sql, affected, SchemaIntrospector(sync_conn))

            if passed:
                gate.commit()
                logger.info(f"Statement accepted, {affected} row(s) affected")
                return ExecutionOutcome(
                    state=SubmissionState.COMMITTED,
                    affected_row_count=affected,
                    committed=True,
                    message=session.success_message,
                )

            gate.rollback()
            logger.info("Validator rejected the statement, rolled back")
            return ExecutionOutcome(
                state=SubmissionState.ROLLED_BACK,
                affected_row_count=affected,
                message=OBJECTIVE_NOT_MET_MESSAGE,
            )

        except Exception as error:
            if isinstance(error, ValidatorInvocationError):
                logger.error(f"Validator failed: {error.__cause__!r}")
            else:
                logger.error(f"Statement failed: {error}")
            self._rollback_quietly(gate)
            return ExecutionOutcome(
                state=SubmissionState.ERRORED,
                affected_row_count=affected,
                error_message=str(error),
                message=f"Error: {error}",
            )

    def _rollback_quietly(self, gate: TransactionGate) -> None:
        if not gate.needs_rollback:
            return
        try:
            gate.rollback()
        except TransactionError as error:
            logger.error(f"Rollback after failure also failed: {error}")

    def _after_commit(self, session: ChallengeSession) -> None:
        if session.challenge_index >= 0:
            try:
                self.mark_complete(session.challenge_index)
            except Exception as error:
                # The commit stands even if progress could not be saved
                logger.warning(f"Failed to save progress: {error}")

        if session.auto_close_on_success:
            self.schedule_close(session.auto_close_delay, session)

    # =========================
    # Read-only schema access
    # =========================
    async def inspect(self, fn: Callable[[SchemaIntrospector], Any]) -> Any:
        """Run a read-only introspection callback on the challenge connection."""
        async with self._lock:

            def _inspect(sync_conn: Connection):
                with sync_conn.begin():
                    return fn(SchemaIntrospector(sync_conn))

            return await self.conn.run_sync(_inspect)
