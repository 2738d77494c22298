from __future__ import annotations
import logging
import time
import typing as t
from contextlib import contextmanager

from sqlgate.config import Environment
from sqlgate.constants import LOG_PREVIEW_CHARS, TERMINATOR
from sqlgate.driver import Session, connection
from sqlgate.exceptions import (
    DeadlineExceeded,
    EmptyInput,
    ExecutionFailure,
    MissingTerminator,
    RejectedStatement,
    ValidationFailure,
)
from sqlgate.pipeline import ValidationPipeline
from sqlgate.results import READ, ExecutionRecord
from sqlgate.utils import preview

log = logging.getLogger(__name__)


def _outcome(record: ExecutionRecord) -> str:
    if record.kind == READ:
        return f"returned {record.rowcount} rows"
    return f"affected {record.rowcount} rows"


class ScriptRunner:
    """
    Script submission entry point: vets a query or script for *env* and runs
    it statement by statement over a single session.

    Without *session* every call opens its own connection and releases it
    on the way out, success or not.  A caller that passes a
    :class:`Session` owns its lifecycle and the runner never closes it.
    """

    def __init__(
        self,
        env: Environment,
        *,
        session: Session | None = None,
        clock: t.Callable[[], float] = time.perf_counter,
    ) -> None:
        self.env: Environment = env
        self.session: Session | None = session
        self.clock = clock

    @contextmanager
    def _session(self) -> t.Iterator[Session]:
        if self.session is not None:
            yield self.session
            return
        with connection(self.env) as session:
            yield session

    def _pipeline(self, session: Session) -> ValidationPipeline:
        return ValidationPipeline.for_environment(self.env, session)

    def run_query(self, query: str) -> ExecutionRecord:
        """Validate and run a single ``;``‑terminated statement."""
        query = (query or "").strip()
        if not query:
            raise EmptyInput("SQL query")
        if not query.endswith(TERMINATOR):
            raise MissingTerminator("Query must end with a semicolon (;)")
        stmt = query[:-1].strip()
        if not stmt:
            raise EmptyInput("SQL query")

        log.info("Received sql query: %s", preview(stmt, LOG_PREVIEW_CHARS))
        with self._session() as session:
            try:
                self._pipeline(session).validate_statement(stmt)
            except RejectedStatement as exc:
                raise ValidationFailure(1, exc, stmt) from exc
            record = session.execute(1, stmt)
        log.info("Query completed - %s", _outcome(record))
        return record

    def run_script(self, script: str, *, timeout: float | None = None) -> list[ExecutionRecord]:
        """
        Validate every statement of *script*, then run them in order.

        A failing statement aborts the rest of the script; nothing is
        returned, but the raised error carries the records completed so far.
        *timeout* (or the environment's) bounds the whole run and is checked
        before each statement starts.
        """
        if not script or not script.strip():
            raise EmptyInput("SQL script")
        if not script.strip().endswith(TERMINATOR):
            raise MissingTerminator("Script must end with a semicolon (;)")
        if timeout is None:
            timeout = self.env.timeout

        started = self.clock()
        with self._session() as session:
            log.info("Validating script...")
            statements = self._pipeline(session).validate_script(script)
            total = len(statements)
            log.info("Script contains %d statements", total)

            records: list[ExecutionRecord] = []
            for index, stmt in enumerate(statements, start=1):
                if timeout is not None and self.clock() - started >= timeout:
                    log.error("Deadline of %gs reached after %d/%d statements", timeout, len(records), total)
                    raise DeadlineExceeded(timeout, records, total)

                log.info("Executing statement %d/%d: %s", index, total, preview(stmt, LOG_PREVIEW_CHARS))
                try:
                    record = session.execute(index, stmt)
                except ExecutionFailure as exc:
                    log.error("Error executing statement %d: %s", index, exc.backend_message)
                    exc.completed = tuple(records)
                    raise
                log.info("Statement %d completed - %s", index, _outcome(record))
                records.append(record)

        log.info("Script execution completed successfully")
        return records
