"""
Error hierarchy for sqlgate.

Everything raised on purpose derives from :class:`SqlGateError` so the CLI
and the MCP server can report it uniformly.  Statement level rejections
(:class:`RejectedStatement`) are wrapped into :class:`ValidationFailure` once
the script position of the statement is known.
"""
from __future__ import annotations

import typing as t

from sqlgate.utils import preview as _preview

if t.TYPE_CHECKING:
    from sqlgate.results import ExecutionRecord


class SqlGateError(RuntimeError):
    """Base class for all sqlgate errors."""


class MissingTerminator(SqlGateError):
    """A query or script does not end with the statement terminator."""


class ConnectionFailure(SqlGateError):
    """The backend could not be reached or refused the credentials."""


class CommitFailure(SqlGateError):
    """Every statement ran but the final commit was refused."""


# --------------------------------------------------------------------- #
# Validation
# --------------------------------------------------------------------- #
class RejectedStatement(SqlGateError):
    """A single statement failed validation."""

    def __init__(self, reason: str, statement: str = "") -> None:
        self.reason: str = reason
        self.preview: str = _preview(statement)
        super().__init__(reason)


class EmptyInput(RejectedStatement):
    def __init__(self, what: str = "SQL statement") -> None:
        super().__init__(f"Empty {what}")


class UnbalancedQuoting(RejectedStatement):
    def __init__(self, quote: str, statement: str) -> None:
        self.quote: str = quote
        kind = "single" if quote == "'" else "double"
        super().__init__(f"Unbalanced {kind} quotes in SQL statement", statement)


class DangerousOperation(RejectedStatement):
    def __init__(self, category: str, matched: str, statement: str) -> None:
        self.category: str = category
        self.matched: str = matched
        super().__init__(
            f"Potentially dangerous operation detected ({category}: {matched!r})",
            statement,
        )


class ValidationFailure(SqlGateError):
    """Statement *index* (1‑based) of a script was rejected."""

    def __init__(self, index: int, inner: RejectedStatement, statement: str) -> None:
        self.index: int = index
        self.inner: RejectedStatement = inner
        self.preview: str = _preview(statement)
        super().__init__(
            f"Validation error in statement {index}: {self.preview} - {inner.reason}"
        )


class DryRunError(SqlGateError):
    """The backend refused to prepare / explain a statement."""


# --------------------------------------------------------------------- #
# Execution
# --------------------------------------------------------------------- #
class ExecutionFailure(SqlGateError):
    """
    The backend failed while running statement *index*.

    ``statement`` keeps the full text so the failure can be reproduced;
    ``completed`` holds the records of the statements that ran before it.
    """

    def __init__(
        self,
        index: int,
        backend_message: str,
        statement: str,
        completed: t.Sequence[ExecutionRecord] = (),
    ) -> None:
        self.index: int = index
        self.backend_message: str = backend_message
        self.statement: str = statement
        self.preview: str = _preview(statement)
        self.completed: tuple[ExecutionRecord, ...] = tuple(completed)
        super().__init__(
            f"Error in statement {index} ({self.preview}): {backend_message}"
        )


class DeadlineExceeded(SqlGateError):
    """The script ran out of time before starting its next statement."""

    def __init__(
        self, timeout: float, completed: t.Sequence[ExecutionRecord], total: int
    ) -> None:
        self.timeout: float = timeout
        self.completed: tuple[ExecutionRecord, ...] = tuple(completed)
        self.total: int = total
        super().__init__(
            f"Script exceeded its {timeout:g}s deadline after "
            f"{len(self.completed)} of {total} statements"
        )
