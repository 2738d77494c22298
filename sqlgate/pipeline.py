"""
Validation pipeline: guard, then precheck, for one statement or for every
statement of a script.  The whole script is vetted before anything runs.
"""
from __future__ import annotations

import logging
import typing as t

from sqlgate.exceptions import EmptyInput, RejectedStatement, ValidationFailure
from sqlgate.guard import DangerousPattern, Guard
from sqlgate.precheck import DryRunner, Precheck, SyntaxAdvisory
from sqlgate.tokenizer import simple_split, split

if t.TYPE_CHECKING:
    from sqlgate.config import Environment

log = logging.getLogger(__name__)


class ValidationPipeline:
    """
    Orchestrates :class:`Guard` and :class:`Precheck`.

    With ``enabled=False`` the pipeline is a pass‑through: scripts are cut
    with :func:`simple_split` and no statement is checked.  That mode is
    meant for trusted callers only.
    """

    def __init__(self, guard: Guard, precheck: Precheck, *, enabled: bool = True) -> None:
        self.guard = guard
        self.precheck = precheck
        self.enabled: bool = enabled

    @classmethod
    def for_environment(
        cls, env: Environment, dry_runner: DryRunner | None = None
    ) -> ValidationPipeline:
        """Assemble the pipeline an :class:`Environment` asks for."""
        dialect = env.dialect
        patterns: t.Iterable[DangerousPattern] = (
            env.deny_patterns if env.deny_patterns is not None else dialect.deny_patterns
        )
        precheck = Precheck(
            dry_runner,
            syntax_check=env.syntax_check,
            benign_markers=dialect.benign_markers,
        )
        return cls(Guard(patterns), precheck, enabled=env.validate)

    def validate_statement(self, text: str) -> list[SyntaxAdvisory]:
        """Raise a :class:`RejectedStatement` or return dry‑run advisories."""
        if not self.enabled:
            return []
        self.guard.check(text)
        return self.precheck.check(text)

    def validate_script(self, text: str) -> list[str]:
        """
        Return the statements of *text* in execution order.

        Raises :class:`EmptyInput` when the script holds no statement at all
        and :class:`ValidationFailure` (1‑based index) for the first rejected
        statement.
        """
        if not self.enabled:
            statements = simple_split(text)
            if not statements:
                raise EmptyInput("SQL script")
            log.debug("Validation disabled; %d statements split without checks", len(statements))
            return statements

        statements = split(text)
        if not statements:
            raise EmptyInput("SQL script")

        for index, stmt in enumerate(statements, start=1):
            try:
                self.validate_statement(stmt)
            except RejectedStatement as exc:
                raise ValidationFailure(index, exc, stmt) from exc
        return statements
