"""
Cheap structural checks run on every statement before execution, plus the
optional advisory dry run against the backend.
"""
from __future__ import annotations

import logging
import typing as t
from dataclasses import dataclass

from sqlgate.exceptions import DryRunError, EmptyInput, UnbalancedQuoting
from sqlgate.utils import preview

log = logging.getLogger(__name__)


class DryRunner(t.Protocol):
    """Anything able to validate a statement without committing its effects."""

    def dry_run(self, statement: str) -> None:
        """Raise :class:`DryRunError` when the backend refuses *statement*."""


@dataclass(frozen=True)
class SyntaxAdvisory:
    """Non‑fatal dry‑run complaint; logged and reported, never raised."""

    statement: str
    message: str


class Precheck:
    def __init__(
        self,
        dry_runner: DryRunner | None = None,
        *,
        syntax_check: bool = False,
        benign_markers: t.Iterable[str] = (),
    ) -> None:
        self.dry_runner = dry_runner
        self.syntax_check: bool = syntax_check
        self.benign_markers: tuple[str, ...] = tuple(benign_markers)

    def check(self, statement: str) -> list[SyntaxAdvisory]:
        if not statement.strip():
            raise EmptyInput()

        # Doubled quotes add two, so escaped literals keep the parity even.
        if statement.count("'") % 2:
            raise UnbalancedQuoting("'", statement)
        if statement.count('"') % 2:
            raise UnbalancedQuoting('"', statement)

        if not (self.syntax_check and self.dry_runner is not None):
            return []
        return self._dry_run(statement)

    def _dry_run(self, statement: str) -> list[SyntaxAdvisory]:
        try:
            self.dry_runner.dry_run(statement)
        except DryRunError as exc:
            message = str(exc)
            if any(marker in message for marker in self.benign_markers):
                log.warning("Syntax validation warning for %r: %s", preview(statement), message)
                return [SyntaxAdvisory(statement, message)]
            log.debug("Dry run inconclusive for %r: %s", preview(statement), message)
        return []
