"""
Deny‑list guard for high‑risk operations.

Matching is purely lexical: the raw statement text is searched, not a parsed
structure, so a pattern may fire inside a string literal or comment.  The
guard errs on the side of refusing.
"""
from __future__ import annotations

import re
import typing as t
from dataclasses import dataclass

from sqlgate.exceptions import DangerousOperation
from sqlgate.utils import preview


@dataclass(frozen=True)
class DangerousPattern:
    """One deny‑list rule: a case‑insensitive regex plus its category."""

    regex: t.Pattern[str]
    category: str

    @classmethod
    def compile(cls, pattern: str, category: str) -> DangerousPattern:
        return cls(re.compile(pattern, re.IGNORECASE), category)

    @classmethod
    def from_config(cls, entry: t.Mapping[str, t.Any]) -> DangerousPattern:
        """Build a rule from a ``{pattern: ..., category: ...}`` config entry."""
        try:
            pattern = str(entry["pattern"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"deny pattern entry without `pattern`: {entry!r}") from exc
        try:
            return cls.compile(pattern, str(entry.get("category", "custom")))
        except re.error as exc:
            raise ValueError(f"invalid deny pattern {pattern!r}: {exc}") from exc


class Guard:
    """Rejects statements matching any rule of an ordered deny‑list."""

    def __init__(self, patterns: t.Iterable[DangerousPattern]) -> None:
        self.patterns: tuple[DangerousPattern, ...] = tuple(patterns)

    def check(self, statement: str) -> None:
        """Raise :class:`DangerousOperation` for the first matching rule."""
        for rule in self.patterns:
            m = rule.regex.search(statement)
            if m:
                raise DangerousOperation(rule.category, preview(m.group(0)), statement)
