"""
Result shaping: one uniform record per executed statement, whatever the
backend driver returned.
"""
from __future__ import annotations

import json
import typing as t
from dataclasses import dataclass

import sqlparse

READ = "read"
WRITE = "write"


def is_read(statement: str) -> bool:
    """
    Return True for row‑producing statements.

    ``sqlparse`` only looks at leading keywords here (CTEs included), which
    is all the classification needs.
    """
    parsed = sqlparse.parse(statement)
    return bool(parsed) and parsed[0].get_type() == "SELECT"


@dataclass(frozen=True)
class ExecutionRecord:
    index: int
    statement: str
    kind: str
    rows: tuple[dict[str, t.Any], ...] | None = None
    rowcount: int = 0

    def as_payload(self) -> t.Any:
        """Wire form: the row list for reads, ``{"rowsAffected": n}`` for writes."""
        if self.kind == READ:
            return list(self.rows or ())
        return {"rowsAffected": self.rowcount}


def to_json(payload: t.Any) -> str:
    """Pretty JSON; dates, decimals and other driver types fall back to ``str``."""
    return json.dumps(payload, indent=2, default=str)


def _columns(cursor) -> list[str]:
    return [d[0] for d in cursor.description or ()]


def shape(index: int, statement: str, cursor) -> ExecutionRecord:
    """
    Turn the state of a DB‑API *cursor* that just ran *statement* into a record.

    A cursor with a result set is a read whatever the statement looks like
    (``SHOW``, ``DESCRIBE``, ``EXEC``, parenthesised unions); :func:`is_read`
    only decides when the driver reports no result set.
    """
    if cursor.description is not None:
        cols = _columns(cursor)
        rows = tuple(dict(zip(cols, row)) for row in cursor.fetchall())
        return ExecutionRecord(index, statement, READ, rows=rows, rowcount=len(rows))
    if is_read(statement):
        return ExecutionRecord(index, statement, READ, rows=())
    return ExecutionRecord(index, statement, WRITE, rowcount=max(cursor.rowcount, 0))
