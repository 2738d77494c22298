"""
Backend dialect defaults.

A :class:`Dialect` bundles what differs between engines: the default
deny‑list, the dry‑run strategy and the dry‑run error messages that only mean
"this object does not exist yet".  Tokenizer, guard and pipeline are shared.
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass

from sqlgate.guard import DangerousPattern

DryRunFn = t.Callable[[t.Any, str], None]


@dataclass(frozen=True)
class Dialect:
    name: str
    deny_patterns: tuple[DangerousPattern, ...]
    benign_markers: tuple[str, ...]
    dry_run: DryRunFn


def _rules(*pairs: tuple[str, str]) -> tuple[DangerousPattern, ...]:
    return tuple(DangerousPattern.compile(p, c) for p, c in pairs)


# --------------------------------------------------------------------- #
# Dry‑run strategies.  Each receives an open DB‑API cursor.
# --------------------------------------------------------------------- #
def _mysql_dry_run(cur, statement: str) -> None:
    """PREPARE parses and resolves names without running anything."""
    cur.execute("SET @sqlgate_stmt = %s", (statement,))
    cur.execute("PREPARE sqlgate_stmt FROM @sqlgate_stmt")
    cur.execute("DEALLOCATE PREPARE sqlgate_stmt")


def _mssql_dry_run(cur, statement: str) -> None:
    """Compile the batch with NOEXEC so nothing is executed."""
    cur.execute("SET NOEXEC ON")
    try:
        cur.execute(statement)
    finally:
        cur.execute("SET NOEXEC OFF")


def _oracle_dry_run(cur, statement: str) -> None:
    # EXPLAIN PLAN only accepts DML; other statements are not checked.
    if statement.strip().lower().startswith("select"):
        cur.execute(f"EXPLAIN PLAN FOR {statement}")


MYSQL = Dialect(
    name="mysql",
    deny_patterns=_rules(
        (r"\bDROP\s+(DATABASE|SCHEMA)\b", "drop-database"),
        (r"\bSHUTDOWN\b", "shutdown"),
        (r"\bLOAD\s+DATA\b", "external-data"),
        (r"\bINTO\s+(OUTFILE|DUMPFILE)\b", "external-data"),
        (r"\bLOAD_FILE\s*\(", "external-data"),
        (r"\bSET\s+(GLOBAL|PERSIST)\b", "configuration"),
        (r"\bINSTALL\s+(PLUGIN|COMPONENT)\b", "configuration"),
        (r"\b(CREATE|DROP|ALTER)\s+USER\b", "privileges"),
        (r"\bGRANT\b", "privileges"),
    ),
    benign_markers=(
        "You have an error in your SQL syntax",
        "doesn't exist",
        "Unknown column",
    ),
    dry_run=_mysql_dry_run,
)

MSSQL = Dialect(
    name="mssql",
    deny_patterns=_rules(
        (r"\bDROP\s+DATABASE\b", "drop-database"),
        (r"\bSHUTDOWN\b", "shutdown"),
        (r"\bxp_cmdshell\b", "os-command"),
        (r"\bsp_configure\b", "configuration"),
        (r"\bBULK\s+INSERT\b", "external-data"),
        (r"\bOPENROWSET\b", "external-data"),
        (r"\bOPENDATASOURCE\b", "external-data"),
    ),
    benign_markers=(
        "Incorrect syntax near",
        "Invalid column name",
        "Invalid object name",
    ),
    dry_run=_mssql_dry_run,
)

ORACLE = Dialect(
    name="oracle",
    deny_patterns=_rules(
        (r"\bDROP\s+DATABASE\b", "drop-database"),
        (r"\bSHUTDOWN\b", "shutdown"),
        (r"\bSTARTUP\b", "startup"),
        (r"\bALTER\s+SYSTEM\b", "configuration"),
        (r"\bUTL_FILE\b", "external-data"),
        (r"\bDBMS_JAVA\b", "os-command"),
        (r"\bDBMS_SCHEDULER\b", "os-command"),
    ),
    benign_markers=("ORA-00900", "ORA-00942", "ORA-00904"),
    dry_run=_oracle_dry_run,
)

DIALECTS: dict[str, Dialect] = {
    "mysql": MYSQL,
    "mariadb": MYSQL,
    "mssql": MSSQL,
    "oracle": ORACLE,
}


def get_dialect(backend: str) -> Dialect:
    try:
        return DIALECTS[backend.lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown backend {backend!r}; expected one of {', '.join(sorted(DIALECTS))}"
        ) from exc
