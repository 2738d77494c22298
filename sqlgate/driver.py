from __future__ import annotations
import logging
import typing as t
from contextlib import contextmanager

import mysql.connector

from sqlgate.config import Environment
from sqlgate.dialects import Dialect
from sqlgate.exceptions import CommitFailure, ConnectionFailure, DryRunError, ExecutionFailure
from sqlgate.results import ExecutionRecord, shape

log = logging.getLogger(__name__)

ErrorTypes = t.Tuple[t.Type[BaseException], ...]


class Session:
    """
    One open DB‑API connection plus the dialect it speaks.

    This is the executor the pipeline and runner call into: :meth:`dry_run`
    for the advisory syntax check and :meth:`execute` for real work.  Driver
    errors listed in *errors* are translated to sqlgate exceptions here.
    """

    def __init__(
        self,
        conn: t.Any,
        dialect: Dialect,
        *,
        errors: ErrorTypes = (Exception,),
    ) -> None:
        self.conn = conn
        self.dialect = dialect
        self.errors = errors

    def dry_run(self, statement: str) -> None:
        cur = self.conn.cursor()
        try:
            self.dialect.dry_run(cur, statement)
        except self.errors as exc:
            raise DryRunError(str(exc)) from exc
        finally:
            cur.close()

    def execute(self, index: int, statement: str) -> ExecutionRecord:
        cur = self.conn.cursor()
        try:
            cur.execute(statement)
            return shape(index, statement, cur)
        except self.errors as exc:
            raise ExecutionFailure(index, str(exc), statement) from exc
        finally:
            cur.close()


def _connect_mysql(env: Environment) -> tuple[t.Any, ErrorTypes]:
    return (
        mysql.connector.connect(**env.dsn(), autocommit=env.autocommit),
        (mysql.connector.Error,),
    )


def _connect_mssql(env: Environment) -> tuple[t.Any, ErrorTypes]:
    # pyodbc needs the unixODBC runtime; only load it when SQL Server is used.
    import pyodbc

    return (
        pyodbc.connect(env.odbc_connect_string(), autocommit=env.autocommit),
        (pyodbc.Error,),
    )


_ORACLE_MODES = {
    "SYSDBA": "AUTH_MODE_SYSDBA",
    "SYSOPER": "AUTH_MODE_SYSOPER",
    "SYSASM": "AUTH_MODE_SYSASM",
    "SYSBACKUP": "AUTH_MODE_SYSBKP",
    "SYSDG": "AUTH_MODE_SYSDGD",
    "SYSKM": "AUTH_MODE_SYSKMT",
    "SYSRAC": "AUTH_MODE_SYSRAC",
}


def oracle_connect_args(env: Environment, oracledb: t.Any) -> dict[str, t.Any]:
    """Keyword arguments for ``oracledb.connect``, including the connect mode."""
    kwargs: dict[str, t.Any] = {
        "user": env.user,
        "password": env.password,
        "dsn": env.oracle_dsn(),
    }
    if env.privilege:
        kwargs["mode"] = getattr(oracledb, _ORACLE_MODES[env.privilege])
    return kwargs


def _connect_oracle(env: Environment) -> tuple[t.Any, ErrorTypes]:
    import oracledb

    conn = oracledb.connect(**oracle_connect_args(env, oracledb))
    conn.autocommit = env.autocommit
    return conn, (oracledb.Error,)


_CONNECTORS: dict[str, t.Callable[[Environment], tuple[t.Any, ErrorTypes]]] = {
    "mysql": _connect_mysql,
    "mariadb": _connect_mysql,
    "mssql": _connect_mssql,
    "oracle": _connect_oracle,
}


def _target(env: Environment) -> str:
    if env.connect_string:
        return env.connect_string
    return f"{env.host}:{env.port}/{env.database}"


@contextmanager
def connection(env: Environment) -> t.Iterator[Session]:
    """
    Context‑manager that yields a :class:`Session` on *env*.

    The connection is committed when the block finishes cleanly and closed
    on every exit path; uncommitted work is rolled back by the close.
    """
    log.info("Connecting to %s backend %s", env.backend, _target(env))
    try:
        conn, errors = _CONNECTORS[env.backend](env)
    except Exception as exc:
        raise ConnectionFailure(
            f"Cannot connect to {env.backend} at {_target(env)}: {exc}"
        ) from exc
    log.info("Connected successfully")

    try:
        yield Session(conn, env.dialect, errors=errors)
        try:
            conn.commit()
        except errors as exc:
            raise CommitFailure(f"Commit failed, changes rolled back: {exc}") from exc
    finally:
        try:
            conn.close()
            log.info("Database connection closed")
        except errors as exc:
            log.warning("Error closing connection: %s", exc)
