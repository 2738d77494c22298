"""Tests for sessions, dry runs and connection handling."""

import types

import pytest

import sqlgate.driver as driver
from conftest import FakeConnection, FakeError, make_env
from sqlgate.dialects import MYSQL, ORACLE
from sqlgate.driver import Session, connection, oracle_connect_args
from sqlgate.exceptions import CommitFailure, DryRunError
from sqlgate.runner import ScriptRunner

# stand-in for the oracledb module's connect-mode constants
ORACLEDB = types.SimpleNamespace(
    AUTH_MODE_SYSDBA=2,
    AUTH_MODE_SYSOPER=4,
    AUTH_MODE_SYSBKP=131072,
    AUTH_MODE_SYSRAC=1048576,
)


def test_mysql_dry_run_prepares_bound_statement(fake_conn):
    Session(fake_conn, MYSQL, errors=(FakeError,)).dry_run("SELECT 1")
    assert fake_conn.executed == [
        "SET @sqlgate_stmt = %s",
        "PREPARE sqlgate_stmt FROM @sqlgate_stmt",
        "DEALLOCATE PREPARE sqlgate_stmt",
    ]
    # the statement travels as a bound parameter, never spliced into SQL
    assert fake_conn.params == [("SELECT 1",), None, None]


def test_mysql_dry_run_error_is_wrapped(fake_conn):
    fake_conn.results["PREPARE sqlgate_stmt FROM @sqlgate_stmt"] = FakeError(
        "Table 'shop.later' doesn't exist"
    )
    with pytest.raises(DryRunError, match="doesn't exist"):
        Session(fake_conn, MYSQL, errors=(FakeError,)).dry_run("SELECT * FROM later")
    assert fake_conn.cursors_closed == 1


def test_oracle_dry_run_explains_selects(fake_conn):
    Session(fake_conn, ORACLE, errors=(FakeError,)).dry_run("  SELECT * FROM emp")
    assert fake_conn.executed == ["EXPLAIN PLAN FOR   SELECT * FROM emp"]


@pytest.mark.parametrize(
    "stmt",
    ["INSERT INTO emp (id) VALUES (1)", "CREATE TABLE emp (id NUMBER)", "BEGIN NULL; END"],
)
def test_oracle_dry_run_skips_everything_else(fake_conn, stmt):
    Session(fake_conn, ORACLE, errors=(FakeError,)).dry_run(stmt)
    assert fake_conn.executed == []
    assert fake_conn.cursors_closed == 1


def test_oracle_missing_table_is_a_dry_run_error(fake_conn):
    fake_conn.results["EXPLAIN PLAN FOR SELECT * FROM later"] = FakeError(
        "ORA-00942: table or view does not exist"
    )
    with pytest.raises(DryRunError, match="ORA-00942"):
        Session(fake_conn, ORACLE, errors=(FakeError,)).dry_run("SELECT * FROM later")


def test_oracle_connect_args_without_privilege():
    env = make_env(backend="oracle", host="ora", database="XEPDB1")
    assert oracle_connect_args(env, ORACLEDB) == {
        "user": "app",
        "password": "secret",
        "dsn": "ora:1521/XEPDB1",
    }


@pytest.mark.parametrize(
    "privilege, mode",
    [("sysdba", 2), ("SYSOPER", 4), ("SYSBACKUP", 131072), ("sysrac", 1048576)],
)
def test_oracle_connect_args_privilege_mode(privilege, mode):
    env = make_env(backend="oracle", privilege=privilege)
    assert oracle_connect_args(env, ORACLEDB)["mode"] == mode


def test_oracle_connect_args_prefer_connect_string():
    descriptor = "(DESCRIPTION=(ADDRESS=(PROTOCOL=TCP)(HOST=ora)(PORT=1521))(CONNECT_DATA=(SERVICE_NAME=XE)))"
    env = make_env(backend="oracle", host=None, database=None, connect_string=descriptor)
    assert oracle_connect_args(env, ORACLEDB)["dsn"] == descriptor


@pytest.fixture
def refusing_commit(monkeypatch):
    conn = FakeConnection()
    conn.commit_error = FakeError("ORA-02091: transaction rolled back")
    monkeypatch.setitem(driver._CONNECTORS, "mssql", lambda env: (conn, (FakeError,)))
    return conn


def test_commit_failure_is_wrapped(env, refusing_commit):
    with pytest.raises(CommitFailure, match="ORA-02091") as err:
        with connection(env):
            pass
    assert isinstance(err.value.__cause__, FakeError)
    assert refusing_commit.closed


def test_script_surfaces_commit_failure(env, refusing_commit):
    with pytest.raises(CommitFailure):
        ScriptRunner(env).run_script("UPDATE t SET x = 1;")
    assert refusing_commit.executed == ["UPDATE t SET x = 1"]
    assert refusing_commit.closed
