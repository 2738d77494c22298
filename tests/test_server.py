"""Tests for the MCP tool functions (called directly, no transport)."""

import json

import pytest

import sqlgate.driver as driver
from conftest import FakeConnection, FakeError, make_env
from sqlgate import server
from sqlgate.exceptions import ValidationFailure


@pytest.fixture
def conn(monkeypatch):
    conn = FakeConnection({"SELECT name FROM sys.tables": (["name"], [("orders",)])})
    monkeypatch.setitem(driver._CONNECTORS, "mssql", lambda env: (conn, (FakeError,)))
    monkeypatch.setattr(server, "_env", None)
    server.configure(make_env())
    return conn


def test_execute_query(conn):
    out = server.execute_query("SELECT name FROM sys.tables;")
    assert json.loads(out) == [{"name": "orders"}]
    assert conn.closed


def test_execute_script(conn):
    out = server.execute_script(
        "CREATE TABLE test_table (id INT, name NVARCHAR(100));"
        "INSERT INTO test_table (id, name) VALUES (1, 'Alice');"
    )
    assert json.loads(out) == [{"rowsAffected": 0}, {"rowsAffected": 0}]


def test_execute_script_rejects(conn):
    with pytest.raises(ValidationFailure):
        server.execute_script("SELECT 1; EXEC xp_cmdshell 'dir';")
    assert conn.executed == []
