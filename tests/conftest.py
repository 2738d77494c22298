"""Test fixtures: an in-memory stand-in for a DB-API connection."""

import pytest

from sqlgate.config import Environment
from sqlgate.dialects import MSSQL
from sqlgate.driver import Session


class FakeError(Exception):
    """Plays the driver's DB-API ``Error`` class."""


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self._rows = []
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.executed.append(sql)
        self.conn.params.append(params)
        outcome = self.conn.results.get(sql, 0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            self.description = None
            self._rows = []
            self.rowcount = outcome
            return
        columns, rows = outcome
        self.description = [(c, None, None, None, None, None, None) for c in columns]
        self._rows = list(rows)
        self.rowcount = len(self._rows)

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        self.closed = True
        self.conn.cursors_closed += 1


class FakeConnection:
    """
    ``results`` maps exact SQL text to an affected-row count, a
    ``(columns, rows)`` pair, or an exception instance to raise.
    """

    def __init__(self, results=None):
        self.results = dict(results or {})
        self.executed = []
        self.params = []
        self.commit_error = None
        self.commits = 0
        self.closed = False
        self.cursors_closed = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        if self.commit_error is not None:
            raise self.commit_error
        self.commits += 1

    def close(self):
        self.closed = True


def make_env(**overrides):
    d = {
        "backend": "mssql",
        "host": "db.local",
        "database": "sales",
        "user": "app",
        "password": "secret",
    }
    d.update(overrides)
    return Environment("test", d)


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def session(fake_conn):
    return Session(fake_conn, MSSQL, errors=(FakeError,))


@pytest.fixture
def env():
    return make_env()
