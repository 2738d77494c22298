"""
sqlgate MCP server.

Exposes two tools over stdio so an MCP client can submit SQL:

* ``execute-query``  – one statement ending with ``;``
* ``execute-script`` – several ``;``‑separated statements, one output each

Run as:  sqlgate serve -e <env>        (or ``python -m sqlgate.server``)
"""
from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from sqlgate.config import Environment, load
from sqlgate.results import to_json
from sqlgate.runner import ScriptRunner

log = logging.getLogger(__name__)

mcp = FastMCP("sqlgate")

_env: Environment | None = None


def configure(env: Environment) -> None:
    """Select the environment the tools run against."""
    global _env
    _env = env


def _get_env() -> Environment:
    """Lazy‑load the environment on first tool call."""
    global _env
    if _env is None:
        _env = load()
    return _env


@mcp.tool(name="execute-query")
def execute_query(query: str) -> str:
    """Execute a query on the database.

    Args:
        query: The query to run, ending with ';'.
               Example: 'SELECT name FROM customers;'
    """
    try:
        record = ScriptRunner(_get_env()).run_query(query)
    except Exception:
        log.exception("Error executing query")
        raise
    return to_json(record.as_payload())


@mcp.tool(name="execute-script")
def execute_script(sql_script: str) -> str:
    """Execute a script and return a list of outputs, one per statement.

    Reads yield their rows, writes yield {"rowsAffected": n}.

    Args:
        sql_script: Commands separated by ';' and ending with ';'.  Example:
            "CREATE TABLE t (id INT, name VARCHAR(100));INSERT INTO t VALUES (1, 'Alice');"
    """
    try:
        records = ScriptRunner(_get_env()).run_script(sql_script)
    except Exception:
        log.exception("Error executing script")
        raise
    return to_json([r.as_payload() for r in records])


def run(env: Environment | None = None) -> None:
    if env is not None:
        configure(env)
    log.info("sqlgate MCP server running on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    from sqlgate.logging import setup_logging

    setup_logging()
    run()
