#!/usr/bin/env python3
"""
sqlgate – CLI.

• ``split`` / ``validate`` never execute anything (``validate --syntax-check``
  only prepares statements on the backend).
• ``query`` / ``script`` validate first, then execute over one connection.
• ``serve`` exposes the same two operations as MCP tools on stdio.

Results are printed to stdout as JSON; logs go to stderr.
"""
from __future__ import annotations

import functools
import pathlib
import sys

import click

from sqlgate import __version__
from sqlgate.config import ConfigError, Environment, load
from sqlgate.dialects import DIALECTS, get_dialect
from sqlgate.driver import connection
from sqlgate.exceptions import SqlGateError
from sqlgate.guard import Guard
from sqlgate.logging import setup_logging
from sqlgate.pipeline import ValidationPipeline
from sqlgate.precheck import Precheck
from sqlgate.results import to_json
from sqlgate.runner import ScriptRunner
from sqlgate.tokenizer import split


def _fail_cleanly(fn):
    """Report sqlgate / config errors on stderr and exit 1."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ConfigError as exc:
            click.echo(f"Config error: {exc}", err=True)
            sys.exit(1)
        except SqlGateError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)

    return wrapper


def _load_env(ctx: click.Context, name: str | None) -> Environment:
    return load(ctx.obj["config_path"], name)


def _read_script(script: str | None, script_file: str | None) -> str:
    if script_file:
        return pathlib.Path(script_file).read_text(encoding="utf-8")
    if script is None:
        raise click.UsageError("Pass the SQL as an argument or with -f/--file.")
    return script


def _script_opts(fn):
    opts = [
        click.argument("script", required=False),
        click.option(
            "-f", "--file", "script_file",
            type=click.Path(exists=True, dir_okay=False), help="read SQL from a file",
        ),
    ]
    for opt in reversed(opts):
        fn = opt(fn)
    return fn


@click.group()
@click.option(
    "-c", "--config", "config_path", type=click.Path(), help="env config YAML/TOML"
)
@click.option("--log-level", default="WARNING", show_default=True)
@click.pass_context
def main(ctx, config_path, log_level):
    setup_logging(log_level)
    ctx.obj = {"config_path": pathlib.Path(config_path) if config_path else None}


@main.command()
def version():
    click.echo(__version__)


@main.command("split")
@_script_opts
def split_cmd(script, script_file):
    """Print the statements a script splits into."""
    click.echo(to_json(split(_read_script(script, script_file))))


@main.command()
@_script_opts
@click.option("-e", "--env", "env_name")
@click.option(
    "-b", "--backend", type=click.Choice(sorted(DIALECTS)),
    help="check with this backend's defaults, without any config",
)
@click.option("--syntax-check", is_flag=True, help="also prepare each statement on the backend")
@click.pass_context
@_fail_cleanly
def validate(ctx, script, script_file, env_name, backend, syntax_check):
    """Validate a script and print its statements."""
    text = _read_script(script, script_file)

    if backend and syntax_check:
        raise click.UsageError(
            "-b/--backend checks against built-in defaults only; "
            "use -e/--env with --syntax-check."
        )
    if backend:
        dialect = get_dialect(backend)
        pipeline = ValidationPipeline(Guard(dialect.deny_patterns), Precheck())
        click.echo(to_json(pipeline.validate_script(text)))
        return

    env = _load_env(ctx, env_name)
    env.validate = True
    env.syntax_check = env.syntax_check or syntax_check
    if not env.syntax_check:
        click.echo(to_json(ValidationPipeline.for_environment(env).validate_script(text)))
        return

    with connection(env) as session:
        statements = ValidationPipeline.for_environment(env, session).validate_script(text)
    click.echo(to_json(statements))


@main.command()
@click.argument("query")
@click.option("-e", "--env", "env_name")
@click.pass_context
@_fail_cleanly
def query(ctx, query, env_name):
    """Validate and run one statement ending with ';'."""
    record = ScriptRunner(_load_env(ctx, env_name)).run_query(query)
    click.echo(to_json(record.as_payload()))


@main.command()
@_script_opts
@click.option("-e", "--env", "env_name")
@click.option("--timeout", type=float, help="deadline for the whole script, in seconds")
@click.option(
    "--no-validate", is_flag=True,
    help="skip all checks and split on every ';' (trusted input only)",
)
@click.pass_context
@_fail_cleanly
def script(ctx, script, script_file, env_name, timeout, no_validate):
    """Validate and run a ';'-separated script; print one output per statement."""
    text = _read_script(script, script_file)
    env = _load_env(ctx, env_name)
    if no_validate:
        env.validate = False
    records = ScriptRunner(env).run_script(text, timeout=timeout)
    click.echo(to_json([r.as_payload() for r in records]))


@main.command()
@click.option("-e", "--env", "env_name")
@click.pass_context
@_fail_cleanly
def serve(ctx, env_name):
    """Run the MCP server on stdio."""
    from sqlgate import server

    server.run(_load_env(ctx, env_name))


if __name__ == "__main__":
    main()
