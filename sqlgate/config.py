from __future__ import annotations
import logging
import os
import pathlib
import typing as t
import yaml

try:
    import tomllib as _toml
except ModuleNotFoundError:                              # Python < 3.11
    import tomli as _toml

from sqlgate.constants import DEFAULT_CONFIG_FILE, DEFAULT_PORTS
from sqlgate.dialects import Dialect, get_dialect
from sqlgate.guard import DangerousPattern

log = logging.getLogger(__name__)

_DEFAULT_PATH = pathlib.Path(DEFAULT_CONFIG_FILE)
_TRUTHY = {"1", "true", "yes", "on"}

_ODBC_DRIVERS = {
    "mssql": "ODBC Driver 18 for SQL Server",
}

# Oracle administrative connect modes.
PRIVILEGES = ("SYSDBA", "SYSOPER", "SYSASM", "SYSBACKUP", "SYSDG", "SYSKM", "SYSRAC")


class ConfigError(RuntimeError):
    """Raised for any user‑visible configuration problem."""


def _secret(raw: t.Any) -> str:
    """Allow `${ENV_VAR}` syntax for secrets."""
    raw = str(raw)
    if raw.startswith("${") and raw.endswith("}"):
        return os.getenv(raw[2:-1], "")
    return raw


def _flag(raw: t.Any, default: bool) -> bool:
    """YAML booleans pass through; quoted strings go through the truthy set."""
    if raw is None:
        return default
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUTHY
    return bool(raw)


def parse_privilege(raw: t.Any) -> str | None:
    """
    Normalise an Oracle connect mode.  Empty or ``NONE`` means a normal
    session; unknown values are logged and ignored.
    """
    if raw is None:
        return None
    value = str(raw).strip().upper()
    if value in ("", "NONE"):
        return None
    if value not in PRIVILEGES:
        log.warning(
            "Unknown privilege: %s. Available privileges: %s, or NONE",
            raw, ", ".join(PRIVILEGES),
        )
        return None
    return value


class Environment:
    """
    A thin value‑object holding everything needed to open a session and to
    assemble the validation pipeline.  Nothing here talks to the database.
    """

    def __init__(self, name: str, d: dict[str, t.Any]) -> None:
        self.name: str = name
        self.backend: str = str(d.get("backend", "mysql")).lower()
        self.dialect: Dialect = get_dialect(self.backend)

        # Oracle may be given a full connect descriptor instead of host/port/service
        self.connect_string: str | None = d.get("connect_string") or None
        if self.connect_string and self.backend != "oracle":
            raise ValueError("connect_string is only supported for the oracle backend")
        if self.connect_string:
            self.host: str = d.get("host", "")
            self.database: str = d.get("database", "")
        else:
            self.host = d["host"]
            self.database = d["database"]
        self.port: int = int(d.get("port", DEFAULT_PORTS[self.backend]))
        self.user: str = d["user"]
        self.password: str = _secret(d["password"])
        self.odbc_driver: str | None = d.get("odbc_driver", _ODBC_DRIVERS.get(self.backend))
        self.privilege: str | None = parse_privilege(d.get("privilege"))
        if self.privilege and self.backend != "oracle":
            raise ValueError("privilege is only supported for the oracle backend")

        # `validate: false` is the unchecked path for trusted callers only
        self.validate: bool = _flag(d.get("validate"), True)
        self.syntax_check: bool = _flag(d.get("syntax_check"), False)
        self.autocommit: bool = _flag(d.get("autocommit"), False)
        timeout = d.get("timeout")
        self.timeout: float | None = float(timeout) if timeout is not None else None

        raw_patterns = d.get("deny_patterns")
        self.deny_patterns: tuple[DangerousPattern, ...] | None = (
            tuple(DangerousPattern.from_config(p) for p in raw_patterns)
            if raw_patterns is not None
            else None
        )

    def __repr__(self) -> str:
        return (
            f"Environment({self.name!r}, backend={self.backend!r}, "
            f"host={self.host!r}, database={self.database!r}, validate={self.validate})"
        )

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #
    def dsn(self) -> dict[str, t.Any]:
        """Return kwargs that mysql‑connector understands."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }

    def odbc_connect_string(self) -> str:
        """Return the pyodbc connection string for SQL Server."""
        if self.backend != "mssql":
            raise ConfigError(f"Backend {self.backend!r} does not connect through ODBC")
        return (
            f"DRIVER={{{self.odbc_driver}}};SERVER={self.host},{self.port};"
            f"DATABASE={self.database};UID={self.user};PWD={self.password};"
            "Encrypt=no;TrustServerCertificate=yes"
        )

    def oracle_dsn(self) -> str:
        """The configured connect descriptor, or an easy‑connect ``host:port/service``."""
        if self.backend != "oracle":
            raise ConfigError(f"Backend {self.backend!r} is not oracle")
        return self.connect_string or f"{self.host}:{self.port}/{self.database}"


def _read(cfg_file: pathlib.Path) -> dict[str, t.Any]:
    if cfg_file.suffix.lower() == ".toml":
        with cfg_file.open("rb") as fh:
            return _toml.load(fh)
    with cfg_file.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _build(name: str, d: dict[str, t.Any]) -> Environment:
    try:
        return Environment(name, d)
    except KeyError as exc:
        raise ConfigError(f"Environment {name!r} is missing required key {exc.args[0]!r}") from exc
    except ValueError as exc:
        raise ConfigError(f"Environment {name!r}: {exc}") from exc


def from_env(environ: t.Mapping[str, str] | None = None) -> Environment:
    """
    Build an :class:`Environment` from ``DB_*`` variables, for deployments
    that ship no config file (e.g. an MCP server launched by a client).
    """
    environ = os.environ if environ is None else environ
    connect_string = environ.get("DB_CONNECT_STRING")
    required = (
        ("DB_USER", "DB_PASSWORD")
        if connect_string
        else ("DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME")
    )
    missing = [k for k in required if not environ.get(k)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    d: dict[str, t.Any] = {
        "backend": environ.get("DB_BACKEND", "oracle" if connect_string else "mysql"),
        "host": environ.get("DB_HOST", ""),
        "database": environ.get("DB_NAME", ""),
        "user": environ["DB_USER"],
        "password": environ["DB_PASSWORD"],
        "validate": _flag(environ.get("SQLGATE_VALIDATE"), True),
        "syntax_check": _flag(environ.get("SQLGATE_SYNTAX_CHECK"), False),
    }
    if connect_string:
        d["connect_string"] = connect_string
    if environ.get("DB_PRIVILEGE"):
        d["privilege"] = environ["DB_PRIVILEGE"]
    if environ.get("DB_PORT"):
        d["port"] = environ["DB_PORT"]
    if environ.get("DB_ODBC_DRIVER"):
        d["odbc_driver"] = environ["DB_ODBC_DRIVER"]
    if environ.get("SQLGATE_TIMEOUT"):
        d["timeout"] = environ["SQLGATE_TIMEOUT"]
    return _build("env", d)


def load(path: pathlib.Path | str | None = None, env: str | None = None) -> Environment:
    """
    Parse *path* (or the default YAML) and return an :class:`Environment`.

    Without an explicit *path* and without the default file, the
    environment is taken from ``DB_*`` variables instead.
    """
    cfg_file = pathlib.Path(path) if path else _DEFAULT_PATH
    if not cfg_file.exists():
        if path:
            raise ConfigError(f"Config file {cfg_file} not found.")
        return from_env()

    try:
        raw = _read(cfg_file)
    except (yaml.YAMLError, _toml.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot parse {cfg_file}: {exc}") from exc

    env_name = env or raw.get("default_env")
    if not env_name:
        raise ConfigError("No environment specified and no default_env in config")

    try:
        d = raw["environments"][env_name]
    except (KeyError, TypeError) as exc:
        raise ConfigError(f"Environment {env_name!r} not found in config") from exc
    return _build(env_name, d)
