from __future__ import annotations

TERMINATOR = ";"

# Length of statement excerpts quoted in error messages.
PREVIEW_CHARS = 50

# Length of statement excerpts written to the progress log.
LOG_PREVIEW_CHARS = 100

DEFAULT_CONFIG_FILE = "sqlgate.config.yml"

DEFAULT_PORTS = {
    "mysql": 3306,
    "mariadb": 3306,
    "mssql": 1433,
    "oracle": 1521,
}
