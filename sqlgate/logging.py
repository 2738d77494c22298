"""
Logging setup shared by the CLI and the MCP server.

Records go to stderr: stdout carries JSON results and the stdio transport.
"""
import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger once and return the ``sqlgate`` logger.

    Args:
        level: Log level string (e.g. 'INFO', 'DEBUG').
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(name)-20s  %(levelname)-7s  %(message)s",
        stream=sys.stderr,
    )
    return logging.getLogger("sqlgate")
