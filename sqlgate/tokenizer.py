"""
Statement splitting.

:func:`split` is the quote‑aware scanner used on the validated path;
:func:`simple_split` is the plain separator split used when validation is
switched off for trusted callers.
"""
from __future__ import annotations

from sqlgate.constants import TERMINATOR


def split(script: str) -> list[str]:
    """
    Split *script* into trimmed, non‑empty statements in script order.

    A terminator only ends a statement outside quoted regions.  Once inside
    one quote kind the other quote character is an ordinary character, and
    a doubled single quote (``''``) is kept verbatim as an escaped literal.
    An unterminated quote simply runs to the end of the input; the quote
    balance check in :mod:`sqlgate.precheck` reports it.
    """
    statements: list[str] = []
    buf: list[str] = []
    in_single = in_double = False

    def flush() -> None:
        stmt = "".join(buf).strip()
        if stmt:
            statements.append(stmt)
        buf.clear()

    i, n = 0, len(script)
    while i < n:
        ch = script[i]
        if ch == "'" and not in_double:
            if i + 1 < n and script[i + 1] == "'":
                buf.append("''")
                i += 2
                continue
            in_single = not in_single
            buf.append(ch)
        elif ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
        elif ch == TERMINATOR and not (in_single or in_double):
            flush()
        else:
            buf.append(ch)
        i += 1

    flush()
    return statements


def simple_split(script: str) -> list[str]:
    """Split on every terminator, ignoring quotes entirely."""
    return [s.strip() for s in script.split(TERMINATOR) if s.strip()]
