"""
Argument types for the command line parsers of all `hackpl.units.Unit`s.
"""
from __future__ import annotations

from argparse import ArgumentTypeError


def number(expression: str | int) -> int:
    """
    Parse an integer from the command line. Prefixes like `0x` for hexadecimal are supported.
    """
    if isinstance(expression, int):
        return expression
    try:
        return int(expression.strip().replace('_', ''), 0)
    except ValueError:
        raise ArgumentTypeError(F'not a valid number: {expression!r}') from None


def utf8(expression: str | bytes) -> bytes:
    """
    Encode a command line argument as UTF-8; byte strings are returned unchanged.
    """
    if isinstance(expression, str):
        return expression.encode('utf8')
    return bytes(expression)
