"""
Identifier utilities for the engine.

This module defines:
- ObjectIdentity: opaque, server-assigned id of a catalog object.
- Helpers to quote identifiers, string literals and qualified names.

Conventions:
- Verbs: quote_*, format_*.
- Identifiers use double quotes, literals use single quotes; each doubles its
  own quote character and nothing else.
- Names and values never share a helper: every interpolated name goes through
  `quote_identifier`/`qualified_name`, every value through `quote_literal`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_KEYWORD = re.compile(r"^[A-Za-z][A-Za-z0-9_]*( [A-Za-z][A-Za-z0-9_]*)*$")


# -----------------------------
# Identity
# -----------------------------


@dataclass(frozen=True, slots=True)
class ObjectIdentity:
    """
    Server-assigned id of a catalog object.

    Stable across renames and invalidated on drop. Treated as opaque: nothing
    parses it, and it never compares equal to a plain string.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or self.value == "":
            raise ValueError("Object identity must be a non-empty string.")

    def __str__(self) -> str:
        return self.value


# -----------------------------
# String helpers
# -----------------------------


def quote_identifier(identifier: str) -> str:
    """Quote a single SQL identifier with double quotes, doubling embedded ones."""
    text = str(identifier)
    return '"' + text.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote a SQL string literal with single quotes, doubling embedded ones."""
    text = str(value)
    return "'" + text.replace("'", "''") + "'"


def qualified_name(*parts: str) -> str:
    """
    Return a dot-delimited, double-quoted qualified name from the provided parts.

    Examples:
        qualified_name("materialize", "public", "orders")
        -> '"materialize"."public"."orders"'

    Raises:
        ValueError: if no parts are given, or a part is None or empty.
    """
    if not parts:
        raise ValueError("At least one name part must be provided.")

    quoted: list[str] = []
    for part in parts:
        if part is None:
            raise ValueError("Qualified name parts must not be None.")
        if str(part) == "":
            raise ValueError("Qualified name parts must not be empty.")
        quoted.append(quote_identifier(part))
    return ".".join(quoted)


def quote_literal_list(values: Iterable[str]) -> str:
    """Comma-separated literals: 'a', 'b'."""
    return ", ".join(quote_literal(value) for value in values)


def format_name(*parts: str) -> str:
    """Unquoted dotted name for log and error messages."""
    return ".".join(parts)


def require_keyword(value: str, *, what: str) -> str:
    """
    Return `value` if it is a plain SQL keyword phrase (e.g. 'AVRO', 'UPSERT').

    Keywords such as formats and envelopes are spliced into statements as-is,
    so anything that is not letters, digits, underscores and single spaces is
    rejected.
    """
    if not _KEYWORD.match(str(value)):
        raise ValueError(f"Invalid {what}: {value!r}")
    return value


_TYPE_NAME = re.compile(
    r"^[A-Za-z][A-Za-z0-9_]*( [A-Za-z][A-Za-z0-9_]*)*"
    r"(\(\s*\d+(\s*,\s*\d+)?\s*\))?(\[\])*$"
)


def require_type_name(value: str) -> str:
    """Return `value` if it looks like a SQL type name, e.g. 'numeric(10, 2)' or 'text[]'."""
    if not _TYPE_NAME.match(str(value)):
        raise ValueError(f"Invalid column type: {value!r}")
    return value
