"""
Ordered clause tables.

A statement is assembled from a tuple of `Clause` entries. Each clause names the
spec fields it reads and a renderer; it is emitted when it is `required` or
`always`, or when any of its fields is populated. The tuple order is the
statement's clause order, so it is declared once and never depends on which
fields a caller happened to set.

The union of a table's fields is also the set of fields a spec may populate
for that object kind (see `check_fields`).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import qualified_name, quote_literal
from src.mz_engine.models import ObjectName, ValueOrSecret, is_populated, populated_fields


@dataclass(frozen=True)
class Clause:
    """One optional (or mandatory) piece of a statement."""

    fields: tuple[str, ...]
    render: Callable[[Any], str]
    required: bool = False  # must be populated; always rendered
    always: bool = False  # rendered even when unpopulated (renderer supplies a default)

    def applies(self, spec: Any) -> bool:
        if self.required or self.always:
            return True
        return any(is_populated(spec, name) for name in self.fields)


def render_clauses(spec: Any, clauses: Iterable[Clause]) -> list[str]:
    """Render the applicable clauses of `spec`, in table order."""
    return [clause.render(spec) for clause in clauses if clause.applies(spec)]


def clause_fields(clauses: Iterable[Clause]) -> frozenset[str]:
    return frozenset(name for clause in clauses for name in clause.fields)


def check_fields(
    spec: Any,
    clauses: Iterable[Clause],
    *,
    label: str,
    common: Iterable[str] = ("name",),
) -> None:
    """
    Reject a spec that populates fields outside `clauses`, or misses a required one.

    Raises:
        SpecError: naming the offending fields.
    """
    clauses = tuple(clauses)
    allowed = clause_fields(clauses) | frozenset(common)
    foreign = [name for name in populated_fields(spec) if name not in allowed]
    if foreign:
        raise SpecError(f"{label} does not accept: {', '.join(foreign)}")

    missing = [
        clause.fields[0]
        for clause in clauses
        if clause.required and not is_populated(spec, clause.fields[0])
    ]
    if missing:
        raise SpecError(f"{label} requires: {', '.join(missing)}")


# -----------------------------
# Shared renderers
# -----------------------------


def object_name(name: ObjectName) -> str:
    """Fully qualified reference to a schema-scoped object."""
    return qualified_name(name.database_name, name.schema_name, name.name)


def secret(name: ObjectName) -> str:
    return f"SECRET {object_name(name)}"


def value_or_secret(value: ValueOrSecret) -> str:
    """'text' or SECRET "db"."schema"."name"."""
    if value.secret is not None:
        return secret(value.secret)
    return quote_literal(value.text)


def statement(*pieces: str) -> str:
    """Join non-empty pieces with single spaces and terminate with ';'."""
    return " ".join(piece for piece in pieces if piece) + ";"
