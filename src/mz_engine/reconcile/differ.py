"""
Differ: desired spec vs observed attributes -> minimal in-place changes.

Rules
- Name: a different object name becomes a RENAME; a different parent
  (database, schema or cluster) cannot change in place.
- Observed attributes (read back from the catalog, e.g. size, replication
  factor, assigned cluster) are compared against the desired spec; the
  catalog is the source of truth for these.
- Remembered attributes cannot be read back (secret values, introspection
  settings). They are compared against the previously applied spec, when the
  caller passes one.
- Any other field that differs from the previous spec has no in-place path and
  is reported in `replacement_fields`.

Ordering: the rename comes first; every later statement addresses the object
by its desired name.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from src.enums import NameScope, ObjectType
from src.mz_engine.catalog.states import CanonicalAttributes
from src.mz_engine.ddl.base import StatementBuilder
from src.mz_engine.ddl.registry import builder_for
from src.mz_engine.errors import SpecError
from src.mz_engine.execute.ports import Change

Renderer = Callable[[Any, Any], str]


@dataclass(frozen=True)
class Tracked:
    """A spec field with a known drift signal; `alter` is None when it cannot change in place."""

    attribute: str
    alter: Renderer | None = None
    column: str | None = None  # observed column, for attributes read back from the catalog

    @property
    def observed_column(self) -> str:
        return self.column or self.attribute


@dataclass(frozen=True)
class UpdatePlan:
    changes: tuple[Change, ...]
    replacement_fields: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.changes and not self.replacement_fields


OBSERVED: Mapping[ObjectType, tuple[Tracked, ...]] = MappingProxyType(
    {
        ObjectType.CLUSTER: (
            Tracked("size", lambda b, v: b.update_size(v)),
            Tracked("replication_factor", lambda b, v: b.update_replication_factor(v)),
        ),
        ObjectType.CLUSTER_REPLICA: (Tracked("size"), Tracked("availability_zone")),
        ObjectType.SOURCE: (
            Tracked("size", lambda b, v: b.update_size(v)),
            Tracked("cluster_name"),
        ),
        ObjectType.SINK: (
            Tracked("size", lambda b, v: b.update_size(v)),
            Tracked("cluster_name"),
        ),
        ObjectType.MATERIALIZED_VIEW: (Tracked("cluster_name"),),
        ObjectType.INDEX: (Tracked("cluster_name"),),
    }
)

REMEMBERED: Mapping[ObjectType, tuple[Tracked, ...]] = MappingProxyType(
    {
        ObjectType.SECRET: (Tracked("value", lambda b, v: b.update_value(v)),),
        ObjectType.CLUSTER: (
            Tracked("availability_zones", lambda b, v: b.update_availability_zones(v)),
            Tracked("introspection_interval", lambda b, v: b.update_introspection_interval(v)),
            Tracked("introspection_debugging", lambda b, v: b.update_introspection_debugging(v)),
        ),
    }
)

_PARENT_FIELDS = {
    NameScope.ROOT: (),
    NameScope.DATABASE: ("database_name",),
    NameScope.SCHEMA: ("database_name", "schema_name"),
    NameScope.CLUSTER: ("cluster_name",),
}

# Never compared as plain fields: names are handled through name parts.
_NAME_FIELDS = frozenset({"name", "cluster_name"})


class SpecDiffer:
    """Compute the in-place changes that bring an object to its desired spec."""

    def diff(
        self,
        spec: Any,
        observed: CanonicalAttributes,
        previous: Any | None = None,
    ) -> UpdatePlan:
        builder = builder_for(spec)
        if builder.object_type != observed.object_type:
            raise SpecError(
                f"Cannot diff a {builder.object_type} spec against an observed "
                f"{observed.object_type}"
            )
        if previous is not None and type(previous) is not type(spec):
            raise SpecError("Previous spec must have the same type as the desired spec")

        changes: list[Change] = []
        replacement: list[str] = []

        rename = self._name_changes(builder, observed, replacement)
        if rename is not None:
            changes.append(rename)

        observed_tracked = OBSERVED.get(builder.object_type, ())
        for tracked in observed_tracked:
            desired = getattr(spec, tracked.attribute)
            if desired is None:
                continue
            current = observed.get(tracked.observed_column)
            if _same(desired, current):
                continue
            self._apply(builder, tracked, desired, changes, replacement)

        if previous is not None:
            remembered = REMEMBERED.get(builder.object_type, ())
            for tracked in remembered:
                desired = getattr(spec, tracked.attribute)
                if desired != getattr(previous, tracked.attribute):
                    self._apply(builder, tracked, desired, changes, replacement)

            handled = {t.attribute for t in (*observed_tracked, *remembered)} | _NAME_FIELDS
            for spec_field in dataclasses.fields(spec):
                if spec_field.name in handled:
                    continue
                if getattr(spec, spec_field.name) != getattr(previous, spec_field.name):
                    replacement.append(spec_field.name)

        return UpdatePlan(changes=tuple(changes), replacement_fields=tuple(replacement))

    # ---------- helpers ----------

    @staticmethod
    def _name_changes(
        builder: StatementBuilder[Any],
        observed: CanonicalAttributes,
        replacement: list[str],
    ) -> Change | None:
        desired_parts = builder.name_parts()
        observed_parts = _observed_parts(builder.object_type.scope, observed)

        parent_fields = _PARENT_FIELDS[builder.object_type.scope]
        for parent_field, want, have in zip(parent_fields, desired_parts, observed_parts):
            if want != have:
                replacement.append(parent_field)

        if desired_parts[-1] == observed_parts[-1]:
            return None
        current = dataclasses.replace(
            builder.spec, name=builder.object_name.renamed(observed.name)
        )
        statement = builder_for(current).rename(desired_parts[-1])
        return Change(
            attribute="name",
            description=f"rename {observed.name} to {desired_parts[-1]}",
            statement=statement,
        )

    @staticmethod
    def _apply(
        builder: StatementBuilder[Any],
        tracked: Tracked,
        desired: Any,
        changes: list[Change],
        replacement: list[str],
    ) -> None:
        if tracked.alter is None:
            replacement.append(tracked.attribute)
            return
        description = (
            "update secret value"
            if tracked.attribute == "value"
            else f"set {tracked.attribute} to {desired!r}"
        )
        changes.append(
            Change(
                attribute=tracked.attribute,
                description=description,
                statement=tracked.alter(builder, desired),
            )
        )


def _observed_parts(scope: NameScope, observed: CanonicalAttributes) -> tuple[Any, ...]:
    if scope == NameScope.ROOT:
        return (observed.name,)
    if scope == NameScope.DATABASE:
        return (observed.database_name, observed.name)
    if scope == NameScope.CLUSTER:
        return (observed.get("cluster_name"), observed.name)
    return (observed.database_name, observed.schema_name, observed.name)


def _same(desired: Any, current: Any) -> bool:
    # Catalog values come back as text or numerics depending on the column.
    if current is None:
        return False
    return str(desired) == str(current)
