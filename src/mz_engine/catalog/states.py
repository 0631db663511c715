"""
Observed catalog state.

CanonicalAttributes is what the reverse identity lookup returns for one
object: its current name parts plus type-specific computed columns. It is the
observed side of drift detection; the resource spec is the desired side.

Notes:
- Frozen; `properties` is a read-only mapping built by the reader.
- Name parts that do not apply to the object type are None.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from src.constants import DEFAULT_DATABASE, DEFAULT_SCHEMA
from src.enums import ObjectType
from src.mz_engine.identifiers import ObjectIdentity
from src.mz_engine.models import ObjectName

_NAME_COLUMNS = frozenset({"id", "name", "schema_name", "database_name"})


@dataclass(frozen=True, slots=True)
class CanonicalAttributes:
    """Observed state of one catalog object."""

    identity: ObjectIdentity
    object_type: ObjectType
    name: str
    schema_name: str | None = None
    database_name: str | None = None
    properties: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_row(
        cls, object_type: ObjectType, identity: ObjectIdentity, row: Mapping[str, Any]
    ) -> CanonicalAttributes:
        """Build from a reverse-lookup row (column aliases as produced by the catalog queries)."""
        extra = {key: value for key, value in row.items() if key not in _NAME_COLUMNS}
        return cls(
            identity=identity,
            object_type=object_type,
            name=row["name"],
            schema_name=row.get("schema_name"),
            database_name=row.get("database_name"),
            properties=MappingProxyType(extra),
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def object_name(self) -> ObjectName:
        """Observed name as an ObjectName (defaults fill parts the type does not have)."""
        return ObjectName(
            name=self.name,
            schema_name=self.schema_name or DEFAULT_SCHEMA,
            database_name=self.database_name or DEFAULT_DATABASE,
        )
