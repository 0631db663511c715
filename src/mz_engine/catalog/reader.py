"""
Adapter: Catalog Reader

Runs the identity queries from `catalog.queries` over a SqlConnection.

- resolve_identity: name parts -> ObjectIdentity | None
- read:             ObjectIdentity -> CanonicalAttributes | None
- list_objects:     every object of a type, optionally narrowed by parent

The single-object lookups return None for zero rows; what that means (orphan after CREATE versus
deleted out-of-band on refresh) is decided by the reconciler. More than one
row raises AmbiguousIdentityError.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.enums import ObjectType
from src.logger import get_logger
from src.mz_engine.catalog.queries import (
    sql_select_attributes,
    sql_select_identity,
    sql_select_list,
)
from src.mz_engine.catalog.states import CanonicalAttributes
from src.mz_engine.errors import AmbiguousIdentityError
from src.mz_engine.execute.ports import SqlConnection
from src.mz_engine.identifiers import ObjectIdentity, format_name

LOGGER = get_logger("catalog")


class CatalogReader:
    """Forward and reverse identity lookups."""

    def __init__(self, connection: SqlConnection) -> None:
        self._connection = connection

    def resolve_identity(
        self, object_type: ObjectType, name_parts: Sequence[str]
    ) -> ObjectIdentity | None:
        key = format_name(*name_parts)
        rows = self._connection.query(sql_select_identity(object_type, name_parts))
        row = _single_row(rows, object_type=object_type, key=key)
        if row is None:
            LOGGER.debug("No %s named %s.", object_type, key)
            return None
        return ObjectIdentity(str(row["id"]))

    def read(self, object_type: ObjectType, identity: ObjectIdentity) -> CanonicalAttributes | None:
        rows = self._connection.query(sql_select_attributes(object_type, identity))
        row = _single_row(rows, object_type=object_type, key=f"id {identity}")
        if row is None:
            return None
        return CanonicalAttributes.from_row(object_type, identity, row)

    def list_objects(
        self,
        object_type: ObjectType,
        *,
        database: str | None = None,
        schema: str | None = None,
        cluster: str | None = None,
    ) -> list[CanonicalAttributes]:
        query = sql_select_list(object_type, database=database, schema=schema, cluster=cluster)
        rows = self._connection.query(query)
        LOGGER.debug("Listed %d %s object(s).", len(rows), object_type)
        return [
            CanonicalAttributes.from_row(object_type, ObjectIdentity(str(row["id"])), row)
            for row in rows
        ]


def _single_row(
    rows: list[dict[str, Any]], *, object_type: ObjectType, key: str
) -> dict[str, Any] | None:
    if not rows:
        return None
    if len(rows) > 1:
        raise AmbiguousIdentityError(str(object_type), key, len(rows))
    return rows[0]
