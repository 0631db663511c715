"""Database and schema statements."""

from __future__ import annotations

from src.enums import ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import statement
from src.mz_engine.models import DatabaseSpec, SchemaSpec


class DatabaseBuilder(StatementBuilder[DatabaseSpec]):
    object_type = ObjectType.DATABASE

    def validate(self) -> None:
        ensure_spec_type(self.spec, DatabaseSpec, type(self).__name__)

    def create(self) -> str:
        """CREATE DATABASE "d";"""
        return statement(f"CREATE DATABASE {self.qualified_name()}")


class SchemaBuilder(StatementBuilder[SchemaSpec]):
    object_type = ObjectType.SCHEMA

    def validate(self) -> None:
        ensure_spec_type(self.spec, SchemaSpec, type(self).__name__)

    def create(self) -> str:
        """CREATE SCHEMA "d"."s";"""
        return statement(f"CREATE SCHEMA {self.qualified_name()}")
