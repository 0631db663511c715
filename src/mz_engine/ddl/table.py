"""Table and index statements."""

from __future__ import annotations

from src.enums import DropBehavior, ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import object_name, statement
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import quote_identifier, require_keyword, require_type_name
from src.mz_engine.models import IndexColumn, IndexSpec, TableColumn, TableSpec


def _column(column: TableColumn) -> str:
    text = f"{quote_identifier(column.name)} {require_type_name(column.type)}"
    return text if column.nullable else f"{text} NOT NULL"


def _index_column(column: IndexColumn) -> str:
    text = quote_identifier(column.name)
    return f"{text} DESC" if column.descending else text


class TableBuilder(StatementBuilder[TableSpec]):
    object_type = ObjectType.TABLE

    def validate(self) -> None:
        ensure_spec_type(self.spec, TableSpec, type(self).__name__)
        if not self.spec.columns:
            raise SpecError("Table requires at least one column")

    def create(self) -> str:
        """CREATE TABLE qn ("col" type [NOT NULL], ...);"""
        columns = ", ".join(_column(column) for column in self.spec.columns)
        return statement(f"CREATE TABLE {self.qualified_name()}", f"({columns})")


class IndexBuilder(StatementBuilder[IndexSpec]):
    object_type = ObjectType.INDEX
    drop_behavior = DropBehavior.RESTRICT

    def validate(self) -> None:
        ensure_spec_type(self.spec, IndexSpec, type(self).__name__)
        require_keyword(self.spec.method, what="index method")
        if not self.spec.columns:
            raise SpecError("Index requires at least one column")
        name, on = self.spec.name, self.spec.on
        if (name.database_name, name.schema_name) != (on.database_name, on.schema_name):
            raise SpecError("Index must live in the schema of the object it indexes")

    def create(self) -> str:
        """CREATE INDEX "i" IN CLUSTER "c" ON qn USING method (cols);"""
        columns = ", ".join(_index_column(column) for column in self.spec.columns)
        return statement(
            f"CREATE INDEX {quote_identifier(self.object_name.name)}",
            f"IN CLUSTER {quote_identifier(self.spec.cluster_name)}",
            f"ON {object_name(self.spec.on)}",
            f"USING {self.spec.method}",
            f"({columns})",
        )
