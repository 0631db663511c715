"""View and materialized view statements. The SELECT text is passed through verbatim."""

from __future__ import annotations

from src.enums import ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import statement
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import quote_identifier
from src.mz_engine.models import MaterializedViewSpec, ViewSpec


def _select(text: str) -> str:
    body = text.strip().rstrip(";").strip()
    if not body:
        raise SpecError("View statement must not be empty")
    return body


class ViewBuilder(StatementBuilder[ViewSpec]):
    object_type = ObjectType.VIEW

    def validate(self) -> None:
        ensure_spec_type(self.spec, ViewSpec, type(self).__name__)
        _select(self.spec.statement)

    def create(self) -> str:
        return statement(f"CREATE VIEW {self.qualified_name()}", "AS", _select(self.spec.statement))


class MaterializedViewBuilder(StatementBuilder[MaterializedViewSpec]):
    object_type = ObjectType.MATERIALIZED_VIEW

    def validate(self) -> None:
        ensure_spec_type(self.spec, MaterializedViewSpec, type(self).__name__)
        _select(self.spec.statement)

    def create(self) -> str:
        cluster = (
            f"IN CLUSTER {quote_identifier(self.spec.cluster_name)}"
            if self.spec.cluster_name
            else ""
        )
        return statement(
            f"CREATE MATERIALIZED VIEW {self.qualified_name()}",
            cluster,
            "AS",
            _select(self.spec.statement),
        )
