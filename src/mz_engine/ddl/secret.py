"""Secret statements. Secret values only ever appear as quoted literals."""

from __future__ import annotations

from src.enums import ObjectType
from src.mz_engine.ddl.base import StatementBuilder, ensure_spec_type
from src.mz_engine.ddl.clauses import statement
from src.mz_engine.identifiers import quote_literal
from src.mz_engine.models import SecretSpec


class SecretBuilder(StatementBuilder[SecretSpec]):
    object_type = ObjectType.SECRET

    def validate(self) -> None:
        ensure_spec_type(self.spec, SecretSpec, type(self).__name__)

    def create(self) -> str:
        """CREATE SECRET qn AS '<value>';"""
        return statement(
            f"CREATE SECRET {self.qualified_name()}", f"AS {quote_literal(self.spec.value)}"
        )

    def update_value(self, new_value: str) -> str:
        """ALTER SECRET qn AS '<value>';"""
        return statement(f"ALTER SECRET {self.qualified_name()}", f"AS {quote_literal(new_value)}")
