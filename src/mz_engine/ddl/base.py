"""
Statement builder base class.

Builders are pure: constructed from a frozen spec, they validate it once and
render CREATE / ALTER / DROP text. They never execute anything.

Design
- `object_type` fixes the SQL keyword and the name scope.
- `create()` is implemented per type; rename/drop/update_size are shared.
- Every statement ends with ';'.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from src.enums import DropBehavior, NameScope, ObjectType
from src.mz_engine.ddl.clauses import statement
from src.mz_engine.errors import SpecError
from src.mz_engine.identifiers import format_name, qualified_name, quote_literal
from src.mz_engine.models import ObjectName

SpecT = TypeVar("SpecT")


class StatementBuilder(Generic[SpecT]):
    """Render DDL for one object from its spec."""

    object_type: ClassVar[ObjectType]
    drop_behavior: ClassVar[DropBehavior | None] = None
    resizable: ClassVar[bool] = False

    def __init__(self, spec: SpecT) -> None:
        self._spec = spec
        self.validate()

    @property
    def spec(self) -> SpecT:
        return self._spec

    @property
    def object_name(self) -> ObjectName:
        return self._spec.name  # type: ignore[attr-defined]

    # ---------- naming ----------

    def name_parts(self, name: ObjectName | None = None) -> tuple[str, ...]:
        """Name parts of this object (or of a renamed copy), outermost first."""
        name = name or self.object_name
        scope = self.object_type.scope
        if scope == NameScope.ROOT:
            return (name.name,)
        if scope == NameScope.DATABASE:
            return (name.database_name, name.name)
        if scope == NameScope.CLUSTER:
            return (self._parent_cluster(), name.name)
        return (name.database_name, name.schema_name, name.name)

    def qualified_name(self, name: ObjectName | None = None) -> str:
        return qualified_name(*self.name_parts(name))

    def display_name(self) -> str:
        """Unquoted name for messages."""
        return format_name(*self.name_parts())

    def _parent_cluster(self) -> str:
        raise SpecError(f"{self.object_type} is not cluster-scoped")

    # ---------- statements ----------

    def validate(self) -> None:
        """Hook for per-type validation; raise SpecError on a bad spec."""

    def create(self) -> str:
        raise NotImplementedError

    def rename(self, new_name: str) -> str:
        """ALTER <TYPE> <qn> RENAME TO <new qn>;"""
        target = self.qualified_name(self.object_name.renamed(new_name))
        return statement(
            f"ALTER {self.object_type} {self.qualified_name()}", f"RENAME TO {target}"
        )

    def drop(self, behavior: DropBehavior | None = None) -> str:
        """DROP <TYPE> <qn>, with the type's default RESTRICT/CASCADE if it has one."""
        qualifier = behavior or self.drop_behavior
        return statement(
            f"DROP {self.object_type} {self.qualified_name()}", str(qualifier or "")
        )

    def update_size(self, new_size: str) -> str:
        """ALTER <TYPE> <qn> SET (SIZE = '<size>');"""
        if not self.resizable:
            raise SpecError(f"{self.object_type} does not support in-place size changes")
        return self.alter_set(f"SIZE = {quote_literal(new_size)}")

    def alter_set(self, *options: str) -> str:
        return statement(
            f"ALTER {self.object_type} {self.qualified_name()}", f"SET ({', '.join(options)})"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.display_name()!r})"


def ensure_spec_type(spec: Any, expected: type, builder: str) -> None:
    if not isinstance(spec, expected):
        raise SpecError(f"{builder} expects {expected.__name__}, got {type(spec).__name__}")
