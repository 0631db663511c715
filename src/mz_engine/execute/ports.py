"""
Execution ports and result types.

- SqlConnection: protocol for anything that can run statements against the
  control plane (pooled psycopg connection, fakes in tests)
- ExecutionPolicy: toggles for dry-run and error handling
- Change / ChangeResult / UpdateReport: structured outcomes of an update
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol


class SqlConnection(Protocol):
    """Blocking, thread-safe access to the control plane."""

    def execute(self, statement: str) -> None:
        """Run one statement; raise SqlExecutionError if the control plane rejects it."""
        ...

    def query(self, query: str) -> list[dict[str, Any]]:
        """Run one query and return every row as a column-name mapping."""
        ...


class ApplyStatus(StrEnum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"  # dry-run, or short-circuited after a failure


@dataclass(frozen=True)
class ExecutionPolicy:
    """Controls how updates are applied."""

    dry_run: bool = False
    stop_on_first_error: bool = True


@dataclass(frozen=True)
class Change:
    """One in-place change, rendered to a single statement."""

    attribute: str  # spec field the change brings in line
    description: str
    statement: str = field(repr=False)  # may carry a secret value


@dataclass(frozen=True)
class ChangeResult:
    """Outcome for a single change."""

    change: Change
    status: ApplyStatus
    message: str  # one line; never contains the statement text


@dataclass(frozen=True)
class UpdateReport:
    """Outcome for applying all changes of one update."""

    results: tuple[ChangeResult, ...]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def applied(self) -> tuple[ChangeResult, ...]:
        return tuple(result for result in self.results if result.status == ApplyStatus.OK)

    @property
    def failed(self) -> tuple[ChangeResult, ...]:
        return tuple(result for result in self.results if result.status == ApplyStatus.FAILED)

    @property
    def skipped(self) -> tuple[ChangeResult, ...]:
        return tuple(result for result in self.results if result.status == ApplyStatus.SKIPPED)
