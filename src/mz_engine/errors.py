"""
Typed errors raised by the engine.

Every error reaches the caller; the engine does not retry or hide any of them.
Callers decide retry policy from the type (and `retryable`).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.mz_engine.execute.ports import UpdateReport
    from src.mz_engine.identifiers import ObjectIdentity


class EngineError(Exception):
    """Base class for all engine errors."""

    retryable: bool = False


class SpecError(EngineError, ValueError):
    """A resource spec is invalid for its object type or kind."""


class SqlExecutionError(EngineError):
    """The control plane rejected a statement."""

    def __init__(self, message: str, *, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class IdentityResolutionError(EngineError):
    """An identity query did not return exactly one row."""


class OrphanedObjectError(IdentityResolutionError):
    """
    The CREATE succeeded but the new object's identity could not be resolved.

    The object exists in the control plane, so re-running the CREATE would
    collide with it. Retry the identity lookup (or import the object) instead.
    """

    retryable = True

    def __init__(
        self,
        object_type: str,
        name: str,
        reason: str,
        *,
        identity: ObjectIdentity | None = None,
    ) -> None:
        super().__init__(
            f"{object_type} {name} was created but its identity could not be resolved: {reason}"
        )
        self.object_type = object_type
        self.name = name
        # Set when the id resolved but the read-back failed; import it by this id.
        self.identity = identity


class AmbiguousIdentityError(IdentityResolutionError):
    """An identity query matched more than one object."""

    def __init__(self, object_type: str, key: str, row_count: int) -> None:
        super().__init__(f"Expected one {object_type} for {key}, found {row_count}.")
        self.row_count = row_count


class ReplacementRequiredError(EngineError):
    """The desired change has no in-place path; destroy and recreate instead."""

    def __init__(self, name: str, fields: Sequence[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(f"{name} must be replaced to change: {', '.join(self.fields)}")


class PartialUpdateError(EngineError):
    """An update stopped partway; `report` lists which changes were applied."""

    def __init__(self, name: str, report: UpdateReport) -> None:
        self.report = report
        applied = [result.change.description for result in report.applied]
        failed = [result.message for result in report.failed]
        super().__init__(
            f"Update of {name} partially applied. "
            f"Applied: {applied or 'none'}. Failed: {failed}."
        )


class AuthenticationError(EngineError):
    """Token acquisition or refresh failed."""


class CloudError(EngineError):
    """A fleet-management API call did not produce a usable answer."""


class CloudAPIError(CloudError):
    """The fleet-management API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str, *, url: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"API request to {url} failed with status {status_code}: {body}")


class CloudTransportError(CloudError):
    """The request never got an answer, or the answer was not JSON."""

    def __init__(self, reason: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(f"API request to {url} failed: {reason}")


class RegionError(EngineError):
    """A region is unknown, not enabled, or has no connection."""
