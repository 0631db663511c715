"""
Reconciler

Drives one object through its lifecycle:

    Absent -> Created -> Synced -> (Updated -> Synced)* -> Absent

- create: run CREATE, resolve the new identity, read it back.
- read:   reverse lookup by identity; None means the object is gone.
- update: apply the differ's in-place changes one statement at a time.
- delete: run DROP.

The reconciler holds no per-object state: identities are returned to the
caller, who stores them, and every call builds its own statement builder.

Respects ExecutionPolicy on update:
- dry_run=True  -> render statements, return SKIPPED results
- stop_on_first_error=True -> skip remaining changes after a failure
"""

from __future__ import annotations

from typing import Any

from src.enums import ObjectType
from src.logger import get_logger
from src.mz_engine.catalog.reader import CatalogReader
from src.mz_engine.catalog.states import CanonicalAttributes
from src.mz_engine.ddl.registry import builder_for
from src.mz_engine.errors import (
    OrphanedObjectError,
    PartialUpdateError,
    ReplacementRequiredError,
    SqlExecutionError,
)
from src.mz_engine.execute.ports import (
    ApplyStatus,
    Change,
    ChangeResult,
    ExecutionPolicy,
    SqlConnection,
    UpdateReport,
)
from src.mz_engine.identifiers import ObjectIdentity
from src.mz_engine.reconcile.differ import SpecDiffer, UpdatePlan

LOGGER = get_logger("reconcile")


class Reconciler:
    """Create, read, update and delete catalog objects over one connection."""

    def __init__(
        self,
        connection: SqlConnection,
        *,
        reader: CatalogReader | None = None,
        differ: SpecDiffer | None = None,
    ) -> None:
        self._connection = connection
        self._reader = reader or CatalogReader(connection)
        self._differ = differ or SpecDiffer()

    # ---------- lifecycle ----------

    def create(self, spec: Any) -> CanonicalAttributes:
        """
        Create the object and return its observed attributes.

        Raises:
            SqlExecutionError: the CREATE was rejected; nothing exists.
            OrphanedObjectError: the CREATE succeeded but the identity could not
                be resolved or read back. The CREATE is not retried; when the
                id did resolve it is carried on the error's `identity`.
            AmbiguousIdentityError: the forward lookup matched several objects.
        """
        builder = builder_for(spec)
        label = f"{builder.object_type} {builder.display_name()}"
        LOGGER.info("Creating %s.", label)
        self._connection.execute(builder.create())

        try:
            identity = self._reader.resolve_identity(builder.object_type, builder.name_parts())
        except SqlExecutionError as error:
            raise OrphanedObjectError(
                str(builder.object_type), builder.display_name(), str(error)
            ) from error
        if identity is None:
            raise OrphanedObjectError(
                str(builder.object_type), builder.display_name(), "no catalog row matched"
            )

        try:
            attributes = self._reader.read(builder.object_type, identity)
        except SqlExecutionError as error:
            raise OrphanedObjectError(
                str(builder.object_type),
                builder.display_name(),
                f"reading back identity {identity} failed: {error}",
                identity=identity,
            ) from error
        if attributes is None:
            raise OrphanedObjectError(
                str(builder.object_type),
                builder.display_name(),
                f"identity {identity} vanished before it could be read",
                identity=identity,
            )
        LOGGER.info("Created %s with id %s.", label, identity)
        return attributes

    def read(self, object_type: ObjectType, identity: ObjectIdentity) -> CanonicalAttributes | None:
        """Observed attributes, or None if the object was dropped out-of-band."""
        attributes = self._reader.read(object_type, identity)
        if attributes is None:
            LOGGER.warning(
                "%s with id %s no longer exists; its identity should be cleared.",
                object_type,
                identity,
            )
        return attributes

    def import_object(self, object_type: ObjectType, identity: ObjectIdentity) -> CanonicalAttributes:
        """Read an existing object the caller does not yet track; it must exist."""
        attributes = self._reader.read(object_type, identity)
        if attributes is None:
            raise OrphanedObjectError(str(object_type), str(identity), "no catalog row matched")
        return attributes

    def plan_update(
        self, spec: Any, observed: CanonicalAttributes, *, previous: Any | None = None
    ) -> UpdatePlan:
        return self._differ.diff(spec, observed, previous)

    def update(
        self,
        spec: Any,
        observed: CanonicalAttributes,
        *,
        previous: Any | None = None,
        policy: ExecutionPolicy = ExecutionPolicy(),
    ) -> UpdateReport:
        """
        Apply the in-place changes between `observed` (and `previous`) and `spec`.

        Raises:
            ReplacementRequiredError: some change has no in-place path; nothing
                was executed.
            PartialUpdateError: a change failed; the error's report lists which
                changes were applied.
        """
        builder = builder_for(spec)
        plan = self.plan_update(spec, observed, previous=previous)
        if plan.replacement_fields:
            raise ReplacementRequiredError(builder.display_name(), plan.replacement_fields)
        if not plan.changes:
            LOGGER.debug("%s %s is in sync.", builder.object_type, builder.display_name())
            return UpdateReport(results=())

        LOGGER.info(
            "Updating %s %s: %d change(s).",
            builder.object_type,
            builder.display_name(),
            len(plan.changes),
        )
        results: list[ChangeResult] = []
        for index, change in enumerate(plan.changes):
            result = self._apply_change(change, policy=policy)
            results.append(result)
            if result.status == ApplyStatus.FAILED and policy.stop_on_first_error:
                results.extend(self._skip_remaining(plan.changes[index + 1 :]))
                break

        report = UpdateReport(results=tuple(results))
        if not report.ok:
            raise PartialUpdateError(builder.display_name(), report)
        return report

    def delete(self, spec: Any) -> None:
        """
        Drop the object by the qualified name in `spec`.

        No identity is consulted: the DROP addresses the object by the name it
        was last applied under, so callers pass the spec they stored. Dependents
        the control plane drops with it are its concern.
        """
        builder = builder_for(spec)
        LOGGER.info("Dropping %s %s.", builder.object_type, builder.display_name())
        self._connection.execute(builder.drop())

    # ---------- helpers ----------

    def _apply_change(self, change: Change, *, policy: ExecutionPolicy) -> ChangeResult:
        if policy.dry_run:
            return ChangeResult(
                change=change, status=ApplyStatus.SKIPPED, message=f"(dry-run) {change.description}"
            )
        try:
            self._connection.execute(change.statement)
        except SqlExecutionError as error:
            LOGGER.error("Change failed (%s): %s", change.description, error)
            return ChangeResult(
                change=change,
                status=ApplyStatus.FAILED,
                message=f"Failed to {change.description}: {type(error).__name__}: {error}",
            )
        return ChangeResult(
            change=change, status=ApplyStatus.OK, message=f"Applied: {change.description}"
        )

    @staticmethod
    def _skip_remaining(changes: tuple[Change, ...]) -> list[ChangeResult]:
        return [
            ChangeResult(
                change=change,
                status=ApplyStatus.SKIPPED,
                message=f"Skipped after earlier failure: {change.description}",
            )
            for change in changes
        ]
