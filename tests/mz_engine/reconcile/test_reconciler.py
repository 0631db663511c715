from __future__ import annotations

from typing import Any

import pytest

from src.enums import ObjectType
from src.mz_engine.catalog.states import CanonicalAttributes
from src.mz_engine.errors import (
    AmbiguousIdentityError,
    OrphanedObjectError,
    PartialUpdateError,
    ReplacementRequiredError,
    SqlExecutionError,
)
from src.mz_engine.execute.ports import ApplyStatus, ExecutionPolicy
from src.mz_engine.identifiers import ObjectIdentity
from src.mz_engine.models import ClusterSpec, ObjectName, SecretSpec, ViewSpec
from src.mz_engine.reconcile.reconciler import Reconciler

# ---------- fakes ----------


class RecordingConnection:
    """
    Records executed statements and serves queued query results.

    `fail_on` makes execute() raise for statements containing the substring;
    a queued exception is raised by query() instead of returning rows.
    """

    def __init__(self, *results: Any, fail_on: str | None = None) -> None:
        self._results = list(results)
        self.fail_on = fail_on
        self.executed: list[str] = []
        self.queries: list[str] = []

    def execute(self, statement: str) -> None:
        self.executed.append(statement)
        if self.fail_on is not None and self.fail_on in statement:
            raise SqlExecutionError("ERROR: rejected (SQLSTATE XX000)", sqlstate="XX000")

    def query(self, query: str) -> list[dict[str, Any]]:
        self.queries.append(query)
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _cluster_observed(name: str = "c", size: str = "25cc") -> CanonicalAttributes:
    row = {"id": "u1", "name": name, "size": size, "replication_factor": 1, "managed": True}
    return CanonicalAttributes.from_row(ObjectType.CLUSTER, ObjectIdentity("u1"), row)


_SECRET_ROW = {
    "id": "u5",
    "name": "pw",
    "schema_name": "public",
    "database_name": "materialize",
}


# ---------- create ----------


def test_create_executes_resolves_and_reads_back():
    connection = RecordingConnection([{"id": "u5"}], [_SECRET_ROW])
    attributes = Reconciler(connection).create(SecretSpec(ObjectName("pw"), value="v"))

    assert connection.executed == ["CREATE SECRET \"materialize\".\"public\".\"pw\" AS 'v';"]
    assert attributes.identity == ObjectIdentity("u5")
    assert attributes.name == "pw"
    assert len(connection.queries) == 2


def test_create_failure_propagates_without_lookup():
    connection = RecordingConnection(fail_on="CREATE")
    with pytest.raises(SqlExecutionError):
        Reconciler(connection).create(SecretSpec(ObjectName("pw"), value="v"))
    assert connection.queries == []


def test_unresolvable_identity_is_orphan_and_create_is_not_retried():
    connection = RecordingConnection([])
    with pytest.raises(OrphanedObjectError) as excinfo:
        Reconciler(connection).create(ClusterSpec(ObjectName("c")))

    assert excinfo.value.retryable is True
    assert connection.executed == ['CREATE CLUSTER "c" (REPLICAS ());']


def test_failing_lookup_is_orphan():
    connection = RecordingConnection(SqlExecutionError("ERROR: timeout"))
    with pytest.raises(OrphanedObjectError, match="timeout"):
        Reconciler(connection).create(ClusterSpec(ObjectName("c")))
    assert len(connection.executed) == 1


def test_vanished_object_after_create_is_orphan():
    connection = RecordingConnection([{"id": "u1"}], [])
    with pytest.raises(OrphanedObjectError, match="vanished"):
        Reconciler(connection).create(ClusterSpec(ObjectName("c")))


def test_failing_read_back_is_orphan_with_identity():
    connection = RecordingConnection([{"id": "u1"}], SqlExecutionError("ERROR: timeout"))
    with pytest.raises(OrphanedObjectError, match="timeout") as excinfo:
        Reconciler(connection).create(ClusterSpec(ObjectName("c")))

    assert excinfo.value.identity == ObjectIdentity("u1")
    assert isinstance(excinfo.value.__cause__, SqlExecutionError)
    assert len(connection.executed) == 1


def test_vanished_object_keeps_resolved_identity():
    connection = RecordingConnection([{"id": "u1"}], [])
    with pytest.raises(OrphanedObjectError) as excinfo:
        Reconciler(connection).create(ClusterSpec(ObjectName("c")))
    assert excinfo.value.identity == ObjectIdentity("u1")


def test_unresolved_orphan_has_no_identity():
    with pytest.raises(OrphanedObjectError) as excinfo:
        Reconciler(RecordingConnection([])).create(ClusterSpec(ObjectName("c")))
    assert excinfo.value.identity is None


def test_ambiguous_identity_propagates():
    connection = RecordingConnection([{"id": "u1"}, {"id": "u2"}])
    with pytest.raises(AmbiguousIdentityError):
        Reconciler(connection).create(ClusterSpec(ObjectName("c")))


# ---------- read / import ----------


def test_read_returns_none_when_gone():
    connection = RecordingConnection([])
    assert Reconciler(connection).read(ObjectType.CLUSTER, ObjectIdentity("u1")) is None


def test_import_requires_existing_object():
    reconciler = Reconciler(RecordingConnection([], [_SECRET_ROW]))
    with pytest.raises(OrphanedObjectError):
        reconciler.import_object(ObjectType.SECRET, ObjectIdentity("u5"))
    assert reconciler.import_object(ObjectType.SECRET, ObjectIdentity("u5")).name == "pw"


# ---------- update ----------


def test_update_in_sync_executes_nothing():
    connection = RecordingConnection()
    report = Reconciler(connection).update(
        ClusterSpec(ObjectName("c"), size="25cc"), _cluster_observed()
    )
    assert report.results == ()
    assert connection.executed == []


def test_update_applies_rename_then_size():
    connection = RecordingConnection()
    report = Reconciler(connection).update(
        ClusterSpec(ObjectName("c"), size="50cc"), _cluster_observed(name="old")
    )

    assert connection.executed == [
        'ALTER CLUSTER "old" RENAME TO "c";',
        "ALTER CLUSTER \"c\" SET (SIZE '50cc');",
    ]
    assert report.ok
    assert [result.status for result in report.results] == [ApplyStatus.OK, ApplyStatus.OK]


def test_partial_update_reports_applied_changes():
    connection = RecordingConnection(fail_on="SIZE")
    with pytest.raises(PartialUpdateError) as excinfo:
        Reconciler(connection).update(
            ClusterSpec(ObjectName("c"), size="50cc"), _cluster_observed(name="old")
        )

    report = excinfo.value.report
    assert [result.change.attribute for result in report.applied] == ["name"]
    assert [result.change.attribute for result in report.failed] == ["size"]
    assert "rename old to c" in str(excinfo.value)


def test_failure_skips_remaining_changes():
    connection = RecordingConnection(fail_on="RENAME")
    with pytest.raises(PartialUpdateError) as excinfo:
        Reconciler(connection).update(
            ClusterSpec(ObjectName("c"), size="50cc"), _cluster_observed(name="old")
        )

    report = excinfo.value.report
    assert len(connection.executed) == 1
    assert [result.status for result in report.results] == [
        ApplyStatus.FAILED,
        ApplyStatus.SKIPPED,
    ]
    assert report.skipped[0].message.startswith("Skipped after earlier failure")


def test_continue_after_failure_when_policy_allows():
    connection = RecordingConnection(fail_on="RENAME")
    with pytest.raises(PartialUpdateError) as excinfo:
        Reconciler(connection).update(
            ClusterSpec(ObjectName("c"), size="50cc"),
            _cluster_observed(name="old"),
            policy=ExecutionPolicy(stop_on_first_error=False),
        )
    assert len(connection.executed) == 2
    assert [r.change.attribute for r in excinfo.value.report.applied] == ["size"]


def test_dry_run_executes_nothing():
    connection = RecordingConnection()
    report = Reconciler(connection).update(
        ClusterSpec(ObjectName("c"), size="50cc"),
        _cluster_observed(name="old"),
        policy=ExecutionPolicy(dry_run=True),
    )
    assert connection.executed == []
    assert report.ok
    assert all(result.status == ApplyStatus.SKIPPED for result in report.results)
    assert report.results[0].message == "(dry-run) rename old to c"


def test_replacement_is_raised_before_executing():
    connection = RecordingConnection()
    observed = CanonicalAttributes.from_row(
        ObjectType.VIEW,
        ObjectIdentity("u3"),
        {"id": "u3", "name": "old", "schema_name": "other", "database_name": "materialize"},
    )
    with pytest.raises(ReplacementRequiredError) as excinfo:
        Reconciler(connection).update(ViewSpec(ObjectName("v"), statement="SELECT 1"), observed)

    assert excinfo.value.fields == ("schema_name",)
    assert connection.executed == []


def test_secret_update_message_hides_value():
    connection = RecordingConnection(fail_on="ALTER SECRET")
    observed = CanonicalAttributes.from_row(ObjectType.SECRET, ObjectIdentity("u5"), _SECRET_ROW)
    with pytest.raises(PartialUpdateError) as excinfo:
        Reconciler(connection).update(
            SecretSpec(ObjectName("pw"), value="s3cr3t"),
            observed,
            previous=SecretSpec(ObjectName("pw"), value="old"),
        )
    assert "s3cr3t" not in str(excinfo.value)


# ---------- delete ----------


def test_delete_executes_drop():
    connection = RecordingConnection()
    Reconciler(connection).delete(ViewSpec(ObjectName("v"), statement="SELECT 1"))
    assert connection.executed == ['DROP VIEW "materialize"."public"."v";']
    assert connection.queries == []
