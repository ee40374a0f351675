"""Integration tests for a full readiness evaluation pass.

Namespaces flow from Kubernetes API objects through classification,
condition rendering and status merging into the written status body.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes import client

from psreadiness.kubernetes import KubernetesNamespaceSource, OperatorStatusSink
from psreadiness.readiness import (
    ConditionStatus,
    NamespaceDescriptor,
    OperatorStatus,
    PodSecurityReadinessController,
    PodSecurityViolations,
    apply_status_updates,
)


pytestmark = pytest.mark.integration

CUSTOMER = "PodSecurityCustomerEvaluationConditionsDetected"
OPENSHIFT = "PodSecurityOpenshiftEvaluationConditionsDetected"
RUN_LEVEL_ZERO = "PodSecurityRunLevelZeroEvaluationConditionsDetected"
DISABLED_SYNCER = "PodSecurityDisabledSyncerEvaluationConditionsDetected"

SYNC_LABEL = "security.openshift.io/scc.podSecurityLabelSync"


def _namespace(name: str, labels: dict[str, str] | None = None) -> client.V1Namespace:
    return client.V1Namespace(metadata=client.V1ObjectMeta(name=name, labels=labels))


def _statuses(status: OperatorStatus) -> dict[str, str]:
    return {condition.type: condition.status.value for condition in status.conditions}


@pytest.mark.parametrize(
    ("namespaces", "expected"),
    [
        pytest.param(
            [_namespace("syncer-by-default")],
            {CUSTOMER: "True", OPENSHIFT: "False", RUN_LEVEL_ZERO: "False", DISABLED_SYNCER: "False"},
            id="default-namespace",
        ),
        pytest.param(
            [_namespace("syncer-no-thx", {SYNC_LABEL: "false"})],
            {CUSTOMER: "False", OPENSHIFT: "False", RUN_LEVEL_ZERO: "False", DISABLED_SYNCER: "True"},
            id="customer-disabled-syncer",
        ),
        pytest.param(
            [_namespace("syncer-yes-plz", {SYNC_LABEL: "true"})],
            {CUSTOMER: "True", OPENSHIFT: "False", RUN_LEVEL_ZERO: "False", DISABLED_SYNCER: "False"},
            id="customer-re-enabled-syncer",
        ),
        pytest.param(
            [_namespace("openshift-fail")],
            {CUSTOMER: "False", OPENSHIFT: "True", RUN_LEVEL_ZERO: "False", DISABLED_SYNCER: "False"},
            id="openshift-namespace",
        ),
        pytest.param(
            [_namespace("kube-system")],
            {CUSTOMER: "False", OPENSHIFT: "False", RUN_LEVEL_ZERO: "True", DISABLED_SYNCER: "False"},
            id="run-level-zero-namespace",
        ),
        pytest.param(
            [_namespace("foobar"), _namespace("foobar", {SYNC_LABEL: "false"})],
            {CUSTOMER: "True", OPENSHIFT: "False", RUN_LEVEL_ZERO: "False", DISABLED_SYNCER: "True"},
            id="customer-types-combined",
        ),
        pytest.param(
            [
                _namespace(
                    "openshift-namespace",
                    {
                        "pod-security.kubernetes.io/audit": "restricted",
                        "pod-security.kubernetes.io/audit-version": "v1.24",
                        "pod-security.kubernetes.io/warn": "restricted",
                        "pod-security.kubernetes.io/warn-version": "v1.24",
                    },
                ),
                _namespace("kube-system", {}),
            ],
            {CUSTOMER: "False", OPENSHIFT: "True", RUN_LEVEL_ZERO: "True", DISABLED_SYNCER: "False"},
            id="system-types-combined",
        ),
    ],
)
def test_operator_status_from_namespaces(
    namespaces: list[client.V1Namespace], expected: dict[str, str]
) -> None:
    """Accumulated violations are merged into an empty status."""
    violations = PodSecurityViolations()
    for namespace in namespaces:
        violations.add_violation(NamespaceDescriptor.from_kubernetes_object(namespace))

    status = apply_status_updates(OperatorStatus(), violations.to_condition_funcs())

    assert _statuses(status) == expected


class TestScenarios:
    """Single-pass scenarios over plain descriptors."""

    @staticmethod
    def _run(namespaces: list[NamespaceDescriptor]) -> OperatorStatus:
        violations = PodSecurityViolations()
        violations.add_violations(namespaces)
        return apply_status_updates(OperatorStatus(), violations.to_condition_funcs())

    def test_run_level_zero_only(self) -> None:
        status = self._run([NamespaceDescriptor(name="kube-system")])

        assert [c.type for c in status.conditions if c.is_true] == [RUN_LEVEL_ZERO]
        assert status.find_condition(RUN_LEVEL_ZERO).message == (
            "Violations detected in namespaces: [kube-system]"
        )

    def test_openshift_only(self) -> None:
        status = self._run([NamespaceDescriptor(name="openshift-foo")])

        assert [c.type for c in status.conditions if c.is_true] == [OPENSHIFT]

    def test_disabled_syncer_is_not_customer(self) -> None:
        status = self._run([NamespaceDescriptor(name="ns1", labels={SYNC_LABEL: "false"})])

        assert status.find_condition(DISABLED_SYNCER).status == ConditionStatus.TRUE
        assert status.find_condition(CUSTOMER).status == ConditionStatus.FALSE

    def test_duplicate_names_classified_independently(self) -> None:
        status = self._run(
            [
                NamespaceDescriptor(name="ns1"),
                NamespaceDescriptor(name="ns1", labels={SYNC_LABEL: "false"}),
            ]
        )

        assert status.find_condition(CUSTOMER).message == "Violations detected in namespaces: [ns1]"
        assert status.find_condition(DISABLED_SYNCER).message == (
            "Violations detected in namespaces: [ns1]"
        )

    def test_empty_pass_renders_all_false(self) -> None:
        status = self._run([])

        assert len(status.conditions) == 4
        for condition in status.conditions:
            assert condition.status == ConditionStatus.FALSE
            assert condition.reason == "ExpectedReason"
            assert condition.message == ""


class TestEndToEndSync:
    """A controller pass against mocked Kubernetes APIs."""

    @pytest.fixture
    def core_api(self) -> MagicMock:
        api = MagicMock()
        api.list_namespace.return_value = client.V1NamespaceList(
            items=[
                _namespace("default"),
                _namespace("openshift-monitoring"),
                _namespace("team-b"),
                _namespace("team-a"),
                _namespace("legacy", {SYNC_LABEL: "false"}),
            ]
        )
        return api

    @pytest.fixture
    def controller(
        self, core_api: MagicMock, mock_custom_api: MagicMock, metrics: Any
    ) -> PodSecurityReadinessController:
        return PodSecurityReadinessController(
            namespace_source=KubernetesNamespaceSource(core_api=core_api),
            status_sink=OperatorStatusSink(
                group="operator.openshift.io",
                version="v1",
                plural="kubeapiservers",
                name="cluster",
                custom_api=mock_custom_api,
                metrics=metrics,
            ),
            metrics=metrics,
        )

    def test_sync_writes_conditions(
        self, controller: PodSecurityReadinessController, mock_custom_api: MagicMock
    ) -> None:
        controller.sync()

        call = mock_custom_api.replace_cluster_custom_object_status.call_args
        body = call.kwargs["body"]
        assert call.kwargs["name"] == "cluster"
        assert body["metadata"]["resourceVersion"] == "4711"
        assert body["spec"] == {"managementState": "Managed"}
        assert body["status"]["latestAvailableRevision"] == 7

        conditions = {c["type"]: c for c in body["status"]["conditions"]}
        assert list(conditions) == [
            "NodeInstallerDegraded",
            CUSTOMER,
            OPENSHIFT,
            RUN_LEVEL_ZERO,
            DISABLED_SYNCER,
        ]
        assert conditions["NodeInstallerDegraded"]["lastTransitionTime"] == "2024-01-01T00:00:00Z"
        assert conditions[CUSTOMER]["message"] == "Violations detected in namespaces: [team-a team-b]"
        assert conditions[OPENSHIFT]["message"] == (
            "Violations detected in namespaces: [openshift-monitoring]"
        )
        assert conditions[RUN_LEVEL_ZERO]["message"] == "Violations detected in namespaces: [default]"
        assert conditions[DISABLED_SYNCER]["message"] == "Violations detected in namespaces: [legacy]"

    def test_repeated_sync_keeps_transition_time(
        self,
        controller: PodSecurityReadinessController,
        mock_custom_api: MagicMock,
        kubeapiserver_object: dict[str, Any],
    ) -> None:
        controller.sync()
        written = mock_custom_api.replace_cluster_custom_object_status.call_args.kwargs["body"]

        # The second pass reads back what the first one wrote
        mock_custom_api.get_cluster_custom_object.return_value = written
        mock_custom_api.replace_cluster_custom_object_status.reset_mock()
        controller.sync()

        mock_custom_api.replace_cluster_custom_object_status.assert_not_called()
        assert kubeapiserver_object["status"]["conditions"][0]["type"] == "NodeInstallerDegraded"

    def test_resolved_violation_flips_condition(
        self,
        controller: PodSecurityReadinessController,
        core_api: MagicMock,
        mock_custom_api: MagicMock,
    ) -> None:
        controller.sync()
        written = mock_custom_api.replace_cluster_custom_object_status.call_args.kwargs["body"]
        first = {c["type"]: c for c in written["status"]["conditions"]}

        mock_custom_api.get_cluster_custom_object.return_value = written
        core_api.list_namespace.return_value = client.V1NamespaceList(items=[_namespace("default")])
        controller.sync()

        body = mock_custom_api.replace_cluster_custom_object_status.call_args.kwargs["body"]
        second = {c["type"]: c for c in body["status"]["conditions"]}
        assert second[CUSTOMER]["status"] == "False"
        assert "message" not in second[CUSTOMER]
        assert second[RUN_LEVEL_ZERO] == first[RUN_LEVEL_ZERO]

    def test_conditions_use_kubernetes_time_format(
        self, controller: PodSecurityReadinessController, mock_custom_api: MagicMock
    ) -> None:
        controller.sync()

        body = mock_custom_api.replace_cluster_custom_object_status.call_args.kwargs["body"]
        for condition in body["status"]["conditions"]:
            parsed = datetime.strptime(condition["lastTransitionTime"], "%Y-%m-%dT%H:%M:%SZ")
            assert parsed.replace(tzinfo=UTC) <= datetime.now(UTC)
