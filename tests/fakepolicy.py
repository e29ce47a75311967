"""A minimal policy and reconciler built on policy-nucleus, used in tests."""

from dataclasses import dataclass, field
import logging
from typing import Any, Optional

from mashumaro import field_options

from policy_nucleus.compliance import K8sEmitter, PrometheusEmitter
from policy_nucleus.compliance.k8s_emitter import Mutator
from policy_nucleus.conditions import Condition, ConditionStatus
from policy_nucleus.config import EventSourceConfig
from policy_nucleus.exceptions import NucleusException
from policy_nucleus.policycore import (
    ComplianceState,
    OwnerReference,
    PolicyCoreSpec,
    PolicyCoreStatus,
)
from policy_nucleus.resource_list import ConfigMapResourceList, ReflectiveResourceList
from policy_nucleus.resources import BaseManifest, ConfigMapList
from policy_nucleus.store import InMemoryCluster
from policy_nucleus.target import Target

_LOGGER = logging.getLogger(__name__)

MUTATOR_ANNOTATION = "policy.open-cluster-management.io/test-mutator"


@dataclass
class FakePolicySpec(PolicyCoreSpec):
    """Spec of a policy checking that a config map exists."""

    target_config_maps: Target = field(
        metadata=field_options(alias="targetConfigMaps"), default_factory=Target
    )
    target_using_reflection: bool = field(
        metadata=field_options(alias="targetUsingReflection"), default=False
    )
    desired_config_map_name: str = field(
        metadata=field_options(alias="desiredConfigMapName"), default=""
    )
    event_annotation: str = field(
        metadata=field_options(alias="eventAnnotation"), default=""
    )


@dataclass
class FakePolicyStatus(PolicyCoreStatus):
    """Status of the fake policy."""

    selection_complete: bool = field(
        metadata=field_options(alias="selectionComplete"), default=False
    )


@dataclass
class FakePolicy(BaseManifest):
    """A policy that is compliant when a desired config map is selected."""

    name: str = ""
    namespace: Optional[str] = None
    uid: str = ""
    resource_version: str = field(
        metadata=field_options(alias="resourceVersion"), default=""
    )
    labels: Optional[dict[str, str]] = None
    annotations: Optional[dict[str, str]] = None
    spec: FakePolicySpec = field(default_factory=FakePolicySpec)
    status: FakePolicyStatus = field(default_factory=FakePolicyStatus)

    @property
    def kind(self) -> str:
        return "FakePolicy"

    @property
    def api_version(self) -> str:
        return "policy.open-cluster-management.io/v1beta1"

    def compliance_state(self) -> ComplianceState | None:
        return self.status.compliance_state

    def compliance_message(self) -> str:
        _, cond = self.status.get_condition("Compliant")
        return cond.message

    def parent(self) -> OwnerReference:
        return OwnerReference(
            api_version="policy.open-cluster-management.io/v1",
            kind="Policy",
            name="parent-policy",
            uid="parent-uid",
        )

    def parent_namespace(self) -> str | None:
        return self.namespace


def sample_policy(**spec: Any) -> FakePolicy:
    """Return a FakePolicy with the spec fields."""
    return FakePolicy(
        name="fakepolicy-sample",
        namespace="default",
        uid="policy-uid",
        resource_version="1",
        labels={"sample": "label"},
        annotations={"sample": "annotation"},
        spec=FakePolicySpec(**spec),
    )


def _message(values: list[str]) -> str:
    return "[" + " ".join(sorted(values)) + "]"


async def _select(policy: FakePolicy, cluster: InMemoryCluster) -> bool:
    """Record the selections as conditions, returning if the desired object exists."""
    ns_cond = Condition(
        type="NamespaceSelection", status=ConditionStatus.TRUE, reason="Done"
    )
    try:
        namespaces = await policy.spec.namespace_selector.get_namespaces(cluster)
    except NucleusException as err:
        ns_cond.status = ConditionStatus.FALSE
        ns_cond.reason = "ErrorSelecting"
        ns_cond.message = str(err)
    else:
        ns_cond.message = _message(namespaces)
    policy.status.update_condition(ns_cond)

    target = policy.spec.target_config_maps
    dyn_cond = Condition(
        type="DynamicSelection", status=ConditionStatus.TRUE, reason="Done"
    )
    try:
        objs = await target.get_matches_dynamic(cluster.resource("ConfigMap"))
    except NucleusException as err:
        dyn_cond.status = ConditionStatus.FALSE
        dyn_cond.reason = "ErrorDynamicMatching"
        dyn_cond.message = str(err)
    else:
        dyn_cond.message = _message([obj.namespaced_name for obj in objs])
    policy.status.update_condition(dyn_cond)

    found = False
    res_list = (
        ReflectiveResourceList(ConfigMapList())
        if policy.spec.target_using_reflection
        else ConfigMapResourceList()
    )
    client_cond = Condition(
        type="ClientSelection", status=ConditionStatus.TRUE, reason="Done"
    )
    try:
        cms = await target.get_matches(cluster, res_list)
    except NucleusException as err:
        client_cond.status = ConditionStatus.FALSE
        client_cond.reason = "ErrorMatching"
        client_cond.message = str(err)
    else:
        client_cond.message = _message([f"{cm.namespace}/{cm.name}" for cm in cms])
        found = any(cm.name == policy.spec.desired_config_map_name for cm in cms)
    policy.status.update_condition(client_cond)
    return found


async def reconcile(
    policy: FakePolicy,
    cluster: InMemoryCluster,
    metrics: PrometheusEmitter | None = None,
) -> dict[str, Any] | None:
    """Update the policy status, returning the compliance event if one was emitted."""
    found = await _select(policy, cluster)
    policy.status.selection_complete = True

    compliance = Condition(
        type="Compliant",
        status=ConditionStatus.TRUE,
        reason="Found",
        message="the desired configmap was found",
    )
    policy.status.compliance_state = ComplianceState.COMPLIANT
    if not found:
        compliance.status = ConditionStatus.FALSE
        compliance.reason = "NotFound"
        compliance.message = "the desired configmap was missing"
        policy.status.compliance_state = ComplianceState.NON_COMPLIANT

    if not policy.status.update_condition(compliance):
        _LOGGER.info("No change; no compliance event to emit")
        return None

    source: EventSourceConfig | None = None
    mutators: list[Mutator] = []
    if annotation := policy.spec.event_annotation:

        def add_annotation(event: dict[str, Any]) -> dict[str, Any]:
            event["metadata"]["annotations"][MUTATOR_ANNOTATION] = annotation
            return event

        source = EventSourceConfig(component=annotation, host=annotation)
        mutators.append(add_annotation)

    emitter = K8sEmitter(cluster, source=source, mutators=mutators)
    if metrics is not None:
        await metrics.emit(policy)
    return await emitter.emit_event(policy)
