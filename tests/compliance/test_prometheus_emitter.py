"""Tests for the prometheus compliance emitter."""

import pytest
from prometheus_client import CollectorRegistry

from policy_nucleus.compliance import MetricsRegistry, PrometheusEmitter
from policy_nucleus.config import ComplianceMetricConfig
from policy_nucleus.exceptions import InputException
from policy_nucleus.policycore import ComplianceState

from ..fakepolicy import sample_policy

METRIC = "ocmio_policy_compliance"
LABELS = {"kind": "FakePolicy", "namespace": "default", "name": "fakepolicy-sample"}


@pytest.fixture(name="registry")
def registry_fixture() -> MetricsRegistry:
    """Fixture for an isolated metrics registry."""
    return MetricsRegistry(CollectorRegistry())


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        (ComplianceState.COMPLIANT, 1),
        (ComplianceState.NON_COMPLIANT, -1),
        (ComplianceState.UNKNOWN_COMPLIANCY, 0),
        (None, 0),
    ],
)
async def test_emit(
    registry: MetricsRegistry, state: ComplianceState | None, expected: int
) -> None:
    """Test the gauge value for each compliance state."""
    policy = sample_policy()
    policy.status.compliance_state = state
    await PrometheusEmitter(registry).emit(policy)
    assert registry.registry.get_sample_value(METRIC, LABELS) == expected


async def test_emit_updates(registry: MetricsRegistry) -> None:
    """Test emitting again replaces the value of the policy."""
    emitter = PrometheusEmitter(registry)
    policy = sample_policy()
    policy.status.compliance_state = ComplianceState.NON_COMPLIANT
    await emitter.emit(policy)
    policy.status.compliance_state = ComplianceState.COMPLIANT
    await emitter.emit(policy)
    assert registry.registry.get_sample_value(METRIC, LABELS) == 1


async def test_emitters_share_gauge(registry: MetricsRegistry) -> None:
    """Test constructing emitters repeatedly reuses the registered gauge."""
    policy = sample_policy()
    policy.status.compliance_state = ComplianceState.COMPLIANT
    await PrometheusEmitter(registry).emit(policy)

    other = sample_policy()
    other.name = "other"
    other.status.compliance_state = ComplianceState.NON_COMPLIANT
    await PrometheusEmitter(registry).emit(other)

    assert registry.registry.get_sample_value(METRIC, LABELS) == 1
    assert (
        registry.registry.get_sample_value(METRIC, {**LABELS, "name": "other"}) == -1
    )


async def test_cluster_scoped_policy(registry: MetricsRegistry) -> None:
    """Test a policy without a namespace has an empty namespace label."""
    policy = sample_policy()
    policy.namespace = None
    policy.status.compliance_state = ComplianceState.COMPLIANT
    await PrometheusEmitter(registry).emit(policy)
    assert registry.registry.get_sample_value(METRIC, {**LABELS, "namespace": ""}) == 1


async def test_custom_metric(registry: MetricsRegistry) -> None:
    """Test the gauge name can be configured."""
    policy = sample_policy()
    policy.status.compliance_state = ComplianceState.COMPLIANT
    config = ComplianceMetricConfig(name="custom_compliance")
    await PrometheusEmitter(registry, config).emit(policy)
    assert registry.registry.get_sample_value("custom_compliance", LABELS) == 1
    assert registry.registry.get_sample_value(METRIC, LABELS) is None


def test_gauge_reused(registry: MetricsRegistry) -> None:
    """Test asking for a registered gauge returns the same collector."""
    gauge = registry.gauge("sample_gauge", "A sample.", ("name",))
    assert registry.gauge("sample_gauge", "A sample.", ("name",)) is gauge


def test_gauge_label_mismatch(registry: MetricsRegistry) -> None:
    """Test asking for a registered gauge with other labels is an error."""
    registry.gauge("sample_gauge", "A sample.", ("name",))
    with pytest.raises(InputException, match="sample_gauge"):
        registry.gauge("sample_gauge", "A sample.", ("kind", "name"))
