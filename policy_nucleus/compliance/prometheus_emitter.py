"""Emitter of compliance as prometheus metrics."""

import logging

from prometheus_client import CollectorRegistry, Gauge

from policy_nucleus.config import ComplianceMetricConfig
from policy_nucleus.exceptions import InputException
from policy_nucleus.policycore import ComplianceState, PolicyLike

_LOGGER = logging.getLogger(__name__)

LABEL_NAMES = ("kind", "namespace", "name")

COMPLIANCE_VALUES = {
    ComplianceState.NON_COMPLIANT: -1,
    ComplianceState.COMPLIANT: 1,
}


class MetricsRegistry:
    """A process scoped set of collectors, shared by emitters.

    Registering a gauge that was already registered returns the existing one,
    so emitters may be constructed any number of times.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize MetricsRegistry."""
        self.registry = registry or CollectorRegistry()
        self._gauges: dict[str, tuple[Gauge, tuple[str, ...]]] = {}

    def gauge(
        self, name: str, documentation: str, labelnames: tuple[str, ...]
    ) -> Gauge:
        """Return the gauge with the name, registering it if needed.

        A gauge that was registered with other label names is an error.
        """
        labelnames = tuple(labelnames)
        if (existing := self._gauges.get(name)) is not None:
            gauge, registered = existing
            if registered != labelnames:
                raise InputException(
                    f"Gauge {name} is registered with labels {registered}, "
                    f"not {labelnames}"
                )
            _LOGGER.debug("Reusing registered gauge %s", name)
            return gauge
        gauge = Gauge(
            name, documentation, labelnames=labelnames, registry=self.registry
        )
        self._gauges[name] = (gauge, labelnames)
        return gauge


class PrometheusEmitter:
    """Sets a gauge per policy: -1 NonCompliant, 0 unknown, 1 Compliant."""

    def __init__(
        self,
        registry: MetricsRegistry,
        config: ComplianceMetricConfig | None = None,
    ) -> None:
        """Initialize PrometheusEmitter."""
        config = config or ComplianceMetricConfig()
        self._gauge = registry.gauge(config.name, config.documentation, LABEL_NAMES)

    async def emit(self, policy: PolicyLike) -> None:
        """Record the compliance of the policy."""
        state = policy.compliance_state()
        value = COMPLIANCE_VALUES.get(state, 0) if state is not None else 0
        self._gauge.labels(policy.kind, policy.namespace or "", policy.name).set(value)
