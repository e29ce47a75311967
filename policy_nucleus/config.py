"""Configuration objects for policy-nucleus."""

from dataclasses import dataclass

DEFAULT_EVENT_SOURCE = "policy-nucleus-default"


@dataclass
class EventSourceConfig:
    """Where compliance events report they come from."""

    component: str = DEFAULT_EVENT_SOURCE
    host: str = DEFAULT_EVENT_SOURCE


@dataclass
class ComplianceMetricConfig:
    """Configuration for the compliance gauge."""

    name: str = "ocmio_policy_compliance"
    documentation: str = (
        "The compliance state of the open-cluster-management-io policy template. "
        "-1 == NonCompliant, 0 == Unknown, 1 == Compliant"
    )
