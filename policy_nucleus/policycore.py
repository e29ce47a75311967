"""Fields shared by policies of the policy framework.

Policy controllers embed `PolicyCoreSpec` in the spec of their policies and
`PolicyCoreStatus` in the status. The status holds the condition ledger, whose
`update_condition` decides whether the change should be reported.
"""

from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Any, Optional, Protocol

from mashumaro import field_options

from . import matcher
from .conditions import Condition, get_condition, update_condition
from .exceptions import InputException
from .resource_list import NamespaceResourceList
from .resources import BaseManifest
from .selector import LabelSelector
from .store import Reader
from .target import (
    LABEL_SELECTOR,
    Target,
    flatten_selector,
    inline_selector,
    validate_patterns,
)

__all__ = [
    "ComplianceState",
    "NamespaceSelector",
    "OwnerReference",
    "PolicyCoreSpec",
    "PolicyCoreStatus",
    "PolicyLike",
    "RemediationAction",
]

_LOGGER = logging.getLogger(__name__)

SEVERITIES = {"low", "Low", "medium", "Medium", "high", "High", "critical", "Critical"}
REMEDIATION_ACTIONS = {"Inform", "inform", "Enforce", "enforce"}


class ComplianceState(StrEnum):
    """Whether a policy is compliant."""

    COMPLIANT = "Compliant"
    """No violations of the policy were found in the cluster."""

    NON_COMPLIANT = "NonCompliant"
    """An issue was found in the cluster that is considered a violation."""

    UNKNOWN_COMPLIANCY = "UnknownCompliancy"
    """It could not be determined whether there are any violations."""


class RemediationAction(str):
    """What the controller should do when the policy is not compliant."""

    def is_enforce(self) -> bool:
        """True when the controller may attempt to remediate automatically."""
        return self in ("Enforce", "enforce")

    def is_inform(self) -> bool:
        """True when the controller should only report compliance."""
        return self in ("Inform", "inform")


@dataclass
class NamespaceSelector(BaseManifest):
    """Criteria selecting the namespaces a policy applies to.

    Unlike a Target, a NamespaceSelector with no include patterns and no label
    selector matches *zero* namespaces.
    """

    label_selector: Optional[LabelSelector] = field(
        metadata=field_options(alias=LABEL_SELECTOR), default=None
    )
    """Namespaces must match this label selector."""

    include: Optional[list[str]] = None
    """Filepath globs of namespaces the policy should apply to."""

    exclude: Optional[list[str]] = None
    """Filepath globs of namespaces the policy should not apply to."""

    def __post_init__(self) -> None:
        validate_patterns(self.include, matcher.INCLUDE)
        validate_patterns(self.exclude, matcher.EXCLUDE)

    @classmethod
    def __pre_deserialize__(cls, d: dict[Any, Any]) -> dict[Any, Any]:
        return inline_selector(d)

    def __post_serialize__(self, d: dict[Any, Any]) -> dict[Any, Any]:
        return flatten_selector(d, keep_empty=True)

    def target(self) -> Target:
        """Return the equivalent Target over namespaces."""
        return Target(
            label_selector=self.label_selector,
            include=self.include,
            exclude=self.exclude,
        )

    async def get_namespaces(self, reader: Reader) -> list[str]:
        """Return the names of the namespaces matching the NamespaceSelector.

        The reader must be able to list namespaces.
        """
        if not self.include and self.label_selector is None:
            _LOGGER.debug("NamespaceSelector is empty, matching no namespaces")
            return []
        matched = await self.target().get_matches(reader, NamespaceResourceList())
        return [ns.name for ns in matched]


@dataclass
class PolicyCoreSpec(BaseManifest):
    """Fields that policies must implement to be part of the policy framework."""

    severity: Optional[str] = None
    """How serious a violation is: low, medium, high, or critical."""

    remediation_action: Optional[str] = field(
        metadata=field_options(alias="remediationAction"), default=None
    )
    """What to do when not compliant: inform or enforce."""

    namespace_selector: NamespaceSelector = field(
        metadata=field_options(alias="namespaceSelector"),
        default_factory=NamespaceSelector,
    )
    """Which namespaces the policy applies to, for namespaced objects."""

    def __post_init__(self) -> None:
        if self.severity and self.severity not in SEVERITIES:
            raise InputException(f"Invalid severity '{self.severity}'")
        if (
            self.remediation_action
            and self.remediation_action not in REMEDIATION_ACTIONS
        ):
            raise InputException(
                f"Invalid remediationAction '{self.remediation_action}'"
            )

    @property
    def remediation(self) -> RemediationAction:
        """The remediation action with its helpers."""
        return RemediationAction(self.remediation_action or "")


@dataclass
class PolicyCoreStatus(BaseManifest):
    """Fields that policies implement in their status."""

    compliance_state: Optional[ComplianceState] = field(
        metadata=field_options(alias="compliant"), default=None
    )
    """Whether the policy is compliant."""

    conditions: list[Condition] = field(default_factory=list)
    """Conditions describing the status, sorted by type."""

    def get_condition(self, cond_type: str) -> tuple[int, Condition]:
        """Return the index and condition of the type, or -1 and an empty Condition."""
        return get_condition(self.conditions, cond_type)

    def update_condition(self, new_cond: Condition) -> bool:
        """Add or update the condition, returning true if anything changed."""
        return update_condition(self.conditions, new_cond)

    def __post_serialize__(self, d: dict[Any, Any]) -> dict[Any, Any]:
        if not d.get("conditions"):
            d.pop("conditions", None)
        return d


@dataclass
class OwnerReference(BaseManifest):
    """A reference to the object that owns a policy."""

    api_version: str = field(metadata=field_options(alias="apiVersion"), default="")
    kind: str = ""
    name: str = ""
    uid: str = ""


class PolicyLike(Protocol):
    """A policy whose compliance can be emitted."""

    @property
    def kind(self) -> str:
        """The kind of the policy."""

    @property
    def api_version(self) -> str:
        """The apiVersion of the policy."""

    @property
    def name(self) -> str:
        """The name of the policy."""

    @property
    def namespace(self) -> str | None:
        """The namespace of the policy."""

    @property
    def uid(self) -> str:
        """The uid of the policy."""

    @property
    def resource_version(self) -> str:
        """The resourceVersion of the policy."""

    @property
    def labels(self) -> dict[str, str] | None:
        """The labels on the policy."""

    @property
    def annotations(self) -> dict[str, str] | None:
        """The annotations on the policy."""

    def compliance_state(self) -> ComplianceState | None:
        """The current compliance of the policy."""

    def compliance_message(self) -> str:
        """A human readable description of the compliance."""

    def parent(self) -> OwnerReference:
        """The owner of the policy, usually the framework's parent policy."""

    def parent_namespace(self) -> str | None:
        """The namespace of the parent policy."""
