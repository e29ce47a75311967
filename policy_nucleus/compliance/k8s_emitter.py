"""Emitter of kubernetes Events read by the policy framework."""

from collections.abc import Callable
from datetime import datetime, timezone
import logging
import time
from typing import Any

from policy_nucleus.config import DEFAULT_EVENT_SOURCE, EventSourceConfig
from policy_nucleus.exceptions import NucleusException, StoreQueryError
from policy_nucleus.policycore import ComplianceState, PolicyLike
from policy_nucleus.store import Writer

_LOGGER = logging.getLogger(__name__)

EVENT_ACTION = "ComplianceStateUpdate"
EVENT_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
EVENT_MICRO_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

Mutator = Callable[[dict[str, Any]], dict[str, Any]]


class K8sEmitter:
    """Creates compliance Events on the cluster.

    The framework aggregates policy status from these events, so the reason
    and message follow the formats it looks for.
    """

    def __init__(
        self,
        client: Writer,
        source: EventSourceConfig | None = None,
        mutators: list[Mutator] | None = None,
    ) -> None:
        """Initialize K8sEmitter.

        Mutators modify the Event after its fields are set but before it is
        created, in the order given. A mutator may raise to abort the emit.
        """
        self._client = client
        self._source = source or EventSourceConfig()
        self._mutators = mutators or []

    async def emit(self, policy: PolicyLike) -> None:
        """Create the compliance Event for the policy."""
        await self.emit_event(policy)

    def build_event(self, policy: PolicyLike) -> dict[str, Any]:
        """Return the compliance Event document for the policy."""
        now_ns = time.time_ns()
        now = datetime.fromtimestamp(now_ns / 1e9, tz=timezone.utc)
        parent = policy.parent()
        parent_ns = policy.parent_namespace()

        if policy.namespace:
            reason = f"policy: {policy.namespace}/{policy.name}"
        else:
            reason = f"policy: {policy.name}"

        state = policy.compliance_state()
        message = f"{state or ''}; {policy.compliance_message()}"
        component = self._source.component or DEFAULT_EVENT_SOURCE
        host = self._source.host or DEFAULT_EVENT_SOURCE

        return {
            "apiVersion": "v1",
            "kind": "Event",
            "metadata": {
                # Matches the naming convention of client-go event recorders
                "name": f"{parent.name}.{now_ns:x}",
                "namespace": parent_ns,
                "labels": dict(policy.labels or {}),
                "annotations": dict(policy.annotations or {}),
            },
            "involvedObject": {
                "apiVersion": parent.api_version,
                "kind": parent.kind,
                "name": parent.name,
                "namespace": parent_ns,
                "uid": parent.uid,
            },
            "related": {
                "apiVersion": policy.api_version,
                "kind": policy.kind,
                "name": policy.name,
                "namespace": policy.namespace,
                "uid": policy.uid,
                "resourceVersion": policy.resource_version,
            },
            "reason": reason,
            "message": message,
            "type": "Normal" if state == ComplianceState.COMPLIANT else "Warning",
            "action": EVENT_ACTION,
            "count": 1,
            "firstTimestamp": now.strftime(EVENT_TIME_FORMAT),
            "lastTimestamp": now.strftime(EVENT_TIME_FORMAT),
            "eventTime": now.strftime(EVENT_MICRO_TIME_FORMAT),
            "source": {"component": component, "host": host},
            "reportingComponent": component,
            "reportingInstance": host,
        }

    async def emit_event(self, policy: PolicyLike) -> dict[str, Any]:
        """Create the compliance Event for the policy and return it."""
        event = self.build_event(policy)
        for mutator in self._mutators:
            event = mutator(event)
        _LOGGER.debug(
            "Emitting compliance event %s: %s",
            event["metadata"]["name"],
            event["message"],
        )
        try:
            await self._client.create(event)
        except NucleusException:
            raise
        except Exception as err:
            raise StoreQueryError(f"Unable to create compliance event: {err}") from err
        return event
