"""Status conditions and the ordered ledger operations over them.

A ledger is a list of `Condition` objects holding at most one condition per
`type`. Inserting a new condition re-sorts the list by type, while updating an
existing condition leaves it where it is. Callers must not hand-construct an
unsorted ledger: sortedness is only established on insert and is never
re-checked on update.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
import logging
from typing import Optional

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

__all__ = [
    "Condition",
    "ConditionStatus",
    "get_condition",
    "update_condition",
]

_LOGGER = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class ConditionStatus(StrEnum):
    """The tri-state status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


def now() -> datetime:
    """Return the current time at the precision stored in a condition."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_time(value: datetime | None) -> str | None:
    """Format a timestamp as an RFC 3339 UTC string."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIME_FORMAT)


def parse_time(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Condition(DataClassDictMixin):
    """A single observation about the state of a policy."""

    type: str = ""
    """The type of the condition, unique within a ledger."""

    status: ConditionStatus = ConditionStatus.UNKNOWN
    """The status of the condition: True, False or Unknown."""

    reason: str = ""
    """A short CamelCase reason for the last transition."""

    message: str = ""
    """A human readable message with details about the transition."""

    last_transition_time: Optional[datetime] = field(
        metadata=field_options(
            alias="lastTransitionTime",
            serialize=format_time,
            deserialize=parse_time,
        ),
        default=None,
    )
    """When the condition last changed, unset until the ledger records it."""

    observed_generation: Optional[int] = field(
        metadata=field_options(alias="observedGeneration"), default=None
    )
    """The generation of the policy the condition was set for."""

    def semantically_differs(self, other: "Condition") -> bool:
        """Return true if the status, reason or message differ."""
        return (
            self.message != other.message
            or self.reason != other.reason
            or self.status != other.status
        )

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


def get_condition(
    conditions: list[Condition], cond_type: str
) -> tuple[int, Condition]:
    """Return the index and condition matching the type.

    The condition is a copy, so changing it does not change the ledger. If no
    condition of that type is present the index is -1 and an empty Condition
    is returned. Its status is `Unknown` rather than blank, so check the index
    to tell a missing condition from one that is present.
    """
    for idx, cond in enumerate(conditions):
        if cond.type == cond_type:
            return idx, dataclasses.replace(cond)
    return -1, Condition()


def update_condition(conditions: list[Condition], new_cond: Condition) -> bool:
    """Add the condition or replace the existing one of the same type.

    The list is modified in place. Returns true when the ledger changed, which
    is when a compliance event should be emitted. A new condition is inserted
    and the list re-sorted by type; an existing condition is only replaced if
    its status, reason or message differ, and keeps its position. An unset
    lastTransitionTime is filled in with the current time. The ledger stores a
    copy of new_cond.
    """
    idx, existing = get_condition(conditions, new_cond.type)
    new_cond = dataclasses.replace(new_cond)
    if idx == -1:
        if new_cond.last_transition_time is None:
            new_cond.last_transition_time = now()
        conditions.append(new_cond)
        conditions.sort(key=lambda cond: cond.type)
        _LOGGER.debug("Added condition %s", new_cond.type)
        return True
    if not new_cond.semantically_differs(existing):
        return False
    if new_cond.last_transition_time is None:
        new_cond.last_transition_time = now()
    # Position is kept, the ledger is assumed to already be sorted.
    conditions[idx] = new_cond
    _LOGGER.debug("Updated condition %s at index %d", new_cond.type, idx)
    return True
