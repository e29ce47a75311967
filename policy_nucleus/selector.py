"""Label selectors for querying cluster objects.

A `LabelSelector` is the declarative form stored in a policy, with exact
`matchLabels` and set-based `matchExpressions`. It is converted into a
`Selector`, the compiled query that is evaluated against an object's labels or
sent to an object store in its string form, e.g. `app=web,tier in (a,b),!legacy`.
"""

from dataclasses import dataclass, field
from enum import StrEnum
import logging
import re
from typing import Optional

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import LabelSelectorError

__all__ = [
    "LabelSelector",
    "LabelSelectorOperator",
    "LabelSelectorRequirement",
    "Operator",
    "Requirement",
    "Selector",
    "label_selector_as_selector",
    "parse_selector",
]

_LOGGER = logging.getLogger(__name__)

DNS1123_SUBDOMAIN_MAX_LENGTH = 253
QUALIFIED_NAME_MAX_LENGTH = 63
LABEL_VALUE_MAX_LENGTH = 63

_QUALIFIED_NAME_RE = re.compile(r"([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]")
_DNS1123_SUBDOMAIN_RE = re.compile(
    r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*"
)
_SET_TERM_RE = re.compile(
    r"^(?P<key>[^\s!=()]+)\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$"
)
_EQUALITY_TERM_RE = re.compile(
    r"^(?P<key>[^\s!=()]+)\s*(?P<op>==|!=|=)\s*(?P<value>[^\s!=(),]*)$"
)


class LabelSelectorOperator(StrEnum):
    """Operators allowed in a LabelSelectorRequirement."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


class Operator(StrEnum):
    """Operators of a compiled selector Requirement, in their string form."""

    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"


_OPERATORS = {
    LabelSelectorOperator.IN: Operator.IN,
    LabelSelectorOperator.NOT_IN: Operator.NOT_IN,
    LabelSelectorOperator.EXISTS: Operator.EXISTS,
    LabelSelectorOperator.DOES_NOT_EXIST: Operator.DOES_NOT_EXIST,
}


def _validate_key(key: str) -> None:
    """Validate a label key is a qualified name with an optional prefix."""
    name = key
    if "/" in key:
        prefix, name = key.split("/", 1)
        if (
            not prefix
            or len(prefix) > DNS1123_SUBDOMAIN_MAX_LENGTH
            or not _DNS1123_SUBDOMAIN_RE.fullmatch(prefix)
        ):
            raise LabelSelectorError(
                f"invalid label key '{key}': prefix must be a DNS-1123 subdomain"
            )
    if (
        not name
        or len(name) > QUALIFIED_NAME_MAX_LENGTH
        or not _QUALIFIED_NAME_RE.fullmatch(name)
    ):
        raise LabelSelectorError(
            f"invalid label key '{key}': name part must consist of alphanumeric "
            "characters, '-', '_' or '.', and must start and end with an "
            "alphanumeric character"
        )


def _validate_value(value: str) -> None:
    """Validate a label value, which may be empty."""
    if not value:
        return
    if len(value) > LABEL_VALUE_MAX_LENGTH or not _QUALIFIED_NAME_RE.fullmatch(value):
        raise LabelSelectorError(
            f"invalid label value '{value}': must be {LABEL_VALUE_MAX_LENGTH} "
            "characters or less and consist of alphanumeric characters, '-', '_' "
            "or '.'"
        )


@dataclass(frozen=True)
class Requirement:
    """A single compiled requirement on the labels of an object."""

    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    @classmethod
    def create(
        cls, key: str, operator: Operator, values: list[str] | None = None
    ) -> "Requirement":
        """Create a validated Requirement."""
        _validate_key(key)
        values = values or []
        if operator in (Operator.IN, Operator.NOT_IN):
            if not values:
                raise LabelSelectorError(
                    f"invalid requirement on '{key}': for 'in', 'notin' "
                    "operators, values set can't be empty"
                )
        elif operator in (Operator.EXISTS, Operator.DOES_NOT_EXIST):
            if values:
                raise LabelSelectorError(
                    f"invalid requirement on '{key}': for 'exists', "
                    "'doesnotexist' operators, values set must be empty"
                )
        elif len(values) != 1:
            raise LabelSelectorError(
                f"invalid requirement on '{key}': exact-match compatibility "
                "requires one single value"
            )
        for value in values:
            _validate_value(value)
        return cls(key=key, operator=operator, values=tuple(sorted(set(values))))

    def matches(self, labels: dict[str, str] | None) -> bool:
        """Return true if the labels satisfy this requirement."""
        labels = labels or {}
        present = self.key in labels
        if self.operator in (Operator.IN, Operator.EQUALS, Operator.DOUBLE_EQUALS):
            return present and labels[self.key] in self.values
        if self.operator in (Operator.NOT_IN, Operator.NOT_EQUALS):
            return not present or labels[self.key] not in self.values
        if self.operator == Operator.EXISTS:
            return present
        return not present

    def __str__(self) -> str:
        """Return the requirement in selector string form."""
        if self.operator == Operator.EXISTS:
            return self.key
        if self.operator == Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (Operator.IN, Operator.NOT_IN):
            return f"{self.key} {self.operator} ({','.join(self.values)})"
        return f"{self.key}{self.operator}{self.values[0]}"


@dataclass(frozen=True)
class Selector:
    """A compiled label query; every requirement must match.

    A Selector with no requirements matches everything.
    """

    requirements: tuple[Requirement, ...] = ()

    @classmethod
    def from_requirements(cls, requirements: list[Requirement]) -> "Selector":
        """Create a Selector with requirements sorted by key."""
        return cls(requirements=tuple(sorted(requirements, key=lambda r: r.key)))

    def empty(self) -> bool:
        """Return true if this selector selects everything."""
        return not self.requirements

    def matches(self, labels: dict[str, str] | None) -> bool:
        """Return true if the labels satisfy all requirements."""
        return all(req.matches(labels) for req in self.requirements)

    def __str__(self) -> str:
        """Return the selector string form, empty for a selector of everything."""
        return ",".join(str(req) for req in self.requirements)


@dataclass
class LabelSelectorRequirement(DataClassDictMixin):
    """A selector requirement relating a key and values with an operator."""

    key: str
    """The label key that the selector applies to."""

    operator: str
    """The relationship of the key to the set of values: In, NotIn, Exists or DoesNotExist."""

    values: Optional[list[str]] = None
    """Values for In and NotIn, and must be empty for Exists and DoesNotExist."""

    class Config(BaseConfig):
        omit_none = True


@dataclass
class LabelSelector(DataClassDictMixin):
    """A label query over a set of resources.

    The requirements of matchLabels and matchExpressions are ANDed. An empty
    label selector matches all objects.
    """

    match_labels: Optional[dict[str, str]] = field(
        metadata=field_options(alias="matchLabels"), default=None
    )
    """Map of exact key=value label requirements."""

    match_expressions: Optional[list[LabelSelectorRequirement]] = field(
        metadata=field_options(alias="matchExpressions"), default=None
    )
    """List of set based label selector requirements."""

    @classmethod
    def parse(cls, text: str) -> "LabelSelector":
        """Parse a selector string into the declarative form.

        Equality terms become matchLabels, while `!=` becomes a NotIn expression.
        """
        match_labels: dict[str, str] = {}
        expressions: list[LabelSelectorRequirement] = []
        for req in parse_selector(text).requirements:
            if req.operator in (Operator.EQUALS, Operator.DOUBLE_EQUALS):
                match_labels[req.key] = req.values[0]
                continue
            operator = {
                Operator.IN: LabelSelectorOperator.IN,
                Operator.NOT_IN: LabelSelectorOperator.NOT_IN,
                Operator.NOT_EQUALS: LabelSelectorOperator.NOT_IN,
                Operator.EXISTS: LabelSelectorOperator.EXISTS,
                Operator.DOES_NOT_EXIST: LabelSelectorOperator.DOES_NOT_EXIST,
            }[req.operator]
            expressions.append(
                LabelSelectorRequirement(
                    key=req.key,
                    operator=operator.value,
                    values=list(req.values) if req.values else None,
                )
            )
        return cls(
            match_labels=match_labels or None,
            match_expressions=expressions or None,
        )

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


def label_selector_as_selector(label_selector: LabelSelector | None) -> Selector:
    """Compile a LabelSelector into a Selector.

    An unset selector selects everything, the same as an empty one.
    """
    if label_selector is None:
        return Selector()
    requirements: list[Requirement] = []
    for key, value in (label_selector.match_labels or {}).items():
        requirements.append(Requirement.create(key, Operator.EQUALS, [value]))
    for expr in label_selector.match_expressions or ():
        try:
            operator = _OPERATORS[LabelSelectorOperator(expr.operator)]
        except ValueError:
            raise LabelSelectorError(
                f"'{expr.operator}' is not a valid label selector operator"
            ) from None
        requirements.append(Requirement.create(expr.key, operator, expr.values))
    selector = Selector.from_requirements(requirements)
    _LOGGER.debug("Built label selector '%s'", selector)
    return selector


def _split_terms(text: str) -> list[str]:
    """Split a selector string on commas outside of parentheses."""
    terms: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise LabelSelectorError(f"unbalanced parentheses in selector '{text}'")
        elif char == "," and depth == 0:
            terms.append("".join(current))
            current = []
            continue
        current.append(char)
    if depth != 0:
        raise LabelSelectorError(f"unbalanced parentheses in selector '{text}'")
    terms.append("".join(current))
    return terms


def _parse_term(term: str) -> Requirement:
    term = term.strip()
    if not term:
        raise LabelSelectorError("found empty term in selector")
    if match := _SET_TERM_RE.match(term):
        values = [v.strip() for v in match.group("values").split(",")]
        if values == [""]:
            values = []
        return Requirement.create(match.group("key"), Operator(match.group("op")), values)
    if match := _EQUALITY_TERM_RE.match(term):
        return Requirement.create(
            match.group("key"), Operator(match.group("op")), [match.group("value")]
        )
    if term.startswith("!"):
        return Requirement.create(term[1:].strip(), Operator.DOES_NOT_EXIST)
    return Requirement.create(term, Operator.EXISTS)


def parse_selector(text: str) -> Selector:
    """Parse a selector string such as `app=web,tier notin (db)`."""
    if not text.strip():
        return Selector()
    return Selector.from_requirements(
        [_parse_term(term) for term in _split_terms(text)]
    )

