"""Label selectors with Kubernetes matchLabels / matchExpressions semantics.

An empty ``LabelSelector()`` selects everything. Callers that hold no
selector at all pass ``None``, which the store gateway treats as
"select nothing".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum


class SelectorOperator(StrEnum):
    """Set-based requirement operators."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


@dataclass(frozen=True)
class SelectorRequirement:
    """A single matchExpressions entry."""

    key: str
    operator: SelectorOperator
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.operator in (SelectorOperator.IN, SelectorOperator.NOT_IN) and not self.values:
            raise ValueError(f"operator {self.operator} requires at least one value for key {self.key!r}")
        if self.operator in (SelectorOperator.EXISTS, SelectorOperator.DOES_NOT_EXIST) and self.values:
            raise ValueError(f"operator {self.operator} takes no values for key {self.key!r}")

    def matches(self, labels: Mapping[str, str]) -> bool:
        present = self.key in labels
        if self.operator == SelectorOperator.IN:
            return present and labels[self.key] in self.values
        if self.operator == SelectorOperator.NOT_IN:
            return not present or labels[self.key] not in self.values
        if self.operator == SelectorOperator.EXISTS:
            return present
        return not present

    def to_query(self) -> str:
        values = ",".join(sorted(self.values))
        if self.operator == SelectorOperator.IN:
            return f"{self.key} in ({values})"
        if self.operator == SelectorOperator.NOT_IN:
            return f"{self.key} notin ({values})"
        if self.operator == SelectorOperator.EXISTS:
            return self.key
        return f"!{self.key}"


@dataclass(frozen=True)
class LabelSelector:
    """Conjunction of exact label matches and set-based requirements."""

    match_labels: Mapping[str, str] = field(default_factory=dict)
    match_expressions: tuple[SelectorRequirement, ...] = ()

    @classmethod
    def from_labels(cls, labels: Mapping[str, str]) -> LabelSelector:
        return cls(match_labels=dict(labels))

    def empty(self) -> bool:
        return not self.match_labels and not self.match_expressions

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        for key, value in self.match_labels.items():
            if labels.get(key) != value:
                return False
        return all(req.matches(labels) for req in self.match_expressions)

    def to_query(self) -> str:
        """Render the ``labelSelector`` query parameter for list calls."""
        parts = [f"{key}={value}" for key, value in sorted(self.match_labels.items())]
        parts.extend(req.to_query() for req in self.match_expressions)
        return ",".join(parts)
