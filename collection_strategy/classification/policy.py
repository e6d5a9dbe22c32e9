# ==============================================
# Policy Table
# ==============================================
#
# PURPOSE:
#   The decision matrix as ordered, tagged DATA. Adding a segment
#   or a threshold is a data edit, not a code edit.
#
# DECISION MATRIX (DEFAULT_POLICY, version 1.0):
#
#   PREMIUM  (high-value customers):
#     ≤ 30 days  → COURTEOUS CALL          (Regular executive)
#     ≤ 60 days  → EMAIL + CALL            (Senior executive)
#     > 60 days  → SENIOR EXECUTIVE VISIT  (Account manager)
#
#   STANDARD (operational volume):
#     ≤ 30 days  → AUTOMATED EMAIL         (System)
#     ≤ 60 days  → STANDARD CALL           (Regular executive)
#     > 60 days  → INTENSIVE COLLECTION    (Collection team)
#
#   BASIC    (operational efficiency, also the DEFAULT):
#     ≤ 60 days  → MASS SMS                (System)
#     > 60 days  → LEGAL ACTION            (Legal department)
#
# CLASSES:
# --------
# - PolicyRule (frozen dataclass)
#     upper_bound_days: int | None   → inclusive bound; None = unbounded catch-all
#     strategy: CollectionStrategy
#     executor: str
#
# - SegmentPolicy (frozen dataclass)
#     name: str
#     rules: tuple[PolicyRule, ...]  → smallest bound first, unbounded last
#
# - PolicyTable (frozen dataclass)
#     version: str
#     segments: Mapping[str, SegmentPolicy]  (read-only)
#     default_segment: str
#
#     Methods:
#     --------
#     - policy_for(segment) -> SegmentPolicy  → falls back to the default segment
#     - is_known_segment(segment) -> bool
#     - to_dict() / from_dict(data)  → JSON shape used by POLICY_FILE
#
# FUNCTION:
# ---------
# - load_policy(path) -> PolicyTable
#
# The table is validated once at construction and is never mutated
# afterwards, so it can be shared by worker threads without locks.
#
# ==============================================

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from collection_strategy.errors import PolicyError
from collection_strategy.normalization.debt_record import MAX_TEXT_LENGTH
from .decision import CollectionStrategy


@dataclass(frozen=True)
class PolicyRule:
    """One row of the decision matrix."""
    upper_bound_days: Optional[int]
    strategy: CollectionStrategy
    executor: str

    def matches(self, days_past_due: int) -> bool:
        return self.upper_bound_days is None or days_past_due <= self.upper_bound_days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_days": self.upper_bound_days,
            "strategy": self.strategy.value,
            "executor": self.executor,
        }


@dataclass(frozen=True)
class SegmentPolicy:
    """Ordered thresholds for one customer segment."""
    name: str
    rules: Tuple[PolicyRule, ...]

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))
        self._validate()

    @property
    def overflow_rule(self) -> PolicyRule:
        return self.rules[-1]

    def _validate(self) -> None:
        if not self.rules:
            raise PolicyError(f"Segment '{self.name}' has no rules")

        if self.rules[-1].upper_bound_days is not None:
            raise PolicyError(
                f"Segment '{self.name}' must end with an unbounded catch-all rule"
            )

        previous = 0
        for rule in self.rules[:-1]:
            bound = rule.upper_bound_days
            if bound is None:
                raise PolicyError(
                    f"Segment '{self.name}' has an unbounded rule before its last rule"
                )
            if isinstance(bound, bool) or not isinstance(bound, int) or bound <= previous:
                raise PolicyError(
                    f"Segment '{self.name}' thresholds must be ascending positive integers, "
                    f"got {bound!r} after {previous}"
                )
            previous = bound

        for rule in self.rules:
            if not isinstance(rule.executor, str) or len(rule.executor) > MAX_TEXT_LENGTH:
                raise PolicyError(
                    f"Segment '{self.name}' executor must be a string of at most {MAX_TEXT_LENGTH} characters, "
                    f"got {rule.executor!r}"
                )


@dataclass(frozen=True)
class PolicyTable:
    """Immutable, versioned decision table."""
    version: str
    segments: Mapping[str, SegmentPolicy]
    default_segment: str

    def __post_init__(self):
        canonical = {}
        for name, segment_policy in self.segments.items():
            key = name.strip().upper()
            if key in canonical:
                raise PolicyError(f"Segment '{key}' is defined more than once")
            canonical[key] = segment_policy
        object.__setattr__(self, "segments", MappingProxyType(canonical))
        object.__setattr__(self, "default_segment", self.default_segment.strip().upper())

        if self.default_segment not in self.segments:
            raise PolicyError(
                f"Default segment '{self.default_segment}' is not defined in the policy"
            )

    def is_known_segment(self, segment: str) -> bool:
        return segment in self.segments

    def policy_for(self, segment: str) -> SegmentPolicy:
        """Return the segment's policy, or the default one when it is unknown."""
        return self.segments.get(segment, self.segments[self.default_segment])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "default_segment": self.default_segment,
            "segments": {
                name: [rule.to_dict() for rule in segment_policy.rules]
                for name, segment_policy in self.segments.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PolicyTable":
        """
        Build a table from its JSON shape.

        Args:
            data: {"version": ..., "default_segment": ..., "segments": {name: [rule, ...]}}

        Returns:
            A validated PolicyTable

        Raises:
            PolicyError: if the data is incomplete or inconsistent
        """
        try:
            segments = {}
            for name, rules in data["segments"].items():
                segments[name] = SegmentPolicy(
                    name=name.strip().upper(),
                    rules=tuple(
                        PolicyRule(
                            upper_bound_days=rule.get("max_days"),
                            strategy=CollectionStrategy(rule["strategy"]),
                            executor=rule.get("executor", ""),
                        )
                        for rule in rules
                    ),
                )
            return cls(
                version=str(data.get("version", "1.0")),
                segments=segments,
                default_segment=data["default_segment"],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise PolicyError(f"Incomplete policy definition: {e}") from e
        except PolicyError:
            raise
        except ValueError as e:
            # Unknown strategy label
            raise PolicyError(str(e)) from e


def load_policy(path: Union[str, Path]) -> PolicyTable:
    """
    Load a policy table from a JSON file.

    Args:
        path: Path to the policy JSON file

    Returns:
        A validated PolicyTable

    Raises:
        PolicyError: if the file is missing, unreadable or inconsistent
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise PolicyError(f"Could not read policy file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise PolicyError(f"Policy file {path} is not valid JSON: {e}") from e
    return PolicyTable.from_dict(data)


DEFAULT_POLICY = PolicyTable(
    version="1.0",
    segments={
        "PREMIUM": SegmentPolicy(
            name="PREMIUM",
            rules=(
                PolicyRule(30, CollectionStrategy.COURTEOUS_CALL, "Regular executive"),
                PolicyRule(60, CollectionStrategy.EMAIL_AND_CALL, "Senior executive"),
                PolicyRule(None, CollectionStrategy.SENIOR_EXECUTIVE_VISIT, "Account manager"),
            ),
        ),
        "STANDARD": SegmentPolicy(
            name="STANDARD",
            rules=(
                PolicyRule(30, CollectionStrategy.AUTOMATED_EMAIL, "System"),
                PolicyRule(60, CollectionStrategy.STANDARD_CALL, "Regular executive"),
                PolicyRule(None, CollectionStrategy.INTENSIVE_COLLECTION, "Collection team"),
            ),
        ),
        "BASIC": SegmentPolicy(
            name="BASIC",
            rules=(
                PolicyRule(60, CollectionStrategy.MASS_SMS, "System"),
                PolicyRule(None, CollectionStrategy.LEGAL_ACTION, "Legal department"),
            ),
        ),
    },
    default_segment="BASIC",
)
