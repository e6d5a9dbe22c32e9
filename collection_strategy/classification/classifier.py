# ==============================================
# StrategyClassifier
# ==============================================
#
# PURPOSE:
#   Takes a normalized (segment, days_past_due) pair and scans the
#   PolicyTable to produce exactly one CollectionStrategy.
#
# CLASS: StrategyClassifier
# -------------------------
#   Stateless — holds only a reference to an immutable PolicyTable.
#
#   Constructor:
#   ------------
#   - __init__(policy: PolicyTable = DEFAULT_POLICY)
#
#   Methods:
#   --------
#   - classify(segment: str, days_past_due: int) -> CollectionStrategy
#
#   - classify_rule(segment: str, days_past_due: int) -> PolicyRule
#       Applies rules in order (short-circuit evaluation):
#
#       STEP 1: SEGMENT LOOKUP
#         Known segment → its rules
#         Unknown / empty segment → default segment's rules
#
#       STEP 2: ORDERED SCAN
#         First rule with days_past_due <= upper bound wins.
#         Rules are stored smallest bound first, so the
#         first match is the tightest one.
#
#       STEP 3: OVERFLOW
#         Nothing matched → last (unbounded) rule.
#
#   - classify_record(debt: NormalizedDebt, as_of: datetime) -> ClassifiedRecord
#       Classify and stamp a normalized record.
#
#   - classify_all(debts, as_of) -> list[ClassifiedRecord]
#
# CONTRACT:
# ---------
#   days_past_due must be a positive int. Anything else raises
#   ValueError: out-of-scope and malformed records are the
#   caller's job to exclude, never silently classified here.
#
# ==============================================

from datetime import datetime
from typing import Iterable, List

from collection_strategy.normalization.debt_record import NormalizedDebt
from .decision import ClassifiedRecord, CollectionStrategy
from .policy import DEFAULT_POLICY, PolicyRule, PolicyTable


class StrategyClassifier:
    """
    Maps a normalized segment and days-past-due to a collection strategy.

    Classification is a pure function of its two inputs and the policy:
    amounts, names and other records in the batch never affect it.
    """

    def __init__(self, policy: PolicyTable = None):
        """
        Initialize the classifier with a policy table.

        Args:
            policy: Optional PolicyTable. If not provided, the built-in
                    DEFAULT_POLICY (version 1.0 decision matrix) is used.
        """
        self.policy = policy or DEFAULT_POLICY

    def classify(self, segment: str, days_past_due: int) -> CollectionStrategy:
        """
        Assign a strategy.

        Args:
            segment: Canonical segment (already trimmed and upper-cased)
            days_past_due: Positive number of days past due

        Returns:
            The assigned CollectionStrategy
        """
        return self.classify_rule(segment, days_past_due).strategy

    def classify_rule(self, segment: str, days_past_due: int) -> PolicyRule:
        """
        Find the policy rule that applies.

        Args:
            segment: Canonical segment
            days_past_due: Positive number of days past due

        Returns:
            The matching PolicyRule (strategy + executor)

        Raises:
            ValueError: if days_past_due is not a positive int
        """
        if isinstance(days_past_due, bool) or not isinstance(days_past_due, int):
            raise ValueError(
                f"days_past_due must be an int, got {type(days_past_due).__name__}"
            )
        if days_past_due <= 0:
            raise ValueError(
                f"days_past_due must be positive to classify, got {days_past_due}"
            )

        # STEP 1: Segment lookup (unknown → default)
        segment_policy = self.policy.policy_for(segment)

        # STEP 2: Ordered scan, smallest bound first
        for rule in segment_policy.rules:
            if rule.matches(days_past_due):
                return rule

        # STEP 3: Overflow (unreachable for a validated policy, kept for clarity)
        return segment_policy.overflow_rule

    def classify_record(self, debt: NormalizedDebt, as_of: datetime) -> ClassifiedRecord:
        """
        Classify a normalized debt and stamp it with the run time.

        Args:
            debt: A NormalizedDebt that passed the scope filter
            as_of: Assignment timestamp shared by the whole run

        Returns:
            A ClassifiedRecord
        """
        rule = self.classify_rule(debt.segment, debt.days_past_due)
        return ClassifiedRecord(
            debtor_id=debt.debtor_id,
            debt_id=debt.debt_id,
            name=debt.name,
            surname=debt.surname,
            segment=debt.segment,
            days_past_due=debt.days_past_due,
            current_amount=debt.current_amount,
            status=debt.status,
            collection_strategy=rule.strategy,
            executor=rule.executor,
            assignment_timestamp=as_of,
        )

    def classify_all(
        self,
        debts: Iterable[NormalizedDebt],
        as_of: datetime
    ) -> List[ClassifiedRecord]:
        """Classify every debt, preserving input order."""
        return [self.classify_record(debt, as_of) for debt in debts]

    def is_fallback(self, segment: str) -> bool:
        """True when the segment is unknown and the default policy applies."""
        return not self.policy.is_known_segment(segment)
