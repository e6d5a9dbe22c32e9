# ==============================================
# StrategyAggregator
# ==============================================
#
# PURPOSE:
#   Read-only summaries over a set of ClassifiedRecords, used to
#   size teams per strategy and to raise alerts on critical cases.
#   Each operation is a named, parameterized query so BI tools and
#   the CLI call the same thing.
#
# CLASS: StrategyAggregator
# -------------------------
#   Holds an immutable snapshot (tuple) of the records it was given.
#
#   Methods:
#   --------
#   - group_count() -> list[StrategyCount]
#       Cases and % of ALL cases per strategy.
#       Ordered by cases DESC, then strategy declaration order.
#
#   - group_summary() -> list[StrategySummary]
#       Cases, total amount and average days past due per strategy.
#       Ordered by total amount DESC.
#
#   - top_n_by_strategy(n: int) -> dict[CollectionStrategy, list[RankedRecord]]
#       Rank 1..n within each strategy by amount DESC.
#       Ties keep input order (stable sort).
#
#   - filter_critical(segment, min_days, min_amount) -> list[ClassifiedRecord]
#       segment == X AND days_past_due > min_days AND amount > min_amount.
#
# DATA CLASSES:
# -------------
# - StrategyCount(strategy, cases, percentage)
# - StrategySummary(strategy, cases, total_amount, average_days_past_due)
# - RankedRecord(rank, record)
#
# ==============================================

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from collection_strategy.classification.decision import ClassifiedRecord, CollectionStrategy
from collection_strategy.normalization.field_normalizer import FieldNormalizer

_STRATEGY_ORDER = {strategy: index for index, strategy in enumerate(CollectionStrategy)}


@dataclass(frozen=True)
class StrategyCount:
    strategy: CollectionStrategy
    cases: int
    percentage: float  # of all classified cases, 0-100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection_strategy": self.strategy.value,
            "cases": self.cases,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class StrategySummary:
    strategy: CollectionStrategy
    cases: int
    total_amount: Decimal
    average_days_past_due: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection_strategy": self.strategy.value,
            "cases": self.cases,
            "total_amount": str(self.total_amount),
            "average_days_past_due": self.average_days_past_due,
        }


@dataclass(frozen=True)
class RankedRecord:
    rank: int
    record: ClassifiedRecord

    def to_dict(self) -> Dict[str, Any]:
        row = self.record.to_dict()
        row["rank"] = self.rank
        return row


class StrategyAggregator:
    """
    Summary statistics over classified records.

    Nothing here mutates the records; every call recomputes from the
    snapshot taken at construction.
    """

    def __init__(self, records: Iterable[ClassifiedRecord]):
        """
        Args:
            records: Classified records (e.g., RunResult.classified)
        """
        self._records = tuple(records)
        self._field_normalizer = FieldNormalizer()

    @property
    def total_cases(self) -> int:
        return len(self._records)

    def group_count(self) -> List[StrategyCount]:
        """
        Count cases per strategy with their share of the total.

        Returns:
            One StrategyCount per strategy present, largest first
        """
        total = len(self._records)
        if total == 0:
            return []

        counts = self._partition()
        results = [
            StrategyCount(
                strategy=strategy,
                cases=len(records),
                percentage=round(len(records) * 100.0 / total, 2),
            )
            for strategy, records in counts.items()
        ]
        results.sort(key=lambda item: (-item.cases, _STRATEGY_ORDER[item.strategy]))
        return results

    def group_summary(self) -> List[StrategySummary]:
        """
        Total debt and average days past due per strategy.

        Returns:
            One StrategySummary per strategy present, largest total first
        """
        results = []
        for strategy, records in self._partition().items():
            total_amount = sum((record.current_amount for record in records), Decimal("0"))
            average_days = sum(record.days_past_due for record in records) / len(records)
            results.append(StrategySummary(
                strategy=strategy,
                cases=len(records),
                total_amount=total_amount,
                average_days_past_due=round(average_days, 2),
            ))
        results.sort(key=lambda item: (-item.total_amount, _STRATEGY_ORDER[item.strategy]))
        return results

    def top_n_by_strategy(self, n: int) -> Dict[CollectionStrategy, List[RankedRecord]]:
        """
        Largest debts within each strategy.

        Args:
            n: How many ranks to keep per strategy (>= 1)

        Returns:
            Strategy → RankedRecords with ranks 1..n (fewer if the partition is smaller)

        Raises:
            ValueError: if n < 1
        """
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise ValueError(f"n must be a positive integer, got {n!r}")

        ranked: Dict[CollectionStrategy, List[RankedRecord]] = {}
        for strategy, records in self._partition().items():
            # sorted() is stable: equal amounts keep input order
            ordered = sorted(records, key=lambda record: record.current_amount, reverse=True)
            ranked[strategy] = [
                RankedRecord(rank=index + 1, record=record)
                for index, record in enumerate(ordered[:n])
            ]
        return ranked

    def filter_critical(
        self,
        segment: str = "PREMIUM",
        min_days: int = 60,
        min_amount: Decimal = Decimal("0")
    ) -> List[ClassifiedRecord]:
        """
        Cases that need escalation.

        Args:
            segment: Segment to match (canonicalized before comparing)
            min_days: Strict lower bound on days past due
            min_amount: Strict lower bound on current amount

        Returns:
            Matching records in input order
        """
        wanted = self._field_normalizer.normalize(segment)
        threshold = Decimal(str(min_amount))
        return [
            record for record in self._records
            if self._field_normalizer.normalize(record.segment) == wanted
            and record.days_past_due > min_days
            and record.current_amount > threshold
        ]

    def _partition(self) -> "OrderedDict[CollectionStrategy, List[ClassifiedRecord]]":
        # Partitions in strategy declaration order, records in input order
        partitions: "OrderedDict[CollectionStrategy, List[ClassifiedRecord]]" = OrderedDict()
        for strategy in CollectionStrategy:
            partitions[strategy] = []
        for record in self._records:
            partitions[record.collection_strategy].append(record)
        return OrderedDict(
            (strategy, records) for strategy, records in partitions.items() if records
        )
