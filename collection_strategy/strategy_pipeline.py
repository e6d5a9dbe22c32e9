# ==============================================
# StrategyAssigner — Core Run Orchestrator
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS of the engine. One call to run() takes
#   every debt record from a source, keeps the in-scope ones,
#   classifies them and writes them to a sink in priority order.
#
# HOW IT CONNECTS THE TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                    StrategyAssigner.run                  │
#   │                                                          │
#   │   source (iterable of DebtRecord / dict)                 │
#   │                 │                                        │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 1: NORMALIZATION                       │        │
#   │  │  status != PAST_DUE      → out_of_scope += 1 │        │
#   │  │  MalformedRecordError    → malformed.append  │        │
#   │  │  days_past_due <= 0      → out_of_scope += 1 │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ in-scope NormalizedDebt                │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 2: CLASSIFICATION                      │        │
#   │  │  StrategyClassifier (inline or thread pool)  │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ ClassifiedRecord                       │
#   │                 ▼                                        │
#   │     [ BUFFER ] sort: days_past_due DESC, amount DESC     │
#   │                 │                                        │
#   │                 ▼                                        │
#   │   sink.write_batch(chunk) ... in order                   │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: StrategyAssigner
# -----------------------
#
#   Constructor:
#   ------------
#   - __init__(policy=None, max_workers=1, write_batch_size=500,
#              record_normalizer=None)
#
#   Public Methods:
#   ---------------
#   - run(source, sink, as_of=None) -> RunResult
#   - classify_records(source, as_of=None) -> RunResult
#       Same as run() without the sink write.
#
# ERRORS:
# -------
#   - Malformed records are dropped and reported, never raised.
#   - Anything raised while reading the source → SourceError.
#   - Anything raised by the sink → SinkError.
#   Both abort the run; retries belong to whatever scheduled it.
#
# DATA CLASSES:
# -------------
#   - Exclusion(debtor_id, field_name, value, reason)
#   - RunResult(...)  → classified records + counts, summary()
#
# ==============================================

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, Iterable, List, Optional

from collection_strategy.classification.classifier import StrategyClassifier
from collection_strategy.classification.decision import ClassifiedRecord
from collection_strategy.classification.policy import PolicyTable
from collection_strategy.errors import MalformedRecordError, SinkError, SourceError
from collection_strategy.normalization.debt_record import NormalizedDebt
from collection_strategy.normalization.record_normalizer import RecordNormalizer
from collection_strategy.reporting.aggregator import StrategyAggregator


@dataclass(frozen=True)
class Exclusion:
    """A record dropped because a required field was missing or unparseable."""
    debtor_id: Any
    field_name: str
    value: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "debtor_id": None if self.debtor_id is None else str(self.debtor_id),
            "field": self.field_name,
            "value": self.value,
            "reason": self.reason,
        }


@dataclass
class RunResult:
    as_of: datetime
    policy_version: str
    records_read: int = 0
    out_of_scope: int = 0
    fallback_segments: int = 0  # in-scope records with an unrecognized segment
    records_written: int = 0
    elapsed_seconds: float = 0.0
    malformed: List[Exclusion] = field(default_factory=list)
    classified: List[ClassifiedRecord] = field(default_factory=list)

    @property
    def excluded(self) -> int:
        return self.out_of_scope + len(self.malformed)

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly run report (used by RunReportStore and the CLI)."""
        return {
            "as_of": self.as_of.isoformat(),
            "policy_version": self.policy_version,
            "records_read": self.records_read,
            "records_classified": len(self.classified),
            "records_written": self.records_written,
            "out_of_scope": self.out_of_scope,
            "malformed": len(self.malformed),
            "fallback_segments": self.fallback_segments,
            "elapsed_seconds": self.elapsed_seconds,
            "strategy_counts": [
                item.to_dict() for item in StrategyAggregator(self.classified).group_count()
            ],
            "exclusions": [exclusion.to_dict() for exclusion in self.malformed],
        }


def priority_key(record: ClassifiedRecord):
    # days_past_due DESC, current_amount DESC
    return (-record.days_past_due, -record.current_amount)


class StrategyAssigner:
    """
    Runs the whole classification flow for one batch:
    source → normalize → scope filter → classify → sort → sink.
    """

    def __init__(
        self,
        policy: Optional[PolicyTable] = None,
        max_workers: int = 1,
        write_batch_size: int = 500,
        record_normalizer: Optional[RecordNormalizer] = None
    ):
        """
        Initialize the engine.

        Args:
            policy: Decision table. None = DEFAULT_POLICY.
            max_workers: >1 classifies on a thread pool; output order is unaffected.
            write_batch_size: Records per sink.write_batch() call.
            record_normalizer: Optional RecordNormalizer to share mappings.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if write_batch_size < 1:
            raise ValueError(f"write_batch_size must be >= 1, got {write_batch_size}")

        self._normalizer = record_normalizer or RecordNormalizer()
        self._classifier = StrategyClassifier(policy)
        self._max_workers = max_workers
        self._write_batch_size = write_batch_size

    @property
    def policy(self) -> PolicyTable:
        return self._classifier.policy

    def run(self, source: Iterable, sink, as_of: Optional[datetime] = None) -> RunResult:
        """
        Classify every in-scope record from `source` and write them to `sink`.

        Args:
            source: Iterable of DebtRecord or dict rows
            sink: Object with write_batch(records) -> int
            as_of: Assignment timestamp for the run. None = now (UTC).

        Returns:
            RunResult with the sorted classified records and exclusion counts

        Raises:
            SourceError: reading the source failed
            SinkError: writing to the sink failed
        """
        start_time = time.time()
        result = self._classify(source, as_of)
        self._write(sink, result)
        result.elapsed_seconds = round(time.time() - start_time, 3)

        print(f"✓ Classified {len(result.classified)} of {result.records_read} records "
              f"in {result.elapsed_seconds:.2f}s "
              f"(out of scope: {result.out_of_scope}, malformed: {len(result.malformed)}, "
              f"written: {result.records_written})")
        return result

    def classify_records(self, source: Iterable, as_of: Optional[datetime] = None) -> RunResult:
        """Same as run() but returns the sorted records without writing them anywhere."""
        start_time = time.time()
        result = self._classify(source, as_of)
        result.elapsed_seconds = round(time.time() - start_time, 3)
        return result

    def _classify(self, source: Iterable, as_of: Optional[datetime]) -> RunResult:
        result = RunResult(
            as_of=as_of or datetime.now(timezone.utc),
            policy_version=self.policy.version
        )

        in_scope = self._screen(source, result)

        if self._max_workers > 1 and len(in_scope) > 1:
            classify = partial(self._classifier.classify_record, as_of=result.as_of)
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                classified = list(executor.map(classify, in_scope))
        else:
            classified = self._classifier.classify_all(in_scope, result.as_of)

        # Stable sort: full ties keep source order
        classified.sort(key=priority_key)
        result.classified = classified
        return result

    def _screen(self, source: Iterable, result: RunResult) -> List[NormalizedDebt]:
        in_scope: List[NormalizedDebt] = []

        try:
            rows = iter(source)
        except Exception as e:
            raise SourceError(f"Could not open source: {e}") from e

        while True:
            try:
                raw_record = next(rows)
            except StopIteration:
                break
            except Exception as e:
                raise SourceError(
                    f"Source failed after {result.records_read} records: {e}"
                ) from e

            result.records_read += 1

            try:
                if not self._normalizer.is_past_due(raw_record):
                    result.out_of_scope += 1
                    continue
                debt = self._normalizer.normalize(raw_record)
            except MalformedRecordError as e:
                result.malformed.append(Exclusion(
                    debtor_id=e.debtor_id,
                    field_name=e.field_name,
                    value=repr(e.value),
                    reason=str(e)
                ))
                print(f"⚠ Excluded malformed record: {e}")
                continue

            if not debt.in_scope:
                result.out_of_scope += 1
                continue

            if self._classifier.is_fallback(debt.segment):
                result.fallback_segments += 1

            in_scope.append(debt)

        return in_scope

    def _write(self, sink, result: RunResult) -> None:
        sink_name = getattr(sink, "name", type(sink).__name__)
        records = result.classified
        for start in range(0, len(records), self._write_batch_size):
            chunk = records[start:start + self._write_batch_size]
            try:
                sink.write_batch(chunk)
            except SinkError:
                raise
            except Exception as e:
                raise SinkError(sink_name, str(e)) from e
            result.records_written += len(chunk)
