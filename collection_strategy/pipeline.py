"""
==============================================
Collection Pipeline (config-driven facade)
==============================================

This module wires the StrategyAssigner to real sources and sinks
based on AppConfig, and exposes the four reporting queries.

USAGE EXAMPLES:

1. Daily run against MySQL (debtors JOIN debts → collection_strategies):
    from collection_strategy.pipeline import CollectionPipeline

    with CollectionPipeline() as pipeline:
        result = pipeline.run()
        print(result.summary())

2. Explicit source and sink:
    from collection_strategy.pipeline import CollectionPipeline
    from collection_strategy.storage import InMemorySink

    sink = InMemorySink()
    pipeline = CollectionPipeline(source=[
        {"debtor_id": 1, "segment": "STANDARD", "days_past_due": 45,
         "current_amount": 1000, "status": "PAST_DUE"},
    ], sinks=[sink])
    pipeline.run()

3. Reports over the last run (or the stored table when nothing ran):
    pipeline.report_counts()
    pipeline.report_summary()
    pipeline.report_top(5)
    pipeline.report_critical()           # thresholds from ALERT_* settings
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pymysql
from pymongo.errors import PyMongoError

from collection_strategy.classification.decision import ClassifiedRecord, CollectionStrategy
from collection_strategy.classification.policy import DEFAULT_POLICY, PolicyTable, load_policy
from collection_strategy.config import AppConfig, get_config
from collection_strategy.errors import SinkError, SourceError
from collection_strategy.persistence.run_store import RunReportStore
from collection_strategy.reporting.aggregator import (
    RankedRecord,
    StrategyAggregator,
    StrategyCount,
    StrategySummary,
)
from collection_strategy.storage.http_source import DebtApiSource
from collection_strategy.storage.memory import InMemorySink
from collection_strategy.storage.mongo_client import MongoClient
from collection_strategy.storage.mysql_client import MySQLClient
from collection_strategy.storage.record_router import RecordRouter
from collection_strategy.strategy_pipeline import RunResult, StrategyAssigner


class CollectionPipeline:
    """
    High-level wrapper around StrategyAssigner.
    Builds sources and sinks from configuration and keeps the last run
    around for reporting.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        source: Optional[Iterable] = None,
        sinks: Optional[List] = None,
        policy: Optional[PolicyTable] = None,
        report_store: Optional[RunReportStore] = None
    ):
        """
        Initialize the pipeline.

        Args:
            config: Optional configuration. If None, loads from environment.
            source: Optional record source. If None, built from config
                    (DEBTS_API_URL if set, else MySQL).
            sinks: Optional list of sinks. If None, built from config.sinks.
            policy: Optional PolicyTable. If None, POLICY_FILE or DEFAULT_POLICY.
            report_store: Optional RunReportStore. If None, one in config.report_dir.
        """
        self._config = config or get_config()
        self._mysql_client: Optional[MySQLClient] = None
        self._mongo_client: Optional[MongoClient] = None

        self._policy = policy or self._load_policy()
        self._assigner = StrategyAssigner(
            self._policy,
            max_workers=self._config.pipeline.max_workers,
            write_batch_size=self._config.pipeline.write_batch_size
        )
        self._source = source if source is not None else self._build_source()
        self._router = RecordRouter(*(sinks if sinks is not None else self._build_sinks()))
        self._report_store = report_store or RunReportStore(self._config.report_dir)
        self._last_result: Optional[RunResult] = None

    @property
    def policy(self) -> PolicyTable:
        return self._policy

    @property
    def last_result(self) -> Optional[RunResult]:
        return self._last_result

    def run(self, as_of: Optional[datetime] = None) -> RunResult:
        """
        Run one classification pass and record its report.

        Args:
            as_of: Assignment timestamp. None = now (UTC).

        Returns:
            RunResult of the run

        USES:
            - StrategyAssigner.run()
            - RecordRouter (all configured sinks)
            - RunReportStore.save()
        """
        self._connect()
        writes_before = dict(self._router.totals.writes)
        result = self._assigner.run(self._source, self._router, as_of=as_of)
        self._last_result = result

        summary = result.summary()
        # This run only; router totals span the pipeline's lifetime
        summary["sink_writes"] = {
            sink_name: written - writes_before.get(sink_name, 0)
            for sink_name, written in self._router.totals.writes.items()
        }
        self._report_store.save(summary)

        if result.fallback_segments:
            print(f"⚠ {result.fallback_segments} records had an unrecognized segment "
                  f"and used the {self._policy.default_segment} policy")
        return result

    # ------------------------------------------
    # Reporting queries
    # ------------------------------------------

    def report_counts(self) -> List[StrategyCount]:
        """Cases and percentage per strategy."""
        return self._aggregator().group_count()

    def report_summary(self) -> List[StrategySummary]:
        """Total debt and average days past due per strategy."""
        return self._aggregator().group_summary()

    def report_top(self, n: int = 10) -> Dict[CollectionStrategy, List[RankedRecord]]:
        """Top-n debts by amount within each strategy."""
        return self._aggregator().top_n_by_strategy(n)

    def report_critical(
        self,
        segment: Optional[str] = None,
        min_days: Optional[int] = None,
        min_amount: Optional[Decimal] = None
    ) -> List[ClassifiedRecord]:
        """
        Alert list. Unset thresholds come from the ALERT_* settings.
        """
        alerts = self._config.alerts
        return self._aggregator().filter_critical(
            segment=alerts.segment if segment is None else segment,
            min_days=alerts.min_days if min_days is None else min_days,
            min_amount=alerts.min_amount if min_amount is None else min_amount
        )

    def last_report(self) -> Optional[dict]:
        """Report saved by the most recent run (this process or an earlier one)."""
        return self._report_store.load_latest()

    def _aggregator(self) -> StrategyAggregator:
        return StrategyAggregator(self._report_records())

    def _report_records(self) -> List[ClassifiedRecord]:
        if self._last_result is not None:
            return self._last_result.classified
        if self._mysql_client is not None:
            self._connect_mysql()
            try:
                return self._mysql_client.fetch_classified()
            except pymysql.MySQLError as e:
                raise SourceError(f"Could not load stored assignments: {e}") from e
        return []

    # ------------------------------------------
    # Wiring
    # ------------------------------------------

    def _load_policy(self) -> PolicyTable:
        if self._config.pipeline.policy_file:
            policy = load_policy(self._config.pipeline.policy_file)
            print(f"✓ Loaded policy version {policy.version} from {self._config.pipeline.policy_file}")
            return policy
        return DEFAULT_POLICY

    def _mysql(self) -> MySQLClient:
        if self._mysql_client is None:
            mysql = self._config.mysql
            self._mysql_client = MySQLClient(
                host=mysql.host,
                port=mysql.port,
                user=mysql.user,
                password=mysql.password,
                database=mysql.database,
                debtors_table=mysql.debtors_table,
                debts_table=mysql.debts_table,
                strategy_table=mysql.strategy_table
            )
        return self._mysql_client

    def _mongo(self) -> MongoClient:
        if self._mongo_client is None:
            mongo = self._config.mongo
            self._mongo_client = MongoClient(
                host=mongo.host,
                port=mongo.port,
                database=mongo.database,
                user=mongo.user,
                password=mongo.password,
                collection=mongo.collection
            )
        return self._mongo_client

    def _build_source(self) -> Iterable:
        if self._config.debts_api_url:
            return DebtApiSource(self._config.debts_api_url)
        return self._mysql()

    def _build_sinks(self) -> List:
        sinks = []
        for name in self._config.sinks:
            if name == "mysql":
                sinks.append(self._mysql())
            elif name == "mongo":
                sinks.append(self._mongo())
            elif name == "memory":
                sinks.append(InMemorySink())
            else:
                raise ValueError(f"Unknown sink '{name}' (expected mysql, mongo or memory)")
        return sinks

    def _connect(self) -> None:
        if self._mysql_client is not None:
            self._connect_mysql()
        if self._mongo_client is not None:
            try:
                self._mongo_client.connect()
            except PyMongoError as e:
                raise SinkError("mongo", f"could not connect: {e}") from e

    def _connect_mysql(self) -> None:
        try:
            self._mysql_client.connect()
        except pymysql.MySQLError as e:
            raise SourceError(f"Could not connect to MySQL: {e}") from e

    def close(self) -> None:
        """
        Close database connections.

        USES:
            - MySQLClient.disconnect(), MongoClient.disconnect()
        """
        if self._mysql_client is not None:
            self._mysql_client.disconnect()
        if self._mongo_client is not None:
            self._mongo_client.disconnect()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False


# ==============================================
# Demo
# ==============================================

SAMPLE_RECORDS = [
    {"debtor_id": 101, "name": "Ana", "surname": "Rojas", "segment": "STANDARD",
     "days_past_due": 45, "current_amount": "1000", "status": "PAST_DUE"},
    {"debtor_id": 102, "name": "Luis", "surname": "Soto", "segment": "PREMIUM",
     "days_past_due": 90, "current_amount": "6000000", "status": "PAST_DUE"},
    {"debtor_id": 103, "name": "Marta", "surname": "Diaz", "segment": " premium ",
     "days_past_due": 12, "current_amount": "250000", "status": "past_due "},
    {"debtor_id": 104, "name": "Pedro", "surname": "Vera", "segment": "GOLD",
     "days_past_due": 10, "current_amount": "800", "status": "PAST_DUE"},
    {"debtor_id": 105, "name": "Sofia", "surname": "Lagos", "segment": "BASIC",
     "days_past_due": 120, "current_amount": "15000", "status": "PAST_DUE"},
    {"debtor_id": 106, "name": "Jorge", "surname": "Pinto", "segment": "STANDARD",
     "days_past_due": 5, "current_amount": "300", "status": "PAID"},
    {"debtor_id": 107, "name": "Elena", "surname": "Mora", "segment": "PREMIUM",
     "days_past_due": "n/a", "current_amount": "9000", "status": "PAST_DUE"},
]


def demo_basic_usage(config: Optional[AppConfig] = None):
    """Classify the sample records into memory and print every report."""
    print("=" * 60)
    print("DEMO: Collection strategy assignment")
    print("=" * 60)

    sink = InMemorySink()
    pipeline = CollectionPipeline(
        config=config or AppConfig(report_dir="reports/demo/"),
        source=SAMPLE_RECORDS,
        sinks=[sink]
    )

    print("\n1. Classifying sample records...")
    result = pipeline.run()

    print("\n2. Assignments (priority order):")
    for record in sink.records:
        print(f"   → {record.debtor_id}: {record.segment or '<blank>'} / "
              f"{record.days_past_due}d / {record.current_amount} "
              f"→ {record.collection_strategy.value} ({record.executor})")

    print("\n3. Cases per strategy:")
    for item in pipeline.report_counts():
        print(f"   → {item.strategy.value}: {item.cases} ({item.percentage}%)")

    print("\n4. Critical cases:")
    for record in pipeline.report_critical():
        print(f"   → {record.debtor_id}: {record.days_past_due}d, {record.current_amount}")

    print(f"\n✓ Demo complete! (excluded: {result.excluded})")
    return result
