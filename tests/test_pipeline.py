# ==============================================
# Tests for CollectionPipeline and the CLI
# ==============================================

import json
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pymysql
import pytest
from pymongo.errors import ConnectionFailure

from collection_strategy import cli
from collection_strategy.classification import DEFAULT_POLICY, CollectionStrategy
from collection_strategy.config import AlertConfig, AppConfig, PipelineConfig
from collection_strategy.errors import SinkError, SourceError
from collection_strategy.persistence import RunReportStore
from collection_strategy.pipeline import CollectionPipeline, demo_basic_usage
from collection_strategy.storage import InMemorySink, MongoClient, MySQLClient


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(sinks=["memory"], report_dir=str(tmp_path / "reports"))


@pytest.fixture
def pipeline(app_config, sample_rows, memory_sink):
    return CollectionPipeline(config=app_config, source=sample_rows, sinks=[memory_sink])


class TestCollectionPipeline:
    def test_run_writes_and_records_report(self, pipeline, memory_sink, as_of):
        result = pipeline.run(as_of=as_of)

        assert [record.debtor_id for record in memory_sink.records] == [2, 1, 3, 4]
        report = pipeline.last_report()
        assert report["records_classified"] == 4
        assert report["sink_writes"] == {"memory": 4}
        assert report["policy_version"] == DEFAULT_POLICY.version
        assert pipeline.last_result is result

    def test_reports_use_last_run(self, pipeline, as_of):
        pipeline.run(as_of=as_of)

        counts = pipeline.report_counts()
        assert sum(item.cases for item in counts) == 4
        assert pipeline.report_summary()[0].strategy is CollectionStrategy.SENIOR_EXECUTIVE_VISIT
        assert len(pipeline.report_top(1)) == 4
        assert [record.debtor_id for record in pipeline.report_critical()] == [2]

    def test_critical_thresholds_from_config(self, sample_rows, tmp_path, as_of):
        config = AppConfig(
            alerts=AlertConfig(segment="STANDARD", min_days=30, min_amount=Decimal("500")),
            report_dir=str(tmp_path),
        )
        pipeline = CollectionPipeline(config=config, source=sample_rows, sinks=[InMemorySink()])
        pipeline.run(as_of=as_of)

        assert [record.debtor_id for record in pipeline.report_critical()] == [1]
        assert pipeline.report_critical(min_amount=Decimal("5000")) == []

    def test_reports_before_any_run(self, pipeline):
        assert pipeline.report_counts() == []

    def test_sinks_built_from_config(self, tmp_path):
        pipeline = CollectionPipeline(
            config=AppConfig(sinks=["memory", "mysql"], report_dir=str(tmp_path)),
            source=[],
        )
        sinks = pipeline._router.sinks
        assert isinstance(sinks[0], InMemorySink)
        assert isinstance(sinks[1], MySQLClient)

    def test_unknown_sink(self, tmp_path):
        with pytest.raises(ValueError):
            CollectionPipeline(config=AppConfig(sinks=["kafka"], report_dir=str(tmp_path)), source=[])

    def test_policy_file(self, tmp_path):
        data = DEFAULT_POLICY.to_dict()
        data["version"] = "2026.2"
        policy_path = tmp_path / "policy.json"
        policy_path.write_text(json.dumps(data))
        config = AppConfig(pipeline=PipelineConfig(policy_file=str(policy_path)), report_dir=str(tmp_path))

        pipeline = CollectionPipeline(config=config, source=[], sinks=[InMemorySink()])
        assert pipeline.policy.version == "2026.2"

    def test_sink_failure_skips_report(self, app_config, sample_rows, as_of):
        broken = MagicMock()
        broken.name = "mysql"
        broken.write_batch.side_effect = RuntimeError("lost connection")
        store = RunReportStore(app_config.report_dir)
        pipeline = CollectionPipeline(config=app_config, source=sample_rows, sinks=[broken], report_store=store)

        with pytest.raises(SinkError):
            pipeline.run(as_of=as_of)
        assert store.list_runs() == []

    def test_demo(self, tmp_path):
        result = demo_basic_usage(AppConfig(report_dir=str(tmp_path)))
        assert len(result.classified) == 5
        assert result.excluded == 2


class TestCli:
    def test_parser(self):
        parser = cli.build_parser()
        args = parser.parse_args(["run", "--as-of", "2026-01-15T06:00:00+00:00"])
        assert args.as_of == datetime(2026, 1, 15, 6, 0, tzinfo=timezone.utc)

        args = parser.parse_args(["report", "critical", "--min-amount", "1000.5"])
        assert args.min_amount == Decimal("1000.5")

    def test_bad_timestamp_rejected(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["run", "--as-of", "yesterday"])

    def test_run_command(self, monkeypatch, app_config, sample_rows, capsys):
        monkeypatch.setattr(
            cli, "CollectionPipeline",
            lambda: CollectionPipeline(config=app_config, source=sample_rows, sinks=[InMemorySink()])
        )
        assert cli.main(["run", "--as-of", "2026-01-15T06:00:00+00:00"]) == 0
        assert '"records_classified": 4' in capsys.readouterr().out

    def test_report_command(self, monkeypatch, app_config, sample_rows, capsys):
        pipeline = CollectionPipeline(config=app_config, source=sample_rows, sinks=[InMemorySink()])
        pipeline.run()
        monkeypatch.setattr(cli, "CollectionPipeline", lambda: pipeline)

        assert cli.main(["report", "counts"]) == 0
        assert "SENIOR EXECUTIVE VISIT" in capsys.readouterr().out

    def test_failure_exit_code(self, monkeypatch, app_config, sample_rows):
        broken = MagicMock()
        broken.write_batch.side_effect = RuntimeError("down")
        monkeypatch.setattr(
            cli, "CollectionPipeline",
            lambda: CollectionPipeline(config=app_config, source=sample_rows, sinks=[broken])
        )
        assert cli.main(["run"]) == 1


class TestRunReports:
    def test_sink_writes_are_per_run(self, pipeline, as_of):
        """A second run reports only its own writes."""
        pipeline.run(as_of=as_of)
        pipeline.run(as_of=as_of.replace(day=16))

        report = pipeline.last_report()
        assert report["sink_writes"] == {"memory": 4}
        assert pipeline._router.totals.writes == {"memory": 8}


class TestConnectionFailures:
    def test_mysql_unreachable_is_source_error(self, monkeypatch, tmp_path):
        def refuse(self):
            raise pymysql.err.OperationalError(2003, "Can't connect to MySQL server")

        monkeypatch.setattr(MySQLClient, "connect", refuse)
        pipeline = CollectionPipeline(config=AppConfig(sinks=["mysql"], report_dir=str(tmp_path)))

        with pytest.raises(SourceError):
            pipeline.run()

    def test_mongo_unreachable_is_sink_error(self, monkeypatch, tmp_path, sample_rows):
        def refuse(self):
            raise ConnectionFailure("connection refused")

        monkeypatch.setattr(MongoClient, "connect", refuse)
        pipeline = CollectionPipeline(
            config=AppConfig(sinks=["mongo"], report_dir=str(tmp_path)),
            source=sample_rows,
        )

        with pytest.raises(SinkError) as exc_info:
            pipeline.run()
        assert exc_info.value.sink_name == "mongo"

    def test_cli_reports_connection_failure(self, monkeypatch, tmp_path, capsys):
        def refuse(self):
            raise pymysql.err.OperationalError(2003, "Can't connect to MySQL server")

        monkeypatch.setattr(MySQLClient, "connect", refuse)
        monkeypatch.setattr(
            cli, "CollectionPipeline",
            lambda: CollectionPipeline(config=AppConfig(sinks=["mysql"], report_dir=str(tmp_path)))
        )

        assert cli.main(["run"]) == 1
        assert "✗" in capsys.readouterr().err

    def test_cli_reports_missing_policy_file(self, monkeypatch, tmp_path):
        config = AppConfig(
            pipeline=PipelineConfig(policy_file=str(tmp_path / "missing.json")),
            report_dir=str(tmp_path),
        )
        monkeypatch.setattr(
            cli, "CollectionPipeline",
            lambda: CollectionPipeline(config=config, source=[], sinks=[InMemorySink()])
        )
        assert cli.main(["run"]) == 1
