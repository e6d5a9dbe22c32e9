# ==============================================
# Tests for RunReportStore
# ==============================================

from collection_strategy.persistence import RunReportStore
from collection_strategy.strategy_pipeline import StrategyAssigner


class TestRunReportStore:
    def test_save_and_load_latest(self, tmp_path, sample_rows, as_of):
        store = RunReportStore(str(tmp_path / "reports"))
        summary = StrategyAssigner().classify_records(sample_rows, as_of=as_of).summary()

        path = store.save(summary)

        assert path.name == "run_20260115T060000000000.json"
        assert store.load(path) == summary
        assert store.load_latest() == summary

    def test_latest_is_newest(self, tmp_path):
        store = RunReportStore(str(tmp_path))
        store.save({"as_of": "2026-01-15T06:00:00+00:00", "records_read": 1})
        store.save({"as_of": "2026-01-16T06:00:00+00:00", "records_read": 2})

        assert store.load_latest()["records_read"] == 2
        assert [path.name for path in store.list_runs()] == [
            "run_20260115T060000000000.json",
            "run_20260116T060000000000.json",
        ]

    def test_missing_latest(self, tmp_path):
        assert RunReportStore(str(tmp_path)).load_latest() is None

    def test_clear(self, tmp_path):
        store = RunReportStore(str(tmp_path))
        store.save({"as_of": "2026-01-15T06:00:00+00:00"})
        store.clear()

        assert store.list_runs() == []
        assert store.load_latest() is None
