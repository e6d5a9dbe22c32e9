import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


# ==============================================
# RunReportStore
# ==============================================
#
# PURPOSE:
#   Keep an audit trail of every classification run on disk:
#   when it ran, which policy version it used, how many records
#   were read / classified / excluded and why, and the per-strategy
#   counts.
#
# WHAT IS PERSISTED:
#   1. One report per run    → run_<as_of>.json
#   2. The most recent run   → latest_run.json
#
# Nothing here is read back by the classifier: every run starts
# from scratch. Reports are for people and schedulers only.
#
# CLASS: RunReportStore
# ---------------------
#   Stateful — holds a reference to the storage directory.
#
#   Constructor:
#   ------------
#   - __init__(storage_dir: str = "reports/")
#       Create storage directory if it doesn't exist.
#
class RunReportStore:
    """
    Handles persistence of run reports to disk.

    Files created:
    - reports/run_<timestamp>.json → One report per run
    - reports/latest_run.json      → Copy of the most recent report
    """

    def __init__(self, storage_dir: str = "reports/"):
        """
        Initialize the report store.

        Args:
            storage_dir: Directory to store report files
        """
        self.storage_dir = Path(storage_dir)

        # Create directory if it doesn't exist
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        self.latest_file = self.storage_dir / "latest_run.json"

#   Methods:
#   --------
#   - save(report: dict) -> Path
#       Write the run report and refresh latest_run.json.
#
#   - load_latest() -> dict | None
#   - load(path) -> dict
#   - list_runs() -> list[Path]     (oldest first)
#   - clear() -> None
#
    def save(self, report: Dict[str, Any]) -> Path:
        """
        Save a run report to disk.

        Args:
            report: JSON-friendly run summary (RunResult.summary())

        Returns:
            Path of the per-run report file
        """
        stamp = self._file_stamp(report.get("as_of"))
        run_file = self.storage_dir / f"run_{stamp}.json"

        with open(run_file, 'w') as f:
            json.dump(report, f, indent=2, default=str)

        with open(self.latest_file, 'w') as f:
            json.dump(report, f, indent=2, default=str)

        print(f"Saved run report to {run_file}")
        return run_file

    def load(self, path) -> Dict[str, Any]:
        """Load one report file."""
        with open(path, 'r') as f:
            return json.load(f)

    def load_latest(self) -> Optional[Dict[str, Any]]:
        """
        Load the most recent run report.

        Returns:
            The report dict, or None if no run has been recorded
        """
        if not self.latest_file.exists():
            print(f"No run report found at {self.latest_file}")
            return None
        return self.load(self.latest_file)

    def list_runs(self) -> List[Path]:
        """Per-run report files, oldest first."""
        return sorted(self.storage_dir.glob("run_*.json"))

    def clear(self) -> None:
        """
        Delete all report files (for testing or reset).
        """
        for file in self.list_runs() + [self.latest_file]:
            if file.exists():
                file.unlink()
                print(f"🗑️  Deleted {file}")

    @staticmethod
    def _file_stamp(as_of: Any) -> str:
        if isinstance(as_of, str):
            as_of = datetime.fromisoformat(as_of)
        if not isinstance(as_of, datetime):
            as_of = datetime.now()
        return as_of.strftime("%Y%m%dT%H%M%S%f")
# FILE STRUCTURE:
# ---------------
#   reports/
#   ├── run_20260115T060000000000.json  → {as_of, policy_version, counts, ...}
#   ├── run_20260116T060000000000.json
#   └── latest_run.json                 → copy of the newest run
#
# =============================================
