# ==============================================
# PERSISTENCE (Run reports for audit)
# ==============================================
#
# This package keeps a JSON trail of classification runs.
# Nothing in it feeds back into classification.
#
# Modules:
# --------
# - run_store.py  → Save/load per-run reports
#
# ==============================================

from .run_store import RunReportStore

__all__ = ["RunReportStore"]
