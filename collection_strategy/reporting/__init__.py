# ==============================================
# TOPIC 3: REPORTING
# ==============================================
#
# This package derives summary statistics from classified
# records for resource sizing and alerting.
#
# Modules:
# --------
# - aggregator.py  → StrategyAggregator + result data classes
#
# ==============================================

from .aggregator import StrategyAggregator, StrategyCount, StrategySummary, RankedRecord

__all__ = ["StrategyAggregator", "StrategyCount", "StrategySummary", "RankedRecord"]
