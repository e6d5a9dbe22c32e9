# ==============================================
# TOPIC 2: CLASSIFICATION
# ==============================================
#
# This package turns a normalized debt into exactly one
# collection strategy.
#
# Two pieces:
#   Data:   PolicyTable → ordered thresholds per segment
#   Logic:  StrategyClassifier → one generic ordered scan
#
# Modules:
# --------
# - decision.py    → CollectionStrategy enum, ClassifiedRecord data class
# - policy.py      → PolicyRule / SegmentPolicy / PolicyTable, DEFAULT_POLICY, load_policy
# - classifier.py  → StrategyClassifier
#
# ==============================================

from .decision import CollectionStrategy, ClassifiedRecord
from .policy import PolicyRule, SegmentPolicy, PolicyTable, DEFAULT_POLICY, load_policy
from .classifier import StrategyClassifier

__all__ = [
    "CollectionStrategy",
    "ClassifiedRecord",
    "PolicyRule",
    "SegmentPolicy",
    "PolicyTable",
    "DEFAULT_POLICY",
    "load_policy",
    "StrategyClassifier"
]
