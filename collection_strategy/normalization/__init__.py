# ==============================================
# TOPIC 1: NORMALIZATION
# ==============================================
#
# This package handles everything related to cleaning and
# validating raw debt records BEFORE they reach the classifier.
#
# Modules:
# --------
# - debt_record.py       → DebtRecord (raw) and NormalizedDebt (clean) data classes
# - field_normalizer.py  → Canonical segment/status values (trim + upper-case)
# - type_detector.py     → Strict int / Decimal coercion for days and amounts
# - record_normalizer.py → Normalize a full record, reject malformed ones
#
# ==============================================

from .debt_record import DebtRecord, NormalizedDebt, PAST_DUE_STATUS
from .field_normalizer import FieldNormalizer
from .type_detector import TypeDetector
from .record_normalizer import RecordNormalizer

__all__ = [
    "DebtRecord",
    "NormalizedDebt",
    "PAST_DUE_STATUS",
    "FieldNormalizer",
    "TypeDetector",
    "RecordNormalizer"
]
