# ==============================================
# Debt Records (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes for the INPUT side of classification: the raw
#   record exactly as the source produced it, and the cleaned
#   record the classifier is allowed to consume.
#
# CLASSES:
# --------
# - DebtRecord (frozen dataclass)
#     Raw values, untouched. Any field may be noisy or missing.
#
#     Attributes:
#     -----------
#     - debtor_id         → Opaque customer key
#     - name, surname     → Display only, never used in logic
#     - segment           → Expected PREMIUM / STANDARD / BASIC (noisy)
#     - days_past_due     → Expected positive integer (any type)
#     - current_amount    → Expected non-negative decimal (any type)
#     - status            → Expected PAST_DUE / CURRENT / CHARGED_OFF / PAID (noisy)
#     - debt_id           → Optional opaque debt key (one debtor, many debts)
#
#     Methods:
#     --------
#     - from_mapping(row) -> DebtRecord  (classmethod)
#
# - NormalizedDebt (frozen dataclass)
#     Same fields after cleaning: canonical segment/status,
#     int days_past_due, Decimal current_amount.
#
#     Properties:
#     -----------
#     - in_scope -> bool   → status == PAST_DUE and days_past_due > 0
#
# FIELD LIMITS:
# -------------
#   Largest values a sink column can hold. RecordNormalizer reports
#   anything bigger as malformed instead of letting a write fail.
#   - MAX_ID_LENGTH        → debtor_id, debt_id
#   - MAX_TEXT_LENGTH      → name, surname, segment
#   - MAX_DAYS_PAST_DUE    → signed 32-bit INT
#   - AMOUNT_INTEGER_DIGITS, AMOUNT_SCALE → DECIMAL(24, 6)
#
# ==============================================

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

PAST_DUE_STATUS = "PAST_DUE"

MAX_ID_LENGTH = 64
MAX_TEXT_LENGTH = 255
MAX_DAYS_PAST_DUE = 2_147_483_647
AMOUNT_INTEGER_DIGITS = 18
AMOUNT_SCALE = 6


@dataclass(frozen=True)
class DebtRecord:
    """One debtor + debt row as read from the source."""

    debtor_id: Any
    name: Optional[str] = None
    surname: Optional[str] = None
    segment: Any = None
    days_past_due: Any = None
    current_amount: Any = None
    status: Any = None
    debt_id: Any = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "DebtRecord":
        """
        Build a DebtRecord from a dict-like row. Missing keys become None.

        Args:
            row: A source row (DB cursor dict, JSON object, ...)

        Returns:
            A DebtRecord instance
        """
        return cls(
            debtor_id=row.get("debtor_id"),
            name=row.get("name"),
            surname=row.get("surname"),
            segment=row.get("segment"),
            days_past_due=row.get("days_past_due"),
            current_amount=row.get("current_amount"),
            status=row.get("status"),
            debt_id=row.get("debt_id"),
        )


@dataclass(frozen=True)
class NormalizedDebt:
    """A debt record whose fields have been validated and canonicalized."""

    debtor_id: Any
    name: Optional[str]
    surname: Optional[str]
    segment: str
    days_past_due: int
    current_amount: Decimal
    status: str
    debt_id: Any = None

    @property
    def in_scope(self) -> bool:
        return self.status == PAST_DUE_STATUS and self.days_past_due > 0
