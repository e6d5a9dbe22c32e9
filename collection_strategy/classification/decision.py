# ==============================================
# Decision (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that represent the OUTPUT of classification:
#   the strategy labels and the classified record that sinks
#   and reports consume.
#
# WHY THIS FILE EXISTS:
#   Separating data classes from logic keeps the classifier clean.
#   These classes are also used by Storage to know what to write,
#   and by Reporting to aggregate.
#
# ENUMS:
# ------
# - CollectionStrategy(Enum)
#     The 8 strategy labels. Values are a case-sensitive contract
#     with downstream systems and must not change.
#
# CLASSES:
# --------
# - ClassifiedRecord (frozen dataclass)
#     A normalized debt plus its assignment.
#
#     Attributes:
#     -----------
#     - debtor_id, debt_id, name, surname
#     - segment: str                 → Canonical segment
#     - days_past_due: int
#     - current_amount: Decimal
#     - status: str                  → Canonical status (always PAST_DUE)
#     - collection_strategy: CollectionStrategy
#     - executor: str                → Who acts on the case
#     - assignment_timestamp: datetime
#
#     Methods:
#     --------
#     - to_dict() -> dict            → Flat row for sinks
#     - from_dict(data: dict) -> ClassifiedRecord  (classmethod) → Reload stored rows
#
# ==============================================

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class CollectionStrategy(Enum):
    """
    Contact/treatment actions assignable to a past-due case.

    Declaration order is the order used to break ties in reports.
    """
    COURTEOUS_CALL = "COURTEOUS CALL"
    EMAIL_AND_CALL = "EMAIL + CALL"
    SENIOR_EXECUTIVE_VISIT = "SENIOR EXECUTIVE VISIT"
    AUTOMATED_EMAIL = "AUTOMATED EMAIL"
    STANDARD_CALL = "STANDARD CALL"
    INTENSIVE_COLLECTION = "INTENSIVE COLLECTION"
    MASS_SMS = "MASS SMS"
    LEGAL_ACTION = "LEGAL ACTION"


@dataclass(frozen=True)
class ClassifiedRecord:
    """
    A debt record with its assigned collection strategy.

    This is what the Classifier produces and what sinks write.
    """

    # --- Record fields ---
    debtor_id: Any
    name: Optional[str]
    surname: Optional[str]
    segment: str
    days_past_due: int
    current_amount: Decimal
    status: str

    # --- Assignment ---
    collection_strategy: CollectionStrategy
    executor: str
    assignment_timestamp: datetime

    debt_id: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the record to a flat row.

        Returns:
            Dictionary with the strategy as its label string
        """
        return {
            "debtor_id": self.debtor_id,
            "debt_id": self.debt_id,
            "name": self.name,
            "surname": self.surname,
            "segment": self.segment,
            "days_past_due": self.days_past_due,
            "current_amount": self.current_amount,
            "status": self.status,
            "collection_strategy": self.collection_strategy.value,  # Enum to label
            "executor": self.executor,
            "assignment_timestamp": self.assignment_timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassifiedRecord":
        """
        Reconstruct a ClassifiedRecord from a stored row.

        Args:
            data: Row from a sink (MySQL dict cursor, JSON, ...)

        Returns:
            A ClassifiedRecord instance
        """
        timestamp = data["assignment_timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            debtor_id=data["debtor_id"],
            debt_id=data.get("debt_id"),
            name=data.get("name"),
            surname=data.get("surname"),
            segment=data.get("segment") or "",
            days_past_due=int(data["days_past_due"]),
            current_amount=Decimal(str(data["current_amount"])),
            status=data.get("status") or "",
            collection_strategy=CollectionStrategy(data["collection_strategy"]),  # Label back to enum
            executor=data.get("executor") or "",
            assignment_timestamp=timestamp,
        )
