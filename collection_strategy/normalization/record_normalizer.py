from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from collection_strategy.errors import MalformedRecordError
from .debt_record import (
    AMOUNT_INTEGER_DIGITS,
    AMOUNT_SCALE,
    MAX_DAYS_PAST_DUE,
    MAX_ID_LENGTH,
    MAX_TEXT_LENGTH,
    PAST_DUE_STATUS,
    DebtRecord,
    NormalizedDebt,
)
from .field_normalizer import FieldNormalizer
from .type_detector import TypeDetector

RawRecord = Union[DebtRecord, Mapping[str, Any]]

_AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_SCALE)


class RecordNormalizer:
    def __init__(
        self,
        field_normalizer: Optional[FieldNormalizer] = None,
        type_detector: Optional[TypeDetector] = None
    ):
        self.field_normalizer = field_normalizer or FieldNormalizer()
        self.type_detector = type_detector or TypeDetector()

    def to_debt_record(self, raw_record: RawRecord) -> DebtRecord:
        if isinstance(raw_record, DebtRecord):
            return raw_record
        if isinstance(raw_record, Mapping):
            return DebtRecord.from_mapping(raw_record)
        raise MalformedRecordError("record", raw_record)

    def is_past_due(self, raw_record: RawRecord) -> bool:
        record = self.to_debt_record(raw_record)
        return self.field_normalizer.normalize(record.status) == PAST_DUE_STATUS

    def normalize(self, raw_record: RawRecord) -> NormalizedDebt:
        record = self.to_debt_record(raw_record)

        self._validate_required_fields(record)

        days_past_due = self.type_detector.coerce_int(record.days_past_due)
        if days_past_due is None or days_past_due > MAX_DAYS_PAST_DUE:
            raise MalformedRecordError("days_past_due", record.days_past_due, record.debtor_id)

        current_amount = self.type_detector.coerce_decimal(record.current_amount)
        if current_amount is None or current_amount < 0 or not self._fits_amount(current_amount):
            raise MalformedRecordError("current_amount", record.current_amount, record.debtor_id)

        segment = self.field_normalizer.normalize(record.segment)
        self._check_length("segment", segment, MAX_TEXT_LENGTH, record.debtor_id)
        self._check_length("name", record.name, MAX_TEXT_LENGTH, record.debtor_id)
        self._check_length("surname", record.surname, MAX_TEXT_LENGTH, record.debtor_id)

        return NormalizedDebt(
            debtor_id=record.debtor_id,
            name=record.name,
            surname=record.surname,
            segment=segment,
            days_past_due=days_past_due,
            current_amount=current_amount,
            status=self.field_normalizer.normalize(record.status),
            debt_id=record.debt_id,
        )

    def _validate_required_fields(self, record: DebtRecord) -> None:
        if record.debtor_id is None or str(record.debtor_id).strip() == "":
            raise MalformedRecordError("debtor_id", record.debtor_id)
        self._check_length("debtor_id", record.debtor_id, MAX_ID_LENGTH, record.debtor_id)
        self._check_length("debt_id", record.debt_id, MAX_ID_LENGTH, record.debtor_id)

    @staticmethod
    def _check_length(field_name: str, value: Any, limit: int, debtor_id: Any) -> None:
        if value is not None and len(str(value)) > limit:
            raise MalformedRecordError(field_name, value, debtor_id)

    @staticmethod
    def _fits_amount(amount: Decimal) -> bool:
        # At most AMOUNT_INTEGER_DIGITS before the point and AMOUNT_SCALE after it
        if amount.adjusted() >= AMOUNT_INTEGER_DIGITS:
            return False
        return amount.quantize(_AMOUNT_QUANTUM) == amount
