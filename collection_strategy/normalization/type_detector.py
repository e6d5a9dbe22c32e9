from decimal import Decimal, InvalidOperation
from typing import Any, Optional


class TypeDetector:
    NULL_VARIANTS = {"null", "none", "nil", "nan", ""}

    # Largest exponent coerce_int accepts from a Decimal or "1e5" style string
    MAX_INT_DIGITS = 18

    @classmethod
    def coerce_int(cls, value: Any) -> Optional[int]:
        # Whole numbers only: 45, "45", 45.0, Decimal("45") → 45
        # Rejected: True, "4.5", "", "abc", None, "1e999" → None
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, int):
            return value

        if isinstance(value, float):
            if value != value or value in (float("inf"), float("-inf")):
                return None
            return int(value) if value.is_integer() else None

        if isinstance(value, Decimal):
            return cls._integral(value)

        if isinstance(value, str):
            value = value.strip()
            if value.lower() in cls.NULL_VARIANTS:
                return None
            parsed = cls._parse_int(value)
            if parsed is not None:
                return parsed
            as_decimal = cls._parse_decimal(value)
            if as_decimal is None:
                return None
            return cls._integral(as_decimal)

        return None

    @classmethod
    def coerce_decimal(cls, value: Any) -> Optional[Decimal]:
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, Decimal):
            return value if value.is_finite() else None

        if isinstance(value, int):
            return Decimal(value)

        if isinstance(value, float):
            # repr() keeps 0.1 as "0.1" instead of the binary expansion
            return cls._parse_decimal(repr(value))

        if isinstance(value, str):
            value = value.strip()
            if value.lower() in cls.NULL_VARIANTS:
                return None
            return cls._parse_decimal(value)

        return None

    @classmethod
    def _integral(cls, value: Decimal) -> Optional[int]:
        if not value.is_finite() or value.adjusted() > cls.MAX_INT_DIGITS:
            return None
        return int(value) if value == value.to_integral_value() else None

    @classmethod
    def _parse_int(cls, value: str) -> Optional[int]:
        try:
            return int(value)
        except (ValueError, TypeError):
            return None

    @classmethod
    def _parse_decimal(cls, value: str) -> Optional[Decimal]:
        try:
            parsed = Decimal(value)
        except (InvalidOperation, ValueError, TypeError):
            return None
        return parsed if parsed.is_finite() else None
