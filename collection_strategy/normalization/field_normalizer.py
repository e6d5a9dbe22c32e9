# ==============================================
# FieldNormalizer
# ==============================================
#
# PURPOSE:
#   Convert categorical values (segment, status) to a single
#   canonical form so that legacy-data noise does not change
#   how a record is classified.
#
# WHY THIS CLASS EXISTS:
#   Source systems send the same logical value in many shapes:
#     - " premium ", "Premium", "PREMIUM"
#     - "past_due", "PAST_DUE ", "Past_Due"
#   If we don't canonicalize, a PREMIUM customer with a stray
#   space would silently fall through to the default policy.
#
# CLASS: FieldNormalizer
# ----------------------
#   Takes a raw value, returns canonical form.
#
#   Methods:
#   --------
#   - normalize(value: Any) -> str
#       Trim leading/trailing whitespace and upper-case.
#       None → "" ; non-strings are stringified first.
#
#   - are_equivalent(value_a, value_b) -> bool
#       Returns True if two raw values resolve to the same canonical form.
#
# RULES:
# ------
#   1. Surrounding whitespace removed   (" premium " → PREMIUM)
#   2. Upper-cased                      (Premium → PREMIUM)
#   3. Inner spacing kept as-is         ("PAST DUE" stays "PAST DUE")
#   4. None / null                      → ""
#
# ==============================================

from typing import Any, Dict


class FieldNormalizer:
    """
    Canonicalizes categorical field values.
    Maintains a mapping of raw strings to their canonical forms.
    """

    def __init__(self):
        """Initialize the normalizer with an empty mapping registry."""
        self._mappings: Dict[str, str] = {}

    def normalize(self, value: Any) -> str:
        """
        Convert a raw categorical value to its canonical form.

        Args:
            value: Raw value (e.g., " premium ", "Past_Due", None)

        Returns:
            Canonical upper-case string (e.g., "PREMIUM", "PAST_DUE", "")
        """
        if value is None:
            return ""

        raw = value if isinstance(value, str) else str(value)

        # Check if we've already normalized this value
        if raw in self._mappings:
            return self._mappings[raw]

        canonical = raw.strip().upper()

        # Store the mapping
        self._mappings[raw] = canonical

        return canonical

    def are_equivalent(self, value_a: Any, value_b: Any) -> bool:
        """
        Check if two raw values resolve to the same canonical form.

        Args:
            value_a: First raw value
            value_b: Second raw value

        Returns:
            True if both values normalize to the same canonical form
        """
        return self.normalize(value_a) == self.normalize(value_b)

    def get_mappings(self) -> Dict[str, str]:
        """
        Get all raw → canonical mappings seen so far.

        Returns:
            Dictionary mapping raw values to canonical values
        """
        return self._mappings.copy()
