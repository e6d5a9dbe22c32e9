# ==============================================
# Tests for Classifier Module
# ==============================================

from decimal import Decimal

import pytest

from collection_strategy.classification import (
    CollectionStrategy,
    PolicyRule,
    PolicyTable,
    SegmentPolicy,
    StrategyClassifier,
)
from collection_strategy.normalization import NormalizedDebt


@pytest.fixture
def classifier():
    return StrategyClassifier()


class TestThresholds:
    @pytest.mark.parametrize("days, expected", [
        (1, CollectionStrategy.COURTEOUS_CALL),
        (30, CollectionStrategy.COURTEOUS_CALL),
        (31, CollectionStrategy.EMAIL_AND_CALL),
        (60, CollectionStrategy.EMAIL_AND_CALL),
        (61, CollectionStrategy.SENIOR_EXECUTIVE_VISIT),
        (10_000, CollectionStrategy.SENIOR_EXECUTIVE_VISIT),
    ])
    def test_premium_boundaries(self, classifier, days, expected):
        assert classifier.classify("PREMIUM", days) is expected

    @pytest.mark.parametrize("days, expected", [
        (30, CollectionStrategy.AUTOMATED_EMAIL),
        (31, CollectionStrategy.STANDARD_CALL),
        (45, CollectionStrategy.STANDARD_CALL),
        (60, CollectionStrategy.STANDARD_CALL),
        (61, CollectionStrategy.INTENSIVE_COLLECTION),
    ])
    def test_standard_boundaries(self, classifier, days, expected):
        assert classifier.classify("STANDARD", days) is expected

    @pytest.mark.parametrize("days, expected", [
        (1, CollectionStrategy.MASS_SMS),
        (60, CollectionStrategy.MASS_SMS),
        (61, CollectionStrategy.LEGAL_ACTION),
    ])
    def test_basic_boundaries(self, classifier, days, expected):
        assert classifier.classify("BASIC", days) is expected


class TestFallback:
    @pytest.mark.parametrize("segment", ["GOLD", "", "PREMIUMM", "42"])
    def test_unknown_segment_uses_basic(self, classifier, segment):
        """GOLD at 10 days -> MASS SMS"""
        assert classifier.classify(segment, 10) is CollectionStrategy.MASS_SMS
        assert classifier.classify(segment, 61) is CollectionStrategy.LEGAL_ACTION
        assert classifier.is_fallback(segment)

    def test_known_segment_is_not_fallback(self, classifier):
        assert not classifier.is_fallback("PREMIUM")
        assert not classifier.is_fallback("BASIC")


class TestContract:
    @pytest.mark.parametrize("days", [0, -1])
    def test_non_positive_days_rejected(self, classifier, days):
        with pytest.raises(ValueError):
            classifier.classify("PREMIUM", days)

    @pytest.mark.parametrize("days", ["45", 45.0, None, True])
    def test_non_int_days_rejected(self, classifier, days):
        with pytest.raises(ValueError):
            classifier.classify("PREMIUM", days)

    def test_totality_and_determinism(self, classifier):
        """Every in-scope pair gets exactly one strategy, the same one every time."""
        for segment in ("PREMIUM", "STANDARD", "BASIC", "GOLD", ""):
            for days in range(1, 200):
                first = classifier.classify(segment, days)
                assert isinstance(first, CollectionStrategy)
                assert classifier.classify(segment, days) is first


class TestClassifyRecord:
    def test_record_carries_strategy_executor_and_timestamp(self, classifier, as_of):
        debt = NormalizedDebt(
            debtor_id=5, name="Ana", surname="Rojas", segment="PREMIUM",
            days_past_due=45, current_amount=Decimal("10"), status="PAST_DUE", debt_id="D5"
        )
        record = classifier.classify_record(debt, as_of)

        assert record.collection_strategy is CollectionStrategy.EMAIL_AND_CALL
        assert record.executor == "Senior executive"
        assert record.assignment_timestamp == as_of
        assert record.debt_id == "D5"
        assert record.name == "Ana"

    def test_amount_does_not_affect_strategy(self, make_classified):
        small = make_classified(segment="STANDARD", days_past_due=45, current_amount="1")
        large = make_classified(segment="STANDARD", days_past_due=45, current_amount="99999999")
        assert small.collection_strategy is large.collection_strategy


class TestCustomPolicy:
    def test_extra_segment_is_a_data_edit(self):
        """A new segment needs no code change."""
        policy = PolicyTable(
            version="test",
            segments={
                "VIP": SegmentPolicy("VIP", (
                    PolicyRule(90, CollectionStrategy.COURTEOUS_CALL, "Account manager"),
                    PolicyRule(None, CollectionStrategy.SENIOR_EXECUTIVE_VISIT, "Account manager"),
                )),
                "BASIC": SegmentPolicy("BASIC", (
                    PolicyRule(None, CollectionStrategy.MASS_SMS, "System"),
                )),
            },
            default_segment="BASIC",
        )
        classifier = StrategyClassifier(policy)
        assert classifier.classify("VIP", 90) is CollectionStrategy.COURTEOUS_CALL
        assert classifier.classify("VIP", 91) is CollectionStrategy.SENIOR_EXECUTIVE_VISIT
        assert classifier.classify("PREMIUM", 500) is CollectionStrategy.MASS_SMS
