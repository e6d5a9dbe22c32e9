# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - as_of            → fixed, timezone-aware run timestamp
# - make_row         → factory for raw debt rows (dicts)
# - make_classified  → factory for ClassifiedRecords via the real classifier
# - sample_rows      → a small mixed batch (in scope, out of scope, malformed)
# - memory_sink      → fresh InMemorySink
#
# NOTES:
# ------
# - Database and HTTP adapters are exercised with unittest.mock fakes;
#   no MySQL, MongoDB or network is needed.
# - Use tmp_path for report directories.
# ==============================================

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from collection_strategy.classification.classifier import StrategyClassifier
from collection_strategy.normalization.debt_record import NormalizedDebt
from collection_strategy.storage.memory import InMemorySink


AS_OF = datetime(2026, 1, 15, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def make_row():
    """Build a raw source row; keyword arguments override defaults."""
    def _make_row(debtor_id=1, segment="STANDARD", days_past_due=10,
                  current_amount="100", status="PAST_DUE", **extra):
        row = {
            "debtor_id": debtor_id,
            "name": f"Name{debtor_id}",
            "surname": f"Surname{debtor_id}",
            "segment": segment,
            "days_past_due": days_past_due,
            "current_amount": current_amount,
            "status": status,
        }
        row.update(extra)
        return row
    return _make_row


@pytest.fixture
def make_classified():
    """Build a ClassifiedRecord through the default policy."""
    classifier = StrategyClassifier()

    def _make_classified(debtor_id=1, segment="STANDARD", days_past_due=10,
                         current_amount="100", debt_id=None):
        debt = NormalizedDebt(
            debtor_id=debtor_id,
            name=None,
            surname=None,
            segment=segment,
            days_past_due=days_past_due,
            current_amount=Decimal(str(current_amount)),
            status="PAST_DUE",
            debt_id=debt_id,
        )
        return classifier.classify_record(debt, AS_OF)
    return _make_classified


@pytest.fixture
def sample_rows(make_row):
    return [
        make_row(1, "STANDARD", 45, "1000"),
        make_row(2, "PREMIUM", 90, "6000000"),
        make_row(3, " premium ", 12, "250000", status="past_due "),
        make_row(4, "GOLD", 10, "800"),
        make_row(5, "STANDARD", 5, "300", status="PAID"),
        make_row(6, "PREMIUM", "n/a", "9000"),
        make_row(7, "BASIC", 0, "50"),
    ]


@pytest.fixture
def memory_sink():
    return InMemorySink()
