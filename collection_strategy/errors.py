# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   Typed exceptions for the engine, so callers can catch by
#   type instead of parsing messages.
#
# HIERARCHY:
# ----------
#   CollectionStrategyError (base)
#   ├── MalformedRecordError   → one record can't be normalized (recovered per record)
#   ├── PolicyError            → policy table is inconsistent (raised at construction)
#   ├── SourceError            → reading from the source failed (aborts the run)
#   └── SinkError              → writing to a sink failed (aborts the run)
#
# Scope exclusions and unknown segments are NOT errors and have
# no exception type.
#
# ==============================================

from typing import Any, Optional


class CollectionStrategyError(Exception):
    """Base exception for all collection strategy errors."""

    code: str = "COLLECTION_STRATEGY_ERROR"


class MalformedRecordError(CollectionStrategyError, ValueError):
    """A debt record has a missing or unparseable required field."""

    code: str = "MALFORMED_RECORD"

    def __init__(self, field_name: str, value: Any, debtor_id: Optional[Any] = None):
        self.field_name = field_name
        self.value = value
        self.debtor_id = debtor_id
        super().__init__(
            f"Invalid value for '{field_name}': {value!r} (debtor_id: {debtor_id!r})"
        )


class PolicyError(CollectionStrategyError, ValueError):
    """The policy table is empty, unordered or missing its catch-all rule."""

    code: str = "INVALID_POLICY"


class SourceError(CollectionStrategyError):
    """The record source failed while being read."""

    code: str = "SOURCE_FAILURE"


class SinkError(CollectionStrategyError):
    """A sink failed while accepting classified records."""

    code: str = "SINK_FAILURE"

    def __init__(self, sink_name: str, message: str):
        self.sink_name = sink_name
        super().__init__(f"Sink '{sink_name}' failed: {message}")
