# ==============================================
# RecordRouter
# ==============================================
#
# PURPOSE:
#   Fan one batch of classified records out to every configured
#   sink (MySQL table, MongoDB collection, in-memory list, ...)
#   in the order given.
#
# WHY THIS CLASS EXISTS:
#   The engine only knows "a sink with write_batch()". Operations
#   want the same assignments in the BI database and the document
#   store. The router is itself a sink, so the engine stays unaware
#   of how many backends there are.
#
# CLASS: RecordRouter
# -------------------
#   Stateful — holds the sinks and running per-sink counts.
#
#   Constructor:
#   ------------
#   - __init__(*sinks)
#
#   Methods:
#   --------
#   - route_batch(records) -> RouteResult
#       Write to each sink in turn. A failing sink raises SinkError
#       immediately: later sinks are not attempted, nothing retried.
#
#   - write_batch(records) -> int
#       Sink interface. Returns the number of records routed.
#
# DATA CLASS: RouteResult
# -----------------------
#   - records_processed: int
#   - writes: dict[str, int]   → sink name → records accepted
#
# ==============================================
from dataclasses import dataclass, field
from typing import Dict, Sequence

from collection_strategy.classification.decision import ClassifiedRecord
from collection_strategy.errors import SinkError


@dataclass
class RouteResult:
    records_processed: int = 0
    writes: Dict[str, int] = field(default_factory=dict)


class RecordRouter:
    def __init__(self, *sinks):
        if not sinks:
            raise ValueError("RecordRouter needs at least one sink")
        self.sinks = list(sinks)
        self.totals = RouteResult()

    def route_batch(self, records: Sequence[ClassifiedRecord]) -> RouteResult:
        result = RouteResult(records_processed=len(records))
        for sink in self.sinks:
            sink_name = self._sink_name(sink)
            try:
                written = sink.write_batch(records)
            except SinkError:
                raise
            except Exception as e:
                raise SinkError(sink_name, str(e)) from e
            result.writes[sink_name] = result.writes.get(sink_name, 0) + written

        self.totals.records_processed += result.records_processed
        for sink_name, written in result.writes.items():
            self.totals.writes[sink_name] = self.totals.writes.get(sink_name, 0) + written
        return result

    def write_batch(self, records: Sequence[ClassifiedRecord]) -> int:
        return self.route_batch(records).records_processed

    @staticmethod
    def _sink_name(sink) -> str:
        return getattr(sink, "name", type(sink).__name__)
