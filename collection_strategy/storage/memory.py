from typing import List, Sequence

from collection_strategy.classification.decision import ClassifiedRecord


class InMemorySink:
    """Sink that keeps written records in a list (demo runs, reports, tests)."""

    name = "memory"

    def __init__(self):
        self.records: List[ClassifiedRecord] = []
        self.batches: List[int] = []  # size of each write, in call order

    def write_batch(self, records: Sequence[ClassifiedRecord]) -> int:
        self.records.extend(records)
        self.batches.append(len(records))
        return len(records)

    def clear(self) -> None:
        self.records.clear()
        self.batches.clear()
