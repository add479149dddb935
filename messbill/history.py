"""
Calculation History

A bounded, newest-first log of past calculations. Each successful
calculation can push one immutable HistoryEntry; once the log is full
the oldest entry is evicted.
"""

from typing import Iterable, Optional, Sequence

from messbill.models.mess import (
    BillingOutcome,
    ExpenseInputs,
    HistoryEntry,
    Member,
)


HISTORY_CAPACITY = 10


class BillingHistory:
    """Fixed-capacity history log, most recent entry first."""

    def __init__(
        self,
        entries: Optional[Iterable[HistoryEntry]] = None,
        capacity: int = HISTORY_CAPACITY,
    ):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._entries: list[HistoryEntry] = list(entries or [])[:capacity]

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    @property
    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def record(
        self,
        members: Sequence[Member],
        expenses: ExpenseInputs,
        outcome: BillingOutcome,
    ) -> HistoryEntry:
        """Snapshot one calculation and push it to the front of the log."""
        # Deep copies; an entry never shares objects with live state
        entry = HistoryEntry(
            members=tuple(m.model_copy(deep=True) for m in members),
            expenses=expenses.model_copy(deep=True),
            results=tuple(r.model_copy(deep=True) for r in outcome.results),
            overview=outcome.overview.model_copy(deep=True),
        )
        self._entries.insert(0, entry)
        del self._entries[self._capacity:]
        return entry

    def clear(self) -> None:
        self._entries.clear()
