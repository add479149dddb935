"""
Cook Charge Reconciliation

The cook charge can be entered either as a total for the period or as a
rate per billable head. Whichever was edited last is authoritative and
the other is derived from it:

    per_head = total / head_count
    total    = per_head * head_count

The derived value is recomputed whenever the head count changes (members
added, removed, or switched to guest-only). Only the resolved total is
ever passed to the calculator.
"""

from enum import Enum


class CookChargeMode(str, Enum):
    """Which field the user edited last."""
    TOTAL = "total"
    PER_HEAD = "per_head"


class CookCharge:
    """
    Two presentation fields bound to one authoritative value.

    Usage:
        charge = CookCharge(head_count=4)
        charge.set_per_head(500)
        charge.total  # 2000.0
    """

    def __init__(self, head_count: int = 0):
        if head_count < 0:
            raise ValueError("Head count cannot be negative")
        self._mode = CookChargeMode.TOTAL
        self._value = 0.0
        self._head_count = head_count

    @property
    def mode(self) -> CookChargeMode:
        return self._mode

    @property
    def head_count(self) -> int:
        return self._head_count

    @property
    def total(self) -> float:
        if self._mode == CookChargeMode.TOTAL:
            return self._value
        return self._value * self._head_count

    @property
    def per_head(self) -> float:
        if self._mode == CookChargeMode.PER_HEAD:
            return self._value
        if self._head_count == 0:
            return 0.0
        return self._value / self._head_count

    def set_total(self, value: float) -> None:
        """User edited the total field."""
        self._value = self._check(value)
        self._mode = CookChargeMode.TOTAL

    def set_per_head(self, value: float) -> None:
        """User edited the per-head field."""
        self._value = self._check(value)
        self._mode = CookChargeMode.PER_HEAD

    def update_head_count(self, head_count: int) -> None:
        """Membership changed; the derived field follows on next read."""
        if head_count < 0:
            raise ValueError("Head count cannot be negative")
        self._head_count = head_count

    def is_derived(self, mode: CookChargeMode) -> bool:
        """True if the given field is auto-calculated from the other one."""
        return mode != self._mode

    @staticmethod
    def _check(value: float) -> float:
        value = float(value)
        if value < 0:
            raise ValueError("Cook charge cannot be negative")
        return value

    def __repr__(self) -> str:
        return (
            f"CookCharge(mode={self._mode.value}, total={self.total:.2f}, "
            f"per_head={self.per_head:.2f}, head_count={self._head_count})"
        )
