"""Dispute fee schedule.

The effective fee for a question is its custom fee when that is strictly
positive, otherwise the default fee. A custom fee of zero cannot be told
apart from no override, so it cannot switch arbitration off for a single
question while a default is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidAmountError


def validate_amount(amount: object, name: str = "amount") -> int:
    """Check that a value is a non-negative integer amount.

    Raises:
        InvalidAmountError: If the value is negative, a bool or not an int
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"{name} must be an integer", {name: repr(amount)})
    if amount < 0:
        raise InvalidAmountError(f"{name} must not be negative", {name: amount})
    return amount


@dataclass
class DisputeFeeSchedule:
    """Default and per-question dispute fees."""

    default_fee: int = 0
    custom_fees: dict[str, int] = field(default_factory=dict)  # question_id -> fee

    def effective_fee(self, question_id: str) -> int:
        """Get the fee required to request arbitration of a question."""
        custom = self.custom_fees.get(question_id, 0)
        if custom > 0:
            return custom
        return self.default_fee

    def set_default_fee(self, fee: int) -> None:
        self.default_fee = validate_amount(fee, "fee")

    def set_custom_fee(self, question_id: str, fee: int) -> None:
        self.custom_fees[question_id] = validate_amount(fee, "fee")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "default_fee": self.default_fee,
            "custom_fees": dict(self.custom_fees),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DisputeFeeSchedule:
        """Create from dictionary."""
        return cls(
            default_fee=validate_amount(data.get("default_fee", 0), "default_fee"),
            custom_fees={q: validate_amount(f, "fee") for q, f in data.get("custom_fees", {}).items()},
        )
