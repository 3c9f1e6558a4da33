"""Advice emitted by a strategy for one candle."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

ALL: Literal["all"] = "all"


class AdviceAction(str, Enum):
    """Trading intent for the current candle."""

    NONE = "none"  # Hold, no order
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Advice:
    """Strategy trading intent.

    ``amount`` is either an asset quantity or ``"all"`` (all cash for a buy,
    the whole position for a sell).
    """

    action: AdviceAction = AdviceAction.NONE
    amount: float | Literal["all"] = ALL
    reason: str | None = None
    confidence: float = 1.0  # 0.0 to 1.0

    def __post_init__(self) -> None:
        """Validate advice data."""
        if not isinstance(self.action, AdviceAction):
            raise ValueError(f"Unknown advice action: {self.action!r}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Confidence must be between 0.0 and 1.0")
        if self.amount != ALL:
            if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
                raise ValueError(f"Amount must be a number or 'all', got {self.amount!r}")
            if not math.isfinite(self.amount) or self.amount <= 0:
                raise ValueError("Amount must be a positive finite number")

    @property
    def is_none(self) -> bool:
        return self.action is AdviceAction.NONE

    @property
    def is_all(self) -> bool:
        return self.amount == ALL

    @classmethod
    def none(cls, reason: str | None = None) -> "Advice":
        return cls(AdviceAction.NONE, reason=reason)

    @classmethod
    def buy(
        cls,
        amount: float | Literal["all"] = ALL,
        reason: str | None = None,
        confidence: float = 1.0,
    ) -> "Advice":
        return cls(AdviceAction.BUY, amount, reason, confidence)

    @classmethod
    def sell(
        cls,
        amount: float | Literal["all"] = ALL,
        reason: str | None = None,
        confidence: float = 1.0,
    ) -> "Advice":
        return cls(AdviceAction.SELL, amount, reason, confidence)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Advice":
        """Build advice from ``{"action", "amount", "reason", "confidence"}``.

        Missing ``amount`` means ``"all"``. Unknown actions raise ValueError.
        """
        raw_action = data.get("action", AdviceAction.NONE.value)
        action = AdviceAction(str(raw_action).lower())
        amount = data.get("amount", ALL)
        if isinstance(amount, str) and amount.lower() == ALL:
            amount = ALL
        elif isinstance(amount, str):
            amount = float(amount)
        confidence = data.get("confidence")
        return cls(
            action=action,
            amount=amount,
            reason=data.get("reason"),
            confidence=1.0 if confidence is None else float(confidence),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "amount": self.amount,
            "reason": self.reason,
            "confidence": self.confidence,
        }
