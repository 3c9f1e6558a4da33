"""Position state machine with validated transitions for strategies."""

from enum import Enum


class PositionState(str, Enum):
    """Position states a long-only strategy moves through."""

    FLAT = "FLAT"  # No position
    LONG = "LONG"  # Holding the asset


# Valid state transitions
VALID_TRANSITIONS: dict[PositionState, list[PositionState]] = {
    PositionState.FLAT: [PositionState.LONG],
    PositionState.LONG: [PositionState.FLAT],
}


class PositionStateMachine:
    """Flat/Long state machine tracking the entry of the open position.

    The runtime never inspects it; strategies use it to keep their own view
    of the position consistent.
    """

    def __init__(self, initial_state: PositionState = PositionState.FLAT):
        self._current_state = initial_state
        self.entry_price: float | None = None
        self.entry_time: int | None = None

    @property
    def current_state(self) -> PositionState:
        """Get current state."""
        return self._current_state

    @property
    def is_flat(self) -> bool:
        return self._current_state is PositionState.FLAT

    @property
    def is_long(self) -> bool:
        return self._current_state is PositionState.LONG

    def transition_to(self, new_state: PositionState) -> None:
        """
        Transition to a new state with validation.

        Args:
            new_state: Target state

        Raises:
            ValueError: If transition is invalid
        """
        if new_state not in VALID_TRANSITIONS[self._current_state]:
            raise ValueError(f"Invalid transition from {self._current_state} to {new_state}")

        self._current_state = new_state

    def can_transition_to(self, new_state: PositionState) -> bool:
        return new_state in VALID_TRANSITIONS[self._current_state]

    def enter(self, price: float, timestamp: int) -> None:
        """Move FLAT -> LONG and remember the entry."""
        self.transition_to(PositionState.LONG)
        self.entry_price = price
        self.entry_time = timestamp

    def exit(self) -> None:
        """Move LONG -> FLAT and forget the entry."""
        self.transition_to(PositionState.FLAT)
        self.entry_price = None
        self.entry_time = None

    def change_pct(self, price: float) -> float | None:
        """Percent move of ``price`` from the entry price."""
        if self.entry_price is None or self.entry_price == 0:
            return None
        return (price - self.entry_price) / self.entry_price * 100.0

    def reset(self) -> None:
        """Reset state machine to FLAT."""
        self._current_state = PositionState.FLAT
        self.entry_price = None
        self.entry_time = None
