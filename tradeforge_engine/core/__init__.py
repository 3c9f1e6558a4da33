"""Core strategy building blocks."""

from .state_machine import VALID_TRANSITIONS, PositionState, PositionStateMachine

__all__ = ["PositionState", "PositionStateMachine", "VALID_TRANSITIONS"]
