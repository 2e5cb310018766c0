"""Session state and suspension signals for workflow runs."""

from .session_state import SessionState
from .suspension import OneShotSignal

__all__ = ["SessionState", "OneShotSignal"]
