"""Exceptions raised by the automaton model and simulation engine."""
from enum import Enum
from typing import Optional


class AutomatonError(Exception):
    """Base exception for all automaton errors."""

    pass


class ValidationErrorKind(str, Enum):
    """Structural invariant violated by an automaton."""
    EMPTY_AUTOMATON = 'empty_automaton'
    DUPLICATE_STATE = 'duplicate_state'
    NO_START_STATE = 'no_start_state'
    MULTIPLE_START_STATES = 'multiple_start_states'
    START_STATE_MISMATCH = 'start_state_mismatch'
    EPSILON_IN_ALPHABET = 'epsilon_in_alphabet'
    DANGLING_TRANSITION = 'dangling_transition'
    EPSILON_IN_DFA = 'epsilon_in_dfa'
    NON_DETERMINISTIC_CONFLICT = 'non_deterministic_conflict'


class ValidationError(AutomatonError):
    """Raised when an automaton breaks one of its structural invariants."""

    def __init__(self, kind: ValidationErrorKind, message: str,
                 state: Optional[str] = None, transition=None) -> None:
        self.kind = kind
        self.state = state
        self.transition = transition
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            'error': str(self),
            'kind': self.kind.value,
            'state': self.state,
            'transition': self.transition.to_dict() if self.transition is not None else None,
        }


class WrongSimulatorError(AutomatonError):
    """Raised when an automaton is handed to the simulator for the other kind."""

    def __init__(self, expected, actual) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Simulator expects a {expected.label} automaton, got a {actual.label} automaton"
        )


class AutomatonFormatError(AutomatonError, ValueError):
    """Raised when a serialized automaton record is malformed."""

    pass
