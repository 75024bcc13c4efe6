from typing import Dict, NamedTuple, Optional, Set, Tuple

from .automaton import Automaton, AutomatonKind, EPSILON
from .exceptions import ValidationError, ValidationErrorKind


class ValidationResult(NamedTuple):
    """Outcome of validate(): either valid, or the first violation found."""
    valid: bool
    error: Optional[ValidationError] = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> Dict:
        if self.valid:
            return {'valid': True}
        result = {'valid': False}
        result.update(self.error.to_dict())
        return result


def _first_violation(automaton: Automaton) -> Optional[ValidationError]:
    if not automaton.states:
        return ValidationError(ValidationErrorKind.EMPTY_AUTOMATON, 'Automaton has no states')

    seen: Set[str] = set()
    for state in automaton.states:
        if state.id in seen:
            return ValidationError(ValidationErrorKind.DUPLICATE_STATE,
                                   f"Duplicate state id '{state.id}'", state=state.id)
        seen.add(state.id)

    start_states = [state.id for state in automaton.states if state.is_start]
    if not start_states:
        return ValidationError(ValidationErrorKind.NO_START_STATE, 'No start state defined')
    if len(start_states) > 1:
        return ValidationError(ValidationErrorKind.MULTIPLE_START_STATES,
                               f"Multiple start states: {', '.join(start_states)}",
                               state=start_states[1])
    if automaton.start_state != start_states[0]:
        return ValidationError(ValidationErrorKind.START_STATE_MISMATCH,
                               f"Start state '{automaton.start_state}' does not match "
                               f"the state marked as start ('{start_states[0]}')",
                               state=automaton.start_state)

    if EPSILON in automaton.alphabet:
        return ValidationError(ValidationErrorKind.EPSILON_IN_ALPHABET,
                               'Alphabet must not contain the epsilon symbol')

    for transition in automaton.transitions:
        for endpoint in (transition.source, transition.target):
            if not automaton.has_state(endpoint):
                return ValidationError(ValidationErrorKind.DANGLING_TRANSITION,
                                       f"Transition {transition} refers to unknown state '{endpoint}'",
                                       state=endpoint, transition=transition)

    if automaton.kind is AutomatonKind.DETERMINISTIC:
        used: Set[Tuple[str, str]] = set()
        for transition in automaton.transitions:
            if transition.is_epsilon:
                return ValidationError(ValidationErrorKind.EPSILON_IN_DFA,
                                       f"Deterministic automaton has epsilon transition {transition}",
                                       state=transition.source, transition=transition)
            key = (transition.source, transition.symbol)
            if key in used:
                return ValidationError(ValidationErrorKind.NON_DETERMINISTIC_CONFLICT,
                                       f"State '{transition.source}' has more than one transition "
                                       f"on symbol '{transition.symbol}'",
                                       state=transition.source, transition=transition)
            used.add(key)

    return None


def validate(automaton: Automaton) -> ValidationResult:
    """
    Checks the structural invariants of an automaton.

    Checks, in order: the automaton has states, state ids are unique, there is
    exactly one start state and start_state names it, the alphabet has no
    epsilon, every transition endpoint exists, and (for deterministic
    automata) there are no epsilon moves and at most one transition per
    (state, symbol).

    Args:
        automaton: The automaton to check

    Returns:
        ValidationResult with the first violation found, if any
    """
    error = _first_violation(automaton)
    if error is not None:
        return ValidationResult(False, error)
    return ValidationResult(True)


def ensure_valid(automaton: Automaton) -> None:
    """Raise the first ValidationError found in automaton."""
    validate(automaton).raise_for_error()
