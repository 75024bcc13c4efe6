"""
Conversion between Automaton objects and the record format the canvas saves:

    {
        'kind': 'dfa' | 'nfa',              # optional, inferred when absent
        'alphabet': ['a', 'b'],             # optional
        'states': [{'id': 'q0', 'isStart': True, 'isAccepting': False}, ...],
        'transitions': [{'from': 'q0', 'to': 'q1', 'symbol': 'a'}, ...],
        'startState': 'q0'
    }

A transition symbol of '' (or 'ε') is an epsilon move. Extra keys, such as
canvas coordinates, are ignored.
"""
from typing import Dict

from .automaton import Automaton, AutomatonKind
from .exceptions import AutomatonFormatError
from .fsa_properties import infer_kind


def _require_list(record: Dict, key: str) -> list:
    value = record.get(key, [])
    if not isinstance(value, list):
        raise AutomatonFormatError(f'{key} must be a list')
    return value


def _require_flag(state: Dict, key: str, position: int) -> bool:
    value = state.get(key, False)
    if not isinstance(value, bool):
        raise AutomatonFormatError(f'State at position {position} has a non-boolean {key}')
    return value


def automaton_from_dict(record: Dict) -> Automaton:
    """
    Builds an Automaton from a persisted record.

    The record is not validated beyond its shape; run validate() on the
    result. If no state is flagged isStart, the state named by startState is
    flagged instead, since older saves only stored startState.

    Args:
        record: The serialized automaton

    Returns:
        Automaton: The deserialized automaton

    Raises:
        AutomatonFormatError: If the record does not have the expected shape
    """
    if not isinstance(record, dict):
        raise AutomatonFormatError('Automaton must be a dictionary')

    states = _require_list(record, 'states')
    transitions = _require_list(record, 'transitions')
    alphabet = _require_list(record, 'alphabet')

    for symbol in alphabet:
        if not isinstance(symbol, str):
            raise AutomatonFormatError('alphabet symbols must be strings')

    kind = record.get('kind')
    if kind is not None:
        try:
            kind = AutomatonKind(kind)
        except ValueError:
            raise AutomatonFormatError(f"Unknown automaton kind: {kind!r}")

    start_state = record.get('startState')
    if start_state is not None and not isinstance(start_state, str):
        raise AutomatonFormatError('startState must be a string')

    automaton = Automaton(kind or AutomatonKind.DETERMINISTIC, alphabet=alphabet)

    for position, state in enumerate(states):
        if not isinstance(state, dict) or not isinstance(state.get('id'), str):
            raise AutomatonFormatError(f'State at position {position} must have a string id')
        automaton.add_state(
            state['id'],
            is_start=_require_flag(state, 'isStart', position),
            is_accepting=_require_flag(state, 'isAccepting', position)
        )

    for position, transition in enumerate(transitions):
        if not isinstance(transition, dict):
            raise AutomatonFormatError(f'Transition at position {position} must be a dictionary')
        for key in ('from', 'to', 'symbol'):
            if not isinstance(transition.get(key), str):
                raise AutomatonFormatError(f'Transition at position {position} is missing string key: {key}')
        automaton.add_transition(transition['from'], transition['to'], transition['symbol'])

    if start_state is not None:
        flagged = [state for state in automaton.states if state.is_start]
        if not flagged and automaton.has_state(start_state):
            automaton.set_start(start_state)
        else:
            automaton.start_state = start_state

    if kind is None:
        automaton.kind = infer_kind(automaton)

    return automaton


def automaton_to_dict(automaton: Automaton) -> Dict:
    """Serializes an automaton into the persisted record format."""
    return {
        'kind': automaton.kind.value,
        'alphabet': sorted(automaton.alphabet),
        'states': [state.to_dict() for state in automaton.states],
        'transitions': [transition.to_dict() for transition in automaton.transitions],
        'startState': automaton.start_state
    }
