from typing import Dict
from collections import deque

from .automaton import Automaton, AutomatonKind, EPSILON


def is_deterministic(automaton: Automaton) -> bool:
    """
    Checks if the automaton is structurally deterministic.

    An automaton is deterministic if:
    1. It has no epsilon transitions
    2. For each state and each symbol, there is at most one transition

    The declared kind is not consulted.

    Args:
        automaton: The automaton to check

    Returns:
        bool: True if the automaton is deterministic, False otherwise
    """
    seen = set()
    for transition in automaton.transitions:
        if transition.is_epsilon:
            return False

        key = (transition.source, transition.symbol)
        if key in seen:
            return False
        seen.add(key)

    return True


def is_nondeterministic(automaton: Automaton) -> bool:
    """
    Checks if the automaton needs nondeterministic simulation, i.e. it has an
    epsilon transition or several transitions on one (state, symbol) pair.
    """
    return not is_deterministic(automaton)


def infer_kind(automaton: Automaton) -> AutomatonKind:
    if is_nondeterministic(automaton):
        return AutomatonKind.NONDETERMINISTIC
    return AutomatonKind.DETERMINISTIC


def is_complete(automaton: Automaton) -> bool:
    """
    Checks if the automaton is complete.

    An automaton is complete if for each state and each symbol, there is at least one transition.
    Epsilon transitions are ignored for completeness check.

    Args:
        automaton: The automaton to check

    Returns:
        bool: True if the automaton is complete, False otherwise
    """
    # Trivially complete with no states or no alphabet
    if not automaton.states or not automaton.alphabet:
        return True

    for state in automaton.states:
        for symbol in automaton.alphabet:
            if not automaton.transitions_from(state.id, symbol):
                return False

    return True


def is_connected(automaton: Automaton) -> bool:
    """
    Checks if the automaton is connected.

    An automaton is connected if all states are reachable from the starting
    state, following both symbol and epsilon transitions.

    Args:
        automaton: The automaton to check

    Returns:
        bool: True if the automaton is connected, False otherwise
    """
    if len(automaton.states) <= 1:
        return True

    if automaton.start_state is None or not automaton.has_state(automaton.start_state):
        return False

    symbols_to_check = sorted(automaton.alphabet) + [EPSILON]

    reachable_states = {automaton.start_state}
    queue = deque([automaton.start_state])

    while queue:
        current_state = queue.popleft()

        for symbol in symbols_to_check:
            for next_state in automaton.transitions_from(current_state, symbol):
                if next_state not in reachable_states:
                    reachable_states.add(next_state)
                    queue.append(next_state)

    return all(state_id in reachable_states for state_id in automaton.state_ids)


def check_all_properties(automaton: Automaton) -> Dict:
    """
    Check all automaton properties at once.

    Returns:
        Dict: {'deterministic': bool, 'complete': bool, 'connected': bool}
    """
    return {
        'deterministic': is_deterministic(automaton),
        'complete': is_complete(automaton),
        'connected': is_connected(automaton)
    }
