import logging
from typing import Dict, FrozenSet, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .automaton import Automaton, AutomatonKind, EPSILON
from .exceptions import WrongSimulatorError
from .validation import ensure_valid

logger = logging.getLogger(__name__)


class DFAResult(NamedTuple):
    """Result of a deterministic run"""
    accepted: bool
    trace: List[Tuple[str, str, str]]
    final_state: str
    died: bool = False
    rejection_reason: Optional[str] = None
    rejection_position: Optional[int] = None


class NFAResult(NamedTuple):
    """Result of a nondeterministic run"""
    accepted: bool
    trace: List[Tuple[int, FrozenSet[str]]]
    died: bool = False
    rejection_reason: Optional[str] = None
    rejection_position: Optional[int] = None

    @property
    def final_states(self) -> FrozenSet[str]:
        return self.trace[-1][1]


SimulationResult = Union[DFAResult, NFAResult]


def _require_kind(automaton: Automaton, expected: AutomatonKind) -> None:
    if automaton.kind is not expected:
        raise WrongSimulatorError(expected, automaton.kind)


def _run_dfa(automaton: Automaton, input_symbols: Sequence[str]) -> DFAResult:
    current_state = automaton.start_state
    execution_path = []

    for position, symbol in enumerate(input_symbols):
        next_states = [] if symbol == EPSILON else automaton.transitions_from(current_state, symbol)

        # A missing transition is a dead run, not an error; symbols outside
        # the alphabet (the epsilon symbol included) end up here too
        if not next_states:
            return DFAResult(
                accepted=False,
                trace=execution_path,
                final_state=current_state,
                died=True,
                rejection_reason=f"No transition defined for symbol '{symbol}' from state '{current_state}'",
                rejection_position=position
            )

        next_state = next_states[0]
        execution_path.append((current_state, symbol, next_state))
        current_state = next_state

    if automaton.is_accepting(current_state):
        return DFAResult(accepted=True, trace=execution_path, final_state=current_state)

    return DFAResult(
        accepted=False,
        trace=execution_path,
        final_state=current_state,
        rejection_reason=f"Final state '{current_state}' is not an accepting state",
        rejection_position=len(input_symbols)
    )


def simulate_dfa(automaton: Automaton, input_symbols: Sequence[str]) -> DFAResult:
    """
    Simulates a deterministic automaton with the given input.

    Args:
        automaton: A valid automaton of kind DETERMINISTIC
        input_symbols: The input, either a string (one symbol per character)
            or a sequence of symbols

    Returns:
        DFAResult with the verdict and the transitions taken, as
        [(current_state, symbol, next_state), ...]. If the run died on a
        missing transition, died is True and rejection_position is the index
        of the symbol that could not be read.

    Raises:
        WrongSimulatorError: If the automaton is nondeterministic
        ValidationError: If the automaton is malformed
    """
    _require_kind(automaton, AutomatonKind.DETERMINISTIC)
    ensure_valid(automaton)

    result = _run_dfa(automaton, input_symbols)
    logger.debug("DFA run on %r: accepted=%s died=%s", input_symbols, result.accepted, result.died)
    return result


def epsilon_closure(automaton: Automaton, states: Iterable[str]) -> FrozenSet[str]:
    """
    Compute epsilon closure of a set of states.

    Every state is expanded at most once, so cycles of epsilon transitions
    terminate.

    Args:
        automaton: The automaton
        states: States to compute closure for

    Returns:
        Set of states reachable via epsilon transitions, the given states included
    """
    closure = set(states)
    stack = list(closure)

    while stack:
        current = stack.pop()

        for next_state in automaton.transitions_from(current, EPSILON):
            if next_state not in closure:
                closure.add(next_state)
                stack.append(next_state)

    return frozenset(closure)


def _step(automaton: Automaton, current_states: FrozenSet[str], symbol: str) -> FrozenSet[str]:
    # The epsilon symbol is never readable input; epsilon moves only happen in closures
    if symbol == EPSILON:
        return frozenset()

    next_states = set()
    for state in current_states:
        next_states.update(automaton.transitions_from(state, symbol))
    return epsilon_closure(automaton, next_states)


def _iter_nfa_sets(automaton: Automaton, input_symbols: Sequence[str]) -> Iterator[Tuple[int, FrozenSet[str]]]:
    current_states = epsilon_closure(automaton, [automaton.start_state])
    yield 0, current_states

    for position, symbol in enumerate(input_symbols):
        current_states = _step(automaton, current_states, symbol)
        yield position + 1, current_states

        # Nothing leaves the empty set
        if not current_states:
            return


def iter_nfa_steps(automaton: Automaton, input_symbols: Sequence[str]) -> Iterator[Tuple[int, FrozenSet[str]]]:
    """
    Generator version of simulate_nfa that yields each step as it is computed.

    Yields (step_index, states) pairs: step 0 is the epsilon closure of the
    start state, step i the set reached after reading i symbols. Stops early
    once the set becomes empty.

    Raises:
        WrongSimulatorError: If the automaton is deterministic
        ValidationError: If the automaton is malformed
    """
    _require_kind(automaton, AutomatonKind.NONDETERMINISTIC)
    ensure_valid(automaton)
    yield from _iter_nfa_sets(automaton, input_symbols)


def nfa_result_from_trace(automaton: Automaton, trace: List[Tuple[int, FrozenSet[str]]]) -> NFAResult:
    """Decide the verdict of a finished run from its (non-empty) trace."""
    step, final_states = trace[-1]

    if not final_states:
        return NFAResult(
            accepted=False,
            trace=trace,
            died=True,
            rejection_reason=f"No states remain after reading the symbol at position {step - 1}",
            rejection_position=step - 1
        )

    if any(automaton.is_accepting(state) for state in final_states):
        return NFAResult(accepted=True, trace=trace)

    return NFAResult(
        accepted=False,
        trace=trace,
        rejection_reason='No accepting state among the final states',
        rejection_position=step
    )


def _run_nfa(automaton: Automaton, input_symbols: Sequence[str]) -> NFAResult:
    return nfa_result_from_trace(automaton, list(_iter_nfa_sets(automaton, input_symbols)))


def simulate_nfa(automaton: Automaton, input_symbols: Sequence[str]) -> NFAResult:
    """
    Simulates a nondeterministic automaton, epsilon transitions included, by
    tracking the set of states the automaton could be in.

    Args:
        automaton: A valid automaton of kind NONDETERMINISTIC
        input_symbols: The input, either a string (one symbol per character)
            or a sequence of symbols

    Returns:
        NFAResult with the verdict and the trace [(step_index, states), ...].
        The input is accepted if the last set holds an accepting state.

    Raises:
        WrongSimulatorError: If the automaton is deterministic
        ValidationError: If the automaton is malformed
    """
    _require_kind(automaton, AutomatonKind.NONDETERMINISTIC)
    ensure_valid(automaton)

    result = _run_nfa(automaton, input_symbols)
    logger.debug("NFA run on %r: accepted=%s died=%s", input_symbols, result.accepted, result.died)
    return result


def simulate(automaton: Automaton, input_symbols: Sequence[str]) -> SimulationResult:
    """Runs the simulator matching the automaton's kind."""
    if automaton.kind is AutomatonKind.DETERMINISTIC:
        return simulate_dfa(automaton, input_symbols)
    return simulate_nfa(automaton, input_symbols)


def simulate_many(automaton: Automaton, inputs: Iterable[Sequence[str]]) -> List[SimulationResult]:
    """
    Runs a batch of inputs against one automaton, validating it only once.

    Returns:
        One result per input, in input order
    """
    ensure_valid(automaton)

    run = _run_dfa if automaton.kind is AutomatonKind.DETERMINISTIC else _run_nfa
    results = [run(automaton, input_symbols) for input_symbols in inputs]

    logger.debug("Batch of %d inputs: %d accepted", len(results), sum(result.accepted for result in results))
    return results


def ordered_states(automaton: Automaton, states: Iterable[str]) -> List[str]:
    """List states in the order they were declared in the automaton."""
    members = set(states)
    return [state_id for state_id in automaton.state_ids if state_id in members]


def result_to_dict(automaton: Automaton, result: SimulationResult) -> Dict:
    """
    Convert a simulation result to a JSON-ready dictionary.

    DFA traces become [[state, symbol, next_state], ...]; NFA traces become
    [{'step': i, 'states': [...]}, ...] with states in declaration order.
    """
    data = {
        'accepted': result.accepted,
        'died': result.died,
        'rejection_reason': result.rejection_reason,
        'rejection_position': result.rejection_position,
    }

    if isinstance(result, DFAResult):
        data['type'] = AutomatonKind.DETERMINISTIC.value
        data['trace'] = [list(step) for step in result.trace]
        data['final_state'] = result.final_state
    else:
        data['type'] = AutomatonKind.NONDETERMINISTIC.value
        data['trace'] = [
            {'step': step, 'states': ordered_states(automaton, states)}
            for step, states in result.trace
        ]
        data['final_states'] = ordered_states(automaton, result.final_states)

    return data
