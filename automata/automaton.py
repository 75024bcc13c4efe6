from collections import defaultdict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

EPSILON = ''
EPSILON_DISPLAY = 'ε'


class AutomatonKind(str, Enum):
    DETERMINISTIC = 'dfa'
    NONDETERMINISTIC = 'nfa'

    @property
    def label(self) -> str:
        if self is AutomatonKind.DETERMINISTIC:
            return 'deterministic'
        return 'nondeterministic'


def normalize_symbol(symbol: str) -> str:
    """Map the displayed epsilon character onto the stored empty symbol."""
    return EPSILON if symbol == EPSILON_DISPLAY else symbol


@dataclass(frozen=True)
class State:
    """A single state. Canvas coordinates are not part of the model."""
    id: str
    is_start: bool = False
    is_accepting: bool = False

    def to_dict(self) -> Dict:
        return {'id': self.id, 'isStart': self.is_start, 'isAccepting': self.is_accepting}


@dataclass(frozen=True)
class Transition:
    """A labelled edge; an empty symbol is an epsilon move."""
    source: str
    target: str
    symbol: str

    @property
    def is_epsilon(self) -> bool:
        return self.symbol == EPSILON

    def to_dict(self) -> Dict:
        return {'from': self.source, 'to': self.target, 'symbol': self.symbol}

    def __str__(self) -> str:
        label = EPSILON_DISPLAY if self.is_epsilon else self.symbol
        return f"{self.source} --{label}--> {self.target}"


class Automaton:
    """
    A finite automaton built up from explicit add-state / add-transition calls.

    Transitions are indexed by (source, symbol) as they are added, so lookups
    never scan the transition list. The index keeps targets in insertion
    order, which keeps traces stable between runs.

    Args:
        kind: Which simulator applies (deterministic or nondeterministic)
        alphabet: Symbols declared up front. Symbols used by added transitions
            are added automatically; epsilon never is.
    """

    def __init__(self, kind: AutomatonKind = AutomatonKind.DETERMINISTIC,
                 alphabet: Optional[Iterable[str]] = None):
        self.kind = AutomatonKind(kind)
        self.alphabet: Set[str] = {normalize_symbol(symbol) for symbol in alphabet or []}
        self.states: List[State] = []
        self.transitions: List[Transition] = []
        self.start_state: Optional[str] = None
        self._states_by_id: Dict[str, State] = {}
        self._index: Dict[Tuple[str, str], List[str]] = defaultdict(list)
        self._state_counter = 0

    def __repr__(self) -> str:
        return (f"Automaton(kind={self.kind.value!r}, states={len(self.states)}, "
                f"transitions={len(self.transitions)}, start={self.start_state!r})")

    def _new_state_id(self) -> str:
        while True:
            state_id = f"q{self._state_counter}"
            self._state_counter += 1
            if state_id not in self._states_by_id:
                return state_id

    def add_state(self, state_id: Optional[str] = None, is_start: bool = False,
                  is_accepting: bool = False) -> State:
        """
        Add a state. Without an id one is generated (q0, q1, ...).

        The first state added with is_start=True becomes the start state.
        Duplicate ids are accepted here and reported by validation.
        """
        if state_id is None:
            state_id = self._new_state_id()

        state = State(state_id, is_start=is_start, is_accepting=is_accepting)
        self.states.append(state)
        self._states_by_id.setdefault(state_id, state)

        if is_start and self.start_state is None:
            self.start_state = state_id

        return state

    def add_transition(self, source: str, target: str, symbol: str) -> Transition:
        """Add a transition; 'ε' and '' both denote an epsilon move."""
        transition = Transition(source, target, normalize_symbol(symbol))
        self.transitions.append(transition)
        self._index[(transition.source, transition.symbol)].append(transition.target)

        if not transition.is_epsilon:
            self.alphabet.add(transition.symbol)

        return transition

    def _replace_state(self, state_id: str, **changes) -> None:
        for position, state in enumerate(self.states):
            if state.id == state_id:
                self.states[position] = replace(state, **changes)
        self._states_by_id[state_id] = replace(self._states_by_id[state_id], **changes)

    def set_start(self, state_id: str) -> None:
        """Make state_id the only start state."""
        if state_id not in self._states_by_id:
            raise KeyError(state_id)

        for state in list(self._states_by_id.values()):
            if state.is_start and state.id != state_id:
                self._replace_state(state.id, is_start=False)

        self._replace_state(state_id, is_start=True)
        self.start_state = state_id

    def set_accepting(self, state_id: str, accepting: bool = True) -> None:
        if state_id not in self._states_by_id:
            raise KeyError(state_id)
        self._replace_state(state_id, is_accepting=accepting)

    def get_state(self, state_id: str) -> Optional[State]:
        return self._states_by_id.get(state_id)

    def has_state(self, state_id: str) -> bool:
        return state_id in self._states_by_id

    def is_accepting(self, state_id: str) -> bool:
        state = self._states_by_id.get(state_id)
        return state is not None and state.is_accepting

    @property
    def state_ids(self) -> List[str]:
        return [state.id for state in self.states]

    @property
    def accepting_states(self) -> List[str]:
        return [state.id for state in self.states if state.is_accepting]

    def transitions_from(self, state_id: str, symbol: str) -> List[str]:
        """
        Get all states reachable from state_id on exactly symbol.

        Args:
            state_id: Current state
            symbol: Input symbol (or empty string for epsilon)

        Returns:
            List of next states, in the order their transitions were added
        """
        return list(self._index.get((state_id, symbol), ()))

    def with_kind(self, kind: AutomatonKind) -> 'Automaton':
        """Return a copy of this automaton re-typed as kind."""
        copy = Automaton(kind, alphabet=self.alphabet)
        for state in self.states:
            copy.add_state(state.id, is_start=state.is_start, is_accepting=state.is_accepting)
        for transition in self.transitions:
            copy.add_transition(transition.source, transition.target, transition.symbol)
        copy.start_state = self.start_state
        copy._state_counter = self._state_counter
        return copy
