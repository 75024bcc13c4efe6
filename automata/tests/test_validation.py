import unittest

from automata.automaton import Automaton, AutomatonKind, Transition
from automata.exceptions import ValidationError, ValidationErrorKind
from automata.validation import validate, ensure_valid


class TestValidation(unittest.TestCase):
    """Each structural invariant and the error it produces"""

    def assertViolation(self, automaton, kind):
        result = validate(automaton)
        self.assertFalse(result.valid)
        self.assertEqual(result.error.kind, kind)
        return result.error

    def test_valid_dfa(self):
        dfa = Automaton(AutomatonKind.DETERMINISTIC)
        dfa.add_state('q0', is_start=True)
        dfa.add_state('q1', is_accepting=True)
        dfa.add_transition('q0', 'q1', 'a')
        dfa.add_transition('q1', 'q1', 'a')

        result = validate(dfa)
        self.assertTrue(result.valid)
        self.assertIsNone(result.error)
        self.assertEqual(result.to_dict(), {'valid': True})
        result.raise_for_error()

    def test_valid_nfa_with_conflicts_and_epsilon(self):
        nfa = Automaton(AutomatonKind.NONDETERMINISTIC)
        nfa.add_state('p0', is_start=True)
        nfa.add_state('p1')
        nfa.add_state('p2', is_accepting=True)
        nfa.add_transition('p0', 'p1', 'a')
        nfa.add_transition('p0', 'p2', 'a')
        nfa.add_transition('p1', 'p2', '')

        self.assertTrue(validate(nfa).valid)

    def test_empty_automaton(self):
        self.assertViolation(Automaton(), ValidationErrorKind.EMPTY_AUTOMATON)

    def test_duplicate_state(self):
        dfa = Automaton()
        dfa.add_state('q0', is_start=True)
        dfa.add_state('q0')

        error = self.assertViolation(dfa, ValidationErrorKind.DUPLICATE_STATE)
        self.assertEqual(error.state, 'q0')

    def test_no_start_state(self):
        dfa = Automaton()
        dfa.add_state('q0', is_accepting=True)

        self.assertViolation(dfa, ValidationErrorKind.NO_START_STATE)

    def test_multiple_start_states(self):
        dfa = Automaton()
        dfa.add_state('q0', is_start=True)
        dfa.add_state('q1', is_start=True)

        error = self.assertViolation(dfa, ValidationErrorKind.MULTIPLE_START_STATES)
        self.assertEqual(error.state, 'q1')

    def test_start_state_mismatch(self):
        dfa = Automaton()
        dfa.add_state('q0', is_start=True)
        dfa.add_state('q1')
        dfa.start_state = 'q1'

        self.assertViolation(dfa, ValidationErrorKind.START_STATE_MISMATCH)

    def test_epsilon_in_alphabet(self):
        nfa = Automaton(AutomatonKind.NONDETERMINISTIC, alphabet=['a', ''])
        nfa.add_state('p0', is_start=True)

        self.assertViolation(nfa, ValidationErrorKind.EPSILON_IN_ALPHABET)

    def test_dangling_transition(self):
        dfa = Automaton()
        dfa.add_state('q0', is_start=True)
        dfa.add_transition('q0', 'q9', 'a')

        error = self.assertViolation(dfa, ValidationErrorKind.DANGLING_TRANSITION)
        self.assertEqual(error.state, 'q9')
        self.assertEqual(error.transition, Transition('q0', 'q9', 'a'))

    def test_dangling_source(self):
        nfa = Automaton(AutomatonKind.NONDETERMINISTIC)
        nfa.add_state('p0', is_start=True)
        nfa.add_transition('ghost', 'p0', '')

        error = self.assertViolation(nfa, ValidationErrorKind.DANGLING_TRANSITION)
        self.assertEqual(error.state, 'ghost')

    def test_epsilon_in_dfa(self):
        dfa = Automaton(AutomatonKind.DETERMINISTIC)
        dfa.add_state('q0', is_start=True)
        dfa.add_state('q1', is_accepting=True)
        dfa.add_transition('q0', 'q1', 'ε')

        error = self.assertViolation(dfa, ValidationErrorKind.EPSILON_IN_DFA)
        self.assertEqual(error.transition.symbol, '')

    def test_non_deterministic_conflict(self):
        dfa = Automaton(AutomatonKind.DETERMINISTIC)
        dfa.add_state('q0', is_start=True)
        dfa.add_state('q1')
        dfa.add_state('q2', is_accepting=True)
        dfa.add_transition('q0', 'q1', 'a')
        dfa.add_transition('q0', 'q2', 'a')

        error = self.assertViolation(dfa, ValidationErrorKind.NON_DETERMINISTIC_CONFLICT)
        self.assertEqual(error.state, 'q0')
        self.assertEqual(error.transition, Transition('q0', 'q2', 'a'))

        self.assertEqual(validate(dfa).to_dict(), {
            'valid': False,
            'error': "State 'q0' has more than one transition on symbol 'a'",
            'kind': 'non_deterministic_conflict',
            'state': 'q0',
            'transition': {'from': 'q0', 'to': 'q2', 'symbol': 'a'}
        })

    def test_first_violation_wins(self):
        # Both a missing start state and a dangling transition
        dfa = Automaton()
        dfa.add_state('q0')
        dfa.add_transition('q0', 'q5', 'a')

        self.assertViolation(dfa, ValidationErrorKind.NO_START_STATE)

    def test_ensure_valid_raises(self):
        dfa = Automaton()
        dfa.add_state('q0')

        with self.assertRaises(ValidationError) as context:
            ensure_valid(dfa)
        self.assertEqual(context.exception.kind, ValidationErrorKind.NO_START_STATE)

        with self.assertRaises(ValidationError):
            validate(dfa).raise_for_error()


if __name__ == '__main__':
    unittest.main()
