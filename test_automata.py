from itertools import chain, combinations, product
from pathlib import Path
from typing import Iterable, List, Tuple

import pytest

from formlang.automaton import accept
from formlang.dfa import DFA, Transition as DFA_Trans
from formlang.dfa_utils import subset_construct
from formlang.enfa import ENFA, epsilon_close
from formlang.fa_parser import enfa_deserialize, nfa_deserialize
from formlang.nfa import NFA, Transition
from formlang.utils import Epsilon, InvariantViolation, TransPair, canonical

RESOURCES = Path(__file__).parent / 'resources'


def load(name: str) -> str:
    return (RESOURCES / name).read_text(encoding='utf-8')


def words(alphabet: Iterable[str], max_len: int) -> Iterable[Tuple[str, ...]]:
    alphabet = list(alphabet)
    for n in range(max_len + 1):
        yield from product(alphabet, repeat=n)


decimal_cases = [
    ('1111010', False),
    ('1.111010', True),
    ('+1.111010', True),
    ('-1.111010', True),
    ('1111.010', True),
    ('.1111010', True),
    ('123455.1111010', True),
    ('+123455.1111010', True),
    ('-123455.1111010', True),
    ('a123455.1111010', False),
    ('12.3455.1111010', False),
    ('12.345519999999999111010', True),
    ('a12.345519999999999111010', False),
    ('12.3ff45519999999999111010', False),
]

ends_with_01_cases = [
    ('0', False),
    ('1', False),
    ('', False),
    ('1111010', False),
    ('11110101', True),
    ('111101', True),
    ('00000001', True),
    ('00000010', False),
    ('11111111101010100101001010100000010', False),
    ('111111111010101001010010101000000101', True),
    ('ab01', False),
    ('01a', False),
]


@pytest.fixture
def decimal() -> ENFA:
    return enfa_deserialize(load('decimal.enfa'))


@pytest.fixture
def ends_with_01() -> NFA:
    return nfa_deserialize(load('01stringendwith01.nfa'))


def epsilon_chain() -> ENFA:
    # q0 reaches q2 only through two epsilon moves
    return ENFA(['q0', 'q1', 'q2', 'q3'], 'q0', ['q3'], [], [
        Transition('q0', 'q1', [Epsilon]),
        Transition('q1', 'q2', [Epsilon]),
        Transition('q2', 'q3', ['a']),
    ])


@pytest.mark.parametrize('word, want', decimal_cases)
def test_enfa(decimal: ENFA, word: str, want: bool):
    assert accept(decimal, word) == want


@pytest.mark.parametrize('word, want', decimal_cases)
def test_enfa_to_dfa(decimal: ENFA, word: str, want: bool):
    assert accept(subset_construct(decimal), word) == want


@pytest.mark.parametrize('word, want', ends_with_01_cases)
def test_nfa(ends_with_01: NFA, word: str, want: bool):
    assert accept(ends_with_01, word) == want


@pytest.mark.parametrize('word, want', ends_with_01_cases)
def test_nfa_to_dfa(ends_with_01: NFA, word: str, want: bool):
    assert accept(subset_construct(ends_with_01), word) == want


def test_subset_construction_preserves_language(decimal: ENFA,
                                                ends_with_01: NFA):
    exponential = nfa_deserialize(load('exponentialdfa.nfa'))
    for nfa, max_len in [(ends_with_01, 8), (exponential, 8), (decimal, 3)]:
        dfa = subset_construct(nfa)
        alphabet = [i for i in nfa.inputs if i != Epsilon] + ['x']
        for w in words(alphabet, max_len):
            assert accept(nfa, w) == accept(dfa, w), w


def test_subset_construction_is_deterministic(decimal: ENFA):
    exponential = nfa_deserialize(load('exponentialdfa.nfa'))
    for nfa in [decimal, exponential]:
        dfa = subset_construct(nfa)
        pairs = [(s, i) for s, i, _ in dfa.transition_table()]
        assert len(pairs) == len(set(pairs))
        for _, _, target in dfa.transition_table():
            assert target in dfa.states
        # content addressed ids
        for state in dfa.states:
            assert state == canonical(state.split(','))
        assert subset_construct(nfa).transition_table() == dfa.transition_table()


def test_exponential_blowup():
    # the third symbol from the end is 1: every 3 bit window is a state
    dfa = subset_construct(nfa_deserialize(load('exponentialdfa.nfa')))
    assert len(dfa.states) == 8
    assert dfa.start_state == 'q0'
    assert set(dfa.accept_states) == set(s for s in dfa.states if 'q3' in s)


def test_epsilon_closure_is_transitive():
    enfa = epsilon_chain()
    assert epsilon_close(enfa, ['q0']) == {'q0', 'q1', 'q2'}
    assert epsilon_close(enfa, ['q1']) == {'q1', 'q2'}
    assert epsilon_close(enfa, []) == set()
    assert accept(enfa, 'a')
    assert not accept(enfa, '')
    assert not accept(enfa, 'aa')


def test_epsilon_closure_is_idempotent(decimal: ENFA):
    states = decimal.states
    subsets = chain.from_iterable(
        combinations(states, n) for n in range(len(states) + 1))
    for subset in subsets:
        closure = epsilon_close(decimal, subset)
        assert epsilon_close(decimal, closure) == closure
        assert set(subset) <= closure


def test_enfa_to_dfa_skips_epsilon_label():
    dfa = subset_construct(epsilon_chain())
    assert dfa.inputs == epsilon_chain().symbol_inputs
    assert dfa.start_state == 'q0,q1,q2'
    assert Epsilon not in dfa.inputs
    assert dfa.transition_table() == [('q0,q1,q2', 'a', 'q3')]
    assert dfa.accept_states == ['q3']


def test_empty_word_depends_on_start_closure():
    enfa = ENFA([], 's', ['f'], [], [Transition('s', 'f', [Epsilon])])
    assert accept(enfa, '')
    assert accept(enfa, [])
    dfa = subset_construct(enfa)
    assert dfa.start_state == 'f,s'
    assert dfa.accept_states == ['f,s']
    assert accept(dfa, '')


def test_plain_nfa_reads_epsilon_as_symbol():
    nfa = NFA([], 'q0', ['q1'], [], [Transition('q0', 'q1', [Epsilon])])
    assert not accept(nfa, [])
    assert accept(nfa, [Epsilon])
    dfa = subset_construct(nfa)
    assert dfa.inputs == [Epsilon]
    assert accept(dfa, [Epsilon])


def test_lookup_miss_is_empty(ends_with_01: NFA):
    assert ends_with_01.query(TransPair('q2', '0')) == set()
    assert ends_with_01.trans('q0', 'a0') == set()
    assert ends_with_01.trans('nowhere', '') == {'nowhere'}
    assert ends_with_01.trans('nowhere', '0') == set()
    dfa = DFA(['q0'], 'q0', ['q0'], ['a'], [DFA_Trans('q0', 'q0', 'a')])
    assert dfa.trans('q0', 'ab') is None
    assert dfa.reach('ab') == set()
    assert accept(dfa, '')
    assert accept(dfa, 'aaa')
    assert not accept(dfa, 'ab')


def test_dfa_determinism():
    with pytest.raises(InvariantViolation):
        DFA(['q0', 'q1'], 'q0', ['q1'], ['a'],
            [DFA_Trans('q0', 'q0', 'a'),
             DFA_Trans('q0', 'q1', 'a')])
    # the same edge twice is fine
    dfa = DFA(['q0'], 'q0', [], ['a'],
              [DFA_Trans('q0', 'q0', 'a'),
               DFA_Trans('q0', 'q0', 'a')])
    assert len(dfa.transitions) == 1


def test_destination_states_are_registered(ends_with_01: NFA):
    assert ends_with_01.states == ['q0', 'q2', 'q1']
    assert ends_with_01.transitions_of('q2') == {}
    assert ends_with_01.transitions_of('q0') == {
        '0': {'q0', 'q1'},
        '1': {'q0'}
    }


def test_repr_and_visualize(ends_with_01: NFA):
    table = repr(ends_with_01)
    assert '-> q0' in table
    assert '* q2' in table
    g = subset_construct(ends_with_01).visualize()
    assert g.name == 'dfa'
    assert 'doublecircle' in g.source
    assert 'start' in g.source


def test_transition_list_grouping():
    records: List[Tuple[str, str, str]] = [('q0', 'a', 'q1'),
                                           ('q0', 'b', 'q1'),
                                           ('q1', 'a', 'q0')]
    transitions = NFA.trans_table_to_trans_list(records)
    assert transitions == [
        Transition('q0', 'q1', ['a', 'b']),
        Transition('q1', 'q0', ['a'])
    ]
