import json
from pathlib import Path

import json5
import pytest

from formlang.automaton import accept
from formlang.dfa import DFA
from formlang.dfa_utils import subset_construct
from formlang.enfa import ENFA
from formlang.fa_parser import dfa_deserialize, enfa_deserialize, nfa_deserialize, serialize
from formlang.nfa import NFA
from formlang.utils import MalformedInputError

RESOURCES = Path(__file__).parent / 'resources'


def load(name: str) -> str:
    return (RESOURCES / name).read_text(encoding='utf-8')


def sort_lines(s: str):
    return sorted(s.strip('\n\t ').split('\n'))


def test_nfa_serialize():
    dat = load('decimal.enfa')
    nfa = nfa_deserialize(dat)
    assert sort_lines(serialize(nfa)) == sort_lines(dat)


def test_to_dfa_and_dfa_serialize():
    nfa = nfa_deserialize(load('exponentialdfa.nfa'))
    dfa = subset_construct(nfa)
    dfa1 = dfa_deserialize(serialize(dfa))
    assert dfa1.start_state == dfa.start_state
    assert set(dfa1.accept_states) == set(dfa.accept_states)
    assert set(dfa1.states) == set(dfa.states)
    assert set(dfa1.transition_table()) == set(dfa.transition_table())
    # already canonical, so a second trip changes nothing
    assert serialize(dfa1) == serialize(dfa_deserialize(serialize(dfa1)))


def test_enfa_round_trip_keeps_behaviour():
    enfa = enfa_deserialize(load('decimal.enfa'))
    again = enfa_deserialize(serialize(enfa))
    assert isinstance(again, ENFA)
    for w in ['1.5', '+.5', '-12.', '12', '1.2.3']:
        assert accept(enfa, w) == accept(again, w)


def test_empty_finish_line_and_blank_lines():
    nfa = nfa_deserialize('q0\n\nq0 a q1\n\nq1 b q0\n')
    assert nfa.accept_states == []
    assert nfa.states == ['q0', 'q1']
    assert not accept(nfa, 'ab')
    dfa = dfa_deserialize('q0\nq0 q1\n')
    assert dfa.states == ['q0', 'q1']
    assert dfa.transition_table() == []
    assert accept(dfa, '')


def test_no_finish_states_and_no_transitions():
    dfa = DFA(['q0'], 'q0', [], [], [])
    text = serialize(dfa)
    assert text == 'q0\n\n'
    again = dfa_deserialize(text)
    assert again.start_state == 'q0'
    assert again.accept_states == []
    assert again.transition_table() == []
    assert serialize(again) == text
    nfa = nfa_deserialize(serialize(NFA(['q0', 'q1'], 'q0', [], [], [])))
    assert nfa.states == ['q0']
    assert not accept(nfa, '')


def test_dfa_states_only_seen_as_destination():
    dfa = dfa_deserialize('s\nt\ns a t\n')
    assert 't' in dfa.states
    assert dfa.transitions_of('t') == {}
    assert accept(dfa, 'a')


@pytest.mark.parametrize('text', [
    '',
    'q0',
    'q0\n',
    'q0 q1\nq1\nq0 a q1',
    'q0\nq1\nq0 a',
    'q0\nq1\nq0 a q1 q2',
])
def test_malformed_automaton(text: str):
    with pytest.raises(MalformedInputError):
        nfa_deserialize(text)


def test_malformed_line_number():
    with pytest.raises(MalformedInputError) as e:
        nfa_deserialize('q0\nq1\nq0 a q1\nq1 b\n')
    assert e.value.line == 4


def test_nondeterministic_dfa_text():
    with pytest.raises(MalformedInputError):
        dfa_deserialize('q0\nq1\nq0 a q1\nq0 a q0\n')


def test_load_json5():
    with open(RESOURCES / 'abb.nfa.json5', 'r', encoding='utf-8') as f:
        nfa: NFA = json5.load(f, object_hook=NFA.from_dict)
    assert isinstance(nfa, NFA)
    assert accept(nfa, 'aabb')
    assert accept(nfa, 'babb')
    assert not accept(nfa, 'abba')


def test_json_round_trip():
    enfa = enfa_deserialize(load('decimal.enfa'))
    new_enfa = json.loads(json.dumps(enfa.to_dict()), object_hook=ENFA.from_dict)
    assert isinstance(new_enfa, ENFA)
    assert serialize(new_enfa) == serialize(enfa)

    dfa = subset_construct(enfa)
    new_dfa = json.loads(json.dumps(dfa.to_dict()), object_hook=DFA.from_dict)
    assert isinstance(new_dfa, DFA)
    assert serialize(new_dfa) == serialize(dfa)


def test_json_wrong_type():
    data = nfa_deserialize(load('01stringendwith01.nfa')).to_dict()
    with pytest.raises(MalformedInputError):
        json.loads(json.dumps(data), object_hook=ENFA.from_dict)
    with pytest.raises(MalformedInputError):
        DFA.from_dict({'type': 'NFA'})
