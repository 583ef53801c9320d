# line-oriented automaton text format
#
#   q0                 <- start state
#   q2 q3              <- finish states, may be empty
#   q0 a q1            <- one `from symbol to` transition per line
from typing import List, Tuple, Type, TypeVar
import lark

from formlang.automaton import Automaton
from formlang.dfa import DFA, Transition as DFA_Trans
from formlang.nfa import NFA
from formlang.enfa import ENFA
from formlang.utils import State, Input, InvariantViolation, MalformedInputError

parser = lark.Lark(
    grammar=r'''
document : start_line _NL finish_line (_NL transition?)*
start_line : NAME
finish_line : NAME*
transition : NAME NAME NAME
NAME : /[^ \t\r\n]+/
_NL : /\r?\n/
%ignore /[ \t]+/
''',
    start='document',
    parser='lalr',
)

Record = Tuple[State, Input, State]


class AutomatonTransformer(lark.Transformer):
    def start_line(self, v: List[lark.Token]) -> State:
        return str(v[0])

    def finish_line(self, v: List[lark.Token]) -> List[State]:
        return [str(t) for t in v]

    def transition(self, v: List[lark.Token]) -> Record:
        return (str(v[0]), str(v[1]), str(v[2]))

    def document(self, v: list) -> Tuple[State, List[State], List[Record]]:
        return v[0], v[1], list(v[2:])


def parse(s: str) -> Tuple[State, List[State], List[Record]]:
    # only leading blank lines go, a trailing one may be the empty finish line
    s = s.lstrip('\r\n')
    if len(s.splitlines()) < 2:
        raise MalformedInputError(
            'bad automata format: expect a start line and a finish line')
    try:
        tree = parser.parse(s)
    except lark.UnexpectedInput as e:
        line = e.line if isinstance(e.line, int) and e.line > 0 else None
        raise MalformedInputError(
            f'bad automata format, unexpected {type(e).__name__}', line) from e
    return AutomatonTransformer().transform(tree)


def serialize(at: Automaton) -> str:
    lines: List[str] = [at.start_state, ' '.join(sorted(at.accept_states))]
    for record in sorted(at.transition_table()):
        lines.append(' '.join(record))
    return '\n'.join(lines) + '\n'


def dfa_deserialize(s: str) -> DFA:
    start_state, accept_states, records = parse(s)
    transitions = [DFA_Trans(c, t, i) for c, i, t in records]
    try:
        return DFA([], start_state, accept_states, [], transitions)
    except InvariantViolation as e:
        raise MalformedInputError(str(e)) from e


NFA_T = TypeVar('NFA_T', bound=NFA)


def _nfa_deserialize(s: str, nfa_type: Type[NFA_T]) -> NFA_T:
    start_state, accept_states, records = parse(s)
    transitions = NFA.trans_table_to_trans_list(records)
    return nfa_type([], start_state, accept_states, [], transitions)


def nfa_deserialize(s: str) -> NFA:
    return _nfa_deserialize(s, NFA)


def enfa_deserialize(s: str) -> ENFA:
    return _nfa_deserialize(s, ENFA)
