import logging
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Set, cast
from prettytable import PrettyTable

from formlang.utils import State, Input, StateSet, Epsilon, TransPair, Oslash, canonical
from formlang.dfa import DFA, Transition as DFA_Trans
from formlang.nfa import NFA
from formlang.enfa import ENFA

logger = logging.getLogger(__name__)


def subset_construct(nfa: NFA) -> DFA:
    """
    convert nfa (or enfa) to dfa using subset construction algorithm

    every dfa state is named by the canonical string of the nfa states it
    stands for, so two runs over the same nfa give identical dfa
    """
    is_enfa = isinstance(nfa, ENFA)
    closure: Callable[[Iterable[State]], Set[State]] = set
    if is_enfa:
        closure = cast(ENFA, nfa).eclose

    initial_closure: StateSet = frozenset(closure([nfa.start_state]))
    start_state = canonical(initial_closure)
    # dfa-state -> nfa-states mapping, in discovery order
    closure_state_map: Dict[State, StateSet] = {start_state: initial_closure}

    queue: Deque[StateSet] = deque([initial_closure])

    transitions: List[DFA_Trans] = []

    while len(queue) != 0:
        curr = queue.popleft()
        _current = canonical(curr)
        moves: Dict[Input, Set[State]] = {}
        for state in sorted(curr):
            for _input, targets in nfa.transitions_of(state).items():
                # epsilon moves are already folded into the closure
                if is_enfa and _input == Epsilon:
                    continue
                if moves.get(_input) is None:
                    moves[_input] = set()
                moves[_input].update(targets)
        for _input in sorted(moves):
            target = frozenset(closure(moves[_input]))
            _target = canonical(target)
            if _target not in closure_state_map:
                closure_state_map[_target] = target
                queue.append(target)
            transitions.append(DFA_Trans(_current, _target, _input))

    accept_states = [
        dfa_state for dfa_state, nfa_states in closure_state_map.items()
        if any(s in nfa.accept_states for s in nfa_states)
    ]

    inputs = sorted(set(trans.input for trans in transitions))

    dfa = DFA(closure_state_map.keys(), start_state, accept_states, inputs,
              transitions)

    if logger.isEnabledFor(logging.DEBUG):
        table = PrettyTable(['NFA STATE', 'DFA STATE', *inputs])
        for dfa_state, nfa_states in closure_state_map.items():
            row = [f'{{{",".join(sorted(nfa_states))}}}', dfa_state]
            for _input in inputs:
                target = dfa.query(TransPair(dfa_state, _input))
                row.append(Oslash if target is None else target)
            table.add_row(row)
        logger.debug('subset construction:\n%s', table)

    return dfa
