from typing import Iterable, List, Sequence, Set

from formlang.nfa import NFA
from formlang.utils import State, Input, Epsilon


class ENFA(NFA):
    '''
    NFA whose `Epsilon` input is read as a move that consumes nothing.

    The epsilon transitions are stored like any other input, only
    `eclose` and the `etrans*` family interpret them.
    '''

    def eclose(self, states: Iterable[State]) -> Set[State]:
        # actually this is a simple graph traversal algorithm (BFS)
        queue: List[State] = list(states)
        closure: Set[State] = set(queue)
        while len(queue) != 0:
            curr_state = queue.pop(0)
            for next_state in self.next_states([curr_state], Epsilon):
                if next_state not in closure:
                    closure.add(next_state)
                    queue.append(next_state)
        return closure

    def etrans_from_states(self, from_states: Iterable[State],
                           symbols: Sequence[Input]) -> Set[State]:
        # from_states must already be closed
        states = set(from_states)
        for symbol in symbols:
            if len(states) == 0:
                break
            states = self.eclose(self.next_states(states, symbol))
        return states

    def etrans(self, from_state: State, symbols: Sequence[Input]) -> Set[State]:
        return self.etrans_from_states(self.eclose([from_state]), symbols)

    def reach(self, symbols: Sequence[Input]) -> Set[State]:
        return self.etrans(self.start_state, symbols)

    @property
    def symbol_inputs(self) -> List[Input]:
        # inputs that consume a symbol
        return [i for i in self.inputs if i != Epsilon]


def epsilon_close(enfa: ENFA, states: Iterable[State]) -> Set[State]:
    return enfa.eclose(states)
