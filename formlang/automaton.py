from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Sequence, Set, Tuple
from graphviz import Digraph
from prettytable import PrettyTable

from formlang.utils import State, Input, state_name

TransRecord = Tuple[State, Input, State]


class Automaton(ABC):
    '''
    what DFA, NFA and ENFA have in common: a state table, a start state,
    a set of accept (finish) states and a flat view of the transitions
    '''

    def __init__(self, states: Iterable[State], start_state: State,
                 accept_states: Iterable[State],
                 inputs: Iterable[Input]) -> None:
        self._table: Dict[State, dict] = {}
        self._start_state: State = start_state
        self._accept_states: List[State] = []
        self._states: List[State] = []
        self._inputs: List[Input] = []
        for s in [start_state, *states]:
            self._register(s)
        for s in accept_states:
            self._register(s)
            if s not in self._accept_states:
                self._accept_states.append(s)
        for i in inputs:
            self._add_input(i)

    def _register(self, state: State) -> None:
        if state not in self._table:
            self._table[state] = {}
            self._states.append(state)

    def _add_input(self, _input: Input) -> None:
        if _input not in self._inputs:
            self._inputs.append(_input)

    @property
    def states(self) -> List[State]:
        return self._states

    @property
    def start_state(self) -> State:
        return self._start_state

    @property
    def accept_states(self) -> List[State]:
        return self._accept_states

    @property
    def inputs(self) -> List[Input]:
        return self._inputs

    @property
    @abstractmethod
    def transitions(self) -> list:
        ...

    @abstractmethod
    def transition_table(self) -> List[TransRecord]:
        '''
        every (from, symbol, to) triple, ordered by state registration,
        then symbol, then destination
        '''

    @abstractmethod
    def reach(self, symbols: Sequence[Input]) -> Set[State]:
        '''
        states the automaton stops in after consuming all of symbols
        '''

    @abstractmethod
    def _format_target(self, state: State, _input: Input) -> str:
        ...

    def accept(self, symbols: Sequence[Input]) -> bool:
        stop_states = self.reach(symbols)
        # stuck before consuming every symbol
        if len(stop_states) == 0:
            return False
        return any(s in self._accept_states for s in stop_states)

    def __repr__(self) -> str:
        table = PrettyTable(['STATE', *self.inputs])
        # right alignment
        table.align['STATE'] = 'r'

        def format_state(s: State) -> str:
            res = f'{s}'
            if s == self.start_state:
                res = f'-> {res}'
            if s in self.accept_states:
                res = f'* {res}'
            return res

        for s in self.states:
            row: List[str] = [format_state(s)]
            for i in self.inputs:
                row.append(self._format_target(s, i))
            table.add_row(row)
        return table.get_string()

    def visualize(self) -> Digraph:
        '''
        visualize transition graph
        '''
        g = Digraph(name=type(self).__name__.lower(),
                    graph_attr={'rankdir': 'LR'})

        g.node(name='vnode', label='', shape='none')

        for state in self.states:
            name = state_name(state)
            if state in self.accept_states:
                g.node(name=name, label=name, shape='doublecircle')
            else:
                g.node(name=name, label=name, shape='circle')

        g.edge('vnode',
               state_name(self.start_state),
               label='start',
               arrowsize='0.5')

        for trans in self.transitions:
            g.edge(state_name(trans.current),
                   state_name(trans.target),
                   trans.label,
                   arrowsize='0.5')
        return g


def accept(automaton: Automaton, symbols: Sequence[Input]) -> bool:
    return automaton.accept(symbols)
