from typing import Iterable, List, Any, Dict, Sequence, Set, Union, cast

from formlang.automaton import Automaton, TransRecord
from formlang.utils import Oslash, check_type, check_array_type, State, Input, StatePair, TransPair, MalformedInputError, state_name


class Transition:
    # one edge of the transition graph, labelled by one or more inputs
    def __init__(self, current: State, target: State,
                 inputs: List[Input]) -> None:
        check_type(current, State, 'Transition.current')
        check_type(target, State, 'Transition.target')
        check_array_type(inputs, Input, list, 'Transition.inputs')
        self._current = current
        self._target = target
        self._inputs = inputs

    @property
    def current(self):
        return self._current

    @property
    def target(self):
        return self._target

    @property
    def inputs(self):
        return self._inputs

    @property
    def label(self) -> str:
        return ','.join(self._inputs)

    def __repr__(self) -> str:
        return f'{self.current}->{self.target} on {{{",".join(self.inputs)}}}'

    def __eq__(self, __o: object) -> bool:
        if not isinstance(__o, Transition):
            return False
        return self.target == __o.target and self.current == __o.current and self.inputs == __o.inputs

    def __hash__(self) -> int:
        return hash((self.target, *self.inputs, self.current))

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Transition':
        current = cast(State, data.get('current'))
        target = cast(State, data.get('target'))
        inputs = cast(List[Input], data.get('inputs'))
        return Transition(current, target, inputs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'Transition',
            'current': self.current,
            'target': self.target,
            'inputs': self.inputs
        }


class NFA(Automaton):
    # a nfa should have 5 attributes
    # a state set
    # a start state
    # an accept states set
    # a transition function set
    # a input set
    def __init__(self, states: Iterable[State], start_state: State,
                 accept_states: Iterable[State], inputs: Iterable[Input],
                 transitions: Iterable[Transition]) -> None:
        super().__init__(states, start_state, accept_states, inputs)
        self._transitions: List[Transition] = list(transitions)
        self._table: Dict[State, Dict[Input, Set[State]]]

        for _tran in self._transitions:
            # destinations may appear nowhere else
            self._register(_tran.current)
            self._register(_tran.target)
            row = self._table[_tran.current]
            for _input in _tran.inputs:
                self._add_input(_input)
                if row.get(_input) is None:
                    row[_input] = set()
                row[_input].add(_tran.target)

    @staticmethod
    def trans_table_to_trans_list(
            trans_table: Iterable[TransRecord]) -> List[Transition]:
        trans_list: Dict[StatePair, List[Input]] = {}
        for current, _input, target in trans_table:
            state_pair = StatePair(current, target)
            if trans_list.get(state_pair) is None:
                trans_list[state_pair] = []
            trans_list[state_pair].append(_input)
        return [
            Transition(state_pair.current, state_pair.target, inputs)
            for state_pair, inputs in trans_list.items()
        ]

    @property
    def transitions(self) -> List[Transition]:
        return self._transitions

    def query(self, key: TransPair) -> Set[State]:
        return set(self._table.get(key.current, {}).get(key.input, set()))

    def transitions_of(self, state: State) -> Dict[Input, Set[State]]:
        return dict((_input, set(targets))
                    for _input, targets in self._table.get(state, {}).items())

    def next_states(self, from_states: Iterable[State],
                    _input: Input) -> Set[State]:
        res: Set[State] = set()
        for state in from_states:
            res.update(self._table.get(state, {}).get(_input, set()))
        return res

    def trans_from_states(self, from_states: Iterable[State],
                          symbols: Sequence[Input]) -> Set[State]:
        states = set(from_states)
        for symbol in symbols:
            if len(states) == 0:
                break
            states = self.next_states(states, symbol)
        return states

    def trans(self, from_state: State, symbols: Sequence[Input]) -> Set[State]:
        return self.trans_from_states({from_state}, symbols)

    def reach(self, symbols: Sequence[Input]) -> Set[State]:
        return self.trans(self.start_state, symbols)

    def transition_table(self) -> List[TransRecord]:
        return [(state, _input, target)
                for state, row in self._table.items()
                for _input in sorted(row)
                for target in sorted(row[_input])]

    def _format_target(self, state: State, _input: Input) -> str:
        states = self.query(TransPair(state, _input))
        return Oslash if len(states) == 0 else ','.join(
            map(state_name, sorted(states)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Union['NFA', Transition]:
        # using data['type'] to distinguish transition object or nfa object
        type_name = cast(str, data.get('type'))
        if type_name == 'Transition':
            return Transition.from_dict(data)
        elif type_name != cls.__name__:
            raise MalformedInputError(
                f'type field of json object must be `Transition` or `{cls.__name__}`, requested: {type_name}'
            )
        states = cast(List[State], data.get('states'))
        start_state = cast(State, data.get('start_state'))
        accept_states = cast(List[State], data.get('accept_states'))
        inputs = cast(List[Input], data.get('inputs'))
        transitions = cast(List[Transition], data.get('transitions'))
        check_type(start_state, State, 'start_state')
        check_array_type(states, State, list, 'states')
        check_array_type(accept_states, State, list, 'accept_states', True)
        check_array_type(inputs, Input, list, 'inputs', True)
        check_array_type(transitions, Transition, list, 'transitions', True)
        return cls(states, start_state, accept_states, inputs, transitions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': type(self).__name__,
            'states': list(self.states),
            'start_state': self.start_state,
            'accept_states': list(self.accept_states),
            'inputs': list(self.inputs),
            'transitions': [trans.to_dict() for trans in self.transitions]
        }
