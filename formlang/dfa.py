from typing import Iterable, List, Any, Dict, Optional, Sequence, Set, Union, cast

from formlang.automaton import Automaton, TransRecord
from formlang.utils import Oslash, check_type, check_array_type, State, Input, TransPair, InvariantViolation, MalformedInputError, state_name


class Transition:
    def __init__(self, current: State, target: State, input: Input) -> None:
        check_type(current, State, 'Transition.current')
        check_type(target, State, 'Transition.target')
        check_type(input, Input, 'Transition.input')
        self._current = current
        self._target = target
        self._input = input

    @property
    def current(self):
        return self._current

    @property
    def target(self):
        return self._target

    @property
    def input(self):
        return self._input

    @property
    def label(self) -> str:
        return self._input

    def __repr__(self) -> str:
        return f'{self.current}->{self.target} on {self.input}'

    def __eq__(self, __o: object) -> bool:
        if not isinstance(__o, Transition):
            return False
        return self.target == __o.target and self.current == __o.current and self.input == __o.input

    def __hash__(self) -> int:
        return hash((self.target, self.input, self.current))

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Transition':
        current = cast(State, data.get('current'))
        target = cast(State, data.get('target'))
        input = cast(Input, data.get('input'))
        return Transition(current, target, input)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'Transition',
            'current': self.current,
            'target': self.target,
            'input': self.input
        }


class DFA(Automaton):
    def __init__(self, states: Iterable[State], start_state: State,
                 accept_states: Iterable[State], inputs: Iterable[Input],
                 transitions: Iterable[Transition]) -> None:
        super().__init__(states, start_state, accept_states, inputs)
        self._transitions: List[Transition] = []
        self._table: Dict[State, Dict[Input, State]]

        for trans in transitions:
            self._register(trans.current)
            self._register(trans.target)
            self._add_input(trans.input)
            row = self._table[trans.current]
            target = row.get(trans.input)
            if target is None:
                row[trans.input] = trans.target
                self._transitions.append(trans)
            elif target != trans.target:
                raise InvariantViolation(
                    f'DFA state {trans.current} has two targets on {trans.input!r}: {target}, {trans.target}'
                )

    @property
    def transitions(self) -> List[Transition]:
        return self._transitions

    def query(self, key: TransPair) -> Optional[State]:
        return self._table.get(key.current, {}).get(key.input)

    def transitions_of(self, state: State) -> Dict[Input, State]:
        return dict(self._table.get(state, {}))

    def trans(self, from_state: State,
              symbols: Sequence[Input]) -> Optional[State]:
        state: Optional[State] = from_state
        for symbol in symbols:
            if state is None:
                break
            state = self.query(TransPair(state, symbol))
        return state

    def reach(self, symbols: Sequence[Input]) -> Set[State]:
        state = self.trans(self.start_state, symbols)
        return set() if state is None else {state}

    def transition_table(self) -> List[TransRecord]:
        return [(state, _input, row[_input]) for state, row in self._table.items()
                for _input in sorted(row)]

    def _format_target(self, state: State, _input: Input) -> str:
        t = self.query(TransPair(state, _input))
        return Oslash if t is None else state_name(t)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Union['DFA', Transition]:
        # using data['type'] to distinguish Transition object or DFA object
        type_name = cast(str, data.get('type'))
        if type_name == 'Transition':
            return Transition.from_dict(data)
        elif type_name != 'DFA':
            raise MalformedInputError(
                f'type field must be `Transition` or `DFA`, requested: {type_name}'
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
        return DFA(states, start_state, accept_states, inputs, transitions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'DFA',
            'states': list(self.states),
            'start_state': self.start_state,
            'accept_states': list(self.accept_states),
            'inputs': list(self.inputs),
            'transitions': [trans.to_dict() for trans in self.transitions]
        }
