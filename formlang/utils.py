from typing import Callable, Collection, FrozenSet, Iterable, List, NamedTuple, Optional, Set
from typing_extensions import TypeAlias

# reserved symbol for the empty string, shared by automata and grammars
Epsilon: str = 'epsilon'

# empty set
Oslash: str = 'Ø'

# joins the members of a state set into one state id
STATE_DELIMITER: str = ','

# prefixes of variables introduced by binarization
CHAIN_PREFIX: str = 'V'
TERMINAL_PREFIX: str = 'T'

# prefix of the fresh start variable of the normal form
START_PREFIX: str = 'S'

State: TypeAlias = str

Input: TypeAlias = str

StateSet: TypeAlias = FrozenSet[State]


def state_name(state: State):
    return f'{state}'


class TransPair(NamedTuple):
    current: State
    input: Input


class StatePair(NamedTuple):
    current: State
    target: State


class FormlangError(Exception):
    pass


class MalformedInputError(FormlangError, ValueError):
    '''
    serialized automaton or grammar text (or dict) that cannot be parsed
    '''

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        if line is not None:
            message = f'{message} (line {line})'
        super().__init__(message)
        self.line = line


class InvariantViolation(FormlangError, RuntimeError):
    '''
    raised when a structure handed over by a previous stage is broken
    '''


def canonical(states: Iterable[State]) -> State:
    '''
    stable id of a state set: members sorted and joined by STATE_DELIMITER
    '''
    return STATE_DELIMITER.join(sorted(set(states)))


class NameAllocator:

    def __init__(self, prefix='', reserved: Optional[Iterable[str]] = None) -> None:
        self._id = 0
        self._prefix = prefix
        self._names: List[str] = []
        self._reserved: Set[str] = set() if reserved is None else set(reserved)

    @property
    def next(self) -> str:
        # skip names that are already taken
        _id = f'{self._prefix}{self._id}'
        while _id in self._reserved:
            self._id += 1
            _id = f'{self._prefix}{self._id}'
        self._reserved.add(_id)
        self._names.append(_id)
        self._id += 1
        return _id

    @property
    def names(self) -> List[str]:
        return self._names


def check_type(_obj: object, _type, field_name: str):
    assert isinstance(
        _obj, _type
    ), f'Field {field_name} must be type {_type}, requested {type(_obj)}.'


def check_array_type(_list: Collection,
                     element_type,
                     list_type,
                     field_name: str,
                     allow_empty=False):
    check_type(_list, list_type, field_name)
    if not allow_empty:
        assert len(_list) != 0, f'Field {field_name} must not be empty.'
    assert all(
        isinstance(element, element_type) for element in _list
    ), f'Field {field_name} must be type List[{element_type}], requested List[{[type(element) for element in _list]}].'


def Token(regex: str) -> Callable:
    '''
    add regex: str to function's regex attribute
    '''

    def add_regex(f: Callable) -> Callable:
        assert hasattr(
            f, '__call__'), f'@Token must be applied to Callable object'
        setattr(f, 'regex', regex)
        return f

    return add_regex


def Rule(rule: str) -> Callable:
    '''
    add rule: str to function's __doc__ attribute
    '''

    def add_rule(f: Callable) -> Callable:
        assert hasattr(f,
                       '__call__'), f'@Rule must be applied to Callable object'
        setattr(f, '__doc__', rule)
        return f

    return add_rule
