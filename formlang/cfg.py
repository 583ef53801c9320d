from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Dict, Any, Tuple, Union, Optional, Set, cast

from formlang.utils import Epsilon, InvariantViolation, MalformedInputError, check_type, check_array_type


@dataclass(frozen=True)
class Terminal:
    value: str

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_epsilon(self) -> bool:
        return self.value == Epsilon

    def __repr__(self) -> str:
        return f'"{self.value}"'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'Terminal', 'value': self.value}


@dataclass(frozen=True)
class Variable:
    id: str

    @property
    def label(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        return {'type': 'Variable', 'id': self.id}


Symbol = Union[Terminal, Variable]

EPSILON = Terminal(Epsilon)


class Production:

    def __init__(self, head: str, body: Iterable[Symbol]) -> None:
        self._head = head
        self._body: Tuple[Symbol, ...] = tuple(body)
        check_array_type(self._body,
                         (Terminal, Variable),
                         tuple,
                         'Production.body',
                         allow_empty=True)

    @property
    def head(self) -> str:
        return self._head

    @property
    def body(self) -> Tuple[Symbol, ...]:
        return self._body

    @property
    def is_epsilon(self) -> bool:
        return len(self._body) == 1 and self._body[0] == EPSILON

    @property
    def is_unit(self) -> bool:
        return len(self._body) == 1 and isinstance(self._body[0], Variable)

    @property
    def variables(self) -> List[str]:
        # one entry per occurrence
        return [s.id for s in self._body if isinstance(s, Variable)]

    def order_key(self) -> Tuple:
        # longer first, then by labels
        return (-len(self._body), tuple(s.label for s in self._body),
                tuple(isinstance(s, Variable) for s in self._body))

    def __eq__(self, __o: object) -> bool:
        if not isinstance(__o, Production):
            return False
        return self.head == __o.head and self.body == __o.body

    def __hash__(self) -> int:
        return hash((self._head, *self._body))

    @staticmethod
    def from_dict(data: Dict) -> 'Production':
        head = cast(str, data.get('head'))
        body = cast(List[Symbol], data.get('body'))
        check_type(head, str, 'Production.head')
        check_array_type(body, (Terminal, Variable), list, 'Production.body', False)
        return Production(head, body)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'Production',
            'head': self._head,
            'body': [s.to_dict() for s in self._body]
        }

    def __repr__(self) -> str:
        return f'{self._head} -> {" ".join(map(repr, self._body))}'


class CFG:
    '''
    context free grammar: variable id -> productions, plus a start id

    `start_symbol` is None for the grammar of the empty language.
    '''

    def __init__(self, variables: Iterable[str], start_symbol: Optional[str],
                 productions: Iterable[Production]) -> None:
        self._start_symbol = start_symbol
        self._productions: Dict[str, List[Production]] = {}
        for v in variables:
            if v not in self._productions:
                self._productions[v] = []
        if start_symbol is not None and start_symbol not in self._productions:
            raise InvariantViolation(
                f'Start symbol {start_symbol} must be a registered variable!')
        for p in productions:
            if p.head not in self._productions:
                raise InvariantViolation(
                    f'Production.head {p.head} must be a registered variable!')
            for v in p.variables:
                if v not in self._productions:
                    raise InvariantViolation(
                        f'Variable {v} in {p} must be a registered variable!')
            self._productions[p.head].append(p)

    @staticmethod
    def build(start_symbol: Optional[str],
              productions: Iterable[Production]) -> 'CFG':
        '''
        register every head and every referenced variable, then attach the
        productions in their given order
        '''
        productions = list(productions)
        variables: Dict[str, None] = {}
        if start_symbol is not None:
            variables[start_symbol] = None
        for p in productions:
            variables[p.head] = None
            for v in p.variables:
                variables[v] = None
        return CFG(variables, start_symbol, productions)

    @staticmethod
    def empty() -> 'CFG':
        return CFG([], None, [])

    @property
    def start_symbol(self) -> Optional[str]:
        return self._start_symbol

    @property
    def is_empty(self) -> bool:
        return self._start_symbol is None

    @property
    def variables(self) -> List[str]:
        return list(self._productions)

    @property
    def productions(self) -> List[Production]:
        return [p for ps in self._productions.values() for p in ps]

    @property
    def terminals(self) -> List[str]:
        return sorted(
            set(s.value for p in self.productions for s in p.body
                if isinstance(s, Terminal)))

    def productions_of(self, variable: str) -> List[Production]:
        return list(self._productions.get(variable, []))

    def ordered_productions(self, variable: str) -> List[Production]:
        return sorted(self._productions.get(variable, []),
                      key=lambda p: p.order_key())

    def is_variable(self, obj: str) -> bool:
        return obj in self._productions

    def serialize(self) -> str:
        '''
        canonical text form: variables in BFS order from the start symbol,
        each one's productions in `Production.order_key` order
        '''
        if self._start_symbol is None:
            return ''
        visited: Set[str] = {self._start_symbol}
        queue: Deque[str] = deque([self._start_symbol])
        lines: List[str] = []
        while len(queue) != 0:
            v = queue.popleft()
            for p in self.ordered_productions(v):
                for s in p.body:
                    if isinstance(s, Variable) and s.id not in visited:
                        visited.add(s.id)
                        queue.append(s.id)
                lines.append(repr(p))
        return '\n'.join(lines)

    def __eq__(self, __o: object) -> bool:
        if not isinstance(__o, CFG):
            return False
        if self.start_symbol != __o.start_symbol or set(
                self.variables) != set(__o.variables):
            return False
        return all(
            sorted(self._productions[v], key=lambda p: p.order_key()) ==
            __o.ordered_productions(v) for v in self._productions)

    def __repr__(self) -> str:
        if len(self._productions) == 0:
            return ''
        max_name_length = len(max(self._productions, key=lambda a: len(a)))

        def pad(s: str) -> str:
            return s + ' ' * (max_name_length - len(s))

        def format_body(body: Tuple[Symbol, ...]) -> str:
            return ' '.join(map(repr, body))

        def pretty_format(symbol: str) -> str:
            s = ''
            start = True
            for b in self._productions[symbol]:
                if start:
                    s += f'{pad(symbol)} : {format_body(b.body)}'
                    start = False
                    continue
                s += f'\n{" " * max_name_length} | {format_body(b.body)}'
            if start:
                s += f'{pad(symbol)} :'
            s += f'\n{" " * max_name_length} ;'
            return s

        order = list(self._productions)
        if self._start_symbol is not None:
            order.remove(self._start_symbol)
            order.insert(0, self._start_symbol)
        return '\n'.join(pretty_format(s) for s in order)

    @staticmethod
    def from_dict(data: Dict) -> Union['CFG', Production, Symbol]:
        type_name = cast(str, data.get('type'))
        if type_name == 'Terminal':
            return Terminal(cast(str, data.get('value')))
        elif type_name == 'Variable':
            return Variable(cast(str, data.get('id')))
        elif type_name == 'Production':
            return Production.from_dict(data)
        elif type_name != 'CFG':
            raise MalformedInputError(
                f'type field of json object must be `Terminal`, `Variable`, `Production` or `CFG`, requested: {type_name}'
            )
        variables = cast(List[str], data.get('variables'))
        productions = cast(List[Production], data.get('productions'))
        start_symbol = cast(Optional[str], data.get('start_symbol'))
        check_array_type(variables, str, list, 'variables', True)
        check_array_type(productions, Production, list, 'productions', True)
        return CFG(variables, start_symbol, productions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'CFG',
            'variables': self.variables,
            'start_symbol': self._start_symbol,
            'productions': [p.to_dict() for p in self.productions]
        }
