import logging
from collections import deque
from itertools import product
from typing import Callable, Deque, List, Dict, Tuple, Set, Optional, Iterable
from typing_extensions import TypeAlias
from prettytable import PrettyTable

from formlang.cfg import CFG, EPSILON, Production, Symbol, Terminal, Variable
from formlang.utils import CHAIN_PREFIX, START_PREFIX, TERMINAL_PREFIX, InvariantViolation, NameAllocator

logger = logging.getLogger(__name__)

ProductionPredicate: TypeAlias = Callable[[Production], bool]

UnitPair: TypeAlias = Tuple[str, str]


def infer(cfg: CFG,
          direct: ProductionPredicate,
          viable: Optional[ProductionPredicate] = None) -> Set[str]:
    '''
    variables for which some production has every variable of its body
    already satisfied, starting from the productions accepted by `direct`.

    `viable` drops productions that can never witness the property (e.g.
    ones holding a real terminal when looking for nullable variables).
    Each variable is propagated once and each occurrence of a variable in
    a body is counted down once, so mutual recursion needs no re-scan.
    '''
    productions = cfg.productions
    # number of body variables not yet known to be satisfied
    remaining: List[int] = [len(p.variables) for p in productions]
    # variable -> productions it occurs in (once per occurrence)
    dependents: Dict[str, List[int]] = {}
    satisfied: Set[str] = set()
    stack: List[str] = []

    for index, p in enumerate(productions):
        if viable is not None and not viable(p):
            continue
        for v in p.variables:
            if dependents.get(v) is None:
                dependents[v] = []
            dependents[v].append(index)
        if direct(p) and p.head not in satisfied:
            satisfied.add(p.head)
            stack.append(p.head)

    while len(stack) != 0:
        v = stack.pop(-1)
        for index in dependents.get(v, []):
            remaining[index] -= 1
            if remaining[index] < 0:
                raise InvariantViolation(
                    f'dependency counter of {productions[index]} dropped below zero'
                )
            if remaining[index] == 0:
                head = productions[index].head
                if head not in satisfied:
                    satisfied.add(head)
                    stack.append(head)
    return satisfied


def _all_terminal(p: Production) -> bool:
    return all(isinstance(s, Terminal) for s in p.body)


def _all_epsilon(p: Production) -> bool:
    return all(s == EPSILON for s in p.body)


def _epsilon_or_variable(p: Production) -> bool:
    return all(s == EPSILON or isinstance(s, Variable) for s in p.body)


def _log_set(title: str, cfg: CFG, symbols: Set[str]) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        table = PrettyTable(['V', title])
        for v in cfg.variables:
            table.add_row([v, v in symbols])
        logger.debug('%s symbols:\n%s', title, table)


def generating_variables(cfg: CFG) -> Set[str]:
    generating = infer(cfg, _all_terminal)
    _log_set('generating', cfg, generating)
    return generating


def nullable_variables(cfg: CFG) -> Set[str]:
    nullable = infer(cfg, _all_epsilon, _epsilon_or_variable)
    _log_set('nullable', cfg, nullable)
    return nullable


def reachable_variables(cfg: CFG) -> Set[str]:
    if cfg.start_symbol is None:
        return set()
    reachable: Set[str] = {cfg.start_symbol}
    queue: Deque[str] = deque([cfg.start_symbol])
    while len(queue) != 0:
        v = queue.popleft()
        for p in cfg.productions_of(v):
            for u in p.variables:
                if u not in reachable:
                    reachable.add(u)
                    queue.append(u)
    return reachable


def eliminate_unreachable(cfg: CFG) -> CFG:
    '''
    keep the variables a BFS from the start symbol visits; the start stays
    registered even when it has no production left
    '''
    reachable = reachable_variables(cfg)
    return CFG([v for v in cfg.variables if v in reachable], cfg.start_symbol,
               [p for p in cfg.productions if p.head in reachable])


def eliminate_nongenerating(cfg: CFG) -> CFG:
    generating = generating_variables(cfg)
    start_symbol = cfg.start_symbol
    if start_symbol not in generating:
        logger.debug('start symbol %s is not generating, L(G) is empty',
                     start_symbol)
        start_symbol = None
    new_productions = [
        p for p in cfg.productions
        if p.head in generating and all(v in generating for v in p.variables)
    ]
    return CFG([v for v in cfg.variables if v in generating], start_symbol,
               new_productions)


def eliminate_useless(cfg: CFG) -> CFG:
    return eliminate_unreachable(eliminate_nongenerating(cfg))


def strip_epsilon(p: Production) -> Production:
    '''
    drop epsilon terminals mixed with other symbols, A -> "epsilon" B
    becomes A -> B; a body of nothing but epsilon becomes A -> "epsilon"
    '''
    if len(p.body) <= 1:
        return p
    body = [s for s in p.body if s != EPSILON]
    if len(body) == 0:
        body = [EPSILON]
    return Production(p.head, body)


def _expand(body: Tuple[Symbol, ...],
            nullable: Set[str]) -> Iterable[List[Symbol]]:
    choices: List[Tuple[bool, ...]] = []
    for s in body:
        if s == EPSILON or (isinstance(s, Variable) and s.id in nullable):
            choices.append((True, False))
        else:
            choices.append((True, ))
    # every way of dropping nullable positions, but never all of them
    for keep in product(*choices):
        new_body = [s for s, k in zip(body, keep) if k]
        if len(new_body) != 0:
            yield new_body


def eliminate_epsilon(cfg: CFG) -> CFG:
    stripped = CFG(cfg.variables, cfg.start_symbol,
                   [strip_epsilon(p) for p in cfg.productions])
    nullable = nullable_variables(stripped)
    if cfg.start_symbol in nullable:
        logger.debug(
            'L(G) contains epsilon, only %s -> "epsilon" will derive it',
            cfg.start_symbol)

    # ordered set of productions
    new_productions: Dict[Production, None] = {}
    for p in stripped.productions:
        if p.is_epsilon:
            continue
        for body in _expand(p.body, nullable):
            new_productions[Production(p.head, body)] = None
    if cfg.start_symbol is not None and cfg.start_symbol in nullable:
        new_productions[Production(cfg.start_symbol, [EPSILON])] = None
    return CFG(cfg.variables, cfg.start_symbol, new_productions)


def _partition(
    cfg: CFG
) -> Tuple[Dict[str, List[str]], Dict[str, List[Production]]]:
    unit: Dict[str, List[str]] = {}
    non_unit: Dict[str, List[Production]] = {}
    for v in cfg.variables:
        unit[v] = []
        non_unit[v] = []
        for p in cfg.productions_of(v):
            if len(p.body) == 0:
                raise InvariantViolation(
                    f'production of {v} with an empty body reached unit pair analysis'
                )
            if p.is_unit:
                unit[v].append(p.variables[0])
            else:
                non_unit[v].append(p)
    return unit, non_unit


def _close_unit_pairs(
        cfg: CFG, unit: Dict[str, List[str]]) -> Dict[str, Dict[str, None]]:
    variables = cfg.variables
    # A -> {B | (A, B) is a unit pair}, insertion ordered
    pairs: Dict[str, Dict[str, None]] = {}
    for v in variables:
        pairs[v] = {v: None}
        for target in unit[v]:
            pairs[v][target] = None
    # warshall: every path through m is added once m is processed
    for m in variables:
        destinations = list(pairs[m])
        for a in variables:
            if m not in pairs[a]:
                continue
            for b in destinations:
                pairs[a][b] = None
    return pairs


def unit_pairs(cfg: CFG) -> Set[UnitPair]:
    unit, _ = _partition(cfg)
    pairs = _close_unit_pairs(cfg, unit)
    return set((a, b) for a, bs in pairs.items() for b in bs)


def eliminate_unit_pairs(cfg: CFG) -> CFG:
    unit, non_unit = _partition(cfg)
    pairs = _close_unit_pairs(cfg, unit)

    if logger.isEnabledFor(logging.DEBUG):
        table = PrettyTable(['V', 'UNIT PAIRS'])
        for a, bs in pairs.items():
            table.add_row([a, ','.join(bs)])
        logger.debug('unit pairs:\n%s', table)

    new_productions: Dict[Production, None] = {}
    for a, bs in pairs.items():
        for b in bs:
            for p in non_unit[b]:
                new_productions[Production(a, p.body)] = None
    return CFG(cfg.variables, cfg.start_symbol, new_productions)


def binarize(cfg: CFG,
             chain_prefix: str = CHAIN_PREFIX,
             terminal_prefix: str = TERMINAL_PREFIX) -> CFG:
    '''
    rewrite every production into a body of at most 2 symbols, where
    bodies of 2 symbols hold variables only:
    terminals inside longer bodies move into fresh variables (T0 -> "a"),
    then A -> X1 X2 ... Xn becomes A -> X1 V0, V0 -> X2 V1, ..., -> Xn-1 Xn
    '''
    productions = [strip_epsilon(p) for p in cfg.productions]
    variables = cfg.variables

    terminal_allocator = NameAllocator(terminal_prefix, variables)
    terminal_map: Dict[Terminal, str] = {}
    lifted: List[Production] = []
    for p in productions:
        if len(p.body) < 2:
            lifted.append(p)
            continue
        body: List[Symbol] = []
        for s in p.body:
            if isinstance(s, Terminal):
                if terminal_map.get(s) is None:
                    terminal_map[s] = terminal_allocator.next
                s = Variable(terminal_map[s])
            body.append(s)
        lifted.append(Production(p.head, body))
    lifted.extend(Production(v, [t]) for t, v in terminal_map.items())

    chain_allocator = NameAllocator(chain_prefix,
                                    [*variables, *terminal_allocator.names])
    new_productions: List[Production] = []
    for p in lifted:
        head = p.head
        rest = list(p.body)
        while len(rest) > 2:
            n = chain_allocator.next
            new_productions.append(Production(head, [rest[0], Variable(n)]))
            head = n
            rest = rest[1:]
        new_productions.append(Production(head, rest))

    return CFG([*variables, *terminal_allocator.names, *chain_allocator.names],
               cfg.start_symbol, new_productions)


def separate_start(cfg: CFG, start_prefix: str = START_PREFIX) -> CFG:
    '''
    add S0 -> S when the start symbol S occurs in a body, so that the only
    epsilon production left by eliminate_epsilon is never copied into
    another variable by eliminate_unit_pairs
    '''
    start_symbol = cfg.start_symbol
    if start_symbol is None or not any(start_symbol in p.variables
                                       for p in cfg.productions):
        return cfg
    new_start = NameAllocator(start_prefix, cfg.variables).next
    return CFG([new_start, *cfg.variables], new_start,
               [Production(new_start, [Variable(start_symbol)]),
                *cfg.productions])


def to_normal_form(cfg: CFG) -> CFG:
    new_cfg = separate_start(cfg)
    new_cfg = binarize(new_cfg)
    new_cfg = eliminate_epsilon(new_cfg)
    new_cfg = eliminate_unit_pairs(new_cfg)
    new_cfg = eliminate_useless(new_cfg)
    return new_cfg


def is_normal_form(cfg: CFG) -> bool:
    # A -> BC or A -> a, S -> epsilon only for the start symbol
    for p in cfg.productions:
        if p.is_epsilon:
            if p.head == cfg.start_symbol:
                continue
            return False
        if len(p.body) == 1 and isinstance(p.body[0], Terminal):
            continue
        if len(p.body) == 2 and all(isinstance(s, Variable) for s in p.body):
            continue
        return False
    return True
