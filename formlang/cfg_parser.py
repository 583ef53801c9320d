from ply.lex import Lexer, lex
from ply.yacc import LRParser, yacc
from typing import List, Optional, cast
from formlang.cfg import CFG, Production, Terminal, Variable
from formlang.utils import MalformedInputError, Token, Rule

# one production per line:
#   A -> B "a" C
# quoted tokens are terminals, bare tokens are variables,
# the head of the first line is the start symbol


class CfgParser:

    def __init__(self) -> None:
        self.lexer: Lexer = lex(object=self)
        self.parser: LRParser = yacc(module=self,
                                     start='production_list',
                                     debug=False,
                                     write_tables=False)

    tokens = ('NEWLINE', 'ARROW', 'TERMINAL', 'VARIABLE')

    # ignore whitespace and horizontal tabulate character
    t_ignore = ' \t\r'

    # blank lines collapse into one separator
    @Token(r'\n(?:[ \t\r]*\n)*')
    def t_NEWLINE(self, t):
        t.lexer.lineno += t.value.count('\n')
        return t

    # must come before VARIABLE, which would swallow it
    @Token(r'->')
    def t_ARROW(self, t):
        return t

    @Token(r'"[^"\s]+"')
    def t_TERMINAL(self, t):
        # 去除两端的引号
        t.value = Terminal(t.value[1:-1])
        return t

    @Token(r'[^\s"]+')
    def t_VARIABLE(self, t):
        t.value = Variable(t.value)
        return t

    def t_error(self, t):
        raise MalformedInputError(f'Illegal string {t.value[:10]!r}',
                                  t.lexer.lineno)

    def p_error(self, p):
        if p is None:
            raise MalformedInputError('Unexpected end of input, bad product')
        raise MalformedInputError(f'Syntax error at {p.value!r}, bad product',
                                  p.lineno)

    @Rule('''
    production_list : production
                    | production NEWLINE production_list
    ''')
    def p_production_list(self, p):
        if len(p) == 2:
            p[0] = [p[1]]
        elif len(p) == 4:
            p[3].insert(0, p[1])
            p[0] = p[3]

    @Rule('''
    production : VARIABLE ARROW symbol_list
    ''')
    def p_production(self, p):
        head = cast(Variable, p[1])
        p[0] = Production(head.id, p[3])

    @Rule('''
    symbol_list : symbol
                | symbol symbol_list
    ''')
    def p_symbol_list(self, p):
        if len(p) == 2:
            p[0] = [p[1]]
        elif len(p) == 3:
            p[2].insert(0, p[1])
            p[0] = p[2]

    @Rule('''
    symbol : VARIABLE
           | TERMINAL
    ''')
    def p_symbol(self, p):
        p[0] = p[1]

    def parse(self, input: str) -> CFG:
        input = input.strip()
        if len(input) == 0:
            return CFG.empty()
        self.lexer.lineno = 1
        productions = cast(Optional[List[Production]],
                           self.parser.parse(input, lexer=self.lexer))
        if productions is None:
            raise MalformedInputError('bad grammar format')
        return CFG.build(productions[0].head, productions)


parser = CfgParser()


def cfg_deserialize(s: str) -> CFG:
    return parser.parse(s)


def cfg_serialize(cfg: CFG) -> str:
    return cfg.serialize()
