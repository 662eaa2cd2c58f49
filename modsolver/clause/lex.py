"""
Lexer definitions for the dependency clause grammar.
"""

import ply.lex

from modsolver.errors import ClauseSyntaxError


tokens = (
    # Literals (identifier, quoted version range)
    'ID', 'STRING',

    # Delimeters ( ) , : ?
    'LPAREN', 'RPAREN',
    'COMMA', 'COLON', 'QUESTION',
)

# Completely ignored characters
t_ignore           = ' \t\r\n'

# Delimeters
t_LPAREN           = r'\('
t_RPAREN           = r'\)'
t_COMMA            = r','
t_COLON            = r':'
t_QUESTION         = r'\?'

# Mod ids and groups: "fabric-api", "org.quiltmc", "my_mod"
t_ID               = r'[A-Za-z0-9_][\w.\-]*'

def t_STRING(t):
    r'\"[^\"\n]*\"|\'[^\'\n]*\''
    t.value = t.value[1:-1]
    return t

def t_error(t):
    raise ClauseSyntaxError('Illegal character %r' % t.value[0],
                            t.lexer.lexdata, t.lexpos)

lexer = ply.lex.lex()
