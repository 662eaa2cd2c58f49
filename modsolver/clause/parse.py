"""
PLY-based parser for dependency clauses.

Grammar sketch:

    clause : only
           | ID ( only, ... )     -- 'any' or 'all'
    only   : [group:]id ['?'] ["range"]
"""

import threading

import ply.yacc

from modsolver.errors import ClauseSyntaxError

from . import lex
from .lex import tokens


def p_clause_0(p):
    """clause : only"""
    p[0] = p[1]

def p_clause_1(p):
    """clause : ID LPAREN only_list RPAREN"""
    # yacc would take a SyntaxError raised here for a request of recovery
    try:
        compound = p.parser.compounds[p[1].lower()]
    except KeyError:
        p.parser.error = ClauseSyntaxError("Unknown clause combinator '%s', "
                                           "expected 'any' or 'all'" % p[1],
                                           p.parser.text, p.lexpos(1))
        p[0] = None
    else:
        p[0] = compound(reversed(p[3]))


def p_only_list_0(p):
    """only_list : only"""
    p[0] = [p[1]]
def p_only_list_1(p):
    """only_list : only COMMA only_list"""
    l = p[0] = p[3]
    l.append(p[1])


def p_only(p):
    """only : name optional range"""
    group, mod_id = p[1]
    p[0] = p.parser.only(mod_id, p[3], group=group, optional=p[2])


def p_name_0(p):
    """name : ID"""
    p[0] = (None, p[1])

def p_name_1(p):
    """name : ID COLON ID"""
    p[0] = (p[1], p[3])


def p_optional(p):
    """optional : empty
       optional : QUESTION"""
    p[0] = p[1] is not None

def p_range(p):
    """range : empty
       range : STRING"""
    p[0] = p[1]


def p_empty(p):
    """empty : """
    pass

def p_error(t):
    if t is None:
        raise ClauseSyntaxError('Unexpected end of clause')
    raise ClauseSyntaxError('Unexpected %s token %r' % (t.type, t.value),
                            t.lexer.lexdata, t.lexpos)


parser = ply.yacc.yacc(method='LALR', write_tables=False, debug=False)
_parser_lock = threading.Lock()


# The main entry point.

def parse(text, only, compounds):
    """
    Parses a clause and returns the result.

    Args:
        text (str) - clause to parse
        only (callable) - factory for single id clauses,
            called as only(id, range, group=..., optional=...)
        compounds (dict) - factories for compound clauses keyed by the
            lowercase combinator name, each taking an iterable of clauses

    Returns:
        whatever the factories produce for the outermost clause
    """
    if not text or not text.strip():
        raise ClauseSyntaxError('Empty clause', text)

    with _parser_lock:
        parser.text = text
        parser.only = only
        parser.compounds = compounds
        parser.error = None
        try:
            result = parser.parse(text, lexer=lex.lexer.clone())
            if parser.error is not None:
                raise parser.error
            return result
        except ClauseSyntaxError as e:
            if e.text is None:
                e.text = text
            raise
        finally:
            del parser.text, parser.only, parser.compounds, parser.error
