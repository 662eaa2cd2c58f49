"""
Dependency and break clauses declared by mod candidates.

A clause is an immutable value: overrides look clauses up by equality in
order to substitute them before any rule gets constructed.
"""

__all__ = [
    "Clause",
    "Only",
    "Any",
    "All",
    "parse_clause",
    "to_clause",
]


from collections import namedtuple

from modsolver.version import VersionRange
from modsolver.version import parse_range


class Clause(object):
    """Common base for clause types, each exposing a tuple of members."""
    __slots__ = ()

    @property
    def should_ignore(self):
        return all(only.optional for only in self.members)

    @property
    def ids(self):
        return [only.id for only in self.members]

    def active(self):
        """Returns member clauses that are not ignored."""
        return [only for only in self.members if not only.optional]


class Only(Clause, namedtuple('_Only', 'id, range, group, optional')):
    """A single mod id with a version range."""
    __slots__ = ()

    def __new__(cls, id, range=None, group=None, optional=False):
        return super(Only, cls).__new__(cls, id, parse_range(range),
                                        group or None, bool(optional))

    @property
    def members(self):
        return (self,)

    def matches(self, option):
        """Whether an option (candidate or alias) satisfies this clause."""
        return (option.id == self.id and
                (self.group is None or option.group == self.group) and
                self.range.matches(option.version))

    @property
    def qualified_id(self):
        if self.group is None:
            return self.id
        return '%s:%s' % (self.group, self.id)

    def __eq__(self, other):
        if not isinstance(other, Only):
            return NotImplemented
        return tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((Only, tuple.__hash__(self)))

    def __str__(self):
        ret = self.qualified_id
        if self.optional:
            ret += '?'
        if not self.range.is_any:
            ret += ' "%s"' % self.range
        return ret

    def __repr__(self):
        return 'Only(%s)' % self


class CompoundClause(Clause):
    __slots__ = ()

    combinator = None  # overridden by subclasses

    def __new__(cls, members):
        members = tuple(members)
        if not members:
            raise ValueError('%s clause needs at least one member' %
                             cls.combinator)
        for member in members:
            if not isinstance(member, Only):
                raise TypeError('%s clause members must be Only clauses, '
                                'got %r' % (cls.combinator, member))
        return super(CompoundClause, cls).__new__(cls, members)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.members == other.members

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self), self.members))

    def __str__(self):
        return '%s(%s)' % (self.combinator, ', '.join(map(str, self.members)))

    __repr__ = __str__


class Any(CompoundClause, namedtuple('_Any', 'members')):
    """Disjunction: any one of the alternatives satisfies a dependency."""
    __slots__ = ()
    combinator = 'any'


class All(CompoundClause, namedtuple('_All', 'members')):
    """Conjunction: every member is excluded by a break."""
    __slots__ = ()
    combinator = 'all'


_compounds = {
    Any.combinator: Any,
    All.combinator: All,
}


def parse_clause(text):
    """
    Parses clause text, for example:

        fabric-api ">=0.50 <1.0"
        builtin:python ">=3.8"
        sodium? ">=0.4"
        any(a ">=1", b)
        all(a, b "<2")

    Raises ClauseSyntaxError on malformed input.
    """
    from modsolver.clause.parse import parse
    return parse(text, Only, _compounds)


def to_clause(value):
    """
    Converts a clause, a clause string or an (id, range) pair into a clause.
    """
    if isinstance(value, Clause):
        return value
    if isinstance(value, str):
        return parse_clause(value)
    if isinstance(value, (tuple, list)) and len(value) == 2:
        mod_id, range_ = value
        if isinstance(range_, (str, VersionRange)) or range_ is None:
            return Only(mod_id, range_)
    raise TypeError('Expected a clause, got %r' % (value,))
