"""
Load options: boolean decision variables of a resolution run.
"""

__all__ = [
    "ENV_ANY",
    "environment_matches",

    "ProvidedMod",
    "CandidateInfo",

    "LoadOption",
    "ModCandidateOption",
    "AliasOption",
    "NegatedOption",

    "OptionIndex",
]


from collections import namedtuple

from modsolver.clause import to_clause
from modsolver.version import parse_version


ENV_ANY = '*'

def environment_matches(declared, current):
    """A candidate declared for '*' runs anywhere, a run of '*' takes all."""
    return ENV_ANY in (declared, current) or declared == current


class ProvidedMod(namedtuple('_ProvidedMod', 'id, group, version')):
    """An extra identity a candidate declares it provides."""
    __slots__ = ()

    def __new__(cls, id, group=None, version=None):
        if version is not None:
            version = parse_version(version)
        return super(ProvidedMod, cls).__new__(cls, id, group, version)

    @classmethod
    def of(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            group, sep, mod_id = value.rpartition(':')
            return cls(mod_id, group or None)
        return cls(*value)


class CandidateInfo(namedtuple('_CandidateInfo',
        'id, group, version, mandatory, environment, '
        'depends, breaks, provides, origin, nested, '
        'define_provides, define_dependencies')):
    """
    Declarative facts a discovery collaborator reports for one candidate
    location. Clauses may be given as clause objects or clause strings.

    A candidate that handles its own relations clears define_provides or
    define_dependencies to keep the standard alias, or dependency and
    break, rules from being derived for it.
    """
    __slots__ = ()

    def __new__(cls, id, version, group='', mandatory=False,
                environment=ENV_ANY, depends=(), breaks=(), provides=(),
                origin=None, nested=(), define_provides=True,
                define_dependencies=True):
        return super(CandidateInfo, cls).__new__(cls,
                id, group or '', parse_version(version), bool(mandatory),
                environment or ENV_ANY,
                tuple(map(to_clause, depends)),
                tuple(map(to_clause, breaks)),
                tuple(map(ProvidedMod.of, provides)),
                origin if origin is not None else '<%s>' % id,
                tuple(nested), bool(define_provides),
                bool(define_dependencies))


def _canonical(option):
    """'group:id', or just the id for ungrouped options."""
    if not option.group:
        return option.id
    return '%s:%s' % (option.group, option.id)


class LoadOption(object):
    """
    Base for option kinds. Options compare and hash by their identity, which
    is a plain tuple; they never reference rules.
    """
    __slots__ = ()

    kind = None  # overridden by subclasses

    @property
    def identity(self):
        raise NotImplementedError

    @property
    def positive(self):
        """The underlying non-negated option."""
        return self

    @property
    def negated(self):
        return False

    def __invert__(self):
        return NegatedOption(self)

    def __eq__(self, other):
        if not isinstance(other, LoadOption):
            return NotImplemented
        return self.identity == other.identity

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.identity)

    def describe(self):
        return repr(self)


class ModCandidateOption(LoadOption):
    """One physical mod candidate."""
    __slots__ = ('id', 'group', 'version', 'mandatory', 'environment',
                 'depends', 'breaks', 'provides', 'origin', 'nested',
                 'define_provides', 'define_dependencies',
                 'source', 'builtin', '_index', '_identity')

    kind = 'mod'

    canonical = property(_canonical)

    @property
    def identity(self):
        return self._identity

    @property
    def index(self):
        """Discovery order, assigned once the option is registered."""
        return self._index

    @property
    def target(self):
        return self

    def __init__(self, info, source=None, builtin=False):
        super(ModCandidateOption, self).__init__()

        for field in info._fields:
            setattr(self, field, getattr(info, field))

        self.source = source
        self.builtin = builtin
        self._index = None
        self._identity = (self.kind, self.group, self.id,
                          str(self.version), self.origin, source)

    @classmethod
    def of(cls, *args, **kwargs):
        """Shortcut: ModCandidateOption.of('a', '1.0', mandatory=True)."""
        source = kwargs.pop('source', None)
        return cls(CandidateInfo(*args, **kwargs), source=source)

    def _assign_index(self, index):
        if self._index is not None:
            raise ValueError('%r is already registered' % self)
        self._index = index

    def describe(self):
        return "'%s' %s (%s)" % (self.id, self.version, self.origin)

    def __repr__(self):
        return '%s@%s' % (self.id, self.version)


class AliasOption(LoadOption):
    """
    A provided identity: when active, its target candidate is active too.
    Holds a back-reference to the target, never owning it.
    """
    __slots__ = 'id', 'group', 'version', 'target', '_identity'

    kind = 'alias'

    mandatory = False
    depends = breaks = provides = nested = ()

    canonical = property(_canonical)

    @property
    def identity(self):
        return self._identity

    @property
    def index(self):
        return self.target.index

    @property
    def environment(self):
        return self.target.environment

    @property
    def origin(self):
        return self.target.origin

    def __init__(self, target, provided):
        super(AliasOption, self).__init__()

        if provided.id == target.id:
            raise ValueError('%r cannot provide its own id' % target)

        self.target = target
        self.id = provided.id
        self.group = provided.group or target.group
        self.version = (provided.version if provided.version is not None
                        else target.version)
        self._identity = (self.kind, self.group, self.id,
                          str(self.version), target.identity)

    def describe(self):
        return "'%s' %s (provided by %s)" % (self.id, self.version,
                                             self.target.describe())

    def __repr__(self):
        return '%s@%s(via %r)' % (self.id, self.version, self.target)


class NegatedOption(LoadOption):
    """'This option is false'. Used inside rule clauses only."""
    __slots__ = 'option',

    kind = 'not'

    @property
    def identity(self):
        return (self.kind, self.option.identity)

    @property
    def positive(self):
        return self.option

    @property
    def negated(self):
        return True

    def __init__(self, option):
        super(NegatedOption, self).__init__()
        if isinstance(option, NegatedOption):
            raise TypeError('Use ~option to negate a negation')
        self.option = option

    def __invert__(self):
        return self.option

    def describe(self):
        return 'not %s' % self.option.describe()

    def __repr__(self):
        return '~%r' % (self.option,)


class OptionIndex(object):
    """
    Secondary index from mod ids to options (candidates and aliases) in
    registration order. Identity groups and clause targets are looked up
    here, against the complete option universe.
    """

    def __init__(self, options=()):
        super(OptionIndex, self).__init__()
        self.options = []
        self._by_id = {}
        self._positions = {}

        for option in options:
            self.add(option)

    def add(self, option):
        if option in self._positions:
            return
        self._positions[option] = len(self.options)
        self.options.append(option)
        self._by_id.setdefault(option.id, []).append(option)

    def __contains__(self, option):
        return option.positive in self._positions

    def __len__(self):
        return len(self.options)

    def __iter__(self):
        return iter(self.options)

    def position(self, option):
        """Registration order within this index."""
        return self._positions[option.positive]

    def ids(self):
        return list(self._by_id)

    def options_for(self, mod_id):
        return list(self._by_id.get(mod_id, ()))

    def matching(self, clause, exclude=None):
        """
        Returns options satisfying any active member of a clause, keeping
        index order. Options of the 'exclude' candidate (itself and its
        aliases) are left out.
        """
        ret = []
        for only in clause.active():
            for option in self._by_id.get(only.id, ()):
                if exclude is not None and option.target == exclude:
                    continue
                if option not in ret and only.matches(option):
                    ret.append(option)
        return ret
