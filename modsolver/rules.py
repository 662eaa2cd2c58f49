"""
Rules are constraints over load options.

Each rule is able to:
  - list the options it ranges over (options);
  - lower itself into pgraph constraints (define);
  - check a tentative assignment (validate);
  - tell why an assignment violates it (explain).

Rules never own options and never snapshot target sets: targets are looked
up in an OptionIndex at the moment a rule is lowered or checked, so a rule
created before its targets were discovered still sees them.
"""

__all__ = [
    "REMOVE_MOD",
    "UPDATE_MOD",
    "ADD_MISSING_DEPENDENCY",
    "CHANGE_ENVIRONMENT",

    "Assignment",
    "rank",

    "Rule",
    "MandatoryDefinition",
    "DisabledDefinition",
    "IdentityGroupDefinition",
    "AliasLink",

    "DependencyLink",
    "DependencyOnly",
    "DependencyAny",

    "BreakLink",
    "BreakOnly",
    "BreakAll",
]


from modsolver.clause import Any
from modsolver.clause import Only
from modsolver.options import ENV_ANY
from modsolver.options import environment_matches


# Remedy categories.
REMOVE_MOD             = 'remove-mod'
UPDATE_MOD             = 'update-mod'
ADD_MISSING_DEPENDENCY = 'add-missing-dependency'
CHANGE_ENVIRONMENT     = 'change-environment'


class Assignment(object):
    """
    Maps options to boolean values. Options missing from the mapping are
    false. Negated options evaluate to the opposite of their operand.
    """

    def __init__(self, values, index):
        super(Assignment, self).__init__()
        self.values = values
        self.index = index

    def __getitem__(self, option):
        value = bool(self.values.get(option.positive, False))
        return value != option.negated

    @property
    def selected(self):
        return [option for option in self.index if self[option]]

    def __repr__(self):
        return '<%s: %s>' % (type(self).__name__, self.selected)


def rank(options, index):
    """
    Options in the order of preference: higher versions first, then earlier
    discovered ones.
    """
    options = sorted(options, key=index.position)
    return sorted(options, key=lambda o: o.version, reverse=True)


def _names(options):
    return ', '.join(option.describe() for option in options) or 'nothing'


class Rule(object):
    """Base class. Rules are immutable once added to a Context."""
    __slots__ = ()

    kind = None        # overridden by subclasses
    relaxable = True   # whether diagnostics may disable the rule
    template = None    # message template for the presentation layer

    def options(self, index):
        raise NotImplementedError

    def define(self, g, index):
        raise NotImplementedError

    def validate(self, assignment):
        raise NotImplementedError

    def explain(self, assignment):
        return self.template.format(**self.params(assignment.index))

    def params(self, index):
        return {}

    def remedy(self, index, disabled=frozenset()):
        """
        Suggested remedy category. 'disabled' is the set of options forced
        off by environment rules.
        """
        return None

    def __repr__(self):
        return '%s(%s)' % (type(self).__name__, self._repr_args())

    def _repr_args(self):
        return ''


class OptionRule(Rule):
    """A rule bound to a single option."""
    __slots__ = 'option',

    def __init__(self, option):
        super(OptionRule, self).__init__()
        self.option = option

    def options(self, index):
        return [self.option]

    def params(self, index):
        option = self.option
        return dict(mod=option.id, version=option.version,
                    origin=option.origin, option=option.describe())

    def _repr_args(self):
        return repr(self.option)


class MandatoryDefinition(OptionRule):
    """The option must be loaded."""
    __slots__ = ()

    kind = 'MandatoryDefinition'
    template = '{option} is mandatory, but it cannot be loaded'

    def define(self, g, index):
        g.require(self.option, why=self)

    def validate(self, assignment):
        return assignment[self.option]

    def remedy(self, index, disabled=frozenset()):
        return REMOVE_MOD


class DisabledDefinition(OptionRule):
    """The option can't be loaded in the current environment."""
    __slots__ = 'environment',

    kind = 'DisabledDefinition'
    template = ("{option} is only for the '{declared}' environment, "
                "but the current environment is '{environment}'")

    def __init__(self, option, environment=ENV_ANY):
        super(DisabledDefinition, self).__init__(option)
        self.environment = environment

    def define(self, g, index):
        g.forbid(self.option, why=self)

    def validate(self, assignment):
        return not assignment[self.option]

    def params(self, index):
        ret = super(DisabledDefinition, self).params(index)
        ret.update(declared=self.option.environment,
                   environment=self.environment)
        return ret

    def remedy(self, index, disabled=frozenset()):
        return CHANGE_ENVIRONMENT


class IdentityGroupDefinition(Rule):
    """
    At most one option of the same mod id may be loaded; exactly one if
    any applicable candidate of that id is mandatory.

    Members are the live options of the id, aliases included.
    """
    __slots__ = 'id', 'environment'

    kind = 'IdentityGroupDefinition'
    template = ("Only one of the mods with id '{mod}' can be loaded: "
                "{candidates}")

    def __init__(self, mod_id, environment=ENV_ANY):
        super(IdentityGroupDefinition, self).__init__()
        self.id = mod_id
        self.environment = environment

    def options(self, index):
        return index.options_for(self.id)

    def mandatory_members(self, index):
        return [option for option in self.options(index)
                if option.mandatory and
                   environment_matches(option.environment, self.environment)]

    def ranked(self, index):
        return rank(self.options(index), index)

    def define(self, g, index):
        members = self.options(index)
        if len(members) > 1:
            g.at_most_one(members, why=self)
        if self.mandatory_members(index):
            g.at_least_one(members, why=self)

    def validate(self, assignment):
        index = assignment.index
        loaded = [option for option in self.options(index)
                  if assignment[option]]
        if len(loaded) > 1:
            return False
        return bool(loaded) or not self.mandatory_members(index)

    def explain(self, assignment):
        index = assignment.index
        loaded = [option for option in self.options(index)
                  if assignment[option]]
        if loaded or not self.mandatory_members(index):
            return super(IdentityGroupDefinition, self).explain(assignment)
        return ("A mod with id '%s' is required, but none of the candidates "
                "can be loaded: %s" % (self.id, _names(self.options(index))))

    def params(self, index):
        return dict(mod=self.id, candidates=_names(self.options(index)))

    def remedy(self, index, disabled=frozenset()):
        return REMOVE_MOD

    def _repr_args(self):
        return repr(self.id)


class AliasLink(Rule):
    """A provided identity is loaded if and only if its target is."""
    __slots__ = 'alias',

    kind = 'AliasLink'
    relaxable = False
    template = '{alias} is provided by {target}'

    def __init__(self, alias):
        super(AliasLink, self).__init__()
        self.alias = alias

    def options(self, index):
        return [self.alias, self.alias.target]

    def define(self, g, index):
        g.equivalent(self.alias, self.alias.target, why=self)

    def validate(self, assignment):
        return assignment[self.alias] == assignment[self.alias.target]

    def params(self, index):
        return dict(alias=self.alias.id, target=self.alias.target.describe())

    def _repr_args(self):
        return repr(self.alias)


class LinkRule(Rule):
    """Common part of dependency and break links."""
    __slots__ = 'source', 'clause'

    form = None  # overridden by subclasses

    def __init__(self, source, clause):
        super(LinkRule, self).__init__()
        self.source = source
        self.clause = clause

    def targets(self, index):
        return index.matching(self.clause, exclude=self.source)

    def options(self, index):
        return [self.source] + self.targets(index)

    def params(self, index):
        return dict(mod=self.source.id, version=self.source.version,
                    origin=self.source.origin, option=self.source.describe(),
                    clause=str(self.clause),
                    ids=', '.join(self.clause.ids),
                    targets=_names(self.targets(index)))

    def _repr_args(self):
        return '%r, %s' % (self.source, self.clause)


class DependencyLink(LinkRule):
    """
    If the source is loaded, at least one option satisfying the clause
    must be loaded too.
    """
    __slots__ = ()

    kind = 'DependencyLink'

    @classmethod
    def rules_for(cls, source, clause):
        """
        Rules for a declared dependency. A conjunction of ids means a
        dependency on each of them.
        """
        if isinstance(clause, Only):
            return [DependencyOnly(source, clause)]
        if isinstance(clause, Any):
            return [DependencyAny(source, clause)]
        return [DependencyOnly(source, only) for only in clause.active()]

    def define(self, g, index):
        g.implies_any(self.source, self.targets(index), why=self)

    def validate(self, assignment):
        if not assignment[self.source]:
            return True
        return any(assignment[target]
                   for target in self.targets(assignment.index))

    def remedy(self, index, disabled=frozenset()):
        if not any(index.options_for(mod_id) for mod_id in self.clause.ids):
            return ADD_MISSING_DEPENDENCY
        targets = self.targets(index)
        if targets and all(target.target in disabled for target in targets):
            return CHANGE_ENVIRONMENT
        return UPDATE_MOD


class DependencyOnly(DependencyLink):
    __slots__ = ()

    form = 'Only'
    template = '{option} requires {clause}'

    def explain(self, assignment):
        index = assignment.index
        params = self.params(index)
        present = index.options_for(self.clause.id)
        if not present:
            return '{option} requires {clause}, which is missing'.format(
                    **params)
        if not self.targets(index):
            return '{option} requires {clause}, but only {present} is ' \
                   'present'.format(present=_names(present), **params)
        return '{option} requires {clause}, but {targets} cannot be ' \
               'loaded'.format(**params)


class DependencyAny(DependencyLink):
    __slots__ = ()

    form = 'Any'
    template = '{option} requires any of {clause}, but none can be loaded'


class BreakLink(LinkRule):
    """
    If the source is loaded, no option matching the clause may be loaded.
    """
    __slots__ = ()

    kind = 'BreakLink'

    @classmethod
    def rules_for(cls, source, clause):
        if isinstance(clause, Only):
            return [BreakOnly(source, clause)]
        return [BreakAll(source, clause)]

    def define(self, g, index):
        for target in self.targets(index):
            g.neglast([self.source, target], why=self)

    def loaded_targets(self, assignment):
        return [target for target in self.targets(assignment.index)
                if assignment[target]]

    def validate(self, assignment):
        if not assignment[self.source]:
            return True
        return not self.loaded_targets(assignment)

    def explain(self, assignment):
        return self.template.format(
                loaded=_names(self.loaded_targets(assignment)),
                **self.params(assignment.index))

    def remedy(self, index, disabled=frozenset()):
        if all(only.range.is_any for only in self.clause.active()):
            return REMOVE_MOD
        return UPDATE_MOD


class BreakOnly(BreakLink):
    __slots__ = ()

    form = 'Only'
    template = '{option} is incompatible with {clause}, but {loaded} is present'


class BreakAll(BreakLink):
    __slots__ = ()

    form = 'All'
    template = ('{option} is incompatible with each of {clause}, '
                'but {loaded} is present')
