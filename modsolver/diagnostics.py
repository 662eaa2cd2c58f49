"""
Explains why there is no solution.

The builder looks for a small set of rules which, once disabled, make the
problem satisfiable again:

  1. whole rule classes are relaxed one at a time, in priority order;
  2. if no single class helps, cumulative prefixes of that order are tried;
  3. the relaxed set is narrowed to the rules the found solution violates,
     then minimized greedily: a rule stays relaxed only if turning it back
     on breaks the solution again.

Each rule left in the set becomes one Diagnostic.
"""

__all__ = [
    "Diagnostic",
    "RELAXATION_ORDER",
    "diagnose",
    "fallback_diagnostics",
]


from modsolver.config import ResolverConfig
from modsolver.errors import SolverIterationLimit
from modsolver.rules import Assignment
from modsolver.rules import BreakLink
from modsolver.rules import DependencyLink
from modsolver.rules import DisabledDefinition
from modsolver.rules import IdentityGroupDefinition
from modsolver.rules import MandatoryDefinition
from modsolver.util import get_extended_logger

logger = get_extended_logger(__name__)


RELAXATION_ORDER = [
    IdentityGroupDefinition,
    BreakLink,
    DependencyLink,
    (MandatoryDefinition, DisabledDefinition),
]


class Diagnostic(object):
    """
    A single reason of failure, bound to the rule it comes from.

    'options' lists canonical identities of the options the rule ranges
    over. 'template' and 'params' let a presentation layer build its own
    text; 'message' is the ready-made English one.
    """
    __slots__ = 'kind', 'options', 'template', 'params', 'remedy', 'rule', \
                'message'

    def __init__(self, rule, index, message, remedy=None):
        super(Diagnostic, self).__init__()

        self.rule = rule
        self.kind = rule.kind
        self.options = [_identity_string(option)
                        for option in rule.options(index)]
        self.template = rule.template
        self.params = rule.params(index)
        self.remedy = remedy
        self.message = message

    def render(self):
        if self.remedy is None:
            return self.message
        return '%s (suggested: %s)' % (self.message, self.remedy)

    def __repr__(self):
        return '<%s %s: %s>' % (type(self).__name__, self.kind, self.message)


def _identity_string(option):
    try:
        return option.canonical
    except AttributeError:
        return option.describe()


class _RelaxationLimit(Exception):
    pass


class Relaxer(object):
    """Bookkeeping of solve attempts made on behalf of one diagnosis."""

    _dump_attrs = ['attempts', 'relaxed']

    def __init__(self, problem, config):
        super(Relaxer, self).__init__()

        self.problem = problem
        self.config = config
        self.attempts = 0
        self.relaxed = None
        self.assignment = None

    def attempt(self, disabled):
        """Returns an assignment or None; counts against the limit."""
        self.attempts += 1
        if self.attempts > self.config.relaxation_limit:
            raise _RelaxationLimit()

        return self.problem.solve(frozenset(disabled),
                                  iteration_limit=self.config.iteration_limit)

    def classes(self):
        relaxable = [rule for rule in self.problem.rules if rule.relaxable]

        ret = []
        for cls in RELAXATION_ORDER:
            rules = [rule for rule in relaxable if isinstance(rule, cls)]
            if rules:
                ret.append(rules)
        return ret

    def find(self):
        classes = self.classes()

        for rules in classes:
            assignment = self.attempt(rules)
            if assignment is not None:
                logger.debug('relaxing %s helps', type(rules[0]).__name__)
                return rules, assignment

        prefix = []
        for i, rules in enumerate(classes):
            prefix += rules
            if not i:
                continue  # the same as the first class
            assignment = self.attempt(prefix)
            if assignment is not None:
                logger.debug('relaxing %d classes helps', i + 1)
                return list(prefix), assignment

        return None, None

    @staticmethod
    def violated(rules, assignment):
        return [rule for rule in rules if not rule.validate(assignment)]

    def minimize(self, relaxed, assignment):
        # Rules the assignment satisfies are back on for free.
        kept = self.violated(relaxed, assignment)

        for rule in list(kept):
            if rule not in kept:
                continue
            trial = [other for other in kept if other is not rule]
            trial_assignment = self.attempt(trial)
            if trial_assignment is not None:
                kept = self.violated(trial, trial_assignment)
                assignment = trial_assignment

        return kept, assignment

    @logger.wrap
    def run(self):
        relaxed, assignment = self.find()
        if relaxed is None:
            return None, None

        self.relaxed, self.assignment = self.minimize(relaxed, assignment)
        logger.dump(self)
        return self.relaxed, self.assignment


def disabled_options(problem):
    return frozenset(rule.option for rule in problem.rules
                     if isinstance(rule, DisabledDefinition))


@logger.wrap
def diagnose(problem, config=None):
    """
    Returns a list of diagnostics for an unsatisfiable problem. Degrades to
    fallback_diagnostics() when the search budget is exhausted.
    """
    if config is None:
        config = ResolverConfig()

    relaxer = Relaxer(problem, config)
    try:
        relaxed, assignment = relaxer.run()
    except _RelaxationLimit:
        logger.warning('no explanation within %d attempts, '
                       'reporting all the rules', config.relaxation_limit)
        return fallback_diagnostics(problem)
    except SolverIterationLimit as e:
        logger.warning('%s while explaining, reporting all the rules', e)
        return fallback_diagnostics(problem)

    if relaxed is None:
        logger.warning('relaxing every rule does not help')
        return fallback_diagnostics(problem)

    index = problem.index
    disabled = disabled_options(problem)

    ret = []
    for rule in relaxed:
        diagnostic = Diagnostic(rule, index, rule.explain(assignment),
                                rule.remedy(index, disabled))
        logger.info('%s', diagnostic.render())
        ret.append(diagnostic)
    return ret


def fallback_diagnostics(problem):
    """
    Every relaxable rule as is, with no remedy, each explained against the
    assignment where all the options are loaded.
    """
    index = problem.index
    everything = Assignment(dict.fromkeys(index, True), index)

    return [Diagnostic(rule, index, rule.explain(everything))
            for rule in problem.rules if rule.relaxable]
