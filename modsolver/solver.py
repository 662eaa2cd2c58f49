"""
Pgraph solver.

A DPLL search: unit propagation over implications and neglasts, decisions
taken in a fixed order of preference, chronological backtracking. Since
every decision first tries the preferred value, the first satisfying
assignment found is the preferred one:

  - optional candidates are loaded whenever possible;
  - within an identity group, higher versions come first, then the ones
    discovered earlier.
"""

__all__ = [
    "Problem",
    "Search",
    "Selected",
    "Unsatisfiable",
    "resolve",
]


from collections import deque
from collections import namedtuple
import logging

from modsolver.config import ResolverConfig
from modsolver.errors import InternalSolverFault
from modsolver.errors import SolverIterationLimit
from modsolver.options import OptionIndex
from modsolver.pgraph import Pgraph
from modsolver.rules import Assignment
from modsolver.rules import rank
from modsolver.util import get_extended_logger
from modsolver.util import pop_iter

logger = get_extended_logger(__name__)


def log_debug_enabled(logger=logger):
    return logger.isEnabledFor(logging.DEBUG)


class Selected(namedtuple('_Selected', 'options')):
    """Successful resolution: exactly the options assigned true."""
    __slots__ = ()

    ok = True

    def __new__(cls, options):
        return super(Selected, cls).__new__(cls, tuple(options))

    @property
    def identities(self):
        return frozenset(option.identity for option in self.options)

    @property
    def mods(self):
        """Loaded candidates (aliases left out) keyed by mod id."""
        return dict((option.id, option) for option in self.options
                    if option.kind == 'mod')

    def __contains__(self, option):
        return option in self.options

    def __repr__(self):
        return 'Selected(%r)' % (list(self.options),)


class Unsatisfiable(namedtuple('_Unsatisfiable', 'diagnostics')):
    """Failed resolution, with one diagnostic per independent cause."""
    __slots__ = ()

    ok = False

    def __new__(cls, diagnostics):
        return super(Unsatisfiable, cls).__new__(cls, tuple(diagnostics))

    def render(self):
        return '\n'.join(diagnostic.render()
                         for diagnostic in self.diagnostics)

    def __repr__(self):
        return 'Unsatisfiable(%r)' % (list(self.diagnostics),)


class Problem(object):
    """
    Rules lowered into a pgraph over an index of options, plus the order in
    which the search decides on nodes.
    """

    _dump_attrs = ['pgraph', 'rules', 'order']

    def __init__(self, options, rules):
        super(Problem, self).__init__()

        self.index = OptionIndex(options)
        self.rules = list(rules)
        self.pgraph = g = Pgraph(self.index)

        for rule in self.rules:
            rule.define(g, self.index)

        self.order = self._decision_order()

    def _decision_order(self):
        """
        List of (node, preferred value) pairs. Candidates are grouped by id
        in discovery order of the groups and ranked inside each group.
        Aliases follow their targets through alias links, so they go last
        and prefer to stay off.
        """
        index = self.index
        node_for = self.pgraph.node_for

        order = []
        placed = set()

        for option in index:
            if option.kind != 'mod' or option in placed:
                continue

            group = [member for member in index.options_for(option.id)
                     if member.kind == 'mod']
            for member in rank(group, index):
                if member not in placed:
                    placed.add(member)
                    order.append((node_for(member), True))

        for option in index:
            if option not in placed:
                placed.add(option)
                order.append((node_for(option), option.kind == 'mod'))

        return order

    def solve(self, disabled=frozenset(), iteration_limit=None, debug=False):
        """
        Returns an Assignment, or None if there is no solution with the
        'disabled' rules left out.
        """
        return Search(self, disabled, iteration_limit, debug).run()

    def violated(self, assignment):
        return [rule for rule in self.rules
                if not rule.validate(assignment)]

    def __repr__(self):
        return '<%s: %d options, %d rules>' % (type(self).__name__,
                                               len(self.index),
                                               len(self.rules))


class Search(object):
    """A single run of the DPLL search over a problem."""

    _dump_attrs = ['values', 'steps']

    def __init__(self, problem, disabled=frozenset(), iteration_limit=None,
                 debug=False):
        super(Search, self).__init__()

        self.problem = problem
        self.disabled = frozenset(disabled)
        self.iteration_limit = iteration_limit
        self.debug = debug and log_debug_enabled()

        self.values = {}  # node -> bool
        self.trail  = []  # nodes in the order of assignment
        self.steps  = 0

    def _step(self):
        self.steps += 1
        if self.iteration_limit is not None and \
                self.steps > self.iteration_limit:
            raise SolverIterationLimit(self.iteration_limit)

    def _assign(self, literal, queue):
        node, value = literal

        current = self.values.get(node)
        if current is not None:
            return current == value

        self.values[node] = value
        self.trail.append(node)
        queue.append(literal)
        return True

    def _propagate(self, queue):
        """Unit propagation. Returns False on conflict."""
        disabled = self.disabled
        values = self.values

        for literal in pop_iter(queue, pop_meth='popleft'):
            for implied, why in literal.implies:
                if why in disabled:
                    continue
                if not self._assign(implied, queue):
                    return False

            for neglast in literal.neglasts:
                if neglast.why in disabled:
                    continue

                last = None
                nr_left = 0
                for other in neglast.literals:
                    value = values.get(other.node)
                    if value is None:
                        nr_left += 1
                        last = other
                    elif value != other.value:
                        break  # already negated
                else:
                    if not nr_left:
                        return False
                    if nr_left == 1 and not self._assign(~last, queue):
                        return False

        return True

    def _decide(self, literal):
        if self.debug:
            logger.debug('\tdecide %r (step %d)', literal, self.steps)
        queue = deque()
        return self._assign(literal, queue) and self._propagate(queue)

    def _undo(self, mark):
        trail = self.trail
        values = self.values
        while len(trail) > mark:
            del values[trail.pop()]

    def _next_free(self, pos):
        order = self.problem.order
        values = self.values
        while pos < len(order) and order[pos][0] in values:
            pos += 1
        return pos if pos < len(order) else None

    @logger.wrap
    def run(self):
        g = self.problem.pgraph

        queue = deque()
        for literal, why in g.units:
            if why in self.disabled:
                continue
            if not self._assign(literal, queue):
                logger.debug('conflicting unit constraint %r (%r)',
                             literal, why)
                return None
        if not self._propagate(queue):
            logger.debug('initial propagation failed')
            return None

        order = self.problem.order
        decisions = []  # (order position, trail mark, flipped) tuples
        pos = 0

        while True:
            pos = self._next_free(pos)
            if pos is None:
                break

            self._step()
            node, preferred = order[pos]
            decisions.append((pos, len(self.trail), False))
            ok = self._decide(node[preferred])

            while not ok:
                # Unwind exhausted decisions, then flip the last open one.
                while decisions and decisions[-1][2]:
                    _, mark, _ = decisions.pop()
                    self._undo(mark)

                if not decisions:
                    logger.debug('search space exhausted after %d steps',
                                 self.steps)
                    return None

                pos, mark, _ = decisions.pop()
                self._undo(mark)

                self._step()
                decisions.append((pos, mark, True))
                node, preferred = order[pos]
                ok = self._decide(node[not preferred])

            pos += 1

        logger.debug('solved in %d steps', self.steps)
        return Assignment(dict((node.option, value)
                               for node, value in self.values.items()),
                          self.problem.index)


@logger.wrap
def resolve(options, rules, config=None):
    """
    Finds the set of options to load.

    Returns Selected with the loaded options, or Unsatisfiable carrying
    diagnostics. Raises InternalSolverFault if a rule references an option
    missing from 'options', or if the solution found violates a rule.
    """
    from modsolver.diagnostics import diagnose
    from modsolver.diagnostics import fallback_diagnostics

    if config is None:
        config = ResolverConfig()

    problem = Problem(options, rules)
    logger.info('resolving %r', problem)
    logger.dump(problem)

    try:
        assignment = problem.solve(iteration_limit=config.iteration_limit,
                                   debug=config.debug_solving)
    except SolverIterationLimit as e:
        logger.warning('%s, reporting all the rules', e)
        return Unsatisfiable(fallback_diagnostics(problem))

    if assignment is None:
        logger.info('no solution, looking for a cause')
        return Unsatisfiable(diagnose(problem, config))

    violated = problem.violated(assignment)
    if violated:
        raise InternalSolverFault('Solution violates rules: %r' % violated)

    selected = assignment.selected
    logger.info('selected %d option(s)', len(selected))
    for option in selected:
        logger.debug('\tselected: %s', option.describe())

    return Selected(selected)
