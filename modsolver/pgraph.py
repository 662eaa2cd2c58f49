"""
The Graph of Predicates.

Each registered option gets an atom node, which is effectively a pair of
literals: one for False, and one for True. Rules lower themselves into
constraints over these literals:

  - unit constraints pin a literal to be true;
  - implications (binary clauses) live in Literal.implies;
  - neglasts (n-ary clauses) live in Literal.neglasts.

Every constraint keeps the rule it has been derived from ('why'), so that the
solver can disable whole rules at once and diagnostics can name them.
"""

__all__ = [
    "Pgraph",
    "Node",
    "Literal",
    "Neglast",
]


from modsolver.errors import InternalSolverFault


class Pgraph(object):
    """
    Constraint graph over a fixed set of options.

    Nodes are created up front for all the options; asking for a node of an
    unknown option is an invariant violation.
    """

    _dump_attrs = ['nodes', 'units', 'neglasts']

    def __init__(self, options):
        super(Pgraph, self).__init__()

        self._node_map = {}
        self.nodes = []

        for option in options:
            if option in self._node_map:
                continue
            node = self._node_map[option] = Node(self, option)
            self.nodes.append(node)

        self.units = []     # (literal, why) pairs
        self.neglasts = []

    def node_for(self, option):
        try:
            return self._node_map[option.positive]
        except KeyError:
            raise InternalSolverFault('Rule references an option that has '
                                      'never been added: %s' %
                                      option.describe())

    def literal_for(self, option):
        return self.node_for(option)[not option.negated]

    def _literals(self, options):
        return [self.literal_for(option) for option in options]

    #
    # Rule definer interface.
    #

    def require(self, option, why=None):
        """option must be true"""
        self.units.append((self.literal_for(option), why))

    def forbid(self, option, why=None):
        """option must be false"""
        self.units.append((~self.literal_for(option), why))

    def implies(self, if_, then, why=None):
        """if_ => then"""
        self.literal_for(if_).therefore(self.literal_for(then), why)

    def equivalent(self, one, other, why=None):
        """one <=> other"""
        self.literal_for(one).equivalent(self.literal_for(other), why)

    def implies_any(self, if_, options, why=None):
        """if_ => any(options); with no options if_ is forbidden"""
        self.neglast([if_] + [~option for option in options], why)

    def at_least_one(self, options, why=None):
        self.neglast([~option for option in options], why)

    def at_most_one(self, options, why=None):
        """
        Pairwise exclusion. This introduces N^2 implications between
        operands, which is fine for identity groups.
        """
        options = list(options)
        for i, option in enumerate(options):
            for another in options[i+1:]:
                self.neglast([option, another], why)

    def neglast(self, options, why=None):
        """Not all of the options may hold at once."""
        literals = []
        for literal in self._literals(options):
            if ~literal in literals:
                return  # always holds
            if literal not in literals:
                literals.append(literal)

        if not literals:
            raise ValueError('Empty neglast')

        if len(literals) == 1:
            literal, = literals
            self.units.append((~literal, why))

        elif len(literals) == 2:
            one, other = literals
            one.therefore(~other, why)

        else:
            neglast = Neglast(literals, why)
            self.neglasts.append(neglast)
            for literal in neglast.literals:
                literal.neglasts.append(neglast)

    def __repr__(self):
        return '<%s: %d nodes>' % (type(self).__name__, len(self.nodes))


class Node(object):
    """
    Each node is effectively a pair of two literals:
    one for False, and one for True. See Literal class below.
    """
    __slots__ = 'pgraph', 'option', 'literals'

    def __init__(self, pgraph, option):
        super(Node, self).__init__()
        self.pgraph = pgraph
        self.option = option
        self.literals = (Literal(self, False), Literal(self, True))

    def __getitem__(self, value):
        return self.literals[bool(value)]

    def __iter__(self):
        return iter(self.literals)

    def __repr__(self):
        return repr(self.option)


class Literal(object):
    """
    Depending on a node value the node may behave differently.
    Literal object describes such behavior.

    Literal object is tightly related to its node. Do not construct it
    manually.
    """
    __slots__ = 'node', 'value', 'implies', 'neglasts'

    def __init__(self, node, value):
        super(Literal, self).__init__()
        self.node = node
        self.value = value

        self.implies  = []  # (literal, why) pairs to include along with this
        self.neglasts = []  # from where to exclude

    def __invert__(self):
        """Returns the opposite literal."""
        return self.node[not self.value]

    def __iter__(self):
        """Support for tuple unpacking: (node, value)"""
        return iter((self.node, self.value))

    def therefore(self, other, why=None):
        """Implication: self => other"""

        if self is other:
            return

        if self is ~other:
            # a => ~a means just ~a
            self.node.pgraph.units.append((other, why))
            return

        if self.node.pgraph is not other.node.pgraph:
            raise ValueError('Must belong to the same Pgraph')

        self.implies.append((other, why))
        (~other).implies.append((~self, why))

    def becauseof(self, other, why=None):
        """Implication: other => self"""
        other.therefore(self, why)

    def equivalent(self, other, why=None):
        """Equivalence relation: other <=> self"""
        self.therefore(other, why)
        self.becauseof(other, why)

    def __repr__(self):
        return "%s%r" % ('' if self.value else '~', self.node)


class Neglast(object):
    """
    Neglast unites a set of literals, that can't coexist all together: at
    least one of them must be negated. Neglast = NEGate the LAST left literal.
    """
    __slots__ = 'literals', 'why'

    def __init__(self, literals, why=None):
        super(Neglast, self).__init__()
        self.literals = tuple(literals)
        self.why = why

    def __repr__(self):
        return ('<{cls.__name__}: {literals}>'
                .format(cls=type(self),
                        literals=' & '.join(map(repr, self.literals))))
