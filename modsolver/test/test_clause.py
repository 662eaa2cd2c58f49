"""
Unit tests for the clause DSL.
"""

import unittest

from modsolver.clause import All
from modsolver.clause import Any
from modsolver.clause import Only
from modsolver.clause import parse_clause
from modsolver.clause import to_clause
from modsolver.errors import ClauseSyntaxError
from modsolver.options import ModCandidateOption


class ParseTestCase(unittest.TestCase):

    def test_bare_id(self):
        clause = parse_clause('fabric-api')
        self.assertEqual(Only('fabric-api'), clause)
        self.assertTrue(clause.range.is_any)

    def test_range(self):
        clause = parse_clause('fabric-api ">=0.50 <1.0"')
        self.assertEqual(Only('fabric-api', '>=0.50 <1.0'), clause)

    def test_single_quotes(self):
        self.assertEqual(Only('a', '^1.0'), parse_clause("a '^1.0'"))

    def test_group(self):
        clause = parse_clause('builtin:python ">=3.8"')
        self.assertEqual('builtin', clause.group)
        self.assertEqual('python', clause.id)
        self.assertEqual('builtin:python', clause.qualified_id)

    def test_optional(self):
        clause = parse_clause('sodium? ">=0.4"')
        self.assertTrue(clause.optional)
        self.assertTrue(clause.should_ignore)
        self.assertEqual([], clause.active())

    def test_any(self):
        clause = parse_clause('any(a ">=1", b)')
        self.assertIsInstance(clause, Any)
        self.assertEqual((Only('a', '>=1'), Only('b')), clause.members)
        self.assertEqual(['a', 'b'], clause.ids)

    def test_all(self):
        clause = parse_clause('ALL(a, b "<2", c?)')
        self.assertIsInstance(clause, All)
        self.assertEqual(['a', 'b', 'c'], clause.ids)
        self.assertEqual(['a', 'b'], [only.id for only in clause.active()])
        self.assertFalse(clause.should_ignore)

    def test_str_reparses(self):
        for text in ['a', 'g:a? ">=1.0"', 'any(a, b "^2.0")']:
            clause = parse_clause(text)
            self.assertEqual(clause, parse_clause(str(clause)))

    def test_errors(self):
        for text in ['', 'a "1" "2"', 'any(a', 'none(a)', 'a $', 'any()']:
            with self.assertRaises(ClauseSyntaxError):
                parse_clause(text)

    def test_error_points_at_text(self):
        try:
            parse_clause('a $')
        except ClauseSyntaxError as e:
            self.assertEqual('a $', e.text)
            self.assertEqual(2, e.offset)
        else:
            self.fail('ClauseSyntaxError not raised')


class ClauseModelTestCase(unittest.TestCase):

    def test_value_semantics(self):
        self.assertEqual(Only('a', '>=1'), Only('a', '>=1'))
        self.assertNotEqual(Only('a', '>=1'), Only('a', '>=2'))
        self.assertNotEqual(Only('a'), Only('a', optional=True))
        self.assertEqual({Any([Only('a')]), Any([Only('a')])},
                         {Any([Only('a')])})
        self.assertNotEqual(Any([Only('a')]), All([Only('a')]))

    def test_compound_needs_members(self):
        with self.assertRaises(ValueError):
            Any([])
        with self.assertRaises(TypeError):
            All([Any([Only('a')])])

    def test_matches(self):
        option = ModCandidateOption.of('a', '1.5', group='g')
        self.assertTrue(Only('a', '>=1.0').matches(option))
        self.assertTrue(Only('a', group='g').matches(option))
        self.assertFalse(Only('a', group='other').matches(option))
        self.assertFalse(Only('a', '>=2.0').matches(option))
        self.assertFalse(Only('b').matches(option))

    def test_to_clause(self):
        self.assertEqual(Only('a', '^1.0'), to_clause(('a', '^1.0')))
        self.assertEqual(Only('a'), to_clause('a'))
        only = Only('b')
        self.assertIs(only, to_clause(only))
        with self.assertRaises(TypeError):
            to_clause(42)


if __name__ == '__main__':
    unittest.main()
