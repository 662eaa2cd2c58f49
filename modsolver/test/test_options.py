import unittest

from modsolver.clause import parse_clause
from modsolver.errors import VersionError
from modsolver.options import AliasOption
from modsolver.options import CandidateInfo
from modsolver.options import ModCandidateOption
from modsolver.options import NegatedOption
from modsolver.options import OptionIndex
from modsolver.options import ProvidedMod
from modsolver.options import environment_matches
from modsolver.rules import Assignment


class OptionTestCase(unittest.TestCase):

    def test_identity(self):
        info = CandidateInfo('a', '1.0', origin='a.jar')
        self.assertEqual(ModCandidateOption(info, source='s'),
                         ModCandidateOption(info, source='s'))
        self.assertNotEqual(ModCandidateOption(info, source='s'),
                            ModCandidateOption(info, source='t'))
        self.assertEqual(1, len({ModCandidateOption(info),
                                 ModCandidateOption(info)}))

    def test_negation(self):
        A = ModCandidateOption.of('a', '1.0')
        self.assertIsInstance(~A, NegatedOption)
        self.assertIs(A, ~~A)
        self.assertEqual(~A, ~A)
        self.assertNotEqual(A, ~A)
        self.assertIs(A, (~A).positive)

    def test_candidate_info(self):
        info = CandidateInfo('a', '1.0', depends=['b ">=1"'],
                             provides=['g:x'])
        self.assertEqual('<a>', info.origin)
        self.assertEqual('*', info.environment)
        self.assertEqual((parse_clause('b ">=1"'),), info.depends)
        self.assertEqual((ProvidedMod('x', 'g'),), info.provides)

        with self.assertRaises(VersionError):
            CandidateInfo('a', 'garbage')

    def test_alias(self):
        A = ModCandidateOption.of('a', '1.0', group='g')
        alias = AliasOption(A, ProvidedMod('x', version='3.0'))

        self.assertEqual('g:x', alias.canonical)
        self.assertEqual('3.0.0', str(alias.version))
        self.assertIs(A, alias.target)
        self.assertFalse(alias.mandatory)
        self.assertEqual((), alias.depends)

        with self.assertRaises(ValueError):
            AliasOption(A, ProvidedMod('a'))

    def test_environment_matches(self):
        self.assertTrue(environment_matches('*', 'client'))
        self.assertTrue(environment_matches('server', '*'))
        self.assertTrue(environment_matches('client', 'client'))
        self.assertFalse(environment_matches('server', 'client'))


class OptionIndexTestCase(unittest.TestCase):

    def setUp(self):
        self.A1 = ModCandidateOption.of('a', '1.0', origin='a1')
        self.A2 = ModCandidateOption.of('a', '2.0', origin='a2')
        self.B = ModCandidateOption.of('b', '1.0')
        self.X = AliasOption(self.B, ProvidedMod('a', version='1.5'))
        self.index = OptionIndex([self.A1, self.A2, self.B, self.X])

    def test_lookup(self):
        self.assertEqual(['a', 'b'], self.index.ids())
        self.assertEqual([self.A1, self.A2, self.X],
                         self.index.options_for('a'))
        self.assertEqual(3, self.index.position(self.X))
        self.assertIn(~self.B, self.index)

    def test_matching(self):
        index = self.index
        self.assertEqual([self.A2, self.X],
                         index.matching(parse_clause('a ">=1.5"')))
        self.assertEqual([self.A1, self.A2],
                         index.matching(parse_clause('a'), exclude=self.B))
        self.assertEqual([self.A1, self.A2, self.X, self.B],
                         index.matching(parse_clause('any(a, b, c)')))
        self.assertEqual([], index.matching(parse_clause('a?')))

    def test_assignment(self):
        assignment = Assignment({self.A1: True, self.B: False}, self.index)
        self.assertTrue(assignment[self.A1])
        self.assertFalse(assignment[self.A2])
        self.assertTrue(assignment[~self.B])
        self.assertEqual([self.A1], assignment.selected)


if __name__ == '__main__':
    unittest.main()
