import unittest

from modsolver.config import ResolverConfig
from modsolver.context import Context
from modsolver.diagnostics import Diagnostic
from modsolver.options import ModCandidateOption
from modsolver.rules import ADD_MISSING_DEPENDENCY
from modsolver.rules import CHANGE_ENVIRONMENT
from modsolver.rules import REMOVE_MOD
from modsolver.rules import UPDATE_MOD
from modsolver.solver import Unsatisfiable


class DiagnosticsTestCaseBase(unittest.TestCase):

    config = ResolverConfig()

    def setUp(self):
        self.context = Context(self.config)

    def add(self, *args, **kwargs):
        return self.context.add_option(ModCandidateOption.of(*args, **kwargs))

    def diagnose(self):
        result = self.context.solve()
        self.assertIsInstance(result, Unsatisfiable)
        return result.diagnostics


class RemedyTestCase(DiagnosticsTestCaseBase):

    def test_identity_conflict(self):
        self.add('a', '1.0', origin='a-1.jar', mandatory=True)
        self.add('a', '2.0', origin='a-2.jar', mandatory=True)

        diagnostic, = self.diagnose()

        self.assertEqual('IdentityGroupDefinition', diagnostic.kind)
        self.assertEqual(['a', 'a'], diagnostic.options)
        self.assertEqual(REMOVE_MOD, diagnostic.remedy)
        self.assertIn("id 'a'", diagnostic.message)

    def test_outdated_dependency(self):
        self.add('a', '1.0', mandatory=True, depends=['b ">=2.0"'])
        self.add('b', '1.0')

        diagnostic, = self.diagnose()

        self.assertEqual('DependencyLink', diagnostic.kind)
        self.assertEqual(UPDATE_MOD, diagnostic.remedy)
        self.assertIn('only', diagnostic.message)

    def test_break_with_range(self):
        self.add('a', '1.0', mandatory=True, breaks=['b "<2.0"'])
        self.add('b', '1.0', mandatory=True)

        diagnostic, = self.diagnose()

        self.assertEqual('BreakLink', diagnostic.kind)
        self.assertEqual(UPDATE_MOD, diagnostic.remedy)
        self.assertIn("'b' 1.0.0", diagnostic.message)

    def test_dependency_any(self):
        self.add('a', '1.0', mandatory=True, depends=['any(b, c)'])

        diagnostic, = self.diagnose()

        self.assertEqual('DependencyLink', diagnostic.kind)
        self.assertEqual(ADD_MISSING_DEPENDENCY, diagnostic.remedy)
        self.assertEqual('b, c', diagnostic.params['ids'])

    def test_mandatory_candidate_for_other_environment(self):
        self.context = Context(ResolverConfig(environment='client'))
        self.add('a', '1.0', mandatory=True, environment='server')
        self.add('b', '1.0', mandatory=True, depends=['a'])

        diagnostic, = self.diagnose()

        self.assertEqual('DependencyLink', diagnostic.kind)
        self.assertEqual(CHANGE_ENVIRONMENT, diagnostic.remedy)


class RelaxationTestCase(DiagnosticsTestCaseBase):

    def test_independent_causes_reported_together(self):
        self.add('a', '1.0', mandatory=True, depends=['x'])
        self.add('b', '1.0', mandatory=True, depends=['y'])
        self.add('c', '1.0', mandatory=True)

        diagnostics = self.diagnose()

        self.assertEqual(['a', 'b'],
                         [d.params['mod'] for d in diagnostics])
        self.assertTrue(all(d.remedy == ADD_MISSING_DEPENDENCY
                            for d in diagnostics))

    def test_minimized(self):
        # Relaxing all the dependencies helps, but one of them suffices.
        self.add('a', '1.0', mandatory=True, depends=['x'])
        self.add('b', '1.0', depends=['y'])

        diagnostic, = self.diagnose()

        self.assertEqual('DependencyLink', diagnostic.kind)
        self.assertEqual('a', diagnostic.params['mod'])

    def test_prefixes_of_classes(self):
        # Needs both a break and a dependency relaxed.
        self.add('a', '1.0', mandatory=True, depends=['b'], breaks=['c'])
        self.add('b', '1.0', depends=['missing'])
        self.add('c', '1.0', mandatory=True)

        diagnostics = self.diagnose()

        self.assertEqual(['BreakLink', 'DependencyLink'],
                         sorted(d.kind for d in diagnostics))

    def test_render(self):
        self.add('a', '1.0', mandatory=True, depends=['c ">=1.0"'])

        text = self.context.solve().render()

        self.assertIn('requires c ">=1.0"', text)
        self.assertIn(ADD_MISSING_DEPENDENCY, text)


class ScaleTestCase(DiagnosticsTestCaseBase):
    """Hundreds of mods, one conflict."""

    nr_mods = 300

    def test_duplicate_id(self):
        for i in range(self.nr_mods):
            self.add('m%d' % i, '1.0', mandatory=True)
        self.add('a', '1.0', origin='a-1.jar', mandatory=True)
        self.add('a', '2.0', origin='a-2.jar', mandatory=True)

        diagnostic, = self.diagnose()

        self.assertEqual('IdentityGroupDefinition', diagnostic.kind)
        self.assertEqual('a', diagnostic.params['mod'])
        self.assertEqual(REMOVE_MOD, diagnostic.remedy)

    def test_missing_dependency_in_chain(self):
        for i in range(self.nr_mods):
            self.add('m%d' % i, '1.0', mandatory=True,
                     depends=['m%d' % (i + 1)])

        diagnostic, = self.diagnose()

        self.assertEqual('DependencyLink', diagnostic.kind)
        self.assertEqual('m%d' % (self.nr_mods - 1), diagnostic.params['mod'])
        self.assertEqual(ADD_MISSING_DEPENDENCY, diagnostic.remedy)


class FallbackTestCase(DiagnosticsTestCaseBase):

    config = ResolverConfig(relaxation_limit=1)

    def test_every_rule_verbatim(self):
        self.add('a', '1.0', mandatory=True, breaks=['b'])
        self.add('b', '1.0', mandatory=True)

        diagnostics = self.diagnose()

        self.assertEqual(['IdentityGroupDefinition', 'MandatoryDefinition',
                          'BreakLink', 'IdentityGroupDefinition',
                          'MandatoryDefinition'],
                         [d.kind for d in diagnostics])
        self.assertTrue(all(d.remedy is None for d in diagnostics))
        self.assertTrue(all(isinstance(d, Diagnostic) for d in diagnostics))


if __name__ == '__main__':
    unittest.main()
