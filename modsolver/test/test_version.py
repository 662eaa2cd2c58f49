import unittest

from modsolver.errors import VersionError
from modsolver.version import Version
from modsolver.version import VersionRange
from modsolver.version import parse_range
from modsolver.version import parse_version


class ParseVersionTestCase(unittest.TestCase):

    def test_loose_versions_are_coerced(self):
        self.assertEqual(Version('1.0.0'), parse_version('1.0'))
        self.assertEqual(Version('2.0.0'), parse_version('v2'))
        self.assertEqual(Version('0.4.2'), parse_version(' 0.4.2 '))

    def test_versions_are_kept(self):
        version = Version('1.2.3')
        self.assertIs(version, parse_version(version))

    def test_ordering(self):
        self.assertLess(parse_version('1.9'), parse_version('1.10'))
        self.assertLess(parse_version('0.9.9'), parse_version('1.0'))

    def test_garbage(self):
        with self.assertRaises(VersionError):
            parse_version('not a version')


class VersionRangeTestCase(unittest.TestCase):

    def test_any(self):
        r = VersionRange()
        self.assertTrue(r.is_any)
        self.assertIn('0.0.1', r)
        self.assertIn('100.0', r)
        self.assertIs(VersionRange.ANY, parse_range(None))

    def test_bounds(self):
        r = VersionRange('>=0.50 <1.0')
        self.assertFalse(r.is_any)
        self.assertIn('0.50', r)
        self.assertIn('0.99.1', r)
        self.assertNotIn('1.0', r)
        self.assertNotIn('0.49', r)

    def test_caret_and_tilde(self):
        self.assertIn('1.4.0', VersionRange('^1.2'))
        self.assertNotIn('2.0.0', VersionRange('^1.2'))
        self.assertIn('0.4.9', VersionRange('~0.4'))
        self.assertNotIn('0.5.0', VersionRange('~0.4'))

    def test_equality_by_expression(self):
        self.assertEqual(VersionRange('>=1.0  <2.0'), VersionRange('>=1.0 <2.0'))
        self.assertEqual(hash(VersionRange('^1.0')), hash(VersionRange('^1.0')))
        self.assertNotEqual(VersionRange('^1.0'), VersionRange('^2.0'))

    def test_invalid_range(self):
        with self.assertRaises(VersionError):
            VersionRange('>=> 1')


if __name__ == '__main__':
    unittest.main()
