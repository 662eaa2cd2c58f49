"""
User-provided replacements of dependency and break clauses, keyed by the
describable path of a candidate. Uses PyYaml library.

    overrides:
      "mods/foo.jar":
        depends:
          - replace: 'bar ">=2.0"'
            with: 'bar ">=1.0"'
        breaks:
          - replace: 'baz'
            with: null          # drops the clause
"""

__all__ = [
    "Substitution",
    "ModOverrides",
    "Overrides",
    "load",
]


from collections import namedtuple

import yaml

try:
    from yaml import CSafeLoader as YamlLoader
except ImportError:
    from yaml import SafeLoader as YamlLoader

from modsolver.clause import to_clause
from modsolver.errors import ClauseSyntaxError
from modsolver.errors import OverrideMismatchError
from modsolver.errors import OverridesFileError
from modsolver.util import get_extended_logger

logger = get_extended_logger(__name__)


SECTIONS = ('depends', 'breaks')


class Substitution(namedtuple('_Substitution', 'replace, with_')):
    """Replaces one declared clause; 'with_' of None removes it."""
    __slots__ = ()

    def __new__(cls, replace, with_=None):
        return super(Substitution, cls).__new__(cls, to_clause(replace),
                None if with_ is None else to_clause(with_))


class ModOverrides(namedtuple('_ModOverrides', 'depends, breaks')):
    __slots__ = ()

    def __new__(cls, depends=(), breaks=()):
        return super(ModOverrides, cls).__new__(cls, tuple(depends),
                                                tuple(breaks))

    def apply(self, path, depends, breaks):
        """
        Returns (depends, breaks, mismatches), where mismatches is a list of
        OverrideMismatchError for substitutions naming undeclared clauses.
        """
        mismatches = []
        depends = _substitute(path, 'depends', self.depends, depends,
                              mismatches)
        breaks = _substitute(path, 'breaks', self.breaks, breaks,
                             mismatches)
        return depends, breaks, mismatches


def _substitute(path, section, substitutions, declared, mismatches):
    ret = list(declared)

    for substitution in substitutions:
        try:
            i = ret.index(substitution.replace)
        except ValueError:
            mismatches.append(OverrideMismatchError(path, section,
                    substitution.replace, declared))
            continue

        if substitution.with_ is None:
            del ret[i]
        else:
            ret[i] = substitution.with_

    return tuple(ret)


class Overrides(object):
    """Maps describable paths to ModOverrides."""

    def __init__(self, mapping=None):
        super(Overrides, self).__init__()
        self.mapping = dict(mapping or {})

    def lookup(self, path):
        return self.mapping.get(path)

    def __len__(self):
        return len(self.mapping)

    @classmethod
    def from_dict(cls, data, filename='<overrides>'):
        """Builds overrides from a parsed document, validating its shape."""

        def error(reason):
            return OverridesFileError(filename, reason)

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise error('top level must be a mapping')

        entries = data.get('overrides') or {}
        if not isinstance(entries, dict):
            raise error("'overrides' must be a mapping")

        mapping = {}
        for path, entry in entries.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise error('entry for %s must be a mapping' % path)

            unknown = set(entry) - set(SECTIONS)
            if unknown:
                raise error('unknown section(s) for %s: %s' %
                            (path, ', '.join(sorted(map(str, unknown)))))

            sections = {}
            for section in SECTIONS:
                items = entry.get(section) or []
                if not isinstance(items, list):
                    raise error('%s of %s must be a list' % (section, path))

                substitutions = []
                for item in items:
                    if not isinstance(item, dict) or 'replace' not in item:
                        raise error("%s of %s: each item needs 'replace'" %
                                    (section, path))
                    try:
                        substitutions.append(Substitution(item['replace'],
                                                          item.get('with')))
                    except (ClauseSyntaxError, TypeError) as e:
                        raise error('%s of %s: %s' % (section, path, e))

                sections[section] = substitutions

            mapping[str(path)] = ModOverrides(**sections)

        return cls(mapping)

    def __repr__(self):
        return '<%s: %d path(s)>' % (type(self).__name__, len(self.mapping))


def load(filename):
    """Loads overrides from a YAML (or JSON) file."""
    try:
        with open(filename, 'r') as stream:
            data = yaml.load(stream, Loader=YamlLoader)
    except IOError as e:
        raise OverridesFileError(filename, e)
    except yaml.YAMLError as e:
        raise OverridesFileError(filename, e)

    overrides = Overrides.from_dict(data, filename)
    logger.info('loaded overrides for %d path(s) from %s',
                len(overrides), filename)
    return overrides
