"""
Version values and version ranges used by dependency and break clauses.

Parsing rules themselves belong to the semantic_version library; this module
only adapts loose mod versions ("1.0", "0.4.2+mc1.19") to it and wraps range
expressions into hashable, comparable objects.
"""

__all__ = [
    "Version",
    "VersionRange",
    "parse_version",
    "parse_range",
]


import semantic_version

from modsolver.errors import VersionError


Version = semantic_version.Version


def parse_version(value):
    """
    Returns a semantic_version.Version for the given value.

    Accepts Version instances as is. Strings are coerced, so that "1.0"
    becomes 1.0.0 and "1.19.2.1" becomes 1.19.2+1.
    """
    if isinstance(value, Version):
        return value

    try:
        return Version.coerce(str(value).strip().lstrip('vV'))
    except ValueError as e:
        raise VersionError('Invalid version %r: %s' % (value, e))


class VersionRange(object):
    """
    A range of versions in NPM notation: ">=1.0 <2.0", "^1.2", "~0.4",
    "1.x", "1.0 - 1.4" and "||" unions.

    The "*" range is special: it matches anything, pre-releases included.
    """
    __slots__ = '_expr', '_spec'

    ANY_EXPR = '*'

    expr = property(lambda self: self._expr)

    @property
    def is_any(self):
        return self._spec is None

    def __init__(self, expr=ANY_EXPR):
        super(VersionRange, self).__init__()

        expr = ' '.join(str(expr).split()) or self.ANY_EXPR
        self._expr = expr

        if expr == self.ANY_EXPR:
            self._spec = None
        else:
            try:
                self._spec = semantic_version.NpmSpec(expr)
            except ValueError as e:
                raise VersionError('Invalid version range %r: %s' % (expr, e))

    def matches(self, version):
        if self._spec is None:
            return True
        return self._spec.match(parse_version(version))

    __contains__ = matches

    def __eq__(self, other):
        if not isinstance(other, VersionRange):
            return NotImplemented
        return self._expr == other._expr

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((VersionRange, self._expr))

    def __str__(self):
        return self._expr

    def __repr__(self):
        return '%s(%r)' % (type(self).__name__, self._expr)


VersionRange.ANY = VersionRange()


def parse_range(value):
    if value is None:
        return VersionRange.ANY
    if isinstance(value, VersionRange):
        return value
    return VersionRange(value)
