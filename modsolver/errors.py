"""
Exceptions for error handling.

Discovery-time errors (duplicates, override mismatches, failed scans) are
recovered by the Context and only logged. Unsatisfiability is never raised:
it is reported through the Unsatisfiable result. InternalSolverFault and its
subclasses denote a bug in a collaborator and terminate the run.
"""

__all__ = [
    "ResolutionError",
    "VersionError",
    "ClauseSyntaxError",
    "DuplicateOptionError",
    "OverrideMismatchError",
    "OverridesFileError",
    "DiscoveryError",
    "InternalSolverFault",
    "ContextSealedError",
    "SolverIterationLimit",
]


class ResolutionError(Exception):
    pass


class VersionError(ResolutionError, ValueError):
    pass


class ClauseSyntaxError(ResolutionError, SyntaxError):

    def __init__(self, message, text=None, offset=None):
        super(ClauseSyntaxError, self).__init__(message)
        self.text = text
        self.offset = offset

    def __str__(self):
        if self.text is None:
            return self.msg
        if self.offset is None:
            return '%s: %r' % (self.msg, self.text)
        return '%s: %r (at %d)' % (self.msg, self.text, self.offset)


class DuplicateOptionError(ResolutionError):

    def __init__(self, option, source=None):
        super(DuplicateOptionError, self).__init__(
                '%s has already been added by %s' %
                (option.describe(), source or 'an unnamed source'))
        self.option = option
        self.source = source


class OverrideMismatchError(ResolutionError):

    def __init__(self, path, section, clause, declared):
        super(OverrideMismatchError, self).__init__(
                'Failed to find the %s clause %s to override in %s '
                '(declared: %s)' %
                (section, clause, path,
                 ', '.join(map(str, declared)) or 'none'))
        self.path = path
        self.section = section
        self.clause = clause


class OverridesFileError(ResolutionError):

    def __init__(self, path, reason):
        super(OverridesFileError, self).__init__(
                'Unable to load overrides from %s: %s' % (path, reason))
        self.path = path


class DiscoveryError(ResolutionError):

    def __init__(self, location, source, cause):
        super(DiscoveryError, self).__init__(
                '%s failed to scan %s: %s' % (source, location, cause))
        self.location = location
        self.source = source
        self.cause = cause


class InternalSolverFault(ResolutionError, RuntimeError):
    pass


class ContextSealedError(InternalSolverFault):

    def __init__(self, what):
        super(ContextSealedError, self).__init__(
                "Can't add %s: the context has been sealed for solving" % what)


class SolverIterationLimit(ResolutionError):

    def __init__(self, limit):
        super(SolverIterationLimit, self).__init__(
                'Gave up after %d search steps' % limit)
        self.limit = limit
