"""
Discovery collaborators: turn candidate locations into candidate facts.
"""

__all__ = [
    "ScanResult",
    "DiscoverySource",
    "StaticDiscovery",
]


from collections import namedtuple

from modsolver.options import CandidateInfo


class ScanResult(namedtuple('_ScanResult', 'candidates, nested')):
    """
    Candidates found at a location, plus more locations to scan (for
    example archives nested into the scanned one).
    """
    __slots__ = ()

    def __new__(cls, candidates=(), nested=()):
        return super(ScanResult, cls).__new__(cls, tuple(candidates),
                                              tuple(nested))


class DiscoverySource(object):
    """
    Interface of a discovery collaborator. Subclasses implement scan(),
    which may raise to signal an unreadable location.
    """

    name = None

    def scan(self, location):
        raise NotImplementedError

    def __repr__(self):
        return '<%s %s>' % (type(self).__name__, self.name)


class StaticDiscovery(DiscoverySource):
    """
    In-memory source. The mapping goes from a location to a ScanResult, to a
    single CandidateInfo or to a list of them. Unknown locations scan to an
    empty result; values that are exceptions are raised.
    """

    def __init__(self, mapping, name='static'):
        super(StaticDiscovery, self).__init__()
        self.mapping = dict(mapping)
        self.name = name
        self.scanned = []

    def scan(self, location):
        self.scanned.append(location)

        value = self.mapping.get(location, ())
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, ScanResult):
            return value
        if isinstance(value, CandidateInfo):
            value = [value]
        return ScanResult(value)
