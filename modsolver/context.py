"""
Types used on a per-run basis.
"""

__all__ = [
    "Context",
    "BUILTIN_GROUP",
]


from collections import deque
from concurrent.futures import ThreadPoolExecutor
import itertools
import posixpath
import sys
import threading

from modsolver import overrides as overrides_file
from modsolver.config import ResolverConfig
from modsolver.errors import ContextSealedError
from modsolver.errors import DiscoveryError
from modsolver.errors import DuplicateOptionError
from modsolver.errors import OverridesFileError
from modsolver.options import AliasOption
from modsolver.options import CandidateInfo
from modsolver.options import ModCandidateOption
from modsolver.options import environment_matches
from modsolver.overrides import Overrides
from modsolver.rules import AliasLink
from modsolver.rules import BreakLink
from modsolver.rules import DependencyLink
from modsolver.rules import DisabledDefinition
from modsolver.rules import IdentityGroupDefinition
from modsolver.rules import MandatoryDefinition
from modsolver.solver import resolve
from modsolver.util import NotifyingMixin
from modsolver.util import get_extended_logger
from modsolver.util import pop_iter

logger = get_extended_logger(__name__)


BUILTIN_GROUP = 'builtin'


class Context(NotifyingMixin):
    """
    Registry of options and rules of a single resolution run.

    Adding a candidate derives the rules it implies right away. Discovery
    is driven as a worklist of locations, drained wave by wave until no
    scan reports anything new. Subscribers are called with every option
    added, after its rules have been derived.
    """

    _dump_attrs = ['options', 'rules', 'errors']

    def __init__(self, config=None, overrides=None):
        super(Context, self).__init__()

        self.config = config if config is not None else ResolverConfig()
        self.environment = self.config.environment
        self.errors = []  # recovered ResolutionError instances

        if overrides is None:
            overrides = self._load_overrides()
        self.overrides = overrides

        self.options = []
        self.rules = []

        self._lock = threading.RLock()
        self._sealed = False
        self._counter = itertools.count()

        self._identities = {}  # {identity: option}
        self._groups = {}      # {mod id: IdentityGroupDefinition}

        self._discovery_queue = deque()  # (location, source) pairs
        self._seen_locations = set()

    def _load_overrides(self):
        path = self.config.overrides_path
        if not path:
            return Overrides()

        try:
            return overrides_file.load(path)
        except OverridesFileError as e:
            logger.error('%s, proceeding with no overrides', e)
            self.errors.append(e)
            return Overrides()

    @property
    def sealed(self):
        return self._sealed

    def _check_not_sealed(self, what):
        if self._sealed:
            raise ContextSealedError(what)

    def add_option(self, option, source=None):
        """
        Registers an option and derives the rules it implies.

        Returns the registered option, which is the existing one when an
        identical alias has already been added. Raises DuplicateOptionError
        for a candidate the same source has already added.
        """
        with self._lock:
            self._check_not_sealed(option.describe())

            existing = self._identities.get(option.identity)
            if existing is not None:
                if option.kind == 'alias':
                    return existing
                raise DuplicateOptionError(option, source)

            if option.kind == 'mod':
                option._assign_index(next(self._counter))

            self._identities[option.identity] = option
            self.options.append(option)
            logger.debug('new option %r (added by %s)', option, source)

            self._on_option_added(option)

        self._notify(option)
        return option

    def add_rule(self, rule):
        with self._lock:
            self._check_not_sealed(repr(rule))
            self.rules.append(rule)

    def _group_for(self, mod_id):
        try:
            return self._groups[mod_id]
        except KeyError:
            group = self._groups[mod_id] = \
                IdentityGroupDefinition(mod_id, self.environment)
            self.add_rule(group)
            return group

    def _on_option_added(self, option):
        self._group_for(option.id)

        if option.kind != 'mod':
            return

        if not environment_matches(option.environment, self.environment):
            logger.info('%s is disabled: it is for the %r environment',
                        option.describe(), option.environment)
            self.add_rule(DisabledDefinition(option, self.environment))
            return

        if option.mandatory:
            self.add_rule(MandatoryDefinition(option))

        if option.define_provides:
            self._add_aliases(option)

        if not option.define_dependencies:
            logger.debug('%r defines its own dependencies', option)
            return

        depends, breaks = self._overridden_clauses(option)

        for clause in depends:
            if clause.should_ignore:
                continue
            for rule in DependencyLink.rules_for(option, clause):
                self.add_rule(rule)

        for clause in breaks:
            if clause.should_ignore:
                continue
            for rule in BreakLink.rules_for(option, clause):
                self.add_rule(rule)

    def _add_aliases(self, option):
        for provided in option.provides:
            if provided.id == option.id:
                logger.debug('%r provides its own id, skipped', option)
                continue

            alias = AliasOption(option, provided)
            if self.add_option(alias, option.source) is alias:
                self.add_rule(AliasLink(alias))

    def _overridden_clauses(self, option):
        path = self.describe_path(option.origin)
        if self.config.debug_override_paths:
            logger.info('override path of %s: %s', option.describe(), path)

        mod_overrides = self.overrides.lookup(path)
        if mod_overrides is None:
            return option.depends, option.breaks

        depends, breaks, mismatches = mod_overrides.apply(path,
                option.depends, option.breaks)
        for error in mismatches:
            logger.warning('%s', error)
            self.errors.append(error)

        return depends, breaks

    @staticmethod
    def describe_path(path):
        """
        Stable textual form of a candidate location, used as the key of
        overrides: forward slashes, no redundant separators or dots.
        """
        path = str(path)
        if path.startswith('<'):
            return path  # synthetic origin
        return posixpath.normpath(path.replace('\\', '/'))

    def add_builtin_mod(self, mod_id, version, **kwargs):
        """Registers a mandatory candidate of the 'builtin' group."""
        kwargs.setdefault('origin', '<builtin %s>' % mod_id)
        info = CandidateInfo(mod_id, version, group=BUILTIN_GROUP,
                             mandatory=True, **kwargs)
        return self.add_option(ModCandidateOption(info,
                                                  source=BUILTIN_GROUP,
                                                  builtin=True),
                               BUILTIN_GROUP)

    def add_runtime_mod(self):
        """Registers the running interpreter as builtin:python."""
        return self.add_builtin_mod('python',
                                    '%d.%d.%d' % sys.version_info[:3])

    #
    # Discovery.
    #

    def post(self, location, source):
        """
        Queues a location to be scanned by a source. Returns False if the
        location has already been seen.
        """
        with self._lock:
            if location in self._seen_locations:
                logger.debug('%s has already been seen', location)
                return False
            self._seen_locations.add(location)
            self._discovery_queue.append((location, source))
            return True

    def discover_all(self, locations=(), source=None):
        """
        Scans locations (plus anything posted before) and everything they
        lead to. Returns the number of waves it took.
        """
        locations = list(locations)
        if locations and source is None:
            raise ValueError('no discovery source for %r' % (locations,))

        for location in locations:
            self.post(location, source)

        nr_waves = 0
        while self._discovery_queue:
            wave = list(pop_iter(self._discovery_queue, pop_meth='popleft'))
            nr_waves += 1
            logger.debug('discovery wave %d: %d location(s)',
                         nr_waves, len(wave))

            for (location, source), result in zip(wave, self._scan_wave(wave)):
                if result is not None:
                    self._register(location, source, result)

        logger.info('discovery done in %d wave(s): %d option(s), %d rule(s)',
                    nr_waves, len(self.options), len(self.rules))
        return nr_waves

    def _scan_wave(self, wave):
        workers = self.config.discovery_workers
        if workers and len(wave) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(self._scan, wave))
        return [self._scan(item) for item in wave]

    def _scan(self, item):
        location, source = item
        try:
            return source.scan(location)
        except Exception as e:
            error = DiscoveryError(location, source.name, e)
            logger.warning('%s', error)
            with self._lock:
                self.errors.append(error)
            return None

    def _register(self, location, source, result):
        for info in result.candidates:
            option = ModCandidateOption(info, source=source.name)
            try:
                self.add_option(option, source.name)
            except DuplicateOptionError as e:
                logger.warning('%s, ignored', e)
                self.errors.append(e)
                continue

            for nested in info.nested:
                self.post(nested, source)

        for nested in result.nested:
            self.post(nested, source)

    #
    # Solving.
    #

    def seal(self):
        with self._lock:
            if not self._sealed:
                self._sealed = True
                logger.info('sealed with %d option(s), %d rule(s)',
                            len(self.options), len(self.rules))
                logger.dump(self)

    def solve(self):
        """Seals the context and resolves it."""
        self.seal()
        return resolve(self.options, self.rules, self.config)
