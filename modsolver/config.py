"""
Resolver configuration.

Settings can be given explicitly or read from the environment:

    export MODSOLVER_ENVIRONMENT=client
    export MODSOLVER_OVERRIDES=config/overrides.yaml
    export MODSOLVER_DEBUG=solving,override_paths
"""

__all__ = [
    "SOLVING",
    "OVERRIDE_PATHS",
    "ResolverConfig",
    "debug_flags_from_environ",
]


from collections import namedtuple
import os

from modsolver.options import ENV_ANY


SOLVING        = 1 << 0
"""Log every decision of the solver."""

OVERRIDE_PATHS = 1 << 1
"""Log the describable path of each candidate, to write override keys."""

_flagnames = {
    'solving':        SOLVING,
    'override_paths': OVERRIDE_PATHS,
}


def debug_flags_from_environ(varname='MODSOLVER_DEBUG', getenv=os.getenv):
    """
    Reads debug flags from a comma separated list of case-insensitive flag
    names. Unknown names are ignored.
    """
    flags = 0
    for value in (getenv(varname) or '').split(','):
        flags |= _flagnames.get(value.strip().lower(), 0)
    return flags


def _int_from_environ(varname, default, getenv):
    value = getenv(varname)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError('%s must be an integer, got %r' % (varname, value))


class ResolverConfig(namedtuple('_ResolverConfig',
        'environment, overrides_path, iteration_limit, relaxation_limit, '
        'discovery_workers, debug_solving, debug_override_paths')):
    __slots__ = ()

    def __new__(cls, environment=ENV_ANY, overrides_path=None,
                iteration_limit=100000, relaxation_limit=256,
                discovery_workers=0, debug_solving=False,
                debug_override_paths=False):
        return super(ResolverConfig, cls).__new__(cls,
                environment or ENV_ANY, overrides_path,
                iteration_limit, relaxation_limit, discovery_workers,
                bool(debug_solving), bool(debug_override_paths))

    @classmethod
    def from_environ(cls, getenv=os.getenv, **kwargs):
        """
        Builds a config from MODSOLVER_* environment variables. Keyword
        arguments take precedence over the environment.
        """
        defaults = cls()
        flags = debug_flags_from_environ(getenv=getenv)

        values = dict(
            environment=getenv('MODSOLVER_ENVIRONMENT') or defaults.environment,
            overrides_path=(getenv('MODSOLVER_OVERRIDES') or
                            defaults.overrides_path),
            iteration_limit=_int_from_environ('MODSOLVER_ITERATION_LIMIT',
                    defaults.iteration_limit, getenv),
            relaxation_limit=_int_from_environ('MODSOLVER_RELAXATION_LIMIT',
                    defaults.relaxation_limit, getenv),
            discovery_workers=_int_from_environ('MODSOLVER_DISCOVERY_WORKERS',
                    defaults.discovery_workers, getenv),
            debug_solving=bool(flags & SOLVING),
            debug_override_paths=bool(flags & OVERRIDE_PATHS),
        )
        values.update(kwargs)

        return cls(**values)
