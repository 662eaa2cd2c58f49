"""
Mod resolution engine.

Decides which of the discovered mod candidates to load, subject to mandatory
presence, per-id uniqueness, dependency ranges, incompatibilities and the
environment, or explains why no consistent selection exists.

Typical use:

    context = Context(ResolverConfig.from_environ())
    context.add_runtime_mod()
    context.discover_all(['mods'], source=my_discovery_source)
    result = context.solve()
    if not result.ok:
        print(result.render())
"""

__all__ = [
    "CandidateInfo",
    "Context",
    "ResolverConfig",
    "ResolutionError",
    "Selected",
    "Unsatisfiable",
    "parse_clause",
    "resolve",
]


from modsolver.clause import parse_clause
from modsolver.config import ResolverConfig
from modsolver.context import Context
from modsolver.errors import ResolutionError
from modsolver.options import CandidateInfo
from modsolver.solver import Selected
from modsolver.solver import Unsatisfiable
from modsolver.solver import resolve
