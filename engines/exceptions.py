"""
Error taxonomy for the curve engines.

Precondition violations (querying something that is not fully defined),
structural errors (composing a composite around an undefined child),
sampling-domain violations and curve-file failures. Physically infeasible
operating points are never raised: they live in the tables as NaN.
"""


class CurveError(Exception):
    """Base class for every error raised by the curve engines"""


class IncompleteDefinitionError(CurveError, RuntimeError):
    """A node was queried before all of its parameters or members were defined"""


class CellIncompleteError(IncompleteDefinitionError):
    """Cell must be fully defined"""


class StructuralError(CurveError):
    """A composite was built around a child that cannot be composed"""


class CompositeIncompleteError(StructuralError, IncompleteDefinitionError):
    """Composite is empty or holds a child that is not fully defined"""


class ModuleIncompleteError(CompositeIncompleteError):
    pass


class SubArrayIncompleteError(CompositeIncompleteError):
    pass


class ClusterIncompleteError(CompositeIncompleteError):
    pass


class SamplingDomainError(CurveError, ValueError):
    """Value lies outside the shared sampling grid"""


class CurveFileError(CurveError, OSError):
    """Curve table could not be read from or written to disk"""
