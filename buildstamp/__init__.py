"""Build provenance collection: commit hash, build date, target and profile."""

from .metadata import BuildMetadata, collect
from .publish import BuildEnvironment, publish
from .versioning import ProbeError, probe, probe_or

__all__ = [
    'BuildEnvironment',
    'BuildMetadata',
    'ProbeError',
    'collect',
    'probe',
    'probe_or',
    'publish',
]
