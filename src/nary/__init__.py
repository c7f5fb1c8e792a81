"""The `nary` APIs."""

__version__ = "0.1.0"

from .errors import (
    ConstraintParseError,
    CyclicDependencyError,
    ManifestShapeError,
    NoMatchingVersionError,
    RegistryFetchError,
    ResolutionError,
    VersionParseError,
)
from .graph import DependencyGraph, IdentityMap
from .manifest import Manifest, dependencies_from_mapping
from .models import Dependency
from .registry import NpmRegistry, RegistryMetadataProvider, StaticRegistry
from .resolution import build_graph, resolve, without_root
from .versions import match_version, parse_constraint

__all__ = [
    "ConstraintParseError",
    "CyclicDependencyError",
    "Dependency",
    "DependencyGraph",
    "IdentityMap",
    "Manifest",
    "ManifestShapeError",
    "NoMatchingVersionError",
    "NpmRegistry",
    "RegistryFetchError",
    "RegistryMetadataProvider",
    "ResolutionError",
    "StaticRegistry",
    "VersionParseError",
    "build_graph",
    "dependencies_from_mapping",
    "match_version",
    "parse_constraint",
    "resolve",
    "without_root",
]
