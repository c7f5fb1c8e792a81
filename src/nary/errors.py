"""Exceptions raised while resolving a dependency closure.

Every error derives from :class:`ResolutionError`, which is a ``ValueError`` so that callers catching
``ValueError`` around :func:`nary.resolution.resolve` keep working.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Dependency


class ResolutionError(ValueError):
    """Base class for all resolution failures."""


class ConstraintParseError(ResolutionError):
    """A declared version constraint is not a valid range expression."""

    def __init__(self, package: str | None, constraint: str) -> None:
        """Initialize the error.

        Args:
            package: Name of the package that declared the constraint, if known
            constraint: The offending constraint text

        """
        self.package = package
        self.constraint = constraint
        super().__init__(f"Version {constraint!r} of {package or '<unknown>'} didn't parse")


class VersionParseError(ResolutionError):
    """A version string reported by the registry is not a valid semantic version."""

    def __init__(self, package: str | None, version: str) -> None:
        """Initialize the error."""
        self.package = package
        self.version = version
        super().__init__(f"Published version {version!r} of {package or '<unknown>'} didn't parse")


class NoMatchingVersionError(ResolutionError):
    """No published version satisfies a constraint."""

    def __init__(self, package: str | None, constraint: str) -> None:
        """Initialize the error."""
        self.package = package
        self.constraint = constraint
        super().__init__(f"No published version of {package or '<unknown>'} matches {constraint!r}")


class CyclicDependencyError(ResolutionError):
    """The dependency graph contains a cycle."""

    def __init__(self, dependency: Dependency) -> None:
        """Initialize the error.

        Args:
            dependency: A dependency on the detected cycle

        """
        self.dependency = dependency
        super().__init__(f"Cyclic dependency {dependency!s}")


class RegistryFetchError(ResolutionError):
    """Transport or shape failure from the registry metadata provider."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description
            url: The URL being fetched, if any
            status_code: The HTTP status code, if a response was received

        """
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class ManifestShapeError(ResolutionError):
    """A manifest or dependency mapping does not have the expected shape."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Initialize the error."""
        self.key = key
        super().__init__(message)
