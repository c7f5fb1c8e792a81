"""Selecting a concrete published version for an npm-style range."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from semantic_version import NpmSpec, Version

from .errors import ConstraintParseError, NoMatchingVersionError, VersionParseError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_OPERATOR_GAP = re.compile(r"([<>=~^]+)\s+")


def parse_constraint(constraint: str, package: str | None = None) -> NpmSpec:
    """Parse an npm range expression.

    Args:
        constraint: Range expression, e.g. ``^1.2.0`` or ``>=1.0.0 <2.0.0 || 3.x``
        package: Name of the package that declared it, used in the error

    Returns:
        Parsed range

    Raises:
        ConstraintParseError: if the expression is not a valid range

    """
    try:
        return NpmSpec(constraint)
    except ValueError:
        pass
    # Sometimes NPM specs have whitespace after an operator, which trips up the parser.
    # The whitespace between comparators is significant and stays.
    tightened = _OPERATOR_GAP.sub(r"\1", constraint)
    if tightened != constraint:
        try:
            return NpmSpec(tightened)
        except ValueError:
            pass
    raise ConstraintParseError(package, constraint)


def parse_version(version: str, package: str | None = None) -> Version:
    """Parse a published version string, strictly."""
    try:
        return Version(version)
    except ValueError as e:
        raise VersionParseError(package, version) from e


def match_version(constraint: str, available_versions: Iterable[str], package: str | None = None) -> str:
    """Return the published version that satisfies ``constraint``.

    Versions are tried last-declared first, in the order the registry reported them; the first one that satisfies
    the range wins. They are not re-sorted, so for a registry that lists versions in ascending order this yields
    the highest satisfying version.

    Args:
        constraint: Range expression as declared by a manifest
        available_versions: Published version strings, in registry order
        package: Name of the package, used in errors and logs

    Returns:
        The matching version string, exactly as the registry reported it

    Raises:
        ConstraintParseError: if ``constraint`` is not a valid range
        VersionParseError: if a tried version is not a valid semantic version
        NoMatchingVersionError: if no published version satisfies the range

    """
    spec = parse_constraint(constraint, package)
    for version in reversed(list(available_versions)):
        if spec.match(parse_version(version, package)):
            logger.debug("%s@%s matched %s", package, constraint, version)
            return version
    raise NoMatchingVersionError(package, constraint)
