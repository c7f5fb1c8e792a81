"""Discovering the dependency closure of a root package and ordering it for installation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tqdm import tqdm

from .graph import ROOT_ID, DependencyGraph, DependencyId
from .manifest import dependencies_from_mapping
from .versions import match_version

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Dependency
    from .registry import RegistryMetadataProvider

logger = logging.getLogger(__name__)


class _Frame:
    """A dependency whose declared dependencies are still being expanded."""

    def __init__(self, dependency_id: DependencyId, remaining: Iterable[Dependency]) -> None:
        self.dependency_id: DependencyId = dependency_id
        self.remaining: list[Dependency] = list(remaining)


def fetch_declared_dependencies(
    dependency: Dependency,
    registry: RegistryMetadataProvider,
) -> tuple[str, list[Dependency]]:
    """Pick the published version that satisfies ``dependency`` and return it with its own declared dependencies."""
    versions = registry.fetch_all_versions(dependency.name)
    version = match_version(dependency.constraint, versions.keys(), package=dependency.name)
    logger.info("Found version: %s@%s", dependency.name, version)
    declared = registry.fetch_version_dependencies(dependency.name, version)
    return version, dependencies_from_mapping(declared)


def build_graph(
    root: Dependency,
    root_dependencies: Iterable[Dependency],
    registry: RegistryMetadataProvider,
) -> DependencyGraph:
    """Expand the full dependency closure of ``root`` into a graph.

    Declared dependencies are visited last-declared first, and each newly discovered dependency is expanded
    completely before its parent moves on to its next declared dependency. A dependency whose exact
    ``(name, constraint)`` pair was already discovered only gains an edge; the registry is not consulted again.

    Args:
        root: The package being resolved
        root_dependencies: Dependencies declared by ``root``, in declaration order
        registry: Provider of published version metadata

    Returns:
        The completed graph, which may still contain a cycle

    """
    graph = DependencyGraph.rooted_at(root)
    stack = [_Frame(ROOT_ID, root_dependencies)]

    with tqdm(desc=f"resolving {root!s}", leave=False, unit=" dependencies") as t:
        while stack:
            frame = stack[-1]
            if not frame.remaining:
                stack.pop()
                continue
            dependency = frame.remaining.pop()
            logger.debug("%s %s", dependency.name, dependency.constraint)

            dependency_id, is_new = graph.add_dependency(dependency)
            graph.add_requirement(dependency_id, frame.dependency_id)
            if not is_new:
                continue

            version, declared = fetch_declared_dependencies(dependency, registry)
            graph.set_resolved_version(dependency, version)
            t.update(1)
            stack.append(_Frame(dependency_id, declared))

    return graph


def resolve(
    root: Dependency,
    root_dependencies: Iterable[Dependency],
    registry: RegistryMetadataProvider,
) -> list[Dependency]:
    """Resolve the dependency closure of ``root`` and return it in install order.

    Every dependency appears before the packages that declared it. The root itself is part of the result; use
    :func:`without_root` to drop it.

    Raises:
        ResolutionError: any registry, version matching, manifest shape or cycle failure aborts the resolution

    """
    return build_graph(root, root_dependencies, registry).install_order()


def without_root(root: Dependency, ordered: Iterable[Dependency]) -> list[Dependency]:
    """Drop the root package from an install order."""
    return [dependency for dependency in ordered if dependency != root]
