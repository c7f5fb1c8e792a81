"""Dependency graph over dense integer node identities."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import networkx as nx
from graphviz import Digraph

from .errors import CyclicDependencyError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .models import Dependency

logger = logging.getLogger(__name__)

DependencyId = int
ROOT_ID: DependencyId = 0


class IdentityMap:
    """Bidirectional association between dependencies and their node identities.

    Identities are assigned densely in the order dependencies are first seen, so the first dependency added (the
    root of a resolution) gets ``0``. Both directions are updated together in :meth:`add`.
    """

    def __init__(self) -> None:
        """Initialize an empty identity map."""
        self._ids: dict[Dependency, DependencyId] = {}
        self._dependencies: list[Dependency] = []

    def add(self, dependency: Dependency) -> DependencyId:
        """Assign the next identity to a dependency that has not been seen yet."""
        if dependency in self._ids:
            msg = f"{dependency!s} already has identity {self._ids[dependency]}"
            raise KeyError(msg)
        dependency_id = len(self._dependencies)
        self._ids[dependency] = dependency_id
        self._dependencies.append(dependency)
        return dependency_id

    def id_of(self, dependency: Dependency) -> DependencyId:
        """Get the identity of a dependency."""
        return self._ids[dependency]

    def dependency(self, dependency_id: DependencyId) -> Dependency:
        """Get the dependency with the given identity."""
        if not 0 <= dependency_id < len(self._dependencies):
            raise KeyError(dependency_id)
        return self._dependencies[dependency_id]

    def __contains__(self, dependency: object) -> bool:
        """Check if the dependency has an identity."""
        return dependency in self._ids

    def __len__(self) -> int:
        """Return the number of identities assigned."""
        return len(self._dependencies)

    def __iter__(self) -> Iterator[Dependency]:
        """Iterate over dependencies in identity order."""
        yield from self._dependencies


class DependencyGraph(nx.DiGraph):
    """A graph whose edge ``(a, b)`` means that ``a`` must be installed before ``b``, because ``b`` declared ``a``."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        """Initialize the dependency graph."""
        super().__init__(*args, **kwargs)
        self.identities: IdentityMap = IdentityMap()
        self.resolved_versions: dict[DependencyId, str] = {}

    @classmethod
    def rooted_at(cls, root: Dependency) -> DependencyGraph:
        """Create a graph that contains only the root node."""
        graph = cls()
        graph.add_dependency(root)
        return graph

    @property
    def root(self) -> Dependency:
        """The dependency with identity ``0``."""
        return self.identities.dependency(ROOT_ID)

    def add_dependency(self, dependency: Dependency) -> tuple[DependencyId, bool]:
        """Add a node for ``dependency`` unless it already has one.

        Returns:
            The identity of the dependency and whether it was newly added

        """
        if dependency in self.identities:
            return self.identities.id_of(dependency), False
        dependency_id = self.identities.add(dependency)
        self.add_node(dependency_id)
        return dependency_id, True

    def add_requirement(self, dependency_id: DependencyId, dependent_id: DependencyId) -> None:
        """Record that ``dependent_id`` declared ``dependency_id``."""
        if not self.has_edge(dependency_id, dependent_id):
            self.add_edge(dependency_id, dependent_id)

    def set_resolved_version(self, dependency: Dependency, version: str) -> None:
        """Remember which published version was chosen for a dependency."""
        self.resolved_versions[self.identities.id_of(dependency)] = version

    def resolved_version(self, dependency: Dependency) -> str | None:
        """Get the published version chosen for a dependency, if it was resolved against a registry."""
        return self.resolved_versions.get(self.identities.id_of(dependency))

    def dependencies_of(self, dependency: Dependency) -> list[Dependency]:
        """Get the dependencies declared by ``dependency``, in identity order."""
        return [
            self.identities.dependency(node) for node in sorted(self.predecessors(self.identities.id_of(dependency)))
        ]

    def dependents(self, dependency: Dependency) -> list[Dependency]:
        """Get the dependencies that declared ``dependency``, in identity order."""
        return [self.identities.dependency(node) for node in sorted(self.successors(self.identities.id_of(dependency)))]

    def install_order(self) -> list[Dependency]:
        """Linearize the graph so that every dependency precedes the packages that declared it.

        Ties are broken by identity, i.e. by the order in which dependencies were discovered, so the same graph
        always produces the same order.

        Raises:
            CyclicDependencyError: if the graph contains a cycle

        """
        try:
            ordering = list(nx.lexicographical_topological_sort(self))
        except nx.NetworkXUnfeasible:
            u, _v, *_ = nx.find_cycle(self)[0]
            dependency = self.identities.dependency(u)
            logger.debug("Cycle detected at %s", dependency)
            raise CyclicDependencyError(dependency) from None

        ordered: list[Dependency] = []
        seen: set[Dependency] = set()
        for node in ordering:
            dependency = self.identities.dependency(node)
            if dependency not in seen:
                seen.add(dependency)
                ordered.append(dependency)
        return ordered

    def to_dot(self) -> Digraph:
        """Render a Graphviz Dot graph; arrows point from a dependency to the package that declared it."""
        dot = Digraph(comment=f"Install order for {self.root!s}")
        for node in sorted(self.nodes):
            dependency = self.identities.dependency(node)
            version = self.resolved_versions.get(node)
            label = str(dependency) if version is None else f"{dependency!s}\n{version}"
            dot.node(f"dep{node}", label=label, shape="rectangle" if node == ROOT_ID else "oval")
        for u, v in self.edges:
            dot.edge(f"dep{u}", f"dep{v}")
        return dot

    def to_obj(self) -> dict[str, dict[str, object]]:
        """Convert graph to dictionary representation, keyed by ``name@constraint``."""
        return {
            str(dependency): {
                "version": self.resolved_versions.get(dependency_id),
                "dependencies": [str(d) for d in self.dependencies_of(dependency)],
            }
            for dependency_id, dependency in enumerate(self.identities)
        }
