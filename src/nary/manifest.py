"""Loading package manifests (``package.json``) and adapting dependency mappings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from .errors import ManifestShapeError
from .models import Dependency

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"
RESERVED_PREFIX = "_"


def dependencies_from_mapping(mapping: Mapping[str, Any] | None) -> list[Dependency]:
    """Convert a ``{name: constraint}`` mapping into dependencies.

    Keys starting with an underscore are reserved by registries and are skipped. The result keeps the insertion
    order of ``mapping``.

    Args:
        mapping: The ``dependencies`` value of a manifest or of a version document, or None if it was absent

    Returns:
        List of dependencies

    Raises:
        ManifestShapeError: if ``mapping`` is not a mapping, a name is empty or a constraint is not a string

    """
    if mapping is None:
        return []
    if not hasattr(mapping, "items"):
        msg = f"Expected dependencies to be a JSON object, got {type(mapping).__name__}"
        raise ManifestShapeError(msg)
    dependencies = []
    for name, constraint in mapping.items():
        if not isinstance(name, str) or not name:
            msg = f"Dependency name is empty or not a string: {name!r}"
            raise ManifestShapeError(msg, key=str(name))
        if name.startswith(RESERVED_PREFIX):
            continue
        if not isinstance(constraint, str):
            msg = f"Constraint of dependency {name} is not a string: {constraint!r}"
            raise ManifestShapeError(msg, key=name)
        dependencies.append(Dependency(name=name, constraint=constraint))
    return dependencies


class Manifest:
    """The name, version and direct dependencies declared by a package."""

    def __init__(self, name: str, version: str, dependencies: list[Dependency] | None = None) -> None:
        """Initialize a manifest."""
        self.name: str = name
        self.version: str = version
        self.dependencies: list[Dependency] = list(dependencies or ())

    @property
    def root_dependency(self) -> Dependency:
        """The root of a resolution: this package, identified by its own exact version."""
        return Dependency(name=self.name, constraint=self.version)

    @classmethod
    def from_obj(cls, obj: object) -> Manifest:
        """Create a manifest from a decoded ``package.json`` document."""
        if not isinstance(obj, dict):
            msg = "Expected the manifest to be a JSON object"
            raise ManifestShapeError(msg)
        for key in ("name", "version"):
            value = obj.get(key)
            if not isinstance(value, str) or not value:
                msg = f"Manifest field {key!r} is missing, empty or not a string"
                raise ManifestShapeError(msg, key=key)
        return cls(
            name=obj["name"],
            version=obj["version"],
            dependencies=dependencies_from_mapping(obj.get("dependencies")),
        )

    @classmethod
    def from_json(cls, reader: IO[str]) -> Manifest:
        """Load a manifest from a text stream."""
        try:
            obj = json.load(reader)
        except json.JSONDecodeError as e:
            msg = f"Manifest is not valid JSON: {e!s}"
            raise ManifestShapeError(msg) from e
        return cls.from_obj(obj)

    @classmethod
    def from_path(cls, path: Path | str) -> Manifest:
        """Load a manifest from a ``package.json`` file or from the directory that contains one."""
        path = Path(path)
        if path.name != MANIFEST_FILENAME:
            path = path / MANIFEST_FILENAME
        logger.debug("Loading manifest %s", path)
        try:
            with path.open() as manifest_file:
                return cls.from_json(manifest_file)
        except OSError as e:
            msg = f"Expected a {MANIFEST_FILENAME} file at {path!s}"
            raise ManifestShapeError(msg) from e

    def __str__(self) -> str:
        """Get string representation of manifest."""
        return f"{self.name}@{self.version}"

