"""Registry metadata providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote

from requests import RequestException, Session

from .errors import RegistryFetchError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "https://registry.npmjs.org"
DEFAULT_TIMEOUT = 30.0


class RegistryMetadataProvider(ABC):
    """Source of published version metadata for packages."""

    @abstractmethod
    def fetch_all_versions(self, name: str) -> dict[str, dict[str, Any]]:
        """Return every published version of ``name`` mapped to its metadata, in registry order."""
        raise NotImplementedError

    @abstractmethod
    def fetch_version_metadata(self, name: str, version: str) -> dict[str, Any]:
        """Return the metadata document of one published version."""
        raise NotImplementedError

    def fetch_version_dependencies(self, name: str, version: str) -> Mapping[str, Any]:
        """Return the dependencies declared by one published version.

        A version document without a ``dependencies`` field declares no dependencies.
        """
        dependencies = self.fetch_version_metadata(name, version).get("dependencies")
        if dependencies is None:
            return {}
        return dependencies

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Exit context manager."""
        self.close()

    def close(self) -> None:  # noqa: B027
        """Release any resources held by the provider."""


class NpmRegistry(RegistryMetadataProvider):
    """Metadata provider backed by an npm-compatible HTTP registry."""

    def __init__(
        self,
        url: str = DEFAULT_REGISTRY,
        timeout: float = DEFAULT_TIMEOUT,
        session: Session | None = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            url: Base URL of the registry
            timeout: Per-request timeout in seconds
            session: Session to reuse; a new one is created if omitted

        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = Session() if session is None else session
        self.session.headers["Accept"] = "application/json"

    def _url(self, *segments: str) -> str:
        # each segment is encoded whole, so a scoped name's slash becomes %2F
        return "/".join([self.url, *(quote(segment, safe="@") for segment in segments)])

    def _get_json(self, url: str) -> dict[str, Any]:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except RequestException as e:
            msg = f"Couldn't GET URL: {url}: {e!s}"
            raise RegistryFetchError(msg, url=url) from e

        if not response.ok:
            msg = f"Couldn't GET URL: {url}: HTTP {response.status_code}"
            raise RegistryFetchError(msg, url=url, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            msg = f"Couldn't JSON parse metadata from {url}"
            raise RegistryFetchError(msg, url=url, status_code=response.status_code) from e

        if not isinstance(body, dict):
            msg = f"Metadata from {url} was not a JSON object"
            raise RegistryFetchError(msg, url=url, status_code=response.status_code)
        return body

    def fetch_all_versions(self, name: str) -> dict[str, dict[str, Any]]:
        """Fetch the package document and return its ``versions`` object."""
        url = self._url(name)
        versions = self._get_json(url).get("versions")
        if not isinstance(versions, dict):
            msg = f"Versions of {name} was not a JSON object"
            raise RegistryFetchError(msg, url=url)
        return versions

    def fetch_version_metadata(self, name: str, version: str) -> dict[str, Any]:
        """Fetch the document of a single published version."""
        return self._get_json(self._url(name, version))

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __repr__(self) -> str:
        """Get the representation of the registry."""
        return f"{self.__class__.__name__}({self.url!r})"


class StaticRegistry(RegistryMetadataProvider):
    """Metadata provider serving canned data, e.g. ``{"left-pad": {"1.0.0": {"dependencies": {}}}}``."""

    def __init__(self, packages: Mapping[str, Mapping[str, dict[str, Any]]] | None = None) -> None:
        """Initialize the static registry."""
        self._packages: dict[str, dict[str, dict[str, Any]]] = {
            name: dict(versions) for name, versions in (packages or {}).items()
        }

    def add(self, name: str, version: str, dependencies: Mapping[str, str] | None = None, **metadata: Any) -> None:
        """Publish a version; versions are listed in the order they were added."""
        document = {"name": name, "version": version, **metadata}
        if dependencies is not None:
            document["dependencies"] = dict(dependencies)
        self._packages.setdefault(name, {})[version] = document

    def fetch_all_versions(self, name: str) -> dict[str, dict[str, Any]]:
        """Return the canned versions of ``name``."""
        if name not in self._packages:
            msg = f"Package {name} not found"
            raise RegistryFetchError(msg, status_code=404)
        return dict(self._packages[name])

    def fetch_version_metadata(self, name: str, version: str) -> dict[str, Any]:
        """Return the canned metadata of ``name@version``."""
        versions = self.fetch_all_versions(name)
        if version not in versions:
            msg = f"Version {version} of {name} not found"
            raise RegistryFetchError(msg, status_code=404)
        return versions[version]
