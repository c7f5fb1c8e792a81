"""Fetching and unpacking the packages of an install order."""

from __future__ import annotations

import io
import logging
import tarfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from requests import RequestException, Session
from tqdm import tqdm

from .errors import RegistryFetchError
from .versions import match_version

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Dependency
    from .registry import RegistryMetadataProvider

logger = logging.getLogger(__name__)


class PackageFetcher(ABC):
    """Interface of something that can place a published package on disk."""

    @abstractmethod
    def fetch(self, name: str, version: str, tarball_url: str, destination: Path) -> Path:
        """Fetch ``name@version`` from ``tarball_url`` into ``destination`` and return the package directory."""
        raise NotImplementedError


class TarballFetcher(PackageFetcher):
    """Downloads gzipped npm tarballs and unpacks them."""

    def __init__(self, session: Session | None = None, timeout: float = 30.0) -> None:
        """Initialize the fetcher."""
        self.session = Session() if session is None else session
        self.timeout = timeout

    def fetch(self, name: str, version: str, tarball_url: str, destination: Path) -> Path:
        """Download the tarball and unpack it into ``destination/name``."""
        logger.debug("Downloading %s@%s from %s", name, version, tarball_url)
        try:
            response = self.session.get(tarball_url, timeout=self.timeout)
            response.raise_for_status()
        except RequestException as e:
            msg = f"Couldn't download {name}@{version} from {tarball_url}: {e!s}"
            raise RegistryFetchError(msg, url=tarball_url) from e

        package_dir = destination / name
        package_dir.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(fileobj=io.BytesIO(response.content), mode="r:gz") as archive:
                members = _strip_top_directory(archive)
                if not members:
                    msg = f"Tarball of {name}@{version} from {tarball_url} has no package directory"
                    raise RegistryFetchError(msg, url=tarball_url)
                archive.extractall(package_dir, members=members, filter="data")
        except tarfile.TarError as e:
            msg = f"Couldn't unpack {name}@{version} from {tarball_url}: {e!s}"
            raise RegistryFetchError(msg, url=tarball_url) from e
        return package_dir


def _strip_top_directory(archive: tarfile.TarFile) -> list[tarfile.TarInfo]:
    # npm tarballs keep their files under a single top-level directory, usually `package/`
    members = []
    for member in archive.getmembers():
        _, _, rest = member.name.removeprefix("./").partition("/")
        if rest:
            member.name = rest
            members.append(member)
    return members


class Installer:
    """Installs each dependency of an install order.

    The version of every dependency is matched again against fresh registry metadata rather than reusing the
    version chosen while the graph was built.
    """

    def __init__(self, registry: RegistryMetadataProvider, fetcher: PackageFetcher, destination: Path | str) -> None:
        """Initialize the installer.

        Args:
            registry: Provider of published version metadata
            fetcher: Places each package on disk
            destination: Directory that receives one subdirectory per package

        """
        self.registry = registry
        self.fetcher = fetcher
        self.destination = Path(destination)

    def tarball_url(self, dependency: Dependency) -> tuple[str, str]:
        """Resolve ``dependency`` to a published version and return that version with its tarball URL."""
        versions = self.registry.fetch_all_versions(dependency.name)
        version = match_version(dependency.constraint, versions.keys(), package=dependency.name)
        tarball = (versions[version].get("dist") or {}).get("tarball")
        if not isinstance(tarball, str):
            msg = f"Version {version} of {dependency.name} has no tarball URL"
            raise RegistryFetchError(msg)
        return version, tarball

    def install(self, dependencies: Iterable[Dependency]) -> list[Path]:
        """Install every dependency, in the given order, and return the package directories."""
        dependencies = list(dependencies)
        installed = []
        with tqdm(desc="installing", total=len(dependencies), leave=False, unit=" packages") as t:
            for dependency in dependencies:
                version, tarball = self.tarball_url(dependency)
                logger.info("Installing %s@%s", dependency.name, version)
                installed.append(self.fetcher.fetch(dependency.name, version, tarball, self.destination))
                t.update(1)
        return installed
