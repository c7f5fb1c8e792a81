"""Command-line interface for nary."""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING

from . import __version__ as nary_version
from .config import OutputFormat, Settings
from .errors import ResolutionError
from .installer import Installer, TarballFetcher
from .logger import setup_logger
from .manifest import Manifest
from .registry import NpmRegistry
from .resolution import build_graph, without_root

if TYPE_CHECKING:
    from .graph import DependencyGraph
    from .models import Dependency

logger = logging.getLogger(__name__)


def render(graph: DependencyGraph, order: list[Dependency], output_format: OutputFormat) -> str:
    """Render a resolution in the requested output format."""
    if output_format == OutputFormat.text:
        lines = []
        for dependency in order:
            version = graph.resolved_version(dependency)
            lines.append(str(dependency) if version is None else f"{dependency!s} {version}")
        return "\n".join(lines)
    if output_format == OutputFormat.json:
        return json.dumps(
            {
                "install_order": [
                    {**dependency.to_obj(), "version": graph.resolved_version(dependency)} for dependency in order
                ],
                "graph": graph.to_obj(),
            },
            indent=4,
        )
    return graph.to_dot().source


def main(settings: Settings | None = None) -> int:
    if settings is None:
        settings = Settings()
    setup_logger(settings.log_level)

    if settings.version:
        logger.info("nary version %s", nary_version)
        return 0

    if settings.output_file is not None and not settings.force and settings.output_file.exists():
        logger.error("%s already exists!\nRe-run with `--force` to overwrite the file.\n", settings.output_file)
        return 1

    try:
        manifest = Manifest.from_path(settings.target)
        logger.info("Resolving %s with %d direct dependencies", manifest, len(manifest.dependencies))

        with NpmRegistry(settings.registry, timeout=settings.timeout) as registry:
            graph = build_graph(manifest.root_dependency, manifest.dependencies, registry)
            order = graph.install_order()
            to_install = without_root(manifest.root_dependency, order)

            output = render(graph, order if settings.include_root else to_install, settings.output_format)
            if settings.output_file is None:
                sys.stdout.write(output + "\n")
            else:
                settings.output_file.write_text(output)
                logger.info("Output saved to %s", settings.output_file.absolute())

            if settings.install:
                installer = Installer(registry, TarballFetcher(timeout=settings.timeout), settings.install_dir)
                installer.install(to_install)
    except ResolutionError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1

    return 0
