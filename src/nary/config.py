"""Configuration settings for nary."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    CliImplicitFlag,
    SettingsConfigDict,
)

from .registry import DEFAULT_REGISTRY, DEFAULT_TIMEOUT


class OutputFormat(str, Enum):
    """Output formats for nary."""

    json = "json"
    text = "text"
    dot = "dot"


class Settings(BaseSettings):
    """Settings for nary."""

    target: str = Field(
        default=".",
        description="""Directory containing a package.json, or the path of a
            package.json, whose dependencies should be resolved.""",
    )
    registry: str = Field(
        default=DEFAULT_REGISTRY,
        description="""Base URL of the npm-compatible registry to query.""",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="""Timeout in seconds for each registry request.""",
    )
    output_format: OutputFormat = Field(
        default=OutputFormat.json,
        description="""Output format. `json` and `text` print the install
            order; `dot` prints the dependency graph.""",
    )
    output_file: Path | None = Field(
        default=None,
        description="""Output file path. If not provided, the output will be
        written to stdout.""",
    )
    force: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Force the overwrite of the output file if it already
        exists.""",
    )
    include_root: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Keep the root package at the end of the install order.""",
    )
    install: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Download and unpack every package of the install order
        into `--install_dir`.""",
    )
    install_dir: Path = Field(
        default=Path("node_modules"),
        description="""Directory that receives the installed packages.""",
    )
    log_level: str = Field(default="info", description="Log level")
    version: CliImplicitFlag[bool] = Field(
        default=False,
        description="""Show the version of nary and exit.""",
    )

    model_config = SettingsConfigDict(
        cli_parse_args=True,
        cli_prog_name="nary",
        env_prefix="NARY_",
    )
