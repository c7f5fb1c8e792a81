from __future__ import annotations

import pytest

from nary.registry import StaticRegistry


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runintegration",
        action="store_true",
        default=False,
        help="run integration tests against the live npm registry",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--runintegration"):
        # --runintegration given in cli: do not skip integration tests
        return
    skip_integration = pytest.mark.skip(reason="need --runintegration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def tarball(name: str, version: str) -> str:
    return f"https://registry.example/{name}/-/{name.rsplit('/', 1)[-1]}-{version}.tgz"


@pytest.fixture
def registry() -> StaticRegistry:
    """A small registry with a chain, a diamond, and two major versions of left-pad."""
    reg = StaticRegistry()
    for name, version, dependencies in [
        ("a", "1.0.0", {"b": "^1.0.0"}),
        ("b", "1.0.0", {}),
        ("c", "1.0.0", {}),
        ("c", "1.4.2", {}),
        ("d", "1.0.0", {"c": "^1.0.0"}),
        ("e", "1.0.0", {"c": "^1.0.0"}),
        ("left-pad", "1.0.0", {}),
        ("left-pad", "1.3.0", {}),
        ("left-pad", "2.0.1", {}),
    ]:
        reg.add(name, version, dependencies, dist={"tarball": tarball(name, version)})
    return reg
