"""Tests for the command-line driver."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from nary._cli import main
from nary.config import OutputFormat, Settings
from nary.registry import StaticRegistry


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "app", "version": "1.0.0", "dependencies": {"d": "1.0.0", "a": "^1.0.0"}})
    )
    return tmp_path


def settings(project: Path, **kwargs: object) -> Settings:
    return Settings(_cli_parse_args=False, target=str(project), **kwargs)


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("nary._cli.setup_logger"):
        yield


class TestMain:
    def test_text(self, project: Path, registry: StaticRegistry, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("nary._cli.NpmRegistry", return_value=registry) as npm_registry:
            assert main(settings(project, output_format=OutputFormat.text, timeout=2.5)) == 0

        npm_registry.assert_called_once_with("https://registry.npmjs.org", timeout=2.5)
        assert capsys.readouterr().out.splitlines() == [
            "b@^1.0.0 1.0.0",
            "a@^1.0.0 1.0.0",
            "c@^1.0.0 1.4.2",
            "d@1.0.0 1.0.0",
        ]

    def test_json_with_root(self, project: Path, registry: StaticRegistry, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("nary._cli.NpmRegistry", return_value=registry):
            assert main(settings(project, include_root=True)) == 0

        output = json.loads(capsys.readouterr().out)
        order = output["install_order"]
        assert order[-1] == {"name": "app", "constraint": "1.0.0", "version": None}
        assert [entry["name"] for entry in order] == ["b", "a", "c", "d", "app"]
        assert output["graph"]["app@1.0.0"]["dependencies"] == ["a@^1.0.0", "d@1.0.0"]
        assert output["graph"]["d@1.0.0"] == {"version": "1.0.0", "dependencies": ["c@^1.0.0"]}

    def test_dot_to_file(self, project: Path, registry: StaticRegistry) -> None:
        output_file = project / "graph.dot"
        with patch("nary._cli.NpmRegistry", return_value=registry):
            assert main(settings(project, output_format=OutputFormat.dot, output_file=output_file)) == 0

        assert "digraph" in output_file.read_text()

    def test_refuses_to_overwrite(self, project: Path, registry: StaticRegistry) -> None:
        output_file = project / "order.json"
        output_file.write_text("keep me")
        with patch("nary._cli.NpmRegistry", return_value=registry):
            assert main(settings(project, output_file=output_file)) == 1
            assert output_file.read_text() == "keep me"

            assert main(settings(project, output_file=output_file, force=True)) == 0
            assert output_file.read_text() != "keep me"

    def test_resolution_error(self, project: Path) -> None:
        with patch("nary._cli.NpmRegistry", return_value=StaticRegistry()):
            assert main(settings(project)) == 1

    def test_malformed_manifest(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "app", "version": "1.0.0", "dependencies": {"": "1"}})
        )

        with patch("nary._cli.NpmRegistry") as npm_registry:
            assert main(settings(tmp_path)) == 1
        npm_registry.assert_not_called()

    def test_missing_manifest(self, tmp_path: Path) -> None:
        assert main(settings(tmp_path / "nowhere")) == 1

    def test_version(self, project: Path) -> None:
        with patch("nary._cli.NpmRegistry") as npm_registry:
            assert main(settings(project, version=True)) == 0
        npm_registry.assert_not_called()

    def test_install(self, project: Path, registry: StaticRegistry, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("nary._cli.NpmRegistry", return_value=registry),
            patch("nary._cli.Installer") as installer,
        ):
            assert main(settings(project, install=True, install_dir=project / "node_modules")) == 0

        assert installer.call_args.args[0] is registry
        assert installer.call_args.args[2] == project / "node_modules"
        installed = installer.return_value.install.call_args.args[0]
        assert [dep.name for dep in installed] == ["b", "a", "c", "d"]
        capsys.readouterr()


class TestSettings:
    def test_defaults(self) -> None:
        config = Settings(_cli_parse_args=False)

        assert config.target == "."
        assert config.registry == "https://registry.npmjs.org"
        assert config.output_format == OutputFormat.json
        assert config.install_dir == Path("node_modules")
        assert config.force is False

    def test_command_line(self) -> None:
        config = Settings(_cli_parse_args=["--target", "somewhere", "--force"])

        assert config.target == "somewhere"
        assert config.force is True

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NARY_REGISTRY", "https://registry.example")

        assert Settings(_cli_parse_args=False).registry == "https://registry.example"

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError):  # noqa: PT011
            Settings(_cli_parse_args=False, timeout=0)
