"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner

from offlinegate.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Point the CLI at a throwaway store with an empty manifest."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OFFLINEGATE_STORE_PATH", str(tmp_path / "caches.db"))
    monkeypatch.setenv("OFFLINEGATE_ORIGIN", "https://app.example")
    return tmp_path


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "offlinegate" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestForceActivateCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert "force-activate" in result.output


class TestFetchCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["fetch", "--help"])
        assert result.exit_code == 0
        assert "--navigate" in result.output
        assert "--method" in result.output

    def test_requires_url(self, runner):
        result = runner.invoke(cli, ["fetch"])
        assert result.exit_code != 0


class TestInstallAndCaches:
    def test_install_empty_manifest(self, runner, isolated):
        result = runner.invoke(cli, ["install"])
        assert result.exit_code == 0, result.output
        assert "Activated" in result.output

    def test_caches_lists_installed_generation(self, runner, isolated):
        runner.invoke(cli, ["install"])
        result = runner.invoke(cli, ["caches"])
        assert result.exit_code == 0, result.output
        assert "app-v1" in result.output
        assert "current" in result.output

    def test_new_version_marks_old_stale_until_installed(self, runner, isolated, monkeypatch):
        runner.invoke(cli, ["install"])
        monkeypatch.setenv("OFFLINEGATE_VERSION", "v2")
        result = runner.invoke(cli, ["caches"])
        assert "stale" in result.output

        runner.invoke(cli, ["install"])
        result = runner.invoke(cli, ["caches"])
        assert "app-v2" in result.output
        assert "app-v1" not in result.output

    def test_clear(self, runner, isolated):
        runner.invoke(cli, ["install"])
        result = runner.invoke(cli, ["clear", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Deleted 1 cache(s)." in result.output

    def test_force_activate(self, runner, isolated):
        result = runner.invoke(cli, ["force-activate"])
        assert result.exit_code == 0, result.output
        assert "Activated app-v1" in result.output

    def test_force_activate_sweeps_previous_version(self, runner, isolated, monkeypatch):
        runner.invoke(cli, ["install"])
        monkeypatch.setenv("OFFLINEGATE_VERSION", "v2")
        result = runner.invoke(cli, ["force-activate"])
        assert result.exit_code == 0, result.output
        assert "app-v1" in result.output

        result = runner.invoke(cli, ["caches"])
        assert "app-v2" in result.output
        assert "app-v1" not in result.output

    def test_bad_env_config_exits(self, runner, isolated, monkeypatch):
        monkeypatch.setenv("OFFLINEGATE_ORIGIN", "not-absolute")
        result = runner.invoke(cli, ["caches"])
        assert result.exit_code == 1


class TestValidateConfigCommand:
    def test_valid(self, runner, sample_proxy_yaml):
        result = runner.invoke(cli, ["validate-config", str(sample_proxy_yaml)])
        assert result.exit_code == 0
        assert "Valid config" in result.output
        assert "keypad-v3" in result.output

    def test_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("foo: bar\n")
        result = runner.invoke(cli, ["validate-config", str(path)])
        assert result.exit_code == 1
        assert "Invalid" in result.output

    def test_missing_file(self, runner):
        result = runner.invoke(cli, ["validate-config", "nonexistent.yaml"])
        assert result.exit_code != 0
