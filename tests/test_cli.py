"""Tests for the top-level folio command."""

import pytest
import yaml
from click.testing import CliRunner

from folio import __version__
from folio.cli import main


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_groups(runner):
    result = runner.invoke(main, ["--help"])

    assert result.exit_code == 0
    for group in ("content", "cache", "config", "init"):
        assert group in result.output


def test_init(runner, tmp_path):
    with runner.isolated_filesystem(temp_dir=tmp_path) as cwd:
        (tmp_path / cwd / ".gitignore").write_text("*.pyc\n")

        result = runner.invoke(main, ["init"])

        assert result.exit_code == 0
        settings = yaml.safe_load((tmp_path / cwd / "folio.yaml").read_text())
        assert settings["content_dir"] == "content"
        assert (tmp_path / cwd / "content" / "index.md").exists()
        assert ".folio/cache/" in (tmp_path / cwd / ".gitignore").read_text()


def test_init_existing(runner, tmp_path):
    with runner.isolated_filesystem(temp_dir=tmp_path):
        runner.invoke(main, ["init"])

        result = runner.invoke(main, ["init"])

        assert "already exists" in result.output


def test_init_dry_run(runner, tmp_path):
    with runner.isolated_filesystem(temp_dir=tmp_path) as cwd:
        result = runner.invoke(main, ["--dry-run", "init"])

        assert result.exit_code == 0
        assert "DRY RUN" in result.output
        assert not (tmp_path / cwd / "folio.yaml").exists()


def test_subcommand_runs_through_main(runner, blog):
    result = runner.invoke(main, ["content", "routes"])

    assert result.exit_code == 0
    assert "/blog/first" in result.output
