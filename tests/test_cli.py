"""Tests for the command line entry point."""

import logging

import pytest

from potluck import cli
from potluck.exceptions import VCSError
from potluck.logging_config import StructuredJsonFormatter


@pytest.fixture
def use_repo(monkeypatch, repo):
    """Make the CLI open the fake-VCS repository instead of a git one."""
    monkeypatch.setattr(cli, "RecipeRepository", lambda repo_dir, settings=None: repo)
    return repo


class TestParser:
    """Tests for argument parsing."""

    def test_add(self):
        args = cli.build_parser().parse_args(
            ["add", "pasta", "pasta.yml", "-i", "a.jpg", "--image", "b.jpg", "-q"]
        )
        assert args.command == "add"
        assert args.path == "pasta.yml"
        assert args.image == ["a.jpg", "b.jpg"]
        assert args.quiet is True
        assert args.force is False

    def test_grocery(self):
        args = cli.build_parser().parse_args(
            ["-C", "/recipes", "grocery", "bread", "--persons", "3", "--plan", "a.yml", "b.yml"]
        )
        assert args.dir == "/recipes"
        assert args.names == ["bread"]
        assert args.plans == ["a.yml", "b.yml"]
        assert args.persons == 3

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestMain:
    """Tests for main() dispatch and error reporting."""

    def test_not_a_repository(self, tmp_path, capsys):
        assert cli.main(["-C", str(tmp_path / "missing"), "list"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Seems not to be a potluck repository")
        assert err.rstrip().endswith("Abort.")

    def test_list(self, use_repo, add_recipe, capsys):
        add_recipe("pasta", name="Pasta", persons=2)
        assert cli.main(["list"]) == 0
        assert capsys.readouterr().out == "pasta (Pasta)\n"

    def test_grocery(self, use_repo, add_recipe, capsys):
        add_recipe("pasta", name="Pasta", persons=2, ingredients=["250g pasta", "salt"])
        assert cli.main(["grocery", "pasta", "--persons", "4"]) == 0
        assert capsys.readouterr().out == "Persons: 4\n500g pasta\nsalt\n"

    def test_grocery_needs_names(self, use_repo, capsys):
        assert cli.main(["grocery"]) == 1
        assert "--plan" in capsys.readouterr().err

    def test_unknown_recipe(self, use_repo, capsys):
        assert cli.main(["rm", "nope"]) == 1
        assert "No recipe found with the name 'nope'" in capsys.readouterr().err

    def test_add_and_noop(self, use_repo, capsys):
        assert cli.main(["add", "soup", "-q"]) == 0
        assert use_repo.vcs.commits[-1] == "New recipe added"

        assert cli.main(["edit", "soup"]) == 0
        assert "Info: No changes. Nothing to do." in capsys.readouterr().out

    def test_rollback_failed(self, use_repo, add_recipe, capsys):
        add_recipe("pasta", name="Pasta", persons=2)
        use_repo.vcs.fail_on["remove"] = VCSError("rm failed")
        use_repo.vcs.fail_on["unstage_all"] = VCSError("reset failed")

        assert cli.main(["rm", "pasta"]) == 1
        assert "Something went horribly wrong" in capsys.readouterr().err


class TestLoggingSetup:
    """Tests for how main() configures logging."""

    def test_flag_overrides_environment(self, use_repo, monkeypatch):
        monkeypatch.setenv("POTLUCK_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert cli.main(["--log-level", "DEBUG", "list"]) == 0
        assert logging.getLogger("potluck").level == logging.DEBUG

    def test_level_and_format_from_settings(self, use_repo, monkeypatch):
        monkeypatch.setenv("POTLUCK_LOG_LEVEL", "INFO")
        monkeypatch.setenv("POTLUCK_LOG_FORMAT", "json")

        assert cli.main(["list"]) == 0
        assert logging.getLogger("potluck").level == logging.INFO
        assert isinstance(logging.getLogger().handlers[0].formatter, StructuredJsonFormatter)
