"""Integration tests against a real git repository.

Prerequisites:
    - git on PATH

Run with:
    pytest tests/integration/test_git_repository.py -v -m integration
"""

import shutil
import subprocess

import pytest
import yaml

from potluck import cli
from potluck.exceptions import TransactionAborted
from potluck.transaction import Transaction
from potluck.vcs.git import GitVersionControl

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed"),
]


@pytest.fixture(autouse=True)
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's configuration."""
    gitconfig = tmp_path / "gitconfig"
    gitconfig.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Cook")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "cook@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Cook")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "cook@example.com")
    monkeypatch.setenv("POTLUCK_EDITOR", "true")


def git(repo_dir, *args) -> str:
    return subprocess.run(
        ["git", "-C", str(repo_dir), *args], capture_output=True, text=True, check=True
    ).stdout


def commit_count(repo_dir) -> int:
    return int(git(repo_dir, "rev-list", "--count", "HEAD").strip())


@pytest.fixture
def repo_dir(tmp_path):
    path = tmp_path / "recipes"
    assert cli.main(["init", str(path)]) == 0
    return path


@pytest.fixture
def pasta_source(tmp_path):
    source_dir = tmp_path / "incoming"
    source_dir.mkdir()
    (source_dir / "pasta.jpg").write_bytes(b"jpeg")
    path = source_dir / "pasta.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "name": "Pasta",
                "persons": 2,
                "images": ["pasta.jpg"],
                "ingredients": ["250g pasta", "salt"],
                "recipe": ["Boil", "Serve"],
            }
        )
    )
    return path


class TestRecipeLifecycle:
    """Tests for init, add, grocery, mv and rm through the command line."""

    def test_init(self, repo_dir):
        assert (repo_dir / ".potluck").is_file()
        assert commit_count(repo_dir) == 1
        assert git(repo_dir, "log", "-1", "--format=%s").strip() == "potluck initialized"

    def test_init_twice(self, repo_dir, capsys):
        assert cli.main(["init", str(repo_dir)]) == 0
        assert "Nothing to do" in capsys.readouterr().out
        assert commit_count(repo_dir) == 1

    def test_full_flow(self, repo_dir, pasta_source, capsys):
        base = ["-C", str(repo_dir)]

        assert cli.main([*base, "add", "pasta", str(pasta_source)]) == 0
        assert git(repo_dir, "ls-files").split() == [".images/pasta/pasta.jpg", ".potluck", "pasta"]

        capsys.readouterr()
        assert cli.main([*base, "grocery", "pasta", "--persons", "4"]) == 0
        assert capsys.readouterr().out == "Persons: 4\n500g pasta\nsalt\n"

        assert cli.main([*base, "mv", "pasta", "spaghetti"]) == 0
        assert git(repo_dir, "ls-files").split() == [
            ".images/spaghetti/pasta.jpg",
            ".potluck",
            "spaghetti",
        ]
        record = yaml.safe_load((repo_dir / "spaghetti").read_text())
        assert record["images"] == [".images/spaghetti/pasta.jpg"]

        assert cli.main([*base, "rm", "spaghetti"]) == 0
        assert git(repo_dir, "ls-files").split() == [".potluck"]
        assert git(repo_dir, "status", "--porcelain") == ""
        assert commit_count(repo_dir) == 4

    def test_replay_is_noop(self, repo_dir, pasta_source, tmp_path, capsys):
        base = ["-C", str(repo_dir)]
        image = tmp_path / "extra.jpg"
        image.write_bytes(b"extra")

        assert cli.main([*base, "add", "pasta", str(pasta_source)]) == 0
        assert cli.main([*base, "add", "pasta", "-i", str(image)]) == 0
        commits = commit_count(repo_dir)

        capsys.readouterr()
        assert cli.main([*base, "add", "pasta", "-i", str(image)]) == 0
        assert commit_count(repo_dir) == commits
        assert "Info: No new things here. Nothing to do." in capsys.readouterr().out

        assert cli.main([*base, "edit", "pasta"]) == 0
        assert commit_count(repo_dir) == commits


class TestGitRollback:
    """Tests for rollback against a real staging area."""

    def test_failed_stage_leaves_nothing_staged(self, repo_dir):
        vcs = GitVersionControl(repo_dir)
        (repo_dir / "soup").write_text("name: Soup\n")

        tx = Transaction(vcs, "should not commit")
        tx.stage("soup")
        tx.stage("missing")

        with pytest.raises(TransactionAborted) as exc_info:
            tx.run()

        assert exc_info.value.step == "stage missing"
        assert git(repo_dir, "diff", "--cached", "--name-only") == ""
        assert commit_count(repo_dir) == 1

    def test_has_changes(self, repo_dir):
        vcs = GitVersionControl(repo_dir)
        assert vcs.exists()
        assert not vcs.has_changes(cached=True)

        (repo_dir / ".potluck").write_text("soup: true\n")
        assert vcs.has_changes(cached=False)
        assert not vcs.has_changes(cached=True)

        vcs.stage(".potluck")
        assert vcs.has_changes(cached=True)
