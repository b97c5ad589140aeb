"""Git backend implemented by running the git command line tool."""

import subprocess
from pathlib import Path

from potluck.config import get_settings
from potluck.exceptions import VCSError
from potluck.logging_config import get_logger
from potluck.vcs.base import VersionControl

logger = get_logger(__name__)


class GitVersionControl(VersionControl):
    """Runs ``git -C <repo_dir> ...`` for every operation."""

    def __init__(self, repo_dir: str | Path, binary: str | None = None):
        super().__init__(repo_dir)
        self.binary = binary or get_settings().git_binary

    @property
    def name(self) -> str:
        return "git"

    def _run(self, command: str, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.binary, "-C", str(self.repo_dir), command, *args]
        logger.debug(f"Running {' '.join(cmd)}")

        try:
            return subprocess.run(cmd, text=True, capture_output=True, check=False)
        except OSError as e:
            raise VCSError(
                f"Git command '{command}' could not be started in '{self.repo_dir}' ({e})",
                command=command,
                repo_dir=str(self.repo_dir),
            ) from e

    def exec(self, command: str, *args: str) -> str:
        """Run a git command, raising VCSError on a non-zero exit."""
        proc = self._run(command, *args)
        if proc.returncode != 0:
            stderr = proc.stderr.strip()
            raise VCSError(
                f"Git command '{command}' failed in '{self.repo_dir}' "
                f"(exit {proc.returncode}: {stderr})",
                command=command,
                repo_dir=str(self.repo_dir),
                stderr=stderr,
            )
        return proc.stdout

    def stage(self, path: str | Path) -> None:
        self.exec("add", "-A", "--", str(path))

    def remove(self, path: str | Path) -> None:
        self.exec("rm", "-r", "--", str(path))

    def unstage_all(self) -> None:
        self.exec("reset")

    def has_changes(self, cached: bool) -> bool:
        args = ["--exit-code", "--quiet"]
        if cached:
            args.append("--cached")
        proc = self._run("diff", *args)
        if proc.returncode > 1:
            raise VCSError(
                f"Git command 'diff' failed in '{self.repo_dir}' ({proc.stderr.strip()})",
                command="diff",
                repo_dir=str(self.repo_dir),
                stderr=proc.stderr.strip(),
            )
        return proc.returncode == 1

    def commit(self, message: str) -> None:
        self.exec("commit", "-m", message)
        logger.info(f"Committed: {message}")

    def init(self) -> None:
        self.exec("init")

    def exists(self) -> bool:
        if not self.repo_dir.is_dir():
            return False
        return self._run("status").returncode == 0
