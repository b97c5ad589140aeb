"""Group several version control mutations into one commit."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from potluck.exceptions import PotluckError, RollbackFailed, TransactionAborted
from potluck.logging_config import get_logger
from potluck.vcs.base import VersionControl

logger = get_logger(__name__)

NO_CHANGES_MESSAGE = "No changes. Nothing to do."


class TransactionState(str, Enum):
    IDLE = "idle"
    EXECUTING = "executing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Step:
    """A named mutating operation."""

    name: str
    fn: Callable[..., Any]
    args: tuple[Any, ...] = field(default_factory=tuple)

    def __call__(self) -> Any:
        return self.fn(*self.args)


class Transaction:
    """
    Run steps in order and commit once, or reset the staging area.

    States: IDLE -> EXECUTING -> COMMITTED | ROLLED_BACK.

    The first failing step stops the run; later steps never execute. The
    staging area is reset exactly once and TransactionAborted is raised (or
    RollbackFailed when the reset itself fails). When every step succeeds a
    commit is made only if the repository reports changes, so replaying the
    same steps against an unchanged tree is a no-op.

    Usage:
        with Transaction(vcs, "Recipe moved") as tx:
            tx.stage(index.filename)
            tx.stage(new_name)
    """

    def __init__(
        self,
        vcs: VersionControl,
        message: str,
        empty_message: str = NO_CHANGES_MESSAGE,
        cached: bool = True,
        notify: Callable[[str], None] | None = None,
    ):
        self.vcs = vcs
        self.message = message
        self.empty_message = empty_message
        self.cached = cached
        self.notify = notify or print
        self.steps: list[Step] = []
        self.state = TransactionState.IDLE
        self.committed = False

    def add_step(self, name: str, fn: Callable[..., Any], *args: Any) -> "Transaction":
        if self.state is not TransactionState.IDLE:
            raise PotluckError(f"Cannot add step '{name}' to a {self.state.value} transaction")
        self.steps.append(Step(name=name, fn=fn, args=args))
        return self

    def stage(self, path: str | Path) -> "Transaction":
        return self.add_step(f"stage {path}", self.vcs.stage, path)

    def remove(self, path: str | Path) -> "Transaction":
        return self.add_step(f"remove {path}", self.vcs.remove, path)

    def run(self, steps: Iterable[Step] | None = None) -> bool:
        """
        Execute queued steps (plus ``steps``) and commit.

        Returns:
            True if a commit was created, False when there was nothing to commit.

        Raises:
            TransactionAborted: A step failed and the staging area was reset.
            RollbackFailed: A step failed and resetting failed as well.
        """
        if self.state is not TransactionState.IDLE:
            raise PotluckError(f"Transaction '{self.message}' already {self.state.value}")

        if steps is not None:
            self.steps.extend(steps)

        self.state = TransactionState.EXECUTING
        logger.debug(f"Transaction '{self.message}': running {len(self.steps)} steps")

        for step in self.steps:
            try:
                step()
            except Exception as e:
                self._rollback(step, e)

        try:
            changed = self.vcs.has_changes(self.cached)
            if changed:
                self.vcs.commit(self.message)
        except Exception as e:
            self._rollback(Step(name="commit", fn=self.vcs.commit), e)

        self.state = TransactionState.COMMITTED
        self.committed = changed

        if not changed:
            logger.info(f"Transaction '{self.message}': {self.empty_message}")
            self.notify(f"Info: {self.empty_message}")

        return changed

    def _rollback(self, step: Step, cause: Exception) -> None:
        self.state = TransactionState.ROLLED_BACK
        logger.error(f"Transaction '{self.message}' failed at step '{step.name}': {cause}")

        try:
            self.vcs.unstage_all()
        except Exception as rollback_error:
            logger.critical(
                f"Reset after failed step '{step.name}' failed: {rollback_error}. "
                f"Repository may be inconsistent"
            )
            raise RollbackFailed(step.name, cause, rollback_error) from rollback_error

        raise TransactionAborted(step.name, cause) from cause

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.run()
