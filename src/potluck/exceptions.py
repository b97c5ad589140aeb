"""Exceptions raised by potluck."""


class PotluckError(Exception):
    """Base exception for potluck errors."""


class RepositoryError(PotluckError):
    """Raised when a directory is not (or only half) a potluck repository."""

    def __init__(self, message: str, repo_dir: str | None = None):
        super().__init__(message)
        self.repo_dir = repo_dir


class RecipeNotFoundError(PotluckError):
    """Raised when a recipe is not present in the index."""

    def __init__(self, name: str):
        super().__init__(f"No recipe found with the name '{name}'")
        self.name = name


class RecipeExistsError(PotluckError):
    """Raised when a destination already exists and --force was not given."""

    def __init__(self, path: str):
        super().__init__(
            f"Destination file already exists ({path}). Use --force to ignore this"
        )
        self.path = path


class RecipeFormatError(PotluckError):
    """Raised when a record, index or plan file cannot be parsed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ScalingError(PotluckError):
    """Raised when serving counts make scaling undefined."""


class VCSError(PotluckError):
    """Raised when a version control command fails."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        repo_dir: str | None = None,
        stderr: str | None = None,
    ):
        super().__init__(message)
        self.command = command
        self.repo_dir = repo_dir
        self.stderr = stderr


class TransactionAborted(PotluckError):
    """Raised when a transaction step failed and the working tree was reset."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"{cause}")
        self.step = step
        self.cause = cause


class RollbackFailed(TransactionAborted):
    """Raised when resetting the working tree after a failed step also failed."""

    def __init__(self, step: str, cause: BaseException, rollback_error: BaseException):
        super().__init__(step, cause)
        self.rollback_error = rollback_error
        self.args = (
            f"Reset failed ({rollback_error}). Something went horribly wrong! "
            f"Cause: {cause}",
        )
