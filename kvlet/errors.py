"""kvlet error types.

Every failure a command can hit is one of these. Core operations raise
them before touching durable state; the command layer decides how to
present them.
"""


class KvletError(Exception):
    """Base class for all repository errors.

    Attributes:
        message: The user-facing description of the failure.
    """

    message = "Repository error."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotInitialized(KvletError):
    message = "Not in an initialized kvlet directory."


class AlreadyInitialized(KvletError):
    message = (
        "A kvlet version-control system already exists in the current directory."
    )


class FileNotFound(KvletError):
    """Raised when a working file, or a file in a commit, does not exist."""

    message = "File does not exist."

    def __init__(self, filename: str, message: str | None = None) -> None:
        self.filename = filename
        super().__init__(message)


class ObjectNotFound(KvletError):
    """Raised when a blob id is not present in the content store."""

    def __init__(self, object_id: str) -> None:
        self.object_id = object_id
        super().__init__(f"No object with id {object_id} exists.")


class CommitNotFound(KvletError):
    message = "No commit with that id exists."

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__()


class BranchNotFound(KvletError):
    message = "A branch with that name does not exist."

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message)


class BranchExists(KvletError):
    message = "A branch with that name already exists."

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__()


class CannotRemoveActive(KvletError):
    message = "Cannot remove the current branch."


class NoOpSameBranch(KvletError):
    message = "No need to checkout the current branch."


class NothingToCommit(KvletError):
    message = "No changes added to the commit."


class EmptyMessage(KvletError):
    message = "Please enter a commit message."


class NothingToRemove(KvletError):
    message = "No reason to remove the file."

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__()


class UntrackedFileConflict(KvletError):
    """Raised when a checkout, reset or merge would clobber untracked files.

    Attributes:
        filenames: The untracked files that are in the way.
    """

    message = (
        "There is an untracked file in the way; "
        "delete it, or add and commit it first."
    )

    def __init__(self, filenames: set[str]) -> None:
        self.filenames = frozenset(filenames)
        super().__init__()


class UncommittedChanges(KvletError):
    message = "You have uncommitted changes."


class SelfMerge(KvletError):
    message = "Cannot merge a branch with itself."


class DetachedHead(KvletError):
    """Raised when a branch name is needed but HEAD holds a commit id."""

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"HEAD is detached at {commit_id}.")
