"""Immutable values shared by the object store, commit graph and refs."""

import hashlib
from dataclasses import dataclass, field

Snapshot = dict[str, str]
"""Filename -> blob id at one point in history."""


def blob_id(content: bytes) -> str:
    """The content address of ``content``."""
    return hashlib.sha1(content).hexdigest()


@dataclass(frozen=True)
class Commit:
    """One node of the commit graph.

    ``parents`` is ordered: for a merge commit the first parent is the
    receiving branch and the second the merged-in branch.
    """

    id: str
    message: str
    timestamp: float
    parents: tuple[str, ...] = ()
    snapshot: Snapshot = field(default_factory=dict)

    @property
    def parent(self) -> str | None:
        return self.parents[0] if self.parents else None

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class Head:
    """HEAD pointer: attached to a branch, or detached at a commit."""

    branch: str | None = None
    commit: str | None = None

    @property
    def attached(self) -> bool:
        return self.branch is not None
