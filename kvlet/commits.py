"""Commit graph: immutable commits keyed by content hash."""

import hashlib
import logging
import pickle
from typing import Iterable, Iterator, Mapping

from .errors import CommitNotFound
from .models import Commit
from .storage import Storage

logger = logging.getLogger(__name__)

MIN_PREFIX = 4


def commit_id(
    message: str,
    timestamp: float,
    parents: tuple[str, ...],
    snapshot: Mapping[str, str],
) -> str:
    """Compute a content-addressable commit id.

    Hashes the message, timestamp, ordered parent ids and every
    snapshot entry (sorted by filename), so two commits share an id
    exactly when all of those are equal.
    """
    h = hashlib.sha1()
    h.update(b"commit\0")
    h.update(pickle.dumps(message))
    h.update(pickle.dumps(float(timestamp)))
    h.update(pickle.dumps(tuple(parents)))
    h.update(pickle.dumps(sorted(snapshot.items())))
    return h.hexdigest()


class CommitGraph:
    """DAG of commits. Parent links are ids resolved through storage."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def create(
        self,
        message: str,
        timestamp: float,
        parents: Iterable[str],
        snapshot: Mapping[str, str],
        *,
        persist: bool = True,
    ) -> Commit:
        """Build a commit and, unless ``persist`` is False, store it."""
        parents = tuple(parents)
        if len(parents) > 2:
            raise ValueError(f"A commit has at most 2 parents, got {len(parents)}")
        commit = Commit(
            id=commit_id(message, timestamp, parents, snapshot),
            message=message,
            timestamp=float(timestamp),
            parents=parents,
            snapshot=dict(snapshot),
        )
        if persist:
            self.storage.put_commit(commit)
        return commit

    def get(self, commit_id: str) -> Commit:
        commit = self.storage.get_commit(commit_id)
        if commit is None:
            raise CommitNotFound(commit_id)
        return commit

    def __contains__(self, commit_id: str) -> bool:
        return self.storage.has_commit(commit_id)

    def resolve(self, prefix: str) -> str:
        """Expand an abbreviated commit id to the full id.

        Raises:
            CommitNotFound: If no commit, or more than one, matches.
        """
        if self.storage.has_commit(prefix):
            return prefix
        if len(prefix) < MIN_PREFIX:
            raise CommitNotFound(prefix)
        matches = [cid for cid in self.storage.list_commit_ids() if cid.startswith(prefix)]
        if len(matches) != 1:
            logger.debug("prefix %s matched %d commits", prefix, len(matches))
            raise CommitNotFound(prefix)
        return matches[0]

    def parents(self, commit_id: str) -> tuple[str, ...]:
        return self.get(commit_id).parents

    def first_parent_history(self, commit_id: str) -> Iterator[Commit]:
        """Yield the first-parent chain from ``commit_id`` back to the root."""
        current: str | None = commit_id
        while current is not None:
            commit = self.get(current)
            yield commit
            current = commit.parent

    def all_commits(self) -> Iterator[Commit]:
        """Every stored commit, each exactly once, in storage order."""
        for cid in self.storage.list_commit_ids():
            yield self.get(cid)

    def find(self, message: str) -> list[str]:
        """Ids of every commit whose message is exactly ``message``."""
        return [c.id for c in self.all_commits() if c.message == message]
