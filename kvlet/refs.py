"""Branch refs and the HEAD pointer."""

import logging

from .errors import (
    BranchExists,
    BranchNotFound,
    CannotRemoveActive,
    CommitNotFound,
    DetachedHead,
    NotInitialized,
)
from .models import Head
from .storage import Storage

logger = logging.getLogger(__name__)


class RefTable:
    """Branch name -> commit id, plus HEAD.

    Every ref written through this table points at a stored commit.
    """

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    @property
    def head(self) -> Head:
        head = self.storage.read_head()
        if head is None:
            raise NotInitialized()
        return head

    def head_commit(self) -> str:
        """The commit id HEAD currently resolves to."""
        head = self.head
        if head.attached:
            return self.get(head.branch)
        return head.commit

    def active_branch(self) -> str:
        head = self.head
        if not head.attached:
            raise DetachedHead(head.commit)
        return head.branch

    def get(self, name: str) -> str:
        commit_id = self.storage.read_ref(name)
        if commit_id is None:
            raise BranchNotFound(name)
        return commit_id

    def __contains__(self, name: str) -> bool:
        return self.storage.read_ref(name) is not None

    def branches(self) -> list[str]:
        return self.storage.list_refs()

    def branch(self, name: str) -> str:
        """Create ``name`` at the current HEAD commit."""
        if name in self:
            raise BranchExists(name)
        commit_id = self.head_commit()
        self.storage.write_ref(name, commit_id)
        logger.info("created branch %s at %s", name, commit_id)
        return commit_id

    def rm_branch(self, name: str) -> None:
        if name not in self:
            raise BranchNotFound(name)
        head = self.head
        if head.attached and head.branch == name:
            raise CannotRemoveActive()
        self.storage.delete_ref(name)
        logger.info("removed branch %s", name)

    def move_head(self, commit_id: str) -> None:
        """Point HEAD's commit at ``commit_id``.

        With an attached HEAD this moves the active branch.
        """
        self._check_commit(commit_id)
        head = self.head
        if head.attached:
            self.storage.write_ref(head.branch, commit_id)
        else:
            self.storage.write_head(Head(commit=commit_id))

    def attach_to(self, name: str) -> None:
        if name not in self:
            raise BranchNotFound(name)
        self.storage.write_head(Head(branch=name))
        logger.debug("HEAD -> %s", name)

    def detach(self, commit_id: str) -> None:
        self._check_commit(commit_id)
        self.storage.write_head(Head(commit=commit_id))
        logger.debug("HEAD detached at %s", commit_id)

    def _check_commit(self, commit_id: str) -> None:
        if not self.storage.has_commit(commit_id):
            raise CommitNotFound(commit_id)
