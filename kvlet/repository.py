"""Repository handle: the command surface over the core components."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Literal

from .commits import CommitGraph
from .errors import (
    AlreadyInitialized,
    BranchNotFound,
    EmptyMessage,
    FileNotFound,
    NoOpSameBranch,
    NotInitialized,
    NothingToCommit,
)
from .index import StagingIndex
from .kv.base import KVStore
from .merge import MergeEngine, MergeResult
from .models import Commit, Head, blob_id
from .objects import ContentStore
from .refs import RefTable
from .storage import Storage
from .worktree import Directory, WorkTree, sync, untracked

logger = logging.getLogger(__name__)

REPO_DIR = ".kvlet"
DEFAULT_BRANCH = "master"
INITIAL_MESSAGE = "initial commit"


@dataclass(frozen=True)
class StatusReport:
    """Branches, staged changes and working-directory drift."""

    branches: tuple[str, ...]
    active: str | None
    staged: tuple[str, ...]
    removed: tuple[str, ...]
    modified: tuple[str, ...]  # "name (modified)" / "name (deleted)"
    untracked: tuple[str, ...]


class Repository:
    """One repository: durable state plus the working directory.

    Every operation reads the state it needs from storage and writes
    it back; nothing is cached between calls.
    """

    def __init__(self, storage: Storage, worktree: WorkTree) -> None:
        self.storage = storage
        self.worktree = worktree
        self.objects = ContentStore(storage)
        self.graph = CommitGraph(storage)
        self.refs = RefTable(storage)
        self.merger = MergeEngine(
            storage, self.graph, self.refs, self.objects, worktree
        )

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.storage.close()

    # -- Lifecycle --

    def initialize(self) -> Commit:
        """Write the root commit, ``master`` and HEAD into empty storage."""
        if self.storage.is_initialized():
            raise AlreadyInitialized()
        root = self.graph.create(INITIAL_MESSAGE, 0, (), {}, persist=False)
        self.storage.write_batch(
            commit=root,
            refs={DEFAULT_BRANCH: root.id},
            head=Head(branch=DEFAULT_BRANCH),
            index=StagingIndex(),
        )
        logger.info("initialized repository at %s", root.id)
        return root

    # -- Reads --

    def head_commit(self) -> Commit:
        return self.graph.get(self.refs.head_commit())

    def read_index(self) -> StagingIndex:
        return self.storage.read_index()

    def log(self) -> Iterator[Commit]:
        """First-parent history from HEAD, newest first."""
        return self.graph.first_parent_history(self.refs.head_commit())

    def global_log(self) -> Iterator[Commit]:
        """Every commit ever made, each once."""
        return self.graph.all_commits()

    def find(self, message: str) -> list[str]:
        return self.graph.find(message)

    def status(self) -> StatusReport:
        head = self.head_commit().snapshot
        index = self.read_index()
        files = self.worktree.list_files()

        def state(name: str, expected: str) -> Literal["deleted", "modified"] | None:
            if name not in files:
                return "deleted"
            content = self.worktree.read_file(name)
            if content is not None and blob_id(content) != expected:
                return "modified"
            return None

        modified: list[str] = []
        for name in sorted(set(head) | set(index.additions)):
            if name in index.removals:
                continue
            expected = index.additions.get(name, head.get(name))
            change = state(name, expected)
            if change is not None:
                modified.append(f"{name} ({change})")

        stray = untracked(files, head, index) | (files & index.removals)
        head_ref = self.refs.head
        return StatusReport(
            branches=tuple(self.refs.branches()),
            active=head_ref.branch,
            staged=tuple(sorted(index.additions)),
            removed=tuple(sorted(index.removals)),
            modified=tuple(modified),
            untracked=tuple(sorted(stray)),
        )

    # -- Staging --

    def add(self, name: str) -> bool:
        """Stage the working copy of ``name``. Returns True if staged."""
        content = self.worktree.read_file(name)
        if content is None:
            raise FileNotFound(name)
        index = self.read_index()
        head = self.head_commit()
        staged = index.stage_addition(
            name, content, head.snapshot.get(name), self.objects
        )
        self.storage.write_index(index)
        logger.debug("add %s: %s", name, "staged" if staged else "unchanged")
        return staged

    def rm(self, name: str) -> None:
        index = self.read_index()
        head = self.head_commit()
        index.stage_removal(name, tracked_by_head=name in head.snapshot)
        self.worktree.delete_file(name)
        self.storage.write_index(index)
        logger.debug("rm %s", name)

    def commit(self, message: str, *, timestamp: float | None = None) -> Commit:
        if not message or not message.strip():
            raise EmptyMessage()
        index = self.read_index()
        if index.is_empty():
            raise NothingToCommit()
        head = self.head_commit()
        commit = self.graph.create(
            message,
            time.time() if timestamp is None else timestamp,
            (head.id,),
            index.effective_snapshot(head.snapshot),
            persist=False,
        )
        self._advance(commit)
        logger.info("committed %s: %s", commit.id, message)
        return commit

    # -- Branches --

    def branch(self, name: str) -> str:
        return self.refs.branch(name)

    def rm_branch(self, name: str) -> None:
        self.refs.rm_branch(name)

    # -- Checkout / reset / merge --

    def checkout_file(self, name: str, commit_id: str | None = None) -> None:
        """Restore ``name`` from HEAD or from ``commit_id``.

        The index and HEAD are left alone.
        """
        if commit_id is None:
            commit = self.head_commit()
        else:
            commit = self.graph.get(self.graph.resolve(commit_id))
        object_id = commit.snapshot.get(name)
        if object_id is None:
            raise FileNotFound(name, "File does not exist in that commit.")
        self.worktree.write_file(name, self.objects.get(object_id))
        logger.info("restored %s from %s", name, commit.id)

    def checkout_branch(self, name: str) -> None:
        if name not in self.refs:
            raise BranchNotFound(name, "No such branch exists.")
        head_ref = self.refs.head
        if head_ref.branch == name:
            raise NoOpSameBranch()
        target = self.graph.get(self.refs.get(name))
        sync(
            self.worktree,
            self.objects,
            target.snapshot,
            self.head_commit().snapshot,
            self.read_index(),
        )
        self.storage.write_batch(head=Head(branch=name), index=StagingIndex())
        logger.info("checked out %s at %s", name, target.id)

    def reset(self, commit_id: str) -> Commit:
        """Check out an arbitrary commit and move HEAD's branch to it."""
        target = self.graph.get(self.graph.resolve(commit_id))
        sync(
            self.worktree,
            self.objects,
            target.snapshot,
            self.head_commit().snapshot,
            self.read_index(),
        )
        self._advance(target)
        logger.info("reset to %s", target.id)
        return target

    def merge(self, branch: str, *, timestamp: float | None = None) -> MergeResult:
        return self.merger.merge(branch, timestamp=timestamp)

    def _advance(self, commit: Commit) -> None:
        """Store ``commit`` if new, move HEAD to it and clear the index."""
        head = self.refs.head
        if head.attached:
            self.storage.write_batch(
                commit=commit, refs={head.branch: commit.id}, index=StagingIndex()
            )
        else:
            self.storage.write_batch(
                commit=commit, head=Head(commit=commit.id), index=StagingIndex()
            )


def _backend(path: Path, storage: str) -> KVStore:
    """Build the KV backend for a repository rooted at ``path``."""
    if storage == "memory":
        from .kv.memory import Memory

        return Memory()
    if storage == "disk":
        from .kv.disk import Disk

        return Disk(str(path / REPO_DIR))
    raise ValueError(f"Unknown storage: {storage!r}")


def init(
    path: str | os.PathLike[str] = ".",
    *,
    storage: str = "disk",
    store: KVStore | None = None,
) -> Repository:
    """Create a repository for the working directory ``path``.

    Args:
        path: The working directory.
        storage: ``"disk"`` (default) keeps state in ``<path>/.kvlet``;
            ``"memory"`` keeps it for the life of the process.
        store: An explicit backend, overriding ``storage``.

    Raises:
        AlreadyInitialized: If a repository already exists there.
    """
    root = Path(path)
    if store is None:
        if storage == "disk" and (root / REPO_DIR).exists():
            raise AlreadyInitialized()
        store = _backend(root, storage)
    repo = Repository(Storage(store), Directory(root))
    repo.initialize()
    return repo


def open_repo(
    path: str | os.PathLike[str] = ".",
    *,
    storage: str = "disk",
    store: KVStore | None = None,
) -> Repository:
    """Open the repository for ``path``.

    Raises:
        NotInitialized: If there is no repository there.
    """
    root = Path(path)
    if store is None:
        if storage == "disk" and not (root / REPO_DIR).is_dir():
            raise NotInitialized()
        store = _backend(root, storage)
    backing = Storage(store)
    if not backing.is_initialized():
        raise NotInitialized()
    return Repository(backing, Directory(root))
