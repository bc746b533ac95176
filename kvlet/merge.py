"""Merge engine: split-point search and three-way per-file resolution."""

import logging
import time
from dataclasses import dataclass
from typing import Literal, Mapping

from .commits import CommitGraph
from .errors import BranchNotFound, SelfMerge, UncommittedChanges
from .index import StagingIndex
from .models import Commit
from .objects import ContentStore
from .refs import RefTable
from .storage import Storage
from .worktree import WorkTree, check_untracked, sync

logger = logging.getLogger(__name__)

Action = Literal["keep", "take", "remove", "conflict"]
"""What a merge does to one file: keep ours, take theirs, remove, or conflict."""

ANCESTOR_MESSAGE = "Given branch is an ancestor of the current branch."
FAST_FORWARD_MESSAGE = "Current branch fast-forwarded."
CONFLICT_MESSAGE = "Encountered a merge conflict."


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    commit: str
    strategy: str  # "no_op", "fast_forward", "three_way"
    conflicts: tuple[str, ...] = ()

    @property
    def conflicted(self) -> bool:
        return bool(self.conflicts)

    @property
    def message(self) -> str | None:
        """The diagnostic to show the user, if any."""
        if self.strategy == "no_op":
            return ANCESTOR_MESSAGE
        if self.strategy == "fast_forward":
            return FAST_FORWARD_MESSAGE
        if self.conflicts:
            return CONFLICT_MESSAGE
        return None


def _expand(
    graph: CommitGraph, frontier: list[str], seen: set[str], other: set[str]
) -> tuple[list[str], str | None]:
    """Advance one BFS level. Returns the next frontier and any meeting id."""
    next_level: list[str] = []
    for current in frontier:
        for p in graph.parents(current):
            if p in seen:
                continue
            seen.add(p)
            if p in other:
                return next_level, p
            next_level.append(p)
    return next_level, None


def find_split_point(graph: CommitGraph, commit_a: str, commit_b: str) -> str | None:
    """Find the lowest common ancestor of two commits.

    Level-synchronous BFS from both commits: each turn side ``a``
    expands its whole frontier one edge (parents in parent order), then
    side ``b`` does the same. The first id discovered that the other
    side has already visited is the split point. Returns None if the
    commits share no ancestor.
    """
    if commit_a == commit_b:
        return commit_a

    seen_a: set[str] = {commit_a}
    seen_b: set[str] = {commit_b}
    frontier_a = [commit_a]
    frontier_b = [commit_b]

    while frontier_a or frontier_b:
        frontier_a, found = _expand(graph, frontier_a, seen_a, seen_b)
        if found is not None:
            return found
        frontier_b, found = _expand(graph, frontier_b, seen_b, seen_a)
        if found is not None:
            return found

    return None


def classify(base: str | None, ours: str | None, theirs: str | None) -> Action:
    """Three-way decision for one file given its blob id on each side.

    ``None`` means the file is absent on that side.
    """
    if ours == theirs or theirs == base:
        return "keep"
    if ours == base:
        return "take" if theirs is not None else "remove"
    return "conflict"


def conflict_content(ours: bytes | None, theirs: bytes | None) -> bytes:
    """The working-file text recorded for a conflicted file."""
    return (
        b"<<<<<<< HEAD\n"
        + (ours or b"")
        + b"=======\n"
        + (theirs or b"")
        + b">>>>>>>\n"
    )


def plan(
    base: Mapping[str, str],
    ours: Mapping[str, str],
    theirs: Mapping[str, str],
) -> dict[str, Action]:
    """Classify every file present on any side, dropping no-ops."""
    actions: dict[str, Action] = {}
    for name in sorted(set(base) | set(ours) | set(theirs)):
        action = classify(base.get(name), ours.get(name), theirs.get(name))
        if action != "keep":
            actions[name] = action
    return actions


class MergeEngine:
    """Merges another branch into the active one."""

    def __init__(
        self,
        storage: Storage,
        graph: CommitGraph,
        refs: RefTable,
        objects: ContentStore,
        worktree: WorkTree,
    ) -> None:
        self.storage = storage
        self.graph = graph
        self.refs = refs
        self.objects = objects
        self.worktree = worktree

    def merge(self, branch: str, *, timestamp: float | None = None) -> MergeResult:
        """Merge ``branch`` into the active branch.

        Raises:
            UncommittedChanges: If the staging index is not empty.
            BranchNotFound: If ``branch`` does not exist.
            SelfMerge: If ``branch`` is the active branch.
            UntrackedFileConflict: If the merge would clobber an
                untracked file. Nothing is changed.
        """
        index = self.storage.read_index()
        if not index.is_empty():
            raise UncommittedChanges()
        if branch not in self.refs:
            raise BranchNotFound(branch)
        active = self.refs.active_branch()
        if branch == active:
            raise SelfMerge()

        head_id = self.refs.head_commit()
        target_id = self.refs.get(branch)
        split = find_split_point(self.graph, head_id, target_id)
        logger.debug("split point of %s and %s: %s", head_id, target_id, split)

        if split == target_id:
            logger.info("%s is an ancestor of %s", branch, active)
            return MergeResult(commit=head_id, strategy="no_op")

        head = self.graph.get(head_id)
        target = self.graph.get(target_id)

        if split == head_id:
            sync(self.worktree, self.objects, target.snapshot, head.snapshot, index)
            self.storage.write_batch(refs={active: target_id}, index=StagingIndex())
            logger.info("fast-forwarded %s to %s", active, target_id)
            return MergeResult(commit=target_id, strategy="fast_forward")

        base = self.graph.get(split).snapshot if split is not None else {}
        return self._three_way(
            branch, active, head, target, base, index, timestamp=timestamp
        )

    def _three_way(
        self,
        branch: str,
        active: str,
        head: Commit,
        target: Commit,
        base: Mapping[str, str],
        index: StagingIndex,
        *,
        timestamp: float | None,
    ) -> MergeResult:
        ours = head.snapshot
        theirs = target.snapshot
        actions = plan(base, ours, theirs)
        check_untracked(self.worktree, theirs, ours, index)

        # Read everything before the first write
        contents: dict[str, bytes] = {}
        conflicts: list[str] = []
        for name, action in actions.items():
            if action == "take":
                contents[name] = self.objects.get(theirs[name])
            elif action == "conflict":
                conflicts.append(name)
                contents[name] = conflict_content(
                    self.objects.get(ours[name]) if name in ours else None,
                    self.objects.get(theirs[name]) if name in theirs else None,
                )
        logger.debug("merge actions: %s", actions)

        for name, action in actions.items():
            if action == "remove":
                self.worktree.delete_file(name)
                index.stage_removal(name, tracked_by_head=True)
            else:
                self.worktree.write_file(name, contents[name])
                index.stage_addition(name, contents[name], ours.get(name), self.objects)

        commit = self.graph.create(
            f"Merged {branch} into {active}",
            time.time() if timestamp is None else timestamp,
            (head.id, target.id),
            index.effective_snapshot(ours),
            persist=False,
        )
        self.storage.write_batch(
            commit=commit, refs={active: commit.id}, index=StagingIndex()
        )
        if conflicts:
            logger.warning("merge conflict in %s", ", ".join(conflicts))
        logger.info("merged %s into %s as %s", branch, active, commit.id)
        return MergeResult(
            commit=commit.id,
            strategy="three_way",
            conflicts=tuple(conflicts),
        )
