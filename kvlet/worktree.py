"""Working directory access and snapshot reconciliation."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Protocol, runtime_checkable

from .errors import FileNotFound, UntrackedFileConflict

if TYPE_CHECKING:
    from .index import StagingIndex
    from .objects import ContentStore

logger = logging.getLogger(__name__)


@runtime_checkable
class WorkTree(Protocol):
    """Protocol for a flat namespace of working files.

    Implementations: ``Directory``.
    """

    def list_files(self) -> set[str]: ...
    def read_file(self, name: str) -> bytes | None: ...
    def write_file(self, name: str, content: bytes) -> None: ...
    def delete_file(self, name: str) -> bool: ...
    def exists(self, name: str) -> bool: ...


class Directory:
    """The plain files directly inside ``root``. Subdirectories are ignored."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        if not name or name in (".", "..") or "/" in name or os.sep in name:
            raise FileNotFound(name)
        return self.root / name

    def list_files(self) -> set[str]:
        return {p.name for p in self.root.iterdir() if p.is_file()}

    def read_file(self, name: str) -> bytes | None:
        path = self._path(name)
        if not path.is_file():
            return None
        return path.read_bytes()

    def write_file(self, name: str, content: bytes) -> None:
        self._path(name).write_bytes(content)

    def delete_file(self, name: str) -> bool:
        path = self._path(name)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()


def untracked(
    files: Iterable[str], head: Mapping[str, str], index: StagingIndex
) -> set[str]:
    """Files neither staged for addition nor part of HEAD's snapshot."""
    return {f for f in files if f not in index.additions and f not in head}


def check_untracked(
    worktree: WorkTree,
    target: Mapping[str, str],
    head: Mapping[str, str],
    index: StagingIndex,
) -> None:
    """Fail if adopting ``target`` would overwrite or delete an untracked file.

    Raises:
        UntrackedFileConflict: Naming every file in the way.
    """
    in_the_way = {
        f
        for f in untracked(worktree.list_files(), head, index)
        if f in target or f in head
    }
    if in_the_way:
        logger.debug("untracked files in the way: %s", sorted(in_the_way))
        raise UntrackedFileConflict(in_the_way)


def sync(
    worktree: WorkTree,
    objects: ContentStore,
    target: Mapping[str, str],
    head: Mapping[str, str],
    index: StagingIndex,
) -> None:
    """Make the working directory match ``target``. All or nothing.

    Validates first (untracked files, every target blob readable), then
    writes every file in ``target`` and deletes files tracked by
    ``head`` that ``target`` lacks. Clearing the index and moving HEAD
    is left to the caller.
    """
    check_untracked(worktree, target, head, index)
    contents = {name: objects.get(object_id) for name, object_id in target.items()}
    doomed = sorted(f for f in head if f not in target)

    for name in sorted(contents):
        worktree.write_file(name, contents[name])
    deleted = [f for f in doomed if worktree.delete_file(f)]
    logger.debug("sync wrote %d files, deleted %d", len(contents), len(deleted))
