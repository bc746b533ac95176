"""Staging index: pending additions and removals against HEAD."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from .errors import NothingToRemove
from .models import blob_id

if TYPE_CHECKING:
    from .objects import ContentStore


class StagingIndex:
    """Buffered changes for the next commit.

    ``additions`` maps filename -> blob id of content queued for the
    next commit; ``removals`` holds filenames queued for deletion. A
    filename is never in both.
    """

    def __init__(
        self,
        additions: dict[str, str] | None = None,
        removals: set[str] | None = None,
    ) -> None:
        self.additions: dict[str, str] = dict(additions or {})
        self.removals: set[str] = set(removals or ())

    def stage_addition(
        self,
        filename: str,
        content: bytes,
        head_blob_id: str | None,
        objects: ContentStore,
    ) -> bool:
        """Queue ``content`` as the next version of ``filename``.

        Content identical to HEAD's version cancels any pending change
        to the file instead. Returns True if an addition was staged.
        """
        new_id = blob_id(content)
        self.removals.discard(filename)
        if new_id == head_blob_id:
            self.additions.pop(filename, None)
            return False
        objects.put(content)
        self.additions[filename] = new_id
        return True

    def stage_removal(self, filename: str, tracked_by_head: bool) -> None:
        """Unstage ``filename`` and queue its removal.

        The caller deletes the working copy.

        Raises:
            NothingToRemove: If the file is neither staged nor tracked.
        """
        if filename not in self.additions and not tracked_by_head:
            raise NothingToRemove(filename)
        self.additions.pop(filename, None)
        self.removals.add(filename)

    def effective_snapshot(self, parent: Mapping[str, str]) -> dict[str, str]:
        """``(parent - removals) | additions``."""
        snapshot = {
            name: object_id
            for name, object_id in parent.items()
            if name not in self.removals
        }
        snapshot.update(self.additions)
        return snapshot

    def is_empty(self) -> bool:
        return not self.additions and not self.removals

    def clear(self) -> None:
        self.additions.clear()
        self.removals.clear()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StagingIndex):
            return NotImplemented
        return self.additions == other.additions and self.removals == other.removals

    def __repr__(self) -> str:
        return (
            f"StagingIndex(additions={self.additions!r}, "
            f"removals={sorted(self.removals)!r})"
        )
