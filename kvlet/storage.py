"""Durable repository state over a KV store.

Blobs, commits, branch heads, HEAD and the staging index each live
under their own key prefix, so ids of different kinds never collide.
"""

import logging
import pickle
from typing import Iterable

from .index import StagingIndex
from .kv.base import KVStore
from .models import Commit, Head

logger = logging.getLogger(__name__)

BLOB_KEY = "__blob__%s"
COMMIT_KEY = "__commit__%s"
BRANCH_HEAD = "__branch_head__%s"
HEAD_KEY = "__head__"
INDEX_KEY = "__index__"


def _prefix(template: str) -> str:
    return template.replace("%s", "")


def encode_commit(commit: Commit) -> bytes:
    return pickle.dumps(
        {
            "id": commit.id,
            "message": commit.message,
            "timestamp": commit.timestamp,
            "parents": tuple(commit.parents),
            "snapshot": sorted(commit.snapshot.items()),
        }
    )


def decode_commit(raw: bytes) -> Commit:
    data = pickle.loads(raw)
    return Commit(
        id=data["id"],
        message=data["message"],
        timestamp=data["timestamp"],
        parents=tuple(data["parents"]),
        snapshot=dict(data["snapshot"]),
    )


def encode_head(head: Head) -> bytes:
    if head.attached:
        return pickle.dumps(("branch", head.branch))
    return pickle.dumps(("commit", head.commit))


def decode_head(raw: bytes) -> Head:
    kind, value = pickle.loads(raw)
    if kind == "branch":
        return Head(branch=value)
    return Head(commit=value)


def encode_index(index: StagingIndex) -> bytes:
    return pickle.dumps(
        {
            "additions": sorted(index.additions.items()),
            "removals": sorted(index.removals),
        }
    )


def decode_index(raw: bytes) -> StagingIndex:
    data = pickle.loads(raw)
    return StagingIndex(dict(data["additions"]), set(data["removals"]))


class Storage:
    """The durable maps of one repository: objects, refs, HEAD, index.

    Reads return ``None`` for anything absent; the components layered
    on top decide which absence is an error.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- Blobs --

    def put_blob(self, blob_id: str, content: bytes) -> bool:
        """Store a blob unless present. Returns True if it was written."""
        key = BLOB_KEY % blob_id
        if key in self.store:
            return False
        self.store.set(key, content)
        logger.debug("stored blob %s (%d bytes)", blob_id, len(content))
        return True

    def get_blob(self, blob_id: str) -> bytes | None:
        return self.store.get(BLOB_KEY % blob_id)

    def has_blob(self, blob_id: str) -> bool:
        return BLOB_KEY % blob_id in self.store

    # -- Commits --

    def put_commit(self, commit: Commit) -> None:
        key = COMMIT_KEY % commit.id
        if key in self.store:
            return
        self.store.set(key, encode_commit(commit))
        logger.debug("stored commit %s", commit.id)

    def get_commit(self, commit_id: str) -> Commit | None:
        raw = self.store.get(COMMIT_KEY % commit_id)
        if raw is None:
            return None
        return decode_commit(raw)

    def has_commit(self, commit_id: str) -> bool:
        return COMMIT_KEY % commit_id in self.store

    def list_commit_ids(self) -> Iterable[str]:
        prefix = _prefix(COMMIT_KEY)
        for key in self.store.keys(prefix):
            yield key[len(prefix):]

    # -- Refs --

    def read_ref(self, name: str) -> str | None:
        raw = self.store.get(BRANCH_HEAD % name)
        if raw is None:
            return None
        return pickle.loads(raw)

    def write_ref(self, name: str, commit_id: str) -> None:
        self.store.set(BRANCH_HEAD % name, pickle.dumps(commit_id))
        logger.debug("ref %s -> %s", name, commit_id)

    def delete_ref(self, name: str) -> None:
        self.store.remove(BRANCH_HEAD % name)
        logger.debug("deleted ref %s", name)

    def list_refs(self) -> list[str]:
        prefix = _prefix(BRANCH_HEAD)
        return sorted(key[len(prefix):] for key in self.store.keys(prefix))

    # -- HEAD / index --

    def read_head(self) -> Head | None:
        raw = self.store.get(HEAD_KEY)
        if raw is None:
            return None
        return decode_head(raw)

    def write_head(self, head: Head) -> None:
        self.store.set(HEAD_KEY, encode_head(head))

    def read_index(self) -> StagingIndex:
        raw = self.store.get(INDEX_KEY)
        if raw is None:
            return StagingIndex()
        return decode_index(raw)

    def write_index(self, index: StagingIndex) -> None:
        self.store.set(INDEX_KEY, encode_index(index))

    def is_initialized(self) -> bool:
        return HEAD_KEY in self.store

    def close(self) -> None:
        self.store.close()

    def write_batch(
        self,
        *,
        commit: Commit | None = None,
        refs: dict[str, str] | None = None,
        head: Head | None = None,
        index: StagingIndex | None = None,
    ) -> None:
        """Persist several pieces of state in a single ``set_many``."""
        diffs: dict[str, bytes] = {}
        if commit is not None and COMMIT_KEY % commit.id not in self.store:
            diffs[COMMIT_KEY % commit.id] = encode_commit(commit)
        for name, commit_id in (refs or {}).items():
            diffs[BRANCH_HEAD % name] = pickle.dumps(commit_id)
        if head is not None:
            diffs[HEAD_KEY] = encode_head(head)
        if index is not None:
            diffs[INDEX_KEY] = encode_index(index)
        if diffs:
            self.store.set_many(**diffs)
            logger.debug("wrote batch of %d keys", len(diffs))
