"""kvlet: single-user version control over a key-value store."""

__version__ = "0.1.0"

from .commits import CommitGraph, commit_id
from .errors import (
    AlreadyInitialized,
    BranchExists,
    BranchNotFound,
    CannotRemoveActive,
    CommitNotFound,
    DetachedHead,
    EmptyMessage,
    FileNotFound,
    KvletError,
    NoOpSameBranch,
    NotInitialized,
    NothingToCommit,
    NothingToRemove,
    ObjectNotFound,
    SelfMerge,
    UncommittedChanges,
    UntrackedFileConflict,
)
from .index import StagingIndex
from .kv.base import KVStore
from .merge import MergeEngine, MergeResult, find_split_point
from .models import Commit, Head, blob_id
from .objects import ContentStore
from .refs import RefTable
from .repository import Repository, StatusReport, init, open_repo
from .storage import Storage
from .worktree import Directory, WorkTree, sync

__all__ = [
    "AlreadyInitialized",
    "BranchExists",
    "BranchNotFound",
    "CannotRemoveActive",
    "Commit",
    "CommitGraph",
    "CommitNotFound",
    "ContentStore",
    "DetachedHead",
    "Directory",
    "EmptyMessage",
    "FileNotFound",
    "Head",
    "KVStore",
    "KvletError",
    "MergeEngine",
    "MergeResult",
    "NoOpSameBranch",
    "NotInitialized",
    "NothingToCommit",
    "NothingToRemove",
    "ObjectNotFound",
    "RefTable",
    "Repository",
    "SelfMerge",
    "StagingIndex",
    "StatusReport",
    "Storage",
    "UncommittedChanges",
    "UntrackedFileConflict",
    "WorkTree",
    "blob_id",
    "commit_id",
    "find_split_point",
    "init",
    "open_repo",
    "sync",
]
